"""Historical log backfill when a transaction carries no transfer evidence."""

import logging

from dispute_evidence.core.config import get_settings
from dispute_evidence.infrastructure.blockchain.client import ChainClient
from dispute_evidence.services.classification.classifier import LogClassifier
from dispute_evidence.services.classification.schemas import (
    ClassifiedEvent,
    EvidenceBundle,
)

logger = logging.getLogger(__name__)


class HistoricalBackfill:
    """Scans the contract's recent logs for transfers.

    Only transfers are merged into the bundle; failures and partial
    transfers found in the wider window are dropped.
    """

    def __init__(
        self,
        client: ChainClient,
        classifier: LogClassifier,
        block_window: int | None = None,
    ):
        """Initialize backfill.

        Args:
            client: Chain client for block height and log queries
            classifier: Classifier applied to the backfilled logs
            block_window: Number of recent blocks to scan
        """
        self.client = client
        self.classifier = classifier
        self.block_window = (
            block_window if block_window is not None else get_settings().backfill_block_window
        )

    @staticmethod
    def should_run(bundle: EvidenceBundle) -> bool:
        return len(bundle.transfers) == 0

    async def fetch_transfers(self, contract_address: str) -> list[ClassifiedEvent]:
        """Classify the latest ``block_window`` blocks and return their transfers.

        Provider errors are logged and produce no transfers.
        """
        try:
            current_block = await self.client.get_block_number()
            from_block = max(0, current_block - self.block_window)
            logs = await self.client.get_logs(contract_address, from_block, current_block)
        except Exception as e:
            logger.error(f"Historical log fetch for {contract_address} failed: {e}")
            return []

        historical = self.classifier.classify(logs)
        logger.info(
            f"Backfill scanned blocks {from_block}-{current_block} for {contract_address}: "
            f"{len(logs)} logs, {len(historical.transfers)} transfers"
        )
        return list(historical.transfers)

    async def apply(self, contract_address: str, bundle: EvidenceBundle) -> EvidenceBundle:
        """Return ``bundle`` with backfilled transfers appended.

        Runs at most once: the bundle is returned unchanged when it already
        has transfers.
        """
        if not self.should_run(bundle):
            return bundle

        transfers = await self.fetch_transfers(contract_address)
        if not transfers:
            return bundle
        return bundle.model_copy(update={"transfers": bundle.transfers + tuple(transfers)})
