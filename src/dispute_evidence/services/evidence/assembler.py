"""Evidence assembly orchestration.

One run: cache lookup, concurrent receipt/transaction fetch, log
classification, state reads, pattern analysis of the transaction's own
events, optional backfill, cache store. The assembler holds only long-lived
handles; each run builds its own bundle and never shares it while it is
being built.
"""

import asyncio
import logging
import time

from dispute_evidence.core.config import get_settings
from dispute_evidence.core.exceptions import TransactionNotFound
from dispute_evidence.infrastructure.blockchain.client import ChainClient
from dispute_evidence.infrastructure.blockchain.contracts import ContractReader
from dispute_evidence.infrastructure.blockchain.types import Receipt, Transaction
from dispute_evidence.infrastructure.cache import CacheKey, EvidenceCache
from dispute_evidence.services.backfill.service import HistoricalBackfill
from dispute_evidence.services.classification.classifier import LogClassifier
from dispute_evidence.services.evidence.schemas import (
    EvidenceReport,
    TransactionDetails,
    TransactionLogsReport,
    transaction_status,
)
from dispute_evidence.services.patterns.analyzer import PatternAnalyzer
from dispute_evidence.services.state.reader import ContractStateReader

logger = logging.getLogger(__name__)


class EvidenceAssembler:
    """Builds evidence reports for disputed transactions."""

    def __init__(
        self,
        client: ChainClient,
        cache: EvidenceCache | None = None,
        classifier: LogClassifier | None = None,
        state_reader: ContractStateReader | None = None,
        backfill: HistoricalBackfill | None = None,
        analyzer: PatternAnalyzer | None = None,
        cache_ttl_seconds: int | None = None,
    ):
        """Initialize assembler.

        Args:
            client: Shared chain client
            cache: Evidence cache; a disabled cache when omitted
            classifier: Log classifier
            state_reader: Contract state reader
            backfill: Historical backfill
            analyzer: Pattern analyzer
            cache_ttl_seconds: TTL for stored reports
        """
        settings = get_settings()
        self.client = client
        self.cache = cache or EvidenceCache(None)
        self.classifier = classifier or LogClassifier()
        self.state_reader = state_reader or ContractStateReader(ContractReader(client))
        self.backfill = backfill or HistoricalBackfill(client, self.classifier)
        self.analyzer = analyzer or PatternAnalyzer()
        self.cache_ttl_seconds = (
            cache_ttl_seconds if cache_ttl_seconds is not None else settings.cache_ttl_seconds
        )

    async def _fetch(self, tx_hash: str) -> tuple[Receipt, Transaction | None]:
        """Fetch receipt and transaction concurrently.

        Raises:
            TransactionNotFound: If no receipt exists
        """
        receipt, transaction = await asyncio.gather(
            self.client.get_receipt(tx_hash),
            self.client.get_transaction(tx_hash),
        )
        if receipt is None:
            raise TransactionNotFound(tx_hash)
        return receipt, transaction

    async def assemble(
        self,
        tx_hash: str,
        contract_address: str,
        target_address: str | None = None,
        use_cache: bool = True,
    ) -> EvidenceReport:
        """Assemble the evidence report for a transaction.

        Args:
            tx_hash: Disputed transaction hash
            contract_address: Contract whose events and state are examined
            target_address: Address whose balance and ownership matter
            use_cache: Serve from and store into the cache

        Raises:
            TransactionNotFound: If the transaction has no receipt
        """
        start = time.perf_counter()
        key = CacheKey(tx_hash, contract_address, target_address)

        if use_cache:
            cached = await self.cache.get(key, EvidenceReport)
            if cached is not None:
                logger.info(f"Evidence cache hit for {tx_hash}")
                return cached

        logger.info(
            f"Assembling evidence for {tx_hash} on {contract_address} "
            f"(target: {target_address or 'not provided'})"
        )

        receipt, transaction = await self._fetch(tx_hash)
        tx_bundle = self.classifier.classify(receipt.logs)
        state = await self.state_reader.read(contract_address, target_address, tx_bundle)

        # Pattern labels describe this transaction only, never backfilled history
        analysis = self.analyzer.analyze(transaction, receipt, tx_bundle)

        bundle = tx_bundle
        backfill_performed = HistoricalBackfill.should_run(tx_bundle)
        if backfill_performed:
            bundle = await self.backfill.apply(contract_address, tx_bundle)

        bundle = bundle.model_copy(update={"contract_info": state.contract_info})

        report = EvidenceReport(
            tx_hash=tx_hash,
            contract_address=contract_address,
            target_address=target_address,
            transaction_status=transaction_status(receipt),
            bundle=bundle,
            contract_state=state,
            pattern_analysis=analysis,
            transaction_details=TransactionDetails.from_chain(receipt, transaction),
            backfill_performed=backfill_performed,
        )

        if use_cache:
            await self.cache.put(key, report, self.cache_ttl_seconds)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Evidence assembled for {tx_hash}: {analysis.transaction_type.value}, "
            f"{len(bundle.transfers)} transfers, {len(bundle.failures)} failures "
            f"in {elapsed_ms:.0f}ms"
        )
        return report

    async def collect_logs(
        self,
        tx_hash: str,
        contract_address: str,
        use_cache: bool = True,
    ) -> TransactionLogsReport:
        """Classify a transaction's logs and read contract metadata.

        No target address and no backfill.

        Raises:
            TransactionNotFound: If the transaction has no receipt
        """
        key = CacheKey(tx_hash, contract_address, namespace="logs")
        if use_cache:
            cached = await self.cache.get(key, TransactionLogsReport)
            if cached is not None:
                return cached

        receipt, transaction = await self._fetch(tx_hash)
        bundle = self.classifier.classify(receipt.logs)
        state = await self.state_reader.read(contract_address, None, bundle)

        report = TransactionLogsReport(
            tx_hash=tx_hash,
            contract_address=contract_address,
            transaction_status=transaction_status(receipt),
            transaction_details=TransactionDetails.from_chain(receipt, transaction),
            bundle=bundle.model_copy(update={"contract_info": state.contract_info}),
            contract_state=state,
            total_logs=len(receipt.logs),
            contract_logs=bundle.event_count,
            raw_logs=receipt.logs,
        )

        if use_cache:
            await self.cache.put(key, report, self.cache_ttl_seconds)
        return report
