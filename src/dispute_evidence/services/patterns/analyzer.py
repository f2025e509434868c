"""Fixed decision table for transaction intent."""

import logging

from dispute_evidence.infrastructure.blockchain.types import Receipt, Transaction
from dispute_evidence.services.classification.schemas import (
    EventKind,
    EvidenceBundle,
    HeuristicPattern,
)
from dispute_evidence.services.patterns.schemas import (
    PatternAnalysis,
    PatternTag,
    TransactionType,
)

logger = logging.getLogger(__name__)


class PatternAnalyzer:
    """Labels a transaction from value, call data and token event signals."""

    def analyze(
        self,
        transaction: Transaction | None,
        receipt: Receipt | None,
        bundle: EvidenceBundle,
    ) -> PatternAnalysis:
        patterns: list[PatternTag] = []
        value_transferred = "0"

        contract_interaction = bool(
            transaction and transaction.to_address and transaction.has_call_data
        )

        if transaction and transaction.value > 0:
            value_transferred = str(transaction.value)
            patterns.append(PatternTag.VALUE_TRANSFER)

        token_amount = self._token_transfer_amount(bundle)
        if token_amount is not None:
            patterns.append(PatternTag.TOKEN_TRANSFER)
            value_transferred = token_amount

        if any(e.type == HeuristicPattern.SINGLE_ADDRESS for e in bundle.unknown_events):
            patterns.append(PatternTag.SINGLE_ADDRESS_EVENT)

        if PatternTag.VALUE_TRANSFER in patterns and contract_interaction:
            transaction_type = TransactionType.CONTRACT_VALUE_TRANSFER
        elif PatternTag.TOKEN_TRANSFER in patterns:
            transaction_type = TransactionType.TOKEN_TRANSFER
        elif contract_interaction:
            transaction_type = TransactionType.CONTRACT_CALL
        elif PatternTag.VALUE_TRANSFER in patterns:
            transaction_type = TransactionType.VALUE_TRANSFER
        else:
            transaction_type = TransactionType.UNKNOWN

        return PatternAnalysis(
            transaction_type=transaction_type,
            patterns=tuple(patterns),
            value_transferred=value_transferred,
            events_emitted=bundle.event_count,
            contract_interaction=contract_interaction,
            success=bool(receipt and receipt.succeeded),
            gas_used=str(receipt.gas_used) if receipt else "0",
        )

    @staticmethod
    def _token_transfer_amount(bundle: EvidenceBundle) -> str | None:
        """Amount of the first schema or heuristic transfer carrying one."""
        for transfer in bundle.transfers:
            if transfer.kind == EventKind.TRANSFER and transfer.amount is not None:
                return transfer.amount
        for event in bundle.unknown_events:
            if event.type == HeuristicPattern.TRANSFER and event.amount is not None:
                return event.amount
        return None
