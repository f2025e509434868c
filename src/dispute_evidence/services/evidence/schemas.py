"""Evidence report schemas handed to prompt construction and persistence."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field

from dispute_evidence.infrastructure.blockchain.types import RawLog, Receipt, Transaction
from dispute_evidence.services.classification.schemas import EvidenceBundle, EvidenceModel
from dispute_evidence.services.patterns.schemas import PatternAnalysis
from dispute_evidence.services.state.schemas import ContractState

TransactionStatus = Literal["success", "failed"]


def transaction_status(receipt: Receipt) -> TransactionStatus:
    return "success" if receipt.succeeded else "failed"


class TransactionDetails(EvidenceModel):
    """Receipt and transaction facts."""

    block_number: int = 0
    gas_used: str = "0"
    effective_gas_price: str = "0"
    status: int | None = None
    from_address: str | None = Field(default=None, alias="from")
    to_address: str | None = Field(default=None, alias="to")
    value: str = "0"

    @classmethod
    def from_chain(
        cls, receipt: Receipt, transaction: Transaction | None
    ) -> "TransactionDetails":
        return cls(
            block_number=receipt.block_number,
            gas_used=str(receipt.gas_used),
            effective_gas_price=str(receipt.effective_gas_price),
            status=receipt.status,
            from_address=transaction.from_address if transaction else None,
            to_address=transaction.to_address if transaction else None,
            value=str(transaction.value) if transaction else "0",
        )


class EvidenceReport(EvidenceModel):
    """Outcome of one evidence-assembly run."""

    tx_hash: str
    contract_address: str
    target_address: str | None = None
    transaction_status: TransactionStatus
    bundle: EvidenceBundle
    contract_state: ContractState
    pattern_analysis: PatternAnalysis
    transaction_details: TransactionDetails
    backfill_performed: bool = False
    assembled_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TransactionLogsReport(EvidenceModel):
    """Classified logs of one transaction, without target or backfill."""

    tx_hash: str
    contract_address: str
    transaction_status: TransactionStatus
    transaction_details: TransactionDetails
    bundle: EvidenceBundle
    contract_state: ContractState
    total_logs: int = 0
    contract_logs: int = 0
    raw_logs: tuple[RawLog, ...] = ()
    assembled_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
