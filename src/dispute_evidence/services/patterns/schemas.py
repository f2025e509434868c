"""Transaction pattern schemas."""

from enum import Enum

from pydantic import Field

from dispute_evidence.services.classification.schemas import EvidenceModel


class TransactionType(str, Enum):
    """Coarse transaction intent, highest priority first."""

    CONTRACT_VALUE_TRANSFER = "contract_value_transfer"
    TOKEN_TRANSFER = "token_transfer"
    CONTRACT_CALL = "contract_call"
    VALUE_TRANSFER = "value_transfer"
    UNKNOWN = "unknown"


class PatternTag(str, Enum):
    """Signals contributing to the transaction type."""

    VALUE_TRANSFER = "VALUE_TRANSFER"
    TOKEN_TRANSFER = "TOKEN_TRANSFER"
    SINGLE_ADDRESS_EVENT = "SINGLE_ADDRESS_EVENT"


class PatternAnalysis(EvidenceModel):
    """Transaction pattern classification."""

    transaction_type: TransactionType = TransactionType.UNKNOWN
    patterns: tuple[PatternTag, ...] = Field(default=(), description="Contributing tags")
    value_transferred: str = "0"
    events_emitted: int = 0
    contract_interaction: bool = False
    success: bool = False
    gas_used: str = "0"
