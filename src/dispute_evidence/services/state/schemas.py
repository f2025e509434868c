"""Contract state schemas."""

from pydantic import Field

from dispute_evidence.services.classification.schemas import (
    EvidenceModel,
    ReadOnlyMapping,
    ReadOnlyStrMapping,
)


class ContractState(EvidenceModel):
    """Current contract state relevant to a dispute.

    Only successful reads appear in the mappings; failed ones are listed in
    ``failed_reads``.
    """

    balances: ReadOnlyStrMapping = Field(
        default_factory=dict, validate_default=True, description="Address -> balance"
    )
    ownership: ReadOnlyStrMapping = Field(
        default_factory=dict, validate_default=True, description="Token id -> owner"
    )
    contract_info: ReadOnlyMapping = Field(
        default_factory=dict, validate_default=True, description="Metadata"
    )
    failed_reads: tuple[str, ...] = Field(default=(), description="Reads that failed")
