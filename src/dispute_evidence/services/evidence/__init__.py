"""Evidence assembly."""

from dispute_evidence.services.evidence.assembler import EvidenceAssembler
from dispute_evidence.services.evidence.schemas import (
    EvidenceReport,
    TransactionDetails,
    TransactionLogsReport,
)

__all__ = [
    "EvidenceAssembler",
    "EvidenceReport",
    "TransactionDetails",
    "TransactionLogsReport",
]
