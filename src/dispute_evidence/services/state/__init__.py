"""Contract state reads."""

from dispute_evidence.services.state.reader import ContractStateReader
from dispute_evidence.services.state.schemas import ContractState

__all__ = ["ContractState", "ContractStateReader"]
