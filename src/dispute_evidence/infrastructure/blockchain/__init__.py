"""Blockchain infrastructure module."""

from dispute_evidence.infrastructure.blockchain.client import ChainClient, ProviderGateway
from dispute_evidence.infrastructure.blockchain.contracts import (
    DISPUTE_CONTRACT_ABI,
    ERC20_ABI,
    ERC721_ABI,
    ContractReader,
)
from dispute_evidence.infrastructure.blockchain.retry import (
    RetryPolicy,
    fixed_backoff,
    linear_backoff,
)
from dispute_evidence.infrastructure.blockchain.types import RawLog, Receipt, Transaction

__all__ = [
    # Client
    "ChainClient",
    "ProviderGateway",
    # Contracts
    "ContractReader",
    "ERC20_ABI",
    "ERC721_ABI",
    "DISPUTE_CONTRACT_ABI",
    # Retry
    "RetryPolicy",
    "fixed_backoff",
    "linear_backoff",
    # Types
    "RawLog",
    "Receipt",
    "Transaction",
]
