"""Chain provider gateway with bounded connection and fetch retries."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TransactionNotFound as Web3TransactionNotFound
from web3.types import BlockIdentifier, TxParams

from dispute_evidence.core.config import Settings, get_settings
from dispute_evidence.core.exceptions import ProviderInitError
from dispute_evidence.infrastructure.blockchain.retry import (
    RetryPolicy,
    fixed_backoff,
    linear_backoff,
)
from dispute_evidence.infrastructure.blockchain.types import (
    RawLog,
    Receipt,
    Transaction,
)

logger = logging.getLogger(__name__)


class ChainClient(ABC):
    """Read-only chain capability consumed by the evidence services."""

    @abstractmethod
    async def get_block_number(self) -> int:
        """Get current block number."""
        ...

    @abstractmethod
    async def get_receipt(self, tx_hash: str) -> Receipt | None:
        """Get transaction receipt, None when not found."""
        ...

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> Transaction | None:
        """Get transaction, None when not found."""
        ...

    @abstractmethod
    async def get_logs(
        self, address: str, from_block: int, to_block: int
    ) -> list[RawLog]:
        """Get logs emitted by ``address`` in the block range."""
        ...

    @abstractmethod
    async def eth_call(
        self, transaction: TxParams, block_identifier: BlockIdentifier = "latest"
    ) -> bytes:
        """Execute eth_call (read-only contract call)."""
        ...


class ProviderGateway(ChainClient):
    """web3-backed gateway owning the long-lived RPC connection.

    Built once at process start and shared by every evidence run; it holds
    no per-run state.
    """

    def __init__(
        self,
        rpc_urls: list[str] | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        request_timeout: int | None = None,
        settings: Settings | None = None,
    ):
        """Initialize gateway.

        Args:
            rpc_urls: Primary RPC followed by backups. Defaults to settings.
            max_retries: Attempts for connect and receipt/transaction fetches
            retry_delay: Base delay in seconds (linear for connect, fixed for fetches)
            request_timeout: Per-request HTTP timeout in seconds
            settings: Settings override
        """
        settings = settings or get_settings()
        self.rpc_urls = rpc_urls or settings.rpc_urls
        self.max_retries = max_retries if max_retries is not None else settings.provider_max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.provider_retry_delay
        self.request_timeout = request_timeout or settings.request_timeout

        self.connect_policy = RetryPolicy(
            max_attempts=self.max_retries, backoff=linear_backoff(self.retry_delay)
        )
        self.fetch_policy = RetryPolicy(
            max_attempts=self.max_retries, backoff=fixed_backoff(self.retry_delay)
        )

        self._web3: AsyncWeb3 | None = None
        self._connect_attempt = 0
        self.chain_id: int | None = None
        self.active_rpc_url: str | None = None

    @property
    def web3(self) -> AsyncWeb3:
        """Live web3 instance; ``connect()`` must have succeeded."""
        if self._web3 is None:
            raise RuntimeError("Provider not connected; call connect() first")
        return self._web3

    @property
    def is_connected(self) -> bool:
        return self._web3 is not None

    def _create_web3(self, rpc_url: str) -> AsyncWeb3:
        """Create Web3 instance for the given RPC."""
        return AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": self.request_timeout})
        )

    async def _probe(self) -> AsyncWeb3:
        """Open a connection to the next RPC and verify it answers."""
        rpc_url = self.rpc_urls[self._connect_attempt % len(self.rpc_urls)]
        self._connect_attempt += 1
        w3 = self._create_web3(rpc_url)
        self.chain_id = await w3.eth.chain_id
        self.active_rpc_url = rpc_url
        return w3

    async def connect(self) -> "ProviderGateway":
        """Connect with bounded retries.

        Raises:
            ProviderInitError: If every attempt fails the network probe
        """
        self._connect_attempt = 0
        try:
            self._web3 = await self.connect_policy.run(
                self._probe, "Provider initialization"
            )
        except Exception as e:
            raise ProviderInitError(self.max_retries, e) from e

        logger.info(
            f"Provider initialized on {self.active_rpc_url} (chain id {self.chain_id})"
        )
        return self

    async def get_block_number(self) -> int:
        """Get current block number."""
        return await self.web3.eth.block_number

    async def get_receipt(self, tx_hash: str) -> Receipt | None:
        """Get transaction receipt.

        Transient failures are retried; a missing receipt is returned as None
        without retrying.
        """

        async def fetch() -> Any:
            return await self.web3.eth.get_transaction_receipt(tx_hash)

        try:
            receipt = await self.fetch_policy.run(
                fetch,
                f"Transaction receipt fetch for {tx_hash}",
                give_up_on=(Web3TransactionNotFound,),
            )
        except Web3TransactionNotFound:
            logger.info(f"No receipt for {tx_hash}")
            return None

        return Receipt.from_rpc(receipt) if receipt else None

    async def get_transaction(self, tx_hash: str) -> Transaction | None:
        """Get transaction details, None when unknown."""

        async def fetch() -> Any:
            return await self.web3.eth.get_transaction(tx_hash)

        try:
            tx = await self.fetch_policy.run(
                fetch,
                f"Transaction fetch for {tx_hash}",
                give_up_on=(Web3TransactionNotFound,),
            )
        except Web3TransactionNotFound:
            logger.info(f"No transaction body for {tx_hash}")
            return None

        return Transaction.from_rpc(tx) if tx else None

    async def get_logs(
        self, address: str, from_block: int, to_block: int
    ) -> list[RawLog]:
        """Get logs emitted by ``address`` in the block range."""
        filter_params: dict[str, Any] = {
            "address": AsyncWeb3.to_checksum_address(address),
            "fromBlock": from_block,
            "toBlock": to_block,
        }
        logs = await self.web3.eth.get_logs(filter_params)
        return [RawLog.from_rpc(log) for log in logs]

    async def eth_call(
        self, transaction: TxParams, block_identifier: BlockIdentifier = "latest"
    ) -> bytes:
        """Execute eth_call (read-only contract call)."""
        return await self.web3.eth.call(transaction, block_identifier)

    async def health_check(self) -> dict[str, Any]:
        """Report connectivity and current chain head."""
        try:
            block_number = await self.get_block_number()
            return {
                "status": "connected",
                "rpc_url": self.active_rpc_url,
                "chain_id": self.chain_id,
                "block_number": block_number,
            }
        except Exception as e:
            return {"status": "disconnected", "error": str(e)}
