"""Normalized chain data structures.

web3 returns ``AttributeDict`` objects holding ``HexBytes`` values. Everything
is converted to plain, immutable values here so the classification layer only
deals with lowercase ``0x``-prefixed hex strings and ints.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping


def to_hex(value: Any) -> str:
    """Render bytes or a hex string as a lowercase 0x-prefixed hex string."""
    if value is None:
        return "0x"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    if text.startswith(("0x", "0X")):
        text = text[2:]
    return "0x" + text.lower()


def _to_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.startswith("0x"):
        return int(value, 16)
    return int(value)


@dataclass(frozen=True)
class RawLog:
    """Event log as fetched from the chain."""

    address: str
    topics: tuple[str, ...]
    data: str
    log_index: int = 0
    transaction_index: int = 0
    block_number: int = 0
    transaction_hash: str | None = None

    @property
    def selector(self) -> str | None:
        """Event selector (topic[0]) or None for anonymous logs."""
        return self.topics[0] if self.topics else None

    @classmethod
    def from_rpc(cls, log: Mapping[str, Any]) -> "RawLog":
        """Build from an ``eth_getLogs`` / receipt log entry."""
        tx_hash = log.get("transactionHash")
        return cls(
            address=str(log.get("address") or ""),
            topics=tuple(to_hex(t) for t in log.get("topics") or []),
            data=to_hex(log.get("data")),
            log_index=_to_int(log.get("logIndex")),
            transaction_index=_to_int(log.get("transactionIndex")),
            block_number=_to_int(log.get("blockNumber")),
            transaction_hash=to_hex(tx_hash) if tx_hash is not None else None,
        )


@dataclass(frozen=True)
class Receipt:
    """Transaction receipt."""

    transaction_hash: str
    status: int | None
    block_number: int
    gas_used: int
    effective_gas_price: int
    logs: tuple[RawLog, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> "Receipt":
        status = receipt.get("status")
        return cls(
            transaction_hash=to_hex(receipt.get("transactionHash")),
            status=_to_int(status) if status is not None else None,
            block_number=_to_int(receipt.get("blockNumber")),
            gas_used=_to_int(receipt.get("gasUsed")),
            effective_gas_price=_to_int(receipt.get("effectiveGasPrice")),
            logs=tuple(RawLog.from_rpc(log) for log in receipt.get("logs") or []),
        )


@dataclass(frozen=True)
class Transaction:
    """Transaction body."""

    hash: str
    from_address: str | None
    to_address: str | None
    value: int
    input: str
    block_number: int | None = None

    @property
    def has_call_data(self) -> bool:
        return self.input not in ("", "0x")

    @classmethod
    def from_rpc(cls, tx: Mapping[str, Any]) -> "Transaction":
        block_number = tx.get("blockNumber")
        return cls(
            hash=to_hex(tx.get("hash")),
            from_address=tx.get("from"),
            to_address=tx.get("to"),
            value=_to_int(tx.get("value")),
            input=to_hex(tx.get("input")),
            block_number=_to_int(block_number) if block_number is not None else None,
        )
