"""Log builders and fakes shared by the unit tests."""

from typing import Any

from eth_abi import encode
from web3 import Web3

from dispute_evidence.infrastructure.blockchain.types import RawLog, to_hex

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CONTRACT = "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701"
TX_HASH = "0xd98e4049a88ad4010a69ba2bf5d7a427fd07a814fe4120d43c72dda9157120b2"


def selector(signature: str) -> str:
    """keccak256 topic of an event signature."""
    return to_hex(Web3.keccak(text=signature))


def address_topic(address: str) -> str:
    """Address left-padded to a 32-byte topic."""
    return "0x" + "0" * 24 + address[2:].lower()


def uint_topic(value: int) -> str:
    return "0x" + value.to_bytes(32, "big").hex()


def abi_data(types: list[str], values: list[Any]) -> str:
    return "0x" + encode(types, values).hex()


def make_log(
    topics: list[str], data: str = "0x", log_index: int = 0, block_number: int = 100
) -> RawLog:
    return RawLog(
        address=CONTRACT,
        topics=tuple(topics),
        data=data,
        log_index=log_index,
        block_number=block_number,
    )


TRANSFER = selector("Transfer(address,address,uint256)")
TRANSFER_FAILED = selector("TransferFailed(address,address,uint256,string)")
PARTIAL_TRANSFER = selector("PartialTransfer(address,address,uint256,uint256)")
TOKEN_MINTED = selector("TokenMinted(address,uint256)")
TOKEN_TRANSFER_FAILED = selector("TokenTransferFailed(address,address,uint256,string)")


def erc20_transfer_log(amount: int = 1000, log_index: int = 0) -> RawLog:
    return make_log(
        [TRANSFER, address_topic(ALICE), address_topic(BOB)],
        abi_data(["uint256"], [amount]),
        log_index=log_index,
    )


def erc721_transfer_log(token_id: int = 7, to: str = BOB, log_index: int = 0) -> RawLog:
    return make_log(
        [TRANSFER, address_topic(ALICE), address_topic(to), uint_topic(token_id)],
        log_index=log_index,
    )


def token_minted_log(token_id: int = 3, to: str = BOB, log_index: int = 0) -> RawLog:
    return make_log(
        [TOKEN_MINTED, address_topic(to)],
        abi_data(["uint256"], [token_id]),
        log_index=log_index,
    )


def transfer_failed_log(
    amount: int = 1500, reason: str = "Amount too high: exceeds 1000", log_index: int = 0
) -> RawLog:
    return make_log(
        [TRANSFER_FAILED, address_topic(ALICE), address_topic(BOB)],
        abi_data(["uint256", "string"], [amount, reason]),
        log_index=log_index,
    )


class FakeRedis:
    """In-memory stand-in for redis.asyncio with a controllable clock."""

    def __init__(self):
        self.store: dict[str, tuple[bytes, float]] = {}
        self.now = 0.0

    async def get(self, key: str) -> bytes | None:
        entry = self.store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.now >= expires_at:
            del self.store[key]
            return None
        return value

    async def setex(self, key: str, ttl: int, value: str | bytes) -> bool:
        if isinstance(value, str):
            value = value.encode()
        self.store[key] = (value, self.now + ttl)
        return True

    async def aclose(self) -> None:
        pass

    def advance(self, seconds: float) -> None:
        self.now += seconds


