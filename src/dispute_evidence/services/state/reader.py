"""Best-effort contract state reads conditioned on the classified family."""

import logging
from typing import Any

from web3 import Web3

from dispute_evidence.core.exceptions import PartialStateReadFailure
from dispute_evidence.infrastructure.blockchain.contracts import (
    DISPUTE_CONTRACT_ABI,
    ERC20_ABI,
    ERC721_ABI,
    ContractReader,
)
from dispute_evidence.services.classification.schemas import (
    ContractType,
    EventKind,
    EvidenceBundle,
)
from dispute_evidence.services.state.schemas import ContractState

logger = logging.getLogger(__name__)

_MISSING = object()


def _same_address(a: str | None, b: str | None) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


class _StateBuilder:
    """Collects the outcome of independent reads for one contract."""

    def __init__(self, reader: ContractReader, address: str, abi: list[dict]):
        self.reader = reader
        self.address = address
        self.abi = abi
        self.balances: dict[str, str] = {}
        self.ownership: dict[str, str] = {}
        self.contract_info: dict[str, Any] = {}
        self.failed_reads: list[str] = []

    async def read(
        self, field: str, function_name: str, args: list[Any] | None = None
    ) -> Any:
        """Run one view call; failures are logged and yield ``_MISSING``."""
        try:
            return await self.reader.call_contract(
                self.address, self.abi, function_name, args
            )
        except Exception as e:
            failure = PartialStateReadFailure(field, e)
            logger.warning(f"{self.address}: {failure}")
            self.failed_reads.append(field)
            return _MISSING

    async def info(self, key: str, function_name: str, as_string: bool = False) -> None:
        value = await self.read(key, function_name)
        if value is not _MISSING:
            self.contract_info[key] = str(value) if as_string else value

    async def balance(self, target_address: str | None) -> None:
        if not target_address:
            return
        value = await self.read(f"balance:{target_address}", "balanceOf", [target_address])
        if value is not _MISSING:
            self.balances[target_address] = str(value)

    async def owner(self, token_id: str) -> None:
        value = await self.read(f"owner:{token_id}", "ownerOf", [int(token_id)])
        if value is not _MISSING:
            self.ownership[token_id] = Web3.to_checksum_address(value)

    def build(self) -> ContractState:
        return ContractState(
            balances=self.balances,
            ownership=self.ownership,
            contract_info=self.contract_info,
            failed_reads=tuple(self.failed_reads),
        )


class ContractStateReader:
    """Reads balances, ownership and metadata for the classified contract."""

    def __init__(self, contracts: ContractReader):
        self.contracts = contracts

    async def read(
        self,
        contract_address: str,
        target_address: str | None,
        bundle: EvidenceBundle,
    ) -> ContractState:
        """Read state appropriate to ``bundle.contract_type``.

        Each read is independent; a failing one only omits its field.
        Unset or unknown contract types yield an empty state.
        """
        contract_type = bundle.contract_type
        if contract_type == ContractType.ERC20:
            return await self._read_erc20(contract_address, target_address)
        if contract_type == ContractType.ERC721:
            return await self._read_erc721(contract_address, target_address, bundle)
        if contract_type == ContractType.DISPUTE_CONTRACT:
            return await self._read_dispute_contract(contract_address, target_address, bundle)

        logger.debug(f"No state reads for contract type {contract_type}")
        return ContractState()

    async def _read_erc20(
        self, contract_address: str, target_address: str | None
    ) -> ContractState:
        state = _StateBuilder(self.contracts, contract_address, ERC20_ABI)
        await state.info("symbol", "symbol")
        await state.info("name", "name")
        await state.info("decimals", "decimals")
        await state.balance(target_address)
        return state.build()

    async def _read_erc721(
        self,
        contract_address: str,
        target_address: str | None,
        bundle: EvidenceBundle,
    ) -> ContractState:
        state = _StateBuilder(self.contracts, contract_address, ERC721_ABI)
        await state.info("symbol", "symbol")
        await state.info("name", "name")

        for transfer in bundle.transfers:
            if (
                transfer.type == ContractType.ERC721.value
                and transfer.token_id is not None
                and _same_address(transfer.to_address, target_address)
            ):
                await state.owner(transfer.token_id)

        await state.balance(target_address)
        return state.build()

    async def _read_dispute_contract(
        self,
        contract_address: str,
        target_address: str | None,
        bundle: EvidenceBundle,
    ) -> ContractState:
        state = _StateBuilder(self.contracts, contract_address, DISPUTE_CONTRACT_ABI)
        await state.info("totalSupply", "getTotalSupply", as_string=True)
        await state.info("nextTokenId", "getNextTokenId", as_string=True)
        await state.balance(target_address)

        for transfer in bundle.transfers:
            if (
                transfer.kind == EventKind.MINT
                and transfer.token_id is not None
                and _same_address(transfer.to_address, target_address)
            ):
                await state.owner(transfer.token_id)

        return state.build()
