"""Contract ABIs and read-only contract calls.

Three contract conventions are known: ERC-20 fungible tokens, ERC-721
non-fungible tokens and the dispute test contract, which emits transfer
outcome events (including failures) in addition to plain transfers.
"""

from typing import Any

from eth_abi import decode, encode
from eth_utils import function_abi_to_4byte_selector
from web3 import Web3
from web3.types import TxParams

from dispute_evidence.infrastructure.blockchain.client import ChainClient


def _param(name: str, abi_type: str, indexed: bool | None = None) -> dict[str, Any]:
    param: dict[str, Any] = {"name": name, "type": abi_type}
    if indexed is not None:
        param["indexed"] = indexed
    return param


def _event(name: str, *inputs: dict[str, Any]) -> dict[str, Any]:
    return {"type": "event", "name": name, "anonymous": False, "inputs": list(inputs)}


def _view(name: str, inputs: list[dict[str, Any]], output_type: str) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": [_param("", output_type)],
    }


ERC20_ABI: list[dict[str, Any]] = [
    _event(
        "Transfer",
        _param("from", "address", True),
        _param("to", "address", True),
        _param("value", "uint256", False),
    ),
    _view("balanceOf", [_param("owner", "address")], "uint256"),
    _view("decimals", [], "uint8"),
    _view("symbol", [], "string"),
    _view("name", [], "string"),
]

ERC721_ABI: list[dict[str, Any]] = [
    _event(
        "Transfer",
        _param("from", "address", True),
        _param("to", "address", True),
        _param("tokenId", "uint256", True),
    ),
    _view("ownerOf", [_param("tokenId", "uint256")], "address"),
    _view("balanceOf", [_param("owner", "address")], "uint256"),
    _view("name", [], "string"),
    _view("symbol", [], "string"),
]

DISPUTE_CONTRACT_ABI: list[dict[str, Any]] = [
    _event(
        "Transfer",
        _param("from", "address", True),
        _param("to", "address", True),
        _param("amount", "uint256", False),
    ),
    _event(
        "TransferFailed",
        _param("from", "address", True),
        _param("to", "address", True),
        _param("amount", "uint256", False),
        _param("reason", "string", False),
    ),
    _event(
        "PartialTransfer",
        _param("from", "address", True),
        _param("to", "address", True),
        _param("requested", "uint256", False),
        _param("sent", "uint256", False),
    ),
    _event(
        "TokenMinted",
        _param("to", "address", True),
        _param("tokenId", "uint256", False),
    ),
    _event(
        "TokenTransferFailed",
        _param("from", "address", True),
        _param("to", "address", True),
        _param("tokenId", "uint256", False),
        _param("reason", "string", False),
    ),
    _view("balanceOf", [_param("account", "address")], "uint256"),
    _view("ownerOf", [_param("tokenId", "uint256")], "address"),
    _view("getTotalSupply", [], "uint256"),
    _view("getNextTokenId", [], "uint256"),
]


def find_function(abi: list[dict[str, Any]], function_name: str) -> dict[str, Any]:
    """Function entry of ``abi`` named ``function_name``.

    Raises:
        ValueError: If the function is not in the ABI
    """
    for item in abi:
        if item.get("type") == "function" and item.get("name") == function_name:
            return item
    raise ValueError(f"Function {function_name} not found in ABI")


class ContractReader:
    """Runs view functions of the disputed contract over ``eth_call``."""

    def __init__(self, client: ChainClient):
        self.client = client

    def encode_function_call(
        self, abi: list[dict], function_name: str, args: list[Any] | None = None
    ) -> bytes:
        """Calldata for a view call: 4-byte selector plus ABI-encoded arguments.

        Target addresses arrive in whatever case the caller used; they are
        checksummed before encoding.

        Raises:
            ValueError: If the function is unknown or the argument count is wrong
        """
        func_abi = find_function(abi, function_name)
        input_types = [i["type"] for i in func_abi.get("inputs", [])]
        args = args or []
        if len(args) != len(input_types):
            raise ValueError(
                f"{function_name} expects {len(input_types)} arguments, got {len(args)}"
            )

        call_args = [
            Web3.to_checksum_address(a) if t == "address" else a
            for t, a in zip(input_types, args)
        ]
        return function_abi_to_4byte_selector(func_abi) + encode(input_types, call_args)

    def decode_function_result(
        self, abi: list[dict], function_name: str, data: bytes
    ) -> Any:
        """Single return value of a view call, or a tuple for multiple outputs."""
        output_types = [o["type"] for o in find_function(abi, function_name).get("outputs", [])]
        if not output_types:
            return None

        decoded = decode(output_types, data)
        return decoded[0] if len(decoded) == 1 else decoded

    async def call_contract(
        self,
        address: str,
        abi: list[dict],
        function_name: str,
        args: list[Any] | None = None,
    ) -> Any:
        """Execute a view function against the latest block and decode its result."""
        tx_params: TxParams = {
            "to": Web3.to_checksum_address(address),
            "data": self.encode_function_call(abi, function_name, args),
        }
        result = await self.client.eth_call(tx_params)
        return self.decode_function_result(abi, function_name, result)
