"""Known event schema families and their decoders.

Each family is a decoder variant exposing ``try_decode``. The registry keeps
them in fixed priority order; the classifier takes the first family that
decodes a log.
"""

import logging
from dataclasses import dataclass
from typing import Any

from eth_abi import decode
from eth_utils import event_abi_to_log_topic
from web3 import Web3

from dispute_evidence.infrastructure.blockchain.contracts import (
    DISPUTE_CONTRACT_ABI,
    ERC20_ABI,
    ERC721_ABI,
)
from dispute_evidence.infrastructure.blockchain.types import RawLog, to_hex
from dispute_evidence.services.classification.schemas import (
    ClassifiedEvent,
    ContractType,
    EventKind,
)

logger = logging.getLogger(__name__)

# ABI parameter name -> ClassifiedEvent field
FIELD_NAMES = {
    "from": "from_address",
    "to": "to_address",
    "value": "amount",
    "amount": "amount",
    "tokenId": "token_id",
    "reason": "reason",
    "requested": "requested",
    "sent": "sent",
}


@dataclass(frozen=True)
class SchemaParam:
    """Typed event parameter."""

    name: str
    abi_type: str
    indexed: bool


@dataclass(frozen=True)
class SchemaDefinition:
    """Event signature belonging to one schema family."""

    family: ContractType
    name: str
    params: tuple[SchemaParam, ...]
    kind: EventKind
    label: str
    selector: str

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(p.abi_type for p in self.params)})"

    @property
    def indexed_params(self) -> tuple[SchemaParam, ...]:
        return tuple(p for p in self.params if p.indexed)

    @property
    def data_params(self) -> tuple[SchemaParam, ...]:
        return tuple(p for p in self.params if not p.indexed)

    @classmethod
    def from_abi(
        cls, family: ContractType, event_abi: dict[str, Any], kind: EventKind, label: str
    ) -> "SchemaDefinition":
        params = tuple(
            SchemaParam(name=i["name"], abi_type=i["type"], indexed=bool(i.get("indexed")))
            for i in event_abi["inputs"]
        )
        return cls(
            family=family,
            name=event_abi["name"],
            params=params,
            kind=kind,
            label=label,
            selector=to_hex(event_abi_to_log_topic(event_abi)),
        )

    def decode_args(self, log: RawLog) -> dict[str, Any]:
        """Decode topics and data into named arguments.

        Raises:
            ValueError: If the topic layout does not fit the signature
            eth_abi.exceptions.DecodingError: If the data does not decode
        """
        indexed = self.indexed_params
        if len(log.topics) != len(indexed) + 1:
            raise ValueError(
                f"{self.signature} expects {len(indexed) + 1} topics, got {len(log.topics)}"
            )

        args: dict[str, Any] = {}
        for param, topic in zip(indexed, log.topics[1:]):
            (args[param.name],) = decode([param.abi_type], bytes.fromhex(topic[2:]))

        data_params = self.data_params
        if data_params:
            values = decode([p.abi_type for p in data_params], bytes.fromhex(log.data[2:]))
            args.update(zip((p.name for p in data_params), values))

        return args

    def build_event(self, args: dict[str, Any], log_index: int) -> ClassifiedEvent:
        fields: dict[str, Any] = {}
        for name, value in args.items():
            field = FIELD_NAMES.get(name)
            if field is None:
                continue
            if isinstance(value, int) and not isinstance(value, bool):
                value = str(value)
            elif field in ("from_address", "to_address"):
                value = Web3.to_checksum_address(value)
            fields[field] = value

        return ClassifiedEvent(
            family=self.family,
            kind=self.kind,
            type=self.label,
            log_index=log_index,
            **fields,
        )


class SchemaFamily:
    """Decoder for one family of event signatures."""

    def __init__(self, contract_type: ContractType, definitions: list[SchemaDefinition]):
        self.contract_type = contract_type
        self.definitions = definitions
        self._by_selector = {d.selector: d for d in definitions}

    def try_decode(self, log: RawLog) -> ClassifiedEvent | None:
        """Decode the log, or None when the selector or layout does not fit."""
        definition = self._by_selector.get(log.selector or "")
        if definition is None:
            return None

        try:
            args = definition.decode_args(log)
        except Exception as e:
            logger.debug(
                f"{self.contract_type.value} {definition.name} layout mismatch "
                f"at log {log.log_index}: {e}"
            )
            return None

        return definition.build_event(args, log.log_index)


def _family(
    contract_type: ContractType,
    abi: list[dict[str, Any]],
    events: dict[str, tuple[EventKind, str]],
) -> SchemaFamily:
    definitions = [
        SchemaDefinition.from_abi(contract_type, entry, *events[entry["name"]])
        for entry in abi
        if entry.get("type") == "event" and entry["name"] in events
    ]
    return SchemaFamily(contract_type, definitions)


def build_default_families() -> list[SchemaFamily]:
    """ERC-20, ERC-721, then the dispute contract, in priority order."""
    return [
        _family(
            ContractType.ERC20,
            ERC20_ABI,
            {"Transfer": (EventKind.TRANSFER, "ERC20")},
        ),
        _family(
            ContractType.ERC721,
            ERC721_ABI,
            {"Transfer": (EventKind.TRANSFER, "ERC721")},
        ),
        _family(
            ContractType.DISPUTE_CONTRACT,
            DISPUTE_CONTRACT_ABI,
            {
                "Transfer": (EventKind.TRANSFER, "DisputeToken"),
                "TransferFailed": (EventKind.FAILURE, "TransferFailed"),
                "PartialTransfer": (EventKind.PARTIAL_TRANSFER, "PartialTransfer"),
                "TokenMinted": (EventKind.MINT, "TokenMinted"),
                "TokenTransferFailed": (EventKind.FAILURE, "TokenTransferFailed"),
            },
        ),
    ]


class SchemaRegistry:
    """Ordered catalog of schema families."""

    def __init__(self, families: list[SchemaFamily] | None = None):
        self.families = families if families is not None else build_default_families()

    def __iter__(self):
        return iter(self.families)

    def __len__(self) -> int:
        return len(self.families)

    def get(self, contract_type: ContractType) -> SchemaFamily | None:
        for family in self.families:
            if family.contract_type == contract_type:
                return family
        return None

    def selector_for(self, contract_type: ContractType, event_name: str) -> str:
        """Selector of a named event within a family.

        Raises:
            KeyError: If the family or event is not registered
        """
        family = self.get(contract_type)
        if family is not None:
            for definition in family.definitions:
                if definition.name == event_name:
                    return definition.selector
        raise KeyError(f"{contract_type.value}.{event_name} is not registered")
