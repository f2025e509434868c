"""Classified event and evidence bundle schemas."""

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Mapping

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


class ContractType(str, Enum):
    """Contract convention a bundle was classified under."""

    ERC20 = "ERC20"
    ERC721 = "ERC721"
    DISPUTE_CONTRACT = "DisputeContract"
    UNKNOWN = "Unknown"  # Only heuristic decoding succeeded


class EventKind(str, Enum):
    """Semantic kind of a decoded event."""

    TRANSFER = "Transfer"
    FAILURE = "Failure"
    PARTIAL_TRANSFER = "PartialTransfer"
    MINT = "Mint"
    UNKNOWN = "Unknown"


class HeuristicPattern(str, Enum):
    """Shape inferred for an event no schema recognized."""

    TRANSFER = "Transfer"
    SINGLE_ADDRESS = "SingleAddress"
    UNKNOWN = "Unknown"


def _read_only(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


def _as_dict(value: Mapping[str, Any]) -> dict[str, Any]:
    return dict(value)


# Mapping fields hold read-only copies of the validated input
ReadOnlyMapping = Annotated[
    Mapping[str, Any],
    AfterValidator(_read_only),
    PlainSerializer(_as_dict, return_type=dict[str, Any]),
]
ReadOnlyStrMapping = Annotated[
    Mapping[str, str],
    AfterValidator(_read_only),
    PlainSerializer(_as_dict, return_type=dict[str, str]),
]


class EvidenceModel(BaseModel):
    """Frozen base model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ClassifiedEvent(EvidenceModel):
    """Log decoded against a known schema family."""

    family: ContractType = Field(..., description="Family that matched")
    kind: EventKind = Field(..., description="Semantic kind")
    type: str = Field(..., description="Event label, e.g. ERC20 or TransferFailed")
    from_address: str | None = Field(default=None, alias="from")
    to_address: str | None = Field(default=None, alias="to")
    amount: str | None = None
    token_id: str | None = None
    reason: str | None = None
    requested: str | None = None
    sent: str | None = None
    log_index: int = 0


class DecodedParam(EvidenceModel):
    """Best-effort decoded topic or data word."""

    type: str  # address, bytes32, uint256 or bytes
    value: str


class HeuristicEvent(EvidenceModel):
    """Structural guess for a log no schema family matched."""

    type: HeuristicPattern = HeuristicPattern.UNKNOWN
    kind: EventKind = EventKind.UNKNOWN
    event_signature: str
    from_address: str | None = Field(default=None, alias="from")
    to_address: str | None = Field(default=None, alias="to")
    amount: str | None = None
    indexed_params: tuple[DecodedParam, ...] = ()
    non_indexed_params: tuple[DecodedParam, ...] = ()
    log_index: int = 0
    raw_data: str = "0x"


class EvidenceBundle(EvidenceModel):
    """Decoded evidence for one transaction.

    ``contract_type`` is fixed by the first schema family that classified a
    log and is never replaced by later logs from another family. Heuristic
    decoding only fills it with ``UNKNOWN`` while no family has matched.
    """

    transfers: tuple[ClassifiedEvent, ...] = ()
    failures: tuple[ClassifiedEvent, ...] = ()
    partial_transfers: tuple[ClassifiedEvent, ...] = ()
    unknown_events: tuple[HeuristicEvent, ...] = ()
    contract_type: ContractType | None = None
    contract_info: ReadOnlyMapping = Field(default_factory=dict, validate_default=True)

    @property
    def event_count(self) -> int:
        return (
            len(self.transfers)
            + len(self.failures)
            + len(self.partial_transfers)
            + len(self.unknown_events)
        )
