"""Event log classification."""

from dispute_evidence.services.classification.classifier import LogClassifier
from dispute_evidence.services.classification.heuristic import HeuristicDecoder
from dispute_evidence.services.classification.registry import (
    SchemaDefinition,
    SchemaFamily,
    SchemaParam,
    SchemaRegistry,
)
from dispute_evidence.services.classification.schemas import (
    ClassifiedEvent,
    ContractType,
    DecodedParam,
    EventKind,
    EvidenceBundle,
    HeuristicEvent,
    HeuristicPattern,
)

__all__ = [
    "LogClassifier",
    "HeuristicDecoder",
    "SchemaDefinition",
    "SchemaFamily",
    "SchemaParam",
    "SchemaRegistry",
    "ClassifiedEvent",
    "ContractType",
    "DecodedParam",
    "EventKind",
    "EvidenceBundle",
    "HeuristicEvent",
    "HeuristicPattern",
]
