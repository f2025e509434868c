"""Log classification into an evidence bundle."""

import logging
from typing import Iterable

from dispute_evidence.infrastructure.blockchain.types import RawLog
from dispute_evidence.services.classification.heuristic import HeuristicDecoder
from dispute_evidence.services.classification.registry import SchemaRegistry
from dispute_evidence.services.classification.schemas import (
    ClassifiedEvent,
    ContractType,
    EventKind,
    EvidenceBundle,
    HeuristicEvent,
)

logger = logging.getLogger(__name__)


class LogClassifier:
    """Classifies raw logs against the registry, falling back to heuristics."""

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        heuristic: HeuristicDecoder | None = None,
    ):
        self.registry = registry or SchemaRegistry()
        self.heuristic = heuristic or HeuristicDecoder()

    def classify_log(self, log: RawLog) -> ClassifiedEvent | HeuristicEvent | None:
        """Decode one log with the first matching family, else heuristically.

        Returns None only for logs without topics.
        """
        if not log.topics:
            logger.debug(f"Skipping anonymous log {log.log_index}")
            return None

        for family in self.registry:
            event = family.try_decode(log)
            if event is not None:
                return event

        logger.debug(f"No schema matched selector {log.selector}, using heuristics")
        return self.heuristic.decode(log)

    def classify(self, logs: Iterable[RawLog]) -> EvidenceBundle:
        """Classify a batch of logs into a bundle."""
        transfers: list[ClassifiedEvent] = []
        failures: list[ClassifiedEvent] = []
        partial_transfers: list[ClassifiedEvent] = []
        unknown_events: list[HeuristicEvent] = []
        contract_type: ContractType | None = None

        for log in logs:
            event = self.classify_log(log)
            if event is None:
                continue

            if isinstance(event, HeuristicEvent):
                unknown_events.append(event)
                if contract_type is None:
                    contract_type = ContractType.UNKNOWN
                continue

            if event.kind in (EventKind.TRANSFER, EventKind.MINT):
                transfers.append(event)
            elif event.kind == EventKind.FAILURE:
                failures.append(event)
            elif event.kind == EventKind.PARTIAL_TRANSFER:
                partial_transfers.append(event)

            # First schema family wins; a heuristic placeholder may be upgraded once
            if contract_type in (None, ContractType.UNKNOWN):
                contract_type = event.family

        bundle = EvidenceBundle(
            transfers=tuple(transfers),
            failures=tuple(failures),
            partial_transfers=tuple(partial_transfers),
            unknown_events=tuple(unknown_events),
            contract_type=contract_type,
        )
        logger.debug(
            f"Classified {bundle.event_count} events as {contract_type}: "
            f"{len(transfers)} transfers, {len(failures)} failures, "
            f"{len(partial_transfers)} partial, {len(unknown_events)} unknown"
        )
        return bundle
