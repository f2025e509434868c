"""Process-level wiring of the evidence engine."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dispute_evidence import __version__
from dispute_evidence.core.config import Settings, get_settings
from dispute_evidence.core.logging import configure_logging
from dispute_evidence.infrastructure.blockchain.client import ProviderGateway
from dispute_evidence.infrastructure.cache import EvidenceCache
from dispute_evidence.services.backfill.service import HistoricalBackfill
from dispute_evidence.services.classification.classifier import LogClassifier
from dispute_evidence.services.evidence.assembler import EvidenceAssembler

logger = logging.getLogger(__name__)


async def create_assembler(settings: Settings | None = None) -> EvidenceAssembler:
    """Connect the provider and build an assembler sharing its handles.

    Raises:
        ProviderInitError: If the provider cannot be reached
    """
    settings = settings or get_settings()
    configure_logging(settings)

    gateway = await ProviderGateway(settings=settings).connect()
    cache = EvidenceCache.from_settings(settings)
    classifier = LogClassifier()

    logger.info(
        f"{settings.app_name} {__version__} ready "
        f"(environment: {settings.environment}, cache: {'on' if cache.enabled else 'off'})"
    )
    return EvidenceAssembler(
        client=gateway,
        cache=cache,
        classifier=classifier,
        backfill=HistoricalBackfill(gateway, classifier, settings.backfill_block_window),
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )


@asynccontextmanager
async def evidence_engine(settings: Settings | None = None) -> AsyncIterator[EvidenceAssembler]:
    """Lifespan helper: build the assembler, close the cache on exit."""
    assembler = await create_assembler(settings)
    try:
        yield assembler
    finally:
        await assembler.cache.close()
