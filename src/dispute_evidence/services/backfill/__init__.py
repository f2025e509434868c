"""Historical log backfill."""

from dispute_evidence.services.backfill.service import HistoricalBackfill

__all__ = ["HistoricalBackfill"]
