"""Transaction pattern analysis."""

from dispute_evidence.services.patterns.analyzer import PatternAnalyzer
from dispute_evidence.services.patterns.schemas import (
    PatternAnalysis,
    PatternTag,
    TransactionType,
)

__all__ = ["PatternAnalysis", "PatternAnalyzer", "PatternTag", "TransactionType"]
