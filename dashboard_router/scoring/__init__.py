"""Confidence scoring for adapter routing."""

from .base import THRESHOLDS, ConfidenceScorer, threshold_label
from .hybrid import HybridConfidenceScorer, weighted_score
from .semantic import SemanticSimilarity

__all__ = [
    "THRESHOLDS",
    "ConfidenceScorer",
    "threshold_label",
    "HybridConfidenceScorer",
    "weighted_score",
    "SemanticSimilarity",
]
