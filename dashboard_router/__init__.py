"""Query routing and cross-app aggregation for dashboard mini-apps."""

from .adapters import AggregatingAdapter, AppAdapter, CollectionAdapter, KeywordAdapter, SearchableAdapter
from .registry import NO_ACTIVE_APPS, AppRegistry
from .scoring import THRESHOLDS, ConfidenceScorer, HybridConfidenceScorer
from .text_preprocessor import TextPreprocessor, preprocess

__all__ = [
    "AppRegistry",
    "NO_ACTIVE_APPS",
    "AppAdapter",
    "SearchableAdapter",
    "AggregatingAdapter",
    "KeywordAdapter",
    "CollectionAdapter",
    "ConfidenceScorer",
    "HybridConfidenceScorer",
    "THRESHOLDS",
    "TextPreprocessor",
    "preprocess",
]
