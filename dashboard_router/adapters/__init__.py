"""Mini-app adapters and their capability interfaces."""

from .base import (
    AggregatingAdapter,
    AppAdapter,
    SearchableAdapter,
    Unsubscribe,
    supports_aggregation,
    supports_search,
)
from .collection import CollectionAdapter
from .keyword import ADVICE_PATTERNS, KeywordAdapter

__all__ = [
    "AppAdapter",
    "SearchableAdapter",
    "AggregatingAdapter",
    "Unsubscribe",
    "supports_search",
    "supports_aggregation",
    "KeywordAdapter",
    "CollectionAdapter",
    "ADVICE_PATTERNS",
]
