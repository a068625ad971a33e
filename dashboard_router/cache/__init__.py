"""Cache package for adapter context and confidence scores."""

from .cache import ContextCache, now_ms
from .models import CacheEntry

__all__ = [
    'CacheEntry',
    'ContextCache',
    'now_ms',
]
