"""Utility modules for the dashboard router."""

from .events import EventEmitter
from .rate_limit import RateLimiter
from .retry import retry_with_backoff

__all__ = ["EventEmitter", "RateLimiter", "retry_with_backoff"]
