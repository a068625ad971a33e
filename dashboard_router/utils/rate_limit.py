"""Sliding-window request rate limiter."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..cache import now_ms

DEFAULT_MAX_REQUESTS = 20
DEFAULT_WINDOW_MS = 60000


class RateLimiter:
    """Allows at most max_requests within any window_ms-long sliding window."""

    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_ms: Optional[int] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the rate limiter.

        Falsy options (None or 0) fall back to the defaults of
        20 requests per 60000 ms.

        Args:
            max_requests: Requests allowed per window
            window_ms: Window length in milliseconds
            clock: Callable returning epoch milliseconds
        """
        self.max_requests = max_requests or DEFAULT_MAX_REQUESTS
        self.window_ms = window_ms or DEFAULT_WINDOW_MS
        self._clock = clock or now_ms
        self._requests: List[int] = []

    def check_limit(self) -> bool:
        """
        Record a request if the window has room for it.

        Returns:
            True if the request is allowed, False if it is over the limit
        """
        self._cleanup()
        if len(self._requests) >= self.max_requests:
            return False
        self._requests.append(self._clock())
        return True

    def get_remaining_requests(self) -> int:
        self._cleanup()
        return max(0, self.max_requests - len(self._requests))

    def get_reset_time(self) -> Optional[datetime]:
        """
        Time at which the oldest recorded request leaves the window.

        Returns:
            A datetime, or None when no requests are recorded
        """
        if not self._requests:
            return None
        return datetime.fromtimestamp((self._requests[0] + self.window_ms) / 1000)

    def get_stats(self) -> Dict[str, Any]:
        """Current usage figures."""
        self._cleanup()
        return {
            "current_requests": len(self._requests),
            "max_requests": self.max_requests,
            "remaining_requests": max(0, self.max_requests - len(self._requests)),
            "reset_time": self.get_reset_time(),
            "window_ms": self.window_ms,
        }

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests = []

    def _cleanup(self) -> None:
        cutoff = self._clock() - self.window_ms
        self._requests = [ts for ts in self._requests if ts > cutoff]
