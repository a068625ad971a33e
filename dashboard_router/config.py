"""Configuration for the dashboard router."""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Configuration class for the dashboard router."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Context cache: how long an adapter's AppContextData stays fresh (milliseconds)
        self.cache_ttl_ms = int(os.getenv("DASHBOARD_ROUTER_CACHE_TTL_MS", "30000"))

        # Routing floor: ranked adapters below this score are dropped
        self.min_confidence = float(os.getenv("DASHBOARD_ROUTER_MIN_CONFIDENCE", "0.1"))

        # Per-call deadline for asynchronous adapter calls (seconds, 0 = no deadline)
        self.adapter_timeout = float(os.getenv("DASHBOARD_ROUTER_ADAPTER_TIMEOUT", "10.0"))

        # Confidence scorer cache
        self.confidence_cache_ttl_ms = int(os.getenv("DASHBOARD_ROUTER_CONFIDENCE_CACHE_TTL_MS", "60000"))
        self.confidence_cache_max_size = int(os.getenv("DASHBOARD_ROUTER_CONFIDENCE_CACHE_MAX_SIZE", "100"))

        # Sliding-window rate limit applied to the HTTP /route endpoint
        self.rate_limit_max_requests = int(os.getenv("DASHBOARD_ROUTER_RATE_LIMIT_MAX_REQUESTS", "20"))
        self.rate_limit_window_ms = int(os.getenv("DASHBOARD_ROUTER_RATE_LIMIT_WINDOW_MS", "60000"))

        # Retry policy for the semantic similarity provider
        self.retry_max_retries = int(os.getenv("DASHBOARD_ROUTER_RETRY_MAX_RETRIES", "2"))
        self.retry_initial_delay = float(os.getenv("DASHBOARD_ROUTER_RETRY_INITIAL_DELAY", "0.1"))

        # Local API (bound to 127.0.0.1 only)
        self.api_port = int(os.getenv("DASHBOARD_ROUTER_API_PORT", "8770"))

        self.log_level = os.getenv("DASHBOARD_ROUTER_LOG_LEVEL", "INFO").upper()

        # Optional JSON file describing collections to register at startup
        apps_path = os.getenv("DASHBOARD_ROUTER_APPS_PATH", "")
        self.apps_path: Optional[str] = os.path.expanduser(apps_path) if apps_path else None

        # Validate configuration
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if self.cache_ttl_ms <= 0:
            raise ValueError(f"Cache TTL must be positive, got {self.cache_ttl_ms}")

        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"Minimum confidence must be within [0, 1], got {self.min_confidence}")

        if self.adapter_timeout < 0:
            raise ValueError(f"Adapter timeout cannot be negative, got {self.adapter_timeout}")

        if self.confidence_cache_ttl_ms <= 0:
            raise ValueError(f"Confidence cache TTL must be positive, got {self.confidence_cache_ttl_ms}")

        if self.confidence_cache_max_size <= 0:
            raise ValueError(
                f"Confidence cache size must be positive, got {self.confidence_cache_max_size}"
            )

        if self.retry_max_retries < 0:
            raise ValueError(f"Retry count cannot be negative, got {self.retry_max_retries}")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(valid_log_levels)}"
            )


# Create a global config instance
_config = Config()

# Expose configuration values as module-level variables
CACHE_TTL_MS = _config.cache_ttl_ms
MIN_CONFIDENCE = _config.min_confidence
ADAPTER_TIMEOUT = _config.adapter_timeout
CONFIDENCE_CACHE_TTL_MS = _config.confidence_cache_ttl_ms
CONFIDENCE_CACHE_MAX_SIZE = _config.confidence_cache_max_size
RATE_LIMIT_MAX_REQUESTS = _config.rate_limit_max_requests
RATE_LIMIT_WINDOW_MS = _config.rate_limit_window_ms
RETRY_MAX_RETRIES = _config.retry_max_retries
RETRY_INITIAL_DELAY = _config.retry_initial_delay
API_PORT = _config.api_port
LOG_LEVEL = _config.log_level
APPS_PATH = _config.apps_path

__all__ = [
    "Config",
    "CACHE_TTL_MS",
    "MIN_CONFIDENCE",
    "ADAPTER_TIMEOUT",
    "CONFIDENCE_CACHE_TTL_MS",
    "CONFIDENCE_CACHE_MAX_SIZE",
    "RATE_LIMIT_MAX_REQUESTS",
    "RATE_LIMIT_WINDOW_MS",
    "RETRY_MAX_RETRIES",
    "RETRY_INITIAL_DELAY",
    "API_PORT",
    "LOG_LEVEL",
    "APPS_PATH",
]
