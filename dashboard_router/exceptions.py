"""Custom exception classes for the dashboard router."""


class DashboardRouterError(Exception):
    """Base exception for dashboard router errors."""
    pass


class AdapterError(DashboardRouterError):
    """Exception raised for failures inside a mini-app adapter."""

    def __init__(self, app_name: str, action: str, message: str = ""):
        self.app_name = app_name
        self.action = action
        super().__init__(message or f"{action} failed for adapter '{app_name}'")


class AdapterDataError(AdapterError):
    """Exception raised when an adapter cannot produce context, search or aggregate data."""
    pass


class AdapterTimeoutError(AdapterDataError):
    """Exception raised when an asynchronous adapter call exceeds its deadline."""
    pass


class ConfidenceServiceError(DashboardRouterError):
    """Exception raised when the confidence scorer cannot rank adapters."""
    pass


class RateLimitExceededError(DashboardRouterError):
    """Exception raised when a caller exceeds the configured request rate."""

    def __init__(self, message: str = "Rate limit exceeded", reset_time=None):
        self.reset_time = reset_time
        super().__init__(message)
