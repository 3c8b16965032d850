"""
Exceptions raised by Minilytics.

The aggregation functions in ``minilytics.core`` never raise for bad event
data. Only configuration mistakes and event source failures surface here.
"""


class MinilyticsError(Exception):
    """Base class for all Minilytics errors."""
    pass


class ConfigError(MinilyticsError, ValueError):
    """Raised when a configuration value is missing or out of range."""
    pass


class EventSourceError(MinilyticsError):
    """Raised when fetching events or sites from the data store fails.

    Attributes:
        status_code: HTTP status returned by the store, if one was received
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
