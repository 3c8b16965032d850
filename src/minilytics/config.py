"""
Configuration for Minilytics.
"""
import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Reporting contract defaults
DEFAULT_WINDOW_DAYS = 7
DEFAULT_TOP_PAGES = 10
DEFAULT_RECENT_ACTIVITY = 10
DEFAULT_SPAN = "90d"

LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


@dataclass
class AggregationConfig:
    """Knobs for a single dashboard aggregation.

    Usage:
        config = AggregationConfig(window_days=14, top_pages_limit=5)
        snapshot = build_dashboard(events, config=config)
    """

    window_days: int = DEFAULT_WINDOW_DAYS  # Length of the daily series
    top_pages_limit: int = DEFAULT_TOP_PAGES
    recent_activity_limit: int = DEFAULT_RECENT_ACTIVITY
    default_span: str = DEFAULT_SPAN  # Chart range when none is requested

    def __post_init__(self):
        if self.window_days < 1:
            raise ConfigError(
                f"window_days must be at least 1. Got {self.window_days}."
            )
        if self.top_pages_limit < 0:
            raise ConfigError(
                f"top_pages_limit cannot be negative. Got {self.top_pages_limit}."
            )
        if self.recent_activity_limit < 0:
            raise ConfigError(
                f"recent_activity_limit cannot be negative. "
                f"Got {self.recent_activity_limit}."
            )


@dataclass
class SourceConfig:
    """Connection settings for the event store and site registry."""

    # Required
    supabase_url: str  # e.g. "https://abc.supabase.co"
    supabase_key: str  # anon or service key

    # Optional
    app_url: str | None = None  # Base URL serving /api/sites
    table: str = "page_views"
    timeout_seconds: float = 30.0

    def __post_init__(self):
        """Normalize URLs and validate required values."""
        if not self.supabase_url:
            raise ConfigError("supabase_url is required")
        if not self.supabase_key:
            raise ConfigError("supabase_key is required")
        if self.timeout_seconds <= 0:
            raise ConfigError(
                f"timeout_seconds must be positive. Got {self.timeout_seconds}."
            )

        self.supabase_url = self.supabase_url.rstrip("/")
        if self.app_url:
            self.app_url = self.app_url.rstrip("/")

        self._warn_insecure(self.supabase_url)
        if self.app_url:
            self._warn_insecure(self.app_url)

    @staticmethod
    def _warn_insecure(url: str) -> None:
        parsed = urlparse(url)
        if parsed.scheme == "http" and parsed.hostname not in LOCAL_HOSTS:
            logger.warning(
                f"{url} uses plain http; API keys will be sent unencrypted"
            )

    @property
    def has_registry(self) -> bool:
        """Check if the site registry endpoint is configured."""
        return bool(self.app_url)

    @property
    def rest_url(self) -> str:
        """PostgREST endpoint for the events table."""
        return f"{self.supabase_url}/rest/v1/{self.table}"

    @classmethod
    def from_env(cls, prefix: str = "MINILYTICS_") -> "SourceConfig":
        """Build a config from environment variables.

        Reads ``<prefix>SUPABASE_URL``, ``<prefix>SUPABASE_KEY``,
        ``<prefix>APP_URL``, ``<prefix>TABLE`` and ``<prefix>TIMEOUT``.

        Raises:
            ConfigError: If a required variable is missing or TIMEOUT is not a number
        """
        env = os.environ
        timeout_raw = env.get(f"{prefix}TIMEOUT", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ConfigError(
                f"{prefix}TIMEOUT must be a number. Got {timeout_raw!r}."
            ) from None

        return cls(
            supabase_url=env.get(f"{prefix}SUPABASE_URL", ""),
            supabase_key=env.get(f"{prefix}SUPABASE_KEY", ""),
            app_url=env.get(f"{prefix}APP_URL") or None,
            table=env.get(f"{prefix}TABLE", "page_views"),
            timeout_seconds=timeout,
        )
