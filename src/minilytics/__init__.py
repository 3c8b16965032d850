"""
Page-view aggregation for the Minilytics dashboard.

Usage:
    from minilytics import EventSourceClient, SourceConfig

    client = EventSourceClient(SourceConfig.from_env())
    snapshot = await client.get_dashboard(site_scope="all", span="30d")

    snapshot.daily         # zero-filled last 7 days
    snapshot.top_pages     # ten most viewed pages
    snapshot.summary       # total, today, average per day

Or, with events already in hand:

    from minilytics import build_daily_buckets, rank_top_pages, summarize
"""

from .client import EventSourceClient
from .config import AggregationConfig, SourceConfig
from .core import (
    ALL_SITES,
    DailyBucket,
    DashboardSnapshot,
    PageViewEvent,
    RankedEntry,
    Site,
    Summary,
    build_daily_buckets,
    build_dashboard,
    rank_top_pages,
    recent_activity,
    scope_events,
    select_window,
    summarize,
)
from .errors import ConfigError, EventSourceError, MinilyticsError

__version__ = "0.1.0"
__all__ = [
    "EventSourceClient", "AggregationConfig", "SourceConfig",
    "PageViewEvent", "Site", "DailyBucket", "RankedEntry", "Summary", "DashboardSnapshot",
    "build_daily_buckets", "select_window", "rank_top_pages", "summarize",
    "build_dashboard", "recent_activity", "scope_events", "ALL_SITES",
    "MinilyticsError", "ConfigError", "EventSourceError",
]
