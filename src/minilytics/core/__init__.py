"""
Aggregation core.

Pure functions that turn a batch of page-view events into dashboard reports.
Nothing here performs I/O or keeps state between calls.
"""

from .buckets import build_daily_buckets
from .dashboard import build_dashboard
from .dates import parse_instant, utc_date, utc_now
from .models import (
    DailyBucket,
    DashboardSnapshot,
    PageViewEvent,
    RankedEntry,
    Site,
    Summary,
)
from .ranking import group_key, rank_top_pages, recent_activity
from .scope import ALL_SITES, count_sites, scope_events
from .summary import AVERAGE_DIVISOR, summarize
from .window import SPAN_PRESETS, latest_instant, parse_span, point_instant, select_window

__all__ = [
    "PageViewEvent", "Site",
    "DailyBucket", "RankedEntry", "Summary", "DashboardSnapshot",
    "build_daily_buckets", "select_window", "rank_top_pages", "summarize",
    "build_dashboard", "recent_activity", "scope_events", "count_sites",
    "group_key", "parse_span", "point_instant", "latest_instant",
    "parse_instant", "utc_date", "utc_now",
    "ALL_SITES", "AVERAGE_DIVISOR", "SPAN_PRESETS",
]
