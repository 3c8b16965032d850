"""
Window filter: narrow a series to a look-back span ending at a reference.

The reference is normally the newest point in the data, not the wall clock,
so a site that stopped receiving traffic still shows its last active weeks.
"""
import logging
import re
from collections.abc import Callable, Iterable
from datetime import date, datetime, timedelta, timezone
from typing import Any

from .dates import parse_instant, start_of_day, utc_now
from .models import DailyBucket, PageViewEvent

logger = logging.getLogger(__name__)

# Presets offered by the chart range picker
SPAN_PRESETS = {
    "7d": "Last 7 days",
    "30d": "Last 30 days",
    "90d": "Last 3 months",
}
DEFAULT_SPAN_DAYS = 90

_SPAN_PATTERN = re.compile(r"^(\d+)\s*d?$")


def point_instant(point: Any) -> datetime | None:
    """Resolve the instant a point sits at.

    Buckets and bare dates sit at midnight UTC of their day. Events use
    their ``occurred_at``. Strings may be full ISO instants or plain
    ``YYYY-MM-DD`` dates.
    """
    if isinstance(point, DailyBucket):
        return start_of_day(point.date)
    if isinstance(point, PageViewEvent):
        return point.occurred_at
    if isinstance(point, datetime):
        return parse_instant(point)
    if isinstance(point, date):
        return start_of_day(point)
    if isinstance(point, str):
        instant = parse_instant(point)
        if instant is not None:
            return instant
        try:
            return start_of_day(date.fromisoformat(point.strip()))
        except ValueError:
            return None
    return None


def latest_instant(
    points: Iterable[Any],
    key: Callable[[Any], datetime | None] = point_instant,
) -> datetime | None:
    """Newest instant among ``points``, or None if none has one."""
    instants = [parse_instant(key(point)) for point in points]
    instants = [instant for instant in instants if instant is not None]
    return max(instants) if instants else None


def select_window(
    points: Iterable[Any],
    span_days: int,
    reference: datetime | date | str | None = None,
    key: Callable[[Any], datetime | None] = point_instant,
) -> list:
    """Keep points at or after ``reference - span_days``.

    Args:
        points: Buckets, events, or anything ``key`` can place in time
        span_days: Look-back length in days (any positive integer)
        reference: Anchor instant; defaults to the newest point in ``points``
        key: Maps a point to its instant

    Returns:
        Matching points in their original order. There is no upper bound:
        points after the reference are kept. Points without an instant are
        dropped.

    Raises:
        ValueError: If span_days is less than 1
    """
    if span_days < 1:
        raise ValueError(f"span_days must be at least 1. Got {span_days}.")

    points = list(points)

    anchor = point_instant(reference) if reference is not None else None
    if anchor is None:
        anchor = latest_instant(points, key) or utc_now()

    timed = [(point, parse_instant(key(point))) for point in points]

    try:
        cutoff = anchor - timedelta(days=span_days)
    except OverflowError:
        cutoff = datetime.min.replace(tzinfo=timezone.utc)
    return [point for point, instant in timed if instant is not None and instant >= cutoff]


def parse_span(value: int | str | None, default: int = DEFAULT_SPAN_DAYS) -> int:
    """Parse a span preset ("7d", "30d", "90d", "14") into a day count.

    Unknown or non-positive values fall back to ``default``.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if value > 0:
            return value
    elif isinstance(value, str):
        match = _SPAN_PATTERN.match(value.strip().lower())
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

    logger.debug(f"Unsupported span {value!r}, using {default} days")
    return default
