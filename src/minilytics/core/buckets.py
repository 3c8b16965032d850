"""
Calendar bucketing: a zero-filled daily series ending at a reference date.
"""
import logging
from collections.abc import Iterable
from datetime import datetime

from .dates import day_window, resolve_reference
from .models import DailyBucket, PageViewEvent

logger = logging.getLogger(__name__)


def build_daily_buckets(
    events: Iterable[PageViewEvent],
    window_days: int = 7,
    reference: datetime | None = None,
) -> list[DailyBucket]:
    """Count events per UTC calendar day over a fixed window.

    Args:
        events: Page views in any order
        window_days: Number of days in the series (at least 1)
        reference: Instant whose UTC date is the last bucket; defaults to now

    Returns:
        Exactly ``window_days`` buckets with consecutive dates, oldest first.
        Days without events are present with a count of 0.

    Raises:
        ValueError: If window_days is less than 1, or the window would start
            before the earliest representable date
    """
    if window_days < 1:
        raise ValueError(f"window_days must be at least 1. Got {window_days}.")

    end = resolve_reference(reference).date()
    counts = dict.fromkeys(day_window(end, window_days), 0)

    skipped = 0
    for event in events:
        if event.occurred_at is None:
            skipped += 1
            continue
        day = event.occurred_at.date()
        if day in counts:
            counts[day] += 1

    if skipped:
        logger.debug(f"Skipped {skipped} events without a usable timestamp")

    return [DailyBucket(date=day, count=count) for day, count in counts.items()]
