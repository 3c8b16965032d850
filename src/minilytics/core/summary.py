"""
Rollup counters shown on the dashboard stat cards.
"""
from collections.abc import Iterable
from datetime import datetime

from .dates import resolve_reference
from .models import PageViewEvent, Summary

# The "Avg/Day" card always reads against the last-7-days framing
AVERAGE_DIVISOR = 7


def summarize(
    events: Iterable[PageViewEvent],
    reference: datetime | None = None,
) -> Summary:
    """Total views, views today, and the average per day.

    ``events`` is counted as given; scope it to a site beforehand if needed.
    "Today" is the UTC date of ``reference`` (default: now).
    """
    today = resolve_reference(reference).date()

    total = 0
    today_count = 0
    for event in events:
        total += 1
        if event.occurred_at is not None and event.occurred_at.date() == today:
            today_count += 1

    return Summary(
        total_count=total,
        today_count=today_count,
        average_per_day=total / AVERAGE_DIVISOR,
    )
