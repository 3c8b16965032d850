"""
Date and instant helpers shared by the aggregation functions.

Every calendar date in Minilytics is a UTC date. The viewer's local offset
never enters bucket boundaries, so the same events always land in the same
buckets no matter where the dashboard is opened.
"""
import logging
import re
from datetime import date, datetime, timedelta, timezone

logger = logging.getLogger(__name__)

# "2024-01-15" carries no time of day and no offset
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_instant(value) -> datetime | None:
    """Coerce a timestamp into an aware UTC datetime.

    Accepts aware or naive datetimes (naive is taken as UTC), ISO 8601
    strings with or without an offset (a trailing ``Z`` is UTC), and epoch
    seconds. Anything else, including date-only strings, returns None.

    Never raises: a corrupt timestamp must not abort an aggregation.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except (OverflowError, ValueError):
            logger.debug(f"Timestamp out of range in UTC: {value!r}")
            return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug(f"Epoch value out of range: {value!r}")
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text or _DATE_ONLY.match(text):
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None
        return parse_instant(parsed)

    return None


def utc_date(value) -> date | None:
    """UTC calendar date of a timestamp, or None if it can't be parsed."""
    instant = parse_instant(value)
    if instant is None:
        return None
    return instant.date()


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the start of ``day``."""
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def day_window(end: date, days: int) -> list[date]:
    """``days`` consecutive dates ending at ``end`` inclusive, oldest first.

    Raises:
        ValueError: If the window would start before the earliest representable date
    """
    if (end - date.min).days < days - 1:
        raise ValueError(
            f"A {days}-day window ending {end.isoformat()} starts before {date.min.isoformat()}"
        )
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def resolve_reference(reference=None) -> datetime:
    """Reference instant for a computation; unreadable or missing means now."""
    instant = parse_instant(reference)
    if instant is None:
        if reference is not None:
            logger.debug(f"Unusable reference {reference!r}, using current time")
        return utc_now()
    return instant
