"""Shared fixtures for Minilytics tests."""

from datetime import datetime, timezone

import pytest

from minilytics.core.models import PageViewEvent

REFERENCE = datetime(2024, 1, 3, 15, 30, tzinfo=timezone.utc)


def make_event(
    event_id: str,
    occurred_at,
    domain: str | None = "a.com",
    path: str | None = "/",
    site_id: str | None = None,
    referrer: str | None = None,
) -> PageViewEvent:
    """Build an event the way the store returns it."""
    return PageViewEvent.model_validate({
        "id": event_id,
        "created_at": occurred_at,
        "domain": domain,
        "path": path,
        "site_id": site_id,
        "referrer": referrer,
    })


@pytest.fixture
def reference() -> datetime:
    """Fixed reference instant: 2024-01-03 15:30 UTC."""
    return REFERENCE
