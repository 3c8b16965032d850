"""
Pydantic models for page-view events and the reports derived from them.
"""
import math
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dates import parse_instant

# =============================================================================
# Raw Data Models
# =============================================================================

class PageViewEvent(BaseModel):
    """A single recorded page view.

    Rows from the event store use ``created_at`` for the timestamp; either
    name is accepted. Timestamps that can't be read become None instead of
    failing validation, and such events fall outside every window.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    occurred_at: datetime | None = Field(default=None, alias="created_at")
    domain: str | None = None
    path: str | None = None
    referrer: str | None = None
    site_id: str | None = None  # None = unscoped/legacy event

    @field_validator("id", "site_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("occurred_at", mode="before")
    @classmethod
    def _parse_occurred_at(cls, value):
        return parse_instant(value)


class Site(BaseModel):
    """A site known to the registry."""
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    site_id: str
    domain: str
    created_at: datetime | None = None

    @field_validator("id", "site_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value):
        return parse_instant(value)


# =============================================================================
# Derived Models
# =============================================================================

class DailyBucket(BaseModel):
    """Page views on a single UTC calendar day."""
    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(default=0, ge=0)


class RankedEntry(BaseModel):
    """A page and how many times it was viewed."""
    model_config = ConfigDict(frozen=True)

    group_key: str  # domain + path
    domain: str
    path: str
    count: int = Field(ge=1)


class Summary(BaseModel):
    """Rollup counters for the stat cards."""
    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    today_count: int = 0
    average_per_day: float = 0.0  # exact; see display_average

    @property
    def display_average(self) -> int:
        """Average rounded to the nearest integer, halves rounded up."""
        return math.floor(self.average_per_day + 0.5)


class DashboardSnapshot(BaseModel):
    """Everything a single dashboard render needs."""
    model_config = ConfigDict(frozen=True)

    site_scope: str
    reference: datetime
    span_days: int

    # Time series
    daily: list[DailyBucket]  # fixed window, zero-filled
    chart: list[DailyBucket]  # daily narrowed to span_days

    # Content
    top_pages: list[RankedEntry]
    recent_activity: list[PageViewEvent]

    # Counters
    summary: Summary
    total_sites: int = 0
