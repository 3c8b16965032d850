"""
Dashboard composition: one snapshot from one batch of events.
"""
import logging
from collections.abc import Iterable
from datetime import datetime

from ..config import AggregationConfig
from .buckets import build_daily_buckets
from .dates import resolve_reference
from .models import DashboardSnapshot, PageViewEvent, Site
from .ranking import rank_top_pages, recent_activity
from .scope import ALL_SITES, count_sites, scope_events
from .summary import summarize
from .window import parse_span, select_window

logger = logging.getLogger(__name__)


def build_dashboard(
    events: Iterable[PageViewEvent],
    sites: Iterable[Site] = (),
    site_scope: str | None = ALL_SITES,
    reference: datetime | None = None,
    span: int | str | None = None,
    config: AggregationConfig | None = None,
) -> DashboardSnapshot:
    """Compute every dashboard section from the same events.

    The reference instant is resolved once, so the daily series, the chart
    and the "today" counter all agree on what today is.

    Args:
        events: Page views as fetched; scoped here by ``site_scope``
        sites: Registry entries, only counted
        site_scope: Site id, or "all"/None for every site
        reference: Anchor instant; defaults to now
        span: Chart range preset ("7d", "30d", "90d") or day count;
            defaults to ``config.default_span``
        config: Window and list sizes
    """
    config = config or AggregationConfig()
    anchor = resolve_reference(reference)
    scoped = scope_events(events, site_scope)

    daily = build_daily_buckets(scoped, config.window_days, anchor)
    span_days = parse_span(span if span is not None else config.default_span)

    logger.debug(
        f"Dashboard for {site_scope or ALL_SITES}: {len(scoped)} events, "
        f"{config.window_days}-day series, {span_days}-day chart"
    )

    return DashboardSnapshot(
        site_scope=site_scope or ALL_SITES,
        reference=anchor,
        span_days=span_days,
        daily=daily,
        chart=select_window(daily, span_days),
        top_pages=rank_top_pages(scoped, config.top_pages_limit),
        recent_activity=recent_activity(scoped, config.recent_activity_limit),
        summary=summarize(scoped, anchor),
        total_sites=count_sites(sites),
    )
