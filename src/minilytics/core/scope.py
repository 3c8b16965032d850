"""
Site scoping for events and the site registry.
"""
from collections.abc import Iterable

from .models import PageViewEvent, Site

# Scope value meaning "every site, including unscoped events"
ALL_SITES = "all"


def is_all_sites(site_scope: str | None) -> bool:
    """True when the scope selects every site."""
    return site_scope is None or site_scope == ALL_SITES


def scope_events(
    events: Iterable[PageViewEvent],
    site_scope: str | None = ALL_SITES,
) -> list[PageViewEvent]:
    """Events belonging to ``site_scope``.

    ``None`` or ``"all"`` keeps everything. A specific site id keeps only
    events tagged with it, so legacy events without a site are left out.
    """
    if is_all_sites(site_scope):
        return list(events)
    return [event for event in events if event.site_id == site_scope]


def count_sites(sites: Iterable[Site]) -> int:
    """Number of distinct registered sites."""
    return len({site.site_id for site in sites})
