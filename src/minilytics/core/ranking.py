"""
Ranking of pages by view count, and the recent activity feed.

Both orderings are fully determined by the events themselves, never by the
order the store returned them in. Query plans change; the dashboard must not.
"""
from collections import Counter
from collections.abc import Iterable

from .models import PageViewEvent, RankedEntry


def normalize_page(domain: str | None, path: str | None) -> tuple[str, str]:
    """Fill in a missing domain ("") and a missing path ("/")."""
    return domain or "", path or "/"


def group_key(domain: str | None, path: str | None) -> str:
    """Composite key identifying a page across sites."""
    domain, path = normalize_page(domain, path)
    return f"{domain}{path}"


def rank_top_pages(
    events: Iterable[PageViewEvent],
    max_results: int = 10,
) -> list[RankedEntry]:
    """Most viewed pages, grouped by (domain, path).

    Sorted by count descending. Equal counts are ordered by domain, then
    path, compared as strings.

    Args:
        events: Page views in any order
        max_results: Maximum entries to return; 0 or less returns []
    """
    if max_results <= 0:
        return []

    counts = Counter(normalize_page(event.domain, event.path) for event in events)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    return [
        RankedEntry(
            group_key=group_key(domain, path),
            domain=domain,
            path=path,
            count=count,
        )
        for (domain, path), count in ranked[:max_results]
    ]


def recent_activity(
    events: Iterable[PageViewEvent],
    limit: int = 10,
) -> list[PageViewEvent]:
    """Newest page views first.

    Events sharing a timestamp are ordered by id. Events without a usable
    timestamp go last.
    """
    if limit <= 0:
        return []

    dated = []
    undated = []
    for event in events:
        (dated if event.occurred_at is not None else undated).append(event)

    dated.sort(key=lambda event: event.id)
    dated.sort(key=lambda event: event.occurred_at, reverse=True)
    undated.sort(key=lambda event: event.id)

    return (dated + undated)[:limit]
