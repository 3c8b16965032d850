"""
HTTP client for the event store (Supabase PostgREST) and the site registry.

This is the only part of Minilytics that does I/O. If a fetch fails, an
EventSourceError is raised and no aggregation runs for that request.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from .config import AggregationConfig, SourceConfig
from .core.dashboard import build_dashboard
from .core.models import DashboardSnapshot, PageViewEvent, Site
from .core.scope import ALL_SITES, is_all_sites
from .errors import ConfigError, EventSourceError

logger = logging.getLogger(__name__)


class EventSourceClient:
    """Client for fetching page views and registered sites."""

    def __init__(
        self,
        config: SourceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport

    async def _get(
        self,
        url: str,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> Any:
        """GET a JSON document."""
        async with httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                logger.error(f"GET {url} failed with status {status}")
                raise EventSourceError(
                    f"Event store returned {status}: {exc.response.text[:200]}",
                    status_code=status,
                ) from exc
            except httpx.HTTPError as exc:
                logger.error(f"GET {url} failed: {exc}")
                raise EventSourceError(f"Request to {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise EventSourceError(
                f"Invalid JSON from {url}", status_code=response.status_code
            ) from exc

    def _store_headers(self) -> dict[str, str]:
        key = self.config.supabase_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        }

    @staticmethod
    def _parse_rows(rows: list, model: type[BaseModel], label: str) -> list:
        """Validate rows, skipping any that don't fit ``model``."""
        parsed = []
        skipped = 0
        for row in rows:
            try:
                parsed.append(model.model_validate(row))
            except ValidationError as exc:
                skipped += 1
                logger.debug(f"Invalid {label} row {row!r}: {exc}")
        if skipped:
            logger.warning(f"Skipped {skipped} malformed {label} rows")
        return parsed

    # =========================================================================
    # EVENTS
    # =========================================================================

    def page_view_params(self, site_scope: str | None = ALL_SITES) -> dict[str, str]:
        """PostgREST query parameters for the page view fetch."""
        params = {"select": "*", "order": "created_at.desc"}
        if not is_all_sites(site_scope):
            params["site_id"] = f"eq.{site_scope}"
        return params

    async def fetch_page_views(
        self,
        site_scope: str | None = ALL_SITES,
    ) -> list[PageViewEvent]:
        """Fetch page views, newest first, optionally for a single site."""
        rows = await self._get(
            self.config.rest_url,
            params=self.page_view_params(site_scope),
            headers=self._store_headers(),
        )
        if not isinstance(rows, list):
            raise EventSourceError(
                f"Expected a list of page views, got {type(rows).__name__}"
            )
        return self._parse_rows(rows, PageViewEvent, "page view")

    # =========================================================================
    # SITES
    # =========================================================================

    async def fetch_sites(self, access_token: str) -> list[Site]:
        """Fetch the sites registered to the signed-in user.

        Raises:
            ConfigError: If no app_url is configured
            EventSourceError: If the registry request fails
        """
        if not self.config.has_registry:
            raise ConfigError("app_url is required to fetch sites")

        data = await self._get(
            f"{self.config.app_url}/api/sites",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        rows = data.get("sites") if isinstance(data, dict) else None
        return self._parse_rows(rows or [], Site, "site")

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    async def get_dashboard(
        self,
        site_scope: str | None = ALL_SITES,
        access_token: str | None = None,
        reference: datetime | None = None,
        span: int | str | None = None,
        config: AggregationConfig | None = None,
    ) -> DashboardSnapshot:
        """Fetch events (and sites, given a token) and build a snapshot.

        Without an access token or a configured registry, the site count
        is 0. A failed registry fetch is logged and also leaves it at 0;
        a failed event fetch raises EventSourceError.
        """
        if access_token and self.config.has_registry:
            events, sites = await asyncio.gather(
                self.fetch_page_views(site_scope),
                self.fetch_sites(access_token),
                return_exceptions=True,
            )
            if isinstance(events, BaseException):
                raise events
            if isinstance(sites, EventSourceError):
                logger.error(f"Site registry fetch failed: {sites}")
                sites = []
            elif isinstance(sites, BaseException):
                raise sites
        else:
            events = await self.fetch_page_views(site_scope)
            sites = []

        return build_dashboard(
            events,
            sites=sites,
            site_scope=site_scope,
            reference=reference,
            span=span,
            config=config,
        )
