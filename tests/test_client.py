"""Tests for the event source client."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from minilytics.client import EventSourceClient
from minilytics.config import SourceConfig
from minilytics.core.models import Site
from minilytics.errors import ConfigError, EventSourceError
from conftest import make_event

REFERENCE = datetime(2024, 1, 3, 12, tzinfo=timezone.utc)

ROWS = [
    {
        "id": "e3",
        "created_at": "2024-01-03T10:00:00+00:00",
        "domain": "a.com",
        "path": "/",
        "referrer": None,
        "site_id": "s1",
    },
    {
        "id": "e2",
        "created_at": "2024-01-02T10:00:00+00:00",
        "domain": "a.com",
        "path": "/about",
        "referrer": "https://google.com/",
        "site_id": "s1",
    },
]


def run_async(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _config(**overrides) -> SourceConfig:
    values = {
        "supabase_url": "https://abc.supabase.co",
        "supabase_key": "anon-key",
        "app_url": "https://app.example.com",
    }
    values.update(overrides)
    return SourceConfig(**values)


def _client(handler, **overrides) -> tuple[EventSourceClient, list[httpx.Request]]:
    """Client wired to a mock transport; returns it with the request log."""
    requests = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = EventSourceClient(_config(**overrides), transport=httpx.MockTransport(record))
    return client, requests


class TestFetchPageViews:
    """Reading events from the store."""

    def test_all_sites_query(self):
        client, requests = _client(lambda request: httpx.Response(200, json=ROWS))

        events = run_async(client.fetch_page_views())

        assert [e.id for e in events] == ["e3", "e2"]
        request = requests[0]
        assert request.url.path == "/rest/v1/page_views"
        assert request.url.params["select"] == "*"
        assert request.url.params["order"] == "created_at.desc"
        assert "site_id" not in request.url.params
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"

    def test_site_scoped_query(self):
        client, requests = _client(lambda request: httpx.Response(200, json=ROWS))

        run_async(client.fetch_page_views("s1"))

        assert requests[0].url.params["site_id"] == "eq.s1"

    def test_page_view_params(self):
        client = EventSourceClient(_config())

        assert client.page_view_params("all") == {"select": "*", "order": "created_at.desc"}
        assert client.page_view_params(None) == {"select": "*", "order": "created_at.desc"}
        assert client.page_view_params("s9")["site_id"] == "eq.s9"

    def test_malformed_rows_skipped(self, caplog):
        rows = ROWS + [{"domain": "no-id.com"}, "not a row"]
        client, _ = _client(lambda request: httpx.Response(200, json=rows))

        with caplog.at_level(logging.WARNING, logger="minilytics.client"):
            events = run_async(client.fetch_page_views())

        assert len(events) == 2
        assert "Skipped 2 malformed page view rows" in caplog.text

    def test_out_of_range_timestamp_does_not_abort_fetch(self):
        rows = [ROWS[0], {"id": "x", "created_at": "0001-01-01T00:00:00+05:00"}]
        client, _ = _client(lambda request: httpx.Response(200, json=rows))

        events = run_async(client.fetch_page_views())

        assert [e.id for e in events] == ["e3", "x"]
        assert events[1].occurred_at is None

    def test_bad_timestamps_kept_as_undated(self):
        rows = [{"id": "x", "created_at": "garbage"}]
        client, _ = _client(lambda request: httpx.Response(200, json=rows))

        events = run_async(client.fetch_page_views())

        assert events[0].occurred_at is None

    def test_http_error_raises(self):
        client, _ = _client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(EventSourceError) as exc_info:
            run_async(client.fetch_page_views())

        assert exc_info.value.status_code == 500
        assert "500" in str(exc_info.value)

    def test_unauthorized_raises(self):
        client, _ = _client(lambda request: httpx.Response(401, json={"message": "JWT expired"}))

        with pytest.raises(EventSourceError) as exc_info:
            run_async(client.fetch_page_views())

        assert exc_info.value.status_code == 401

    def test_transport_error_raises(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = _client(fail)

        with pytest.raises(EventSourceError) as exc_info:
            run_async(client.fetch_page_views())

        assert exc_info.value.status_code is None

    def test_invalid_json_raises(self):
        client, _ = _client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(EventSourceError, match="Invalid JSON"):
            run_async(client.fetch_page_views())

    def test_non_list_raises(self):
        client, _ = _client(lambda request: httpx.Response(200, json={"rows": ROWS}))

        with pytest.raises(EventSourceError, match="Expected a list"):
            run_async(client.fetch_page_views())


class TestFetchSites:
    """Reading the site registry."""

    def test_returns_sites(self):
        body = {"sites": [
            {"id": 1, "site_id": "s1", "domain": "a.com", "created_at": "2024-01-01T00:00:00Z"},
            {"id": 2, "site_id": "s2", "domain": "b.com", "created_at": "2024-01-02T00:00:00Z"},
        ]}
        client, requests = _client(lambda request: httpx.Response(200, json=body))

        sites = run_async(client.fetch_sites("user-token"))

        assert [s.domain for s in sites] == ["a.com", "b.com"]
        assert str(requests[0].url) == "https://app.example.com/api/sites"
        assert requests[0].headers["authorization"] == "Bearer user-token"

    def test_missing_sites_key(self):
        client, _ = _client(lambda request: httpx.Response(200, json={}))
        assert run_async(client.fetch_sites("user-token")) == []

    def test_null_sites(self):
        client, _ = _client(lambda request: httpx.Response(200, content=json.dumps({"sites": None})))
        assert run_async(client.fetch_sites("user-token")) == []

    def test_requires_app_url(self):
        client = EventSourceClient(_config(app_url=None))

        with pytest.raises(ConfigError, match="app_url"):
            run_async(client.fetch_sites("user-token"))


class TestGetDashboard:
    """Fetch then aggregate."""

    def _events(self):
        return [
            make_event("1", "2024-01-03T08:00:00Z", "a.com", "/", site_id="s1"),
            make_event("2", "2024-01-01T08:00:00Z", "a.com", "/", site_id="s1"),
        ]

    def test_with_token_fetches_sites(self):
        client = EventSourceClient(_config())
        client.fetch_page_views = AsyncMock(return_value=self._events())
        client.fetch_sites = AsyncMock(return_value=[Site(site_id="s1", domain="a.com")])

        snapshot = run_async(client.get_dashboard(access_token="token", reference=REFERENCE))

        client.fetch_page_views.assert_awaited_once_with("all")
        client.fetch_sites.assert_awaited_once_with("token")
        assert snapshot.total_sites == 1
        assert snapshot.summary.total_count == 2
        assert snapshot.summary.today_count == 1
        assert snapshot.top_pages[0].count == 2

    def test_without_token_skips_sites(self):
        client = EventSourceClient(_config())
        client.fetch_page_views = AsyncMock(return_value=self._events())
        client.fetch_sites = AsyncMock()

        snapshot = run_async(client.get_dashboard(site_scope="s1", reference=REFERENCE))

        client.fetch_page_views.assert_awaited_once_with("s1")
        client.fetch_sites.assert_not_awaited()
        assert snapshot.total_sites == 0
        assert snapshot.site_scope == "s1"

    def test_fetch_failure_propagates(self):
        client = EventSourceClient(_config())
        client.fetch_page_views = AsyncMock(side_effect=EventSourceError("down", status_code=503))

        with pytest.raises(EventSourceError):
            run_async(client.get_dashboard(reference=REFERENCE))

    def test_registry_failure_keeps_events(self, caplog):
        client = EventSourceClient(_config())
        client.fetch_page_views = AsyncMock(return_value=self._events())
        client.fetch_sites = AsyncMock(side_effect=EventSourceError("down", status_code=502))

        with caplog.at_level(logging.ERROR, logger="minilytics.client"):
            snapshot = run_async(client.get_dashboard(access_token="token", reference=REFERENCE))

        assert snapshot.total_sites == 0
        assert snapshot.summary.total_count == 2
        assert "Site registry fetch failed" in caplog.text

    def test_event_failure_with_token_propagates(self):
        client = EventSourceClient(_config())
        client.fetch_page_views = AsyncMock(side_effect=EventSourceError("down", status_code=503))
        client.fetch_sites = AsyncMock(return_value=[Site(site_id="s1", domain="a.com")])

        with pytest.raises(EventSourceError):
            run_async(client.get_dashboard(access_token="token", reference=REFERENCE))

    def test_over_the_wire(self):
        def handler(request):
            if request.url.path == "/api/sites":
                return httpx.Response(200, json={"sites": [{"site_id": "s1", "domain": "a.com"}]})
            return httpx.Response(200, json=ROWS)

        client, requests = _client(handler)

        snapshot = run_async(client.get_dashboard(
            access_token="token", reference=REFERENCE, span="7d",
        ))

        assert len(requests) == 2
        assert [b.count for b in snapshot.daily][-2:] == [1, 1]
        assert snapshot.total_sites == 1
        assert snapshot.span_days == 7


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
