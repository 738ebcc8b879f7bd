"""
Unit tests for request resolution and relay.

Tests cover:
- Path-segment and endpoint adapters
- Upstream URL construction
- CORS decoration
- Relay error conversion
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.responses import JSONResponse

from tide_gateway.errors import InvalidRequestError, UpstreamError
from tide_gateway.proxy import (
    CORS_HEADERS,
    apply_cors_headers,
    preflight_response,
    relay,
    target_from_endpoint,
    target_from_segments,
)
from tide_gateway.upstream import CHS_API_BASE, UpstreamClient, UpstreamTarget


class TestTargetFromSegments:
    """Tests for the path-segment adapter."""

    @pytest.mark.parametrize(
        "segments,expected",
        [
            (["stations"], "/stations"),
            (["stations", "5cebf1de3d0f4a073c4bb94c"], "/stations/5cebf1de3d0f4a073c4bb94c"),
            (["stations", "123", "data"], "/stations/123/data"),
        ],
    )
    def test_segments_joined_with_slash(self, segments, expected):
        """Segments are joined in order."""
        assert target_from_segments(segments).path == expected

    def test_empty_segments_dropped(self):
        """Doubled and trailing slashes do not produce empty segments."""
        assert target_from_segments(["stations", "", "123", ""]).path == "/stations/123"

    def test_query_kept_verbatim(self):
        """Query string is not re-encoded."""
        query = "time-series-code=wlp-hilo&from=2025-01-01T00%3A00%3A00Z&to=2025-01-02T00:00:00Z"
        target = target_from_segments(["stations", "123", "data"], query)
        assert target.query == query
        assert target.url == f"{CHS_API_BASE}/stations/123/data?{query}"

    def test_reserved_characters_stay_in_segment(self):
        """A decoded '?' or '#' is re-encoded instead of starting a query."""
        target = target_from_segments(["stations", "a?b", "c#d"], "x=1")
        assert target.path == "/stations/a%3Fb/c%23d"
        assert target.url == f"{CHS_API_BASE}/stations/a%3Fb/c%23d?x=1"

    def test_percent_and_space_reencoded(self):
        """Literal '%' and spaces are encoded once."""
        assert target_from_segments(["a%b c"]).path == "/a%25b%20c"

    def test_sub_delims_kept(self):
        """Characters valid in a path segment are left alone."""
        assert target_from_segments(["wlp-hilo", "a:b@c", "x=y;z"]).path == "/wlp-hilo/a:b@c/x=y;z"

    def test_no_query_no_question_mark(self):
        """Without a query the URL has no trailing '?'."""
        assert target_from_segments(["stations"]).url == f"{CHS_API_BASE}/stations"


class TestTargetFromEndpoint:
    """Tests for the endpoint-parameter adapter."""

    def test_endpoint_used_literally(self):
        """Endpoint value is the upstream path."""
        target = target_from_endpoint("/stations/123/data")
        assert target.url == f"{CHS_API_BASE}/stations/123/data"

    @pytest.mark.parametrize("endpoint", [None, ""])
    def test_missing_endpoint_rejected(self, endpoint):
        """Missing or empty endpoint is an invalid request."""
        with pytest.raises(InvalidRequestError) as exc_info:
            target_from_endpoint(endpoint)
        assert exc_info.value.message == "Endpoint parameter is required"


class TestUpstreamTarget:
    """Tests for URL construction."""

    @pytest.mark.parametrize("path", ["/stations", "@evil.example/x", ".evil.example/x"])
    def test_base_origin_always_prefixes(self, path):
        """The URL always starts with the fixed CHS origin."""
        assert UpstreamTarget(path=path).url.startswith(CHS_API_BASE)


class TestCorsHeaders:
    """Tests for response decoration."""

    def test_apply_sets_all_headers(self):
        """All three headers are attached."""
        response = apply_cors_headers(JSONResponse({"x": 1}))
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value

    def test_preflight_is_empty_200(self):
        """Preflight has empty body and CORS headers."""
        response = preflight_response()
        assert response.status_code == 200
        assert response.body == b""
        assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"


class TestRelay:
    """Tests for the relay step."""

    @pytest.fixture
    def upstream(self):
        """Mock upstream client."""
        client = MagicMock(spec=UpstreamClient)
        client.fetch_json = AsyncMock(return_value={"x": 1})
        return client

    @pytest.mark.asyncio
    async def test_success_passes_body_through(self, upstream):
        """Upstream JSON is returned unchanged with 200."""
        response = await relay(upstream, lambda: target_from_endpoint("/stations"))

        assert response.status_code == 200
        assert json.loads(response.body) == {"x": 1}
        upstream.fetch_json.assert_awaited_once_with(UpstreamTarget(path="/stations"))

    @pytest.mark.asyncio
    async def test_invalid_request_skips_upstream(self, upstream):
        """Resolution failure answers 400 without calling upstream."""
        response = await relay(upstream, lambda: target_from_endpoint(None))

        assert response.status_code == 400
        assert json.loads(response.body) == {"error": "Endpoint parameter is required"}
        upstream.fetch_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_upstream_error_rendered(self, upstream):
        """Upstream errors keep their status and details."""
        upstream.fetch_json.side_effect = UpstreamError(404, "not found")

        response = await relay(upstream, lambda: target_from_endpoint("/stations/x"))

        assert response.status_code == 404
        assert json.loads(response.body) == {
            "error": "CHS API error: 404",
            "details": "not found",
        }

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_500(self, upstream):
        """Any other exception is converted, never raised."""
        upstream.fetch_json.side_effect = RuntimeError("boom")

        response = await relay(upstream, lambda: target_from_endpoint("/stations"))

        assert response.status_code == 500
        assert json.loads(response.body) == {
            "error": "Failed to fetch tide data",
            "details": "boom",
        }

    @pytest.mark.asyncio
    async def test_resolver_exception_becomes_500(self, upstream):
        """Failures while resolving are also converted."""

        def resolve():
            raise ValueError("bad path")

        response = await relay(upstream, resolve)

        assert response.status_code == 500
        assert json.loads(response.body)["details"] == "bad path"
        upstream.fetch_json.assert_not_called()
