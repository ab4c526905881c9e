"""
City Explorer Backend — Upstream Client & Provider Tests
==========================================================

What:  Tests for HttpUpstreamClient error translation and the provider
       request builders.
How:   httpx.MockTransport answers requests in-process; no network.

What we test:
    ✅ 2xx JSON body is returned decoded
    ✅ Non-2xx, timeouts, connection errors → UpstreamUnavailableError
    ✅ Non-JSON body → MalformedPayloadError
    ✅ Each provider sends its key the way that API expects
    ✅ Geocoder in-body error statuses are rejected
"""

import httpx
import pytest

from city_explorer.exceptions import MalformedPayloadError, UpstreamUnavailableError
from city_explorer.services import providers
from city_explorer.services.upstream import HttpUpstreamClient
from conftest import FakeUpstream


def client_for(handler) -> HttpUpstreamClient:
    return HttpUpstreamClient(timeout=1.0, transport=httpx.MockTransport(handler))


class TestHttpUpstreamClient:

    @pytest.mark.asyncio
    async def test_json_body_is_returned(self):
        client = client_for(lambda request: httpx.Response(200, json={"ok": True}))
        assert await client.fetch("https://api.example.test/x", provider="test") == {"ok": True}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_query_params_and_headers_are_sent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["q"] = request.url.params["q"]
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=[])

        client = client_for(handler)
        await client.fetch(
            "https://api.example.test/search",
            provider="test",
            params={"q": "Seattle"},
            headers={"Authorization": "Bearer abc"},
        )
        await client.aclose()

        assert seen == {"q": "Seattle", "auth": "Bearer abc"}

    @pytest.mark.asyncio
    async def test_error_status_raises_upstream_unavailable(self):
        client = client_for(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.fetch("https://api.example.test/x", provider="weather")
        await client.aclose()

        assert exc_info.value.status_code == 503
        assert exc_info.value.provider == "weather"

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = client_for(handler)
        with pytest.raises(UpstreamUnavailableError, match="did not respond in time"):
            await client.fetch("https://api.example.test/x", provider="yelp")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_raises_upstream_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = client_for(handler)
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.fetch("https://api.example.test/x", provider="trails")
        await client.aclose()

        assert exc_info.value.context["error_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_non_json_body_raises_malformed_payload(self):
        client = client_for(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(MalformedPayloadError):
            await client.fetch("https://api.example.test/x", provider="moviedb")
        await client.aclose()


class TestProviders:

    @pytest.mark.asyncio
    async def test_weather_key_and_coordinates_in_path(self):
        upstream = FakeUpstream()
        await providers.fetch_weather(upstream, 47.6, -122.3)

        provider, url, params, _ = upstream.calls[0]
        assert provider == "weather"
        assert url.endswith("/test-key-not-real/47.6,-122.3")
        assert params == {}

    @pytest.mark.asyncio
    async def test_yelp_uses_bearer_token(self):
        upstream = FakeUpstream()
        await providers.fetch_restaurants(upstream, 47.6, -122.3)

        _, _, params, headers = upstream.calls[0]
        assert params == {"term": "restaurants", "latitude": 47.6, "longitude": -122.3}
        assert headers == {"Authorization": "Bearer test-key-not-real"}

    @pytest.mark.asyncio
    async def test_movies_search_by_query(self):
        upstream = FakeUpstream()
        await providers.fetch_movies(upstream, "Seattle")

        _, _, params, _ = upstream.calls[0]
        assert params == {"query": "Seattle", "api_key": "test-key-not-real"}

    @pytest.mark.asyncio
    async def test_meetups_and_trails_send_coordinates(self):
        upstream = FakeUpstream()
        await providers.fetch_meetups(upstream, 47.6, -122.3)
        await providers.fetch_trails(upstream, 47.6, -122.3)

        assert upstream.calls[0][2] == {"latitude": 47.6, "longitude": -122.3, "key": "test-key-not-real"}
        assert upstream.calls[1][2] == {"lat": 47.6, "lon": -122.3, "key": "test-key-not-real"}

    @pytest.mark.asyncio
    async def test_geocode_rejects_error_status(self):
        upstream = FakeUpstream({"geocode": {"status": "REQUEST_DENIED", "results": []}})
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await providers.geocode(upstream, "Seattle")
        assert exc_info.value.context["geocode_status"] == "REQUEST_DENIED"

    @pytest.mark.asyncio
    async def test_geocode_passes_zero_results_through(self):
        payload = {"status": "ZERO_RESULTS", "results": []}
        upstream = FakeUpstream({"geocode": payload})
        assert await providers.geocode(upstream, "Nowhereville") == payload
