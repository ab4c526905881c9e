"""
City Explorer Backend — Upstream HTTP Client
==============================================

What:  The single capability for outbound calls to third-party APIs.
Why:   Every provider call (geocoding, weather, Yelp, TMDB, Meetup, Hiking
       Project) goes through one `fetch()` so timeouts, status handling, and
       error translation are uniform, and tests can swap in a fake.
How:   `UpstreamClient` is the abstract contract; `HttpUpstreamClient`
       implements it over a shared `httpx.AsyncClient`.

Contract:
    fetch(url, provider=..., params=..., headers=...) → decoded JSON body

    Raises:
        UpstreamUnavailableError: network error, timeout, or non-2xx status
        MalformedPayloadError:    2xx response whose body is not JSON

    There is no retry. One failed call fails the request that made it.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import httpx

from city_explorer.config import settings
from city_explorer.exceptions import MalformedPayloadError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


class UpstreamClient(ABC):
    """Abstract interface for one outbound GET returning a JSON payload."""

    @abstractmethod
    async def fetch(
        self,
        url: str,
        *,
        provider: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """
        Perform a single GET request and return the decoded JSON body.

        Args:
            url:      Absolute URL of the provider endpoint.
            provider: Short provider name for logs and error context
                      (never the URL, which may embed an API key).
            params:   Query string parameters.
            headers:  Extra request headers (e.g. Authorization).
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections. Called once at shutdown."""
        return None


class HttpUpstreamClient(UpstreamClient):
    """
    httpx-backed upstream client.

    One AsyncClient is shared by all requests so keep-alive connections to
    each provider are reused. The timeout applies to every phase (connect,
    read, write, pool) and surfaces as UpstreamUnavailableError.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def fetch(
        self,
        url: str,
        *,
        provider: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        start_time = time.perf_counter()
        try:
            response = await self._client.get(url, params=params, headers=headers)
        except httpx.TimeoutException:
            logger.warning("%s request timed out after %.1fs", provider, self.timeout)
            raise UpstreamUnavailableError(
                message=f"The {provider} service did not respond in time",
                provider=provider,
                context={"timeout_seconds": self.timeout},
            )
        except httpx.HTTPError as e:
            logger.warning("%s request failed: %s", provider, type(e).__name__)
            raise UpstreamUnavailableError(
                message=f"The {provider} service could not be reached",
                provider=provider,
                context={"error_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            logger.warning(
                "%s responded %d in %.0fms", provider, response.status_code, duration_ms
            )
            raise UpstreamUnavailableError(
                message=f"The {provider} service returned an error",
                provider=provider,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            raise MalformedPayloadError(
                message=f"The {provider} service returned a non-JSON response",
                context={"provider": provider},
            )

        logger.debug("%s responded %d in %.0fms", provider, response.status_code, duration_ms)
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()


upstream_client = HttpUpstreamClient()
