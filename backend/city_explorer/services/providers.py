"""
City Explorer Backend — Upstream Provider Requests
====================================================

What:  One function per third-party API, building its URL, query string, and
       auth headers from configuration, then calling the UpstreamClient.
Why:   Keeps provider quirks (Dark Sky's key-in-path, Yelp's bearer token,
       Google's in-body status codes) out of the service and cache layers.
Returns: the raw decoded JSON payload; reshaping is the normalizers' job.
"""

import logging
from typing import Any

from city_explorer.config import settings
from city_explorer.exceptions import UpstreamUnavailableError
from city_explorer.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

# Google reports errors with HTTP 200 and a status field in the body.
# ZERO_RESULTS is not an error here; the normalizer turns it into NotFoundError.
_GEOCODE_OK_STATUSES = {"OK", "ZERO_RESULTS"}


async def geocode(client: UpstreamClient, search_query: str) -> Any:
    payload = await client.fetch(
        settings.geocode_api_url,
        provider="geocode",
        params={"address": search_query, "key": settings.geocode_api_key},
    )
    status = payload.get("status") if isinstance(payload, dict) else None
    if status is not None and status not in _GEOCODE_OK_STATUSES:
        logger.warning("Geocoder rejected request with status %s", status)
        raise UpstreamUnavailableError(
            message="The geocode service rejected the request",
            provider="geocode",
            context={"geocode_status": status},
        )
    return payload


async def fetch_weather(client: UpstreamClient, latitude: float, longitude: float) -> Any:
    # Dark Sky takes the key and coordinates as path segments
    url = f"{settings.weather_api_url.rstrip('/')}/{settings.weather_api_key}/{latitude},{longitude}"
    return await client.fetch(url, provider="weather")


async def fetch_restaurants(client: UpstreamClient, latitude: float, longitude: float) -> Any:
    return await client.fetch(
        settings.yelp_api_url,
        provider="yelp",
        params={"term": "restaurants", "latitude": latitude, "longitude": longitude},
        headers={"Authorization": f"Bearer {settings.yelp_api_key}"},
    )


async def fetch_movies(client: UpstreamClient, search_query: str) -> Any:
    return await client.fetch(
        settings.moviedb_api_url,
        provider="moviedb",
        params={"query": search_query, "api_key": settings.moviedb_api_key},
    )


async def fetch_meetups(client: UpstreamClient, latitude: float, longitude: float) -> Any:
    return await client.fetch(
        settings.meetups_api_url,
        provider="meetups",
        params={"latitude": latitude, "longitude": longitude, "key": settings.meetups_api_key},
    )


async def fetch_trails(client: UpstreamClient, latitude: float, longitude: float) -> Any:
    return await client.fetch(
        settings.trails_api_url,
        provider="trails",
        params={"lat": latitude, "lon": longitude, "key": settings.trails_api_key},
    )
