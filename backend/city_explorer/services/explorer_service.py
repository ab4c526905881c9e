"""
City Explorer Backend — Explorer Service (Request Orchestrator)
=================================================================

What:  Turns a browser's location reference into data for one endpoint.
Why:   Keeps route handlers thin; all identity resolution, cache use and
       provider calls live here and can be tested without HTTP.
How:   Composes the CacheCoordinator (cached kinds), the providers
       (outbound requests) and the normalizers (reshaping).

Flow for a cached kind (GET /weather, GET /yelp):
    ┌──────────────┐    ┌──────────────────┐    ┌───────────────────┐
    │  identity    │───▶│ coordinator      │───▶│ provider +        │
    │ (id + lat/lng│    │ .resolve(kind,   │    │ normalizer        │
    │  or geocode) │    │   location_id)   │    │ (only on miss)    │
    └──────────────┘    └──────────────────┘    └───────────────────┘

Uncached kinds (movies, meetups, trails) skip the coordinator and call the
provider on every request.

Identity rules:
    - A reference with an id and coordinates is used as-is. On a cache miss
      the id must name a stored location (else NotFoundError), and the
      provider is called with the stored coordinates.
    - Otherwise a search_query resolves (or creates) the identity through
      the coordinator with kind=location.
    - A reference with neither raises ValidationError.
"""

import logging
from typing import List, Optional

from city_explorer.exceptions import NotFoundError, ValidationError
from city_explorer.schemas.explorer import (
    LocationQuery,
    LocationRecord,
    MeetupRecord,
    MovieRecord,
    RestaurantRecord,
    TrailRecord,
    WeatherRecord,
)
from city_explorer.services import normalizers, providers
from city_explorer.services.cache import CacheCoordinator
from city_explorer.services.cache_base import CacheKind
from city_explorer.services.cache_kinds import LOCATION, RESTAURANT, WEATHER
from city_explorer.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

# Width of locations.search_query
MAX_SEARCH_QUERY_LENGTH = 255


def normalize_search_query(raw: Optional[str]) -> str:
    """Trim and collapse whitespace; case is kept so the echoed query matches what was typed."""
    return " ".join((raw or "").split())


class ExplorerService:
    """
    Business logic for every data endpoint.

    Dependencies are injected so tests can pass an in-memory store and a
    fake upstream client. The production instance is built in
    `city_explorer.dependencies`.
    """

    def __init__(
        self,
        coordinator: CacheCoordinator,
        upstream: UpstreamClient,
        location_kind: CacheKind = LOCATION,
        weather_kind: CacheKind = WEATHER,
        restaurant_kind: CacheKind = RESTAURANT,
    ):
        self.coordinator = coordinator
        self.upstream = upstream
        self.location_kind = location_kind
        self.weather_kind = weather_kind
        self.restaurant_kind = restaurant_kind

    # ── Location Identity ─────────────────────────────────────────────────

    async def resolve_location(self, search_query: Optional[str]) -> LocationRecord:
        """
        Return the stored identity for a search string, geocoding it on first use.

        Raises:
            ValidationError: empty or over-long search string
            NotFoundError:   geocoder found nothing
        """
        query = normalize_search_query(search_query)
        if not query:
            raise ValidationError(message="A search query is required", field="data")
        if len(query) > MAX_SEARCH_QUERY_LENGTH:
            raise ValidationError(
                message=f"Search query must be at most {MAX_SEARCH_QUERY_LENGTH} characters",
                field="data",
            )

        async def refresh() -> List[LocationRecord]:
            payload = await providers.geocode(self.upstream, query)
            return [normalizers.normalize_location(query, payload)]

        records = await self.coordinator.resolve(self.location_kind, query, refresh)
        return records[0]

    async def identify(self, ref: LocationQuery) -> LocationQuery:
        """Ensure the reference has an id and coordinates, resolving it when needed."""
        if ref.id is not None and ref.has_coordinates:
            return ref
        if ref.search_query:
            location = await self.resolve_location(ref.search_query)
            return LocationQuery(**location.model_dump())
        raise ValidationError(
            message="A location id with latitude/longitude, or a search_query, is required",
            field="data",
        )

    async def coordinates(self, ref: LocationQuery) -> LocationQuery:
        """Ensure the reference has coordinates (an id is not needed)."""
        if ref.has_coordinates:
            return ref
        if ref.search_query:
            location = await self.resolve_location(ref.search_query)
            return LocationQuery(**location.model_dump())
        raise ValidationError(
            message="latitude and longitude, or a search_query, are required",
            field="data",
        )

    # ── Cached Kinds ──────────────────────────────────────────────────────

    async def _stored_location(self, location_id: int) -> LocationRecord:
        """The stored identity for a client-supplied id; unknown ids are 404s."""
        location = await self.coordinator.store.get(self.location_kind, location_id)
        if location is None:
            raise NotFoundError(resource="location", resource_id=str(location_id))
        return location

    async def get_weather(self, ref: LocationQuery) -> List[WeatherRecord]:
        location = await self.identify(ref)

        async def refresh() -> List[WeatherRecord]:
            # Unknown ids fail here, before any provider call
            stored = await self._stored_location(location.id)
            payload = await providers.fetch_weather(self.upstream, stored.latitude, stored.longitude)
            return [normalizers.normalize_weather(day) for day in normalizers.extract_weather_days(payload)]

        return await self.coordinator.resolve(self.weather_kind, location.id, refresh)

    async def get_restaurants(self, ref: LocationQuery) -> List[RestaurantRecord]:
        location = await self.identify(ref)

        async def refresh() -> List[RestaurantRecord]:
            stored = await self._stored_location(location.id)
            payload = await providers.fetch_restaurants(self.upstream, stored.latitude, stored.longitude)
            return [normalizers.normalize_restaurant(b) for b in normalizers.extract_businesses(payload)]

        return await self.coordinator.resolve(self.restaurant_kind, location.id, refresh)

    # ── Uncached Kinds ────────────────────────────────────────────────────

    async def get_movies(self, ref: LocationQuery) -> List[MovieRecord]:
        query = normalize_search_query(ref.search_query)
        if not query:
            raise ValidationError(message="A search_query is required", field="data")
        payload = await providers.fetch_movies(self.upstream, query)
        return [normalizers.normalize_movie(m) for m in normalizers.extract_movies(payload)]

    async def get_meetups(self, ref: LocationQuery) -> List[MeetupRecord]:
        location = await self.coordinates(ref)
        payload = await providers.fetch_meetups(self.upstream, location.latitude, location.longitude)
        return [normalizers.normalize_meetup(e) for e in normalizers.extract_events(payload)]

    async def get_trails(self, ref: LocationQuery) -> List[TrailRecord]:
        location = await self.coordinates(ref)
        payload = await providers.fetch_trails(self.upstream, location.latitude, location.longitude)
        return [normalizers.normalize_trail(t) for t in normalizers.extract_trails(payload)]
