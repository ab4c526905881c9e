"""
City Explorer Backend — Pydantic Record & Request Schemas
===========================================================

What:  Normalized record types returned to the browser, plus the location
       reference the browser sends back on follow-up requests.
Why:   Upstream APIs change their JSON shapes; these models are the stable
       internal schema the frontend is written against.
How:   Normalizers build records from raw payloads. The cache store builds the
       same records from ORM rows (`from_attributes`), so a cache hit and a
       fresh fetch serialize identically.

Field names follow the original public contract (snake_case, e.g.
`formatted_query`, `image_url`) and must not be renamed.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Cached Records
# ══════════════════════════════════════════════════════════════════════════


class LocationRecord(BaseModel):
    """
    What:  A resolved place. Returned by GET /location.
    Why id is optional: a freshly normalized geocoder result has no id until
           the store inserts it; everything returned to the client has one.
    """
    search_query: str = Field(description="Normalized search string")
    formatted_query: Optional[str] = Field(default=None, description="Geocoder formatted address")
    latitude: float
    longitude: float
    id: Optional[int] = Field(default=None, description="Location identity, sent back on follow-up requests")

    model_config = {"from_attributes": True}


class WeatherRecord(BaseModel):
    """One day of forecast. `time` is a display date like 'Mon Jan 15 2024'."""
    forecast: Optional[str] = None
    time: str

    model_config = {"from_attributes": True}


class RestaurantRecord(BaseModel):
    name: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None
    url: Optional[str] = None

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Uncached Records (fetched and reshaped on every request)
# ══════════════════════════════════════════════════════════════════════════


class MovieRecord(BaseModel):
    title: Optional[str] = None
    overview: Optional[str] = None
    average_votes: Optional[float] = None
    total_votes: Optional[int] = None
    image_url: Optional[str] = None
    popularity: Optional[float] = None
    released_on: Optional[str] = None


class MeetupRecord(BaseModel):
    link: Optional[str] = None
    name: Optional[str] = None
    host: Optional[str] = None
    creation_date: Optional[str] = None


class TrailRecord(BaseModel):
    trail_url: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    length: Optional[float] = None
    stars: Optional[float] = None
    star_votes: Optional[int] = None
    summary: Optional[str] = None
    conditions: Optional[str] = None
    condition_date: Optional[str] = None
    condition_time: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Request Model: the `data` query parameter
# ══════════════════════════════════════════════════════════════════════════


class LocationQuery(BaseModel):
    """
    What:  The location object the frontend echoes back as `data`.
    Who:   Parsed by routes.params from `data[...]` keys or a JSON `data` value.

    Every field is optional here; each endpoint decides which ones it needs
    (weather/yelp need an id or a search_query, meetups/trails need
    coordinates or a search_query, movies need a search_query).
    """
    id: Optional[int] = None
    search_query: Optional[str] = None
    formatted_query: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = {"extra": "ignore"}

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Responses
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "upstream_unavailable",
            "message": "Sorry, something went wrong",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancer and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
