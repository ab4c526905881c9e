"""
City Explorer Backend — Record Normalizers
============================================

What:  Pure functions that reshape raw upstream JSON into normalized records.
Why:   Downstream code (cache store, routes, the frontend) only ever sees the
       stable record schemas, never a provider's JSON shape.
How:   One function per data kind, plus `normalize(kind, raw_item)` as a
       single entry point. No I/O, no clock reads (except the local timezone
       used to render dates), no mutation of the input.

Failure Policy:
    - Optional fields that are missing map to None.
    - A missing required structural path (the first geocoding result, a
      forecast's `daily.data`, a forecast day's `time`) raises
      MalformedPayloadError naming the path.
    - A geocoder response with zero results raises NotFoundError.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from city_explorer.exceptions import MalformedPayloadError, NotFoundError
from city_explorer.schemas.explorer import (
    LocationRecord,
    MeetupRecord,
    MovieRecord,
    RestaurantRecord,
    TrailRecord,
    WeatherRecord,
)

# The frontend renders JavaScript's Date.toString() cut to 15 characters,
# e.g. "Mon Jan 15 2024 12:00:00 GMT-0800 (PST)" → "Mon Jan 15 2024".
DISPLAY_DATE_LENGTH = 15

TMDB_POSTER_BASE = "http://image.tmdb.org/t/p/w185/"


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

def _require(payload: Any, *path: Any) -> Any:
    """Walk `path` through nested dicts/lists, raising MalformedPayloadError on a gap."""
    current = payload
    walked: List[str] = []
    for step in path:
        walked.append(str(step))
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            raise MalformedPayloadError(path=".".join(walked))
        if current is None:
            raise MalformedPayloadError(path=".".join(walked))
    return current


def _require_list(payload: Any, *path: Any) -> List[Any]:
    value = _require(payload, *path)
    if not isinstance(value, list):
        raise MalformedPayloadError(path=".".join(str(p) for p in path))
    return value


def _as_mapping(item: Any, kind: str) -> Dict[str, Any]:
    if not isinstance(item, dict):
        raise MalformedPayloadError(
            message=f"Unexpected {kind} item in upstream payload",
            context={"item_type": type(item).__name__},
        )
    return item


def format_display_date(epoch_seconds: float) -> str:
    """Render a Unix timestamp in local time the way the frontend expects."""
    full = datetime.fromtimestamp(epoch_seconds).strftime("%a %b %d %Y %H:%M:%S")
    return full[:DISPLAY_DATE_LENGTH]


# ══════════════════════════════════════════════════════════════════════════
# Cached Kinds
# ══════════════════════════════════════════════════════════════════════════

def normalize_location(search_query: str, payload: Any) -> LocationRecord:
    """
    Reshape a Google Geocoding response into a location identity.

    Only the first result is used; the geocoder orders results by relevance.
    The returned record has no id yet, the store assigns one on insert.
    """
    results = _require_list(payload, "results")
    if not results:
        raise NotFoundError(resource="location", resource_id=search_query)

    first = _as_mapping(results[0], "location")
    return LocationRecord(
        search_query=search_query,
        formatted_query=first.get("formatted_address"),
        latitude=_require(payload, "results", 0, "geometry", "location", "lat"),
        longitude=_require(payload, "results", 0, "geometry", "location", "lng"),
    )


def extract_weather_days(payload: Any) -> List[Any]:
    """Daily forecast entries from a Dark Sky response (`daily.data`)."""
    return _require_list(payload, "daily", "data")


def normalize_weather(day: Any) -> WeatherRecord:
    day = _as_mapping(day, "weather")
    return WeatherRecord(
        forecast=day.get("summary"),
        time=format_display_date(_require(day, "time")),
    )


def extract_businesses(payload: Any) -> List[Any]:
    """Business entries from a Yelp search response."""
    return _require_list(payload, "businesses")


def normalize_restaurant(business: Any) -> RestaurantRecord:
    business = _as_mapping(business, "restaurant")
    return RestaurantRecord(
        name=business.get("name"),
        image_url=business.get("image_url"),
        price=business.get("price"),
        rating=business.get("rating"),
        url=business.get("url"),
    )


# ══════════════════════════════════════════════════════════════════════════
# Uncached Kinds
# ══════════════════════════════════════════════════════════════════════════

def extract_movies(payload: Any) -> List[Any]:
    return _require_list(payload, "results")


def normalize_movie(movie: Any) -> MovieRecord:
    movie = _as_mapping(movie, "movie")
    poster = movie.get("poster_path")
    return MovieRecord(
        title=movie.get("title"),
        overview=movie.get("overview"),
        average_votes=movie.get("vote_average"),
        total_votes=movie.get("vote_count"),
        image_url=f"{TMDB_POSTER_BASE}{poster.lstrip('/')}" if poster else None,
        popularity=movie.get("popularity"),
        released_on=movie.get("release_date"),
    )


def extract_events(payload: Any) -> List[Any]:
    return _require_list(payload, "events")


def normalize_meetup(event: Any) -> MeetupRecord:
    event = _as_mapping(event, "meetup")
    group = event.get("group") or {}
    created = event.get("created")
    return MeetupRecord(
        link=event.get("link"),
        name=event.get("name"),
        host=group.get("name") if isinstance(group, dict) else None,
        # Meetup timestamps are epoch milliseconds
        creation_date=format_display_date(created / 1000) if created is not None else None,
    )


def extract_trails(payload: Any) -> List[Any]:
    return _require_list(payload, "trails")


def normalize_trail(trail: Any) -> TrailRecord:
    trail = _as_mapping(trail, "trail")
    # conditionDate looks like "2018-07-21 20:58:52"
    condition_date, _, condition_time = (trail.get("conditionDate") or "").partition(" ")
    return TrailRecord(
        trail_url=trail.get("url"),
        name=trail.get("name"),
        location=trail.get("location"),
        length=trail.get("length"),
        stars=trail.get("stars"),
        star_votes=trail.get("starVotes"),
        summary=trail.get("summary"),
        conditions=trail.get("conditionStatus"),
        condition_date=condition_date or None,
        condition_time=condition_time or None,
    )


# ══════════════════════════════════════════════════════════════════════════
# Entry Point
# ══════════════════════════════════════════════════════════════════════════

_ITEM_NORMALIZERS: Dict[str, Callable[[Any], BaseModel]] = {
    "weather": normalize_weather,
    "restaurant": normalize_restaurant,
    "movie": normalize_movie,
    "meetup": normalize_meetup,
    "trail": normalize_trail,
}


def normalize(kind: str, raw_item: Any, search_query: Optional[str] = None) -> BaseModel:
    """
    Normalize one raw upstream item of the given kind.

    For kind "location" the raw item is the whole geocoder payload and
    `search_query` is required; every other kind takes a single list item.
    """
    if kind == "location":
        if search_query is None:
            raise ValueError("search_query is required to normalize a location")
        return normalize_location(search_query, raw_item)
    try:
        normalizer = _ITEM_NORMALIZERS[kind]
    except KeyError:
        raise ValueError(f"Unknown record kind '{kind}'")
    return normalizer(raw_item)
