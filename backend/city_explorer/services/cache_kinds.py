"""
City Explorer Backend — Cached Kind Registry
=============================================

What:  The three CacheKind configurations the coordinator runs with.
How:   Staleness thresholds come from settings so operators can tune them
       per kind (WEATHER_MAX_AGE_MINUTES, RESTAURANT_MAX_AGE_MINUTES).
"""

from city_explorer.config import settings
from city_explorer.models.location import Location
from city_explorer.models.restaurant import Restaurant
from city_explorer.models.weather import Weather
from city_explorer.schemas.explorer import LocationRecord, RestaurantRecord, WeatherRecord
from city_explorer.services.cache_base import CacheKind

# Keyed by search string; identities never go stale
LOCATION = CacheKind(
    name="location",
    model=Location,
    record_type=LocationRecord,
    key_column="search_query",
    max_age_minutes=None,
    insert_or_ignore=True,
)

WEATHER = CacheKind(
    name="weather",
    model=Weather,
    record_type=WeatherRecord,
    key_column="location_id",
    max_age_minutes=settings.max_age_minutes("weather"),
)

RESTAURANT = CacheKind(
    name="restaurant",
    model=Restaurant,
    record_type=RestaurantRecord,
    key_column="location_id",
    max_age_minutes=settings.max_age_minutes("restaurant"),
)
