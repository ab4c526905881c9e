"""
City Explorer Backend — Normalizer Unit Tests
===============================================

What:  Tests for the pure functions that reshape upstream JSON into records.
How:   Canned payloads shaped like the real provider responses; no I/O.

What we test:
    ✅ Geocoder payload → location identity (first result wins)
    ✅ Zero geocoder results → NotFoundError
    ✅ Missing structural paths → MalformedPayloadError naming the path
    ✅ Display date formatting (weather, meetups)
    ✅ Optional fields missing → None
    ✅ Inputs are never mutated and repeated calls agree
"""

import copy

import pytest

from city_explorer.exceptions import MalformedPayloadError, NotFoundError
from city_explorer.services import normalizers
from conftest import FORECAST, HIKING_TRAILS, MEETUP_EVENTS, SEATTLE_GEOCODE, TMDB_SEARCH, YELP_SEARCH


class TestNormalizeLocation:

    def test_first_result_becomes_identity(self):
        record = normalizers.normalize_location("Seattle", SEATTLE_GEOCODE)
        assert record.search_query == "Seattle"
        assert record.formatted_query == "Seattle, WA, USA"
        assert record.latitude == pytest.approx(47.6062095)
        assert record.longitude == pytest.approx(-122.3320708)
        assert record.id is None

    def test_only_first_of_several_results_is_used(self):
        payload = copy.deepcopy(SEATTLE_GEOCODE)
        payload["results"].append(
            {"formatted_address": "Seattle, NY", "geometry": {"location": {"lat": 1.0, "lng": 2.0}}}
        )
        record = normalizers.normalize_location("Seattle", payload)
        assert record.formatted_query == "Seattle, WA, USA"

    def test_zero_results_raises_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            normalizers.normalize_location("Nowhereville", {"status": "ZERO_RESULTS", "results": []})
        assert exc_info.value.context["resource_id"] == "Nowhereville"

    def test_missing_geometry_names_the_path(self):
        payload = {"results": [{"formatted_address": "Somewhere"}]}
        with pytest.raises(MalformedPayloadError) as exc_info:
            normalizers.normalize_location("Somewhere", payload)
        assert exc_info.value.path == "results.0.geometry"

    def test_missing_results_key(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            normalizers.normalize_location("Seattle", {"status": "OK"})
        assert exc_info.value.path == "results"


class TestNormalizeWeather:

    def test_days_become_display_dated_forecasts(self):
        days = normalizers.extract_weather_days(FORECAST)
        records = [normalizers.normalize_weather(day) for day in days]
        assert [r.time for r in records] == ["Mon Jan 15 2024", "Tue Jan 16 2024"]
        assert records[0].forecast == "Light rain in the morning."

    def test_missing_summary_is_none(self):
        record = normalizers.normalize_weather({"time": 1705320000})
        assert record.forecast is None

    def test_missing_time_is_malformed(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            normalizers.normalize_weather({"summary": "Clear"})
        assert exc_info.value.path == "time"

    def test_missing_daily_data_is_malformed(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            normalizers.extract_weather_days({"currently": {}})
        assert exc_info.value.path == "daily"

    def test_display_date_is_fifteen_characters(self):
        assert normalizers.format_display_date(0) == "Thu Jan 01 1970"


class TestNormalizeRestaurant:

    def test_full_business(self):
        record = normalizers.normalize_restaurant(YELP_SEARCH["businesses"][0])
        assert record.name == "Pike Place Chowder"
        assert record.price == "$$"
        assert record.rating == 4.5
        assert record.image_url.endswith("chowder.jpg")

    def test_sparse_business_fills_none(self):
        record = normalizers.normalize_restaurant(YELP_SEARCH["businesses"][1])
        assert record.price is None
        assert record.rating is None
        assert record.image_url is None

    def test_non_object_item_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            normalizers.normalize_restaurant("not a business")


class TestUncachedKinds:

    def test_movie(self):
        record = normalizers.normalize_movie(normalizers.extract_movies(TMDB_SEARCH)[0])
        assert record.title == "Sleepless in Seattle"
        assert record.average_votes == 6.6
        assert record.total_votes == 1800
        assert record.released_on == "1993-06-24"
        assert record.image_url == "http://image.tmdb.org/t/p/w185/afkYP15OeUOD0tFEmj6VvejuOcz.jpg"

    def test_movie_without_poster(self):
        assert normalizers.normalize_movie({"title": "No Poster"}).image_url is None

    def test_meetup(self):
        record = normalizers.normalize_meetup(normalizers.extract_events(MEETUP_EVENTS)[0])
        assert record.host == "Seattle Python Users"
        assert record.name == "Monthly Python Night"
        assert record.creation_date == "Tue Nov 14 2023"

    def test_meetup_without_group(self):
        record = normalizers.normalize_meetup({"name": "Orphan event"})
        assert record.host is None
        assert record.creation_date is None

    def test_trail_splits_condition_timestamp(self):
        record = normalizers.normalize_trail(normalizers.extract_trails(HIKING_TRAILS)[0])
        assert record.trail_url == "https://www.hikingproject.com/trail/7011192"
        assert record.star_votes == 84
        assert record.conditions == "All Clear"
        assert record.condition_date == "2018-07-21"
        assert record.condition_time == "20:58:52"

    def test_trail_without_condition_date(self):
        record = normalizers.normalize_trail({"name": "Unknown"})
        assert record.condition_date is None
        assert record.condition_time is None


class TestNormalizeDispatch:

    def test_location_requires_search_query(self):
        with pytest.raises(ValueError):
            normalizers.normalize("location", SEATTLE_GEOCODE)

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown record kind"):
            normalizers.normalize("concert", {})

    def test_dispatch_matches_direct_call(self):
        business = YELP_SEARCH["businesses"][0]
        assert normalizers.normalize("restaurant", business) == normalizers.normalize_restaurant(business)

    @pytest.mark.parametrize(
        "kind, raw",
        [
            ("weather", FORECAST["daily"]["data"][0]),
            ("movie", TMDB_SEARCH["results"][0]),
            ("meetup", MEETUP_EVENTS["events"][0]),
            ("trail", HIKING_TRAILS["trails"][0]),
        ],
    )
    def test_pure_and_repeatable(self, kind, raw):
        before = copy.deepcopy(raw)
        first = normalizers.normalize(kind, raw)
        second = normalizers.normalize(kind, raw)
        assert first == second
        assert raw == before
