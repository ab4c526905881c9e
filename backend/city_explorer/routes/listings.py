"""
City Explorer Backend — Uncached Listing Routes
=================================================

What:  GET /movies, GET /meetups, GET /trails
Why:   These results are fetched and reshaped on every request; they never
       touch the cache store.

    /movies   needs data.search_query (TMDB searches titles by the place name)
    /meetups  needs data.latitude/longitude (or a search_query to resolve)
    /trails   needs data.latitude/longitude (or a search_query to resolve)
"""

from typing import List

from fastapi import APIRouter, Depends

from city_explorer.dependencies import get_explorer_service
from city_explorer.routes.params import location_query
from city_explorer.schemas.explorer import (
    ErrorResponse,
    LocationQuery,
    MeetupRecord,
    MovieRecord,
    TrailRecord,
)
from city_explorer.services.explorer_service import ExplorerService

router = APIRouter(tags=["Listings"])

_ERRORS = {
    400: {"description": "No usable location reference", "model": ErrorResponse},
    502: {"description": "Provider unavailable", "model": ErrorResponse},
}


@router.get("/movies", response_model=List[MovieRecord], responses=_ERRORS,
            summary="Movies matching the location's search string")
async def get_movies(
    ref: LocationQuery = Depends(location_query),
    service: ExplorerService = Depends(get_explorer_service),
) -> List[MovieRecord]:
    return await service.get_movies(ref)


@router.get("/meetups", response_model=List[MeetupRecord], responses=_ERRORS,
            summary="Upcoming meetups near a location")
async def get_meetups(
    ref: LocationQuery = Depends(location_query),
    service: ExplorerService = Depends(get_explorer_service),
) -> List[MeetupRecord]:
    return await service.get_meetups(ref)


@router.get("/trails", response_model=List[TrailRecord], responses=_ERRORS,
            summary="Hiking trails near a location")
async def get_trails(
    ref: LocationQuery = Depends(location_query),
    service: ExplorerService = Depends(get_explorer_service),
) -> List[TrailRecord]:
    return await service.get_trails(ref)
