"""
City Explorer Backend — Location Route Handler
================================================

What:  GET /location?data=<search string>
Why:   First call the frontend makes; the returned id, latitude and longitude
       are sent back as `data` on every other endpoint.
How:   Resolves through the location cache. A search string is geocoded once;
       later requests for the same string are served from the store.
"""

from fastapi import APIRouter, Depends

from city_explorer.dependencies import get_explorer_service
from city_explorer.routes.params import location_query
from city_explorer.schemas.explorer import ErrorResponse, LocationQuery, LocationRecord
from city_explorer.services.explorer_service import ExplorerService


router = APIRouter(tags=["Location"])


@router.get(
    "/location",
    response_model=LocationRecord,
    responses={
        400: {"description": "Missing search string", "model": ErrorResponse},
        404: {"description": "Geocoder found no match", "model": ErrorResponse},
        502: {"description": "Geocoder unavailable", "model": ErrorResponse},
    },
    summary="Resolve a search string to a location identity",
)
async def get_location(
    ref: LocationQuery = Depends(location_query),
    service: ExplorerService = Depends(get_explorer_service),
) -> LocationRecord:
    return await service.resolve_location(ref.search_query)
