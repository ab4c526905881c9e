"""
City Explorer Backend — Restaurant Route Handler
==================================================

What:  GET /yelp?data={id, latitude, longitude}
How:   Yelp results are cached per location id and refreshed once the oldest
       cached row is older than RESTAURANT_MAX_AGE_MINUTES.
"""

from typing import List

from fastapi import APIRouter, Depends

from city_explorer.dependencies import get_explorer_service
from city_explorer.routes.params import location_query
from city_explorer.schemas.explorer import ErrorResponse, LocationQuery, RestaurantRecord
from city_explorer.services.explorer_service import ExplorerService

router = APIRouter(tags=["Restaurants"])


@router.get(
    "/yelp",
    response_model=List[RestaurantRecord],
    responses={
        400: {"description": "No usable location reference", "model": ErrorResponse},
        502: {"description": "Yelp unavailable", "model": ErrorResponse},
    },
    summary="Restaurants near a location",
)
async def get_restaurants(
    ref: LocationQuery = Depends(location_query),
    service: ExplorerService = Depends(get_explorer_service),
) -> List[RestaurantRecord]:
    return await service.get_restaurants(ref)
