"""
City Explorer Backend — Weather Route Handler
===============================================

What:  GET /weather?data={id, latitude, longitude}
How:   Daily forecasts are cached per location id and refreshed once the
       oldest cached day is older than WEATHER_MAX_AGE_MINUTES.
"""

from typing import List

from fastapi import APIRouter, Depends

from city_explorer.dependencies import get_explorer_service
from city_explorer.routes.params import location_query
from city_explorer.schemas.explorer import ErrorResponse, LocationQuery, WeatherRecord
from city_explorer.services.explorer_service import ExplorerService

router = APIRouter(tags=["Weather"])


@router.get(
    "/weather",
    response_model=List[WeatherRecord],
    responses={
        400: {"description": "No usable location reference", "model": ErrorResponse},
        502: {"description": "Weather provider unavailable", "model": ErrorResponse},
    },
    summary="Daily forecast for a location",
)
async def get_weather(
    ref: LocationQuery = Depends(location_query),
    service: ExplorerService = Depends(get_explorer_service),
) -> List[WeatherRecord]:
    return await service.get_weather(ref)
