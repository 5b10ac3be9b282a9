"""WaterWise — Weather & Global Statistics Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from waterwise.api.dependencies import (
    get_open_meteo_client,
    get_preferences,
    get_world_bank_client,
)
from waterwise.connectors.open_meteo.client import OpenMeteoClient, weather_description
from waterwise.connectors.world_bank.client import WorldBankClient
from waterwise.core.errors import NetworkError
from waterwise.models.records import UserPreferences
from waterwise.core.logging import get_logger

logger = get_logger("api.external")

router = APIRouter(tags=["Weather & Statistics"])


def _upstream_failed(what: str, e: NetworkError) -> HTTPException:
    logger.error(f"{what} failed: {e}")
    return HTTPException(status_code=502, detail=f"{what} failed: {e}")


@router.get("/weather/current")
async def current_weather(
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    client: OpenMeteoClient = Depends(get_open_meteo_client),
    preferences: UserPreferences = Depends(get_preferences),
):
    """Current conditions, defaulting to the saved location."""
    lat = latitude if latitude is not None else preferences.latitude
    lon = longitude if longitude is not None else preferences.longitude
    try:
        reading = await client.fetch_current_conditions(lat, lon)
    except NetworkError as e:
        raise _upstream_failed("Weather lookup", e)
    return {
        "weather": reading,
        "description": weather_description(reading.condition_code),
    }


@router.get("/weather/drought")
async def drought_indicator(
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    days: int = Query(30, ge=1, le=92),
    client: OpenMeteoClient = Depends(get_open_meteo_client),
    preferences: UserPreferences = Depends(get_preferences),
):
    lat = latitude if latitude is not None else preferences.latitude
    lon = longitude if longitude is not None else preferences.longitude
    try:
        return await client.fetch_drought_indicator(lat, lon, days)
    except NetworkError as e:
        raise _upstream_failed("Drought indicator", e)


@router.get("/stats/country/{country_code}")
async def country_water_stats(
    country_code: str,
    client: WorldBankClient = Depends(get_world_bank_client),
):
    """Latest value of every water indicator for a country."""
    try:
        stats = await client.fetch_country_water_stats(country_code.upper())
    except NetworkError as e:
        raise _upstream_failed("Country statistics", e)
    return {"country": country_code.upper(), "indicators": stats}


@router.get("/stats/top-consumers")
async def top_water_consumers(
    limit: int = Query(10, ge=1, le=50),
    year: Optional[str] = Query(None, pattern=r"^\d{4}$"),
    client: WorldBankClient = Depends(get_world_bank_client),
):
    try:
        return await client.fetch_top_water_consumers(limit, year)
    except NetworkError as e:
        raise _upstream_failed("Top consumers", e)
