"""WaterWise — Open-Meteo Weather Client.

Current conditions, historical daily climate and a drought indicator.
Responses are cached in the local store when a ``CacheStore`` is supplied.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from waterwise.config import settings
from waterwise.connectors.base import WeatherClient
from waterwise.connectors.http_client import JSONAPIClient
from waterwise.models.analysis_models import (
    ClimateData,
    DroughtIndicator,
    WeatherReading,
)
from waterwise.repositories.cache import CacheStore
from waterwise.core.logging import get_logger

logger = get_logger("connectors.open_meteo")

CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,precipitation,wind_speed_10m,weather_code"
)
DAILY_FIELDS = "precipitation_sum,temperature_2m_mean"
DROUGHT_THRESHOLD_MM = 1.5  # Average daily rainfall below this is a drought risk

# WMO weather interpretation codes
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def weather_description(code: int) -> str:
    """Human readable label for a WMO weather code."""
    return WEATHER_CODES.get(code, "Unknown")


class OpenMeteoClient(JSONAPIClient, WeatherClient):
    """Async client for the Open-Meteo forecast API."""

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs,
    ):
        super().__init__(
            base_url or settings.open_meteo_base_url, transport=transport, **kwargs
        )
        self.cache = cache

    def _error_reason(self, response: httpx.Response) -> str:
        try:
            return response.json().get("reason", "")
        except ValueError:
            return ""

    # ── Current Conditions ──

    async def fetch_current_conditions(
        self, latitude: float, longitude: float, use_cache: bool = True
    ) -> WeatherReading:
        cache_key = f"weather_{latitude}_{longitude}"
        if use_cache and self.cache:
            cached = self.cache.get(cache_key, settings.weather_cache_ttl_minutes)
            if cached:
                return WeatherReading(**cached)

        data = await self._get_json(
            "/forecast",
            {
                "latitude": latitude,
                "longitude": longitude,
                "current": CURRENT_FIELDS,
                "timezone": "auto",
            },
        )
        current = data.get("current", {})
        reading = WeatherReading(
            latitude=latitude,
            longitude=longitude,
            temperature_c=current.get("temperature_2m") or 0.0,
            humidity_pct=current.get("relative_humidity_2m") or 0.0,
            precipitation_mm=current.get("precipitation") or 0.0,
            wind_speed=current.get("wind_speed_10m") or 0.0,
            condition_code=current.get("weather_code") or 0,
        )
        logger.info(
            f"Weather at {latitude},{longitude}: {reading.temperature_c}°C, "
            f"{reading.precipitation_mm}mm ({weather_description(reading.condition_code)})"
        )

        if self.cache:
            self.cache.set(cache_key, reading.model_dump())
        return reading

    # ── Historical Climate ──

    async def fetch_historical_climate(
        self,
        latitude: float,
        longitude: float,
        start_date: str,
        end_date: str,
        use_cache: bool = True,
    ) -> ClimateData:
        cache_key = f"climate_{latitude}_{longitude}_{start_date}_{end_date}"
        if use_cache and self.cache:
            cached = self.cache.get(cache_key, settings.climate_cache_ttl_minutes)
            if cached:
                return ClimateData(**cached)

        data = await self._get_json(
            "/forecast",
            {
                "latitude": latitude,
                "longitude": longitude,
                "start_date": start_date,
                "end_date": end_date,
                "daily": DAILY_FIELDS,
                "timezone": "auto",
            },
        )
        daily = data.get("daily", {})
        climate = ClimateData(
            latitude=latitude,
            longitude=longitude,
            daily_rainfall=daily.get("precipitation_sum", []),
            daily_temperature=daily.get("temperature_2m_mean", []),
            dates=daily.get("time", []),
        )

        if self.cache:
            self.cache.set(cache_key, climate.model_dump())
        return climate

    # ── Drought Indicator ──

    async def fetch_drought_indicator(
        self,
        latitude: float,
        longitude: float,
        days: int = 30,
        use_cache: bool = True,
    ) -> DroughtIndicator:
        """Average daily rainfall over the last ``days`` days."""
        cache_key = f"drought_{latitude}_{longitude}_{days}"
        if use_cache and self.cache:
            cached = self.cache.get(cache_key, settings.drought_cache_ttl_minutes)
            if cached:
                return DroughtIndicator(**cached)

        today = datetime.now(timezone.utc).date()
        start = (today - timedelta(days=days)).isoformat()
        climate = await self.fetch_historical_climate(
            latitude, longitude, start, today.isoformat(), use_cache
        )

        rainfall = [r for r in climate.daily_rainfall if r is not None]
        avg = sum(rainfall) / len(rainfall) if rainfall else 0.0
        indicator = DroughtIndicator(
            avg_precipitation=avg,
            is_drought_risk=avg < DROUGHT_THRESHOLD_MM,
        )

        if self.cache:
            self.cache.set(cache_key, indicator.model_dump())
        return indicator
