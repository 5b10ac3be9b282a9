"""WaterWise — World Bank Water Statistics Client.

Reads water-related development indicators. The API returns a two element
array: paging metadata first, the data points second.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from waterwise.config import settings
from waterwise.connectors.http_client import JSONAPIClient
from waterwise.models.analysis_models import IndicatorDataPoint
from waterwise.repositories.cache import CacheStore
from waterwise.core.logging import get_logger

logger = get_logger("connectors.world_bank")

WATER_INDICATORS = {
    "FRESHWATER_WITHDRAWAL": "ER.H2O.FWTL.K3",  # Total, billion m³
    "AGRICULTURE_WITHDRAWAL": "ER.H2O.FWAG.K3",
    "INDUSTRIAL_WITHDRAWAL": "ER.H2O.FWIN.K3",
    "DOMESTIC_WITHDRAWAL": "ER.H2O.FWDM.K3",
    "BASIC_DRINKING_WATER": "SH.H2O.BASW.ZS",  # % of population
    "SAFE_DRINKING_WATER": "SH.H2O.SMDW.ZS",
}


def _to_data_point(raw: Dict[str, Any]) -> IndicatorDataPoint:
    indicator = raw.get("indicator") or {}
    country = raw.get("country") or {}
    return IndicatorDataPoint(
        indicator_id=indicator.get("id", ""),
        indicator_name=indicator.get("value", ""),
        country_id=country.get("id", ""),
        country_name=country.get("value", ""),
        countryiso3code=raw.get("countryiso3code", ""),
        date=str(raw.get("date", "")),
        value=raw["value"],
        unit=raw.get("unit", ""),
        decimal=raw.get("decimal") or 0,
    )


class WorldBankClient(JSONAPIClient):
    """Async client for the World Bank indicators API."""

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs,
    ):
        super().__init__(
            base_url or settings.world_bank_base_url, transport=transport, **kwargs
        )
        self.cache = cache

    def _error_reason(self, response: httpx.Response) -> str:
        try:
            body = response.json()
            return body[0]["message"][0]["value"]
        except (ValueError, LookupError, TypeError):
            return ""

    def _cached(self, key: str) -> Optional[Any]:
        if self.cache is None:
            return None
        return self.cache.get(key, settings.stats_cache_ttl_minutes)

    def _store(self, key: str, value: Any) -> None:
        if self.cache is not None:
            self.cache.set(key, value)

    async def _fetch_indicator(
        self,
        country: str,
        indicator_code: str,
        per_page: int,
        page: int,
        date_range: Optional[tuple[str, str]],
        use_cache: bool,
    ) -> List[IndicatorDataPoint]:
        start, end = date_range or ("", "")
        cache_key = f"worldbank_{country}_{indicator_code}_{page}_{start}_{end}"
        if use_cache:
            cached = self._cached(cache_key)
            if cached is not None:
                return [IndicatorDataPoint(**p) for p in cached]

        params: Dict[str, Any] = {"format": "json", "per_page": per_page, "page": page}
        if date_range:
            params["date"] = f"{start}:{end}"

        body = await self._get_json(
            f"/country/{country}/indicator/{indicator_code}", params
        )
        if not isinstance(body, list) or len(body) < 2 or not body[1]:
            return []

        # Drop years with no reported value
        points = [_to_data_point(d) for d in body[1] if d.get("value") is not None]
        self._store(cache_key, [p.model_dump() for p in points])
        return points

    async def fetch_country_indicator(
        self,
        country_code: str,
        indicator_code: str,
        per_page: int = 50,
        page: int = 1,
        date_range: Optional[tuple[str, str]] = None,
        use_cache: bool = True,
    ) -> List[IndicatorDataPoint]:
        return await self._fetch_indicator(
            country_code, indicator_code, per_page, page, date_range, use_cache
        )

    async def fetch_global_indicator(
        self,
        indicator_code: str,
        per_page: int = 100,
        page: int = 1,
        date_range: Optional[tuple[str, str]] = None,
        use_cache: bool = True,
    ) -> List[IndicatorDataPoint]:
        return await self._fetch_indicator(
            "all", indicator_code, per_page, page, date_range, use_cache
        )

    async def fetch_latest_country_data(
        self, country_code: str, indicator_code: str, use_cache: bool = True
    ) -> Optional[IndicatorDataPoint]:
        """Most recent year with a reported value, or None."""
        data = await self.fetch_country_indicator(
            country_code, indicator_code, per_page=10, use_cache=use_cache
        )
        return data[0] if data else None

    async def fetch_country_water_stats(
        self, country_code: str, use_cache: bool = True
    ) -> Dict[str, Optional[IndicatorDataPoint]]:
        """Latest value of every water indicator; failed lookups map to None."""
        names = list(WATER_INDICATORS)
        results = await asyncio.gather(
            *(
                self.fetch_latest_country_data(
                    country_code, WATER_INDICATORS[n], use_cache
                )
                for n in names
            ),
            return_exceptions=True,
        )

        stats: Dict[str, Optional[IndicatorDataPoint]] = {}
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.warning(f"{name} unavailable for {country_code}: {result}")
                stats[name] = None
            else:
                stats[name] = result
        return stats

    async def fetch_top_water_consumers(
        self, limit: int = 10, year: Optional[str] = None, use_cache: bool = True
    ) -> List[IndicatorDataPoint]:
        """Countries ranked by total freshwater withdrawal, one entry each."""
        data = await self.fetch_global_indicator(
            WATER_INDICATORS["FRESHWATER_WITHDRAWAL"],
            per_page=300,
            date_range=(year, year) if year else None,
            use_cache=use_cache,
        )

        ranked = sorted(data, key=lambda p: p.value, reverse=True)
        seen: set[str] = set()
        top: List[IndicatorDataPoint] = []
        for point in ranked:
            if point.countryiso3code in seen:
                continue
            seen.add(point.countryiso3code)
            top.append(point)
            if len(top) == limit:
                break
        return top

    async def compare_countries(
        self, country_codes: List[str], indicator_code: str, use_cache: bool = True
    ) -> Dict[str, Optional[IndicatorDataPoint]]:
        results = await asyncio.gather(
            *(
                self.fetch_latest_country_data(code, indicator_code, use_cache)
                for code in country_codes
            ),
            return_exceptions=True,
        )
        return {
            code: (None if isinstance(result, Exception) else result)
            for code, result in zip(country_codes, results)
        }
