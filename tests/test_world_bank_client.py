"""Tests for the World Bank client over a mocked transport."""

import httpx
import pytest

from waterwise.connectors.world_bank.client import WATER_INDICATORS, WorldBankClient
from waterwise.core.errors import NetworkError
from waterwise.repositories.cache import CacheStore


def _point(iso3: str, year: str, value, code: str = "ER.H2O.FWTL.K3") -> dict:
    return {
        "indicator": {"id": code, "value": "Annual freshwater withdrawals"},
        "country": {"id": iso3[:2], "value": iso3.title()},
        "countryiso3code": iso3,
        "date": year,
        "value": value,
        "unit": "",
        "decimal": 1,
    }


def _client(handler, cache=None) -> WorldBankClient:
    return WorldBankClient(
        cache=cache,
        base_url="https://wb.test/v2",
        transport=httpx.MockTransport(handler),
        max_retries=2,
        retry_base_delay=0,
    )


class TestIndicators:
    @pytest.mark.asyncio
    async def test_null_values_dropped(self) -> None:
        body = [{"page": 1}, [_point("ESP", "2021", None), _point("ESP", "2020", 31.2)]]
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=body)

        client = _client(handler)
        points = await client.fetch_country_indicator("ESP", "ER.H2O.FWTL.K3")
        await client.close()

        assert [p.date for p in points] == ["2020"]
        assert points[0].value == pytest.approx(31.2)
        assert seen[0].url.path == "/v2/country/ESP/indicator/ER.H2O.FWTL.K3"
        assert seen[0].url.params["format"] == "json"

    @pytest.mark.asyncio
    async def test_date_range_param(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"page": 1}, None])

        client = _client(handler)
        points = await client.fetch_global_indicator("SH.H2O.BASW.ZS", date_range=("2019", "2020"))
        await client.close()
        assert points == []
        assert seen[0].url.path == "/v2/country/all/indicator/SH.H2O.BASW.ZS"
        assert seen[0].url.params["date"] == "2019:2020"

    @pytest.mark.asyncio
    async def test_latest_country_data(self) -> None:
        body = [{"page": 1}, [_point("IND", "2020", 647.5), _point("IND", "2019", 640.0)]]
        client = _client(lambda request: httpx.Response(200, json=body))
        latest = await client.fetch_latest_country_data("IND", "ER.H2O.FWTL.K3")
        await client.close()
        assert latest.date == "2020"

    @pytest.mark.asyncio
    async def test_cached_between_calls(self, session) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[{"page": 1}, [_point("ESP", "2020", 31.2)]])

        client = _client(handler, cache=CacheStore(session))
        first = await client.fetch_country_indicator("ESP", "ER.H2O.FWTL.K3")
        second = await client.fetch_country_indicator("ESP", "ER.H2O.FWTL.K3")
        await client.close()
        assert len(calls) == 1
        assert first == second

    @pytest.mark.asyncio
    async def test_error_message_from_body(self) -> None:
        body = [{"message": [{"id": "120", "key": "Invalid value", "value": "The provided parameter value is not valid"}]}]
        client = _client(lambda request: httpx.Response(400, json=body))
        with pytest.raises(NetworkError, match="not valid"):
            await client.fetch_country_indicator("XXX", "ER.H2O.FWTL.K3")
        await client.close()


class TestAggregates:
    @pytest.mark.asyncio
    async def test_top_consumers_ranked_and_deduplicated(self) -> None:
        body = [
            {"page": 1},
            [
                _point("USA", "2020", 444.3),
                _point("IND", "2020", 647.5),
                _point("IND", "2019", 640.0),
                _point("CHN", "2020", 581.3),
                _point("ESP", "2020", 31.2),
            ],
        ]
        client = _client(lambda request: httpx.Response(200, json=body))
        top = await client.fetch_top_water_consumers(limit=3)
        await client.close()
        assert [p.countryiso3code for p in top] == ["IND", "CHN", "USA"]

    @pytest.mark.asyncio
    async def test_country_stats_failures_become_none(self) -> None:
        failing = WATER_INDICATORS["SAFE_DRINKING_WATER"]

        def handler(request: httpx.Request) -> httpx.Response:
            if failing in request.url.path:
                return httpx.Response(404)
            code = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=[{"page": 1}, [_point("ESP", "2020", 1.0, code)]])

        client = _client(handler)
        stats = await client.fetch_country_water_stats("ESP")
        await client.close()
        assert set(stats) == set(WATER_INDICATORS)
        assert stats["SAFE_DRINKING_WATER"] is None
        assert stats["BASIC_DRINKING_WATER"].indicator_id == WATER_INDICATORS["BASIC_DRINKING_WATER"]

    @pytest.mark.asyncio
    async def test_compare_countries(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "/country/FRA/" in request.url.path:
                return httpx.Response(200, json=[{"page": 1}, []])
            return httpx.Response(200, json=[{"page": 1}, [_point("ESP", "2020", 31.2)]])

        client = _client(handler)
        compared = await client.compare_countries(["ESP", "FRA"], "ER.H2O.FWTL.K3")
        await client.close()
        assert compared["ESP"].value == pytest.approx(31.2)
        assert compared["FRA"] is None
