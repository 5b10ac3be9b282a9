"""Tests for the rule-based conservation advisor."""

import random
from datetime import date

import pytest

from conftest import (
    FakeBillRepository,
    FakeUsageRepository,
    FakeWeatherClient,
    bill,
    usage,
)
from waterwise.analyzer.advisor_engine import (
    QUICK_TIPS,
    WEATHER_UNAVAILABLE,
    WaterAdvisor,
    classify_trend,
    get_quick_tip,
    regional_advice,
    truncate_1dp,
)
from waterwise.models.analysis_models import (
    Priority,
    RecommendationType,
    UsageTrend,
)

TODAY = date(2024, 3, 31)


def _advisor(events=None, bills=None, weather=None, **kwargs) -> WaterAdvisor:
    return WaterAdvisor(
        FakeUsageRepository(events, fail=kwargs.pop("usage_fails", False)),
        FakeBillRepository(bills, fail=kwargs.pop("bills_fail", False)),
        weather if weather is not None else FakeWeatherClient(precipitation=5.0),
        latitude=40.0,
        longitude=-3.7,
        recommended_daily=100,
        **kwargs,
    )


class TestClassifyTrend:
    @pytest.mark.parametrize(
        "recent, older, expected",
        [
            (120, 100, UsageTrend.INCREASING),
            (110, 100, UsageTrend.STABLE),
            (90, 100, UsageTrend.STABLE),
            (80, 100, UsageTrend.DECREASING),
            (0, 0, UsageTrend.STABLE),
        ],
    )
    def test_thresholds(self, recent, older, expected) -> None:
        assert classify_trend(recent, older) == expected


class TestRegionalAdvice:
    def test_dry_and_low_humidity(self) -> None:
        assert "Low rainfall and humidity" in regional_advice(25, 30, 0.2)

    def test_heavy_rain(self) -> None:
        assert "collect rainwater" in regional_advice(15, 90, 12)

    def test_heat(self) -> None:
        assert "evaporation" in regional_advice(35, 60, 2)

    def test_normal(self) -> None:
        assert "normal" in regional_advice(20, 60, 3)


class TestTruncate1dp:
    @pytest.mark.parametrize(
        "value, expected",
        [(50.06, 50.0), (50.0, 50.0), (12.99, 12.9), (0.04, 0.0)],
    )
    def test_drops_extra_decimals(self, value, expected) -> None:
        assert truncate_1dp(value) == pytest.approx(expected)


class TestQuickTip:
    def test_tip_from_fixed_list(self) -> None:
        assert get_quick_tip(random.Random(7)) in QUICK_TIPS


class TestUsageAnalysis:
    @pytest.mark.asyncio
    async def test_averages_and_comparison(self) -> None:
        events = [
            usage(100, "2024-03-31"),
            usage(50, "2024-03-31"),
            usage(150, "2024-03-20"),
            usage(999, "2023-12-01"),  # outside the 30-day window
        ]
        analysis = await _advisor(events).get_user_usage_analysis(TODAY)
        assert analysis.today_usage == pytest.approx(150)
        assert analysis.avg_daily_usage == pytest.approx(150)
        assert analysis.comparison_to_recommended == pytest.approx(50)


class TestBillsAnalysis:
    @pytest.mark.asyncio
    async def test_cost_per_liter(self) -> None:
        bills = [bill(20, "2024-03-01", 1000), bill(10, "2024-02-01", 500, "B-2")]
        analysis = await _advisor(bills=bills).get_bills_analysis()
        assert analysis.total_cost == pytest.approx(30)
        assert analysis.total_consumption == pytest.approx(1500)
        assert analysis.average_cost_per_liter == pytest.approx(0.02)
        assert analysis.bill_count == 2

    @pytest.mark.asyncio
    async def test_no_bills(self) -> None:
        analysis = await _advisor().get_bills_analysis()
        assert analysis.average_cost_per_liter == 0


class TestRegionalContext:
    @pytest.mark.asyncio
    async def test_offline_gives_neutral_reading(self) -> None:
        context = await _advisor(
            weather=FakeWeatherClient(offline=True)
        ).get_regional_water_context()
        assert context.available is False
        assert context.precipitation == 0
        assert context.recommendation == WEATHER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_uses_configured_coordinates(self) -> None:
        weather = FakeWeatherClient(precipitation=3.0)
        context = await _advisor(weather=weather).get_regional_water_context()
        assert weather.calls == 1
        assert context.available is True
        assert context.precipitation == pytest.approx(3.0)


class TestGenerateRecommendations:
    @pytest.mark.asyncio
    async def test_high_cost_per_liter(self) -> None:
        """20 currency units for 1000L is 0.02 per liter."""
        recs = await _advisor(bills=[bill(20, "2024-03-01", 1000)]).generate_recommendations(
            TODAY
        )
        conditional = [r for r in recs if r.title != "Excellent Water Conservation!"]
        assert len(conditional) == 1
        cost = conditional[0]
        assert cost.type == RecommendationType.BILL
        assert cost.title == "Reduce Water Costs"
        assert cost.priority == Priority.MEDIUM
        assert cost.potential_savings == pytest.approx(20)

    @pytest.mark.asyncio
    async def test_low_usage_is_praised(self) -> None:
        recs = await _advisor([usage(80, "2024-03-30")]).generate_recommendations(TODAY)
        assert [r.title for r in recs] == ["Excellent Water Conservation!"]
        assert recs[0].priority == Priority.LOW
        assert recs[0].potential_savings is None

    @pytest.mark.asyncio
    async def test_high_usage(self) -> None:
        recs = await _advisor([usage(150, "2024-03-30")]).generate_recommendations(TODAY)
        first = recs[0]
        assert first.title == "Reduce Daily Water Usage"
        assert first.priority == Priority.HIGH
        assert first.potential_savings == pytest.approx(1500)
        assert "150.0L" in first.message
        assert "50.0%" in first.message

    @pytest.mark.asyncio
    async def test_increasing_trend(self) -> None:
        events = [
            usage(50, "2024-03-05"),
            usage(50, "2024-03-10"),
            usage(200, "2024-03-28"),
        ]
        recs = await _advisor(events).generate_recommendations(TODAY)
        alerts = [r for r in recs if r.title == "Usage Trend Alert"]
        assert len(alerts) == 1
        assert alerts[0].priority == Priority.MEDIUM

    @pytest.mark.asyncio
    async def test_dry_weather(self) -> None:
        weather = FakeWeatherClient(precipitation=0.4)
        recs = await _advisor(weather=weather).generate_recommendations(TODAY)
        regional = [r for r in recs if r.type == RecommendationType.REGIONAL]
        assert len(regional) == 1
        assert regional[0].priority == Priority.HIGH
        assert "0.4mm" in regional[0].message

    @pytest.mark.asyncio
    async def test_weather_offline_skips_regional_advice(self) -> None:
        recs = await _advisor(
            [usage(80, "2024-03-30")], weather=FakeWeatherClient(offline=True)
        ).generate_recommendations(TODAY)
        assert recs
        assert all(r.type != RecommendationType.REGIONAL for r in recs)
        assert recs[0].title == "Excellent Water Conservation!"

    @pytest.mark.asyncio
    async def test_store_failure_gives_onboarding(self) -> None:
        recs = await _advisor(usage_fails=True).generate_recommendations(TODAY)
        assert len(recs) == 1
        assert recs[0].title == "Start Tracking"
        assert recs[0].priority == Priority.LOW

    @pytest.mark.asyncio
    async def test_every_signal_failing_still_gives_one_entry(self) -> None:
        recs = await _advisor(
            usage_fails=True,
            bills_fail=True,
            weather=FakeWeatherClient(offline=True),
        ).generate_recommendations(TODAY)
        assert len(recs) == 1
        assert recs[0].title == "Start Tracking"

    @pytest.mark.asyncio
    async def test_percentage_over_target_is_truncated(self) -> None:
        # 50.06% over target shows as 50.0, not 50.1
        recs = await _advisor([usage(150.06, "2024-03-30")]).generate_recommendations(TODAY)
        assert "50.0% above" in recs[0].message
        assert "150.1L" in recs[0].message

    @pytest.mark.asyncio
    async def test_bill_failure_gives_onboarding(self) -> None:
        recs = await _advisor(bills_fail=True).generate_recommendations(TODAY)
        assert [r.title for r in recs] == ["Start Tracking"]
