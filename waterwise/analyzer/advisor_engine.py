"""WaterWise — Advisor Engine.

Combines four signals into conservation recommendations:
- 30-day average vs the recommended daily amount
- last 7 days vs last 30 days (trend alert)
- live precipitation at the user's location
- average cost per liter from recorded bills

The advisor never raises. Weather failures are absorbed into a neutral
reading; any other failure yields a single onboarding recommendation.
"""

import math
import random
from datetime import date, datetime, timezone
from typing import List, Optional

from waterwise.config import settings
from waterwise.connectors.base import WeatherClient
from waterwise.models.analysis_models import (
    AdvisorRecommendation,
    BillsAnalysis,
    Priority,
    RecommendationType,
    RegionalContext,
    UsageAnalysis,
    UsageTrend,
)
from waterwise.repositories.base import BillRepository, UsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("analyzer.advisor")

TREND_UP_RATIO = 1.1
TREND_DOWN_RATIO = 0.9
DRY_PRECIPITATION_MM = 1.0
COST_PER_LITER_THRESHOLD = 0.01
LITERS_SAVED_PER_MONTH = 1000
DAYS_PER_MONTH = 30

WEATHER_UNAVAILABLE = "Unable to fetch regional weather data."

QUICK_TIPS = [
    "A 5-minute shower uses about 50 liters of water. Try to keep it under 4 minutes!",
    "Fix leaky faucets! A dripping tap can waste up to 20 liters per day.",
    "Running your washing machine only when full can save 15,000 liters per year.",
    "Turn off the tap while brushing your teeth to save 6 liters per minute.",
    "Collect rainwater for watering plants instead of using tap water.",
    "Use a bucket instead of a hose to wash your car and save up to 300 liters.",
    "Install low-flow showerheads to reduce water usage by 40%.",
    "Water your garden early in the morning to reduce evaporation.",
]


def classify_trend(recent_avg: float, older_avg: float) -> UsageTrend:
    """Compare the 7-day average with the 30-day average."""
    if recent_avg > older_avg * TREND_UP_RATIO:
        return UsageTrend.INCREASING
    if recent_avg < older_avg * TREND_DOWN_RATIO:
        return UsageTrend.DECREASING
    return UsageTrend.STABLE


def regional_advice(temperature: float, humidity: float, precipitation: float) -> str:
    if precipitation < DRY_PRECIPITATION_MM and humidity < 40:
        return "Low rainfall and humidity detected. Consider reducing outdoor water usage."
    if precipitation > 10:
        return "Good rainfall! Perfect time to collect rainwater for later use."
    if temperature > 30:
        return (
            "High temperatures increase water evaporation. "
            "Water plants early morning or late evening."
        )
    return "Weather conditions are normal. Maintain regular water conservation practices."


def onboarding_recommendation() -> AdvisorRecommendation:
    return AdvisorRecommendation(
        type=RecommendationType.USAGE,
        priority=Priority.LOW,
        title="Start Tracking",
        message="Add your water usage and bills to get personalized recommendations.",
        actionable='Tap on "Add Usage" or "Water Bills" to start tracking your water consumption.',
    )


def truncate_1dp(value: float) -> float:
    """Drop, rather than round, everything after the first decimal."""
    return math.floor(value * 10) / 10


def get_quick_tip(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(QUICK_TIPS)


class WaterAdvisor:
    """Rule-based conservation advisor."""

    def __init__(
        self,
        usage: UsageRepository,
        bills: BillRepository,
        weather: Optional[WeatherClient] = None,
        latitude: float | None = None,
        longitude: float | None = None,
        recommended_daily: float | None = None,
    ):
        self.usage = usage
        self.bills = bills
        self.weather = weather
        self.latitude = latitude if latitude is not None else settings.default_latitude
        self.longitude = (
            longitude if longitude is not None else settings.default_longitude
        )
        self.recommended_daily = (
            recommended_daily
            if recommended_daily is not None
            else settings.recommended_daily_liters
        )

    # ── Signals ──

    async def get_user_usage_analysis(self, today: date | None = None) -> UsageAnalysis:
        today = today or datetime.now(timezone.utc).date()
        today_usage = self.usage.total_usage_by_date(today.isoformat())
        avg_30 = self.usage.average_daily_usage(30, today)
        avg_7 = self.usage.average_daily_usage(7, today)

        return UsageAnalysis(
            today_usage=today_usage,
            avg_daily_usage=avg_30,
            comparison_to_recommended=(avg_30 - self.recommended_daily)
            / self.recommended_daily
            * 100,
            trend=classify_trend(avg_7, avg_30),
        )

    async def get_bills_analysis(self) -> BillsAnalysis:
        bills = self.bills.fetch_all()
        total_consumption = self.bills.total_consumption()
        total_cost = sum(b.amount for b in bills)

        return BillsAnalysis(
            total_consumption=total_consumption,
            total_cost=total_cost,
            average_cost_per_liter=(
                total_cost / total_consumption if total_consumption > 0 else 0.0
            ),
            bill_count=len(bills),
        )

    async def get_regional_water_context(self) -> RegionalContext:
        """Live weather at the configured location, or a neutral reading."""
        if self.weather is None:
            return RegionalContext(recommendation=WEATHER_UNAVAILABLE, available=False)

        try:
            reading = await self.weather.fetch_current_conditions(
                self.latitude, self.longitude
            )
        except Exception as e:
            logger.warning(f"Regional weather unavailable: {e}")
            return RegionalContext(recommendation=WEATHER_UNAVAILABLE, available=False)

        return RegionalContext(
            temperature=reading.temperature_c,
            humidity=reading.humidity_pct,
            precipitation=reading.precipitation_mm,
            recommendation=regional_advice(
                reading.temperature_c, reading.humidity_pct, reading.precipitation_mm
            ),
        )

    # ── Recommendations ──

    def _usage_recommendation(self, analysis: UsageAnalysis) -> AdvisorRecommendation:
        avg = analysis.avg_daily_usage
        if avg > self.recommended_daily:
            return AdvisorRecommendation(
                type=RecommendationType.USAGE,
                priority=Priority.HIGH,
                title="Reduce Daily Water Usage",
                message=(
                    f"Your average daily usage is {avg:.1f}L, which is "
                    f"{truncate_1dp(analysis.comparison_to_recommended):.1f}% above the recommended "
                    f"{self.recommended_daily:g}L per day."
                ),
                actionable="Try reducing shower time by 2-3 minutes and fix any leaking faucets.",
                potential_savings=(avg - self.recommended_daily) * DAYS_PER_MONTH,
            )
        return AdvisorRecommendation(
            type=RecommendationType.USAGE,
            priority=Priority.LOW,
            title="Excellent Water Conservation!",
            message=f"Your daily average of {avg:.1f}L is within recommended limits.",
            actionable="Keep up the great work! Share your water-saving tips with others.",
        )

    async def generate_recommendations(
        self, today: date | None = None
    ) -> List[AdvisorRecommendation]:
        """Prioritised advice; always at least one entry."""
        recommendations: List[AdvisorRecommendation] = []

        try:
            usage_analysis = await self.get_user_usage_analysis(today)
            bills_analysis = await self.get_bills_analysis()
            regional = await self.get_regional_water_context()

            recommendations.append(self._usage_recommendation(usage_analysis))

            if usage_analysis.trend == UsageTrend.INCREASING:
                recommendations.append(
                    AdvisorRecommendation(
                        type=RecommendationType.USAGE,
                        priority=Priority.MEDIUM,
                        title="Usage Trend Alert",
                        message="Your water usage has been increasing over the past week.",
                        actionable="Review your recent activities and identify opportunities to reduce consumption.",
                    )
                )

            if regional.available and regional.precipitation < DRY_PRECIPITATION_MM:
                recommendations.append(
                    AdvisorRecommendation(
                        type=RecommendationType.REGIONAL,
                        priority=Priority.HIGH,
                        title="Low Rainfall in Your Area",
                        message=(
                            f"Current precipitation: {regional.precipitation:.1f}mm. "
                            "Your region is experiencing dry conditions."
                        ),
                        actionable="Limit outdoor watering to early morning only and consider rainwater harvesting for future use.",
                    )
                )

            cost_per_liter = bills_analysis.average_cost_per_liter
            if cost_per_liter > COST_PER_LITER_THRESHOLD:
                monthly_saving = cost_per_liter * LITERS_SAVED_PER_MONTH
                recommendations.append(
                    AdvisorRecommendation(
                        type=RecommendationType.BILL,
                        priority=Priority.MEDIUM,
                        title="Reduce Water Costs",
                        message=f"Your average cost is {cost_per_liter:.4f} per liter.",
                        actionable=(
                            f"Reducing usage by {LITERS_SAVED_PER_MONTH}L monthly "
                            f"could save you {monthly_saving:.2f}."
                        ),
                        potential_savings=monthly_saving,
                    )
                )

        except Exception as e:
            logger.error(f"Error generating recommendations: {e}")
            recommendations = [onboarding_recommendation()]

        logger.info(f"Generated {len(recommendations)} recommendations")
        return recommendations
