"""WaterWise — Analysis Output Models.

Every model here is derived from the stored records on each request and is
never persisted.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel


class Priority(str, Enum):
    """Urgency of an opportunity or recommendation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class RecommendationType(str, Enum):
    """What a recommendation is about."""

    USAGE = "usage"
    SAVINGS = "savings"
    REGIONAL = "regional"
    BILL = "bill"


class UsageTrend(str, Enum):
    """Direction of the last week compared with the last month."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


# ─────────────────────────────────────────────
# ANALYTICS
# ─────────────────────────────────────────────


class UsagePattern(BaseModel):
    """Mean liters logged on one weekday."""

    day_of_week: str  # "Sunday" ... "Saturday"
    average_usage: float
    peak_hours: List[int] = []


class MonthlyTrend(BaseModel):
    """Usage and cost aggregated over one calendar month."""

    month: str  # YYYY-MM
    total_usage: float = 0.0
    total_cost: float = 0.0
    average_daily: float = 0.0


class WaterSavingsOpportunity(BaseModel):
    """A category whose estimated usage exceeds its recommended target."""

    category: str
    current_usage: float  # liters / day
    recommended_usage: float  # liters / day
    potential_savings: float  # liters / month
    priority: Priority
    description: str


class ReportSummary(BaseModel):
    """Headline numbers of a usage report."""

    total_days: int = 0
    total_usage: float = 0.0
    average_daily: float = 0.0
    total_cost: float = 0.0


class UsageReport(BaseModel):
    """Consolidated analytics report."""

    summary: ReportSummary = ReportSummary()
    patterns: List[UsagePattern] = []
    trends: List[MonthlyTrend] = []
    opportunities: List[WaterSavingsOpportunity] = []


# ─────────────────────────────────────────────
# ADVISOR
# ─────────────────────────────────────────────


class AdvisorRecommendation(BaseModel):
    """Human-readable conservation advice."""

    type: RecommendationType
    priority: Priority
    title: str
    message: str
    actionable: str
    potential_savings: Optional[float] = None


class UsageAnalysis(BaseModel):
    """Current usage compared with the recommended daily amount."""

    today_usage: float = 0.0
    avg_daily_usage: float = 0.0
    comparison_to_recommended: float = 0.0  # % above (+) or below (-)
    trend: UsageTrend = UsageTrend.STABLE


class BillsAnalysis(BaseModel):
    """Cost efficiency derived from recorded bills."""

    total_consumption: float = 0.0
    total_cost: float = 0.0
    average_cost_per_liter: float = 0.0
    bill_count: int = 0


class RegionalContext(BaseModel):
    """Weather at the user's location and the advice it implies."""

    temperature: float = 0.0
    humidity: float = 0.0
    precipitation: float = 0.0
    recommendation: str = ""
    available: bool = True


class UsageAlert(BaseModel):
    """Result of checking today's usage against the daily goal."""

    should_alert: bool = False
    message: str = ""
    current_usage: float = 0.0
    goal: float = 0.0


# ─────────────────────────────────────────────
# PUBLIC API PAYLOADS
# ─────────────────────────────────────────────


class WeatherReading(BaseModel):
    """Current conditions from Open-Meteo."""

    latitude: float
    longitude: float
    temperature_c: float = 0.0
    humidity_pct: float = 0.0
    precipitation_mm: float = 0.0
    wind_speed: float = 0.0
    condition_code: int = 0


class ClimateData(BaseModel):
    """Daily rainfall and temperature series for a date range."""

    latitude: float
    longitude: float
    daily_rainfall: List[Optional[float]] = []
    daily_temperature: List[Optional[float]] = []
    dates: List[str] = []


class DroughtIndicator(BaseModel):
    """Average daily rainfall over a trailing window."""

    avg_precipitation: float
    is_drought_risk: bool


class IndicatorDataPoint(BaseModel):
    """One World Bank indicator value for a country and year."""

    indicator_id: str
    indicator_name: str = ""
    country_id: str = ""
    country_name: str = ""
    countryiso3code: str = ""
    date: str
    value: float
    unit: str = ""
    decimal: int = 0
