"""WaterWise — Analytics & Advisor Routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from waterwise.analyzer.advisor_engine import WaterAdvisor, get_quick_tip
from waterwise.analyzer.alert_engine import check_daily_usage_alert
from waterwise.analyzer.report import UsageAnalytics
from waterwise.api.dependencies import (
    get_advisor,
    get_analytics,
    get_preferences,
    get_usage_repository,
)
from waterwise.core.errors import DataAccessError
from waterwise.models.analysis_models import (
    AdvisorRecommendation,
    MonthlyTrend,
    UsageAlert,
    UsagePattern,
    UsageReport,
    WaterSavingsOpportunity,
)
from waterwise.models.records import UserPreferences
from waterwise.repositories.usage import SQLUsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("api.analysis")

router = APIRouter(tags=["Analytics"])


@router.get("/analytics/report", response_model=UsageReport)
async def usage_report(analytics: UsageAnalytics = Depends(get_analytics)):
    """Summary, weekday patterns, monthly trends and savings opportunities."""
    try:
        return await analytics.generate_usage_report()
    except DataAccessError as e:
        logger.error(f"Usage report failed: {e}")
        raise HTTPException(status_code=503, detail=f"Failed to load report: {e}")


@router.get("/analytics/patterns", response_model=List[UsagePattern])
async def usage_patterns(analytics: UsageAnalytics = Depends(get_analytics)):
    return await analytics.analyze_usage_patterns()


@router.get("/analytics/trends", response_model=List[MonthlyTrend])
async def monthly_trends(
    months: int = Query(6, ge=1, le=120),
    analytics: UsageAnalytics = Depends(get_analytics),
):
    return await analytics.calculate_monthly_trends(months)


@router.get("/analytics/opportunities", response_model=List[WaterSavingsOpportunity])
async def savings_opportunities(analytics: UsageAnalytics = Depends(get_analytics)):
    return await analytics.identify_savings_opportunities()


@router.get("/advisor/recommendations", response_model=List[AdvisorRecommendation])
async def recommendations(advisor: WaterAdvisor = Depends(get_advisor)):
    """Rule-based advice; always returns at least one entry."""
    return await advisor.generate_recommendations()


@router.get("/advisor/tip")
async def quick_tip():
    return {"tip": get_quick_tip()}


@router.get("/advisor/alert", response_model=UsageAlert)
async def usage_alert(
    goal: float | None = Query(None, gt=0, description="Daily goal in liters"),
    repo: SQLUsageRepository = Depends(get_usage_repository),
    preferences: UserPreferences = Depends(get_preferences),
):
    """Today's usage against the saved (or given) daily goal."""
    return check_daily_usage_alert(repo, goal, preferences=preferences)
