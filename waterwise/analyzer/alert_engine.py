"""WaterWise — Daily Goal Alerts & Reminders."""

from datetime import date, datetime, timezone

from waterwise.config import settings
from waterwise.models.analysis_models import UsageAlert
from waterwise.models.records import UserPreferences
from waterwise.repositories.base import UsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("analyzer.alert")

WARNING_PCT = 80


def usage_alerts_enabled(preferences: UserPreferences | None) -> bool:
    if preferences is None:
        return True
    return preferences.notifications_enabled and preferences.usage_alerts


def daily_reminder_enabled(preferences: UserPreferences | None) -> bool:
    if preferences is None:
        return True
    return preferences.notifications_enabled and preferences.daily_reminder


def check_daily_usage_alert(
    usage: UsageRepository,
    goal: float | None = None,
    today: date | None = None,
    preferences: UserPreferences | None = None,
) -> UsageAlert:
    """Alert once today's usage reaches 80% of the daily goal.

    The goal comes from ``goal``, then the saved preferences, then config.
    Disabled alerts short-circuit to an empty result without reading usage.
    """
    if not usage_alerts_enabled(preferences):
        return UsageAlert()

    if goal is None:
        goal = (
            preferences.daily_goal_liters
            if preferences is not None
            else settings.daily_goal_liters
        )
    today = today or datetime.now(timezone.utc).date()

    try:
        current = usage.total_usage_by_date(today.isoformat())
    except Exception as e:
        logger.error(f"Failed to check usage alert: {e}")
        return UsageAlert()

    percent_used = current / goal * 100 if goal > 0 else 0.0

    if percent_used >= 100:
        message = (
            f"⚠️ You've reached your daily goal of {goal:g}L. "
            f"Current usage: {current:.1f}L"
        )
    elif percent_used >= WARNING_PCT:
        message = (
            f"⚡ You're at {percent_used:.0f}% of your daily water goal "
            f"({current:.1f}L / {goal:g}L)"
        )
    else:
        return UsageAlert(current_usage=current, goal=goal)

    return UsageAlert(should_alert=True, message=message, current_usage=current, goal=goal)


def daily_reminder_message(hour: int) -> str:
    if hour < 12:
        return "🌅 Good morning! Remember to track your water usage today."
    if hour < 18:
        return "☀️ Don't forget to log your water consumption!"
    return "🌙 Before bed, record today's water usage."
