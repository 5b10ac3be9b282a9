"""WaterWise — Scheduler Jobs.

APScheduler jobs: an evening check of today's usage against the daily goal,
a daily reminder at the user's chosen time, and a periodic purge of stale
API cache entries.
"""

from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session

from waterwise.analyzer.alert_engine import (
    check_daily_usage_alert,
    daily_reminder_enabled,
    daily_reminder_message,
)
from waterwise.config import settings
from waterwise.database import engine
from waterwise.repositories.cache import CacheStore
from waterwise.repositories.preferences import PreferencesStore
from waterwise.repositories.usage import SQLUsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def usage_alert_job():
    """Log an alert when today's usage nears or passes the daily goal."""
    try:
        with Session(engine) as session:
            preferences = PreferencesStore(session).get()
            alert = check_daily_usage_alert(
                SQLUsageRepository(session), preferences=preferences
            )
        if alert.should_alert:
            logger.warning(alert.message, extra={"job_id": "usage_alert"})
        elif alert.goal:
            logger.info(
                f"Daily usage within goal: {alert.current_usage:.1f}L / {alert.goal:g}L",
                extra={"job_id": "usage_alert"},
            )
        else:
            logger.info("Usage alerts disabled", extra={"job_id": "usage_alert"})
    except Exception as e:
        logger.error(f"Scheduled usage alert failed: {e}")


async def daily_reminder_job():
    """Log the daily logging reminder unless the user turned it off."""
    try:
        with Session(engine) as session:
            preferences = PreferencesStore(session).get()
        if daily_reminder_enabled(preferences):
            logger.info(
                daily_reminder_message(datetime.now().hour),
                extra={"job_id": "daily_reminder"},
            )
    except Exception as e:
        logger.error(f"Scheduled daily reminder failed: {e}")


async def cache_purge_job():
    """Delete cache entries older than the configured maximum age."""
    try:
        with Session(engine) as session:
            CacheStore(session).clear_old(settings.cache_max_age_minutes)
    except Exception as e:
        logger.error(f"Scheduled cache purge failed: {e}")


def schedule_daily_reminder(reminder_time: str) -> None:
    """(Re)register the reminder job at ``HH:MM``; no-op when not running."""
    if not scheduler.running:
        return
    hour, minute = (int(part) for part in reminder_time.split(":"))
    scheduler.add_job(
        daily_reminder_job,
        "cron",
        hour=hour,
        minute=minute,
        id="daily_reminder",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    logger.info(f"Daily reminder scheduled at {reminder_time}")


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        usage_alert_job,
        "cron",
        hour=settings.usage_alert_hour,
        minute=0,
        id="usage_alert",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.add_job(
        cache_purge_job,
        "interval",
        minutes=settings.cache_max_age_minutes,
        id="cache_purge",
        replace_existing=True,
    )
    scheduler.start()

    try:
        with Session(engine) as session:
            reminder_time = PreferencesStore(session).get().reminder_time
    except Exception as e:
        logger.error(f"Could not load reminder time, using default: {e}")
        reminder_time = f"{settings.usage_alert_hour:02d}:00"
    schedule_daily_reminder(reminder_time)

    logger.info(
        f"Scheduler started. Usage alert at {settings.usage_alert_hour}:00, "
        f"cache purge every {settings.cache_max_age_minutes} min"
    )


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
