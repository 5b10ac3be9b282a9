"""WaterWise — Route Dependencies.

Repositories and API clients are built per request from the DB session so
tests can swap any of them through ``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlmodel import Session

from waterwise.analyzer.advisor_engine import WaterAdvisor
from waterwise.analyzer.report import UsageAnalytics
from waterwise.connectors.base import WeatherClient
from waterwise.connectors.open_meteo.client import OpenMeteoClient
from waterwise.connectors.world_bank.client import WorldBankClient
from waterwise.core.errors import DataAccessError
from waterwise.database import get_session
from waterwise.models.records import UserPreferences
from waterwise.repositories.base import BillRepository, UsageRepository
from waterwise.repositories.bills import SQLBillRepository
from waterwise.repositories.cache import CacheStore
from waterwise.repositories.preferences import PreferencesStore, default_preferences
from waterwise.repositories.usage import SQLUsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("api.dependencies")


def get_usage_repository(session: Session = Depends(get_session)) -> SQLUsageRepository:
    return SQLUsageRepository(session)


def get_bill_repository(session: Session = Depends(get_session)) -> SQLBillRepository:
    return SQLBillRepository(session)


def get_preferences_store(session: Session = Depends(get_session)) -> PreferencesStore:
    return PreferencesStore(session)


def get_preferences(
    store: PreferencesStore = Depends(get_preferences_store),
) -> UserPreferences:
    """Saved preferences, or the configured defaults if they cannot be read."""
    try:
        return store.get()
    except DataAccessError as e:
        logger.error(f"Falling back to default preferences: {e}")
        return default_preferences()


async def get_open_meteo_client(session: Session = Depends(get_session)):
    client = OpenMeteoClient(cache=CacheStore(session))
    try:
        yield client
    finally:
        await client.close()


async def get_world_bank_client(session: Session = Depends(get_session)):
    client = WorldBankClient(cache=CacheStore(session))
    try:
        yield client
    finally:
        await client.close()


def get_weather_client(
    client: OpenMeteoClient = Depends(get_open_meteo_client),
) -> WeatherClient:
    return client


def get_analytics(
    usage: UsageRepository = Depends(get_usage_repository),
    bills: BillRepository = Depends(get_bill_repository),
) -> UsageAnalytics:
    return UsageAnalytics(usage, bills)


def get_advisor(
    usage: UsageRepository = Depends(get_usage_repository),
    bills: BillRepository = Depends(get_bill_repository),
    weather: WeatherClient = Depends(get_weather_client),
    preferences: UserPreferences = Depends(get_preferences),
) -> WaterAdvisor:
    return WaterAdvisor(
        usage,
        bills,
        weather,
        latitude=preferences.latitude,
        longitude=preferences.longitude,
    )
