"""Shared fixtures: in-memory stores, fake collaborators and a test client."""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from waterwise.api.dependencies import get_weather_client
from waterwise.connectors.base import WeatherClient
from waterwise.core.errors import DataAccessError, NetworkError
from waterwise.database import get_session
from waterwise.main import app
from waterwise.models.analysis_models import WeatherReading
from waterwise.models.records import Bill, UsageEvent
from waterwise.repositories.base import BillRepository, UsageRepository


def usage(liters: float, day: str, time: Optional[str] = None, **kwargs) -> UsageEvent:
    return UsageEvent(liters=liters, date=day, time=time, **kwargs)


def bill(amount: float, day: str, consumption: float, bill_id: str = "B-1") -> Bill:
    return Bill(id=bill_id, amount=amount, date=day, consumption_liters=consumption)


class FakeUsageRepository(UsageRepository):
    """In-memory usage store; ``fail=True`` simulates an unreachable store."""

    def __init__(self, events: Optional[List[UsageEvent]] = None, fail: bool = False):
        self.events = list(events or [])
        self.fail = fail
        self.reads = 0

    def fetch_all(self) -> List[UsageEvent]:
        self.reads += 1
        if self.fail:
            raise DataAccessError("usage store offline")
        return sorted(self.events, key=lambda e: e.date, reverse=True)


class FakeBillRepository(BillRepository):
    def __init__(self, bills: Optional[List[Bill]] = None, fail: bool = False):
        self.bills = list(bills or [])
        self.fail = fail
        self.reads = 0

    def fetch_all(self) -> List[Bill]:
        self.reads += 1
        if self.fail:
            raise DataAccessError("bill store offline")
        return sorted(self.bills, key=lambda b: b.date, reverse=True)


class FakeWeatherClient(WeatherClient):
    """Returns a fixed reading, or raises ``NetworkError`` when offline."""

    def __init__(self, precipitation: float = 5.0, offline: bool = False, **reading):
        self.precipitation = precipitation
        self.offline = offline
        self.reading = reading
        self.calls = 0
        self.coordinates = None

    async def fetch_current_conditions(self, latitude: float, longitude: float):
        self.calls += 1
        self.coordinates = (latitude, longitude)
        if self.offline:
            raise NetworkError("No internet connection. Please check your network.")
        return WeatherReading(
            latitude=latitude,
            longitude=longitude,
            precipitation_mm=self.precipitation,
            temperature_c=self.reading.get("temperature_c", 20.0),
            humidity_pct=self.reading.get("humidity_pct", 60.0),
        )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def weather():
    return FakeWeatherClient(precipitation=5.0)


@pytest.fixture
def client(engine, weather):
    """Test client on an in-memory database and a fake weather source."""

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_weather_client] = lambda: weather
    yield TestClient(app)
    app.dependency_overrides.clear()
