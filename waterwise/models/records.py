"""WaterWise — Stored Records (usage events, bills, cache entries, preferences).

Table models are the rows as stored. The *Create / *Update schemas validate
user input before it reaches the store.
"""

import re
from datetime import date as date_type
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, field_validator
from pydantic import Field as InputField
from sqlmodel import SQLModel, Field

_DATE_FORMAT = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_FORMAT = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


def _check_date(value: str) -> str:
    # Stored dates are compared and sliced as text, so only YYYY-MM-DD is accepted
    if not _DATE_FORMAT.fullmatch(value):
        raise ValueError("date must be formatted YYYY-MM-DD")
    date_type.fromisoformat(value)
    return value


def _check_time(value: str) -> str:
    if not _TIME_FORMAT.fullmatch(value):
        raise ValueError("time must be formatted HH:MM")
    return value


IsoDate = Annotated[str, AfterValidator(_check_date)]
ClockTime = Annotated[str, AfterValidator(_check_time)]


def _not_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


# ─────────────────────────────────────────────
# DATABASE MODELS
# ─────────────────────────────────────────────


class UsageEvent(SQLModel, table=True):
    """One recorded water-consumption entry."""

    __tablename__ = "usage"

    id: Optional[int] = Field(default=None, primary_key=True)
    liters: float = Field(description="Liters consumed, always > 0")
    date: str = Field(index=True, description="YYYY-MM-DD")
    time: Optional[str] = Field(default=None, description="HH:MM")
    category: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class Bill(SQLModel, table=True):
    """One recorded water utility bill."""

    __tablename__ = "bills"

    id: str = Field(primary_key=True, description="User supplied or BILL-<epoch ms>-<hex>")
    amount: float = Field(description="Billed amount, always > 0")
    date: str = Field(index=True, description="YYYY-MM-DD")
    consumption_liters: float = Field(description="Liters billed for the period")
    currency: str = Field(default="USD")


class CacheEntry(SQLModel, table=True):
    """JSON payload cached from a public API."""

    __tablename__ = "cache"

    key: str = Field(primary_key=True)
    value: str = Field(description="JSON encoded payload")
    timestamp: int = Field(index=True, description="Epoch milliseconds at write")


class UserPreferences(SQLModel, table=True):
    """The user's goal, alert switches and location. A single row, id 1."""

    __tablename__ = "preferences"

    id: int = Field(default=1, primary_key=True)
    daily_goal_liters: float
    notifications_enabled: bool = True
    usage_alerts: bool = True
    daily_reminder: bool = True
    reminder_time: str = Field(default="20:00", description="HH:MM")
    latitude: float
    longitude: float
    city: Optional[str] = None
    country_code: Optional[str] = None


# ─────────────────────────────────────────────
# INPUT SCHEMAS
# ─────────────────────────────────────────────


class UsageCreate(BaseModel):
    """Payload for logging a usage event."""

    liters: float = InputField(gt=0)
    date: IsoDate
    time: Optional[ClockTime] = None
    category: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class UsageUpdate(BaseModel):
    """Partial update of a usage event. Unset fields are left untouched."""

    liters: Optional[float] = InputField(default=None, gt=0)
    date: Optional[IsoDate] = None
    time: Optional[ClockTime] = None
    category: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None

    reject_null = field_validator("liters", "date")(_not_null)


class BillCreate(BaseModel):
    """Payload for recording a bill."""

    id: Optional[str] = None
    amount: float = InputField(gt=0)
    date: IsoDate
    consumption_liters: float = InputField(gt=0)
    currency: Optional[str] = None


class BillUpdate(BaseModel):
    """Partial update of a bill."""

    amount: Optional[float] = InputField(default=None, gt=0)
    date: Optional[IsoDate] = None
    consumption_liters: Optional[float] = InputField(default=None, gt=0)
    currency: Optional[str] = None

    reject_null = field_validator(
        "amount", "date", "consumption_liters", "currency"
    )(_not_null)


class PreferencesUpdate(BaseModel):
    """Partial update of the user preferences."""

    daily_goal_liters: Optional[float] = InputField(default=None, gt=0)
    notifications_enabled: Optional[bool] = None
    usage_alerts: Optional[bool] = None
    daily_reminder: Optional[bool] = None
    reminder_time: Optional[ClockTime] = None
    latitude: Optional[float] = InputField(default=None, ge=-90, le=90)
    longitude: Optional[float] = InputField(default=None, ge=-180, le=180)
    city: Optional[str] = None
    country_code: Optional[str] = None

    reject_null = field_validator(
        "daily_goal_liters",
        "notifications_enabled",
        "usage_alerts",
        "daily_reminder",
        "reminder_time",
        "latitude",
        "longitude",
    )(_not_null)
