"""Tests for input validation of records and preferences."""

import pytest
from pydantic import ValidationError

from waterwise.models.records import (
    BillCreate,
    BillUpdate,
    PreferencesUpdate,
    UsageCreate,
    UsageUpdate,
)


class TestDates:
    @pytest.mark.parametrize(
        "day",
        ["20240115", "2024-W03-1", "2024-1-5", "2024-02-30", "15/01/2024", "2024-01-15T10:00"],
    )
    def test_rejects_anything_but_calendar_dates(self, day) -> None:
        with pytest.raises(ValidationError):
            UsageCreate(liters=10, date=day)
        with pytest.raises(ValidationError):
            BillCreate(amount=1, date=day, consumption_liters=1)

    def test_accepts_iso_date(self) -> None:
        assert UsageCreate(liters=10, date="2024-02-29").date == "2024-02-29"


class TestTimes:
    @pytest.mark.parametrize("time", ["7:15", "24:00", "12:60", "noon"])
    def test_rejects_bad_time(self, time) -> None:
        with pytest.raises(ValidationError):
            UsageCreate(liters=10, date="2024-01-01", time=time)

    def test_accepts_hh_mm(self) -> None:
        assert UsageCreate(liters=10, date="2024-01-01", time="07:15").time == "07:15"


class TestPartialUpdates:
    def test_omitted_fields_are_unset(self) -> None:
        update = UsageUpdate(description="garden")
        assert update.model_dump(exclude_unset=True) == {"description": "garden"}

    @pytest.mark.parametrize("field", ["liters", "date"])
    def test_usage_required_columns_cannot_be_null(self, field) -> None:
        with pytest.raises(ValidationError):
            UsageUpdate(**{field: None})

    @pytest.mark.parametrize("field", ["amount", "date", "consumption_liters", "currency"])
    def test_bill_required_columns_cannot_be_null(self, field) -> None:
        with pytest.raises(ValidationError):
            BillUpdate(**{field: None})

    def test_optional_text_can_be_cleared(self) -> None:
        assert UsageUpdate(category=None).model_dump(exclude_unset=True) == {"category": None}

    def test_preferences_validation(self) -> None:
        with pytest.raises(ValidationError):
            PreferencesUpdate(daily_goal_liters=0)
        with pytest.raises(ValidationError):
            PreferencesUpdate(latitude=95)
        with pytest.raises(ValidationError):
            PreferencesUpdate(usage_alerts=None)
        assert PreferencesUpdate(reminder_time="07:30").reminder_time == "07:30"
