"""WaterWise — Abstract Record Repositories.

The analytics engines depend only on these interfaces, so any store (the SQL
one, an in-memory fake) can back them.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, timedelta
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from waterwise.core.errors import DataAccessError
from waterwise.core.logging import get_logger
from waterwise.models.records import Bill, UsageEvent

logger = get_logger("repositories")


class UsageRepository(ABC):
    """Read access to recorded usage events."""

    @abstractmethod
    def fetch_all(self) -> List[UsageEvent]:
        """Return every usage event, newest date first.

        Raises:
            DataAccessError: the store could not be read.
        """
        ...

    def total_usage_by_date(self, day: str) -> float:
        """Sum of liters logged on one date."""
        return sum(u.liters for u in self.fetch_all() if u.date == day)

    def average_daily_usage(self, days: int = 30, today: date | None = None) -> float:
        """Average of per-date totals for dates on or after ``today - days``."""
        start = ((today or date.today()) - timedelta(days=days)).isoformat()
        totals: dict[str, float] = defaultdict(float)
        for u in self.fetch_all():
            if u.date >= start:
                totals[u.date] += u.liters
        return sum(totals.values()) / len(totals) if totals else 0.0


class BillRepository(ABC):
    """Read access to recorded bills."""

    @abstractmethod
    def fetch_all(self) -> List[Bill]:
        """Return every bill, newest date first.

        Raises:
            DataAccessError: the store could not be read.
        """
        ...

    def total_consumption(self) -> float:
        """Sum of billed liters across all bills."""
        return sum(b.consumption_liters for b in self.fetch_all())


@contextmanager
def store_errors(session: Session, action: str):
    """Roll back and re-raise SQLAlchemy failures as ``DataAccessError``."""
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Store failure while trying to {action}: {e}")
        raise DataAccessError(f"Failed to {action}") from e
