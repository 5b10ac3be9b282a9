"""WaterWise — SQL Usage Repository."""

from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from waterwise.models.records import UsageCreate, UsageEvent, UsageUpdate
from waterwise.repositories.base import UsageRepository, store_errors
from waterwise.core.logging import get_logger

logger = get_logger("repositories.usage")


class SQLUsageRepository(UsageRepository):
    """Usage events stored in the ``usage`` table."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, data: UsageCreate) -> UsageEvent:
        event = UsageEvent(**data.model_dump())
        with store_errors(self.session, "add usage"):
            self.session.add(event)
            self.session.commit()
            self.session.refresh(event)
        logger.info(f"Logged {event.liters}L on {event.date} (id {event.id})")
        return event

    def fetch_all(self) -> List[UsageEvent]:
        with store_errors(self.session, "read usage"):
            return list(
                self.session.exec(
                    select(UsageEvent).order_by(
                        UsageEvent.date.desc(), UsageEvent.id.desc()  # type: ignore
                    )
                ).all()
            )

    def fetch_by_date_range(self, start_date: str, end_date: str) -> List[UsageEvent]:
        with store_errors(self.session, "read usage range"):
            return list(
                self.session.exec(
                    select(UsageEvent)
                    .where(UsageEvent.date >= start_date, UsageEvent.date <= end_date)
                    .order_by(UsageEvent.date.desc())  # type: ignore
                ).all()
            )

    def fetch_by_date(self, day: str) -> List[UsageEvent]:
        with store_errors(self.session, "read usage for date"):
            return list(
                self.session.exec(
                    select(UsageEvent)
                    .where(UsageEvent.date == day)
                    .order_by(UsageEvent.id.desc())  # type: ignore
                ).all()
            )

    def get(self, usage_id: int) -> Optional[UsageEvent]:
        with store_errors(self.session, "read usage"):
            return self.session.get(UsageEvent, usage_id)

    def total_usage_by_date(self, day: str) -> float:
        with store_errors(self.session, "sum usage for date"):
            total = self.session.exec(
                select(func.coalesce(func.sum(UsageEvent.liters), 0)).where(
                    UsageEvent.date == day
                )
            ).one()
        return float(total)

    def average_daily_usage(self, days: int = 30, today: date | None = None) -> float:
        start = ((today or date.today()) - timedelta(days=days)).isoformat()
        daily = (
            select(UsageEvent.date, func.sum(UsageEvent.liters).label("daily_total"))
            .where(UsageEvent.date >= start)
            .group_by(UsageEvent.date)
            .subquery()
        )
        with store_errors(self.session, "average daily usage"):
            avg = self.session.exec(
                select(func.coalesce(func.avg(daily.c.daily_total), 0))
            ).one()
        return float(avg)

    def update(self, usage_id: int, data: UsageUpdate) -> Optional[UsageEvent]:
        """Apply the fields set on ``data``; returns None for an unknown id."""
        event = self.get(usage_id)
        if event is None:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(event, key, value)
        with store_errors(self.session, "update usage"):
            self.session.add(event)
            self.session.commit()
            self.session.refresh(event)
        return event

    def delete(self, usage_id: int) -> bool:
        event = self.get(usage_id)
        if event is None:
            return False
        with store_errors(self.session, "delete usage"):
            self.session.delete(event)
            self.session.commit()
        logger.info(f"Deleted usage id {usage_id}")
        return True
