"""WaterWise — SQL Bill Repository."""

import time
import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from waterwise.config import settings
from waterwise.models.records import Bill, BillCreate, BillUpdate
from waterwise.repositories.base import BillRepository, store_errors
from waterwise.core.logging import get_logger

logger = get_logger("repositories.bills")


def _new_bill_id() -> str:
    return f"BILL-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class SQLBillRepository(BillRepository):
    """Bills stored in the ``bills`` table."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, data: BillCreate) -> Bill:
        bill = Bill(
            id=data.id or _new_bill_id(),
            amount=data.amount,
            date=data.date,
            consumption_liters=data.consumption_liters,
            currency=data.currency or settings.default_currency,
        )
        with store_errors(self.session, "add bill"):
            self.session.add(bill)
            self.session.commit()
            self.session.refresh(bill)
        logger.info(f"Recorded bill {bill.id}: {bill.amount} {bill.currency}")
        return bill

    def fetch_all(self) -> List[Bill]:
        with store_errors(self.session, "read bills"):
            return list(
                self.session.exec(
                    select(Bill).order_by(Bill.date.desc())  # type: ignore
                ).all()
            )

    def fetch_by_date_range(self, start_date: str, end_date: str) -> List[Bill]:
        with store_errors(self.session, "read bill range"):
            return list(
                self.session.exec(
                    select(Bill)
                    .where(Bill.date >= start_date, Bill.date <= end_date)
                    .order_by(Bill.date.desc())  # type: ignore
                ).all()
            )

    def get(self, bill_id: str) -> Optional[Bill]:
        with store_errors(self.session, "read bill"):
            return self.session.get(Bill, bill_id)

    def total_consumption(self) -> float:
        with store_errors(self.session, "sum bill consumption"):
            total = self.session.exec(
                select(func.coalesce(func.sum(Bill.consumption_liters), 0))
            ).one()
        return float(total)

    def update(self, bill_id: str, data: BillUpdate) -> Optional[Bill]:
        bill = self.get(bill_id)
        if bill is None:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(bill, key, value)
        with store_errors(self.session, "update bill"):
            self.session.add(bill)
            self.session.commit()
            self.session.refresh(bill)
        return bill

    def delete(self, bill_id: str) -> bool:
        bill = self.get(bill_id)
        if bill is None:
            return False
        with store_errors(self.session, "delete bill"):
            self.session.delete(bill)
            self.session.commit()
        logger.info(f"Deleted bill {bill_id}")
        return True
