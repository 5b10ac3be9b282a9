"""WaterWise — Usage & Bill Record Routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from waterwise.api.dependencies import get_bill_repository, get_usage_repository
from waterwise.core.errors import DataAccessError
from waterwise.models.records import (
    Bill,
    BillCreate,
    BillUpdate,
    UsageCreate,
    UsageEvent,
    UsageUpdate,
)
from waterwise.repositories.bills import SQLBillRepository
from waterwise.repositories.usage import SQLUsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("api.records")

router = APIRouter(tags=["Records"])


def _store_unavailable(e: DataAccessError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Storage unavailable: {e}")


# ── Usage ──


@router.post("/usage", response_model=UsageEvent, status_code=201)
async def add_usage(
    payload: UsageCreate,
    repo: SQLUsageRepository = Depends(get_usage_repository),
):
    """Log a water-consumption event."""
    try:
        return repo.add(payload)
    except DataAccessError as e:
        raise _store_unavailable(e)


@router.get("/usage", response_model=List[UsageEvent])
async def list_usage(
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    repo: SQLUsageRepository = Depends(get_usage_repository),
):
    """All usage events, newest first, optionally within a date range."""
    try:
        if start_date and end_date:
            return repo.fetch_by_date_range(start_date, end_date)
        return repo.fetch_all()
    except DataAccessError as e:
        raise _store_unavailable(e)


@router.get("/usage/day/{day}")
async def usage_for_day(
    day: str,
    repo: SQLUsageRepository = Depends(get_usage_repository),
):
    """Events and total liters for one date."""
    try:
        return {
            "date": day,
            "total_liters": repo.total_usage_by_date(day),
            "events": repo.fetch_by_date(day),
        }
    except DataAccessError as e:
        raise _store_unavailable(e)


@router.put("/usage/{usage_id}", response_model=UsageEvent)
async def update_usage(
    usage_id: int,
    payload: UsageUpdate,
    repo: SQLUsageRepository = Depends(get_usage_repository),
):
    try:
        event = repo.update(usage_id, payload)
    except DataAccessError as e:
        raise _store_unavailable(e)
    if event is None:
        raise HTTPException(status_code=404, detail="Usage event not found")
    return event


@router.delete("/usage/{usage_id}", status_code=204)
async def delete_usage(
    usage_id: int,
    repo: SQLUsageRepository = Depends(get_usage_repository),
):
    try:
        deleted = repo.delete(usage_id)
    except DataAccessError as e:
        raise _store_unavailable(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Usage event not found")


# ── Bills ──


@router.post("/bills", response_model=Bill, status_code=201)
async def add_bill(
    payload: BillCreate,
    repo: SQLBillRepository = Depends(get_bill_repository),
):
    """Record a utility bill."""
    try:
        if payload.id and repo.get(payload.id):
            raise HTTPException(
                status_code=409, detail=f"Bill '{payload.id}' already exists"
            )
        return repo.add(payload)
    except DataAccessError as e:
        raise _store_unavailable(e)


@router.get("/bills", response_model=List[Bill])
async def list_bills(
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    repo: SQLBillRepository = Depends(get_bill_repository),
):
    try:
        if start_date and end_date:
            return repo.fetch_by_date_range(start_date, end_date)
        return repo.fetch_all()
    except DataAccessError as e:
        raise _store_unavailable(e)


@router.put("/bills/{bill_id}", response_model=Bill)
async def update_bill(
    bill_id: str,
    payload: BillUpdate,
    repo: SQLBillRepository = Depends(get_bill_repository),
):
    try:
        bill = repo.update(bill_id, payload)
    except DataAccessError as e:
        raise _store_unavailable(e)
    if bill is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


@router.delete("/bills/{bill_id}", status_code=204)
async def delete_bill(
    bill_id: str,
    repo: SQLBillRepository = Depends(get_bill_repository),
):
    try:
        deleted = repo.delete(bill_id)
    except DataAccessError as e:
        raise _store_unavailable(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bill not found")
