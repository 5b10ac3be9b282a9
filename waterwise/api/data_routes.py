"""WaterWise — Data Export / Import Routes."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from waterwise.api.dependencies import get_bill_repository, get_usage_repository
from waterwise.core.errors import DataAccessError, ImportFormatError
from waterwise.repositories.bills import SQLBillRepository
from waterwise.repositories.usage import SQLUsageRepository
from waterwise.services.export import (
    ImportResult,
    build_csv,
    build_export,
    import_document,
)
from waterwise.core.logging import get_logger

logger = get_logger("api.data")

router = APIRouter(prefix="/data", tags=["Data"])


def _file_name(ext: str) -> str:
    return f"waterwise_export_{datetime.now(timezone.utc).date().isoformat()}.{ext}"


@router.get("/export.json")
async def export_json(
    usage: SQLUsageRepository = Depends(get_usage_repository),
    bills: SQLBillRepository = Depends(get_bill_repository),
):
    try:
        return build_export(usage.fetch_all(), bills.fetch_all())
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=f"Failed to export data: {e}")


@router.get("/export.csv", response_class=PlainTextResponse)
async def export_csv(
    usage: SQLUsageRepository = Depends(get_usage_repository),
    bills: SQLBillRepository = Depends(get_bill_repository),
):
    try:
        body = build_csv(usage.fetch_all(), bills.fetch_all())
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=f"Failed to export CSV: {e}")
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{_file_name("csv")}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_json(
    document: Dict[str, Any] = Body(...),
    usage: SQLUsageRepository = Depends(get_usage_repository),
    bills: SQLBillRepository = Depends(get_bill_repository),
):
    """Re-add the rows of a JSON export."""
    try:
        return import_document(document, usage, bills)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=f"Import failed: {e}")
