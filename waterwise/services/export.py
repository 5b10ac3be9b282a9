"""WaterWise — Data Export & Import.

JSON export is a versioned document that can be imported back. CSV export is
a human readable dump with one section per record type.
"""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ValidationError

from waterwise.core.errors import ImportFormatError
from waterwise.models.records import (
    Bill,
    BillCreate,
    UsageCreate,
    UsageEvent,
)
from waterwise.repositories.bills import SQLBillRepository
from waterwise.repositories.usage import SQLUsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("services.export")

EXPORT_VERSION = "1.0"


class ImportResult(BaseModel):
    bills_imported: int = 0
    usage_imported: int = 0


def build_export(usage: List[UsageEvent], bills: List[Bill]) -> Dict[str, Any]:
    return {
        "version": EXPORT_VERSION,
        "export_date": datetime.now(timezone.utc).isoformat(),
        "bills": [b.model_dump() for b in bills],
        "usage": [u.model_dump() for u in usage],
    }


def build_csv(usage: List[UsageEvent], bills: List[Bill]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")

    out.write("=== BILLS ===\n")
    writer.writerow(["Date", "Amount", "Consumption (L)", "Currency"])
    for b in bills:
        writer.writerow([b.date, b.amount, b.consumption_liters, b.currency])

    out.write("\n=== USAGE ===\n")
    writer.writerow(["Date", "Liters", "Category", "Description"])
    for u in usage:
        writer.writerow([u.date, u.liters, u.category or "", u.description or ""])

    return out.getvalue()


def import_document(
    document: Dict[str, Any],
    usage_repo: SQLUsageRepository,
    bill_repo: SQLBillRepository,
) -> ImportResult:
    """Re-add every valid row of an export document.

    Rows failing validation are skipped. Bill ids are not reused, so
    importing the same file twice records the bills twice.
    """
    if (
        not isinstance(document, dict)
        or not document.get("version")
        or not isinstance(document.get("bills"), list)
        or not isinstance(document.get("usage"), list)
    ):
        raise ImportFormatError("Invalid import file format")

    result = ImportResult()

    for row in document["bills"]:
        try:
            data = BillCreate(
                amount=row.get("amount"),
                date=row.get("date"),
                consumption_liters=row.get("consumption_liters"),
                currency=row.get("currency"),
            )
        except (ValidationError, AttributeError) as e:
            logger.warning(f"Skipping bill row: {e}")
            continue
        bill_repo.add(data)
        result.bills_imported += 1

    for row in document["usage"]:
        try:
            data = UsageCreate(
                liters=row.get("liters"),
                date=row.get("date"),
                time=row.get("time"),
                category=row.get("category"),
                location=row.get("location"),
                description=row.get("description"),
            )
        except (ValidationError, AttributeError) as e:
            logger.warning(f"Skipping usage row: {e}")
            continue
        usage_repo.add(data)
        result.usage_imported += 1

    logger.info(
        f"Imported {result.bills_imported} bills and {result.usage_imported} usage events"
    )
    return result
