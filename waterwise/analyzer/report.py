"""WaterWise — Usage Report Orchestrator.

Runs the analytics engines against a fresh read of the stores:
  read usage + bills (once) → patterns / trends / opportunities → UsageReport

The standalone analyses trade correctness for availability: a failed read is
logged and yields an empty list. The report is the one place a failed read
is surfaced, as ``DataAccessError``, so callers can tell "no data yet" from
"data unreachable".
"""

import asyncio
from typing import List

from waterwise.analyzer.opportunity_engine import compute_opportunities
from waterwise.analyzer.pattern_engine import compute_patterns
from waterwise.analyzer.trend_engine import DEFAULT_MONTHS, compute_monthly_trends
from waterwise.core.errors import DataAccessError
from waterwise.models.analysis_models import (
    MonthlyTrend,
    ReportSummary,
    UsagePattern,
    UsageReport,
    WaterSavingsOpportunity,
)
from waterwise.models.records import Bill, UsageEvent
from waterwise.repositories.base import BillRepository, UsageRepository
from waterwise.core.logging import get_logger

logger = get_logger("analyzer.report")


class UsageAnalytics:
    """Analytics over the current usage and bill records."""

    def __init__(self, usage: UsageRepository, bills: BillRepository):
        self.usage = usage
        self.bills = bills

    async def _read_usage(self) -> List[UsageEvent]:
        return self.usage.fetch_all()

    async def _read_bills(self) -> List[Bill]:
        return self.bills.fetch_all()

    async def analyze_usage_patterns(self) -> List[UsagePattern]:
        try:
            return compute_patterns(await self._read_usage())
        except Exception as e:
            logger.error(f"Failed to analyze usage patterns: {e}")
            return []

    async def calculate_monthly_trends(
        self, months: int = DEFAULT_MONTHS
    ) -> List[MonthlyTrend]:
        try:
            usage, bills = await asyncio.gather(self._read_usage(), self._read_bills())
            return compute_monthly_trends(usage, bills, months)
        except Exception as e:
            logger.error(f"Failed to calculate monthly trends: {e}")
            return []

    async def identify_savings_opportunities(self) -> List[WaterSavingsOpportunity]:
        try:
            return compute_opportunities(await self._read_usage())
        except Exception as e:
            logger.error(f"Failed to identify savings opportunities: {e}")
            return []

    async def generate_usage_report(self) -> UsageReport:
        """Summary plus every analysis over one snapshot of the stores.

        Both stores are read once, concurrently; the three analyses then run
        concurrently over the same rows.

        Raises:
            DataAccessError: the usage or bill store could not be read.
        """
        # Join both reads before deciding on failure
        usage, bills = await asyncio.gather(
            self._read_usage(), self._read_bills(), return_exceptions=True
        )

        for name, result in (("usage", usage), ("bills", bills)):
            if isinstance(result, BaseException):
                logger.error(f"Failed to generate usage report: {name} read failed: {result}")
                if isinstance(result, DataAccessError):
                    raise result
                raise DataAccessError(f"Failed to read {name}") from result

        patterns, trends, opportunities = await asyncio.gather(
            asyncio.to_thread(compute_patterns, usage),
            asyncio.to_thread(compute_monthly_trends, usage, bills, DEFAULT_MONTHS),
            asyncio.to_thread(compute_opportunities, usage),
            return_exceptions=True,
        )
        for result in (patterns, trends, opportunities):
            if isinstance(result, Exception):
                logger.error(f"Failed to generate usage report: {result}")
                raise DataAccessError("Stored records could not be analysed") from result

        total_usage = sum(u.liters for u in usage)
        total_cost = sum(b.amount for b in bills)
        total_days = len({u.date for u in usage})

        report = UsageReport(
            summary=ReportSummary(
                total_days=total_days,
                total_usage=total_usage,
                average_daily=total_usage / total_days if total_days > 0 else 0.0,
                total_cost=total_cost,
            ),
            patterns=patterns,
            trends=trends,
            opportunities=opportunities,
        )
        logger.info(
            f"Usage report: {total_days} days, {total_usage:.1f}L, cost {total_cost:.2f}"
        )
        return report
