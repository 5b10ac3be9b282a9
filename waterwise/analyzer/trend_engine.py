"""WaterWise — Trend Engine.

Buckets usage and bill amounts by calendar month (``YYYY-MM``) and keeps the
most recent months with any activity, oldest first.
"""

from collections import defaultdict
from typing import Iterable, List

from waterwise.models.analysis_models import MonthlyTrend
from waterwise.models.records import Bill, UsageEvent
from waterwise.core.logging import get_logger

logger = get_logger("analyzer.trend")

DEFAULT_MONTHS = 6


def month_key(day: str) -> str:
    """``2024-03-15`` → ``2024-03``."""
    return day[:7]


def compute_monthly_trends(
    events: Iterable[UsageEvent],
    bills: Iterable[Bill],
    months: int = DEFAULT_MONTHS,
) -> List[MonthlyTrend]:
    """Per-month totals for the ``months`` most recent active months."""
    usage: dict[str, float] = defaultdict(float)
    cost: dict[str, float] = defaultdict(float)
    days: dict[str, set[str]] = defaultdict(set)

    for event in events:
        key = month_key(event.date)
        usage[key] += event.liters
        days[key].add(event.date)

    for bill in bills:
        cost[month_key(bill.date)] += bill.amount

    # YYYY-MM sorts chronologically
    keys = sorted(set(usage) | set(cost))
    selected = keys[-months:] if months > 0 else []

    trends: List[MonthlyTrend] = []
    for key in selected:
        total = usage.get(key, 0.0)
        active_days = len(days.get(key, ())) or 1
        trends.append(
            MonthlyTrend(
                month=key,
                total_usage=total,
                total_cost=cost.get(key, 0.0),
                average_daily=total / active_days,
            )
        )

    logger.info(f"Computed {len(trends)} monthly trends (of {len(keys)} active months)")
    return trends
