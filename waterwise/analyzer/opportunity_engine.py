"""WaterWise — Opportunity Engine.

Flags categories whose estimated usage is above a recommended target:
- Shower & Bath ~35% of the daily average
- Toilet ~27%
- Kitchen ~20%
- General, the daily average itself

The category split is a fixed proportion of the overall daily average; the
``category`` recorded on events is not consulted.
"""

from typing import Iterable, List, NamedTuple

from waterwise.models.analysis_models import (
    PRIORITY_RANK,
    Priority,
    WaterSavingsOpportunity,
)
from waterwise.models.records import UsageEvent
from waterwise.core.logging import get_logger

logger = get_logger("analyzer.opportunity")

DAYS_PER_MONTH = 30


class Heuristic(NamedTuple):
    category: str
    share: float  # Fraction of the daily average attributed to the category
    threshold: float  # liters / day
    target: float  # liters / day
    priority: Priority
    description: str


HEURISTICS = [
    Heuristic(
        "Shower & Bath",
        0.35,
        50,
        40,
        Priority.HIGH,
        "Reduce shower time to 5 minutes or install low-flow showerheads",
    ),
    Heuristic(
        "Toilet",
        0.27,
        30,
        24,
        Priority.MEDIUM,
        "Install dual-flush toilet system or check for leaks",
    ),
    Heuristic(
        "Kitchen",
        0.20,
        20,
        15,
        Priority.MEDIUM,
        "Use dishwasher efficiently, don't pre-rinse dishes",
    ),
    Heuristic(
        "General",
        1.0,
        150,
        100,
        Priority.HIGH,
        "Check for leaks and review all water-using activities",
    ),
]


def daily_average(events: Iterable[UsageEvent]) -> float:
    """Total liters over the number of distinct days with usage (0 if none)."""
    total = 0.0
    days: set[str] = set()
    for event in events:
        total += event.liters
        days.add(event.date)
    return total / len(days) if days else 0.0


def compute_opportunities(events: Iterable[UsageEvent]) -> List[WaterSavingsOpportunity]:
    """Evaluate every heuristic against the overall daily average."""
    events = list(events)
    if not events:
        return []

    avg = daily_average(events)
    opportunities: List[WaterSavingsOpportunity] = []

    for h in HEURISTICS:
        estimate = avg * h.share
        if estimate > h.threshold:
            opportunities.append(
                WaterSavingsOpportunity(
                    category=h.category,
                    current_usage=estimate,
                    recommended_usage=h.target,
                    potential_savings=(estimate - h.target) * DAYS_PER_MONTH,
                    priority=h.priority,
                    description=h.description,
                )
            )

    # sorted() is stable, so ties keep heuristic order
    opportunities = sorted(opportunities, key=lambda o: PRIORITY_RANK[o.priority])
    logger.info(
        f"Found {len(opportunities)} savings opportunities (daily avg {avg:.1f}L)"
    )
    return opportunities
