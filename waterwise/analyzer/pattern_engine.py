"""WaterWise — Pattern Engine.

Groups usage by weekday and averages the liters logged on each weekday
across all time. Weekdays run Sunday through Saturday; a weekday with no
events is left out rather than zero-filled.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, List

from waterwise.models.analysis_models import UsagePattern
from waterwise.models.records import UsageEvent
from waterwise.core.logging import get_logger

logger = get_logger("analyzer.pattern")

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]
MAX_PEAK_HOURS = 3


def _day_index(day: str) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (date.fromisoformat(day).weekday() + 1) % 7


def _hour(time_of_day: str | None) -> int | None:
    if not time_of_day:
        return None
    try:
        hour = int(time_of_day.split(":", 1)[0])
    except ValueError:
        return None
    return hour if 0 <= hour <= 23 else None


def _peak_hours(hourly: dict[int, float]) -> List[int]:
    ranked = sorted(hourly.items(), key=lambda kv: (-kv[1], kv[0]))
    return [hour for hour, _ in ranked[:MAX_PEAK_HOURS]]


def compute_patterns(events: Iterable[UsageEvent]) -> List[UsagePattern]:
    """Mean liters per weekday, in weekday order."""
    by_day: dict[int, List[float]] = defaultdict(list)
    hourly: dict[int, dict[int, float]] = defaultdict(lambda: defaultdict(float))

    for event in events:
        idx = _day_index(event.date)
        by_day[idx].append(event.liters)
        hour = _hour(event.time)
        if hour is not None:
            hourly[idx][hour] += event.liters

    patterns = [
        UsagePattern(
            day_of_week=DAY_NAMES[idx],
            average_usage=sum(by_day[idx]) / len(by_day[idx]),
            peak_hours=_peak_hours(hourly.get(idx, {})),
        )
        for idx in range(7)
        if by_day.get(idx)
    ]
    logger.info(f"Computed usage patterns for {len(patterns)} weekdays")
    return patterns
