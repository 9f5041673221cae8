"""
Target reduction for registered days off.

A full day off removes 32 points from a member's target and a half day
removes 16. The aggregator does not apply this automatically; callers
combine the reduction with the team target themselves.
"""

from datetime import date
from typing import Any, Iterable, Optional

FULL_DAY_POINTS = 32.0
HALF_DAY_POINTS = 16.0


class DayOffAdjuster:
    """Sums the point value of day-off records in a period"""

    def __init__(self, full_day_points: float = FULL_DAY_POINTS, half_day_points: float = HALF_DAY_POINTS):
        self.full_day_points = full_day_points
        self.half_day_points = half_day_points

    def value_of(self, day_off: Any) -> float:
        return self.half_day_points if day_off.is_half_day else self.full_day_points

    def reduction(
        self,
        day_offs: Iterable[Any],
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> float:
        """
        Total target reduction for the records dated within [start, end].

        Either bound may be omitted to leave that side open.
        """
        total = 0.0
        for day_off in day_offs:
            if start is not None and day_off.date < start:
                continue
            if end is not None and day_off.date > end:
                continue
            total += self.value_of(day_off)
        return total


def target_reduction(
    day_offs: Iterable[Any],
    start: Optional[date] = None,
    end: Optional[date] = None,
    full_day_points: float = FULL_DAY_POINTS,
    half_day_points: float = HALF_DAY_POINTS
) -> float:
    """Shortcut for ``DayOffAdjuster(...).reduction(...)``."""
    return DayOffAdjuster(full_day_points, half_day_points).reduction(day_offs, start, end)
