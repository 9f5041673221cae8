"""
Unit tests for the day-off target reduction
"""

from datetime import date
from analytics.day_off import DayOffAdjuster, target_reduction
from models.day_off import DayOff


def day_off(day, half=False):
    return DayOff(assignee_email="ana@example.com", date=day, is_half_day=half)


class TestDayOffAdjuster:

    def test_full_and_half_days(self):
        records = [day_off(date(2025, 6, 2)), day_off(date(2025, 6, 3)), day_off(date(2025, 6, 4), half=True)]

        assert target_reduction(records) == 80.0

    def test_no_records(self):
        assert target_reduction([]) == 0.0

    def test_bounds_are_inclusive(self):
        records = [day_off(date(2025, 5, 31)), day_off(date(2025, 6, 1)), day_off(date(2025, 6, 7), half=True)]

        assert target_reduction(records, start=date(2025, 6, 1), end=date(2025, 6, 7)) == 48.0

    def test_custom_point_values(self):
        adjuster = DayOffAdjuster(full_day_points=40, half_day_points=20)

        assert adjuster.reduction([day_off(date(2025, 6, 2)), day_off(date(2025, 6, 3), half=True)]) == 60.0
