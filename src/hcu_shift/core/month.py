"""Month calendar: day classification and staffing requirement lookup."""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass

import holidays
import numpy as np
from numpy.typing import NDArray

from hcu_shift.models.config import GenerationConfig

WEEKDAY_LABELS = ("月", "火", "水", "木", "金", "土", "日")


@dataclass(frozen=True)
class WeekWindow:
    """A run of days sharing one night headcount. Days are 1-based, inclusive."""

    start: int
    end: int
    count: int
    index: int


def week_windows(year: int, month: int, pattern: list[int], start_slot: int) -> list[WeekWindow]:
    """Split the month into Sunday-Saturday windows.

    Days before the first Sunday form a partial first window that takes a
    pattern slot of its own.
    """
    num_days = calendar.monthrange(year, month)[1]
    first_weekday = dt.date(year, month, 1).weekday()  # 0=Mon .. 6=Sun
    days_until_sunday = (6 - first_weekday) % 7

    windows: list[WeekWindow] = []
    day = 1
    index = 0
    while day <= num_days:
        if index == 0 and days_until_sunday > 0:
            end = min(days_until_sunday, num_days)
        else:
            end = min(day + 6, num_days)
        count = pattern[(index + start_slot) % len(pattern)]
        windows.append(WeekWindow(day, end, count, index))
        day = end + 1
        index += 1
    return windows


@dataclass(frozen=True)
class MonthCalendar:
    """Precomputed per-day facts for one (year, month). Arrays are 0-based."""

    year: int
    month: int
    num_days: int
    weekdays: tuple[int, ...]
    holiday_days: frozenset[int]
    windows: tuple[WeekWindow, ...]
    day_required: NDArray[np.int_]
    day_maximum: NDArray[np.int_]
    night_required: NDArray[np.int_]
    special: NDArray[np.bool_]
    boundary: NDArray[np.bool_]

    @classmethod
    def build(cls, year: int, month: int, config: GenerationConfig) -> MonthCalendar:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be 1-12, got {month}")
        num_days = calendar.monthrange(year, month)[1]
        weekdays = tuple(dt.date(year, month, d).weekday() for d in range(1, num_days + 1))

        national = holidays.country_holidays(config.holiday_country, years=year)
        holiday_days = frozenset(
            d for d in range(1, num_days + 1) if dt.date(year, month, d) in national
        )

        windows = tuple(
            week_windows(year, month, config.night_pattern, config.night_pattern_start)
        )

        special = np.array(
            [weekdays[i] >= 5 or (i + 1) in holiday_days for i in range(num_days)],
            dtype=bool,
        )
        boundary = np.array(
            [
                (month == 12 and d in (30, 31)) or (month == 1 and d <= 3)
                for d in range(1, num_days + 1)
            ],
            dtype=bool,
        )
        day_required = np.zeros(num_days, dtype=int)
        day_maximum = np.zeros(num_days, dtype=int)
        night_required = np.zeros(num_days, dtype=int)
        for i in range(num_days):
            if boundary[i]:
                required = config.year_end_day_staff if month == 12 else config.new_year_day_staff
            elif special[i]:
                required = config.weekend_day_staff
            else:
                required = config.weekday_day_staff
            day_required[i] = required
            ordinary = not (boundary[i] or special[i])
            day_maximum[i] = required + config.weekday_overstaff_slack if ordinary else required

        for w in windows:
            night_required[w.start - 1 : w.end] = w.count

        return cls(
            year=year,
            month=month,
            num_days=num_days,
            weekdays=weekdays,
            holiday_days=holiday_days,
            windows=windows,
            day_required=day_required,
            day_maximum=day_maximum,
            night_required=night_required,
            special=special,
            boundary=boundary,
        )

    def is_sunday(self, day_idx: int) -> bool:
        return self.weekdays[day_idx] == 6

    def is_special(self, day_idx: int) -> bool:
        """Saturday, Sunday or national holiday."""
        return bool(self.special[day_idx])

    def weekday_label(self, day_idx: int) -> str:
        return WEEKDAY_LABELS[self.weekdays[day_idx]]

    @property
    def ordinary_days(self) -> NDArray[np.bool_]:
        """Weekdays that are neither holidays nor year-boundary days."""
        return ~self.special & ~self.boundary
