"""Common test fixtures."""

from __future__ import annotations

import pytest

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.core.month import MonthCalendar
from hcu_shift.models.config import EngineConfig, GenerationConfig
from hcu_shift.models.schedule import ScheduleInput
from hcu_shift.models.staff import Rank, StaffMember

# June 2025 starts on a Sunday, has 30 days and no national holidays.
YEAR, MONTH = 2025, 6


@pytest.fixture
def roster() -> list[StaffMember]:
    """Ten active staff: head, chief, deputy and seven general nurses."""
    return [
        StaffMember(id=1, name="佐藤", rank=Rank.HEAD),
        StaffMember(id=2, name="鈴木", rank=Rank.CHIEF),
        StaffMember(id=3, name="高橋", rank=Rank.DEPUTY),
        StaffMember(id=4, name="田中"),
        StaffMember(id=5, name="伊藤"),
        StaffMember(id=6, name="渡辺"),
        StaffMember(id=7, name="山本"),
        StaffMember(id=8, name="中村"),
        StaffMember(id=9, name="小林"),
        StaffMember(id=10, name="加藤"),
    ]


@pytest.fixture
def small_roster() -> list[StaffMember]:
    """Four staff, for fast unit tests of single cells."""
    return [
        StaffMember(id=1, name="Alice", rank=Rank.HEAD),
        StaffMember(id=2, name="Bob", rank=Rank.CHIEF),
        StaffMember(id=3, name="Carol"),
        StaffMember(id=4, name="Dave"),
    ]


@pytest.fixture
def small_config() -> GenerationConfig:
    return GenerationConfig(
        night_pattern=[1],
        weekday_day_staff=1,
        weekend_day_staff=1,
        max_night_shifts=8,
        max_days_off=12,
        max_consecutive_days=5,
    )


@pytest.fixture
def small_input(small_roster, small_config) -> ScheduleInput:
    return ScheduleInput(year=YEAR, month=MONTH, roster=small_roster, config=small_config)


@pytest.fixture
def small_calendar(small_config) -> MonthCalendar:
    return MonthCalendar.build(YEAR, MONTH, small_config)


@pytest.fixture
def small_grid(small_input, small_calendar) -> ShiftGrid:
    return ShiftGrid(small_input, small_calendar)


@pytest.fixture
def unit_config() -> GenerationConfig:
    """A roster-sized configuration that the engine can satisfy."""
    return GenerationConfig(
        night_pattern=[2, 2],
        max_night_shifts=8,
        max_days_off=10,
        max_consecutive_days=5,
        weekday_day_staff=3,
        weekend_day_staff=2,
    )


@pytest.fixture
def unit_input(roster, unit_config) -> ScheduleInput:
    return ScheduleInput(year=YEAR, month=MONTH, roster=roster, config=unit_config)


@pytest.fixture
def scenario_config() -> GenerationConfig:
    """Day target 6/5, nights [4, 4], at most 3 consecutive days, 10 days off."""
    return GenerationConfig(
        night_pattern=[4, 4],
        max_consecutive_days=3,
        max_days_off=10,
        weekday_day_staff=6,
        weekend_day_staff=5,
    )


@pytest.fixture
def fast_engine() -> EngineConfig:
    """Fast engine config for tests."""
    return EngineConfig(candidate_count=4, anneal_iterations=150, fairness_passes=20)
