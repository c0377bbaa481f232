"""Tests for per-staff constraints."""

from __future__ import annotations

from hcu_shift.constraints.staff_constraints import DaysOffCap, MaxConsecutiveWork, NightCap
from hcu_shift.models.shift import Shift


class TestMaxConsecutiveWork:
    def test_quadratic_overflow(self, small_grid):
        # cap is 5
        for d in range(7):
            small_grid.set(2, d, Shift.DAY)
        fn = MaxConsecutiveWork().compile({"penalty_weight": 100.0})
        result = fn(small_grid.context())
        assert result.penalty == 400.0
        assert "7連勤" in result.details

    def test_after_shift_breaks_run(self, small_grid):
        for d in range(7):
            small_grid.set(2, d, Shift.DAY)
        small_grid.set(2, 3, Shift.AFTER)
        fn = MaxConsecutiveWork().compile({"penalty_weight": 100.0})
        assert fn(small_grid.context()).penalty == 0.0


class TestDaysOffCap:
    def test_quadratic_overflow(self, small_grid):
        # cap is 12
        for d in range(12):
            small_grid.set(2, d, Shift.OFF)
        small_grid.set(2, 12, Shift.PAID_LEAVE)
        small_grid.set(2, 13, Shift.OFF)
        small_grid.set(2, 14, Shift.AFTER)
        fn = DaysOffCap().compile({"penalty_weight": 50.0})
        assert fn(small_grid.context()).penalty == 200.0

    def test_exempt_staff_skipped(self, small_grid):
        for d in range(20):
            small_grid.set(2, d, Shift.OFF)
        small_grid.exempt[2] = True
        fn = DaysOffCap().compile({"penalty_weight": 50.0})
        assert fn(small_grid.context()).penalty == 0.0


class TestNightCap:
    def test_excess_over_cap(self, small_grid):
        small_grid.night_caps[2] = 1
        small_grid.set(2, 0, Shift.NIGHT)
        small_grid.set(2, 5, Shift.NIGHT)
        fn = NightCap().compile({"penalty_per_excess": 150.0, "penalty_per_forbidden": 200.0})
        assert fn(small_grid.context()).penalty == 150.0

    def test_forbidden_nights(self, small_grid):
        small_grid.no_night[3] = True
        small_grid.night_caps[3] = 0
        small_grid.set(3, 0, Shift.NIGHT)
        fn = NightCap().compile({"penalty_per_excess": 150.0, "penalty_per_forbidden": 200.0})
        assert fn(small_grid.context()).penalty == 200.0
