"""End-to-end generation scenarios for a ten-nurse unit."""

from __future__ import annotations

import pytest

from hcu_shift.api import generate, validate
from hcu_shift.models.shift import Shift
from hcu_shift.models.staff import StaffOverride

YEAR, MONTH = 2025, 6
NURSE = 4
NO_NIGHT = 8

INTEGRITY_CHECKS = (
    "night_without_after",
    "orphan_after",
    "locked_cell_changed",
    "request_unfulfilled",
)


@pytest.fixture
def run(roster, scenario_config, fast_engine):
    def _run(seed: int = 11, **kwargs):
        return generate(
            YEAR, MONTH, roster, config=scenario_config, engine_config=fast_engine, seed=seed, **kwargs
        )

    return _run


class TestDefaultMonth:
    def test_nights_hold_or_are_flagged(self, run):
        _, report = run()
        flagged = set(report.shortfall_days)
        for day in report.days:
            assert day.night_required == 4
            assert day.night_count == 4 or day.day in flagged

    def test_caps_hold_or_are_flagged(self, run):
        _, report = run()
        over_off = {v.staff_id for v in report.violations_for("days_off_cap")}
        over_run = {v.staff_id for v in report.violations_for("consecutive_cap")}
        for summary in report.staff:
            assert summary.days_off <= 10 or summary.staff_id in over_off
            assert summary.max_run <= 3 or summary.staff_id in over_run

    def test_integrity_checks_pass(self, run):
        _, report = run()
        for check in INTEGRITY_CHECKS:
            assert report.violations_for(check) == []


class TestRequestedNight:
    def test_after_and_rest_follow(self, run):
        result, _ = run(preferences={NURSE: {5: "夜"}})
        assert result.cell(NURSE, 5) == Shift.NIGHT
        assert result.cell(NURSE, 6) == Shift.AFTER
        assert result.cell(NURSE, 7) == Shift.OFF

    def test_request_on_day_seven_wins(self, run):
        result, report = run(preferences={NURSE: {5: "夜", 7: "日"}})
        assert result.cell(NURSE, 6) == Shift.AFTER
        assert result.cell(NURSE, 7) == Shift.DAY
        assert report.violations_for("request_unfulfilled") == []

    def test_request_on_day_six_wins(self, run):
        result, report = run(preferences={NURSE: {5: "夜", 6: "休"}})
        assert result.cell(NURSE, 6) == Shift.OFF
        assert report.violations_for("night_without_after") == []


class TestCarryOver:
    def test_double_cycle_tail_keeps_day_one_off(self, run):
        result, report = run(carry_over={NURSE: ["日", "夜", "明", "夜", "明"]})
        assert result.cell(NURSE, 1) == Shift.OFF
        assert result.cell(NURSE, 2) == Shift.OFF
        assert report.violations_for("locked_cell_changed") == []


class TestNoNightStaff:
    @pytest.mark.parametrize(
        "extra",
        [
            {},
            {"preferences": {NO_NIGHT: {5: "休", 6: "日"}, NURSE: {5: "夜"}}},
            {"carry_over": {NO_NIGHT: ["夜", "明", "夜", "明"]}},
        ],
    )
    def test_zero_nights(self, run, extra):
        result, report = run(overrides={NO_NIGHT: StaffOverride(no_night_shift=True)}, **extra)
        assert Shift.NIGHT not in result.shifts[NO_NIGHT]
        assert report.violations_for("no_night_shift") == []

    def test_night_ending_tail(self, run):
        result, _ = run(
            overrides={NO_NIGHT: StaffOverride(no_night_shift=True)},
            carry_over={NO_NIGHT: ["夜", "明", "夜"]},
        )
        assert result.cell(NO_NIGHT, 1) == Shift.AFTER
        assert result.cell(NO_NIGHT, 2) == Shift.OFF
        assert result.cell(NO_NIGHT, 3) == Shift.OFF
        assert Shift.NIGHT not in result.shifts[NO_NIGHT]


class TestDeterminism:
    def test_same_seed_same_schedule(self, run):
        first, _ = run(seed=2025)
        second, _ = run(seed=2025)
        assert first.shifts == second.shifts
        assert first.seed == second.seed == 2025


class TestRevalidation:
    @pytest.mark.parametrize(
        "extra",
        [
            {},
            {"preferences": {NURSE: {5: "夜", 7: "日"}}},
            {"carry_over": {NURSE: ["夜", "明", "夜", "明"]}},
            {
                "overrides": {NO_NIGHT: StaffOverride(no_night_shift=True)},
                "carry_over": {NO_NIGHT: ["夜", "明", "夜"]},
                "preferences": {NO_NIGHT: {10: "有"}},
            },
        ],
    )
    def test_validate_reproduces_report(self, run, roster, scenario_config, extra):
        result, report = run(**extra)
        again = validate(result, roster, config=scenario_config, **extra)
        assert again.model_dump() == report.model_dump()
        for check in INTEGRITY_CHECKS:
            assert again.violations_for(check) == []
