"""Tests for the generate/validate entry points."""

from __future__ import annotations

import pytest

from hcu_shift.api import generate, validate
from hcu_shift.core.editing import edit_cell
from hcu_shift.models.shift import Shift

YEAR, MONTH = 2025, 6


@pytest.fixture
def generated(roster, unit_config, fast_engine):
    return generate(YEAR, MONTH, roster, config=unit_config, engine_config=fast_engine, seed=8)


class TestGenerate:
    def test_accepts_plain_data(self, unit_config, fast_engine):
        roster = [{"id": i, "name": f"看護師{i}"} for i in range(1, 11)]
        roster[0]["rank"] = "師長"
        result, report = generate(
            YEAR,
            MONTH,
            roster,
            preferences={3: {"10": "有"}},
            overrides={5: {"no_night_shift": True}},
            config=unit_config.model_dump(),
            engine_config=fast_engine,
            seed=1,
        )
        assert result.cell(3, 10) == Shift.PAID_LEAVE
        assert Shift.NIGHT not in result.shifts[5]
        assert len(report.staff) == 10

    def test_invalid_month(self, roster):
        with pytest.raises(ValueError):
            generate(YEAR, 13, roster)

    def test_no_active_staff(self, roster):
        inactive = [m.model_copy(update={"active": False}) for m in roster]
        with pytest.raises(ValueError):
            generate(YEAR, MONTH, inactive)


class TestValidate:
    def test_idempotent(self, generated, roster, unit_config):
        result, _ = generated
        first = validate(result, roster, config=unit_config)
        second = validate(result, roster, config=unit_config)
        assert first.model_dump() == second.model_dump()

    def test_plain_mapping(self, generated, roster, unit_config):
        result, _ = generated
        from_mapping = validate(result.symbols(), roster, config=unit_config, year=YEAR, month=MONTH)
        assert from_mapping.model_dump() == validate(result, roster, config=unit_config).model_dump()

    def test_plain_mapping_needs_month(self, generated, roster):
        result, _ = generated
        with pytest.raises(ValueError):
            validate(result.symbols(), roster)

    def test_manual_edit_is_flagged(self, generated, roster, unit_config):
        result, before = generated
        night_day = next(d for d, s in enumerate(result.shifts[4], start=1) if s == Shift.NIGHT)
        edited = edit_cell(result, 4, night_day, "休")
        report = validate(edited, roster, config=unit_config)
        staffing = report.days[night_day - 1]
        assert staffing.night_count == before.days[night_day - 1].night_count - 1
        assert night_day in report.shortfall_days

    def test_edit_breaking_request_is_reported(self, roster, unit_config, fast_engine):
        preferences = {4: {12: "休"}}
        result, _ = generate(
            YEAR, MONTH, roster, preferences=preferences, config=unit_config,
            engine_config=fast_engine, seed=3,
        )
        edited = edit_cell(result, 4, 12, "日")
        report = validate(edited, roster, preferences=preferences, config=unit_config)
        assert [(v.staff_id, v.day) for v in report.violations_for("request_unfulfilled")] == [(4, 12)]
        assert [(v.staff_id, v.day) for v in report.violations_for("locked_cell_changed")] == [(4, 12)]

    def test_night_edit_keeps_requests(self, roster, unit_config, fast_engine):
        preferences = {4: {7: "有", 8: "日"}}
        result, _ = generate(
            YEAR, MONTH, roster, preferences=preferences, config=unit_config,
            engine_config=fast_engine, seed=4,
        )
        edited = edit_cell(result, 4, 6, "夜")
        assert edited.cell(4, 7) == Shift.PAID_LEAVE
        assert edited.cell(4, 8) == Shift.DAY
        report = validate(edited, roster, preferences=preferences, config=unit_config)
        assert report.violations_for("locked_cell_changed") == []
        assert report.violations_for("request_unfulfilled") == []
