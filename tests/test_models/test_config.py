"""Tests for configuration and input models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hcu_shift.models.config import EngineConfig, GenerationConfig
from hcu_shift.models.schedule import ScheduleInput
from hcu_shift.models.staff import Rank, StaffMember, StaffOverride


class TestGenerationConfig:
    def test_defaults(self):
        config = GenerationConfig()
        assert config.night_pattern == [2, 3]
        assert config.max_night_shifts == 6
        assert config.max_days_off == 8
        assert config.max_consecutive_days == 5
        assert config.weekday_day_staff == 7
        assert config.weekend_day_staff == 5
        assert config.weekday_overstaff_slack == 2

    def test_empty_pattern_rejected(self):
        with pytest.raises(ValidationError):
            GenerationConfig(night_pattern=[])

    def test_negative_pattern_rejected(self):
        with pytest.raises(ValidationError):
            GenerationConfig(night_pattern=[2, -1])

    def test_model_validate_from_dict(self):
        config = GenerationConfig.model_validate({"max_days_off": 10, "night_pattern": [4, 4]})
        assert config.max_days_off == 10
        assert config.night_pattern == [4, 4]


class TestEngineConfig:
    def test_rejects_zero_candidates(self):
        with pytest.raises(ValidationError):
            EngineConfig(candidate_count=0)

    def test_cooling_rate_bounds(self):
        with pytest.raises(ValidationError):
            EngineConfig(cooling_rate=1.5)


class TestStaff:
    def test_rank_priority_order(self):
        ranks = sorted(Rank, key=lambda r: r.priority)
        assert ranks == [Rank.HEAD, Rank.CHIEF, Rank.DEPUTY, Rank.GENERAL]

    def test_deputy_ranks(self):
        assert Rank.CHIEF.is_deputy
        assert Rank.DEPUTY.is_deputy
        assert not Rank.HEAD.is_deputy

    def test_rank_from_japanese_label(self):
        assert StaffMember.model_validate({"id": 1, "name": "x", "rank": "師長"}).rank == Rank.HEAD

    def test_night_cap(self):
        assert StaffOverride().night_cap(6) == 6
        assert StaffOverride(max_night_shifts=3).night_cap(6) == 3
        assert StaffOverride(no_night_shift=True, max_night_shifts=3).night_cap(6) == 0


class TestScheduleInput:
    def test_active_staff_only(self):
        shift_input = ScheduleInput(
            year=2025,
            month=6,
            roster=[
                StaffMember(id=1, name="a"),
                StaffMember(id=2, name="b", active=False),
            ],
        )
        assert [s.id for s in shift_input.active_staff] == [1]

    def test_override_defaults(self):
        shift_input = ScheduleInput(year=2025, month=6, roster=[StaffMember(id=1, name="a")])
        assert shift_input.override_for(1) == StaffOverride()
