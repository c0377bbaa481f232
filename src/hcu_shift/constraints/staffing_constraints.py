"""Per-day staffing constraints (night and day-shift headcounts)."""

from __future__ import annotations

from typing import Any

import numpy as np

from hcu_shift.constraints.base import ConstraintTemplate, PenaltyFunction, PenaltyResult
from hcu_shift.models.constraint import ParameterDef, ParameterType
from hcu_shift.models.schedule import ScheduleContext
from hcu_shift.models.shift import Shift


class NightStaffingMatch(ConstraintTemplate):
    """Night headcount must equal the week-window requirement.

    Missing nights weigh more than extra ones.
    """

    @property
    def template_id(self) -> str:
        return "night_staffing_match"

    @property
    def name_ja(self) -> str:
        return "夜勤人数一致"

    @property
    def category(self) -> str:
        return "staffing"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="penalty_per_missing",
                display_name="不足1人あたりペナルティ",
                param_type=ParameterType.FLOAT,
                default=500.0,
                min_value=0.0,
            ),
            ParameterDef(
                name="penalty_per_extra",
                display_name="過剰1人あたりペナルティ",
                param_type=ParameterType.FLOAT,
                default=300.0,
                min_value=0.0,
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        per_missing = float(params["penalty_per_missing"])
        per_extra = float(params["penalty_per_extra"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            diff = ctx.count_per_day(Shift.NIGHT) - ctx.night_required
            missing = int(np.sum(np.clip(-diff, 0, None)))
            extra = int(np.sum(np.clip(diff, 0, None)))
            penalty = missing * per_missing + extra * per_extra
            if penalty == 0:
                return PenaltyResult()
            return PenaltyResult(
                penalty=penalty, details=f"夜勤不足{missing}人, 過剰{extra}人"
            )

        return penalty_fn


class DayStaffingMatch(ConstraintTemplate):
    """Day-shift headcount within [required, maximum] for every day.

    Ordinary weekdays carry a slack above the requirement; weekends,
    holidays and year-boundary days have maximum == required.
    """

    @property
    def template_id(self) -> str:
        return "day_staffing_match"

    @property
    def name_ja(self) -> str:
        return "日勤人数一致"

    @property
    def category(self) -> str:
        return "staffing"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="weight_missing",
                display_name="不足ペナルティ重み",
                param_type=ParameterType.FLOAT,
                default=20.0,
                min_value=0.0,
                description="不足人数の二乗に掛ける重み",
            ),
            ParameterDef(
                name="weight_extra",
                display_name="過剰ペナルティ重み",
                param_type=ParameterType.FLOAT,
                default=10.0,
                min_value=0.0,
                description="上限超過人数の二乗に掛ける重み",
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        w_missing = float(params["weight_missing"])
        w_extra = float(params["weight_extra"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            counts = ctx.count_per_day(Shift.DAY)
            missing = np.clip(ctx.day_required - counts, 0, None)
            extra = np.clip(counts - ctx.day_maximum, 0, None)
            penalty = float(np.sum(missing**2) * w_missing + np.sum(extra**2) * w_extra)
            if penalty == 0:
                return PenaltyResult()
            short_days = [str(d + 1) for d in np.flatnonzero(missing)]
            return PenaltyResult(
                penalty=penalty, details=f"日勤不足日: {', '.join(short_days)}"
            )

        return penalty_fn


class DayStaffingVariance(ConstraintTemplate):
    """Spread of day-shift headcount across ordinary weekdays."""

    @property
    def template_id(self) -> str:
        return "day_staffing_variance"

    @property
    def name_ja(self) -> str:
        return "平日日勤人数のばらつき"

    @property
    def category(self) -> str:
        return "staffing"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="penalty_weight",
                display_name="ペナルティ重み",
                param_type=ParameterType.FLOAT,
                default=10.0,
                min_value=0.0,
                description="標準偏差に掛ける重み",
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        weight = float(params["penalty_weight"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            ordinary = ctx.ordinary_days
            if np.count_nonzero(ordinary) < 2:
                return PenaltyResult()
            counts = ctx.count_per_day(Shift.DAY)[ordinary]
            std = float(np.std(counts))
            return PenaltyResult(penalty=std * weight, details=f"標準偏差 {std:.2f}")

        return penalty_fn
