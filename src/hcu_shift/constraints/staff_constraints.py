"""Per-staff constraints: consecutive work, days off, night caps."""

from __future__ import annotations

from typing import Any

import numpy as np

from hcu_shift.constraints.base import ConstraintTemplate, PenaltyFunction, PenaltyResult
from hcu_shift.models.constraint import ParameterDef, ParameterType
from hcu_shift.models.schedule import ScheduleContext
from hcu_shift.models.shift import Shift


class MaxConsecutiveWork(ConstraintTemplate):
    """Penalize work runs longer than the configured cap.

    Penalty per staff: (longest run - cap)^2 * weight.
    """

    @property
    def template_id(self) -> str:
        return "max_consecutive_work"

    @property
    def name_ja(self) -> str:
        return "連続勤務上限"

    @property
    def category(self) -> str:
        return "staff"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="penalty_weight",
                display_name="ペナルティ重み",
                param_type=ParameterType.FLOAT,
                default=100.0,
                min_value=0.0,
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        weight = float(params["penalty_weight"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            over = np.clip(ctx.max_runs - ctx.max_consecutive, 0, None)
            penalty = float(np.sum(over**2) * weight)
            if penalty == 0:
                return PenaltyResult()
            parts = [
                f"職員{i}: {ctx.max_consecutive + int(o)}連勤"
                for i, o in enumerate(over)
                if o > 0
            ]
            return PenaltyResult(penalty=penalty, details="; ".join(parts))

        return penalty_fn


class DaysOffCap(ConstraintTemplate):
    """Penalize days off (off + paid leave) above the cap, quadratically.

    Exempt staff are skipped. After-shifts are not days off.
    """

    @property
    def template_id(self) -> str:
        return "days_off_cap"

    @property
    def name_ja(self) -> str:
        return "休日数上限"

    @property
    def category(self) -> str:
        return "staff"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="penalty_weight",
                display_name="ペナルティ重み",
                param_type=ParameterType.FLOAT,
                default=50.0,
                min_value=0.0,
                description="超過日数の二乗に掛ける重み",
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        weight = float(params["penalty_weight"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            over = np.clip(ctx.days_off - ctx.days_off_caps, 0, None)
            over[ctx.days_off_exempt] = 0
            penalty = float(np.sum(over**2) * weight)
            if penalty == 0:
                return PenaltyResult()
            return PenaltyResult(
                penalty=penalty, details=f"休日超過 合計{int(np.sum(over))}日"
            )

        return penalty_fn


class NightCap(ConstraintTemplate):
    """Penalize nights above the personal cap and any night for no-night staff."""

    @property
    def template_id(self) -> str:
        return "night_cap"

    @property
    def name_ja(self) -> str:
        return "個人夜勤上限"

    @property
    def category(self) -> str:
        return "staff"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="penalty_per_excess",
                display_name="超過1回あたりペナルティ",
                param_type=ParameterType.FLOAT,
                default=150.0,
                min_value=0.0,
            ),
            ParameterDef(
                name="penalty_per_forbidden",
                display_name="夜勤なし設定違反1回あたり",
                param_type=ParameterType.FLOAT,
                default=200.0,
                min_value=0.0,
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        per_excess = float(params["penalty_per_excess"])
        per_forbidden = float(params["penalty_per_forbidden"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            nights = ctx.count_per_staff(Shift.NIGHT)
            excess = np.where(ctx.no_night, 0, np.clip(nights - ctx.night_caps, 0, None))
            forbidden = np.where(ctx.no_night, nights, 0)
            penalty = float(np.sum(excess) * per_excess + np.sum(forbidden) * per_forbidden)
            if penalty == 0:
                return PenaltyResult()
            return PenaltyResult(
                penalty=penalty,
                details=f"上限超過{int(np.sum(excess))}回, 夜勤なし違反{int(np.sum(forbidden))}回",
            )

        return penalty_fn
