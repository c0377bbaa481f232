"""Night -> after-shift pairing constraints."""

from __future__ import annotations

from typing import Any

from hcu_shift.constraints.base import ConstraintTemplate, PenaltyFunction, PenaltyResult
from hcu_shift.models.constraint import ParameterDef, ParameterType
from hcu_shift.models.schedule import ScheduleContext
from hcu_shift.models.shift import NIGHT_PAIRS


def count_chain_breaks(ctx: ScheduleContext) -> tuple[int, int]:
    """(nights without their after-shift, after-shifts without their night).

    A night on the last day of the month has no following cell and is not a break.
    """
    schedule = ctx.schedule
    unpaired_nights = 0
    orphan_afters = 0
    for night, after in NIGHT_PAIRS.items():
        is_night = schedule == night
        is_after = schedule == after
        # night on d must be followed by after on d+1
        unpaired_nights += int((is_night[:, :-1] & ~is_after[:, 1:]).sum())
        # after on d must be preceded by night on d-1; day 0 depends on last month
        orphan_afters += int((is_after[:, 1:] & ~is_night[:, :-1]).sum())
    return unpaired_nights, orphan_afters


class NightChainIntegrity(ConstraintTemplate):
    """Every night is followed by its after-shift and every after-shift has its night."""

    @property
    def template_id(self) -> str:
        return "night_chain_integrity"

    @property
    def name_ja(self) -> str:
        return "夜勤-明け整合性"

    @property
    def category(self) -> str:
        return "chain"

    @property
    def parameters(self) -> list[ParameterDef]:
        return [
            ParameterDef(
                name="penalty_per_break",
                display_name="不整合1件あたりペナルティ",
                param_type=ParameterType.FLOAT,
                default=100.0,
                min_value=0.0,
            ),
        ]

    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        per_break = float(params["penalty_per_break"])

        def penalty_fn(ctx: ScheduleContext) -> PenaltyResult:
            unpaired, orphans = count_chain_breaks(ctx)
            if unpaired == 0 and orphans == 0:
                return PenaltyResult()
            return PenaltyResult(
                penalty=(unpaired + orphans) * per_break,
                details=f"明けなし夜勤{unpaired}件, 孤立した明け{orphans}件",
            )

        return penalty_fn
