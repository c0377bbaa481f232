"""Objective evaluation and candidate selection."""

from __future__ import annotations

from collections.abc import Sequence

from hcu_shift.constraints.base import CompiledConstraint, PenaltyResult
from hcu_shift.constraints.registry import get_registry
from hcu_shift.core.grid import ShiftGrid
from hcu_shift.models.constraint import ConstraintSet
from hcu_shift.models.schedule import ScheduleContext


def evaluate_with_constraints(
    ctx: ScheduleContext,
    constraints: Sequence[CompiledConstraint],
) -> tuple[float, list[tuple[str, PenaltyResult]]]:
    """Total penalty of a schedule and the per-constraint breakdown."""
    total_penalty = 0.0
    results: list[tuple[str, PenaltyResult]] = []
    for constraint in constraints:
        result = constraint.evaluate(ctx)
        total_penalty += result.penalty
        results.append((constraint.template_id, result))
    return total_penalty, results


class Scorer:
    """Scalar objective: ``baseline - total penalty`` (higher is better)."""

    def __init__(
        self,
        constraint_set: ConstraintSet | None = None,
        baseline: float = 1000.0,
    ) -> None:
        self.constraint_set = constraint_set or ConstraintSet.selection_default()
        self.constraints = get_registry().compile_set(self.constraint_set)
        self.baseline = baseline

    def penalty(self, grid: ShiftGrid) -> float:
        total, _ = evaluate_with_constraints(grid.context(), self.constraints)
        return total

    def score(self, grid: ShiftGrid) -> float:
        return self.baseline - self.penalty(grid)

    def breakdown(self, grid: ShiftGrid) -> dict[str, float]:
        _, results = evaluate_with_constraints(grid.context(), self.constraints)
        return {cid: r.penalty for cid, r in results}


def select_best(candidates: Sequence[tuple[float, ShiftGrid]]) -> tuple[float, ShiftGrid]:
    """Highest score wins; ties keep the earliest candidate."""
    if not candidates:
        raise ValueError("No candidates to select from")
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate[0] > best[0]:
            best = candidate
    return best
