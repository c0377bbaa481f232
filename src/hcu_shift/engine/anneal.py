"""Phase 2: simulated annealing over day/off cells."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.engine.scoring import Scorer
from hcu_shift.models.config import EngineConfig
from hcu_shift.models.shift import Provenance, Shift

logger = logging.getLogger(__name__)

_REPORT_EVERY = 100
_MIN_TEMPERATURE = 1e-9


@dataclass
class AnnealResult:
    initial_penalty: float
    best_penalty: float
    iterations: int
    accepted: int


def flippable_cells(grid: ShiftGrid) -> list[tuple[int, int]]:
    """Generated day/off cells; nights, after-shifts, rest days and locked cells never move."""
    cells = []
    for s in range(grid.num_staff):
        for d in range(grid.num_days):
            if grid.is_fixed(s, d) or grid.provenance[s, d] == Provenance.NIGHT_REST:
                continue
            if grid.get(s, d) in (Shift.DAY, Shift.OFF):
                cells.append((s, d))
    return cells


def anneal(
    grid: ShiftGrid,
    scorer: Scorer,
    config: EngineConfig,
    rng: np.random.Generator,
    progress: Callable[[int, int], None] | None = None,
) -> AnnealResult:
    """Flip day <-> off cells with Metropolis acceptance, ending on the best state seen.

    Flips that would break the consecutive-day cap, the days-off cap or a
    day-shift exclusion are skipped without being scored.
    """
    cells = flippable_cells(grid)
    current = scorer.penalty(grid)
    result = AnnealResult(current, current, 0, 0)
    if not cells or config.anneal_iterations == 0:
        return result

    best = current
    best_mark = grid.mark()
    temperature = config.initial_temperature

    for iteration in range(config.anneal_iterations):
        s, d = cells[int(rng.integers(len(cells)))]
        old = grid.get(s, d)
        new = Shift.OFF if old == Shift.DAY else Shift.DAY
        if new == Shift.DAY:
            feasible = grid.can_work_day(s, d) and grid.work_allowed(s, d)
        else:
            feasible = grid.off_allowed(s)

        if feasible:
            move = grid.mark()
            grid.set(s, d, new)
            cost = scorer.penalty(grid)
            delta = cost - current
            if delta <= 0 or rng.random() < math.exp(-delta / temperature):
                current = cost
                result.accepted += 1
                if cost < best:
                    best = cost
                    best_mark = grid.mark()
            else:
                grid.rollback(move)

        temperature = max(temperature * config.cooling_rate, _MIN_TEMPERATURE)
        result.iterations = iteration + 1
        if progress and (iteration + 1) % _REPORT_EVERY == 0:
            progress(iteration + 1, config.anneal_iterations)

    grid.rollback(best_mark)
    grid.stop_journal()
    result.best_penalty = best
    logger.debug(
        "Annealing: %.1f -> %.1f after %d iterations (%d accepted)",
        result.initial_penalty, best, result.iterations, result.accepted,
    )
    return result
