"""Schedule generation runner: chains construction, annealing, rebalancing and repair."""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.core.locking import LockTable
from hcu_shift.core.month import MonthCalendar
from hcu_shift.engine.anneal import anneal
from hcu_shift.engine.construct import build_candidate, seed_locked_cells
from hcu_shift.engine.fairness import rebalance
from hcu_shift.engine.repair import repair
from hcu_shift.engine.scoring import Scorer, select_best
from hcu_shift.engine.validation import build_report
from hcu_shift.models.config import EngineConfig
from hcu_shift.models.constraint import ConstraintSet
from hcu_shift.models.schedule import ScheduleInput, ScheduleResult
from hcu_shift.models.shift import Phase
from hcu_shift.models.validation import ValidationReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class ScheduleRunner:
    """Runs the four generation phases for one month.

    Every run owns its grid; nothing is shared between runs.
    """

    def __init__(
        self,
        shift_input: ScheduleInput,
        engine_config: EngineConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.shift_input = shift_input
        self.engine_config = engine_config or EngineConfig()
        self.progress_callback = progress_callback
        baseline = self.engine_config.baseline_score
        self.selection_scorer = Scorer(ConstraintSet.selection_default(), baseline)
        self.annealing_scorer = Scorer(ConstraintSet.annealing_default(), baseline)

    def _notify(self, phase: Phase, step: int, total: int) -> None:
        if self.progress_callback:
            self.progress_callback(phase.value, step, total)

    def run(self, seed: int | None = None) -> tuple[ScheduleResult, ValidationReport]:
        """Generate a schedule. The same ``seed`` always gives the same schedule.

        With ``seed=None`` fresh entropy is drawn and recorded on the result.
        """
        cfg = self.engine_config
        shift_input = self.shift_input
        calendar = MonthCalendar.build(shift_input.year, shift_input.month, shift_input.config)
        locks = LockTable.build(shift_input, calendar.num_days)

        base = ShiftGrid(shift_input, calendar)
        seed_locked_cells(base, locks)
        before = locks.snapshot(base.value_of)

        seed_seq = np.random.SeedSequence(seed)
        used_seed = int(seed_seq.entropy)
        children = seed_seq.spawn(cfg.candidate_count + 1)
        logger.info(
            "Generating %d/%d for %d staff (seed=%d)",
            shift_input.year, shift_input.month, base.num_staff, used_seed,
        )

        # Phase 1
        candidates: list[tuple[float, ShiftGrid]] = []
        for i, child in enumerate(children[:-1]):
            grid = build_candidate(base, locks, np.random.default_rng(child))
            candidates.append((self.selection_scorer.score(grid), grid))
            self._notify(Phase.CONSTRUCT, i + 1, cfg.candidate_count)
        construct_score, grid = select_best(candidates)
        logger.info("Phase 1: best of %d candidates scored %.1f", len(candidates), construct_score)

        # Phase 2
        self._notify(Phase.ANNEAL, 0, cfg.anneal_iterations)
        anneal(
            grid,
            self.annealing_scorer,
            cfg,
            np.random.default_rng(children[-1]),
            progress=lambda step, total: self._notify(Phase.ANNEAL, step, total),
        )
        anneal_score = self.selection_scorer.score(grid)
        logger.info("Phase 2: score %.1f", anneal_score)

        # Phase 3
        self._notify(Phase.REBALANCE, 0, 1)
        swaps = rebalance(grid, cfg)
        rebalance_score = self.selection_scorer.score(grid)
        logger.info("Phase 3: %d swap(s), score %.1f", swaps, rebalance_score)

        # Phase 4
        self._notify(Phase.REPAIR, 0, 1)
        writes = repair(grid, cfg)
        final_score = self.selection_scorer.score(grid)
        logger.info("Phase 4: %d write(s), score %.1f", sum(writes.values()), final_score)

        self._notify(Phase.VALIDATE, 0, 1)
        report = build_report(grid, locks, shift_input, before)
        self._notify(Phase.VALIDATE, 1, 1)

        result = grid.to_result(score=final_score, seed=used_seed)
        result.phase_scores = {
            Phase.CONSTRUCT.value: construct_score,
            Phase.ANNEAL.value: anneal_score,
            Phase.REBALANCE.value: rebalance_score,
            Phase.REPAIR.value: final_score,
        }
        return result, report
