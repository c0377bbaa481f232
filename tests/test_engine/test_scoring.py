"""Tests for objective evaluation and candidate selection."""

from __future__ import annotations

import pytest

from hcu_shift.engine.scoring import Scorer, evaluate_with_constraints, select_best
from hcu_shift.models.constraint import ConstraintConfig, ConstraintSet
from hcu_shift.models.shift import Shift


class TestScorer:
    def test_empty_grid_penalty(self, small_grid):
        # every night missing (500 each) and every day shift missing (20 each)
        scorer = Scorer()
        assert scorer.penalty(small_grid) == pytest.approx(30 * 500.0 + 30 * 20.0)
        assert scorer.score(small_grid) == pytest.approx(1000.0 - 15600.0)

    def test_breakdown_sums_to_penalty(self, small_grid):
        small_grid.place_night(2, 3)
        scorer = Scorer()
        breakdown = scorer.breakdown(small_grid)
        assert set(breakdown) == {c.template_id for c in ConstraintSet.selection_default().constraints}
        assert sum(breakdown.values()) == pytest.approx(scorer.penalty(small_grid))

    def test_score_tracks_grid_mutations(self, small_grid):
        scorer = Scorer()
        before = scorer.score(small_grid)
        small_grid.set(2, 1, Shift.DAY)
        assert scorer.score(small_grid) == pytest.approx(before + 20.0)

    def test_custom_baseline_and_set(self, small_grid):
        constraint_set = ConstraintSet(
            name="nights only",
            constraints=[ConstraintConfig(template_id="night_staffing_match")],
        )
        scorer = Scorer(constraint_set, baseline=0.0)
        assert scorer.score(small_grid) == -scorer.penalty(small_grid)
        assert list(scorer.breakdown(small_grid)) == ["night_staffing_match"]

    def test_disabled_constraint_skipped(self, small_grid):
        constraint_set = ConstraintSet(
            constraints=[ConstraintConfig(template_id="night_staffing_match", enabled=False)],
        )
        assert Scorer(constraint_set).penalty(small_grid) == 0.0


class TestEvaluate:
    def test_results_follow_constraint_order(self, small_grid):
        scorer = Scorer()
        total, results = evaluate_with_constraints(small_grid.context(), scorer.constraints)
        assert [cid for cid, _ in results] == [c.template_id for c in scorer.constraints]
        assert total == pytest.approx(sum(r.penalty for _, r in results))


class TestSelectBest:
    def test_highest_score_wins(self):
        assert select_best([(1.0, "a"), (3.0, "b"), (2.0, "c")]) == (3.0, "b")

    def test_tie_keeps_earliest(self):
        assert select_best([(2.0, "a"), (2.0, "b")])[1] == "a"

    def test_empty(self):
        with pytest.raises(ValueError):
            select_best([])
