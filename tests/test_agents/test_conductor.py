"""Tests for ConductorAgent (E2E pipeline)."""

from __future__ import annotations

import pandas as pd
import pytest

from hcu_shift.agents.conductor import ConductorAgent
from hcu_shift.core.editing import edit_cell
from hcu_shift.models.schedule import ScheduleResult
from hcu_shift.models.validation import ValidationReport


class TestConductorAgent:
    def test_full_pipeline(self, unit_input, fast_engine):
        conductor = ConductorAgent()
        result = conductor.run_full_pipeline(
            shift_input=unit_input, engine_config=fast_engine, seed=1
        )

        assert set(result) == {"schedule_result", "validation_report"}
        sr = result["schedule_result"]
        vr = result["validation_report"]
        assert isinstance(sr, ScheduleResult)
        assert isinstance(vr, ValidationReport)
        assert sr.to_matrix().shape == (10, 30)

    def test_pipeline_with_frames(self, unit_input, fast_engine):
        conductor = ConductorAgent()
        result = conductor.run_full_pipeline(
            shift_input=unit_input, engine_config=fast_engine, seed=1, include_frames=True
        )

        frames = result["frames"]
        assert set(frames) == {"schedule", "staffing", "staff"}
        assert all(isinstance(f, pd.DataFrame) for f in frames.values())

    def test_pipeline_with_progress(self, unit_input, fast_engine):
        progress_calls = []

        def callback(phase, step, total):
            progress_calls.append(phase)

        conductor = ConductorAgent()
        conductor.run_full_pipeline(
            shift_input=unit_input,
            engine_config=fast_engine,
            seed=1,
            progress_callback=callback,
        )

        assert progress_calls[0] == "construct"
        assert progress_calls[-1] == "validate"

    def test_process_dispatch(self, unit_input, fast_engine):
        conductor = ConductorAgent()
        result = conductor.process(
            "run_full_pipeline",
            {
                "shift_input": unit_input.model_dump(),
                "engine_config": fast_engine.model_dump(),
                "seed": 5,
            },
        )
        direct = conductor.run_full_pipeline(unit_input, fast_engine, seed=5)
        assert result["schedule_result"].shifts == direct["schedule_result"].shifts

    def test_revalidate_after_edit(self, unit_input, fast_engine):
        conductor = ConductorAgent()
        result = conductor.run_full_pipeline(unit_input, fast_engine, seed=2)
        sr = result["schedule_result"]
        assert (
            conductor.revalidate(sr, unit_input).model_dump()
            == result["validation_report"].model_dump()
        )

        edited = edit_cell(sr, 4, 1, "夜" if sr.cell(4, 1).symbol != "夜" else "休")
        payload = conductor.process(
            "revalidate", {"schedule_result": edited, "shift_input": unit_input}
        )
        assert isinstance(payload["validation_report"], ValidationReport)

    def test_unsupported_action(self):
        with pytest.raises(ValueError, match="does not support"):
            ConductorAgent().process("optimize", {})

    def test_supported_actions(self):
        assert ConductorAgent().supported_actions == ["revalidate", "run_full_pipeline"]
