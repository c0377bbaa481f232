"""SchedulerAgent - runs the generation phases."""

from __future__ import annotations

from typing import Any

from hcu_shift.agents.base import BaseAgent
from hcu_shift.engine.runner import ProgressCallback, ScheduleRunner
from hcu_shift.models.config import EngineConfig
from hcu_shift.models.schedule import ScheduleInput, ScheduleResult
from hcu_shift.models.validation import ValidationReport


class SchedulerAgent(BaseAgent):
    """Generates a monthly schedule."""

    @property
    def name(self) -> str:
        return "scheduler"

    def generate(
        self,
        shift_input: ScheduleInput,
        engine_config: EngineConfig | None = None,
        seed: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> tuple[ScheduleResult, ValidationReport]:
        runner = ScheduleRunner(
            shift_input=shift_input,
            engine_config=engine_config,
            progress_callback=progress_callback,
        )
        return runner.run(seed)

    def _handle_generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        shift_input = ScheduleInput.model_validate(payload["shift_input"])
        engine_config_data = payload.get("engine_config")
        engine_config = (
            EngineConfig.model_validate(engine_config_data) if engine_config_data else None
        )
        result, report = self.generate(
            shift_input,
            engine_config,
            payload.get("seed"),
            payload.get("progress_callback"),
        )
        return {"schedule_result": result, "validation_report": report}
