"""ConductorAgent - orchestrates the full pipeline."""

from __future__ import annotations

from typing import Any

from hcu_shift.agents.base import BaseAgent
from hcu_shift.agents.reporter import ReporterAgent
from hcu_shift.agents.scheduler import SchedulerAgent
from hcu_shift.agents.validator import ValidatorAgent
from hcu_shift.engine.runner import ProgressCallback
from hcu_shift.models.config import EngineConfig
from hcu_shift.models.schedule import ScheduleInput, ScheduleResult
from hcu_shift.models.validation import ValidationReport


class ConductorAgent(BaseAgent):
    """Orchestrates generation, validation and reporting."""

    def __init__(self) -> None:
        self._scheduler = SchedulerAgent()
        self._validator = ValidatorAgent()
        self._reporter = ReporterAgent()

    @property
    def name(self) -> str:
        return "conductor"

    def run_full_pipeline(
        self,
        shift_input: ScheduleInput,
        engine_config: EngineConfig | None = None,
        seed: int | None = None,
        include_frames: bool = False,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Run the complete pipeline: generate -> validate -> (frames).

        Returns dict with schedule_result, validation_report and, when
        requested, frames.
        """
        schedule_result, validation_report = self._scheduler.generate(
            shift_input=shift_input,
            engine_config=engine_config,
            seed=seed,
            progress_callback=progress_callback,
        )
        result: dict[str, Any] = {
            "schedule_result": schedule_result,
            "validation_report": validation_report,
        }
        if include_frames:
            result["frames"] = self._reporter.build_frames(
                schedule_result, shift_input, validation_report
            )
        return result

    def revalidate(
        self, schedule_result: ScheduleResult, shift_input: ScheduleInput
    ) -> ValidationReport:
        """Check an edited schedule without regenerating."""
        return self._validator.validate(schedule_result, shift_input)

    def _handle_run_full_pipeline(self, payload: dict[str, Any]) -> dict[str, Any]:
        shift_input = ScheduleInput.model_validate(payload["shift_input"])
        engine_config_data = payload.get("engine_config")
        engine_config = (
            EngineConfig.model_validate(engine_config_data) if engine_config_data else None
        )
        return self.run_full_pipeline(
            shift_input=shift_input,
            engine_config=engine_config,
            seed=payload.get("seed"),
            include_frames=bool(payload.get("include_frames", False)),
            progress_callback=payload.get("progress_callback"),
        )

    def _handle_revalidate(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._validator.process("validate", payload)
