"""ReporterAgent - tabular views for spreadsheet and UI collaborators."""

from __future__ import annotations

from typing import Any

import pandas as pd

from hcu_shift.agents.base import BaseAgent
from hcu_shift.io.frames import schedule_frame, staff_frame, staffing_frame
from hcu_shift.models.schedule import ScheduleInput, ScheduleResult
from hcu_shift.models.validation import ValidationReport


class ReporterAgent(BaseAgent):
    """Builds DataFrames from a schedule and its report."""

    @property
    def name(self) -> str:
        return "reporter"

    def build_frames(
        self,
        schedule_result: ScheduleResult,
        shift_input: ScheduleInput,
        validation_report: ValidationReport | None = None,
    ) -> dict[str, pd.DataFrame]:
        frames = {"schedule": schedule_frame(schedule_result, shift_input.roster)}
        if validation_report is not None:
            frames["staffing"] = staffing_frame(
                validation_report, schedule_result.year, schedule_result.month
            )
            frames["staff"] = staff_frame(validation_report)
        return frames

    def _handle_build_frames(self, payload: dict[str, Any]) -> dict[str, Any]:
        frames = self.build_frames(
            schedule_result=payload["schedule_result"],
            shift_input=payload["shift_input"],
            validation_report=payload.get("validation_report"),
        )
        return {"frames": frames}
