"""ValidatorAgent - re-checks a schedule against the month's rules."""

from __future__ import annotations

from typing import Any

from hcu_shift.agents.base import BaseAgent
from hcu_shift.core.grid import ShiftGrid
from hcu_shift.core.locking import LockTable
from hcu_shift.core.month import MonthCalendar
from hcu_shift.engine.validation import build_report
from hcu_shift.models.schedule import ScheduleInput, ScheduleResult
from hcu_shift.models.validation import ValidationReport


class ValidatorAgent(BaseAgent):
    """Validates a schedule and produces a detailed report."""

    @property
    def name(self) -> str:
        return "validator"

    def validate(self, schedule_result: ScheduleResult, shift_input: ScheduleInput) -> ValidationReport:
        calendar = MonthCalendar.build(shift_input.year, shift_input.month, shift_input.config)
        locks = LockTable.build(shift_input, calendar.num_days)
        grid = ShiftGrid.from_result(schedule_result, shift_input, calendar)
        return build_report(grid, locks, shift_input)

    def _handle_validate(self, payload: dict[str, Any]) -> dict[str, Any]:
        schedule_result = ScheduleResult.model_validate(payload["schedule_result"])
        shift_input = ScheduleInput.model_validate(payload["shift_input"])
        return {"validation_report": self.validate(schedule_result, shift_input)}
