"""Public operations: generate a month and validate a schedule."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.core.locking import LockTable
from hcu_shift.core.month import MonthCalendar
from hcu_shift.engine.runner import ProgressCallback, ScheduleRunner
from hcu_shift.engine.validation import build_report
from hcu_shift.models.config import EngineConfig, GenerationConfig
from hcu_shift.models.schedule import ScheduleInput, ScheduleResult
from hcu_shift.models.shift import Shift
from hcu_shift.models.staff import StaffMember, StaffOverride
from hcu_shift.models.validation import ValidationReport


def _schedule_input(
    year: int,
    month: int,
    roster: Sequence[StaffMember | dict],
    preferences: Mapping | None,
    carry_over: Mapping | None,
    overrides: Mapping | None,
    config: GenerationConfig | dict | None,
) -> ScheduleInput:
    return ScheduleInput.model_validate(
        {
            "year": year,
            "month": month,
            "roster": list(roster),
            "preferences": dict(preferences or {}),
            "carry_over": dict(carry_over or {}),
            "overrides": dict(overrides or {}),
            "config": config if config is not None else GenerationConfig(),
        }
    )


def generate(
    year: int,
    month: int,
    roster: Sequence[StaffMember | dict],
    preferences: Mapping[int, Mapping[int, str | Shift]] | None = None,
    carry_over: Mapping[int, Sequence[str | Shift | None]] | None = None,
    overrides: Mapping[int, StaffOverride | dict] | None = None,
    config: GenerationConfig | dict | None = None,
    seed: int | None = None,
    engine_config: EngineConfig | None = None,
    progress_callback: ProgressCallback | None = None,
) -> tuple[ScheduleResult, ValidationReport]:
    """Generate the schedule for ``year``/``month`` and its validation report.

    The same inputs and ``seed`` always give the same schedule. Shortfalls
    are reported, never raised; only an empty active roster or an invalid
    month raises ``ValueError``.
    """
    shift_input = _schedule_input(year, month, roster, preferences, carry_over, overrides, config)
    runner = ScheduleRunner(shift_input, engine_config, progress_callback)
    return runner.run(seed)


def validate(
    schedule: ScheduleResult | Mapping[int, Sequence[str | Shift]],
    roster: Sequence[StaffMember | dict],
    preferences: Mapping[int, Mapping[int, str | Shift]] | None = None,
    carry_over: Mapping[int, Sequence[str | Shift | None]] | None = None,
    overrides: Mapping[int, StaffOverride | dict] | None = None,
    config: GenerationConfig | dict | None = None,
    year: int | None = None,
    month: int | None = None,
) -> ValidationReport:
    """Re-check a schedule, e.g. after manual edits, without regenerating.

    ``schedule`` is a :class:`ScheduleResult` or a plain
    ``{staff_id: [symbol per day]}`` mapping; the latter needs ``year``
    and ``month``.
    """
    if isinstance(schedule, ScheduleResult):
        year = schedule.year if year is None else year
        month = schedule.month if month is None else month
        result = schedule
    else:
        if year is None or month is None:
            raise ValueError("year and month are required to validate a plain mapping")
        result = ScheduleResult(
            year=year,
            month=month,
            staff_ids=list(schedule),
            shifts={
                sid: [Shift.from_symbol(v) for v in row]
                for sid, row in schedule.items()
            },
        )

    shift_input = _schedule_input(year, month, roster, preferences, carry_over, overrides, config)
    calendar = MonthCalendar.build(year, month, shift_input.config)
    locks = LockTable.build(shift_input, calendar.num_days)
    grid = ShiftGrid.from_result(result, shift_input, calendar)
    return build_report(grid, locks, shift_input)
