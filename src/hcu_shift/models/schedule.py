"""Schedule-related data models."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from hcu_shift.models.config import GenerationConfig
from hcu_shift.models.shift import Provenance, Shift
from hcu_shift.models.staff import StaffMember, StaffOverride

WORK_CODES = np.array(
    [Shift.DAY, Shift.NIGHT, Shift.MGMT_NIGHT, Shift.MORNING_HALF, Shift.AFTERNOON_HALF],
    dtype=np.int8,
)
REST_CODES = np.array([Shift.OFF, Shift.PAID_LEAVE], dtype=np.int8)


class ScheduleInput(BaseModel):
    """Everything the engine needs for one (year, month) generation."""

    year: int = Field(ge=1900, le=9999)
    month: int = Field(description="1=January .. 12=December")
    roster: list[StaffMember]
    preferences: dict[int, dict[int, str | Shift]] = Field(
        default_factory=dict, description="staff id -> {1-based day: requested symbol}"
    )
    carry_over: dict[int, list[str | Shift | None]] = Field(
        default_factory=dict,
        description="staff id -> last shift symbols of the previous month, oldest first",
    )
    overrides: dict[int, StaffOverride] = Field(default_factory=dict)
    config: GenerationConfig = Field(default_factory=GenerationConfig)

    @property
    def active_staff(self) -> list[StaffMember]:
        return [s for s in self.roster if s.active]

    def override_for(self, staff_id: int) -> StaffOverride:
        return self.overrides.get(staff_id) or StaffOverride()


class ScheduleContext(BaseModel):
    """Context for penalty evaluation.

    ``schedule`` is shared with the working grid, so one context can be
    re-evaluated after every in-place mutation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    schedule: NDArray[np.int8] = Field(description="shape=(num_staff, num_days)")
    night_required: NDArray[np.int_]
    day_required: NDArray[np.int_]
    day_maximum: NDArray[np.int_]
    special_days: NDArray[np.bool_]
    ordinary_days: NDArray[np.bool_]
    night_caps: NDArray[np.int_]
    days_off_caps: NDArray[np.int_]
    days_off_exempt: NDArray[np.bool_]
    no_night: NDArray[np.bool_]
    max_consecutive: int

    @property
    def num_staff(self) -> int:
        return int(self.schedule.shape[0])

    @property
    def num_days(self) -> int:
        return int(self.schedule.shape[1])

    @property
    def work_mask(self) -> NDArray[np.bool_]:
        return np.isin(self.schedule, WORK_CODES)

    @property
    def rest_mask(self) -> NDArray[np.bool_]:
        return np.isin(self.schedule, REST_CODES)

    def count_per_day(self, shift: Shift) -> NDArray[np.int_]:
        return np.count_nonzero(self.schedule == shift, axis=0)

    def count_per_staff(self, shift: Shift) -> NDArray[np.int_]:
        return np.count_nonzero(self.schedule == shift, axis=1)

    @property
    def days_off(self) -> NDArray[np.int_]:
        return np.count_nonzero(self.rest_mask, axis=1)

    @property
    def max_runs(self) -> NDArray[np.int_]:
        return longest_runs(self.work_mask)


def longest_runs(mask: NDArray[np.bool_]) -> NDArray[np.int_]:
    """Longest run of True per row."""
    result = np.zeros(mask.shape[0], dtype=int)
    for row_idx, row in enumerate(mask):
        best = current = 0
        for flag in row:
            if flag:
                current += 1
                if current > best:
                    best = current
            else:
                current = 0
        result[row_idx] = best
    return result


class ScheduleResult(BaseModel):
    """A generated (or manually edited) monthly schedule."""

    year: int
    month: int
    staff_ids: list[int]
    shifts: dict[int, list[Shift]] = Field(description="staff id -> one Shift per day")
    provenance: dict[int, list[Provenance]] = Field(default_factory=dict)
    score: float = 0.0
    seed: int | None = Field(default=None, description="Entropy that reproduces this run")
    phase_scores: dict[str, float] = Field(default_factory=dict)

    @property
    def num_days(self) -> int:
        if not self.staff_ids:
            return 0
        return len(self.shifts[self.staff_ids[0]])

    def cell(self, staff_id: int, day: int) -> Shift:
        """Shift on a 1-based day."""
        return self.shifts[staff_id][day - 1]

    def symbols(self) -> dict[int, list[str]]:
        return {sid: [s.symbol for s in row] for sid, row in self.shifts.items()}

    def to_matrix(self) -> NDArray[np.int8]:
        return np.array(
            [[int(s) for s in self.shifts[sid]] for sid in self.staff_ids], dtype=np.int8
        ).reshape(len(self.staff_ids), self.num_days)
