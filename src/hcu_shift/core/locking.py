"""Preference normalization, carry-over derivation and the locked-cell table."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from hcu_shift.models.config import GenerationConfig
from hcu_shift.models.schedule import ScheduleInput
from hcu_shift.models.shift import NIGHT_PAIRS, Shift, after_of

Cell = tuple[int, int]
"""(staff id, 0-based day)"""


def derive_carry_over(tail: Sequence[object], config: GenerationConfig) -> dict[int, Shift]:
    """Forced shifts for the first days of the month, keyed by 1-based day.

    - ends on a night: day 1 after-shift, day 2 off (day 3 off too when the
      tail shows a second night cycle)
    - ends on an after-shift: day 1 off (day 2 off too after two cycles)
    - ends on a long work run: day 1 off
    """
    shifts = [Shift.from_symbol(s) for s in tail]
    if not shifts:
        return {}

    def back(n: int) -> Shift:
        return shifts[-n] if len(shifts) >= n else Shift.EMPTY

    forced: dict[int, Shift] = {}
    last, second, third, fourth = back(1), back(2), back(3), back(4)

    if last.is_night:
        forced[1] = after_of(last)
        forced[2] = Shift.OFF
        if third == last and second == after_of(last):
            forced[3] = Shift.OFF
    elif last.is_after:
        forced[1] = Shift.OFF
        night = second
        if night.is_night and NIGHT_PAIRS[night] == last:
            if fourth == night and third == last:
                forced[2] = Shift.OFF

    run = 0
    for s in reversed(shifts):
        if not s.is_work:
            break
        run += 1
    if run >= config.carry_over_run_limit and 1 not in forced:
        forced[1] = Shift.OFF

    return forced


def normalize_requests(raw: Mapping[int, object], num_days: int) -> dict[int, Shift]:
    """1-based {day: symbol} -> 0-based {day: Shift}; empty and out-of-range days dropped."""
    result: dict[int, Shift] = {}
    for day, symbol in raw.items():
        day_idx = int(day) - 1
        if not 0 <= day_idx < num_days:
            continue
        shift = Shift.from_symbol(symbol)
        if shift != Shift.EMPTY:
            result[day_idx] = shift
    return dict(sorted(result.items()))


def count_request_cells(requests: Mapping[int, Shift]) -> int:
    """Request entries that count toward a quota.

    After-shifts, and the after/rest cells that repeat what a requested
    night derives anyway, are not counted.
    """
    derived: set[int] = set()
    for day, shift in requests.items():
        if shift.is_night:
            if requests.get(day + 1) == after_of(shift):
                derived.add(day + 1)
            if requests.get(day + 2) == Shift.OFF:
                derived.add(day + 2)
    return sum(
        1 for day, shift in requests.items() if not shift.is_after and day not in derived
    )


@dataclass
class LockTable:
    """Normalized requests and carry-over constraints for the active roster."""

    requests: dict[int, dict[int, Shift]] = field(default_factory=dict)
    carry_over: dict[int, dict[int, Shift]] = field(default_factory=dict)
    locked: dict[Cell, Shift] = field(default_factory=dict)

    @classmethod
    def build(cls, shift_input: ScheduleInput, num_days: int) -> LockTable:
        table = cls()
        for staff in shift_input.active_staff:
            tail = shift_input.carry_over.get(staff.id)
            forced: dict[int, Shift] = {}
            if tail:
                for day, shift in derive_carry_over(tail, shift_input.config).items():
                    if day - 1 < num_days:
                        forced[day - 1] = shift
            table.carry_over[staff.id] = forced
            table.requests[staff.id] = normalize_requests(
                shift_input.preferences.get(staff.id, {}), num_days
            )

            for day_idx, shift in forced.items():
                table.locked[(staff.id, day_idx)] = shift
            for day_idx, shift in table.requests[staff.id].items():
                table.locked.setdefault((staff.id, day_idx), shift)
        return table

    def is_locked(self, staff_id: int, day_idx: int) -> bool:
        return (staff_id, day_idx) in self.locked

    def from_carry_over(self, staff_id: int, day_idx: int) -> bool:
        return day_idx in self.carry_over.get(staff_id, {})

    def snapshot(self, value_of: Callable[[int, int], Shift]) -> dict[Cell, Shift]:
        """Current values at every locked cell."""
        return {cell: value_of(*cell) for cell in self.locked}

    def diff(self, before: Mapping[Cell, Shift], after: Mapping[Cell, Shift]) -> list[Cell]:
        """Locked cells whose value differs between two snapshots."""
        return [cell for cell in self.locked if before.get(cell) != after.get(cell)]

    def request_overages(
        self, shift_input: ScheduleInput
    ) -> Iterable[tuple[int, int, int]]:
        """(staff id, counted requests, quota) for staff over their request quota."""
        for staff_id, requests in self.requests.items():
            quota = shift_input.override_for(staff_id).request_quota
            if quota is None:
                quota = shift_input.config.request_quota
            if quota is None:
                continue
            counted = count_request_cells(requests)
            if counted > quota:
                yield staff_id, counted, quota
