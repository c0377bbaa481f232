"""Working schedule matrix with per-cell provenance and an undo journal."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from hcu_shift.core.month import MonthCalendar
from hcu_shift.models.schedule import (
    REST_CODES,
    WORK_CODES,
    ScheduleContext,
    ScheduleInput,
    ScheduleResult,
)
from hcu_shift.models.shift import AFTER_PAIRS, NIGHT_PAIRS, Provenance, Shift
from hcu_shift.models.staff import Rank

_FIXED = frozenset(int(p) for p in Provenance if p.is_fixed)
_WORK = frozenset(int(s) for s in WORK_CODES)
_NIGHTS = frozenset(int(s) for s in NIGHT_PAIRS)
_AFTERS = frozenset(int(s) for s in AFTER_PAIRS)


@dataclass
class CellChange:
    """One journaled write."""

    staff: int
    day: int
    old: int
    new: int
    old_prov: int
    new_prov: int


class ShiftGrid:
    """Schedule under construction for the active roster of one month.

    Rows follow roster order, columns are 0-based days. Every write goes
    through :meth:`set`, which refuses fixed cells (requests, carry-over
    constraints and the after/rest cells derived from a requested night).
    """

    def __init__(self, shift_input: ScheduleInput, calendar: MonthCalendar) -> None:
        staff = shift_input.active_staff
        if not staff:
            raise ValueError("Cannot schedule a month with no active staff")
        cfg = shift_input.config

        self.calendar = calendar
        self.config = cfg
        self.staff = staff
        self.staff_ids = [s.id for s in staff]
        self.num_staff = len(staff)
        self.num_days = calendar.num_days
        self.max_consecutive = cfg.max_consecutive_days

        overrides = [shift_input.override_for(s.id) for s in staff]
        self.ranks = [s.rank for s in staff]
        self.no_night = np.array([o.no_night_shift for o in overrides], dtype=bool)
        self.no_day = np.array([o.no_day_shift for o in overrides], dtype=bool)
        self.night_caps = np.array([o.night_cap(cfg.max_night_shifts) for o in overrides], dtype=int)
        self.exempt = np.array([o.exempt_from_days_off_cap for o in overrides], dtype=bool)
        self.days_off_caps = np.full(self.num_staff, cfg.max_days_off, dtype=int)

        self.values: NDArray[np.int8] = np.zeros((self.num_staff, self.num_days), dtype=np.int8)
        self.provenance: NDArray[np.int8] = np.zeros_like(self.values)
        self._index = {sid: i for i, sid in enumerate(self.staff_ids)}
        self._journal: list[CellChange] | None = None

    # --- cell access -------------------------------------------------------

    def index_of(self, staff_id: int) -> int:
        return self._index[staff_id]

    def get(self, s: int, d: int) -> Shift:
        return Shift(int(self.values[s, d]))

    def value_of(self, staff_id: int, d: int) -> Shift:
        return self.get(self._index[staff_id], d)

    def is_fixed(self, s: int, d: int) -> bool:
        return int(self.provenance[s, d]) in _FIXED

    def is_empty(self, s: int, d: int) -> bool:
        return self.values[s, d] == Shift.EMPTY

    def set(self, s: int, d: int, shift: Shift, prov: Provenance = Provenance.GENERATED) -> bool:
        """Write a cell unless it is fixed. Returns whether the write happened."""
        if int(self.provenance[s, d]) in _FIXED:
            return False
        self._write(s, d, shift, prov)
        return True

    def lock(self, s: int, d: int, shift: Shift, prov: Provenance) -> None:
        """Seed a fixed cell; only used while applying requests and carry-over."""
        self._write(s, d, shift, prov)

    def _write(self, s: int, d: int, shift: Shift, prov: Provenance) -> None:
        if self._journal is not None:
            self._journal.append(
                CellChange(
                    s, d, int(self.values[s, d]), int(shift),
                    int(self.provenance[s, d]), int(prov),
                )
            )
        self.values[s, d] = shift
        self.provenance[s, d] = prov

    # --- undo journal ------------------------------------------------------

    def mark(self) -> int:
        """Start (or continue) journaling and return the current position."""
        if self._journal is None:
            self._journal = []
        return len(self._journal)

    def rollback(self, mark: int) -> None:
        """Undo every journaled write after ``mark``."""
        if self._journal is None:
            return
        while len(self._journal) > mark:
            change = self._journal.pop()
            self.values[change.staff, change.day] = change.old
            self.provenance[change.staff, change.day] = change.old_prov

    def stop_journal(self) -> None:
        self._journal = None

    @property
    def journaling(self) -> bool:
        return self._journal is not None

    def copy(self) -> ShiftGrid:
        clone = object.__new__(ShiftGrid)
        clone.__dict__.update(self.__dict__)
        clone.values = self.values.copy()
        clone.provenance = self.provenance.copy()
        clone._journal = None
        return clone

    # --- counts ------------------------------------------------------------

    def count_on_day(self, d: int, shift: Shift) -> int:
        return int(np.count_nonzero(self.values[:, d] == shift))

    def night_count(self, d: int) -> int:
        return self.count_on_day(d, Shift.NIGHT)

    def day_count(self, d: int) -> int:
        return self.count_on_day(d, Shift.DAY)

    def nights(self, s: int) -> int:
        return int(np.count_nonzero(self.values[s] == Shift.NIGHT))

    def day_shifts(self, s: int) -> int:
        return int(np.count_nonzero(self.values[s] == Shift.DAY))

    def days_off(self, s: int) -> int:
        return int(np.count_nonzero(np.isin(self.values[s], REST_CODES)))

    def total_work(self, s: int) -> int:
        return int(np.count_nonzero(np.isin(self.values[s], WORK_CODES)))

    def weekend_work(self, s: int) -> int:
        work = np.isin(self.values[s], WORK_CODES)
        return int(np.count_nonzero(work & self.calendar.special))

    def paid_leave(self, s: int) -> int:
        return int(np.count_nonzero(self.values[s] == Shift.PAID_LEAVE))

    # --- rule checks -------------------------------------------------------

    def is_work(self, s: int, d: int) -> bool:
        return int(self.values[s, d]) in _WORK

    def run_through(self, s: int, d: int) -> int:
        """Length of the work run containing ``d`` if ``d`` were a work day."""
        row = self.values[s]
        left = d - 1
        while left >= 0 and int(row[left]) in _WORK:
            left -= 1
        right = d + 1
        while right < self.num_days and int(row[right]) in _WORK:
            right += 1
        return right - left - 1

    def run_before(self, s: int, d: int) -> int:
        """Work days immediately before ``d``."""
        row = self.values[s]
        count = 0
        i = d - 1
        while i >= 0 and int(row[i]) in _WORK:
            count += 1
            i -= 1
        return count

    def max_run(self, s: int) -> int:
        best = current = 0
        for v in self.values[s]:
            if int(v) in _WORK:
                current += 1
                best = max(best, current)
            else:
                current = 0
        return best

    def work_allowed(self, s: int, d: int) -> bool:
        """Making ``d`` a work day keeps the run within the consecutive cap."""
        return self.run_through(s, d) <= self.max_consecutive

    def off_allowed(self, s: int, extra: int = 1) -> bool:
        """Adding ``extra`` days off keeps the staff within the days-off cap."""
        if self.exempt[s]:
            return True
        return self.days_off(s) + extra <= self.days_off_caps[s]

    def can_work_day(self, s: int, d: int) -> bool:
        """Day-shift eligibility by preference and the head's Sunday rule."""
        if self.no_day[s]:
            return False
        if self.ranks[s] == Rank.HEAD and self.calendar.is_sunday(d):
            return False
        return True

    def night_cycles_with(self, s: int, d: int) -> int:
        """Consecutive night/after cycles that a night placed at ``d`` would join."""
        row = self.values[s]
        cycles = 1
        j = d - 2
        while j >= 0 and int(row[j]) in _NIGHTS and int(row[j + 1]) in _AFTERS:
            cycles += 1
            j -= 2
        k = d + 2
        while k + 1 < self.num_days and int(row[k]) in _NIGHTS and int(row[k + 1]) in _AFTERS:
            cycles += 1
            k += 2
        return cycles

    def can_take_night(
        self,
        s: int,
        d: int,
        allowed: frozenset[Shift] = frozenset({Shift.EMPTY}),
        cap_slack: int = 0,
    ) -> bool:
        """Whether staff ``s`` may start a night shift on day ``d``.

        ``allowed`` lists the current values of ``d`` that may be replaced.
        """
        if self.no_night[s]:
            return False
        if self.nights(s) >= self.night_caps[s] + cap_slack:
            return False
        if self.is_fixed(s, d) or self.get(s, d) not in allowed:
            return False
        if d > 0 and int(self.values[s, d - 1]) in _NIGHTS:
            return False
        if d + 1 < self.num_days:
            nxt = int(self.values[s, d + 1])
            if nxt in _NIGHTS:
                return False
            if self.is_fixed(s, d + 1) and nxt != Shift.AFTER:
                return False
        if self.night_cycles_with(s, d) > 2:
            return False
        if self.run_before(s, d) + 1 > self.max_consecutive:
            return False
        return True

    # --- night pairing -----------------------------------------------------

    def place_night(self, s: int, d: int, rest: bool = True) -> None:
        """Night on ``d``, its after-shift on ``d+1`` and, when free, a rest day on ``d+2``."""
        self.set(s, d, Shift.NIGHT)
        if d + 1 < self.num_days and not self.is_fixed(s, d + 1):
            self.set(s, d + 1, Shift.AFTER, Provenance.NIGHT_AFTER)
            if rest and d + 2 < self.num_days and self._rest_cell_free(s, d + 2):
                self.set(s, d + 2, Shift.OFF, Provenance.NIGHT_REST)

    def _rest_cell_free(self, s: int, d: int) -> bool:
        # an empty cell, or a day shift on a day that stays staffed without it
        if self.is_fixed(s, d) or not self.off_allowed(s):
            return False
        current = self.get(s, d)
        if current == Shift.EMPTY:
            return True
        return current == Shift.DAY and self.day_count(d) > self.calendar.day_required[d]

    def fill_value(self, s: int, d: int) -> Shift:
        """Day shift where the staff may work it, otherwise off."""
        if self.can_work_day(s, d) and self.work_allowed(s, d):
            return Shift.DAY
        return Shift.OFF

    def remove_night(self, s: int, d: int) -> None:
        """Undo a generated night and give back its after/rest cells."""
        self.set(s, d, self.fill_value(s, d))
        nxt = d + 1
        if nxt < self.num_days and self.get(s, nxt).is_after and not self.is_fixed(s, nxt):
            self.set(s, nxt, self.fill_value(s, nxt))
        rest = d + 2
        if (
            rest < self.num_days
            and self.provenance[s, rest] == Provenance.NIGHT_REST
            and self.get(s, rest) == Shift.OFF
        ):
            if self.can_work_day(s, rest) and self.work_allowed(s, rest):
                self.set(s, rest, Shift.DAY)

    # --- views -------------------------------------------------------------

    def context(self) -> ScheduleContext:
        return ScheduleContext(
            schedule=self.values,
            night_required=self.calendar.night_required,
            day_required=self.calendar.day_required,
            day_maximum=self.calendar.day_maximum,
            special_days=self.calendar.special,
            ordinary_days=self.calendar.ordinary_days,
            night_caps=self.night_caps,
            days_off_caps=self.days_off_caps,
            days_off_exempt=self.exempt,
            no_night=self.no_night,
            max_consecutive=self.max_consecutive,
        )

    def to_result(self, score: float = 0.0, seed: int | None = None) -> ScheduleResult:
        return ScheduleResult(
            year=self.calendar.year,
            month=self.calendar.month,
            staff_ids=list(self.staff_ids),
            shifts={
                sid: [Shift(int(v)) for v in self.values[i]]
                for i, sid in enumerate(self.staff_ids)
            },
            provenance={
                sid: [Provenance(int(p)) for p in self.provenance[i]]
                for i, sid in enumerate(self.staff_ids)
            },
            score=score,
            seed=seed,
        )

    @classmethod
    def from_result(
        cls, result: ScheduleResult, shift_input: ScheduleInput, calendar: MonthCalendar
    ) -> ShiftGrid:
        """Load a plain schedule for validation or editing.

        Staff missing from ``result`` keep empty rows.
        """
        grid = cls(shift_input, calendar)
        for i, sid in enumerate(grid.staff_ids):
            row = result.shifts.get(sid)
            if row is None:
                continue
            prov = result.provenance.get(sid)
            for d in range(min(len(row), grid.num_days)):
                grid.values[i, d] = Shift.from_symbol(row[d])
                if prov is not None and d < len(prov):
                    grid.provenance[i, d] = prov[d]
        return grid
