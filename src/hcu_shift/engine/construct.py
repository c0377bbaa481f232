"""Phase 1: request-seeded greedy construction of a candidate schedule."""

from __future__ import annotations

import logging

import numpy as np

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.core.locking import LockTable
from hcu_shift.models.shift import Provenance, Shift, after_of
from hcu_shift.models.staff import Rank

logger = logging.getLogger(__name__)

# Paid-leave requests at or above this count earn extra off days in the quota.
_LEAVE_HEAVY_THRESHOLD = 3
_LEAVE_HEAVY_BONUS = 2
_OFF_PICK_ATTEMPTS = 100
_FILL_PASSES = 2


def seed_locked_cells(grid: ShiftGrid, locks: LockTable) -> None:
    """Write carry-over constraints, then requests, then requested nights' after/rest cells.

    Direct requests all go in before any derived cell so that a request for
    day d+2 is never clobbered by the rest day of a night on day d.
    """
    for staff_id, forced in locks.carry_over.items():
        s = grid.index_of(staff_id)
        for d, shift in forced.items():
            grid.lock(s, d, shift, Provenance.CARRIED_OVER)

    for staff_id, requests in locks.requests.items():
        s = grid.index_of(staff_id)
        for d, shift in requests.items():
            if locks.from_carry_over(staff_id, d):
                continue
            grid.lock(s, d, shift, Provenance.REQUESTED)

    for staff_id, requests in locks.requests.items():
        s = grid.index_of(staff_id)
        for d, shift in requests.items():
            if not shift.is_night or locks.from_carry_over(staff_id, d):
                continue
            after = after_of(shift)
            nxt, rest = d + 1, d + 2
            if nxt < grid.num_days and grid.is_empty(s, nxt):
                grid.lock(s, nxt, after, Provenance.REQUESTED_AFTER)
            if (
                rest < grid.num_days
                and grid.get(s, nxt) == after
                and grid.is_empty(s, rest)
            ):
                grid.lock(s, rest, Shift.OFF, Provenance.REQUESTED_REST)


def build_candidate(base: ShiftGrid, locks: LockTable, rng: np.random.Generator) -> ShiftGrid:
    """Build one full candidate from a grid that already holds the locked cells."""
    grid = base.copy()
    _place_off_quota(grid, locks, rng)
    for d in range(grid.num_days):
        _assign_nights(grid, d)
        _assign_day_shifts(grid, d)
        _cover_head_absence(grid, d)
    for _ in range(_FILL_PASSES):
        _fill_short_days(grid)
    _fill_remaining(grid, rng)
    _top_up_short_days(grid)
    return grid


def _place_off_quota(grid: ShiftGrid, locks: LockTable, rng: np.random.Generator) -> None:
    cfg = grid.config
    min_day = 3 if any(locks.carry_over.values()) else 0
    span = grid.num_days - min_day
    if span <= 0:
        return
    for s in range(grid.num_staff):
        target = cfg.max_days_off
        if grid.paid_leave(s) >= _LEAVE_HEAVY_THRESHOLD:
            target += _LEAVE_HEAVY_BONUS
        needed = target - grid.days_off(s)
        if needed <= 0:
            continue
        picked: list[int] = []
        attempts = 0
        while len(picked) < needed and attempts < _OFF_PICK_ATTEMPTS:
            d = min_day + int(rng.integers(span))
            if grid.is_empty(s, d) and d not in picked:
                picked.append(d)
            attempts += 1
        for d in picked:
            grid.set(s, d, Shift.OFF)


def _assign_nights(grid: ShiftGrid, d: int) -> None:
    need = int(grid.calendar.night_required[d]) - grid.night_count(d)
    if need <= 0:
        return
    special = grid.calendar.is_special(d)

    def free_two_days_later(s: int) -> int:
        return 0 if d + 2 < grid.num_days and grid.is_empty(s, d + 2) else 1

    eligible = [s for s in range(grid.num_staff) if grid.can_take_night(s, d)]
    eligible.sort(
        key=lambda s: (
            grid.nights(s),
            free_two_days_later(s),
            grid.weekend_work(s) if special else grid.total_work(s),
        )
    )
    for s in eligible[:need]:
        grid.place_night(s, d)


def _day_eligible(grid: ShiftGrid, s: int, d: int) -> bool:
    return (
        grid.is_empty(s, d)
        and not grid.is_fixed(s, d)
        and grid.can_work_day(s, d)
        and grid.work_allowed(s, d)
    )


def _assign_day_shifts(grid: ShiftGrid, d: int) -> None:
    need = int(grid.calendar.day_required[d]) - grid.day_count(d)
    if need <= 0:
        return
    special = grid.calendar.is_special(d)
    eligible = [s for s in range(grid.num_staff) if _day_eligible(grid, s, d)]
    if special:
        eligible.sort(key=lambda s: (grid.weekend_work(s), grid.total_work(s)))
    else:
        eligible.sort(key=grid.total_work)
    for s in eligible[:need]:
        grid.set(s, d, Shift.DAY)


def _cover_head_absence(grid: ShiftGrid, d: int) -> None:
    """When the head is off, make sure a chief or deputy works the day shift."""
    heads = [s for s in range(grid.num_staff) if grid.ranks[s] == Rank.HEAD]
    if not heads or not grid.get(heads[0], d).is_rest:
        return
    deputies = [s for s in range(grid.num_staff) if grid.ranks[s].is_deputy]
    if any(grid.get(s, d) == Shift.DAY for s in deputies):
        return
    for s in deputies:
        if _day_eligible(grid, s, d):
            grid.set(s, d, Shift.DAY)
            return


def _fill_priority(grid: ShiftGrid):
    mean_nights = float(np.mean([grid.nights(s) for s in range(grid.num_staff)]))

    def key(s: int) -> tuple[int, int, int]:
        low_nights = 0 if grid.nights(s) <= mean_nights else 1
        return grid.ranks[s].priority, low_nights, grid.total_work(s)

    return key


def _fill_short_days(grid: ShiftGrid) -> None:
    """Bring under-staffed days up to their day-shift requirement from empty cells."""
    for d in range(grid.num_days):
        need = int(grid.calendar.day_required[d]) - grid.day_count(d)
        if need <= 0:
            continue
        eligible = [s for s in range(grid.num_staff) if _day_eligible(grid, s, d)]
        eligible.sort(key=_fill_priority(grid))
        for s in eligible[:need]:
            grid.set(s, d, Shift.DAY)


def _fill_remaining(grid: ShiftGrid, rng: np.random.Generator) -> None:
    """Decide day shift or off for every cell still empty."""
    cfg = grid.config
    target_off = cfg.max_days_off
    target_work = grid.num_days - target_off
    for s in range(grid.num_staff):
        for d in range(grid.num_days):
            if not grid.is_empty(s, d) or grid.is_fixed(s, d):
                continue
            grid.set(s, d, _fill_choice(grid, s, d, rng, target_work, target_off))


def _fill_choice(
    grid: ShiftGrid,
    s: int,
    d: int,
    rng: np.random.Generator,
    target_work: int,
    target_off: int,
) -> Shift:
    if not grid.work_allowed(s, d) or not grid.can_work_day(s, d):
        return Shift.OFF
    if not grid.off_allowed(s):
        return Shift.DAY

    count = grid.day_count(d)
    below_required = count < grid.calendar.day_required[d]
    below_maximum = count < grid.calendar.day_maximum[d]
    run = grid.run_before(s, d)
    work = grid.total_work(s)

    if run >= grid.max_consecutive - 1 and not below_required:
        return Shift.OFF
    if work < target_work - 2:
        if below_required or (below_maximum and work < target_work - 4):
            return Shift.DAY
        return Shift.OFF
    if grid.days_off(s) < target_off - 2:
        return Shift.OFF
    if below_required and run < 2 and rng.random() <= 0.6:
        return Shift.DAY
    return Shift.OFF


def _top_up_short_days(grid: ShiftGrid) -> None:
    """Convert generated off days into day shifts on days still short."""
    for d in range(grid.num_days):
        required = int(grid.calendar.day_required[d])
        while grid.day_count(d) < required:
            candidates = [
                s
                for s in range(grid.num_staff)
                if grid.get(s, d) == Shift.OFF
                and grid.provenance[s, d] == Provenance.GENERATED
                and grid.can_work_day(s, d)
                and grid.work_allowed(s, d)
            ]
            if not candidates:
                break
            s = min(candidates, key=grid.total_work)
            grid.set(s, d, Shift.DAY)
