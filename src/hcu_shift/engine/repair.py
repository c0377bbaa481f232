"""Phase 4: deterministic repair sweeps.

Each ``repair_*`` sweep reads and writes the grid only through its rule
checks and :meth:`ShiftGrid.set`, so locked and pinned cells are never
touched. Every sweep returns the number of cell writes it made.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

import numpy as np

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.models.config import EngineConfig
from hcu_shift.models.shift import AFTER_PAIRS, NIGHT_PAIRS, Provenance, Shift, after_of

logger = logging.getLogger(__name__)

_OPEN_CELLS = frozenset({Shift.EMPTY, Shift.OFF})
_DAY_CELLS = frozenset({Shift.DAY})


def _journaled(sweep: Callable[..., None]) -> Callable[..., int]:
    """Run a sweep and count the writes it journaled."""

    @functools.wraps(sweep)
    def wrapper(grid: ShiftGrid, *args, **kwargs) -> int:
        started = not grid.journaling
        start = grid.mark()
        sweep(grid, *args, **kwargs)
        changes = grid.mark() - start
        if started:
            grid.stop_journal()
        return changes

    return wrapper


def _mean_nights(grid: ShiftGrid) -> float:
    return float(np.mean([grid.nights(s) for s in range(grid.num_staff)]))


def _day_fill_key(grid: ShiftGrid):
    mean_nights = _mean_nights(grid)
    return lambda s: (
        grid.ranks[s].priority,
        0 if grid.nights(s) <= mean_nights else 1,
        grid.total_work(s),
    )


# --- nights ----------------------------------------------------------------


def _night_candidate(grid: ShiftGrid, d: int, cap_slack: int) -> int | None:
    """Best staff for an extra night on ``d``: free cells first, then day shifts."""

    def next_day_cost(s: int) -> int:
        if d + 1 >= grid.num_days:
            return 0
        return 0 if grid.get(s, d + 1) in (Shift.EMPTY, Shift.OFF, Shift.AFTER) else 1

    for allowed in (_OPEN_CELLS, _DAY_CELLS):
        eligible = [
            s
            for s in range(grid.num_staff)
            if grid.can_take_night(s, d, allowed=allowed, cap_slack=cap_slack)
        ]
        if eligible:
            return min(
                eligible,
                key=lambda s: (grid.nights(s), next_day_cost(s), grid.total_work(s)),
            )
    return None


def _match_night_counts(grid: ShiftGrid, attempts: int, relaxed: bool) -> None:
    for d in range(grid.num_days):
        required = int(grid.calendar.night_required[d])
        tries = 0
        while grid.night_count(d) < required and tries < attempts:
            tries += 1
            s = _night_candidate(grid, d, cap_slack=0)
            if s is None and relaxed:
                s = _night_candidate(grid, d, cap_slack=1)
            if s is None:
                break
            grid.place_night(s, d)

        while grid.night_count(d) > required:
            removable = [
                s
                for s in range(grid.num_staff)
                if grid.get(s, d) == Shift.NIGHT and not grid.is_fixed(s, d)
            ]
            if not removable:
                break
            s = max(removable, key=grid.nights)
            grid.remove_night(s, d)


@_journaled
def repair_night_counts(grid: ShiftGrid, attempts: int = 20) -> None:
    """(a) Bring every day's night headcount to its requirement."""
    _match_night_counts(grid, attempts, relaxed=False)


@_journaled
def repair_final_nights(grid: ShiftGrid, attempts: int = 20) -> None:
    """(k) Night headcount again, falling back to personal cap + 1."""
    _match_night_counts(grid, attempts, relaxed=True)


def _close_open_nights(grid: ShiftGrid) -> None:
    for s in range(grid.num_staff):
        for d in range(grid.num_days - 1):
            current = grid.get(s, d)
            if not current.is_night:
                continue
            after = after_of(current)
            if grid.get(s, d + 1) != after and not grid.is_fixed(s, d + 1):
                grid.set(s, d + 1, after, Provenance.NIGHT_AFTER)


def _clear_orphan_afters(grid: ShiftGrid) -> None:
    for s in range(grid.num_staff):
        for d in range(grid.num_days):
            current = grid.get(s, d)
            if not current.is_after or grid.is_fixed(s, d):
                continue
            if d > 0 and grid.get(s, d - 1) == AFTER_PAIRS[current]:
                continue
            if grid.off_allowed(s):
                grid.set(s, d, Shift.OFF)
            else:
                grid.set(s, d, grid.fill_value(s, d))


@_journaled
def repair_chains(grid: ShiftGrid) -> None:
    """(b) Every night gets its after-shift; orphaned after-shifts become off."""
    _close_open_nights(grid)
    _clear_orphan_afters(grid)


@_journaled
def repair_orphan_afters(grid: ShiftGrid) -> None:
    """(e) After-shifts left without their night become off."""
    _clear_orphan_afters(grid)


@_journaled
def repair_double_nights(grid: ShiftGrid) -> None:
    """(c) After two back-to-back night cycles, the next one or two days are off."""
    for s in range(grid.num_staff):
        for d in range(grid.num_days - 3):
            first = grid.get(s, d)
            if not first.is_night:
                continue
            after = NIGHT_PAIRS[first]
            cycle = (grid.get(s, d + 1), grid.get(s, d + 2), grid.get(s, d + 3))
            if cycle != (after, first, after):
                continue
            rest = d + 4
            if rest < grid.num_days and not grid.is_fixed(s, rest):
                current = grid.get(s, rest)
                if current.is_night:
                    grid.remove_night(s, rest)
                if not grid.get(s, rest).is_rest:
                    grid.set(s, rest, Shift.OFF)
            extra = d + 5
            if (
                extra < grid.num_days
                and not grid.is_fixed(s, extra)
                and grid.get(s, extra) in (Shift.DAY, Shift.EMPTY)
                and grid.off_allowed(s)
            ):
                grid.set(s, extra, Shift.OFF)


@_journaled
def repair_night_caps(grid: ShiftGrid) -> None:
    """(d) Trim nights above the personal cap, latest first."""
    for s in range(grid.num_staff):
        cap = int(grid.night_caps[s])
        while grid.nights(s) > cap:
            removable = [
                d
                for d in range(grid.num_days)
                if grid.get(s, d) == Shift.NIGHT and not grid.is_fixed(s, d)
            ]
            if not removable:
                break
            grid.remove_night(s, removable[-1])


# --- runs and days off ------------------------------------------------------


@_journaled
def repair_consecutive_runs(grid: ShiftGrid) -> None:
    """(f) Cut work runs longer than the cap by turning day shifts into off."""
    cap = grid.max_consecutive
    for s in range(grid.num_staff):
        run = 0
        for d in range(grid.num_days):
            if not grid.is_work(s, d):
                run = 0
                continue
            run += 1
            if run > cap and grid.get(s, d) == Shift.DAY and grid.set(s, d, Shift.OFF):
                run = 0


@_journaled
def repair_days_off(grid: ShiftGrid) -> None:
    """(g) Turn excess off days back into day shifts, from month end backward.

    Days below their day-shift maximum are used before any other day.
    """
    for s in range(grid.num_staff):
        if grid.exempt[s]:
            continue
        for below_maximum_only in (True, False):
            for d in range(grid.num_days - 1, -1, -1):
                if grid.days_off(s) <= grid.days_off_caps[s]:
                    break
                if grid.get(s, d) != Shift.OFF or grid.is_fixed(s, d):
                    continue
                if below_maximum_only and grid.day_count(d) >= grid.calendar.day_maximum[d]:
                    continue
                if grid.can_work_day(s, d) and grid.work_allowed(s, d):
                    grid.set(s, d, Shift.DAY)


# --- day-shift headcount ----------------------------------------------------


def _pull_into_day(grid: ShiftGrid, d: int) -> bool:
    candidates = [
        s
        for s in range(grid.num_staff)
        if grid.get(s, d) in (Shift.OFF, Shift.EMPTY)
        and not grid.is_fixed(s, d)
        and grid.can_work_day(s, d)
        and grid.work_allowed(s, d)
    ]
    if not candidates:
        return False
    # generated off days go before the rest day of a night
    key = _day_fill_key(grid)
    s = min(
        candidates,
        key=lambda s: (int(grid.provenance[s, d] == Provenance.NIGHT_REST), *key(s)),
    )
    grid.set(s, d, Shift.DAY)
    return True


def _push_to_off(grid: ShiftGrid, d: int) -> bool:
    candidates = [
        s
        for s in range(grid.num_staff)
        if grid.get(s, d) == Shift.DAY and not grid.is_fixed(s, d) and grid.off_allowed(s)
    ]
    if not candidates:
        return False
    s = max(candidates, key=grid.total_work)
    grid.set(s, d, Shift.OFF)
    return True


def _enforce_day_requirements(grid: ShiftGrid) -> None:
    for d in range(grid.num_days):
        while grid.day_count(d) < grid.calendar.day_required[d]:
            if not _pull_into_day(grid, d):
                break
        while grid.day_count(d) > grid.calendar.day_maximum[d]:
            if not _push_to_off(grid, d):
                break


@_journaled
def repair_day_requirements(grid: ShiftGrid) -> None:
    """(h) Pull staff into short days and push them off over-staffed days."""
    _enforce_day_requirements(grid)


@_journaled
def repair_day_top_up(grid: ShiftGrid) -> None:
    """(j) Repeat the day-shift pull/push to close remaining gaps."""
    _enforce_day_requirements(grid)


def _swap_into(grid: ShiftGrid, short: int, donor: int) -> bool:
    for s in range(grid.num_staff):
        if grid.get(s, donor) != Shift.DAY or grid.get(s, short) != Shift.OFF:
            continue
        if grid.is_fixed(s, donor) or grid.is_fixed(s, short) or not grid.can_work_day(s, short):
            continue
        mark = grid.mark()
        grid.set(s, donor, Shift.OFF)
        grid.set(s, short, Shift.DAY)
        if grid.work_allowed(s, short):
            return True
        grid.rollback(mark)
    return False


@_journaled
def repair_cross_day_swaps(grid: ShiftGrid) -> None:
    """(i) Move a day shift from a day with surplus to a short day, same staff."""
    required = grid.calendar.day_required
    for short in range(grid.num_days):
        while grid.day_count(short) < required[short]:
            donors = [
                e for e in range(grid.num_days)
                if e != short and grid.day_count(e) > required[e]
            ]
            # the most over-staffed donor goes first
            donors.sort(key=lambda e: required[e] - grid.day_count(e))
            if not any(_swap_into(grid, short, e) for e in donors):
                break


# --- pipeline ---------------------------------------------------------------


def repair(grid: ShiftGrid, config: EngineConfig | None = None) -> dict[str, int]:
    """Run sweeps (a) through (l) in order; returns cell writes per sweep."""
    config = config or EngineConfig()
    attempts = config.repair_attempts
    sweeps: list[tuple[str, Callable[[], int]]] = [
        ("night_counts", lambda: repair_night_counts(grid, attempts)),
        ("chains", lambda: repair_chains(grid)),
        ("double_nights", lambda: repair_double_nights(grid)),
        ("night_caps", lambda: repair_night_caps(grid)),
        ("orphan_afters", lambda: repair_orphan_afters(grid)),
        ("consecutive_runs", lambda: repair_consecutive_runs(grid)),
        ("days_off", lambda: repair_days_off(grid)),
        ("day_requirements", lambda: repair_day_requirements(grid)),
        ("cross_day_swaps", lambda: repair_cross_day_swaps(grid)),
        ("day_top_up", lambda: repair_day_top_up(grid)),
        ("final_nights", lambda: repair_final_nights(grid, attempts)),
        ("final_chains", lambda: repair_chains(grid)),
    ]
    counts: dict[str, int] = {}
    for name, sweep in sweeps:
        counts[name] = sweep()
        logger.debug("Repair %s: %d write(s)", name, counts[name])
    grid.stop_journal()
    return counts
