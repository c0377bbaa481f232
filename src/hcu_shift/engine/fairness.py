"""Phase 3: even out day-shift counts between staff."""

from __future__ import annotations

import logging

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.models.config import EngineConfig
from hcu_shift.models.shift import Shift

logger = logging.getLogger(__name__)


def _swap_day(grid: ShiftGrid, high: int, low: int) -> bool:
    """Move one day shift from ``high`` to ``low`` on the first day that allows it."""
    for d in range(grid.num_days):
        if grid.get(high, d) != Shift.DAY or grid.get(low, d) != Shift.OFF:
            continue
        if grid.is_fixed(high, d) or grid.is_fixed(low, d) or not grid.can_work_day(low, d):
            continue
        mark = grid.mark()
        grid.set(high, d, Shift.OFF)
        grid.set(low, d, Shift.DAY)
        within_caps = grid.work_allowed(low, d) and (
            grid.exempt[high] or grid.days_off(high) <= grid.days_off_caps[high]
        )
        if within_caps:
            return True
        grid.rollback(mark)
    return False


def rebalance(grid: ShiftGrid, config: EngineConfig) -> int:
    """Swap day shifts from the busiest to the least busy staff member.

    Stops when the gap is within ``config.fairness_gap``, when the pair has
    no valid swap, or after ``config.fairness_passes`` passes. Returns the
    number of swaps made.
    """
    eligible = [s for s in range(grid.num_staff) if not grid.no_day[s]]
    swaps = 0
    if len(eligible) < 2:
        return swaps
    for _ in range(config.fairness_passes):
        counts = {s: grid.day_shifts(s) for s in eligible}
        high = max(eligible, key=counts.__getitem__)
        low = min(eligible, key=counts.__getitem__)
        if counts[high] - counts[low] <= config.fairness_gap:
            break
        if not _swap_day(grid, high, low):
            break
        swaps += 1
    grid.stop_journal()
    logger.debug("Rebalance: %d swap(s)", swaps)
    return swaps
