"""Manual cell edits on a generated schedule."""

from __future__ import annotations

import logging

from hcu_shift.models.schedule import ScheduleResult
from hcu_shift.models.shift import Provenance, Shift, after_of

logger = logging.getLogger(__name__)

_AUTO_AFTER = (Provenance.NIGHT_AFTER, Provenance.REQUESTED_AFTER)
_AUTO_REST = (Provenance.NIGHT_REST, Provenance.REQUESTED_REST)


def edit_cell(result: ScheduleResult, staff_id: int, day: int, shift: Shift | str) -> ScheduleResult:
    """Return a copy of ``result`` with one cell changed by the operator.

    ``day`` is 1-based. Replacing a night clears the after-shift and rest day
    it produced; writing a night fills in its after-shift and a rest day.
    An after-shift cannot be chosen directly and becomes off instead.
    Cells holding a request or carry-over value are never overwritten.
    Re-check the edited schedule with :func:`hcu_shift.validate`.
    """
    if staff_id not in result.shifts:
        raise KeyError(f"Unknown staff id: {staff_id}")
    num_days = result.num_days
    if not 1 <= day <= num_days:
        raise ValueError(f"Day {day} is outside 1-{num_days}")

    edited = result.model_copy(deep=True)
    row = edited.shifts[staff_id]
    prov = edited.provenance.setdefault(staff_id, [Provenance.GENERATED] * num_days)
    d = day - 1

    new = Shift.from_symbol(shift) if isinstance(shift, str) else Shift(shift)
    if new.is_after:
        new = Shift.OFF

    old = row[d]
    if old.is_night:
        if d + 1 < num_days and row[d + 1] == after_of(old) and prov[d + 1] in _AUTO_AFTER:
            row[d + 1], prov[d + 1] = Shift.EMPTY, Provenance.NONE
        if d + 2 < num_days and row[d + 2] == Shift.OFF and prov[d + 2] in _AUTO_REST:
            row[d + 2], prov[d + 2] = Shift.EMPTY, Provenance.NONE

    row[d], prov[d] = new, Provenance.MANUAL
    # requested and carried-over cells keep their value; the pairing stops there
    if new.is_night and d + 1 < num_days and not Provenance(prov[d + 1]).is_fixed:
        row[d + 1], prov[d + 1] = after_of(new), Provenance.NIGHT_AFTER
        if d + 2 < num_days and not Provenance(prov[d + 2]).is_fixed:
            row[d + 2], prov[d + 2] = Shift.OFF, Provenance.NIGHT_REST

    logger.debug("Edited staff %d day %d: %s -> %s", staff_id, day, old.symbol, new.symbol)
    return edited
