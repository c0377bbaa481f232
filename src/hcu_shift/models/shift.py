"""Shift vocabulary and per-cell provenance."""

from __future__ import annotations

import logging
from enum import Enum, IntEnum

logger = logging.getLogger(__name__)


class Shift(IntEnum):
    """A single schedule cell value.

    Stored as int8 in the schedule matrix; ``symbol`` is the label used by
    collaborators (requests, carry-over tails, exports).
    """

    EMPTY = 0
    DAY = 1
    NIGHT = 2
    AFTER = 3
    MGMT_NIGHT = 4
    MGMT_AFTER = 5
    OFF = 6
    PAID_LEAVE = 7
    MORNING_HALF = 8
    AFTERNOON_HALF = 9

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def is_night(self) -> bool:
        return self in (Shift.NIGHT, Shift.MGMT_NIGHT)

    @property
    def is_after(self) -> bool:
        return self in (Shift.AFTER, Shift.MGMT_AFTER)

    @property
    def is_rest(self) -> bool:
        """Counted as a day off (after-shifts are not)."""
        return self in (Shift.OFF, Shift.PAID_LEAVE)

    @property
    def is_work(self) -> bool:
        """Counted toward a consecutive working run."""
        return self in _WORK

    @classmethod
    def from_symbol(cls, raw: object) -> Shift:
        """Normalize a raw symbol. Unrecognized symbols degrade to EMPTY."""
        if raw is None:
            return cls.EMPTY
        if isinstance(raw, Shift):
            return raw
        text = str(raw).strip()
        if text == "":
            return cls.EMPTY
        shift = _ALIASES.get(text)
        if shift is None:
            shift = _ALIASES.get(text.upper())
        if shift is None:
            logger.warning("Unrecognized shift symbol %r treated as empty", text)
            return cls.EMPTY
        return shift


_SYMBOLS = {
    Shift.EMPTY: "",
    Shift.DAY: "日",
    Shift.NIGHT: "夜",
    Shift.AFTER: "明",
    Shift.MGMT_NIGHT: "管夜",
    Shift.MGMT_AFTER: "管明",
    Shift.OFF: "休",
    Shift.PAID_LEAVE: "有",
    Shift.MORNING_HALF: "前",
    Shift.AFTERNOON_HALF: "後",
}

_WORK = frozenset(
    {Shift.DAY, Shift.NIGHT, Shift.MGMT_NIGHT, Shift.MORNING_HALF, Shift.AFTERNOON_HALF}
)

_ALIASES: dict[str, Shift] = {
    "日": Shift.DAY, "日勤": Shift.DAY, "D": Shift.DAY,
    "夜": Shift.NIGHT, "夜勤": Shift.NIGHT, "N": Shift.NIGHT,
    "明": Shift.AFTER, "夜明": Shift.AFTER, "夜勤明": Shift.AFTER, "A": Shift.AFTER,
    "管夜": Shift.MGMT_NIGHT, "管理夜勤": Shift.MGMT_NIGHT, "MN": Shift.MGMT_NIGHT,
    "管明": Shift.MGMT_AFTER, "MA": Shift.MGMT_AFTER,
    "休": Shift.OFF, "公休": Shift.OFF, "公": Shift.OFF, "O": Shift.OFF,
    "nan": Shift.OFF, "NAN": Shift.OFF,
    "有": Shift.PAID_LEAVE, "有休": Shift.PAID_LEAVE, "有給": Shift.PAID_LEAVE,
    "Y": Shift.PAID_LEAVE,
    "前": Shift.MORNING_HALF, "午前半休": Shift.MORNING_HALF, "AM": Shift.MORNING_HALF,
    "後": Shift.AFTERNOON_HALF, "午後半休": Shift.AFTERNOON_HALF,
    "PM": Shift.AFTERNOON_HALF,
}

NIGHT_PAIRS: dict[Shift, Shift] = {
    Shift.NIGHT: Shift.AFTER,
    Shift.MGMT_NIGHT: Shift.MGMT_AFTER,
}
"""Night variant -> its mandatory following after-shift."""

AFTER_PAIRS: dict[Shift, Shift] = {v: k for k, v in NIGHT_PAIRS.items()}


def after_of(night: Shift) -> Shift:
    return NIGHT_PAIRS[night]


class Provenance(IntEnum):
    """Where a cell value came from."""

    NONE = 0
    GENERATED = 1
    REQUESTED = 2
    CARRIED_OVER = 3
    NIGHT_AFTER = 4
    NIGHT_REST = 5
    REQUESTED_AFTER = 6
    REQUESTED_REST = 7
    MANUAL = 8

    @property
    def is_locked(self) -> bool:
        return self in (Provenance.REQUESTED, Provenance.CARRIED_OVER)

    @property
    def is_fixed(self) -> bool:
        """Locked, or derived from a locked night; no phase may overwrite it."""
        return self in _FIXED

    @property
    def is_derived(self) -> bool:
        return self in _DERIVED


_FIXED = frozenset(
    {
        Provenance.REQUESTED,
        Provenance.CARRIED_OVER,
        Provenance.REQUESTED_AFTER,
        Provenance.REQUESTED_REST,
    }
)

_DERIVED = frozenset(
    {
        Provenance.NIGHT_AFTER,
        Provenance.NIGHT_REST,
        Provenance.REQUESTED_AFTER,
        Provenance.REQUESTED_REST,
    }
)


class Phase(str, Enum):
    """Generation phases reported to progress callbacks."""

    CONSTRUCT = "construct"
    ANNEAL = "anneal"
    REBALANCE = "rebalance"
    REPAIR = "repair"
    VALIDATE = "validate"
