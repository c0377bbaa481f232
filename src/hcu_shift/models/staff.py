"""Staff roster models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Rank(str, Enum):
    """Staff rank, ordered by assignment priority."""

    HEAD = "師長"
    CHIEF = "主任"
    DEPUTY = "副主任"
    GENERAL = "一般"

    @property
    def priority(self) -> int:
        return _PRIORITY[self]

    @property
    def is_deputy(self) -> bool:
        """Chief and deputy ranks cover for the head on the head's days off."""
        return self in (Rank.CHIEF, Rank.DEPUTY)


_PRIORITY = {Rank.HEAD: 1, Rank.CHIEF: 2, Rank.DEPUTY: 3, Rank.GENERAL: 4}


class StaffMember(BaseModel):
    """A roster entry. Deactivated staff keep their id and history."""

    id: int
    name: str
    rank: Rank = Rank.GENERAL
    active: bool = True


class StaffOverride(BaseModel):
    """Per-staff exceptions to the global generation rules."""

    max_night_shifts: int | None = Field(
        default=None, ge=0, description="Personal night cap; global cap when unset"
    )
    no_night_shift: bool = False
    no_day_shift: bool = False
    exempt_from_days_off_cap: bool = Field(
        default=False, description="Excluded from the maximum days-off rule"
    )
    request_quota: int | None = Field(
        default=None, ge=0, description="Max preference entries; global quota when unset"
    )

    def night_cap(self, global_cap: int) -> int:
        if self.no_night_shift:
            return 0
        if self.max_night_shifts is not None:
            return self.max_night_shifts
        return global_cap
