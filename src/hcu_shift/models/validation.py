"""Validation report models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ViolationSeverity(str, Enum):
    """Severity levels for constraint violations."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Violation(BaseModel):
    """A single constraint violation. ``day`` is 1-based."""

    constraint_id: str
    message: str
    severity: ViolationSeverity = ViolationSeverity.ERROR
    staff_id: int | None = None
    day: int | None = None


class DayStaffing(BaseModel):
    """Headcounts for one day against its requirement."""

    day: int
    night_count: int
    night_required: int
    day_count: int
    day_required: int
    day_maximum: int
    is_special: bool = False

    @property
    def night_shortfall(self) -> int:
        return max(0, self.night_required - self.night_count)

    @property
    def night_excess(self) -> int:
        return max(0, self.night_count - self.night_required)

    @property
    def day_shortfall(self) -> int:
        return max(0, self.day_required - self.day_count)

    @property
    def day_excess(self) -> int:
        return max(0, self.day_count - self.day_maximum)


class StaffSummary(BaseModel):
    """Per-staff totals against personal caps."""

    staff_id: int
    name: str
    nights: int
    night_cap: int
    day_shifts: int
    days_off: int
    days_off_cap: int
    exempt: bool = False
    max_run: int
    requests: int = 0
    request_quota: int | None = None


class ValidationReport(BaseModel):
    """Complete validation report for a schedule."""

    days: list[DayStaffing] = Field(default_factory=list)
    staff: list[StaffSummary] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)
    locked_cells_checked: int = 0

    @property
    def is_compliant(self) -> bool:
        """True if no error-level violations exist."""
        return not any(v.severity == ViolationSeverity.ERROR for v in self.violations)

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == ViolationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == ViolationSeverity.WARNING)

    @property
    def shortfall_days(self) -> list[int]:
        """Days flagged for night or day-shift staffing."""
        flagged = {
            v.day
            for v in self.violations
            if v.constraint_id in ("night_staffing", "day_staffing") and v.day is not None
        }
        return sorted(flagged)

    def violations_for(self, constraint_id: str) -> list[Violation]:
        return [v for v in self.violations if v.constraint_id == constraint_id]

    def to_summary(self) -> dict[str, bool]:
        """Pass/fail per check."""
        failed = {v.constraint_id for v in self.violations if v.severity != ViolationSeverity.INFO}
        return {check: check not in failed for check in CHECKS}

    def summary_lines(self) -> list[str]:
        if not self.violations:
            return ["All checks passed"]
        lines = [f"{self.error_count} error(s), {self.warning_count} warning(s)"]
        for v in self.violations:
            lines.append(f"[{v.severity.value}] {v.constraint_id}: {v.message}")
        return lines


CHECKS = (
    "night_staffing",
    "day_staffing",
    "days_off_cap",
    "consecutive_cap",
    "night_cap",
    "no_night_shift",
    "no_day_shift",
    "night_without_after",
    "orphan_after",
    "locked_cell_changed",
    "request_unfulfilled",
    "request_quota",
)
