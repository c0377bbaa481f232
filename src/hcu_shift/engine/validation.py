"""Validation of a finished schedule."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from hcu_shift.core.grid import ShiftGrid
from hcu_shift.core.locking import Cell, LockTable, count_request_cells
from hcu_shift.models.schedule import ScheduleInput
from hcu_shift.models.shift import AFTER_PAIRS, Shift, after_of
from hcu_shift.models.validation import (
    DayStaffing,
    StaffSummary,
    ValidationReport,
    Violation,
    ViolationSeverity,
)

logger = logging.getLogger(__name__)


def _check_days(grid: ShiftGrid, report: ValidationReport) -> None:
    cal = grid.calendar
    for d in range(grid.num_days):
        day = d + 1
        staffing = DayStaffing(
            day=day,
            night_count=grid.night_count(d),
            night_required=int(cal.night_required[d]),
            day_count=grid.day_count(d),
            day_required=int(cal.day_required[d]),
            day_maximum=int(cal.day_maximum[d]),
            is_special=bool(cal.special[d]),
        )
        report.days.append(staffing)

        if staffing.night_count != staffing.night_required:
            report.violations.append(
                Violation(
                    constraint_id="night_staffing",
                    message=(
                        f"Day {day}: {staffing.night_count} night staff, "
                        f"{staffing.night_required} required"
                    ),
                    day=day,
                )
            )
        if staffing.day_shortfall or staffing.day_excess:
            if staffing.day_required == staffing.day_maximum:
                wanted = f"{staffing.day_required} required"
            else:
                wanted = f"{staffing.day_required}-{staffing.day_maximum} allowed"
            report.violations.append(
                Violation(
                    constraint_id="day_staffing",
                    message=f"Day {day}: {staffing.day_count} day staff, {wanted}",
                    day=day,
                )
            )


def _check_staff(
    grid: ShiftGrid, locks: LockTable, shift_input: ScheduleInput, report: ValidationReport
) -> None:
    cfg = grid.config
    for s, member in enumerate(grid.staff):
        override = shift_input.override_for(member.id)
        quota = override.request_quota
        if quota is None:
            quota = cfg.request_quota
        summary = StaffSummary(
            staff_id=member.id,
            name=member.name,
            nights=grid.nights(s),
            night_cap=int(grid.night_caps[s]),
            day_shifts=grid.day_shifts(s),
            days_off=grid.days_off(s),
            days_off_cap=int(grid.days_off_caps[s]),
            exempt=bool(grid.exempt[s]),
            max_run=grid.max_run(s),
            requests=count_request_cells(locks.requests.get(member.id, {})),
            request_quota=quota,
        )
        report.staff.append(summary)

        def flag(constraint_id: str, message: str, severity=ViolationSeverity.ERROR) -> None:
            report.violations.append(
                Violation(
                    constraint_id=constraint_id,
                    message=f"{member.name}: {message}",
                    severity=severity,
                    staff_id=member.id,
                )
            )

        if not summary.exempt and summary.days_off > summary.days_off_cap:
            flag("days_off_cap", f"{summary.days_off} days off, cap {summary.days_off_cap}")
        if summary.max_run > cfg.max_consecutive_days:
            flag(
                "consecutive_cap",
                f"{summary.max_run} consecutive work days, cap {cfg.max_consecutive_days}",
            )
        if grid.no_night[s]:
            if summary.nights:
                flag("no_night_shift", f"{summary.nights} night(s) despite no-night setting")
        elif summary.nights > summary.night_cap:
            flag("night_cap", f"{summary.nights} nights, cap {summary.night_cap}")
        if grid.no_day[s] and summary.day_shifts:
            flag(
                "no_day_shift",
                f"{summary.day_shifts} day shift(s) despite no-day setting",
                ViolationSeverity.WARNING,
            )


def _check_chains(grid: ShiftGrid, locks: LockTable, report: ValidationReport) -> None:
    for s, sid in enumerate(grid.staff_ids):
        for d in range(grid.num_days):
            current = grid.get(s, d)
            if current.is_night and d + 1 < grid.num_days and not locks.is_locked(sid, d + 1):
                if grid.get(s, d + 1) != after_of(current):
                    report.violations.append(
                        Violation(
                            constraint_id="night_without_after",
                            message=f"Staff {sid}, day {d + 1}: {current.symbol} not followed by {after_of(current).symbol}",
                            staff_id=sid,
                            day=d + 1,
                        )
                    )
            if current.is_after and not locks.is_locked(sid, d):
                # only a carried-over after may open the month
                if d == 0 or grid.get(s, d - 1) != AFTER_PAIRS[current]:
                    report.violations.append(
                        Violation(
                            constraint_id="orphan_after",
                            message=f"Staff {sid}, day {d + 1}: {current.symbol} without a preceding night",
                            staff_id=sid,
                            day=d + 1,
                        )
                    )


def _derived_from_requested_night(requests: Mapping[int, Shift], d: int, actual: Shift) -> bool:
    before = requests.get(d - 1)
    if before is not None and before.is_night and actual == after_of(before):
        return True
    two_before = requests.get(d - 2)
    return two_before is not None and two_before.is_night and actual == Shift.OFF


def _check_locks(
    grid: ShiftGrid,
    locks: LockTable,
    before: Mapping[Cell, Shift] | None,
    report: ValidationReport,
) -> None:
    expected = before if before is not None else locks.locked
    after = locks.snapshot(grid.value_of)
    for sid, d in locks.diff(expected, after):
        report.violations.append(
            Violation(
                constraint_id="locked_cell_changed",
                message=(
                    f"Staff {sid}, day {d + 1}: locked {expected[(sid, d)].symbol} "
                    f"became {after[(sid, d)].symbol or 'empty'}"
                ),
                staff_id=sid,
                day=d + 1,
            )
        )
    report.locked_cells_checked = len(locks.locked)

    for sid, requests in locks.requests.items():
        for d, wanted in requests.items():
            actual = grid.value_of(sid, d)
            if actual == wanted or locks.from_carry_over(sid, d):
                continue
            if _derived_from_requested_night(requests, d, actual):
                continue
            report.violations.append(
                Violation(
                    constraint_id="request_unfulfilled",
                    message=(
                        f"Staff {sid}, day {d + 1}: requested {wanted.symbol}, "
                        f"scheduled {actual.symbol or 'empty'}"
                    ),
                    staff_id=sid,
                    day=d + 1,
                )
            )


def build_report(
    grid: ShiftGrid,
    locks: LockTable,
    shift_input: ScheduleInput,
    before: Mapping[Cell, Shift] | None = None,
) -> ValidationReport:
    """Check a schedule against every hard rule and the submitted requests.

    ``before`` is the locked-cell snapshot taken when generation started;
    without it the locked cells are compared with the values they were
    locked to.
    """
    report = ValidationReport()
    _check_days(grid, report)
    _check_staff(grid, locks, shift_input, report)
    _check_chains(grid, locks, report)
    _check_locks(grid, locks, before, report)
    for sid, counted, quota in locks.request_overages(shift_input):
        report.violations.append(
            Violation(
                constraint_id="request_quota",
                message=f"Staff {sid}: {counted} requests, quota {quota}",
                severity=ViolationSeverity.WARNING,
                staff_id=sid,
            )
        )
    logger.info(
        "Validation: %d error(s), %d warning(s)", report.error_count, report.warning_count
    )
    return report
