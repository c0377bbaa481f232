"""DataFrame views of a schedule and its report for spreadsheet and UI collaborators."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from hcu_shift.core.month import WEEKDAY_LABELS
from hcu_shift.models.schedule import ScheduleResult
from hcu_shift.models.shift import Shift
from hcu_shift.models.staff import StaffMember
from hcu_shift.models.validation import ValidationReport


def schedule_frame(result: ScheduleResult, roster: Sequence[StaffMember]) -> pd.DataFrame:
    """One row per staff member: a column per day holding the symbol, then totals."""
    names = {m.id: m.name for m in roster}
    data: list[dict[str, str | int]] = []
    for sid in result.staff_ids:
        row = result.shifts[sid]
        row_data: dict[str, str | int] = {"職員名": names.get(sid, str(sid))}
        for d, shift in enumerate(row):
            row_data[str(d + 1)] = shift.symbol
        row_data["夜勤"] = sum(1 for s in row if s == Shift.NIGHT)
        row_data["日勤"] = sum(1 for s in row if s == Shift.DAY)
        row_data["休日"] = sum(1 for s in row if s.is_rest)
        data.append(row_data)
    return pd.DataFrame(data).set_index("職員名")


def staffing_frame(report: ValidationReport, year: int | None = None, month: int | None = None) -> pd.DataFrame:
    """Per-day headcounts against requirements, days as columns."""
    staffing: dict[str, list] = {
        "日": [],
        "夜勤人数": [],
        "夜勤必要": [],
        "日勤人数": [],
        "日勤必要": [],
        "日勤上限": [],
    }
    for day in report.days:
        staffing["日"].append(day.day)
        staffing["夜勤人数"].append(day.night_count)
        staffing["夜勤必要"].append(day.night_required)
        staffing["日勤人数"].append(day.day_count)
        staffing["日勤必要"].append(day.day_required)
        staffing["日勤上限"].append(day.day_maximum)
    if year is not None and month is not None:
        staffing["曜日"] = [
            WEEKDAY_LABELS[pd.Timestamp(year=year, month=month, day=d).weekday()]
            for d in staffing["日"]
        ]
    return pd.DataFrame(staffing).set_index("日").T


def staff_frame(report: ValidationReport) -> pd.DataFrame:
    """Per-staff totals against personal caps."""
    if not report.staff:
        return pd.DataFrame()
    df = pd.DataFrame([s.model_dump() for s in report.staff]).set_index("staff_id")
    df["violations"] = [
        sum(1 for v in report.violations if v.staff_id == sid) for sid in df.index
    ]
    return df
