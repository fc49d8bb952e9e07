"""Table and chart frames built from utilization results."""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from utilization.models import EmployeeUtilization
from utilization.statuses import (
    FIELD,
    HOLIDAY,
    OFFICE,
    OVERTIME,
    SICK,
    UNKNOWN,
    VACATION,
    WORK_FROM_HOME,
)


TABLE_COLUMNS = [
    "employee",
    "weekday_utilization",
    "weekend_overtime",
    "field_days",
    "office_days",
    "work_from_home_days",
    "vacation_days",
    "sick_days",
    "holiday_days",
    "overtime_days",
    "unknown_days",
    "is_valid",
    "holiday_warnings",
]

CHART_CATEGORIES = (FIELD, OFFICE, VACATION, OVERTIME, UNKNOWN)
CHART_COLORS = {
    FIELD: "#8884d8",
    OFFICE: "#82ca9d",
    VACATION: "#ffc658",
    OVERTIME: "#ff7300",
    UNKNOWN: "#d3d3d3",
}


def utilization_table(results: Iterable[EmployeeUtilization]) -> pd.DataFrame:
    rows = []
    for r in results:
        rows.append(
            {
                "employee": r.employee.name,
                "weekday_utilization": float(r.weekday_utilization_pct),
                "weekend_overtime": float(r.weekend_utilization_pct),
                "field_days": r.weekdays(FIELD),
                "office_days": r.weekdays(OFFICE),
                "work_from_home_days": r.weekdays(WORK_FROM_HOME),
                "vacation_days": r.weekdays(VACATION),
                "sick_days": r.weekdays(SICK),
                "holiday_days": r.weekdays(HOLIDAY),
                "overtime_days": r.weekends(OVERTIME),
                "unknown_days": r.weekdays(UNKNOWN),
                "is_valid": r.validation.is_valid,
                "holiday_warnings": len(r.holiday_warnings),
            }
        )
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def sort_utilization_table(df: pd.DataFrame, key: str | None, direction: str = "asc") -> pd.DataFrame:
    """Sort the table by one column; unknown keys leave the order untouched."""
    if not key or key not in df.columns:
        return df
    ascending = direction != "desc"
    if key == "employee":
        return df.sort_values(key, ascending=ascending, key=lambda s: s.str.lower(), kind="mergesort").reset_index(drop=True)
    return df.sort_values(key, ascending=ascending, kind="mergesort").reset_index(drop=True)


def category_chart_frame(results: Iterable[EmployeeUtilization]) -> pd.DataFrame:
    """Weekday/weekend totals per chart category summed over employees.

    Categories without their own chart slice are folded into ``unknown``.
    """
    weekdays = {c: 0.0 for c in CHART_CATEGORIES}
    weekends = {c: 0.0 for c in CHART_CATEGORIES}
    for r in results:
        for name, count in r.category_totals.items():
            bucket = name if name in weekdays else UNKNOWN
            weekdays[bucket] += count.weekdays
            weekends[bucket] += count.weekends

    df = pd.DataFrame(
        {
            "category": list(CHART_CATEGORIES),
            "name": [c.capitalize() for c in CHART_CATEGORIES],
            "weekdays": [weekdays[c] for c in CHART_CATEGORIES],
            "weekends": [weekends[c] for c in CHART_CATEGORIES],
            "color": [CHART_COLORS[c] for c in CHART_CATEGORIES],
        }
    )
    df["total"] = df["weekdays"] + df["weekends"]
    return df.loc[~np.isclose(df["total"].to_numpy(dtype=float), 0.0)].reset_index(drop=True)


def results_to_records(results: Iterable[EmployeeUtilization]) -> list[dict]:
    return [r.to_dict() for r in results]
