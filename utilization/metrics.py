"""Utilization percentages for employees and the team."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

import numpy as np

from utilization.models import CategoryCount, EmployeeUtilization
from utilization.statuses import FIELD, OFFICE, OVERTIME, UNKNOWN, WORK_FROM_HOME


@dataclass(frozen=True)
class UtilizationSummary:
    weekday_utilized: float
    weekday_pct: str
    weekend_utilized: float
    weekend_pct: str
    total_utilized: float
    utilization_pct: str


def _safe_div(a: float, b: float) -> float:
    return float(a / b) if b else 0.0


def format_pct(utilized: float, total: float) -> str:
    """Percentage to one decimal place, ``"0.0"`` when there is nothing to divide by."""
    if not total:
        return "0.0"
    return f"{_safe_div(utilized, total) * 100:.1f}"


def _weekdays(totals: Mapping[str, CategoryCount], category: str) -> float:
    count = totals.get(category)
    return float(count.weekdays) if count else 0.0


def summarize_utilization(
    totals: Mapping[str, CategoryCount],
    weekday_total: int,
    weekend_total: int,
    exempt: bool = False,
) -> UtilizationSummary:
    if exempt:
        weekday_utilized = _weekdays(totals, WORK_FROM_HOME)
        weekend_utilized = 0.0
    else:
        weekday_utilized = _weekdays(totals, FIELD) + _weekdays(totals, OFFICE) + _weekdays(totals, WORK_FROM_HOME)
        overtime = totals.get(OVERTIME)
        weekend_utilized = float(overtime.weekends) if overtime else 0.0

    total_utilized = weekday_utilized + weekend_utilized
    return UtilizationSummary(
        weekday_utilized=weekday_utilized,
        weekday_pct=format_pct(weekday_utilized, weekday_total),
        weekend_utilized=weekend_utilized,
        weekend_pct=format_pct(weekend_utilized, weekend_total),
        total_utilized=total_utilized,
        utilization_pct=format_pct(total_utilized, weekday_total + weekend_total),
    )


def team_summary(results: Iterable[EmployeeUtilization]) -> dict:
    rows = list(results)
    weekday_pcts = np.array([float(r.weekday_utilization_pct) for r in rows], dtype=float)
    weekend_pcts = np.array([float(r.weekend_utilization_pct) for r in rows], dtype=float)
    return {
        "employees": len(rows),
        "mean_weekday_utilization": float(weekday_pcts.mean()) if rows else 0.0,
        "mean_weekend_utilization": float(weekend_pcts.mean()) if rows else 0.0,
        "unknown_weekdays": float(sum(r.weekdays(UNKNOWN) for r in rows)),
        "invalid_results": int(sum(1 for r in rows if not r.validation.is_valid)),
        "holiday_warnings": int(sum(len(r.holiday_warnings) for r in rows)),
    }
