"""Reconciliation of category totals and result integrity checks."""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np

from utilization.aggregator import Aggregate
from utilization.models import EmployeeUtilization, ValidationReport


DEFAULT_TOLERANCE = 0.01


def find_unaccounted_dates(agg: Aggregate) -> list[str]:
    """Counted weekdays that no category, holiday warning or suppression claims."""
    accounted = agg.accounted_dates()
    return sorted(d for d in agg.weekday_dates if d not in accounted)


def reconcile(agg: Aggregate, tol: float = DEFAULT_TOLERANCE) -> ValidationReport:
    """Check weekday totals against the post-enrollment weekday count and heal gaps.

    The sum is compared before healing, so a gap in classification still shows
    up as ``is_valid=False``. Unaccounted weekdays are then added to ``unknown``
    unless the employee never accrues unknown days; for those employees the
    suppressed share is reported alongside so the gap can be explained.
    """
    breakdown = {name: float(t.weekdays) for name, t in agg.totals.items()}
    total = float(sum(breakdown.values()))
    expected = float(agg.weekday_total)
    difference = abs(total - expected)

    unaccounted = find_unaccounted_dates(agg)
    if not agg.suppress_unknown:
        for date_str in unaccounted:
            agg.mark_unknown(date_str)

    return ValidationReport(
        is_valid=bool(difference <= float(tol)),
        difference=difference,
        total_weekday_categories=total,
        expected_weekdays=expected,
        category_breakdown=breakdown,
        unaccounted_dates=tuple(unaccounted),
        suppressed_weekdays=float(agg.suppressed_weekdays),
    )


def _finding(check: str, employee: str, max_abs_delta: float, detail: str) -> dict[str, Any]:
    return {
        "Check": check,
        "Employee": employee,
        "Max Abs Delta": float(max_abs_delta),
        "Detail": detail,
    }


def run_integrity_checks(results: Iterable[EmployeeUtilization], tol: float = DEFAULT_TOLERANCE) -> list[dict[str, Any]]:
    """Return integrity findings across results (empty list means all checks passed)."""
    findings: list[dict[str, Any]] = []
    for result in results:
        name = result.employee.name
        weekdays = np.array([c.weekdays for c in result.category_totals.values()], dtype=float)
        weekends = np.array([c.weekends for c in result.category_totals.values()], dtype=float)

        delta = abs(float(weekdays.sum()) - result.validation.expected_weekdays)
        if delta > tol:
            findings.append(_finding("Weekday reconciliation", name, delta, "Sum of weekday categories vs expected weekdays"))

        negative = np.concatenate((weekdays, weekends))
        if negative.size and float(negative.min()) < -tol:
            findings.append(_finding("Non-negative totals", name, abs(float(negative.min())), "A category total is negative"))

        overflow = float(weekends.sum()) - float(result.weekend_total)
        if overflow > tol:
            findings.append(_finding("Weekend bound", name, overflow, "Weekend categories exceed counted weekend days"))

        if result.validation.unaccounted_dates:
            findings.append(
                _finding(
                    "Unaccounted dates",
                    name,
                    len(result.validation.unaccounted_dates),
                    ", ".join(result.validation.unaccounted_dates),
                )
            )
    return findings
