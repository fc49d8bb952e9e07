"""Per-employee day classification pipeline and its public entry point."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from utilization.aggregator import aggregate_days
from utilization.calendar_utils import enumerate_days, holiday_dates, to_local_date
from utilization.day_classifier import classify_days
from utilization.event_mapper import events_for_employee, map_events_to_days
from utilization.metrics import summarize_utilization
from utilization.models import AnalysisWindow, Employee, EmployeeUtilization, EngineConfig, Event
from utilization.validator import reconcile


def _enrollment_date(employee: Employee, tz: str | None) -> date | None:
    if employee.enrollment_date is None:
        return None
    try:
        return to_local_date(employee.enrollment_date, tz)
    except (TypeError, ValueError):
        return None


def calculate_employee_utilization(
    employee: Employee,
    events: Iterable[Event],
    window: AnalysisWindow,
    holidays: set[date] | frozenset[date] = frozenset(),
    config: EngineConfig | None = None,
) -> EmployeeUtilization:
    """Classify every day of ``window`` for one employee and summarize it."""
    config = config or EngineConfig()
    tz = config.local_timezone
    exempt = config.is_exempt(employee)

    days = enumerate_days(window.start, window.end)
    day_map = map_events_to_days(
        events_for_employee(events, employee.id),
        window,
        ignored_keywords=config.ignored_title_keywords,
        synonyms=config.synonym_table,
        tz=tz,
    )
    classifications = classify_days(
        days,
        day_map.days,
        holidays,
        enrollment_date=_enrollment_date(employee, tz),
        suppress_unknown=exempt,
    )

    agg = aggregate_days(classifications, suppress_unknown=exempt)
    validation = reconcile(agg, config.validation_tolerance)
    totals = agg.category_totals()
    summary = summarize_utilization(totals, agg.weekday_total, agg.weekend_total, exempt)

    return EmployeeUtilization(
        employee=employee,
        is_utilization_exempt=exempt,
        total_days=len(days),
        weekday_total=agg.weekday_total,
        weekend_total=agg.weekend_total,
        category_totals=totals,
        category_dates=agg.category_dates(),
        unknown_dates=agg.unknown_dates(),
        validation=validation,
        holiday_warnings=tuple(agg.holiday_warnings),
        overlap_dates=tuple(day_map.overlap_dates()),
        suppressed_dates=tuple(sorted(agg.suppressed_dates)),
        weekday_utilized=summary.weekday_utilized,
        weekday_utilization_pct=summary.weekday_pct,
        weekend_utilized=summary.weekend_utilized,
        weekend_utilization_pct=summary.weekend_pct,
        total_utilized=summary.total_utilized,
        utilization_pct=summary.utilization_pct,
        skipped_events=day_map.skipped_events,
    )


def compute_utilization(
    events: Iterable[Event],
    holiday_events: Iterable[Event],
    employees: Iterable[Employee],
    window: AnalysisWindow,
    config: EngineConfig | None = None,
) -> list[EmployeeUtilization]:
    """Return one utilization record per employee that is not excluded.

    Pure over its inputs: no I/O, no state kept between calls.
    """
    config = config or EngineConfig()
    event_list = list(events)
    holidays = frozenset(
        holiday_dates(holiday_events, window, config.excluded_holiday_titles, config.local_timezone)
    )
    return [
        calculate_employee_utilization(employee, event_list, window, holidays, config)
        for employee in employees
        if not config.is_excluded(employee)
    ]
