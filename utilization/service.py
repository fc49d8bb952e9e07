"""Fetch calendar data, run the engine and record runtime diagnostics."""

from __future__ import annotations

from typing import Iterable, Protocol

from utilization.config import default_engine_config
from utilization.engine import compute_utilization
from utilization.models import AnalysisWindow, Employee, EmployeeUtilization, EngineConfig, Event
from utilization.runtime_logging import append_runtime_event
from utilization.teamup_client import TeamupAPIError


class CalendarSource(Protocol):
    def fetch_subcalendars(self) -> list[Employee]: ...

    def fetch_events(self, window: AnalysisWindow, subcalendar_ids: Iterable[int | str] | None = None) -> list[Event]: ...


def split_holiday_events(
    events: Iterable[Event], holiday_calendar_ids: set[int | str]
) -> tuple[list[Event], list[Event]]:
    """Separate events posted to a holiday subcalendar from everything else."""
    work: list[Event] = []
    holidays: list[Event] = []
    for event in events:
        if event.subcalendar_ids & holiday_calendar_ids:
            holidays.append(event)
        else:
            work.append(event)
    return work, holidays


def load_utilization(
    client: CalendarSource,
    window: AnalysisWindow,
    config: EngineConfig | None = None,
    employee_ids: Iterable[int | str] | None = None,
) -> list[EmployeeUtilization]:
    """Fetch one window of calendar data and compute per-employee utilization.

    Without ``config`` the organisation defaults from ``config.DEFAULTS`` apply.
    Fetch failures are logged and re-raised; engine output problems are logged
    as warnings and returned with the results.
    """
    config = config or default_engine_config()
    try:
        subcalendars = client.fetch_subcalendars()
        events = client.fetch_events(window)
    except TeamupAPIError as exc:
        append_runtime_event(
            "ERROR",
            "utilization_fetch_failed",
            str(exc),
            {"start": window.start.isoformat(), "end": window.end.isoformat(), "status_code": exc.status_code},
            exc=exc,
        )
        raise

    holiday_ids = {s.id for s in subcalendars if s.name in config.holiday_calendars}
    work_events, holiday_events = split_holiday_events(events, holiday_ids)

    employees = [s for s in subcalendars if not config.is_excluded(s)]
    if employee_ids is not None:
        selected = set(employee_ids)
        employees = [e for e in employees if e.id in selected]

    results = compute_utilization(work_events, holiday_events, employees, window, config)

    for result in results:
        if not result.validation.is_valid or result.validation.unaccounted_dates:
            append_runtime_event(
                "WARNING",
                "utilization_validation_failed",
                f"Category totals for {result.employee.name} do not reconcile.",
                {
                    "employee_id": result.employee.id,
                    "difference": result.validation.difference,
                    "unaccounted_dates": result.validation.unaccounted_dates,
                },
            )
    append_runtime_event(
        "INFO",
        "utilization_computed",
        f"Computed utilization for {len(results)} employees.",
        {
            "start": window.start.isoformat(),
            "end": window.end.isoformat(),
            "events": len(work_events),
            "holiday_events": len(holiday_events),
            "holiday_warnings": sum(len(r.holiday_warnings) for r in results),
        },
    )
    return results
