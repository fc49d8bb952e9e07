"""Value types shared by the utilization engine and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from utilization.statuses import STATUS_SYNONYMS


@dataclass(frozen=True)
class Event:
    """One calendar event as supplied by the scheduling API."""

    start: datetime | date | str
    end: datetime | date | str
    status_label: str | None = None
    title: str = ""
    subcalendar_ids: frozenset[int | str] = frozenset()
    event_id: str | None = None


@dataclass(frozen=True)
class Employee:
    id: int | str
    name: str
    enrollment_date: date | None = None


@dataclass(frozen=True)
class AnalysisWindow:
    """Inclusive range of local calendar dates."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class CalendarDay:
    """A single day as seen by the classifier."""

    date: date
    is_weekend: bool
    is_holiday: bool = False
    is_before_enrollment: bool = False
    statuses: tuple[str, ...] = ()
    titles: tuple[str, ...] = ()

    @property
    def date_str(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class CategoryCount:
    weekdays: float = 0.0
    weekends: float = 0.0

    @property
    def total(self) -> float:
        return self.weekdays + self.weekends


@dataclass(frozen=True)
class HolidayWarning:
    """A working status other than field/office recorded on a weekday holiday."""

    date: str
    statuses: tuple[str, ...]


@dataclass(frozen=True)
class ValidationReport:
    is_valid: bool
    difference: float
    total_weekday_categories: float
    expected_weekdays: float
    category_breakdown: dict[str, float] = field(default_factory=dict)
    unaccounted_dates: tuple[str, ...] = ()
    suppressed_weekdays: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "difference": self.difference,
            "total_weekday_categories": self.total_weekday_categories,
            "expected_weekdays": self.expected_weekdays,
            "category_breakdown": dict(self.category_breakdown),
            "unaccounted_dates": list(self.unaccounted_dates),
            "suppressed_weekdays": self.suppressed_weekdays,
        }


@dataclass(frozen=True)
class EngineConfig:
    """Static configuration handed to the engine on every call."""

    excluded_employees: frozenset[str] = frozenset()
    utilization_exempt_employees: frozenset[str] = frozenset()
    non_employee_calendars: frozenset[str] = frozenset({"Future Work", "Holidays"})
    holiday_calendars: frozenset[str] = frozenset({"Holidays"})
    excluded_holiday_titles: frozenset[str] = frozenset({"holiday party"})
    ignored_title_keywords: tuple[str, ...] = ("tech on call",)
    status_synonyms: tuple[tuple[str, str], ...] = tuple(sorted(STATUS_SYNONYMS.items()))
    validation_tolerance: float = 0.01
    local_timezone: str | None = None

    @property
    def synonym_table(self) -> dict[str, str]:
        return dict(self.status_synonyms)

    def is_excluded(self, employee: Employee) -> bool:
        return employee.name in self.excluded_employees or employee.name in self.non_employee_calendars

    def is_exempt(self, employee: Employee) -> bool:
        return employee.name in self.utilization_exempt_employees


@dataclass(frozen=True)
class EmployeeUtilization:
    """Per-employee result of one analysis window."""

    employee: Employee
    is_utilization_exempt: bool
    total_days: int
    weekday_total: int
    weekend_total: int
    category_totals: dict[str, CategoryCount]
    category_dates: dict[str, tuple[str, ...]]
    unknown_dates: tuple[str, ...]
    validation: ValidationReport
    holiday_warnings: tuple[HolidayWarning, ...]
    overlap_dates: tuple[str, ...]
    suppressed_dates: tuple[str, ...]
    weekday_utilized: float
    weekday_utilization_pct: str
    weekend_utilized: float
    weekend_utilization_pct: str
    total_utilized: float
    utilization_pct: str
    skipped_events: int = 0

    def weekdays(self, category: str) -> float:
        count = self.category_totals.get(category)
        return count.weekdays if count else 0.0

    def weekends(self, category: str) -> float:
        count = self.category_totals.get(category)
        return count.weekends if count else 0.0

    def to_dict(self) -> dict[str, Any]:
        enrolled = self.employee.enrollment_date
        return {
            "employee": {
                "id": self.employee.id,
                "name": self.employee.name,
                "enrollment_date": enrolled.isoformat() if enrolled else None,
            },
            "is_utilization_exempt": self.is_utilization_exempt,
            "total_days": self.total_days,
            "weekday_total": self.weekday_total,
            "weekend_total": self.weekend_total,
            "categories": {
                name: {"weekdays": count.weekdays, "weekends": count.weekends}
                for name, count in self.category_totals.items()
            },
            "category_dates": {name: list(dates) for name, dates in self.category_dates.items()},
            "unknown_dates": list(self.unknown_dates),
            "validation": self.validation.to_dict(),
            "holiday_warnings": [{"date": w.date, "statuses": list(w.statuses)} for w in self.holiday_warnings],
            "overlap_dates": list(self.overlap_dates),
            "suppressed_dates": list(self.suppressed_dates),
            "weekday_utilized": self.weekday_utilized,
            "weekday_utilization_pct": self.weekday_utilization_pct,
            "weekend_utilized": self.weekend_utilized,
            "weekend_utilization_pct": self.weekend_utilization_pct,
            "total_utilized": self.total_utilized,
            "utilization_pct": self.utilization_pct,
            "skipped_events": self.skipped_events,
        }
