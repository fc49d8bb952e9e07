"""Resolve each calendar day of an employee into category allocations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from utilization.calendar_utils import is_weekend
from utilization.event_mapper import DayEvents
from utilization.models import CalendarDay, HolidayWarning
from utilization.statuses import HOLIDAY, OVERTIME, UNKNOWN, VACATION, WORKING_CATEGORIES


BEFORE_ENROLLMENT = "before_enrollment"
WEEKEND_IDLE = "weekend_idle"
WEEKEND_VACATION = "weekend_vacation"
WEEKEND_OVERTIME = "weekend_overtime"
HOLIDAY_VACATION = "holiday_vacation"
HOLIDAY_WORKED = "holiday_worked"
HOLIDAY_WARNING = "holiday_warning"
HOLIDAY_OFF = "holiday_off"
WEEKDAY_STATUSES = "weekday_statuses"
WEEKDAY_UNKNOWN = "weekday_unknown"


@dataclass(frozen=True)
class DayClassification:
    """Outcome of the decision table for one day.

    ``allocations`` are fractions of the day on the weekday or weekend side
    given by ``day.is_weekend``. ``suppressed`` is the weekday share that would
    have gone to ``unknown`` for an employee who never accrues unknown days.
    """

    day: CalendarDay
    rule: str
    allocations: tuple[tuple[str, float], ...] = ()
    holiday_warning: HolidayWarning | None = None
    suppressed: float = 0.0

    @property
    def counted(self) -> bool:
        return self.rule != BEFORE_ENROLLMENT

    @property
    def is_unknown(self) -> bool:
        return any(category == UNKNOWN for category, _ in self.allocations)


def build_calendar_day(
    day: date,
    entry: DayEvents | None,
    holidays: set[date] | frozenset[date],
    enrollment_date: date | None = None,
) -> CalendarDay:
    return CalendarDay(
        date=day,
        is_weekend=is_weekend(day),
        is_holiday=day in holidays,
        is_before_enrollment=enrollment_date is not None and day < enrollment_date,
        statuses=tuple(entry.statuses) if entry else (),
        titles=tuple(entry.titles) if entry else (),
    )


def _weekend(day: CalendarDay) -> DayClassification:
    if not day.statuses:
        return DayClassification(day, WEEKEND_IDLE)
    if VACATION in day.statuses:
        return DayClassification(day, WEEKEND_VACATION, ((VACATION, 1.0 / len(day.statuses)),))
    return DayClassification(day, WEEKEND_OVERTIME, ((OVERTIME, 1.0),))


def _weekday_holiday(day: CalendarDay) -> DayClassification:
    statuses = set(day.statuses)
    if not statuses:
        return DayClassification(day, HOLIDAY_OFF, ((HOLIDAY, 1.0),))
    if VACATION in statuses:
        return DayClassification(day, HOLIDAY_VACATION, ((HOLIDAY, 1.0),))
    if statuses & WORKING_CATEGORIES:
        return DayClassification(day, HOLIDAY_WORKED, ((OVERTIME, 1.0),))
    warning = HolidayWarning(date=day.date_str, statuses=day.statuses)
    return DayClassification(day, HOLIDAY_WARNING, ((UNKNOWN, 1.0),), holiday_warning=warning)


def _weekday(day: CalendarDay) -> DayClassification:
    if not day.statuses:
        return DayClassification(day, WEEKDAY_UNKNOWN, ((UNKNOWN, 1.0),))
    fraction = 1.0 / len(day.statuses)
    return DayClassification(day, WEEKDAY_STATUSES, tuple((status, fraction) for status in day.statuses))


def classify_day(day: CalendarDay, suppress_unknown: bool = False) -> DayClassification:
    """Apply the category-resolution policy to a single day.

    Weekends ignore holidays entirely; weekday holidays take priority over
    ordinary status splitting.
    """
    if day.is_before_enrollment:
        return DayClassification(day, BEFORE_ENROLLMENT)

    if day.is_weekend:
        result = _weekend(day)
    elif day.is_holiday:
        result = _weekday_holiday(day)
    else:
        result = _weekday(day)

    if suppress_unknown and not day.is_weekend and result.is_unknown:
        kept = tuple((c, f) for c, f in result.allocations if c != UNKNOWN)
        suppressed = sum(f for c, f in result.allocations if c == UNKNOWN)
        return DayClassification(day, result.rule, kept, result.holiday_warning, suppressed)
    return result


def classify_days(
    days: Iterable[date],
    day_events: dict[date, DayEvents],
    holidays: set[date] | frozenset[date],
    enrollment_date: date | None = None,
    suppress_unknown: bool = False,
) -> list[DayClassification]:
    return [
        classify_day(build_calendar_day(d, day_events.get(d), holidays, enrollment_date), suppress_unknown)
        for d in days
    ]
