"""Expand events into the calendar days they cover and group them per day."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from utilization.calendar_utils import enumerate_days, event_span
from utilization.models import AnalysisWindow, Event
from utilization.statuses import normalize_status


@dataclass
class DayEvents:
    """Statuses and titles contributed to one day by an employee's events."""

    statuses: list[str] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)
    event_count: int = 0

    def add(self, status: str, title: str) -> None:
        self.event_count += 1
        if status not in self.statuses:
            self.statuses.append(status)
        if title and title not in self.titles:
            self.titles.append(title)

    @property
    def has_overlap(self) -> bool:
        return self.event_count > 1


@dataclass
class DayMap:
    days: dict[date, DayEvents] = field(default_factory=dict)
    skipped_events: int = 0

    def overlap_dates(self) -> list[str]:
        return sorted(d.isoformat() for d, entry in self.days.items() if entry.has_overlap)


def is_ignored_event(event: Event, ignored_keywords: Iterable[str]) -> bool:
    title = (event.title or "").lower()
    return any(keyword.lower() in title for keyword in ignored_keywords if keyword)


def events_for_employee(events: Iterable[Event], employee_id: int | str) -> list[Event]:
    return [e for e in events if employee_id in e.subcalendar_ids]


def event_days(event: Event, window: AnalysisWindow, tz: str | None = None) -> list[date]:
    """Days of ``event`` that fall inside ``window``."""
    first, last = event_span(event, tz)
    return enumerate_days(max(first, window.start), min(last, window.end))


def map_events_to_days(
    events: Iterable[Event],
    window: AnalysisWindow,
    ignored_keywords: Iterable[str] = ("tech on call",),
    synonyms: Mapping[str, str] | None = None,
    tz: str | None = None,
) -> DayMap:
    """Group an employee's events by local calendar day.

    Events whose title matches an ignored keyword never contribute. An event
    with unparseable timestamps is dropped and counted in ``skipped_events``.
    """
    ignored = tuple(ignored_keywords)
    day_map = DayMap()
    for event in events:
        if is_ignored_event(event, ignored):
            continue
        try:
            days = event_days(event, window, tz)
        except (TypeError, ValueError):
            day_map.skipped_events += 1
            continue
        status = normalize_status(event.status_label, synonyms)
        for day in days:
            day_map.days.setdefault(day, DayEvents()).add(status, event.title or "")
    return day_map
