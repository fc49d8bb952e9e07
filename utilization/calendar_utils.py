"""Calendar-day enumeration, local-date normalization and date-range presets."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Iterable

import pandas as pd

from utilization.models import AnalysisWindow, Event


DATE_RANGE_PRESETS = {
    "last_7": 7,
    "last_14": 14,
    "last_30": 30,
    "last_60": 60,
    "last_90": 90,
}


class InvalidRangeError(ValueError):
    """Raised when a caller builds a window whose end falls before its start."""


def to_timestamp(value: Any, tz: str | None = None) -> pd.Timestamp:
    """Parse a date-like value, converting aware instants to ``tz`` when given."""
    ts = pd.Timestamp(value)
    if pd.isna(ts):
        raise ValueError(f"Not a date: {value!r}")
    if tz and ts.tzinfo is not None:
        ts = ts.tz_convert(tz)
    return ts


def to_local_date(value: Any, tz: str | None = None) -> date:
    """Strip time-of-day from a date-like value, keeping its local calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_timestamp(value, tz).date()


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def enumerate_days(start: Any, end: Any, tz: str | None = None) -> list[date]:
    """Every local calendar day from ``start`` to ``end`` inclusive.

    An inverted range gives an empty list rather than an error.
    """
    first = to_local_date(start, tz)
    last = to_local_date(end, tz)
    if last < first:
        return []
    return [ts.date() for ts in pd.date_range(start=first, end=last, freq="D")]


def build_window(start: Any, end: Any, tz: str | None = None) -> AnalysisWindow:
    first = to_local_date(start, tz)
    last = to_local_date(end, tz)
    if last < first:
        raise InvalidRangeError(f"End date {last.isoformat()} is before start date {first.isoformat()}.")
    return AnalysisWindow(start=first, end=last)


def _has_time(value: Any) -> bool:
    if isinstance(value, datetime):
        return True
    if isinstance(value, str):
        text = value.strip()
        return "T" in text or " " in text
    return False


def event_span(event: Event, tz: str | None = None) -> tuple[date, date]:
    """First and last local calendar date an event touches.

    An end instant at exactly local midnight closes the previous day.
    """
    start_ts = to_timestamp(event.start, tz)
    end_ts = to_timestamp(event.end, tz)
    first = start_ts.date()
    last = end_ts.date()
    if last > first and end_ts == end_ts.normalize() and _has_time(event.end):
        last = last - timedelta(days=1)
    if last < first:
        last = first
    return first, last


def holiday_dates(
    holiday_events: Iterable[Event],
    window: AnalysisWindow,
    excluded_titles: Iterable[str] = ("holiday party",),
    tz: str | None = None,
) -> set[date]:
    """Dates inside ``window`` covered by a designated holiday."""
    skip = {t.strip().lower() for t in excluded_titles}
    days: set[date] = set()
    for event in holiday_events:
        if (event.title or "").strip().lower() in skip:
            continue
        try:
            first, last = event_span(event, tz)
        except (TypeError, ValueError):
            continue
        for day in enumerate_days(max(first, window.start), min(last, window.end)):
            days.add(day)
    return days


def window_for_preset(
    preset: str,
    today: date | None = None,
    start: Any = None,
    end: Any = None,
) -> AnalysisWindow:
    """Resolve a dashboard date-range preset into a window."""
    today = today or date.today()
    anchor = pd.Timestamp(today)
    if preset in DATE_RANGE_PRESETS:
        return AnalysisWindow(start=today - timedelta(days=DATE_RANGE_PRESETS[preset]), end=today)
    if preset == "year_back":
        return AnalysisWindow(start=(anchor - pd.DateOffset(years=1)).date(), end=today)
    if preset == "year_forward":
        return AnalysisWindow(start=today, end=(anchor + pd.DateOffset(years=1)).date())
    if preset == "current_month":
        month_start = anchor - pd.offsets.MonthBegin(1) if anchor.day != 1 else anchor
        return AnalysisWindow(start=month_start.date(), end=(month_start + pd.offsets.MonthEnd(1)).date())
    if preset == "custom":
        if start is None or end is None:
            raise InvalidRangeError("Custom range needs both a start and an end date.")
        return build_window(start, end)
    raise ValueError(f"Unrecognized date range preset: {preset}")
