"""Accumulate day classifications into category totals and date lists."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from utilization.day_classifier import DayClassification
from utilization.models import CategoryCount, HolidayWarning
from utilization.statuses import CANONICAL_CATEGORIES, UNKNOWN


@dataclass
class _Tally:
    weekdays: float = 0.0
    weekends: float = 0.0


@dataclass
class Aggregate:
    """Mutable working totals for one employee; frozen into the result later."""

    suppress_unknown: bool = False
    totals: dict[str, _Tally] = field(default_factory=lambda: {c: _Tally() for c in CANONICAL_CATEGORIES})
    dates: dict[str, set[str]] = field(default_factory=lambda: defaultdict(set))
    weekday_dates: list[str] = field(default_factory=list)
    weekday_total: int = 0
    weekend_total: int = 0
    holiday_warnings: list[HolidayWarning] = field(default_factory=list)
    suppressed_dates: set[str] = field(default_factory=set)
    suppressed_weekdays: float = 0.0

    def _tally(self, category: str) -> _Tally:
        if category not in self.totals:
            self.totals[category] = _Tally()
        return self.totals[category]

    def add(self, category: str, date_str: str, amount: float, weekend: bool = False) -> None:
        tally = self._tally(category)
        if weekend:
            tally.weekends += amount
        else:
            tally.weekdays += amount
        self.dates[category].add(date_str)

    def mark_unknown(self, date_str: str) -> None:
        if date_str not in self.dates[UNKNOWN]:
            self.add(UNKNOWN, date_str, 1.0)

    def clear_unknown(self, date_str: str) -> None:
        if date_str in self.dates[UNKNOWN]:
            self.dates[UNKNOWN].discard(date_str)
            tally = self.totals[UNKNOWN]
            tally.weekdays = max(0.0, tally.weekdays - 1.0)

    def category_totals(self) -> dict[str, CategoryCount]:
        return {name: CategoryCount(weekdays=t.weekdays, weekends=t.weekends) for name, t in self.totals.items()}

    def category_dates(self) -> dict[str, tuple[str, ...]]:
        return {name: tuple(sorted(self.dates.get(name, ()))) for name in self.totals}

    def unknown_dates(self) -> tuple[str, ...]:
        return tuple(sorted(self.dates.get(UNKNOWN, ())))

    def accounted_dates(self) -> set[str]:
        accounted: set[str] = set()
        for dates in self.dates.values():
            accounted |= dates
        accounted |= {w.date for w in self.holiday_warnings}
        return accounted | self.suppressed_dates


def aggregate_days(classifications: Iterable[DayClassification], suppress_unknown: bool = False) -> Aggregate:
    """Fold per-day results into category totals.

    Every counted weekday starts out as ``unknown`` and leaves that bucket as
    soon as a real category claims part of it.
    """
    agg = Aggregate(suppress_unknown=suppress_unknown)
    for result in classifications:
        if not result.counted:
            continue
        day = result.day
        date_str = day.date_str

        if day.is_weekend:
            agg.weekend_total += 1
            for category, amount in result.allocations:
                agg.add(category, date_str, amount, weekend=True)
            continue

        agg.weekday_total += 1
        agg.weekday_dates.append(date_str)
        if not suppress_unknown:
            agg.mark_unknown(date_str)

        if result.holiday_warning is not None:
            agg.holiday_warnings.append(result.holiday_warning)
        if result.suppressed:
            agg.suppressed_dates.add(date_str)
            agg.suppressed_weekdays += result.suppressed

        if any(category != UNKNOWN for category, _ in result.allocations):
            agg.clear_unknown(date_str)
            for category, amount in result.allocations:
                agg.add(category, date_str, amount)
    return agg
