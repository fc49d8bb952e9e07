from __future__ import annotations

from datetime import date

import pytest

from utilization.models import AnalysisWindow, Employee, EngineConfig, Event


# 2025-03-03 is a Monday; 2025-03-08/09 is a weekend.
MONDAY = date(2025, 3, 3)


@pytest.fixture
def make_event():
    def _make(start: str, end: str | None = None, status: str | None = "office", title: str = "", employee_id=1) -> Event:
        return Event(
            start=f"{start}T09:00:00",
            end=f"{end or start}T17:00:00",
            status_label=status,
            title=title,
            subcalendar_ids=frozenset({employee_id}),
        )

    return _make


@pytest.fixture
def employee() -> Employee:
    return Employee(id=1, name="Alex Rivera")


@pytest.fixture
def week_window() -> AnalysisWindow:
    return AnalysisWindow(start=MONDAY, end=date(2025, 3, 7))


@pytest.fixture
def two_week_window() -> AnalysisWindow:
    return AnalysisWindow(start=MONDAY, end=date(2025, 3, 16))


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(
        excluded_employees=frozenset({"Bill Ahern"}),
        utilization_exempt_employees=frozenset({"Liz Quinn"}),
    )
