from __future__ import annotations

import json
from datetime import date, datetime, timedelta

import pytest

from utilization.engine import calculate_employee_utilization, compute_utilization
from utilization.models import AnalysisWindow, Employee, EngineConfig, Event


def _holiday(day: str, title: str = "Company Holiday") -> Event:
    return Event(start=f"{day}T00:00:00", end=f"{day}T23:59:00", title=title, subcalendar_ids=frozenset({99}))


def test_office_days_and_unknown_days(make_event, employee, week_window):
    events = [make_event(f"2025-03-0{d}", status="office") for d in (3, 4, 5)]
    [result] = compute_utilization(events, [], [employee], week_window)

    assert result.weekdays("office") == pytest.approx(3.0)
    assert result.weekdays("unknown") == pytest.approx(2.0)
    assert result.unknown_dates == ("2025-03-06", "2025-03-07")
    assert result.validation.is_valid
    assert result.weekday_total == 5
    assert result.weekend_total == 0


def test_fractional_days_reconcile(make_event, employee, two_week_window):
    events = [
        make_event("2025-03-03", status="field"),
        make_event("2025-03-03", status="office"),
        make_event("2025-03-03", status="wfh"),
        make_event("2025-03-04", status="sick"),
        make_event("2025-03-04", status="training"),
        make_event("2025-03-05", "2025-03-07", status="vacation"),
    ]
    [result] = compute_utilization(events, [], [employee], two_week_window)

    total = sum(c.weekdays for c in result.category_totals.values())
    assert total == pytest.approx(result.weekday_total)
    assert result.weekday_total == 10
    assert result.weekdays("field") == pytest.approx(1 / 3)
    assert result.weekdays("training") == pytest.approx(0.5)
    assert result.weekdays("vacation") == pytest.approx(3.0)
    assert result.validation.is_valid
    assert result.validation.unaccounted_dates == ()


def test_every_weekday_lands_in_a_category(make_event, employee, two_week_window):
    events = [make_event("2025-03-04", status="field"), make_event("2025-03-11", status="office")]
    [result] = compute_utilization(events, [], [employee], two_week_window)

    claimed = set()
    for dates in result.category_dates.values():
        claimed |= set(dates)
    d = two_week_window.start
    while d <= two_week_window.end:
        if d.weekday() < 5:
            assert d.isoformat() in claimed
        d += timedelta(days=1)


def test_idempotent_output(make_event, employee, two_week_window):
    events = [make_event("2025-03-03", status="field"), make_event("2025-03-08", status="vacation")]
    first = compute_utilization(events, [_holiday("2025-03-10")], [employee], two_week_window)
    second = compute_utilization(events, [_holiday("2025-03-10")], [employee], two_week_window)
    assert json.dumps([r.to_dict() for r in first]) == json.dumps([r.to_dict() for r in second])


def test_weekend_field_is_single_overtime_day(make_event, employee, two_week_window):
    events = [
        make_event("2025-03-08", status="field"),
        make_event("2025-03-08", status="office"),
        make_event("2025-03-08", status="sick"),
    ]
    [result] = compute_utilization(events, [], [employee], two_week_window)
    assert result.weekends("overtime") == 1.0
    assert result.weekends("field") == 0.0
    assert result.weekends("office") == 0.0
    assert result.category_dates["overtime"] == ("2025-03-08",)
    assert result.weekend_total == 4
    assert result.weekend_utilization_pct == "25.0"


def test_weekend_vacation_on_holiday_counts_as_weekend_vacation(make_event, employee, two_week_window):
    events = [make_event("2025-03-08", status="vacation")]
    [result] = compute_utilization(events, [_holiday("2025-03-08")], [employee], two_week_window)
    assert result.weekends("vacation") == 1.0
    assert result.weekdays("holiday") == 0.0
    assert result.holiday_warnings == ()


def test_holiday_with_non_working_status_raises_warning(make_event, employee, week_window):
    events = [make_event("2025-03-05", status="social", title="Team Lunch")]
    [result] = compute_utilization(events, [_holiday("2025-03-05")], [employee], week_window)

    assert result.weekdays("holiday") == 0.0
    assert len(result.holiday_warnings) == 1
    assert result.holiday_warnings[0].date == "2025-03-05"
    assert result.holiday_warnings[0].statuses == ("social",)
    assert "2025-03-05" in result.unknown_dates
    assert result.validation.is_valid


def test_holiday_outcomes(make_event, employee, week_window):
    events = [
        make_event("2025-03-04", status="vacation"),
        make_event("2025-03-05", status="field"),
    ]
    holidays = [_holiday("2025-03-03"), _holiday("2025-03-04"), _holiday("2025-03-05")]
    [result] = compute_utilization(events, holidays, [employee], week_window)

    assert result.weekdays("holiday") == 2.0
    assert result.weekdays("vacation") == 0.0
    assert result.weekdays("overtime") == 1.0
    assert result.category_dates["holiday"] == ("2025-03-03", "2025-03-04")


def test_holiday_party_is_not_a_holiday(make_event, employee, week_window):
    [result] = compute_utilization([], [_holiday("2025-03-03", "Holiday Party")], [employee], week_window)
    assert result.weekdays("holiday") == 0.0
    assert result.weekdays("unknown") == 5.0


def test_days_before_enrollment_are_excluded(make_event, two_week_window):
    employee = Employee(id=1, name="New Hire", enrollment_date=date(2025, 3, 6))
    [result] = compute_utilization([make_event("2025-03-03", status="field")], [], [employee], two_week_window)

    assert result.weekday_total == 7
    assert result.weekdays("field") == 0.0
    for dates in result.category_dates.values():
        assert not {"2025-03-03", "2025-03-04", "2025-03-05"} & set(dates)
    assert result.validation.is_valid


def test_enrollment_datetime_is_normalized(two_week_window):
    employee = Employee(id=1, name="New Hire", enrollment_date=datetime(2025, 3, 6, 15, 45))
    [result] = compute_utilization([], [], [employee], two_week_window)
    assert result.weekday_total == 7


def test_exempt_employee_never_accrues_unknown(make_event, config, week_window):
    exempt = Employee(id=1, name="Liz Quinn")
    events = [make_event("2025-03-03", status="wfh"), make_event("2025-03-04", status="office")]
    [result] = compute_utilization(events, [], [exempt], week_window, config)

    assert result.is_utilization_exempt
    assert result.weekdays("unknown") == 0.0
    assert result.unknown_dates == ()
    assert result.suppressed_dates == ("2025-03-05", "2025-03-06", "2025-03-07")
    assert result.weekday_utilized == 1.0
    assert result.weekday_utilization_pct == "20.0"
    assert result.weekend_utilized == 0.0
    assert result.validation.unaccounted_dates == ()


def test_exempt_employee_is_validated_against_all_weekdays(make_event, config, week_window):
    exempt = Employee(id=1, name="Liz Quinn")
    [result] = compute_utilization([make_event("2025-03-05", status="wfh")], [], [exempt], week_window, config)

    assert result.weekday_total == 5
    assert result.validation.expected_weekdays == result.weekday_total
    assert result.validation.total_weekday_categories == 1.0
    assert result.validation.difference == 4.0
    assert result.validation.suppressed_weekdays == 4.0
    assert not result.validation.is_valid
    assert len(result.suppressed_dates) == 4


def test_excluded_and_non_employee_calendars_are_dropped(config, week_window):
    employees = [Employee(1, "Alex Rivera"), Employee(2, "Bill Ahern"), Employee(3, "Holidays")]
    results = compute_utilization([], [], employees, week_window, config)
    assert [r.employee.name for r in results] == ["Alex Rivera"]


def test_tech_on_call_event_leaves_day_unknown(make_event, employee, week_window):
    events = [make_event("2025-03-03", status="field", title="Tech on call")]
    [result] = compute_utilization(events, [], [employee], week_window)
    assert result.weekdays("field") == 0.0
    assert result.weekdays("unknown") == 5.0


def test_empty_and_inverted_windows_never_raise(employee):
    [empty] = compute_utilization([], [], [employee], AnalysisWindow(date(2025, 3, 8), date(2025, 3, 9)))
    assert empty.weekday_total == 0
    assert empty.weekend_total == 2
    assert empty.weekday_utilization_pct == "0.0"
    assert empty.validation.is_valid

    [inverted] = compute_utilization([], [], [employee], AnalysisWindow(date(2025, 3, 9), date(2025, 3, 3)))
    assert inverted.total_days == 0
    assert inverted.validation.is_valid


def test_timezone_conversion_changes_event_day(employee, week_window):
    late = Event(
        start="2025-03-05T02:00:00+00:00",
        end="2025-03-05T03:00:00+00:00",
        status_label="field",
        subcalendar_ids=frozenset({1}),
    )
    [as_supplied] = compute_utilization([late], [], [employee], week_window)
    assert as_supplied.category_dates["field"] == ("2025-03-05",)

    eastern = EngineConfig(local_timezone="America/New_York")
    [converted] = compute_utilization([late], [], [employee], week_window, eastern)
    assert converted.category_dates["field"] == ("2025-03-04",)


def test_calculate_employee_utilization_reports_overlaps(make_event, employee, week_window):
    events = [make_event("2025-03-03", status="field"), make_event("2025-03-03", status="field")]
    result = calculate_employee_utilization(employee, events, week_window)
    assert result.overlap_dates == ("2025-03-03",)
    assert result.weekdays("field") == 1.0
