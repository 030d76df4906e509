import copy
import datetime as dt

import pytest

from conftest import chart_values
from tutorlog.pipeline import (
    Scope,
    generate_charts,
    generate_month_charts,
    generate_semester_charts,
    inspect_sheet,
    month_records,
    semester_sheet_names,
)


def by_id(charts):
    return {c.id: c for c in charts}


def test_september_charts(log_sheet, config):
    charts = by_id(generate_month_charts(log_sheet, "September 2024", config))
    slots = chart_values(charts["month-september-2024-timeslot"])
    assert slots["10:00-11:00"] == 1
    assert slots["11:00-12:00"] == 1
    assert sum(slots.values()) == 2
    assert chart_values(charts["month-september-2024-tutor-count"]) == {"Alice": 2}
    assert chart_values(charts["month-september-2024-subject-count"]) == {"Math": 1, "Physics": 1}
    assert chart_values(charts["month-september-2024-tutor-avg-hours"]) == {"Alice": pytest.approx(1.125)}


def test_october_charts(log_sheet, config):
    charts = by_id(generate_month_charts(log_sheet, "October 2024", config))
    assert chart_values(charts["month-october-2024-tutor-count"]) == {"Bob": 1}
    assert chart_values(charts["month-october-2024-timeslot"])["14:00-15:00"] == 1
    assert charts["month-october-2024-tutor-avg-hours"].data == ()


def test_month_charts_deterministic_and_inputs_untouched(log_sheet, config):
    before = copy.deepcopy(log_sheet.rows)
    first = generate_month_charts(log_sheet, "September 2024", config)
    second = generate_month_charts(log_sheet, "September 2024", config)
    assert first == second
    assert log_sheet.rows == before


def test_non_domain_sheet_gives_no_charts(make_sheet, config):
    sheet = make_sheet("Tutors", [("Alice", "a@x.edu")], headers=("Tutor", "Email"))
    assert generate_month_charts(sheet, "September 2024", config) == []
    assert not inspect_sheet(sheet, config).is_domain_data


def test_month_without_duration_column(make_sheet, config):
    sheet = make_sheet("Log", [(dt.date(2024, 9, 5), "10:45", "Alice", "Math")],
                       headers=("Date", "Sign in Time", "Tutor", "Subject"))
    charts = generate_month_charts(sheet, "September 2024", config)
    assert len(charts) == 3


def test_inspect_sheet(log_sheet, config):
    info = inspect_sheet(log_sheet, config)
    assert info.is_domain_data
    assert info.months == ["September 2024", "October 2024"]
    assert info.schema.duration == "Duration"


def test_month_records(log_sheet, config):
    recs = month_records(log_sheet, "September 2024", config)
    assert [(r.time_minutes, r.duration_hours) for r in recs] == [(645, 1.5), (675, 0.75)]


def test_semester_charts(log_sheet, make_sheet, config):
    summary = make_sheet("Summary", [("x",)], headers=("Total",))
    charts = generate_semester_charts([log_sheet, summary], config, file_name="Tutoring_Fall_2024.xlsx")
    ids = by_id(charts)
    tutor_chart = ids["semester-tutor-count"]
    assert tutor_chart.title == "Tutor vs Number of Students in Fall Semester 2024"
    assert chart_values(tutor_chart) == {"Alice": 2, "Bob": 1}
    assert list(chart_values(tutor_chart)) == ["Alice", "Bob"]
    assert chart_values(ids["semester-subject-count"]) == {"Math": 2, "Physics": 1}


def test_semester_without_log_sheets(make_sheet, config):
    sheet = make_sheet("Summary", [("x",)], headers=("Total",))
    assert generate_semester_charts([sheet], config) == []


def test_generate_charts_dispatch(log_sheet, config):
    month = generate_charts([log_sheet], Scope.month("September 2024"), config, selected_sheet="Sep. 2024")
    assert month[0].id == "month-september-2024-timeslot"

    sem = generate_charts([log_sheet], Scope.semester(), config, file_name="log.xlsx")
    assert sem[0].id == "semester-timeslot"
    assert sem[0].title == "Hourly Number of Students in Semester"

    assert generate_charts([log_sheet], Scope.month("September 2024"), config, selected_sheet="Nope") == []
    assert Scope.semester().is_semester
    assert not Scope.month("September 2024").is_semester


def test_month_scope_ignores_sheet_name(make_sheet, three_rows, config):
    sheet = make_sheet("Tutoring Schedule Sep 2024", three_rows)
    info = inspect_sheet(sheet, config)
    assert info.is_domain_data
    assert info.months == ["September 2024", "October 2024"]

    charts = by_id(generate_month_charts(sheet, "September 2024", config))
    assert chart_values(charts["month-september-2024-tutor-count"]) == {"Alice": 2}
    # семестр такой лист по-прежнему пропускает
    assert generate_semester_charts([sheet], config) == []


def test_semester_available_when_first_sheet_is_summary(log_sheet, make_sheet, config):
    summary = make_sheet("Summary", [("x",)], headers=("Total",))
    assert not inspect_sheet(summary, config).is_domain_data
    assert semester_sheet_names([summary, log_sheet], config) == ["Sep. 2024"]
    assert semester_sheet_names([summary], config) == []
