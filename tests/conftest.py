import datetime as dt

import pytest

from tutorlog.cells import classify_row
from tutorlog.pipeline import AnalysisConfig
from tutorlog.records import Sheet

HEADERS = ("Date", "Sign in Time", "Tutor", "Subject", "Duration")


@pytest.fixture
def config():
    return AnalysisConfig.from_rules()


@pytest.fixture
def make_sheet():
    def _make(name, raw_rows, headers=HEADERS):
        rows = tuple(classify_row(dict(zip(headers, r))) for r in raw_rows)
        return Sheet(name=name, headers=tuple(headers), rows=rows)
    return _make


@pytest.fixture
def three_rows():
    return [
        (dt.date(2024, 9, 5), "10:45 AM", "Alice", "Math", "1:30"),
        (dt.date(2024, 9, 10), "11:15", "Alice", "Physics", "0:45"),
        (dt.date(2024, 10, 1), "14:00", "Bob", "Math", None),
    ]


@pytest.fixture
def log_sheet(make_sheet, three_rows):
    return make_sheet("Sep. 2024", three_rows)


def chart_values(chart):
    # {имя столбца: значение} для коротких проверок
    return {d.name: d.value for d in chart.data}
