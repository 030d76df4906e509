from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
from .cells import MISSING, CellValue, RawRow, cell_text, classify_cell
from .normalize import date_to_month_key, duration_to_hours, time_to_minutes
from .schema import ColumnSchema


@dataclass(frozen=True)
class Sheet:
    name: str
    headers: Sequence[str]
    rows: Sequence[RawRow]
    source_name: str = ""


@dataclass(frozen=True)
class NormalizedRecord:
    time_minutes: Optional[int]
    month_key: Optional[str]
    duration_hours: Optional[float]
    tutor: str
    subject: str
    sheet: str = ""


def row_cell(row: RawRow, col: Optional[str]) -> CellValue:
    if not col:
        return MISSING
    # classify_cell идемпотентен: уже классифицированные значения проходят как есть
    return classify_cell(row.get(col))


def normalize_row(row: RawRow, schema: ColumnSchema, sheet: str = "") -> NormalizedRecord:
    return NormalizedRecord(
        time_minutes=time_to_minutes(row_cell(row, schema.sign_in)),
        month_key=date_to_month_key(row_cell(row, schema.date)),
        duration_hours=duration_to_hours(row_cell(row, schema.duration)),
        tutor=cell_text(row_cell(row, schema.tutor)),
        subject=cell_text(row_cell(row, schema.subject)),
        sheet=sheet,
    )


def normalize_rows(rows: Iterable[RawRow], schema: ColumnSchema, sheet: str = "") -> List[NormalizedRecord]:
    return [normalize_row(r, schema, sheet=sheet) for r in rows]
