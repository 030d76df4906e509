from __future__ import annotations
import logging
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
from .cells import RawRow
from .normalize import date_to_month_key, sort_month_keys
from .records import NormalizedRecord, Sheet, normalize_rows, row_cell
from .schema import ColumnSchema, missing_roles, resolve_columns

log = logging.getLogger(__name__)


def filter_rows_by_month(rows: Sequence[RawRow], date_col: Optional[str], month_key: Optional[str]) -> List[RawRow]:
    # Пустой month_key = весь семестр, строки проходят без изменений
    if not month_key:
        return list(rows)
    return [r for r in rows if date_to_month_key(row_cell(r, date_col)) == month_key]


def month_options(rows: Sequence[RawRow], date_col: Optional[str]) -> List[str]:
    # Уникальные месяцы листа в хронологическом порядке
    seen: Dict[str, None] = {}
    for r in rows:
        mk = date_to_month_key(row_cell(r, date_col))
        if mk:
            seen.setdefault(mk, None)
    return sort_month_keys(seen.keys())


def is_non_data_sheet(sheet_name: str, patterns: Sequence[str]) -> bool:
    name = str(sheet_name or "")
    return any(re.search(p, name, re.I) for p in patterns)


def classify_sheet(sheet: Sheet, candidates: Mapping[str, Sequence[str]]) -> Tuple[ColumnSchema, bool]:
    # журнал занятий определяется только по колонкам; имя листа здесь не важно
    schema = resolve_columns(sheet.headers, candidates)
    return schema, schema.is_domain_data


def semester_sheets(
    sheets: Sequence[Sheet],
    candidates: Mapping[str, Sequence[str]],
    non_data_patterns: Sequence[str] = (),
) -> List[Tuple[Sheet, ColumnSchema]]:
    """
    Листы, которые входят в семестровый охват (в порядке книги).
    Лист пропускается, если не нашлись обязательные колонки
    или имя похоже на сводку/список/расписание.
    """
    out: List[Tuple[Sheet, ColumnSchema]] = []
    for sheet in sheets:
        schema, ok = classify_sheet(sheet, candidates)
        if not ok:
            log.info("Skipping sheet %r (missing: %s)", sheet.name, ", ".join(missing_roles(schema)))
            continue
        if is_non_data_sheet(sheet.name, non_data_patterns):
            log.info("Skipping sheet %r (non-data sheet name)", sheet.name)
            continue
        out.append((sheet, schema))
    return out


def collect_semester_records(
    sheets: Sequence[Sheet],
    candidates: Mapping[str, Sequence[str]],
    non_data_patterns: Sequence[str] = (),
) -> Tuple[List[NormalizedRecord], List[str], bool]:
    """
    Семестровый охват: каждый лист распознаётся отдельно, строки подходящих листов
    нормализуются по своей схеме и склеиваются в порядке листов.

    Возвращает (records, used_sheet_names, any_duration_column).
    """
    records: List[NormalizedRecord] = []
    used: List[str] = []
    has_duration = False

    for sheet, schema in semester_sheets(sheets, candidates, non_data_patterns):
        records.extend(normalize_rows(sheet.rows, schema, sheet=sheet.name))
        used.append(sheet.name)
        has_duration = has_duration or schema.has_duration

    log.debug("Semester scope: %d records from %d sheets", len(records), len(used))
    return records, used, has_duration
