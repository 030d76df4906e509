from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence
from .charts import ChartDescriptor, build_tutoring_charts
from .config import (column_candidates_from_rules, non_data_patterns_from_rules, palette_from_rules, time_slots_from_rules)
from .filters import classify_sheet, collect_semester_records, filter_rows_by_month, month_options, semester_sheets
from .normalize import infer_semester_label
from .records import NormalizedRecord, Sheet, normalize_rows
from .schema import ColumnSchema
from .slots import TimeSlot
from .utils import slugify

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    # слоты и кандидаты колонок - внешняя конфигурация, а не константы модулей
    slots: Sequence[TimeSlot]
    candidates: Mapping[str, Sequence[str]]
    non_data_patterns: Sequence[str] = ()
    palette: Sequence[str] = ()

    @classmethod
    def from_rules(cls, rules: Optional[Mapping[str, Any]] = None) -> "AnalysisConfig":
        return cls(
            slots=tuple(time_slots_from_rules(rules)),
            candidates=column_candidates_from_rules(rules),
            non_data_patterns=tuple(non_data_patterns_from_rules(rules)),
            palette=tuple(palette_from_rules(rules)),
        )


@dataclass(frozen=True)
class Scope:
    month_key: Optional[str] = None

    @classmethod
    def month(cls, month_key: str) -> "Scope":
        return cls(month_key=month_key)

    @classmethod
    def semester(cls) -> "Scope":
        return cls(month_key=None)

    @property
    def is_semester(self) -> bool:
        return not self.month_key


@dataclass
class SheetInfo:
    name: str
    schema: ColumnSchema
    is_domain_data: bool
    months: List[str] = field(default_factory=list)


def inspect_sheet(sheet: Sheet, config: AnalysisConfig) -> SheetInfo:
    schema, ok = classify_sheet(sheet, config.candidates)
    months = month_options(sheet.rows, schema.date) if ok else []
    return SheetInfo(name=sheet.name, schema=schema, is_domain_data=ok, months=months)


def month_records(sheet: Sheet, month_key: str, config: AnalysisConfig) -> List[NormalizedRecord]:
    schema, ok = classify_sheet(sheet, config.candidates)
    if not ok:
        return []
    rows = filter_rows_by_month(sheet.rows, schema.date, month_key)
    return normalize_rows(rows, schema, sheet=sheet.name)


def generate_month_charts(sheet: Sheet, month_key: str, config: AnalysisConfig) -> List[ChartDescriptor]:
    """
    Графики за один месяц по одному выбранному листу.
    Лист без обязательных колонок -> пустой список (это не ошибка).
    """
    schema, ok = classify_sheet(sheet, config.candidates)
    if not ok or not month_key:
        log.info("Sheet %r is not a tutoring log or no month selected, nothing to chart", sheet.name)
        return []
    records = month_records(sheet, month_key, config)
    log.debug("Month %s on sheet %r: %d records", month_key, sheet.name, len(records))
    return build_tutoring_charts(
        records,
        label=month_key,
        id_prefix=f"month-{slugify(month_key)}",
        slots=config.slots,
        include_duration=schema.has_duration,
    )


def semester_sheet_names(sheets: Sequence[Sheet], config: AnalysisConfig) -> List[str]:
    # листы, из которых собирается семестр; пусто - семестровые графики строить не из чего
    return [s.name for s, _ in semester_sheets(sheets, config.candidates, config.non_data_patterns)]


def generate_semester_charts(
    sheets: Sequence[Sheet],
    config: AnalysisConfig,
    file_name: str = "",
    label: Optional[str] = None,
) -> List[ChartDescriptor]:
    # Все листы-журналы книги вместе; метка семестра - из имени файла/листов
    records, used, has_duration = collect_semester_records(sheets, config.candidates, config.non_data_patterns)
    if not used:
        log.info("No tutoring-log sheets found for semester view")
        return []
    if label is None:
        label = infer_semester_label(file_name, [s.name for s in sheets])
    return build_tutoring_charts(
        records,
        label=label,
        id_prefix="semester",
        slots=config.slots,
        include_duration=has_duration,
    )


def generate_charts(
    sheets: Sequence[Sheet],
    scope: Scope,
    config: AnalysisConfig,
    selected_sheet: Optional[str] = None,
    file_name: str = "",
) -> List[ChartDescriptor]:
    """
    Единая точка входа: вызывающий код хранит снимок листов и текущий охват
    и просто вызывает функцию заново при любом изменении.
    """
    if scope.is_semester:
        return generate_semester_charts(sheets, config, file_name=file_name)
    by_name: Dict[str, Sheet] = {s.name: s for s in sheets}
    sheet = by_name.get(selected_sheet or "")
    if sheet is None:
        return []
    return generate_month_charts(sheet, scope.month_key or "", config)
