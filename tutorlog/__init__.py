"""
Этот пакет содержит:
- загрузку журналов занятий (XLSX/CSV) в листы с классифицированными ячейками
- распознавание колонок (дата, время входа, тьютор, предмет, длительность)
- нормализацию значений (время суток, длительность, ключ месяца, метка семестра)
- раскладку по временным слотам и фильтр по месяцу/семестру
- агрегаты (количество, средние) и данные для графиков
- экспорт графиков в Excel
"""
from .cells import classify_cell, classify_row
from .config import load_rules
from .schema import ColumnSchema, resolve_columns
from .normalize import time_to_minutes, duration_to_hours, date_to_month_key, sort_month_keys, infer_semester_label
from .slots import TimeSlot, classify_time_slot
from .filters import filter_rows_by_month, month_options
from .aggregate import count_by_key, average_by_key
from .charts import ChartDatum, ChartDescriptor, build_tutoring_charts, map_to_chart_data
from .pipeline import AnalysisConfig, Scope, generate_charts, generate_month_charts, generate_semester_charts
from .ingest import IngestError, load_sheets_from_bytes, load_sheets_from_upload
from .export import export_charts_to_excel_bytes

__all__ = [
    "classify_cell",
    "classify_row",
    "load_rules",
    "ColumnSchema",
    "resolve_columns",
    "time_to_minutes",
    "duration_to_hours",
    "date_to_month_key",
    "sort_month_keys",
    "infer_semester_label",
    "TimeSlot",
    "classify_time_slot",
    "filter_rows_by_month",
    "month_options",
    "count_by_key",
    "average_by_key",
    "ChartDatum",
    "ChartDescriptor",
    "build_tutoring_charts",
    "map_to_chart_data",
    "AnalysisConfig",
    "Scope",
    "generate_charts",
    "generate_month_charts",
    "generate_semester_charts",
    "IngestError",
    "load_sheets_from_bytes",
    "load_sheets_from_upload",
    "export_charts_to_excel_bytes",
]
