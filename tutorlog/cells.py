from __future__ import annotations
import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
import numpy as np
import pandas as pd

TemporalValue = Union[dt.datetime, dt.date, dt.time, dt.timedelta]
# =========================

# Закрытый набор типов ячеек: классификация делается один раз при загрузке,
# дальше нормализаторы работают только с этими четырьмя вариантами
# =========================
@dataclass(frozen=True)
class Missing:
    pass


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Temporal:
    value: TemporalValue


CellValue = Union[Missing, Number, Text, Temporal]
RawRow = Dict[str, CellValue]

MISSING = Missing()


def _hour_minute_fields(x: Any) -> Optional[tuple]:
    # {"hour": 10, "minute": 30} / {"hours": .., "minutes": ..} или объект с такими атрибутами
    if isinstance(x, Mapping):
        get = x.get
    else:
        def get(k):
            return getattr(x, k, None)
    for hk, mk in (("hour", "minute"), ("hours", "minutes")):
        h, m = get(hk), get(mk)
        if h is not None and m is not None:
            return h, m
    return None


def _structured_time(x: Any) -> CellValue:
    hm = _hour_minute_fields(x)
    if hm is None:
        return Text(str(x))
    try:
        return Temporal(dt.time(int(hm[0]), int(hm[1])))
    except (TypeError, ValueError):
        return MISSING


def classify_cell(x: Any) -> CellValue:
    """
    Приводит "сырое" значение ячейки (openpyxl/pandas/json) к CellValue:
    - None / NaN / NaT / пустая строка -> Missing
    - bool -> Text (не число)
    - int/float/numpy-числа -> Number
    - datetime/date/time/timedelta, pandas.Timestamp, numpy.datetime64 -> Temporal
    - структуры с hour/minute -> Temporal (время суток)
    - всё остальное -> Text
    """
    if isinstance(x, (Missing, Number, Text, Temporal)):
        return x
    if x is None:
        return MISSING
    if isinstance(x, (bool, np.bool_)):
        return Text(str(bool(x)))
    if isinstance(x, (np.datetime64, np.timedelta64)):
        x = pd.Timestamp(x) if isinstance(x, np.datetime64) else pd.Timedelta(x)
    if x is pd.NaT:
        return MISSING
    if isinstance(x, (dt.datetime, dt.date, dt.time, dt.timedelta)):
        return Temporal(x)
    if isinstance(x, (int, float, np.integer, np.floating)):
        if pd.isna(x):
            return MISSING
        return Number(float(x))
    if isinstance(x, str):
        s = x.strip()
        return Text(s) if s else MISSING
    return _structured_time(x)


def classify_row(raw: Mapping[str, Any]) -> RawRow:
    return {str(k): classify_cell(v) for k, v in raw.items()}


def cell_text(cell: CellValue) -> str:
    # Текстовое представление для ключей группировки (тьютор/предмет)
    if isinstance(cell, Text):
        return cell.value.strip()
    if isinstance(cell, Number):
        v = cell.value
        return str(int(v)) if v.is_integer() else str(v)
    if isinstance(cell, Temporal):
        v = cell.value
        return v.isoformat() if hasattr(v, "isoformat") else str(v)
    return ""
