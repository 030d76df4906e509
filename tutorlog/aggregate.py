from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, TypeVar
import pandas as pd
from .records import NormalizedRecord

T = TypeVar("T")
KeyFn = Callable[[T], Any]
ValueFn = Callable[[T], Optional[float]]


@dataclass
class AggregateBucket:
    count: int = 0
    sum: float = 0.0
    n: int = 0

    @property
    def average(self) -> Optional[float]:
        return self.sum / self.n if self.n > 0 else None


def _group_key(k: Any) -> Optional[str]:
    # пустой/пробельный ключ в группировку не попадает
    if k is None:
        return None
    s = str(k).strip()
    return s or None


def _usable_value(v: Any) -> Optional[float]:
    if v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) else f


def accumulate(rows: Iterable[T], key_fn: KeyFn, value_fn: Optional[ValueFn] = None) -> Dict[str, AggregateBucket]:
    """
    Общий проход группировки. Порядок ключей = порядок первого появления.
      count - строк с непустым ключом
      sum/n - только по строкам, где value_fn вернул число (не None/NaN)
    """
    acc: Dict[str, AggregateBucket] = {}
    for r in rows:
        k = _group_key(key_fn(r))
        if k is None:
            continue
        b = acc.get(k)
        if b is None:
            b = acc[k] = AggregateBucket()
        b.count += 1
        if value_fn is None:
            continue
        v = _usable_value(value_fn(r))
        if v is None:
            continue
        b.sum += v
        b.n += 1
    return acc


def count_by_key(rows: Iterable[T], key_fn: KeyFn) -> Dict[str, int]:
    return {k: b.count for k, b in accumulate(rows, key_fn).items()}


def average_by_key(rows: Iterable[T], key_fn: KeyFn, value_fn: ValueFn) -> Dict[str, float]:
    # ключи без единого значения в результат не попадают
    out: Dict[str, float] = {}
    for k, b in accumulate(rows, key_fn, value_fn).items():
        avg = b.average
        if avg is not None:
            out[k] = avg
    return out


def records_to_frame(records: Sequence[NormalizedRecord]) -> pd.DataFrame:
    cols = ["sheet", "month_key", "time_minutes", "tutor", "subject", "duration_hours"]
    if not records:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame([{c: getattr(r, c) for c in cols} for r in records], columns=cols)


def summarize_records(records: Sequence[NormalizedRecord]) -> Dict[str, Any]:
    # Короткая сводка для шапки отчёта
    df = records_to_frame(records)
    if df.empty:
        return {"sessions": 0, "tutors": 0, "subjects": 0, "total_hours": 0.0, "missing_time": 0}
    tutors = df["tutor"].astype(str).str.strip()
    subjects = df["subject"].astype(str).str.strip()
    hours = pd.to_numeric(df["duration_hours"], errors="coerce")
    return {
        "sessions": int(len(df)),
        "tutors": int(tutors[tutors != ""].nunique()),
        "subjects": int(subjects[subjects != ""].nunique()),
        "total_hours": round(float(hours.sum(skipna=True)), 2),
        "missing_time": int(df["time_minutes"].isna().sum()),
    }
