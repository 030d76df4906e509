from __future__ import annotations
import datetime as dt
import math
import re
from typing import Iterable, List, Optional, Sequence
from dateutil import parser as dtparser
from openpyxl.utils.datetime import from_excel
from .cells import CellValue, Number, Temporal, Text

MINUTES_PER_DAY = 24 * 60

# названия месяцев фиксированы (не зависят от локали процесса)
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# недостающие части даты при разборе текста берутся отсюда, а не из "сегодня";
# второй default нужен, чтобы заметить текст без года или месяца
_PARSE_DEFAULT = dt.datetime(1970, 1, 1)
_PARSE_CHECK_DEFAULT = dt.datetime(1971, 2, 1)
_EPOCH_ZERO = dt.datetime(1970, 1, 1)

_TIME_RE = re.compile(r"(\d{1,2})\s*:\s*(\d{2})(?:\s*:\s*(\d{2}))?\s*(?:([ap])\.?m\b\.?)?", re.I)
_DAYS_HMS_RE = re.compile(r"(\d+)\s*days?,?\s*(\d{1,2}):(\d{2})(?::(\d{2}))?", re.I)
_HMS_RE = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?")
_SEMESTER_RE = re.compile(
    r"(?<![a-z])(fall|spring|summer|winter)(?![a-z])"
    r"(?:[\s_.\-]*(?:semester)?[\s_.\-]*(\d{4})(?!\d))?",
    re.I,
)
# =========================

# Время суток -> минуты от полуночи
# =========================
def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _temporal_hour_minute(v) -> tuple[int, int]:
    if isinstance(v, dt.timedelta):
        total = int(v.total_seconds() // 60) % MINUTES_PER_DAY
        return total // 60, total % 60
    if isinstance(v, (dt.datetime, dt.time)):
        return v.hour, v.minute
    # чистая дата = полночь
    return 0, 0


def time_to_minutes(cell: CellValue) -> Optional[int]:
    """
    Время входа -> минуты от полуночи, либо None.

    Поддерживается:
      - Temporal: datetime/time (часы и минуты), timedelta (по модулю суток), date (полночь)
      - Number: доля суток (для значений >= 1 берётся дробная часть), округление до минуты
      - Text: "H:MM", "H:MM:SS", "H:MM AM/PM" (12 AM -> 0, PM прибавляет 12)
    """
    if isinstance(cell, Temporal):
        h, m = _temporal_hour_minute(cell.value)
        return h * 60 + m

    if isinstance(cell, Number):
        x = cell.value
        if math.isnan(x) or math.isinf(x):
            return None
        frac = x - math.floor(x) if x >= 1 else x
        total = _round_half_up(frac * MINUTES_PER_DAY)
        if total < 0 or total >= MINUTES_PER_DAY:
            return None
        return total

    if isinstance(cell, Text):
        m = _TIME_RE.search(cell.value)
        if not m:
            return None
        hh = int(m.group(1))
        mm = int(m.group(2))
        ampm = (m.group(4) or "").lower()
        if ampm == "a" and hh == 12:
            hh = 0
        if ampm == "p" and hh < 12:
            hh += 12
        if not (0 <= hh <= 23 and 0 <= mm <= 59):
            return None
        return hh * 60 + mm

    return None
# =========================

# Длительность -> часы
# =========================
def duration_to_hours(cell: CellValue) -> Optional[float]:
    """
    Длительность занятия в часах:
      - Number: доля суток * 24
      - Temporal: (часы*60 + минуты) / 60; timedelta - целые минуты / 60
      - Text: "D day(s) H:MM[:SS]" или "H:MM[:SS]"
    """
    if isinstance(cell, Number):
        x = cell.value
        if math.isnan(x):
            return None
        return x * 24

    if isinstance(cell, Temporal):
        v = cell.value
        if isinstance(v, dt.timedelta):
            return float(int(v.total_seconds() // 60)) / 60
        h, m = _temporal_hour_minute(v)
        return (h * 60 + m) / 60

    if isinstance(cell, Text):
        s = cell.value.strip()
        if not s:
            return None
        m = _DAYS_HMS_RE.search(s)
        if m:
            days, hh, mm = int(m.group(1)), int(m.group(2)), int(m.group(3))
            ss = int(m.group(4)) if m.group(4) else 0
            return days * 24 + hh + mm / 60 + ss / 3600
        m = _HMS_RE.search(s)
        if m:
            hh, mm = int(m.group(1)), int(m.group(2))
            ss = int(m.group(3)) if m.group(3) else 0
            return hh + mm / 60 + ss / 3600

    return None
# =========================

# Дата -> ключ месяца "September 2024"
# =========================
def excel_serial_to_datetime(serial: float) -> Optional[dt.datetime]:
    # дни от 1899-12-30 с учётом ошибки Excel про 29.02.1900 (openpyxl.from_excel)
    if serial is None or math.isnan(serial) or math.isinf(serial):
        return None
    try:
        d = from_excel(serial)
    except (OverflowError, ValueError, TypeError):
        return None
    return d if isinstance(d, dt.datetime) else None


def format_month_key(d: dt.date) -> str:
    return f"{MONTH_NAMES[d.month - 1]} {d.year:04d}"


def _parse_date_text(s: str) -> Optional[dt.datetime]:
    # "Tuesday", "10:45 AM", "5" - не дата: год и месяц пришли бы из default
    try:
        d = dtparser.parse(s, default=_PARSE_DEFAULT)
        other = dtparser.parse(s, default=_PARSE_CHECK_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if (d.year, d.month) != (other.year, other.month):
        return None
    return d


def date_to_month_key(cell: CellValue) -> Optional[str]:
    if isinstance(cell, Temporal):
        v = cell.value
        if isinstance(v, dt.date):
            return format_month_key(v)
        return None

    if isinstance(cell, Number):
        d = excel_serial_to_datetime(cell.value)
        return format_month_key(d) if d else None

    if isinstance(cell, Text):
        s = cell.value.strip()
        if not s:
            return None
        d = _parse_date_text(s)
        return format_month_key(d) if d else None

    return None


def month_sort_key(month_key: str) -> dt.datetime:
    # ключ месяца обратно в дату; нераспознанные ключи - в начало (эпоха 0)
    d = _parse_date_text(str(month_key or ""))
    if d is None:
        return _EPOCH_ZERO
    return d.replace(tzinfo=None)


def sort_month_keys(keys: Iterable[str]) -> List[str]:
    return sorted(keys, key=month_sort_key)
# =========================

# Семестр по имени файла / листов
# =========================
def parse_semester_from_text(text: str) -> Optional[str]:
    m = _SEMESTER_RE.search(str(text or ""))
    if not m:
        return None
    term = m.group(1).capitalize()
    year = m.group(2)
    return f"{term} Semester {year}" if year else f"{term} Semester"


def infer_semester_label(file_name: Optional[str], sheet_names: Sequence[str] = ()) -> str:
    """
    Метка семестра для заголовков графиков.
    Сначала имя файла, потом имена листов по порядку; первое совпадение побеждает.
    Ничего не нашли -> "Semester".
    """
    candidates = [c for c in [file_name, *(sheet_names or [])] if c]
    for c in candidates:
        label = parse_semester_from_text(c)
        if label:
            return label
    return "Semester"
