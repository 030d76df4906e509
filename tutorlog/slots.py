from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence


class ConfigError(ValueError):
    """Некорректная конфигурация (например, таблица временных слотов)."""


@dataclass(frozen=True)
class TimeSlot:
    label: str
    start_min: int
    end_min: int  # не включительно
    color: str = ""

    def contains(self, minutes: int) -> bool:
        return self.start_min <= minutes < self.end_min


def _fmt_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_slots(slots: Sequence[TimeSlot]) -> List[TimeSlot]:
    """
    Проверка таблицы слотов:
    - start < end, оба в пределах суток
    - слоты упорядочены и не пересекаются
    - метки уникальны
    """
    seen = set()
    prev_end = None
    for s in slots:
        if not (0 <= s.start_min < s.end_min <= 24 * 60):
            raise ConfigError(f"Slot {s.label!r}: invalid interval [{s.start_min}, {s.end_min})")
        if prev_end is not None and s.start_min < prev_end:
            raise ConfigError(f"Slot {s.label!r} overlaps or is out of order")
        if s.label in seen:
            raise ConfigError(f"Duplicate slot label {s.label!r}")
        seen.add(s.label)
        prev_end = s.end_min
    return list(slots)


def slots_from_config(items: Iterable[Dict[str, Any]]) -> List[TimeSlot]:
    # [{"label": ..., "start": "10:00" | 600, "end": ..., "color": ...}, ...]
    slots = []
    for it in items:
        try:
            start = _parse_bound(it["start"])
            end = _parse_bound(it["end"])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Bad time slot entry {it!r}: {e}") from e
        label = str(it.get("label") or f"{_fmt_hhmm(start)}-{_fmt_hhmm(end)}")
        slots.append(TimeSlot(label, start, end, str(it.get("color", ""))))
    return validate_slots(slots)


def _parse_bound(v: Any) -> int:
    if isinstance(v, str):
        hh, mm = v.strip().split(":", 1)
        return int(hh) * 60 + int(mm)
    return int(v)


def classify_time_slot(minutes: Optional[int], slots: Sequence[TimeSlot]) -> Optional[TimeSlot]:
    # Первый слот, где start <= minutes < end; None - вне всех слотов
    if minutes is None:
        return None
    for s in slots:
        if s.contains(minutes):
            return s
    return None


def slot_colors(slots: Sequence[TimeSlot]) -> Dict[str, str]:
    return {s.label: s.color for s in slots}
