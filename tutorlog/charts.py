from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple
from .aggregate import average_by_key, count_by_key
from .records import NormalizedRecord
from .slots import TimeSlot, classify_time_slot, slot_colors

COLOR_DEFAULT = "default"
COLOR_TIME_SLOT = "timeSlot"


@dataclass(frozen=True)
class ChartDatum:
    name: str
    value: float


@dataclass(frozen=True)
class ChartDescriptor:
    id: str
    title: str
    data: Tuple[ChartDatum, ...]
    value_field: str
    name_field: str
    color_mode: str = COLOR_DEFAULT
    y_label: str = ""

    def records(self) -> List[Dict[str, Any]]:
        # данные в виде строк {name_field: .., value_field: ..} для отрисовки/экспорта
        return [{self.name_field: d.name, self.value_field: d.value} for d in self.data]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "data": self.records(),
            "valueField": self.value_field,
            "nameField": self.name_field,
            "colorMode": self.color_mode,
            "yLabel": self.y_label,
        }


def map_to_chart_data(m: Mapping[str, float], sort_by_value_desc: bool = True) -> Tuple[ChartDatum, ...]:
    data = [ChartDatum(str(k), v) for k, v in m.items()]
    if sort_by_value_desc:
        # sorted стабилен: равные значения сохраняют порядок появления
        data = sorted(data, key=lambda d: d.value or 0, reverse=True)
    return tuple(data)


def slot_chart_data(records: Sequence[NormalizedRecord], slots: Sequence[TimeSlot]) -> Tuple[ChartDatum, ...]:
    # все слоты в заданном порядке, пустые - с нулём
    counts = {s.label: 0 for s in slots}
    for r in records:
        slot = classify_time_slot(r.time_minutes, slots)
        if slot is None:
            continue
        counts[slot.label] += 1
    return tuple(ChartDatum(s.label, counts[s.label]) for s in slots)


def _tutor(r: NormalizedRecord) -> str:
    return r.tutor


def _subject(r: NormalizedRecord) -> str:
    return r.subject


def _hours(r: NormalizedRecord):
    return r.duration_hours


def build_tutoring_charts(
    records: Sequence[NormalizedRecord],
    label: str,
    id_prefix: str,
    slots: Sequence[TimeSlot],
    include_duration: bool = True,
) -> List[ChartDescriptor]:
    """
    Пять графиков в фиксированном порядке:
      1) посещения по часовым слотам
      2) тьютор -> число студентов
      3) предмет -> число студентов
      4) тьютор -> средняя длительность занятия (ч)
      5) предмет -> средняя длительность занятия (ч)
    4 и 5 не строятся, если ни в одном листе нет колонки длительности.
    """
    charts = [
        ChartDescriptor(
            id=f"{id_prefix}-timeslot",
            title=f"Hourly Number of Students in {label}",
            data=slot_chart_data(records, slots),
            value_field="students",
            name_field="timeSlot",
            color_mode=COLOR_TIME_SLOT,
            y_label="Number of Students",
        ),
        ChartDescriptor(
            id=f"{id_prefix}-tutor-count",
            title=f"Tutor vs Number of Students in {label}",
            data=map_to_chart_data(count_by_key(records, _tutor)),
            value_field="students",
            name_field="tutor",
            y_label="Number of Students",
        ),
        ChartDescriptor(
            id=f"{id_prefix}-subject-count",
            title=f"Subject vs Number of Students in {label}",
            data=map_to_chart_data(count_by_key(records, _subject)),
            value_field="students",
            name_field="subject",
            y_label="Number of Students",
        ),
    ]
    if not include_duration:
        return charts

    charts += [
        ChartDescriptor(
            id=f"{id_prefix}-tutor-avg-hours",
            title=f"Average Tutoring Hours per Session by Tutor in {label}",
            data=map_to_chart_data(average_by_key(records, _tutor, _hours)),
            value_field="avgHours",
            name_field="tutor",
            y_label="Average Hours",
        ),
        ChartDescriptor(
            id=f"{id_prefix}-subject-avg-hours",
            title=f"Average Tutoring Hours per Session by Subject in {label}",
            data=map_to_chart_data(average_by_key(records, _subject, _hours)),
            value_field="avgHours",
            name_field="subject",
            y_label="Average Hours",
        ),
    ]
    return charts


def bar_colors(chart: ChartDescriptor, slots: Sequence[TimeSlot], palette: Sequence[str]) -> List[str]:
    # timeSlot: цвет слота из конфигурации; иначе - палитра по кругу
    by_label = slot_colors(slots)
    out = []
    for i, d in enumerate(chart.data):
        fallback = palette[i % len(palette)] if palette else "#4A90E2"
        if chart.color_mode == COLOR_TIME_SLOT:
            out.append(by_label.get(d.name) or fallback)
        else:
            out.append(fallback)
    return out
