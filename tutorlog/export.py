from __future__ import annotations
import pandas as pd
from io import BytesIO
from typing import Dict, Optional, Sequence
from .charts import ChartDescriptor, bar_colors
from .slots import TimeSlot


def _sheet_name(chart_id: str, used: set) -> str:
    # Excel: имя листа не длиннее 31 символа и уникально
    base = chart_id[:31] or "chart"
    name = base
    n = 1
    while name in used:
        n += 1
        suffix = f"~{n}"
        name = base[: 31 - len(suffix)] + suffix
    used.add(name)
    return name


def export_charts_to_excel_bytes(
    charts: Sequence[ChartDescriptor],
    slots: Sequence[TimeSlot] = (),
    palette: Sequence[str] = (),
    *,
    summary: Optional[Dict[str, object]] = None,
) -> bytes:
    """
    Одна книга: лист "Summary" (если передан) + по листу на каждый график
    (таблица name/value и нативная столбчатая диаграмма xlsxwriter).
    """
    bio = BytesIO()

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})
        fmt_title = wb.add_format({"bold": True, "font_size": 13})
        used: set = set()

        if summary:
            sdf = pd.DataFrame([{"Metric": k, "Value": v} for k, v in summary.items()])
            sdf.to_excel(writer, index=False, sheet_name="Summary")
            used.add("Summary")
            ws = writer.sheets["Summary"]
            for col, name in enumerate(sdf.columns):
                ws.write(0, col, name, fmt_header)
            ws.set_column(0, 0, 24)
            ws.set_column(1, 1, 16)

        for chart in charts:
            name = _sheet_name(chart.id, used)
            df = pd.DataFrame(chart.records(), columns=[chart.name_field, chart.value_field])
            # таблица со строки 3, над ней - заголовок графика
            df.to_excel(writer, index=False, sheet_name=name, startrow=2)
            ws = writer.sheets[name]
            ws.write(0, 0, chart.title, fmt_title)
            for col, colname in enumerate(df.columns):
                ws.write(2, col, colname, fmt_header)
            ws.set_column(0, 0, max(14, min(48, max([len(str(x)) for x in df[chart.name_field]] + [10]) + 2)))
            ws.set_column(1, 1, 16)

            if df.empty:
                ws.write(3, 0, "No data")
                continue

            first, last = 3, 3 + len(df) - 1
            xl_chart = wb.add_chart({"type": "column"})
            xl_chart.add_series({
                "name": chart.y_label or chart.value_field,
                "categories": [name, first, 0, last, 0],
                "values": [name, first, 1, last, 1],
                "points": [{"fill": {"color": c}} for c in bar_colors(chart, slots, palette)],
            })
            xl_chart.set_title({"name": chart.title})
            xl_chart.set_y_axis({"name": chart.y_label})
            xl_chart.set_legend({"none": True})
            xl_chart.set_size({"width": 720, "height": 400})
            ws.insert_chart(2, 3, xl_chart)

    return bio.getvalue()
