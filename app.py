from __future__ import annotations
import json
import altair as alt
import pandas as pd
import streamlit as st
from tutorlog.aggregate import summarize_records
from tutorlog.charts import ChartDescriptor, bar_colors
from tutorlog.config import load_rules
from tutorlog.export import export_charts_to_excel_bytes
from tutorlog.filters import collect_semester_records
from tutorlog.ingest import IngestError, load_sheets_from_upload
from tutorlog.normalize import infer_semester_label
from tutorlog.pipeline import AnalysisConfig, Scope, generate_charts, inspect_sheet, month_records, semester_sheet_names
from tutorlog.slots import ConfigError
from tutorlog.utils import setup_logging, slugify

RULES = load_rules()
setup_logging(RULES.get("logging", {}).get("level", "INFO"))

st.set_page_config(page_title="Tutoring Analytics", layout="wide")
st.title("📊 Excel Analyzer")
st.caption("Tutoring analytics: monthly and semester performance")

try:
    CONFIG = AnalysisConfig.from_rules(RULES)
except ConfigError as e:
    st.error(f"Configuration error in rules file: {e}")
    st.stop()
# =========================

# Helpers
# =========================
def _render_chart(chart: ChartDescriptor) -> None:
    if not chart.data:
        st.info("No data for this chart.")
        return
    df = pd.DataFrame(chart.records())
    df["_color"] = bar_colors(chart, CONFIG.slots, CONFIG.palette)
    ch = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            # sort=None: порядок строк задаёт ядро (по убыванию или порядок слотов)
            x=alt.X(f"{chart.name_field}:N", sort=None, title=None, axis=alt.Axis(labelAngle=-28)),
            y=alt.Y(f"{chart.value_field}:Q", title=chart.y_label),
            color=alt.Color("_color:N", scale=None, legend=None),
            tooltip=[f"{chart.name_field}:N", alt.Tooltip(f"{chart.value_field}:Q", format=".2f")],
        )
        .properties(height=430)
    )
    st.altair_chart(ch, use_container_width=True)


def _reset_view() -> None:
    st.session_state["view_mode"] = None
# =========================

# Upload
# =========================
upload = st.file_uploader("Upload Excel File", type=["xlsx", "xlsm", "csv"], on_change=_reset_view)

if not upload:
    st.info("Upload an Excel file to get started.")
    st.stop()

try:
    sheets = load_sheets_from_upload(upload)
except IngestError as e:
    st.error(f"Could not read {upload.name}: {e}")
    st.stop()

if not sheets:
    st.warning("The file contains no sheets.")
    st.stop()

sheet_names = [s.name for s in sheets]
semester_label = infer_semester_label(upload.name, sheet_names)
# семестр собирается из всех листов-журналов, не только из выбранного
semester_ready = bool(semester_sheet_names(sheets, CONFIG))
st.session_state.setdefault("view_mode", None)
# =========================

# Sheet / month selection
# =========================
st.subheader("Select Sheet")
selected_sheet = st.radio("Sheet", sheet_names, horizontal=True, label_visibility="collapsed", on_change=_reset_view)
sheet = next(s for s in sheets if s.name == selected_sheet)
info = inspect_sheet(sheet, CONFIG)

st.subheader("Generate Graphs")
selected_month = ""
if not info.is_domain_data:
    st.info("This sheet does not look like a tutoring log. Select a monthly tutoring sheet such as “Sep. 2025”.")
elif not info.months:
    st.warning("No recognizable dates were found in this sheet.")
else:
    selected_month = st.selectbox("Month", info.months, index=0)
    st.caption(f"Monthly chart titles follow “Month YYYY”. Semester chart titles follow “{semester_label}”.")

b1, b2 = st.columns(2)
with b1:
    if st.button("Generate Monthly Graphs", type="primary", disabled=not (info.is_domain_data and selected_month)):
        st.session_state["view_mode"] = "month"
with b2:
    if st.button("Generate Semester Graphs", disabled=not semester_ready):
        st.session_state["view_mode"] = "semester"

view_mode = st.session_state.get("view_mode")
if not view_mode:
    st.stop()
# =========================

# Charts: пересчитываются на каждом rerun из текущего листа и охвата
# =========================
if view_mode == "semester":
    scope = Scope.semester()
    records, used_sheets, _ = collect_semester_records(sheets, CONFIG.candidates, CONFIG.non_data_patterns)
    st.header(f"Semester Consolidated Charts: {semester_label}")
    st.caption("Sheets included: " + ", ".join(used_sheets))
else:
    scope = Scope.month(selected_month)
    records = month_records(sheet, selected_month, CONFIG)
    st.header(f"Monthly Charts: {selected_month}")

charts = generate_charts(sheets, scope, CONFIG, selected_sheet=selected_sheet, file_name=upload.name)
summary = summarize_records(records)

m1, m2, m3, m4 = st.columns(4)
with m1:
    st.metric("Sessions", summary["sessions"])
with m2:
    st.metric("Tutors", summary["tutors"])
with m3:
    st.metric("Subjects", summary["subjects"])
with m4:
    st.metric("Total hours", summary["total_hours"])
if summary["missing_time"]:
    st.caption(f"{summary['missing_time']} session(s) without a readable sign-in time are not shown in the hourly chart.")

if not charts:
    st.warning("Nothing to chart for the current selection.")
    st.stop()

for chart in charts:
    with st.container(border=True):
        st.subheader(chart.title)
        _render_chart(chart)

scope_slug = "semester" if scope.is_semester else slugify(selected_month)
xbytes = export_charts_to_excel_bytes(charts, CONFIG.slots, CONFIG.palette, summary=summary)
d1, d2 = st.columns(2)
with d1:
    st.download_button(
        "Download charts (Excel)",
        data=xbytes,
        file_name=f"tutoring_charts_{scope_slug}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
with d2:
    st.download_button(
        "Download chart data (JSON)",
        data=json.dumps([c.to_dict() for c in charts], ensure_ascii=False, indent=2),
        file_name=f"tutoring_charts_{scope_slug}.json",
        mime="application/json",
    )
