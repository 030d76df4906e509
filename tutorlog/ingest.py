from __future__ import annotations
import csv
import logging
import re
from io import BytesIO, StringIO
from typing import Any, List, Optional, Sequence
import pandas as pd
from openpyxl import load_workbook
from .cells import classify_cell
from .records import Sheet

log = logging.getLogger(__name__)


class IngestError(ValueError):
    """Файл не удалось прочитать как таблицу."""

# =========================

# Excel: читаем лист как матрицу, разворачиваем merged cells
# =========================
def _sheet_to_matrix_with_merged(ws) -> List[List[Any]]:
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    for r in range(1, ws.max_row + 1):
        row_vals = []
        for c in range(1, ws.max_column + 1):
            v = ws.cell(r, c).value
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(v)
        rows.append(row_vals)
    return rows
# =========================

# CSV: устойчивое чтение из bytes
# =========================
def _decode_sample(data: bytes, enc: str, limit: int = 65536) -> str:
    try:
        return data[:limit].decode(enc, errors="replace")
    except LookupError:
        return data[:limit].decode("utf-8", errors="replace")


def _guess_delimiter(sample_text: str) -> str:
    # ',' для en-US выгрузок, ';' для европейских локалей, иногда табы
    try:
        dialect = csv.Sniffer().sniff(sample_text, delimiters=";,\t|")
        if dialect.delimiter:
            return dialect.delimiter
    except csv.Error:
        pass

    # fallback по количеству в первых строках
    lines = [ln for ln in sample_text.splitlines() if ln.strip()][:20]
    if not lines:
        return ","
    scores = {d: sum(ln.count(d) for ln in lines) / len(lines) for d in [",", ";", "\t", "|"]}
    best = max(scores.items(), key=lambda x: x[1])[0]
    return best if scores.get(best, 0) > 0 else ","


def _read_csv_bytes(data: bytes) -> pd.DataFrame:
    # без header: первая строка попадает в матрицу как обычная, заголовок ищем сами
    last_err: Optional[Exception] = None
    for enc in ["utf-8-sig", "utf-8", "cp1252"]:
        try:
            delim = _guess_delimiter(_decode_sample(data, enc))
            return pd.read_csv(
                BytesIO(data),
                header=None,
                sep=delim,
                engine="python",
                encoding=enc,
                skip_blank_lines=True,
            )
        except (UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            last_err = e
            continue

    sample = _decode_sample(data, "utf-8")
    try:
        return pd.read_csv(StringIO(sample), header=None, sep=_guess_delimiter(sample), engine="python")
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestError(f"Cannot parse CSV: {last_err or e}") from e
# =========================

# Матрица -> Sheet (заголовок = первая непустая строка)
# =========================
def _is_blank(v: Any) -> bool:
    if v is None:
        return True
    try:
        if pd.isna(v):
            return True
    except (TypeError, ValueError):
        pass
    return str(v).strip() == ""


def _make_unique(cols: Sequence[Any]) -> List[str]:
    seen = {}
    out = []
    for i, c in enumerate(cols):
        base = "" if _is_blank(c) else str(c).strip()
        if not base:
            base = f"col_{i + 1}"
        n = seen.get(base, 0) + 1
        seen[base] = n
        out.append(base if n == 1 else f"{base}__{n}")
    return out


_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _csv_value(v: Any) -> Any:
    # CSV читается без dtype: "45540" / "0.4375" должны стать числами, как в Excel
    if isinstance(v, str) and _NUMERIC_RE.fullmatch(v.strip()):
        return float(v.strip())
    return v


def matrix_to_sheet(
    matrix: Sequence[Sequence[Any]],
    name: str,
    source_name: str = "",
    numeric_text: bool = False,
) -> Sheet:
    rows = [list(r) for r in matrix if not all(_is_blank(v) for v in r)]
    if not rows:
        return Sheet(name=name, headers=(), rows=(), source_name=source_name)

    headers = _make_unique(rows[0])
    records = []
    for r in rows[1:]:
        padded = list(r) + [None] * (len(headers) - len(r))
        if numeric_text:
            padded = [_csv_value(v) for v in padded]
        records.append({h: classify_cell(v) for h, v in zip(headers, padded)})
    return Sheet(name=name, headers=tuple(headers), rows=tuple(records), source_name=source_name)


def load_sheets_from_bytes(name: str, data: bytes) -> List[Sheet]:
    """
    Excel -> по одному Sheet на лист (в порядке книги); CSV -> один Sheet "CSV".
    Значения ячеек уже классифицированы (Missing/Number/Text/Temporal).
    """
    low = (name or "").lower()
    if low.endswith(".csv"):
        df = _read_csv_bytes(data)
        return [matrix_to_sheet(df.values.tolist(), "CSV", source_name=name, numeric_text=True)]

    if not low.endswith((".xlsx", ".xlsm")):
        raise IngestError(f"Unsupported file type: {name}")

    try:
        wb = load_workbook(BytesIO(data), read_only=False, data_only=True)
    except Exception as e:
        raise IngestError(f"Cannot open workbook {name}: {e}") from e

    sheets = []
    for ws in wb.worksheets:
        sheets.append(matrix_to_sheet(_sheet_to_matrix_with_merged(ws), ws.title, source_name=name))
    log.info("Loaded %s: %d sheets", name, len(sheets))
    return sheets


def load_sheets_from_upload(upload) -> List[Sheet]:
    # Streamlit UploadedFile (name + getvalue())
    return load_sheets_from_bytes(upload.name, upload.getvalue())
