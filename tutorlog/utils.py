import os
import re
import json
import logging
from pathlib import Path
from typing import Any

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

RULES_ENV = "TUTORLOG_RULES"

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default

_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP варианты
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def norm_header(s: Any) -> str:
    """
    Нормализация заголовка колонки для сравнения:
    - BOM/неразрывные пробелы
    - lower
    - схлопывание пробелов
    """
    if s is None:
        return ""
    s = str(s).replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    return re.sub(r"\s+", " ", s).strip().lower()

def slugify(s: Any) -> str:
    # "September 2024" -> "september-2024" (для id графиков и имён листов)
    return _SLUG_RE.sub("-", norm_header(s)).strip("-")

def rules_path() -> Path:
    env = os.environ.get(RULES_ENV)
    if env:
        return Path(env)
    return DEFAULT_DATA_DIR / "rules.json"

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
