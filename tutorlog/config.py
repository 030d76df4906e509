from __future__ import annotations
import copy
import logging
from typing import Any, Dict, List, Mapping, Optional
from .slots import TimeSlot, slots_from_config
from .utils import load_json, rules_path

log = logging.getLogger(__name__)

ROLES = ("date", "sign_in", "tutor", "subject", "duration")
REQUIRED_ROLES = ("date", "sign_in", "tutor", "subject")

# Значения по умолчанию; data/rules.json (или $TUTORLOG_RULES) перекрывает их
DEFAULT_RULES: Dict[str, Any] = {
    "time_slots": [
        {"label": "10:00-11:00", "start": "10:00", "end": "11:00", "color": "#4A90E2"},
        {"label": "11:00-12:00", "start": "11:00", "end": "12:00", "color": "#50C878"},
        {"label": "12:00-13:00", "start": "12:00", "end": "13:00", "color": "#F5A623"},
        {"label": "13:00-14:00", "start": "13:00", "end": "14:00", "color": "#E94B3C"},
        {"label": "14:00-15:00", "start": "14:00", "end": "15:00", "color": "#9B59B6"},
        {"label": "15:00-16:00", "start": "15:00", "end": "16:00", "color": "#1ABC9C"},
        {"label": "16:00-17:00", "start": "16:00", "end": "17:00", "color": "#E67E22"},
        {"label": "17:00-18:00", "start": "17:00", "end": "18:00", "color": "#34495E"},
        {"label": "18:00-19:00", "start": "18:00", "end": "19:00", "color": "#7F8C8D"},
    ],
    "column_candidates": {
        "date": ["Date", "Session Date", "Visit Date"],
        "sign_in": ["Sign in Time", "Sign-in Time", "Signin Time", "Sign In Time"],
        "tutor": ["Tutor", "Tutors"],
        "subject": ["Subject/Class", "Subject", "Course", "Course Name", "Class"],
        "duration": ["Time", "Duration", "Total Time", "Tutoring Time"],
    },
    # листы-сводки/списки/расписания не считаются журналом занятий
    "non_data_sheet_patterns": [
        r"summary",
        r"\blist(ing)?s?\b",
        r"schedule",
        r"roster",
        r"\btotals?\b",
        r"template",
    ],
    "palette": [
        "#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8",
        "#82CA9D", "#FFC658", "#FF6B6B", "#2ECC71", "#E74C3C",
    ],
    "logging": {"level": "INFO"},
}


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, Mapping):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_rules(path=None) -> Dict[str, Any]:
    """
    Правила = DEFAULT_RULES, поверх которых накладывается JSON-файл.
    Отсутствующий или битый файл - не ошибка, остаются значения по умолчанию.
    """
    p = path or rules_path()
    override = load_json(p, {})
    if not isinstance(override, dict):
        log.warning("Rules file %s is not a JSON object, using defaults", p)
        override = {}
    return _deep_merge(copy.deepcopy(DEFAULT_RULES), override)


def time_slots_from_rules(rules: Optional[Mapping[str, Any]] = None) -> List[TimeSlot]:
    rules = rules if rules is not None else DEFAULT_RULES
    return slots_from_config(rules.get("time_slots") or DEFAULT_RULES["time_slots"])


def column_candidates_from_rules(rules: Optional[Mapping[str, Any]] = None) -> Dict[str, List[str]]:
    rules = rules if rules is not None else DEFAULT_RULES
    table = rules.get("column_candidates") or {}
    return {role: [str(c) for c in table.get(role, [])] for role in ROLES}


def non_data_patterns_from_rules(rules: Optional[Mapping[str, Any]] = None) -> List[str]:
    rules = rules if rules is not None else DEFAULT_RULES
    return [str(p) for p in rules.get("non_data_sheet_patterns", [])]


def palette_from_rules(rules: Optional[Mapping[str, Any]] = None) -> List[str]:
    rules = rules if rules is not None else DEFAULT_RULES
    return [str(c) for c in rules.get("palette", [])] or list(DEFAULT_RULES["palette"])
