import json

import pytest

from tutorlog.config import DEFAULT_RULES, load_rules
from tutorlog.pipeline import AnalysisConfig
from tutorlog.slots import ConfigError
from tutorlog.utils import RULES_ENV, rules_path, slugify


def test_missing_file_gives_defaults(tmp_path):
    assert load_rules(tmp_path / "nope.json") == DEFAULT_RULES


def test_partial_override_is_merged(tmp_path):
    p = tmp_path / "rules.json"
    p.write_text(json.dumps({"column_candidates": {"tutor": ["Coach"]}}), encoding="utf-8")
    rules = load_rules(p)
    assert rules["column_candidates"]["tutor"] == ["Coach"]
    assert rules["column_candidates"]["date"] == DEFAULT_RULES["column_candidates"]["date"]
    assert rules["time_slots"] == DEFAULT_RULES["time_slots"]


def test_non_object_and_broken_files(tmp_path):
    p = tmp_path / "rules.json"
    p.write_text("[1, 2, 3]", encoding="utf-8")
    assert load_rules(p) == DEFAULT_RULES
    p.write_text("{not json", encoding="utf-8")
    assert load_rules(p) == DEFAULT_RULES


def test_load_rules_does_not_mutate_defaults(tmp_path):
    rules = load_rules(tmp_path / "nope.json")
    rules["column_candidates"]["tutor"].append("Mentor")
    assert "Mentor" not in DEFAULT_RULES["column_candidates"]["tutor"]


def test_env_var_points_to_rules(tmp_path, monkeypatch):
    p = tmp_path / "custom.json"
    p.write_text(json.dumps({"time_slots": [{"label": "Morning", "start": "08:00", "end": "12:00"}]}), encoding="utf-8")
    monkeypatch.setenv(RULES_ENV, str(p))
    assert rules_path() == p
    cfg = AnalysisConfig.from_rules(load_rules())
    assert [s.label for s in cfg.slots] == ["Morning"]
    assert cfg.slots[0].start_min == 480


def test_custom_candidates_and_slots():
    cfg = AnalysisConfig.from_rules({
        "column_candidates": {
            "date": ["When"], "sign_in": ["In"], "tutor": ["Coach"], "subject": ["Topic"],
        },
        "time_slots": [{"label": "AM", "start": 0, "end": 720}, {"label": "PM", "start": 720, "end": 1440}],
    })
    assert cfg.candidates["duration"] == []
    assert cfg.palette == tuple(DEFAULT_RULES["palette"])
    assert [s.label for s in cfg.slots] == ["AM", "PM"]


def test_bad_slot_rules_raise():
    with pytest.raises(ConfigError):
        AnalysisConfig.from_rules({"time_slots": [{"label": "x", "start": "12:00", "end": "11:00"}]})


def test_slugify():
    assert slugify("September 2024") == "september-2024"
    assert slugify("  Fall  Semester / 2025 ") == "fall-semester-2025"
