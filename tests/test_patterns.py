"""Tests for keyword group invariants and pattern table loading."""

import json

import pytest


def test_default_tables_cover_glossary():
    from dictassist.engine.patterns import default_pattern_table

    table = default_pattern_table()
    assert [g.label for g in table.modality] == [
        "CT", "MRI", "X-Ray", "Ultrasound", "PET", "Mammography", "Fluoroscopy", "Nuclear Medicine",
    ]
    assert [g.label for g in table.body_part] == [
        "Head", "Neck", "Chest", "Abdomen", "Pelvis", "Spine", "Upper Extremity", "Lower Extremity",
    ]


@pytest.mark.parametrize("kwargs", [
    {"label": "CT", "keywords": [], "weight": 1.0},
    {"label": "CT", "keywords": ["  "], "weight": 1.0},
    {"label": "CT", "keywords": ["ct"], "weight": 0},
    {"label": "CT", "keywords": ["ct"], "weight": -2},
    {"label": "CT&MRI", "keywords": ["ct"], "weight": 1.0},
    {"label": "a/b", "keywords": ["ct"], "weight": 1.0},
    {"label": "", "keywords": ["ct"], "weight": 1.0},
])
def test_keyword_group_invariants(kwargs):
    from pydantic import ValidationError

    from dictassist.engine.schemas import KeywordGroup

    with pytest.raises(ValidationError):
        KeywordGroup(**kwargs)


def test_load_pattern_table(tmp_path):
    from dictassist.engine.classifier import classify
    from dictassist.engine.patterns import load_pattern_table

    path = tmp_path / "patterns.json"
    path.write_text(json.dumps({
        "modality": [{"label": "DEXA", "keywords": ["dexa", "t-score"], "weight": 2}],
        "body_part": [{"label": "Hip", "keywords": ["hip", "femoral neck"]}],
    }))
    table = load_pattern_table(path)
    assert table.modality[0].weight == 2.0
    assert classify("DEXA scan with T-score of -2.6", table.modality).label == "DEXA"
    assert classify("left femoral neck density", table.body_part).label == "Hip"


def test_load_pattern_table_rejects_bad_files(tmp_path):
    from dictassist.engine.patterns import load_pattern_table
    from dictassist.errors import PatternTableError

    missing = tmp_path / "missing.json"
    with pytest.raises(PatternTableError):
        load_pattern_table(missing)

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(PatternTableError):
        load_pattern_table(broken)

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"modality": [{"label": "CT", "keywords": []}], "body_part": []}))
    with pytest.raises(PatternTableError):
        load_pattern_table(invalid)

    empty = tmp_path / "empty.json"
    empty.write_text(json.dumps({"modality": [], "body_part": []}))
    with pytest.raises(PatternTableError):
        load_pattern_table(empty)


def test_settings_fall_back_to_default_table():
    from dictassist.config import Settings

    table = Settings(pattern_table_path=None).load_patterns()
    assert table.modality[0].label == "CT"
