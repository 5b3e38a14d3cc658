"""Default keyword tables for modality and body part detection.

Group order matters: when two groups score the same, the one listed first
wins. Keywords are matched case-insensitively as whole tokens, so a short
keyword like "ct" never fires inside "contact" or "section".

A deployment can swap these out with a JSON file of the same shape:

    {"modality": [{"label": "CT", "keywords": ["ct"], "weight": 1.0}, ...],
     "body_part": [...]}
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from dictassist.engine.schemas import KeywordGroup, PatternTable
from dictassist.errors import PatternTableError

logger = logging.getLogger(__name__)

MODALITY_KEYWORDS: list[tuple[str, list[str], float]] = [
    ("CT", [
        "ct", "ct scan", "computed tomography", "cat scan", "cta",
        "hounsfield", "hounsfield units", "non-contrast ct",
    ], 1.0),
    ("MRI", [
        "mri", "mr", "magnetic resonance", "t1", "t2", "t1-weighted",
        "t2-weighted", "flair", "gadolinium", "diffusion-weighted", "stir",
    ], 1.0),
    ("X-Ray", [
        "x-ray", "xray", "x-rays", "radiograph", "radiographs", "radiographic",
        "plain film", "cxr", "ap view", "lateral view",
    ], 1.0),
    ("Ultrasound", [
        "ultrasound", "sonographic", "sonography", "sonogram", "doppler",
        "echogenic", "hypoechoic", "hyperechoic", "anechoic", "transducer",
    ], 1.0),
    ("PET", [
        "pet", "pet-ct", "pet scan", "positron emission", "fdg", "suv",
        "suvmax", "hypermetabolic",
    ], 1.2),
    ("Mammography", [
        "mammogram", "mammography", "mammographic", "bi-rads", "birads",
        "tomosynthesis", "craniocaudal", "mediolateral oblique",
    ], 1.2),
    ("Fluoroscopy", [
        "fluoroscopy", "fluoroscopic", "barium swallow", "barium enema",
        "contrast swallow", "oesophagram", "esophagram", "screening time",
    ], 1.2),
    ("Nuclear Medicine", [
        "nuclear medicine", "scintigraphy", "radiotracer", "technetium",
        "bone scan", "spect", "v/q scan", "ventilation perfusion",
    ], 1.2),
]

BODY_PART_KEYWORDS: list[tuple[str, list[str], float]] = [
    ("Head", [
        "head", "brain", "skull", "intracranial", "cerebral", "cerebellum",
        "ventricles", "sinus", "sinuses", "orbit", "orbits",
    ], 1.0),
    ("Neck", [
        "neck", "thyroid", "larynx", "pharynx", "carotid", "parotid",
        "submandibular", "trachea",
    ], 1.0),
    ("Chest", [
        "chest", "thorax", "lung", "lungs", "pulmonary", "pleural",
        "mediastinum", "mediastinal", "hilar", "heart", "cardiac", "rib", "ribs",
    ], 1.0),
    ("Abdomen", [
        "abdomen", "abdominal", "liver", "hepatic", "spleen", "pancreas",
        "kidney", "kidneys", "renal", "gallbladder", "bowel", "appendix",
    ], 1.0),
    ("Pelvis", [
        "pelvis", "pelvic", "bladder", "uterus", "endometrium", "ovary",
        "ovaries", "prostate", "rectum", "adnexa",
    ], 1.0),
    ("Spine", [
        "spine", "spinal", "vertebra", "vertebral", "lumbar", "cervical spine",
        "thoracic spine", "disc", "sacrum", "sacral", "foraminal",
    ], 1.0),
    ("Upper Extremity", [
        "shoulder", "elbow", "wrist", "hand", "humerus", "forearm", "finger",
        "fingers", "radius", "ulna", "clavicle", "rotator cuff",
    ], 1.0),
    ("Lower Extremity", [
        "hip", "knee", "ankle", "foot", "femur", "tibia", "fibula", "toe",
        "toes", "calf", "achilles", "meniscus",
    ], 1.0),
]


def _build(rows: list[tuple[str, list[str], float]]) -> tuple[KeywordGroup, ...]:
    return tuple(KeywordGroup(label=label, keywords=keywords, weight=weight) for label, keywords, weight in rows)


def default_modality_groups() -> tuple[KeywordGroup, ...]:
    return _build(MODALITY_KEYWORDS)


def default_body_part_groups() -> tuple[KeywordGroup, ...]:
    return _build(BODY_PART_KEYWORDS)


def default_pattern_table() -> PatternTable:
    return PatternTable(modality=default_modality_groups(), body_part=default_body_part_groups())


def load_pattern_table(path: Path) -> PatternTable:
    """Load a pattern table from JSON. Raises PatternTableError if invalid."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PatternTableError(f"Cannot read pattern table {path}: {e}") from e
    try:
        table = PatternTable.model_validate(raw)
    except ValidationError as e:
        raise PatternTableError(f"Invalid pattern table {path}: {e}") from e
    if not table.modality or not table.body_part:
        raise PatternTableError(f"Pattern table {path} needs at least one modality and one body part group")
    logger.info(
        "Loaded pattern table from %s (%d modality, %d body part groups)",
        path, len(table.modality), len(table.body_part),
    )
    return table
