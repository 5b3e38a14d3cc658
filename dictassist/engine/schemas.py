"""Records exchanged with the detection and expansion engine.

JSON uses the camelCase names of the dictation front end
(``replacementText``, ``isSmartMacro``, ``contextExpansions``, ...);
Python code uses snake_case. Both spellings are accepted on input.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Labels may be forwarded as query parameters, so no separators
_LABEL_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 \-]*$")


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class KeywordGroup(_Record):
    """A weighted set of keywords that votes for one label."""
    label: str
    keywords: tuple[str, ...]
    weight: float = 1.0

    @field_validator("label")
    @classmethod
    def _plain_label(cls, v: str) -> str:
        v = v.strip()
        if not _LABEL_RE.match(v):
            raise ValueError(f"label {v!r} must contain only letters, digits, spaces and hyphens")
        return v

    @field_validator("keywords")
    @classmethod
    def _non_empty_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(k.strip() for k in v if k and k.strip())
        if not cleaned:
            raise ValueError("keywords must not be empty")
        return cleaned

    @field_validator("weight")
    @classmethod
    def _positive_weight(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("weight must be > 0")
        return v


class PatternTable(_Record):
    """Ordered modality and body part groups. Order is the tie-break order."""
    modality: tuple[KeywordGroup, ...]
    body_part: tuple[KeywordGroup, ...]


class DetectionResult(_Record):
    label: str
    confidence: int = Field(ge=0, le=99)
    matched_keywords: tuple[str, ...] = ()


class ContextExpansion(_Record):
    body_part: str
    text: str


class Macro(_Record):
    id: int | str | None = None
    name: str
    replacement_text: str
    is_active: bool = True
    is_global: bool = False
    is_smart_macro: bool = False
    context_expansions: tuple[ContextExpansion, ...] = ()

    @field_validator("name")
    @classmethod
    def _non_blank_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("context_expansions", mode="before")
    @classmethod
    def _coerce_expansions(cls, v: Any) -> Any:
        if v is None:
            return ()
        # Older rows store {"conditions": {"Chest": "..."}}
        if isinstance(v, dict):
            conditions = v.get("conditions") or {}
            return tuple({"body_part": k, "text": t} for k, t in conditions.items())
        return v
