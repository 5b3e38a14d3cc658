"""Request bodies for the JSON API (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from dictassist.engine.schemas import ContextExpansion


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DetectRequest(_Body):
    text: str
    auto_detect: bool | None = None  # None: use AUTO_DETECT_MODALITY


class ExpandRequest(_Body):
    text: str
    user_id: str | None = None
    body_part: str | None = None  # explicit context, skips detection
    detect: bool = True


class MacroCreateRequest(_Body):
    user_id: str
    name: str
    replacement_text: str
    is_active: bool = True
    is_smart_macro: bool = False
    context_expansions: list[ContextExpansion] | None = None
    category_id: str | None = None


class MacroUpdateRequest(_Body):
    user_id: str
    name: str | None = None
    replacement_text: str | None = None
    is_active: bool | None = None
    is_smart_macro: bool | None = None
    context_expansions: list[ContextExpansion] | None = None
    category_id: str | None = None
