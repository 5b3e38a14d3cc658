"""JSON API endpoints for detection, expansion and macro management."""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query

from dictassist.config import settings
from dictassist.engine.context_bridge import ContextBridge
from dictassist.engine.expander import MacroExpander
from dictassist.engine.schemas import PatternTable
from dictassist.errors import MacroNotFoundError, MacroValidationError
from dictassist.macro_store import MacroStore, get_macro_store
from dictassist.web.schemas import DetectRequest, ExpandRequest, MacroCreateRequest, MacroUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@lru_cache(maxsize=1)
def get_pattern_table() -> PatternTable:
    return settings.load_patterns()


def _dump(result):
    return result.model_dump(by_alias=True, mode="json") if result is not None else None


@router.get("/patterns")
def patterns(table: PatternTable = Depends(get_pattern_table)):
    return table.model_dump(by_alias=True, mode="json")


@router.post("/detect")
def detect(body: DetectRequest, table: PatternTable = Depends(get_pattern_table)):
    auto_detect = settings.auto_detect_modality if body.auto_detect is None else body.auto_detect
    bridge = ContextBridge(table.modality, table.body_part, auto_detect=auto_detect)
    snapshot = bridge.update(body.text)
    return {
        "bodyPart": _dump(snapshot.body_part),
        "modality": _dump(snapshot.modality),
        "autoDetect": auto_detect,
    }


@router.post("/expand")
def expand(
    body: ExpandRequest,
    table: PatternTable = Depends(get_pattern_table),
    store: MacroStore = Depends(get_macro_store),
):
    body_part = body.body_part
    if body_part is None and body.detect:
        bridge = ContextBridge(table.modality, table.body_part)
        bridge.update(body.text)
        body_part = bridge.body_part_context

    # Fresh snapshot on every call
    macros = store.registry_for(body.user_id).active()
    report = MacroExpander().expand_with_report(body.text, macros, body_part)
    return {
        "text": report.text,
        "bodyPart": body_part,
        "applied": [{"name": a.name, "replacement": a.replacement, "count": a.count} for a in report.applied],
        "skipped": report.skipped,
    }


@router.get("/macros")
def list_macros(
    user_id: str = Query("", alias="userId", description="Owner of the personal macros"),
    store: MacroStore = Depends(get_macro_store),
):
    registry = store.registry_for(user_id or None)
    return {
        "personal": [_dump(m) for m in registry.personal],
        "global": [_dump(m) for m in registry.global_macros],
    }


@router.post("/macros", status_code=201)
def create_macro(body: MacroCreateRequest, store: MacroStore = Depends(get_macro_store)):
    try:
        macro = store.create(
            body.user_id,
            body.name,
            body.replacement_text,
            is_active=body.is_active,
            is_smart_macro=body.is_smart_macro,
            context_expansions=body.context_expansions,
            category_id=body.category_id,
        )
    except MacroValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _dump(macro)


@router.put("/macros/{macro_id}")
def update_macro(macro_id: int, body: MacroUpdateRequest, store: MacroStore = Depends(get_macro_store)):
    try:
        macro = store.update(
            macro_id,
            body.user_id,
            name=body.name,
            replacement_text=body.replacement_text,
            is_active=body.is_active,
            is_smart_macro=body.is_smart_macro,
            context_expansions=body.context_expansions,
            category_id=body.category_id,
        )
    except MacroNotFoundError:
        raise HTTPException(status_code=404, detail="Macro not found")
    except MacroValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _dump(macro)


@router.delete("/macros/{macro_id}")
def delete_macro(
    macro_id: int,
    user_id: str = Query(..., alias="userId"),
    store: MacroStore = Depends(get_macro_store),
):
    try:
        store.delete(macro_id, user_id)
    except MacroNotFoundError:
        raise HTTPException(status_code=404, detail="Macro not found")
    return {"status": "ok", "message": f"Macro {macro_id} deleted"}
