"""SQLite-backed macro source.

Usage:
    from dictassist.macro_store import get_macro_store

    registry = get_macro_store().registry_for(user_id)
    text = expand(text, registry.active(), body_part)

Registries are built fresh on every call; callers must not hold on to one
across expansions or deleted macros will keep firing.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from dictassist.database import get_db
from dictassist.engine.registry import MacroRegistry
from dictassist.engine.schemas import ContextExpansion, Macro
from dictassist.errors import MacroNotFoundError, MacroValidationError
from dictassist.models import MacroRow

logger = logging.getLogger(__name__)

# Shared macros available to every user, applied after personal macros
GLOBAL_MACROS: list[dict[str, Any]] = [
    {
        "name": "nad",
        "replacement_text": "No acute abnormality detected.",
    },
    {
        "name": "nml",
        "replacement_text": "Within normal limits.",
        "is_smart": True,
        "smart_context": [
            {"bodyPart": "Chest", "text": "The lungs are clear bilaterally. No pleural effusion or pneumothorax."},
            {"bodyPart": "Abdomen", "text": "The liver, spleen, pancreas and kidneys are unremarkable."},
            {"bodyPart": "Head", "text": "No acute intracranial abnormality."},
            {"bodyPart": "Spine", "text": "Vertebral body heights and alignment are maintained."},
        ],
    },
    {
        "name": "cfp",
        "replacement_text": "Comparison is made with the prior study.",
    },
    {
        "name": "ccr",
        "replacement_text": "Clinical correlation is recommended.",
    },
]


def _clean_expansions(expansions: Iterable[ContextExpansion | Mapping[str, Any]] | None) -> list[dict] | None:
    if expansions is None:
        return None
    cleaned = []
    for item in expansions:
        try:
            exp = item if isinstance(item, ContextExpansion) else ContextExpansion.model_validate(item)
        except ValidationError as e:
            raise MacroValidationError(f"Invalid context expansion: {e}") from e
        cleaned.append(exp.model_dump(by_alias=True))
    return cleaned


def _clean_name(name: str | None) -> str:
    if not name or not name.strip():
        raise MacroValidationError("Name is required")
    return name.strip().lower()


def _clean_replacement(text: str | None) -> str:
    if not text or not text.strip():
        raise MacroValidationError("Replacement text is required")
    return text.strip()


class MacroStore:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_personal(self, user_id: str) -> list[Macro]:
        with self._session_factory() as session:
            rows = (
                session.query(MacroRow)
                .filter_by(user_id=user_id, is_global=False)
                .order_by(MacroRow.created_at.desc(), MacroRow.id.desc())
                .all()
            )
            return self._rows_to_macros(rows)

    def list_global(self) -> list[Macro]:
        with self._session_factory() as session:
            rows = (
                session.query(MacroRow)
                .filter_by(is_global=True)
                .order_by(MacroRow.id.asc())
                .all()
            )
            return self._rows_to_macros(rows)

    def registry_for(self, user_id: str | None) -> MacroRegistry:
        personal = self.list_personal(user_id) if user_id else []
        return MacroRegistry(personal, self.list_global())

    def get(self, macro_id: int) -> Macro:
        with self._session_factory() as session:
            row = session.query(MacroRow).filter_by(id=macro_id).first()
            if row is None:
                raise MacroNotFoundError(macro_id)
            return self._row_to_macro(row)

    # ------------------------------------------------------------------
    # Writes (personal macros only)
    # ------------------------------------------------------------------

    def create(
        self,
        user_id: str,
        name: str,
        replacement_text: str,
        is_active: bool = True,
        is_smart_macro: bool = False,
        context_expansions: Iterable[ContextExpansion | Mapping[str, Any]] | None = None,
        category_id: str | None = None,
    ) -> Macro:
        row = MacroRow(
            user_id=user_id,
            name=_clean_name(name),
            replacement_text=_clean_replacement(replacement_text),
            is_global=False,
            is_active=is_active,
            is_smart=is_smart_macro,
            smart_context=_clean_expansions(context_expansions),
            category_id=category_id,
        )
        with get_db(self._session_factory) as session:
            session.add(row)
            session.flush()
            macro = self._row_to_macro(row)
        logger.info("Created macro '%s' (id %s) for user %s", macro.name, macro.id, user_id)
        return macro

    def update(
        self,
        macro_id: int,
        user_id: str,
        name: str | None = None,
        replacement_text: str | None = None,
        is_active: bool | None = None,
        is_smart_macro: bool | None = None,
        context_expansions: Iterable[ContextExpansion | Mapping[str, Any]] | None = None,
        category_id: str | None = None,
    ) -> Macro:
        with get_db(self._session_factory) as session:
            row = self._owned_row(session, macro_id, user_id)
            if name is not None:
                row.name = _clean_name(name)
            if replacement_text is not None:
                row.replacement_text = _clean_replacement(replacement_text)
            if is_active is not None:
                row.is_active = is_active
            if is_smart_macro is not None:
                row.is_smart = is_smart_macro
            if context_expansions is not None:
                row.smart_context = _clean_expansions(context_expansions)
            if category_id is not None:
                row.category_id = category_id
            return self._row_to_macro(row)

    def delete(self, macro_id: int, user_id: str):
        with get_db(self._session_factory) as session:
            row = self._owned_row(session, macro_id, user_id)
            session.delete(row)
        logger.info("Deleted macro %s for user %s", macro_id, user_id)

    def toggle(self, macro_id: int, user_id: str) -> bool:
        with get_db(self._session_factory) as session:
            row = self._owned_row(session, macro_id, user_id)
            row.is_active = not row.is_active
            active = row.is_active
        return active

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed_global_macros(self):
        with get_db(self._session_factory) as session:
            existing = session.query(MacroRow).filter_by(is_global=True).count()
            if existing > 0:
                return  # Already seeded

            for item in GLOBAL_MACROS:
                session.add(MacroRow(
                    user_id=None,
                    name=item["name"],
                    replacement_text=item["replacement_text"],
                    is_global=True,
                    is_active=True,
                    is_smart=item.get("is_smart", False),
                    smart_context=item.get("smart_context"),
                ))
        logger.info("Seeded %d global macro(s)", len(GLOBAL_MACROS))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _owned_row(session, macro_id: int, user_id: str) -> MacroRow:
        row = (
            session.query(MacroRow)
            .filter_by(id=macro_id, user_id=user_id, is_global=False)
            .first()
        )
        if row is None:
            raise MacroNotFoundError(macro_id)
        return row

    @staticmethod
    def _row_to_macro(row: MacroRow) -> Macro:
        return Macro(
            id=row.id,
            name=row.name,
            replacement_text=row.replacement_text,
            is_active=row.is_active,
            is_global=row.is_global,
            is_smart_macro=row.is_smart,
            context_expansions=row.smart_context,
        )

    def _rows_to_macros(self, rows: list[MacroRow]) -> list[Macro]:
        macros = []
        for row in rows:
            try:
                macros.append(self._row_to_macro(row))
            except ValidationError:
                logger.warning("Skipping malformed macro row %s", row.id)
        return macros


# Module-level singleton, initialized lazily after database.py sets up SessionLocal
_macro_store: MacroStore | None = None


def get_macro_store() -> MacroStore:
    global _macro_store
    if _macro_store is None:
        from dictassist.database import SessionLocal
        _macro_store = MacroStore(SessionLocal)
    return _macro_store
