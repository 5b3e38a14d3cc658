"""Macro expansion: rewrite trigger words in dictated text.

Macros are applied one after another, each against the text as rewritten by
the macros before it. There is a single pass over the macro list and no
re-scan, so a replacement containing a later macro's trigger will be
expanded by that later macro, but expansion always finishes after exactly
one match/replace per macro.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from dictassist.engine.classifier import word_pattern
from dictassist.engine.schemas import Macro

logger = logging.getLogger(__name__)


@dataclass
class AppliedMacro:
    name: str
    replacement: str
    count: int


@dataclass
class ExpansionReport:
    text: str
    applied: list[AppliedMacro] = field(default_factory=list)
    operations: int = 0
    skipped: int = 0
    inactive: int = 0


def _coerce_macro(entry: Macro | Mapping[str, Any]) -> Macro | None:
    if isinstance(entry, Macro):
        return entry
    try:
        return Macro.model_validate(entry)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "entry" for err in e.errors())
        logger.warning("Skipping malformed macro entry (%s)", fields)
        return None


def resolve_replacement(macro: Macro, body_part_context: str | None) -> str:
    """Pick the context-specific text for a smart macro, else its default text."""
    if macro.is_smart_macro and macro.context_expansions and body_part_context is not None:
        wanted = body_part_context.casefold()
        for expansion in macro.context_expansions:
            if expansion.body_part.casefold() == wanted:
                return expansion.text
    return macro.replacement_text


class MacroExpander:
    def expand_with_report(
        self,
        text: str,
        macros: Iterable[Macro | Mapping[str, Any]],
        body_part_context: str | None = None,
    ) -> ExpansionReport:
        report = ExpansionReport(text=text)
        for entry in macros:
            macro = _coerce_macro(entry)
            if macro is None:
                report.skipped += 1
                continue
            if not macro.is_active:
                report.inactive += 1
                continue
            try:
                pattern = word_pattern(macro.name)
            except re.error as e:
                logger.warning("Skipping macro %r: trigger does not compile (%s)", macro.name, e)
                report.skipped += 1
                continue

            replacement = resolve_replacement(macro, body_part_context)
            # Function replacement keeps backslashes in the text literal
            report.text, count = pattern.subn(lambda _m: replacement, report.text)
            report.operations += 1
            if count:
                report.applied.append(AppliedMacro(macro.name, replacement, count))
                logger.debug("Expanded %r %d time(s)", macro.name, count)
        return report

    def expand(
        self,
        text: str,
        macros: Iterable[Macro | Mapping[str, Any]],
        body_part_context: str | None = None,
    ) -> str:
        return self.expand_with_report(text, macros, body_part_context).text


_default_expander = MacroExpander()


def expand(
    text: str,
    macros: Iterable[Macro | Mapping[str, Any]],
    body_part_context: str | None = None,
) -> str:
    """Rewrite every macro trigger in ``text``; returns ``text`` unchanged if nothing matches."""
    return _default_expander.expand(text, macros, body_part_context)
