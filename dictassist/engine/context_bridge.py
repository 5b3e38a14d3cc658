"""Keeps the latest detections for a dictation buffer and feeds the body part
into macro expansion.

Call ``update()`` on every text change. Each call fully recomputes; only the
latest result is kept. Body part detection always runs, modality detection
only when auto-detect is on.
"""

import enum
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from dictassist.engine.classifier import KeywordClassifier, classifier_for
from dictassist.engine.expander import ExpansionReport, MacroExpander
from dictassist.engine.schemas import DetectionResult, KeywordGroup, Macro

logger = logging.getLogger(__name__)


class BridgeState(str, enum.Enum):
    EMPTY = "empty"
    CLASSIFIED = "classified"


@dataclass(frozen=True)
class DetectionSnapshot:
    text: str
    body_part: DetectionResult | None
    modality: DetectionResult | None


class ContextBridge:
    def __init__(
        self,
        modality_groups: Sequence[KeywordGroup],
        body_part_groups: Sequence[KeywordGroup],
        auto_detect: bool = False,
        expander: MacroExpander | None = None,
    ):
        self._modality = classifier_for(modality_groups)
        self._body_part = classifier_for(body_part_groups)
        self._expander = expander or MacroExpander()
        self.auto_detect = auto_detect
        self._latest: DetectionSnapshot | None = None

    @property
    def modality_classifier(self) -> KeywordClassifier:
        return self._modality

    @property
    def body_part_classifier(self) -> KeywordClassifier:
        return self._body_part

    @property
    def state(self) -> BridgeState:
        return BridgeState.EMPTY if self._latest is None else BridgeState.CLASSIFIED

    @property
    def latest(self) -> DetectionSnapshot | None:
        return self._latest

    @property
    def body_part_context(self) -> str | None:
        if self._latest is None or self._latest.body_part is None:
            return None
        return self._latest.body_part.label

    @property
    def modality_label(self) -> str | None:
        if self._latest is None or self._latest.modality is None:
            return None
        return self._latest.modality.label

    def update(self, text: str) -> DetectionSnapshot:
        body_part = self._body_part.classify(text)
        modality = self._modality.classify(text) if self.auto_detect else None
        self._latest = DetectionSnapshot(text=text, body_part=body_part, modality=modality)
        logger.debug(
            "Context updated: body_part=%s modality=%s",
            body_part.label if body_part else None,
            modality.label if modality else None,
        )
        return self._latest

    def reset(self):
        self._latest = None

    def expand_with_report(self, text: str, macros: Iterable[Macro | Mapping[str, Any]]) -> ExpansionReport:
        return self._expander.expand_with_report(text, macros, self.body_part_context)

    def expand(self, text: str, macros: Iterable[Macro | Mapping[str, Any]]) -> str:
        """Expand with the current body part as context. Macros must be a fresh snapshot."""
        return self.expand_with_report(text, macros).text
