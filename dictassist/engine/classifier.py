"""Weighted keyword scoring for clinical context detection.

The classifier is domain-agnostic: it scores text against an ordered list of
KeywordGroup and reports the winner with a confidence that is the winner's
share of all matched signal. It is used once with modality groups and once
with body part groups.
"""

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from dictassist.engine.schemas import DetectionResult, KeywordGroup

logger = logging.getLogger(__name__)

# Shorter text is too thin to classify
MIN_TEXT_LENGTH = 10
# Never claim certainty
MAX_CONFIDENCE = 99

_NOT_AFTER_WORD = r"(?<![0-9A-Za-z_])"
_NOT_BEFORE_WORD = r"(?![0-9A-Za-z_])"


def word_pattern(literal: str) -> re.Pattern:
    """Compile a case-insensitive whole-token matcher for an untrusted literal.

    Lookarounds stand in for \\b so literals that start or end with
    punctuation ("x-ray", ".nml") still match as whole tokens. Only ASCII
    letters, digits and underscore count as word characters, as with a
    browser \\b; case folding stays Unicode-aware.
    """
    return re.compile(_NOT_AFTER_WORD + re.escape(literal) + _NOT_BEFORE_WORD, re.IGNORECASE)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class GroupScore:
    label: str
    score: float
    matched_keywords: tuple[str, ...]


class KeywordClassifier:
    """Scores text against a fixed, ordered set of keyword groups."""

    def __init__(self, groups: Sequence[KeywordGroup]):
        self.groups = tuple(groups)
        self._compiled = [
            (group, [(kw, word_pattern(kw)) for kw in group.keywords])
            for group in self.groups
        ]

    def rank(self, text: str) -> list[GroupScore]:
        """All groups with a positive score, best first.

        Ties keep configuration order (the sort is stable).
        """
        scores = []
        for group, patterns in self._compiled:
            score = 0.0
            matched: list[str] = []
            seen: set[str] = set()
            for keyword, pattern in patterns:
                count = len(pattern.findall(text))
                if not count:
                    continue
                score += count * group.weight
                key = keyword.lower()
                if key not in seen:
                    seen.add(key)
                    matched.append(keyword)
            if score > 0:
                scores.append(GroupScore(group.label, score, tuple(matched)))
        scores.sort(key=lambda s: -s.score)
        return scores

    def classify(self, text: str | None) -> DetectionResult | None:
        """Return the best label for ``text``, or None if too short or unmatched."""
        if text is None or len(text.strip()) < MIN_TEXT_LENGTH:
            return None
        ranked = self.rank(text)
        if not ranked:
            return None

        best = ranked[0]
        total = sum(s.score for s in ranked)
        confidence = min(MAX_CONFIDENCE, _round_half_up(best.score / total * 100))
        logger.debug(
            "Classified as %s (score %.2f of %.2f, %d candidates)",
            best.label, best.score, total, len(ranked),
        )
        return DetectionResult(
            label=best.label,
            confidence=confidence,
            matched_keywords=best.matched_keywords,
        )


@lru_cache(maxsize=32)
def _cached_classifier(groups: tuple[KeywordGroup, ...]) -> KeywordClassifier:
    return KeywordClassifier(groups)


def classifier_for(groups: Sequence[KeywordGroup]) -> KeywordClassifier:
    """Shared KeywordClassifier for a group set, compiled once per distinct set."""
    return _cached_classifier(tuple(groups))


def classify(text: str | None, groups: Sequence[KeywordGroup]) -> DetectionResult | None:
    """Functional form of KeywordClassifier.classify. Compiled patterns are cached per group set."""
    return classifier_for(groups).classify(text)


def rank(text: str, groups: Sequence[KeywordGroup]) -> list[GroupScore]:
    return classifier_for(groups).rank(text)
