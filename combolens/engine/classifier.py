"""Combination strength classification.

Assigns every combination one of six strength tiers from where and how its
words occur in the title and subtitle. Ranking power falls from phrases that
sit adjacent in the title, through title + subtitle combinations, down to
subtitle-only phrases. Any combination that exists can rank; the tier only
says how strongly.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from ..parser.tokenizer import Field, normalize_words
from .position import analyze_in_words, phrase_words


class StrengthTier(Enum):
    """Strength tiers, strongest first."""
    TITLE_CONSECUTIVE = "title_consecutive"
    TITLE_NON_CONSECUTIVE = "title_non_consecutive"
    CROSS_ELEMENT = "cross_element"
    SUBTITLE_CONSECUTIVE = "subtitle_consecutive"
    SUBTITLE_NON_CONSECUTIVE = "subtitle_non_consecutive"
    MISSING = "missing"

    @property
    def rank(self) -> int:
        """1 for the strongest tier, 6 for missing."""
        return TIER_ORDER.index(self) + 1

    @property
    def score(self) -> int:
        """Ranking power (0-100)."""
        return TIER_SCORES[self]

    @property
    def label(self) -> str:
        return TIER_LABELS[self]

    @property
    def exists(self) -> bool:
        return self is not StrengthTier.MISSING


TIER_ORDER: list[StrengthTier] = [
    StrengthTier.TITLE_CONSECUTIVE,
    StrengthTier.TITLE_NON_CONSECUTIVE,
    StrengthTier.CROSS_ELEMENT,
    StrengthTier.SUBTITLE_CONSECUTIVE,
    StrengthTier.SUBTITLE_NON_CONSECUTIVE,
    StrengthTier.MISSING,
]

TIER_SCORES: dict[StrengthTier, int] = {
    StrengthTier.TITLE_CONSECUTIVE: 100,
    StrengthTier.TITLE_NON_CONSECUTIVE: 85,
    StrengthTier.CROSS_ELEMENT: 70,
    StrengthTier.SUBTITLE_CONSECUTIVE: 50,
    StrengthTier.SUBTITLE_NON_CONSECUTIVE: 30,
    StrengthTier.MISSING: 0,
}

TIER_LABELS: dict[StrengthTier, str] = {
    StrengthTier.TITLE_CONSECUTIVE: "Excellent",
    StrengthTier.TITLE_NON_CONSECUTIVE: "Good",
    StrengthTier.CROSS_ELEMENT: "Medium",
    StrengthTier.SUBTITLE_CONSECUTIVE: "Medium",
    StrengthTier.SUBTITLE_NON_CONSECUTIVE: "Poor",
    StrengthTier.MISSING: "Missing",
}

SUGGESTIONS: dict[StrengthTier, str] = {
    StrengthTier.TITLE_NON_CONSECUTIVE: "Make the words adjacent in the title for maximum ranking power",
    StrengthTier.CROSS_ELEMENT: "Consolidate all words into the title to strengthen",
    StrengthTier.SUBTITLE_CONSECUTIVE: "Move the phrase to the title to strengthen",
    StrengthTier.SUBTITLE_NON_CONSECUTIVE: "Move to the title and make the words adjacent",
    StrengthTier.MISSING: "Reorder or relocate existing words into the title to form this phrase",
}


@dataclass(frozen=True)
class StrengthClassification:
    """Strength tier and strengthening opportunity for one combination."""
    strength: StrengthTier
    is_consecutive: bool = False
    can_strengthen: bool = False
    suggestion: str | None = None


class StrengthClassifier:
    """Classifies combinations against one title/subtitle pair.

    Both fields are normalized once at construction; classify() is then a
    pure function of the phrase.
    """

    def __init__(self, title_text: str, subtitle_text: str):
        self.title_text = title_text or ""
        self.subtitle_text = subtitle_text or ""
        self._title = normalize_words(self.title_text, Field.TITLE)
        self._subtitle = normalize_words(self.subtitle_text, Field.SUBTITLE)
        self._title_counts = Counter(w.text for w in self._title)
        self._joint_counts = self._title_counts + Counter(w.text for w in self._subtitle)

    def classify(self, phrase: str) -> StrengthClassification:
        """Classify a phrase.

        Args:
            phrase: Combination text (e.g. "meditation sleep")

        Returns:
            StrengthClassification with exactly one tier
        """
        words = phrase_words(phrase)
        if not words:
            return StrengthClassification(strength=StrengthTier.MISSING)

        in_title = analyze_in_words(words, self._title)
        if in_title.exists and in_title.is_consecutive:
            return StrengthClassification(
                strength=StrengthTier.TITLE_CONSECUTIVE,
                is_consecutive=True,
                can_strengthen=False,
            )
        if in_title.exists:
            return self._strengthenable(StrengthTier.TITLE_NON_CONSECUTIVE)

        if self._is_cross_element(words):
            return self._strengthenable(StrengthTier.CROSS_ELEMENT)

        in_subtitle = analyze_in_words(words, self._subtitle)
        if in_subtitle.exists and in_subtitle.is_consecutive:
            return self._strengthenable(StrengthTier.SUBTITLE_CONSECUTIVE, consecutive=True)
        if in_subtitle.exists:
            return self._strengthenable(StrengthTier.SUBTITLE_NON_CONSECUTIVE)

        # Missing: strengthenable only if no new vocabulary is needed
        if all(self._joint_counts[w] > 0 for w in words):
            return self._strengthenable(StrengthTier.MISSING)
        return StrengthClassification(strength=StrengthTier.MISSING)

    def _is_cross_element(self, words: list[str]) -> bool:
        """True if title and subtitle together supply every word, with at
        least one word coming from the title."""
        if not any(self._title_counts[w] > 0 for w in words):
            return False
        needed = Counter(words)
        return all(self._joint_counts[w] >= n for w, n in needed.items())

    @staticmethod
    def _strengthenable(
        tier: StrengthTier,
        consecutive: bool = False
    ) -> StrengthClassification:
        return StrengthClassification(
            strength=tier,
            is_consecutive=consecutive,
            can_strengthen=True,
            suggestion=SUGGESTIONS[tier],
        )


def classify(phrase: str, title_text: str, subtitle_text: str) -> StrengthClassification:
    """Convenience function to classify a single phrase.

    Args:
        phrase: Combination text
        title_text: App title
        subtitle_text: App subtitle

    Returns:
        StrengthClassification for the phrase
    """
    return StrengthClassifier(title_text, subtitle_text).classify(phrase)
