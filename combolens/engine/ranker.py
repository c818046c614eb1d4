"""Estimated strategic value of keyword combinations.

Scores phrases with a weighted composite so generation can visit the most
valuable phrases first when the keyword set is too large to enumerate.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from ..parser.tokenizer import Keyword


class ValueProfile(Enum):
    """Predefined value profiles for different keyword strategies."""
    DEFAULT = "default"          # Balanced scoring
    LONG_TAIL = "long_tail"      # Prioritize longer, specific phrases
    DISTINCTIVE = "distinctive"  # Prioritize phrases built from rare words


@dataclass
class ValueWeights:
    """Weights for the composite value score."""
    length: float = 0.40       # Phrase length sweet spot
    rarity: float = 0.40       # How rarely the words repeat across fields
    specificity: float = 0.20  # Longer words are more specific search terms


VALUE_PROFILES: dict[ValueProfile, ValueWeights] = {
    ValueProfile.DEFAULT: ValueWeights(
        length=0.40,
        rarity=0.40,
        specificity=0.20
    ),
    ValueProfile.LONG_TAIL: ValueWeights(
        length=0.55,
        rarity=0.15,
        specificity=0.30
    ),
    ValueProfile.DISTINCTIVE: ValueWeights(
        length=0.20,
        rarity=0.60,
        specificity=0.20
    ),
}


# Base 50 plus the length bonus: 3-word phrases are the most valuable,
# 4-word phrases are specific but rarely searched verbatim
LENGTH_SCORES: dict[int, int] = {
    1: 40,
    2: 60,
    3: 70,
    4: 65,
}
LONG_PHRASE_SCORE = 55

# Word length at which specificity saturates
_SPECIFICITY_CAP = 10

# Absorbs float summation order when comparing bounds with real scores
_BOUND_SLACK = 1e-9


def keyword_frequencies(keywords: Iterable[Keyword]) -> Counter[str]:
    """Count how often each keyword text occurs across the given fields."""
    return Counter(kw.text for kw in keywords)


class ValueRanker:
    """Scores and orders phrases by estimated strategic value."""

    def __init__(
        self,
        profile: ValueProfile = ValueProfile.DEFAULT,
        custom_weights: ValueWeights | None = None
    ):
        """Initialize ranker with a value profile.

        Args:
            profile: Predefined value profile to use
            custom_weights: Optional custom weights (overrides profile)
        """
        self.profile = profile
        self.weights = custom_weights or VALUE_PROFILES[profile]

    def score(
        self,
        words: Sequence[str],
        frequencies: Mapping[str, int]
    ) -> float:
        """Get the composite value for a phrase.

        Args:
            words: Phrase words
            frequencies: Keyword frequencies for the current run

        Returns:
            Value score (0-100)
        """
        return self._combine(self._components(words, frequencies))

    def keyword_score(self, word: str, frequencies: Mapping[str, int]) -> float:
        """Get the value a single keyword contributes to any phrase.

        Used to order the generator's search; length does not apply.
        """
        rarity, specificity = self.word_components(word, frequencies)
        total = self.weights.rarity + self.weights.specificity
        if total <= 0:
            return 0.0
        return round(
            (rarity * self.weights.rarity + specificity * self.weights.specificity) / total,
            2
        )

    def upper_bound(
        self,
        length: int,
        rarity_total: float,
        specificity_total: float
    ) -> float:
        """Get the highest value a phrase can reach from its component totals.

        The totals are upper bounds on the summed per-word contributions
        (see ``word_components``) of a phrase with ``length`` words. A phrase
        whose real totals stay at or below them never scores above the
        returned value.
        """
        return self._combine(
            self._averaged(length, rarity_total + _BOUND_SLACK, specificity_total + _BOUND_SLACK)
        )

    @staticmethod
    def word_components(word: str, frequencies: Mapping[str, int]) -> tuple[float, float]:
        """Rarity and specificity one word adds to a phrase total (unrounded)."""
        rarity = 100 / max(1, frequencies.get(word, 1))
        specificity = min(len(word), _SPECIFICITY_CAP) / _SPECIFICITY_CAP * 100
        return rarity, specificity

    @staticmethod
    def length_score(length: int) -> float:
        return float(LENGTH_SCORES.get(length, LONG_PHRASE_SCORE))

    def get_score_breakdown(
        self,
        words: Sequence[str],
        frequencies: Mapping[str, int]
    ) -> dict[str, float | dict[str, float]]:
        """Get detailed value breakdown for a phrase.

        Returns:
            Dictionary with component scores and final score
        """
        components = self._components(words, frequencies)

        return {
            "length": components["length"],
            "rarity": components["rarity"],
            "specificity": components["specificity"],
            "length_weighted": components["length"] * self.weights.length,
            "rarity_weighted": components["rarity"] * self.weights.rarity,
            "specificity_weighted": components["specificity"] * self.weights.specificity,
            "final_score": self.score(words, frequencies),
            "weights": {
                "length": self.weights.length,
                "rarity": self.weights.rarity,
                "specificity": self.weights.specificity,
            }
        }

    def _combine(self, components: Mapping[str, float]) -> float:
        value = (
            components["length"] * self.weights.length +
            components["rarity"] * self.weights.rarity +
            components["specificity"] * self.weights.specificity
        )
        return round(max(0.0, min(100.0, value)), 2)

    def _components(
        self,
        words: Sequence[str],
        frequencies: Mapping[str, int]
    ) -> dict[str, float]:
        rarity = 0.0
        specificity = 0.0
        for word in words:
            word_rarity, word_specificity = self.word_components(word, frequencies)
            rarity += word_rarity
            specificity += word_specificity
        return self._averaged(len(words), rarity, specificity)

    def _averaged(
        self,
        length: int,
        rarity_total: float,
        specificity_total: float
    ) -> dict[str, float]:
        """Mean rarity and specificity (0-100) plus the length score."""
        if length <= 0:
            return {"length": self.length_score(length), "rarity": 0.0, "specificity": 0.0}
        return {
            "length": self.length_score(length),
            "rarity": round(rarity_total / length, 2),
            "specificity": round(specificity_total / length, 2),
        }
