"""Aggregate statistics over classified combinations."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .classifier import TIER_ORDER, StrengthClassification, StrengthTier
from .generator import CandidateCombination, ComboSource


@dataclass(frozen=True)
class ClassifiedCombination:
    """A candidate combination annotated with its classification."""
    combination: CandidateCombination
    classification: StrengthClassification

    @property
    def text(self) -> str:
        return self.combination.text

    @property
    def words(self) -> tuple[str, ...]:
        return self.combination.words

    @property
    def length(self) -> int:
        return self.combination.length

    @property
    def source(self) -> ComboSource:
        return self.combination.source

    @property
    def value(self) -> float:
        return self.combination.value

    @property
    def strength(self) -> StrengthTier:
        return self.classification.strength

    @property
    def is_consecutive(self) -> bool:
        return self.classification.is_consecutive

    @property
    def can_strengthen(self) -> bool:
        return self.classification.can_strengthen

    @property
    def suggestion(self) -> str | None:
        return self.classification.suggestion

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "text": self.text,
            "keywords": list(self.words),
            "length": self.length,
            "source": self.source.value,
            "strength": self.strength.value,
            "tier": self.strength.rank,
            "strengthScore": self.strength.score,
            "isConsecutive": self.is_consecutive,
            "canStrengthen": self.can_strengthen,
            "value": self.value,
        }
        if self.suggestion:
            result["strengtheningSuggestion"] = self.suggestion
        return result


@dataclass(frozen=True)
class AnalysisStats:
    """Summary of one analysis run."""
    total_possible: int = 0
    existing: int = 0
    missing: int = 0
    coverage_percent: float = 0.0
    tier_counts: Mapping[StrengthTier, int] = field(default_factory=dict)
    can_strengthen_count: int = 0
    truncated: bool = False
    length_counts: Mapping[int, int] = field(default_factory=dict)
    source_counts: Mapping[ComboSource, int] = field(default_factory=dict)

    def __post_init__(self):
        # Count tables are copied into read-only views
        for name in ("tier_counts", "length_counts", "source_counts"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPossible": self.total_possible,
            "existing": self.existing,
            "missing": self.missing,
            "coveragePercent": self.coverage_percent,
            "tierCounts": {tier.value: count for tier, count in self.tier_counts.items()},
            "canStrengthenCount": self.can_strengthen_count,
            "truncated": self.truncated,
            "lengthCounts": {str(n): count for n, count in self.length_counts.items()},
            "sourceCounts": {src.value: count for src, count in self.source_counts.items()},
        }


def summarize(
    combinations: Sequence[ClassifiedCombination],
    truncated: bool = False
) -> AnalysisStats:
    """Summarize classified combinations.

    Args:
        combinations: Classified combinations of one run
        truncated: Whether generation was capped

    Returns:
        AnalysisStats with every tier present in tier_counts
    """
    tier_counts = {tier: 0 for tier in TIER_ORDER}
    source_counts = {source: 0 for source in ComboSource}
    length_counts: dict[int, int] = {}
    can_strengthen = 0

    for combo in combinations:
        tier_counts[combo.strength] += 1
        source_counts[combo.source] += 1
        length_counts[combo.length] = length_counts.get(combo.length, 0) + 1
        if combo.can_strengthen:
            can_strengthen += 1

    total = len(combinations)
    missing = tier_counts[StrengthTier.MISSING]
    existing = total - missing

    return AnalysisStats(
        total_possible=total,
        existing=existing,
        missing=missing,
        coverage_percent=round(existing / total * 100, 1) if total else 0.0,
        tier_counts=tier_counts,
        can_strengthen_count=can_strengthen,
        truncated=truncated,
        length_counts=dict(sorted(length_counts.items())),
        source_counts=source_counts,
    )


def filter_by_keyword(
    combinations: Iterable[ClassifiedCombination],
    keyword: str
) -> list[ClassifiedCombination]:
    """Combinations with a word containing the keyword (case-insensitive)."""
    needle = keyword.lower().strip()
    return [c for c in combinations if any(needle in w for w in c.words)]


def count_with_keyword(
    combinations: Iterable[ClassifiedCombination],
    keyword: str
) -> int:
    """Number of combinations containing the keyword."""
    return len(filter_by_keyword(combinations, keyword))


def group_by_length(
    combinations: Iterable[ClassifiedCombination]
) -> dict[int, list[ClassifiedCombination]]:
    """Group combinations by word count, shortest first."""
    groups: dict[int, list[ClassifiedCombination]] = {}
    for combo in combinations:
        groups.setdefault(combo.length, []).append(combo)
    return dict(sorted(groups.items()))


def group_by_tier(
    combinations: Iterable[ClassifiedCombination]
) -> dict[StrengthTier, list[ClassifiedCombination]]:
    """Group combinations by strength tier, strongest tier first.

    Tiers without combinations are omitted.
    """
    groups: dict[StrengthTier, list[ClassifiedCombination]] = {}
    for combo in combinations:
        groups.setdefault(combo.strength, []).append(combo)
    return {tier: groups[tier] for tier in TIER_ORDER if tier in groups}


def strengthen_opportunities(
    combinations: Iterable[ClassifiedCombination]
) -> list[ClassifiedCombination]:
    """Combinations with a strengthening suggestion, weakest tier first.

    Within a tier, higher-value combinations come first.
    """
    candidates = [c for c in combinations if c.can_strengthen and c.suggestion]
    candidates.sort(key=lambda c: (-c.strength.rank, -c.value, c.text))
    return candidates
