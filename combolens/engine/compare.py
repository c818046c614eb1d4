"""Baseline vs draft comparison.

Compares two analysis runs (current metadata and a proposed edit) to show
which combinations a metadata change gains, loses, strengthens or weakens.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .analyzer import AnalysisResult
from .classifier import StrengthTier
from .stats import ClassifiedCombination


@dataclass
class TierChange:
    """A combination present in both runs with a different tier."""
    text: str
    baseline: StrengthTier
    draft: StrengthTier

    @property
    def improvement(self) -> int:
        """Positive when the draft moves the phrase to a stronger tier."""
        return self.baseline.rank - self.draft.rank

    @property
    def score_delta(self) -> int:
        return self.draft.score - self.baseline.score


@dataclass
class ComboDiff:
    """Differences between a baseline and a draft analysis."""
    added: list[ClassifiedCombination] = field(default_factory=list)
    removed: list[ClassifiedCombination] = field(default_factory=list)
    tier_upgrades: list[TierChange] = field(default_factory=list)
    tier_downgrades: list[TierChange] = field(default_factory=list)
    unchanged: list[ClassifiedCombination] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.tier_upgrades or self.tier_downgrades)


@dataclass
class TierBucket:
    baseline: int = 0
    draft: int = 0

    @property
    def delta(self) -> int:
        return self.draft - self.baseline


@dataclass
class KeywordImpact:
    """Combinations gained or lost with a single keyword."""
    keyword: str
    change: str  # "added" or "removed"
    combo_count: int
    avg_tier: float
    sample_combos: list[str] = field(default_factory=list)


def diff_results(baseline: AnalysisResult, draft: AnalysisResult) -> ComboDiff:
    """Diff two analyses by phrase text.

    Only existing combinations are compared: a missing combination is not
    part of the metadata's ranking footprint.

    Args:
        baseline: Analysis of the current metadata
        draft: Analysis of the proposed metadata

    Returns:
        ComboDiff with each list sorted by impact
    """
    base = {c.text: c for c in baseline.existing}
    new = {c.text: c for c in draft.existing}

    diff = ComboDiff()
    diff.added = [c for text, c in new.items() if text not in base]
    diff.removed = [c for text, c in base.items() if text not in new]

    for text, before in base.items():
        after = new.get(text)
        if after is None:
            continue
        if before.strength is after.strength:
            diff.unchanged.append(after)
            continue
        change = TierChange(text=text, baseline=before.strength, draft=after.strength)
        if change.improvement > 0:
            diff.tier_upgrades.append(change)
        else:
            diff.tier_downgrades.append(change)

    diff.added.sort(key=lambda c: (-c.strength.score, c.text))
    diff.removed.sort(key=lambda c: (-c.strength.score, c.text))
    diff.tier_upgrades.sort(key=lambda t: (-t.improvement, t.text))
    diff.tier_downgrades.sort(key=lambda t: (t.improvement, t.text))

    return diff


def tier_distribution(
    baseline: AnalysisResult,
    draft: AnalysisResult
) -> dict[str, TierBucket]:
    """Existing combination counts grouped as tier1 / tier2 / tier3_plus."""
    def bucket_of(tier: StrengthTier) -> str:
        if tier is StrengthTier.TITLE_CONSECUTIVE:
            return "tier1"
        if tier is StrengthTier.TITLE_NON_CONSECUTIVE:
            return "tier2"
        return "tier3_plus"

    buckets = {"tier1": TierBucket(), "tier2": TierBucket(), "tier3_plus": TierBucket()}
    for combo in baseline.existing:
        buckets[bucket_of(combo.strength)].baseline += 1
    for combo in draft.existing:
        buckets[bucket_of(combo.strength)].draft += 1
    return buckets


def keyword_impact(baseline: AnalysisResult, draft: AnalysisResult) -> list[KeywordImpact]:
    """Keywords added or removed by the draft and the combinations they carry.

    Returns:
        Impacts ordered by combination count (largest first)
    """
    def vocabulary(result: AnalysisResult) -> list[str]:
        seen: dict[str, None] = {}
        for combo in result.combinations:
            for word in combo.words:
                seen.setdefault(word, None)
        return list(seen)

    before = vocabulary(baseline)
    after = vocabulary(draft)

    impacts: list[KeywordImpact] = []
    for change, words, other, result in (
        ("added", after, set(before), draft),
        ("removed", before, set(after), baseline),
    ):
        for word in words:
            if word in other:
                continue
            combos = [c for c in result.existing if word in c.words]
            if not combos:
                continue
            avg = sum(c.strength.rank for c in combos) / len(combos)
            impacts.append(KeywordImpact(
                keyword=word,
                change=change,
                combo_count=len(combos),
                avg_tier=round(avg, 1),
                sample_combos=[c.text for c in combos[:3]],
            ))

    impacts.sort(key=lambda i: (-i.combo_count, i.keyword))
    return impacts
