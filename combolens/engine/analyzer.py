"""Combination analysis pipeline.

Runs tokenize -> generate -> classify -> summarize for one title/subtitle
pair and packages the outcome as an immutable AnalysisResult.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..parser.tokenizer import Field, Keyword, normalize_words, tokenize
from .classifier import StrengthClassifier, StrengthTier
from .errors import InvalidInputError
from .generator import CombinationGenerator, GenerationMode, GenerationOptions
from .ranker import ValueProfile, ValueRanker
from .stats import AnalysisStats, ClassifiedCombination, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisError:
    """Result-level error for input that cannot be analyzed."""
    code: str
    message: str


@dataclass(frozen=True)
class AnalysisResult:
    """Classified combinations and statistics for one title/subtitle pair."""
    title: str
    subtitle: str
    combinations: tuple[ClassifiedCombination, ...] = ()
    stats: AnalysisStats = field(default_factory=AnalysisStats)
    mode: GenerationMode = GenerationMode.FULL
    keyword_count: int = 0
    warnings: tuple[str, ...] = ()
    error: AnalysisError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def existing(self) -> list[ClassifiedCombination]:
        return [c for c in self.combinations if c.strength.exists]

    @property
    def missing(self) -> list[ClassifiedCombination]:
        return [c for c in self.combinations if not c.strength.exists]

    def get(self, text: str) -> ClassifiedCombination | None:
        """Look up a combination by its phrase text."""
        for combo in self.combinations:
            if combo.text == text:
                return combo
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "combinations": [c.to_dict() for c in self.combinations],
            "stats": self.stats.to_dict(),
            "mode": self.mode.value,
            "keywordCount": self.keyword_count,
            "warnings": list(self.warnings),
            "error": (
                {"code": self.error.code, "message": self.error.message}
                if self.error else None
            ),
        }


class Analyzer:
    """Generates and classifies keyword combinations."""

    def __init__(
        self,
        options: GenerationOptions | None = None,
        profile: ValueProfile = ValueProfile.DEFAULT,
        ranker: ValueRanker | None = None
    ):
        """Initialize analyzer.

        Args:
            options: Default generation options for every call
            profile: Value profile used to prioritize generation
            ranker: Optional ranker (overrides profile)
        """
        self.options = options or GenerationOptions()
        self.ranker = ranker or ValueRanker(profile=profile)

    def analyze(
        self,
        title_text: str,
        subtitle_text: str,
        options: GenerationOptions | None = None
    ) -> AnalysisResult:
        """Analyze a title/subtitle pair.

        Args:
            title_text: App title
            subtitle_text: App subtitle
            options: Per-call options (defaults to the analyzer's options)

        Returns:
            AnalysisResult; invalid input yields a result with ``error`` set
        """
        return self.analyze_keywords(
            title_text,
            subtitle_text,
            tokenize(title_text, Field.TITLE),
            tokenize(subtitle_text, Field.SUBTITLE),
            options=options,
        )

    def analyze_keywords(
        self,
        title_text: str,
        subtitle_text: str,
        title_keywords: Sequence[Keyword],
        subtitle_keywords: Sequence[Keyword],
        options: GenerationOptions | None = None
    ) -> AnalysisResult:
        """Analyze with caller-prepared keyword lists.

        Use this entry point after caller-side filtering such as brand
        removal; classification still runs against the full field texts.

        Args:
            title_text: App title
            subtitle_text: App subtitle
            title_keywords: Keywords to combine from the title
            subtitle_keywords: Keywords to combine from the subtitle
            options: Per-call options

        Returns:
            AnalysisResult
        """
        title_text = title_text or ""
        subtitle_text = subtitle_text or ""
        opts = options or self.options

        try:
            if not normalize_words(title_text) and not normalize_words(subtitle_text):
                raise InvalidInputError("Title and subtitle are both empty")

            generator = CombinationGenerator(options=opts, ranker=self.ranker)
            generated = generator.generate(title_keywords, subtitle_keywords)
        except InvalidInputError as e:
            logger.debug("Rejected input: %s", e)
            return AnalysisResult(
                title=title_text,
                subtitle=subtitle_text,
                error=AnalysisError(code=e.code, message=str(e)),
            )

        classifier = StrengthClassifier(title_text, subtitle_text)
        combinations = tuple(
            ClassifiedCombination(
                combination=candidate,
                classification=classifier.classify(candidate.text),
            )
            for candidate in generated.candidates
        )

        stats = summarize(combinations, truncated=generated.truncated)
        logger.debug(
            "Classified %d combinations: %d existing, %d title-consecutive",
            stats.total_possible,
            stats.existing,
            stats.tier_counts[StrengthTier.TITLE_CONSECUTIVE],
        )

        return AnalysisResult(
            title=title_text,
            subtitle=subtitle_text,
            combinations=combinations,
            stats=stats,
            mode=generated.mode,
            keyword_count=generated.keyword_count,
            warnings=tuple(generated.warnings),
        )


def analyze_combinations(
    title_text: str,
    subtitle_text: str,
    options: GenerationOptions | None = None,
    profile: ValueProfile = ValueProfile.DEFAULT
) -> AnalysisResult:
    """Convenience function to analyze with default settings.

    Args:
        title_text: App title
        subtitle_text: App subtitle
        options: Optional generation options
        profile: Value profile to use

    Returns:
        AnalysisResult
    """
    return Analyzer(options=options, profile=profile).analyze(title_text, subtitle_text)
