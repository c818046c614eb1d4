"""Tests for strength classification."""

import pytest

from combolens.engine.classifier import (
    SUGGESTIONS,
    TIER_ORDER,
    StrengthClassifier,
    StrengthTier,
    classify,
)

TITLE = "Headspace: Meditation & Sleep"
SUBTITLE = "Mindfulness Timer & Wellness App"


@pytest.fixture
def classifier():
    return StrengthClassifier(TITLE, SUBTITLE)


class TestTierAssignment:
    """Test the tier each phrase lands in."""

    def test_title_consecutive(self, classifier):
        """Adjacent title words are the strongest tier."""
        result = classifier.classify("meditation sleep")
        assert result.strength is StrengthTier.TITLE_CONSECUTIVE
        assert result.is_consecutive
        assert not result.can_strengthen
        assert result.suggestion is None

    def test_title_split_by_colon(self, classifier):
        """Title words separated by a colon are not consecutive."""
        result = classifier.classify("headspace meditation")
        assert result.strength is StrengthTier.TITLE_NON_CONSECUTIVE
        assert result.can_strengthen
        assert result.suggestion == SUGGESTIONS[StrengthTier.TITLE_NON_CONSECUTIVE]

    def test_title_reversed(self, classifier):
        """Reversed title words are title non-consecutive."""
        assert classifier.classify("sleep meditation").strength is StrengthTier.TITLE_NON_CONSECUTIVE

    def test_cross_element(self, classifier):
        """Words split across title and subtitle are cross-element."""
        result = classifier.classify("meditation mindfulness")
        assert result.strength is StrengthTier.CROSS_ELEMENT
        assert result.can_strengthen

    def test_subtitle_consecutive(self, classifier):
        """Adjacent subtitle words are subtitle consecutive."""
        result = classifier.classify("mindfulness timer")
        assert result.strength is StrengthTier.SUBTITLE_CONSECUTIVE
        assert result.is_consecutive
        assert result.can_strengthen

    def test_subtitle_non_consecutive(self, classifier):
        """Subtitle words with a gap are subtitle non-consecutive."""
        result = classifier.classify("mindfulness wellness")
        assert result.strength is StrengthTier.SUBTITLE_NON_CONSECUTIVE
        assert not result.is_consecutive

    def test_missing_without_vocabulary(self):
        """A phrase with unknown words is missing and cannot be strengthened."""
        result = classify("z q", "A B", "C D")
        assert result.strength is StrengthTier.MISSING
        assert not result.can_strengthen
        assert result.suggestion is None

    def test_missing_with_vocabulary(self, classifier):
        """A phrase built from existing words but absent is strengthenable."""
        result = classifier.classify("sleep sleep")
        assert result.strength is StrengthTier.MISSING
        assert result.can_strengthen
        assert result.suggestion

    def test_short_words_cross_element(self):
        """Single-letter words still classify across fields."""
        result = classify("a c", "A B", "C D")
        assert result.strength is StrengthTier.CROSS_ELEMENT
        assert result.can_strengthen
        assert "title" in result.suggestion.lower()

    def test_empty_phrase(self, classifier):
        """Empty phrase is missing."""
        assert classifier.classify("").strength is StrengthTier.MISSING

    def test_case_insensitive(self, classifier):
        """Phrase case does not affect the tier."""
        assert classifier.classify("Meditation Sleep") == classifier.classify("meditation sleep")


class TestClassifierProperties:
    """Test purity and tier metadata."""

    def test_pure(self, classifier):
        """Classification depends only on phrase and texts."""
        phrases = ["meditation sleep", "timer app", "app headspace", "calm"]
        for phrase in phrases:
            assert classifier.classify(phrase) == classify(phrase, TITLE, SUBTITLE)

    def test_monotone_strength(self, classifier):
        """Only the title-consecutive tier and vocabulary-less phrases cannot be strengthened."""
        phrases = [
            "meditation sleep", "headspace sleep", "sleep timer", "timer app",
            "mindfulness app", "sleep sleep", "unknown words",
        ]
        for phrase in phrases:
            result = classifier.classify(phrase)
            if result.strength is StrengthTier.TITLE_CONSECUTIVE:
                assert not result.can_strengthen
            elif result.strength is StrengthTier.MISSING and phrase == "unknown words":
                assert not result.can_strengthen
            else:
                assert result.can_strengthen

    def test_tier_order_and_scores(self):
        """Tiers rank strongest first with falling scores."""
        assert TIER_ORDER[0] is StrengthTier.TITLE_CONSECUTIVE
        assert StrengthTier.TITLE_CONSECUTIVE.rank == 1
        assert StrengthTier.MISSING.rank == 6
        scores = [tier.score for tier in TIER_ORDER]
        assert scores == sorted(scores, reverse=True)
        assert StrengthTier.MISSING.score == 0

    def test_labels(self):
        """Each tier has a display label."""
        assert StrengthTier.TITLE_CONSECUTIVE.label == "Excellent"
        assert StrengthTier.SUBTITLE_NON_CONSECUTIVE.label == "Poor"

    def test_exists(self):
        """Every tier but missing exists."""
        assert all(tier.exists for tier in TIER_ORDER[:-1])
        assert not StrengthTier.MISSING.exists
