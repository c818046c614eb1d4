"""Tests for the value ranker."""

import pytest

from combolens.engine.ranker import (
    VALUE_PROFILES,
    ValueProfile,
    ValueRanker,
    ValueWeights,
    keyword_frequencies,
)
from combolens.parser.tokenizer import tokenize


class TestValueRanker:
    """Test ValueRanker scoring."""

    def test_score_in_range(self):
        """Scores stay within 0-100."""
        ranker = ValueRanker()
        score = ranker.score(["meditation", "sleep"], {"meditation": 1, "sleep": 1})
        assert 0 <= score <= 100

    def test_deterministic(self):
        """Identical input yields identical scores."""
        ranker = ValueRanker()
        freqs = {"calm": 2, "sleep": 1}
        assert ranker.score(["calm", "sleep"], freqs) == ranker.score(["calm", "sleep"], freqs)

    def test_three_words_beat_two(self):
        """Three-word phrases score above two-word phrases of similar words."""
        ranker = ValueRanker()
        freqs = {"aaaa": 1, "bbbb": 1, "cccc": 1}
        assert ranker.score(["aaaa", "bbbb", "cccc"], freqs) > ranker.score(["aaaa", "bbbb"], freqs)

    def test_repeated_words_score_lower(self):
        """Words repeated across fields lower the rarity component."""
        ranker = ValueRanker()
        words = ["sleep", "calm"]
        assert ranker.score(words, {"sleep": 2, "calm": 1}) < ranker.score(words, {"sleep": 1, "calm": 1})

    def test_profile_weights(self):
        """Profiles select predefined weights."""
        ranker = ValueRanker(profile=ValueProfile.LONG_TAIL)
        assert ranker.weights == VALUE_PROFILES[ValueProfile.LONG_TAIL]
        assert ranker.weights.length == pytest.approx(0.55)

    def test_custom_weights(self):
        """Custom weights override the profile."""
        weights = ValueWeights(length=1.0, rarity=0.0, specificity=0.0)
        ranker = ValueRanker(profile=ValueProfile.DISTINCTIVE, custom_weights=weights)
        assert ranker.score(["aa", "bb", "cc"], {}) == 70.0

    def test_score_breakdown(self):
        """Breakdown exposes each component and the final score."""
        ranker = ValueRanker()
        freqs = {"meditation": 1, "sleep": 1}
        breakdown = ranker.get_score_breakdown(["meditation", "sleep"], freqs)
        assert breakdown["length"] == 60.0
        assert breakdown["final_score"] == ranker.score(["meditation", "sleep"], freqs)
        assert set(breakdown["weights"]) == {"length", "rarity", "specificity"}

    def test_keyword_score_prefers_rare_words(self):
        """A word seen once scores above the same word seen twice."""
        ranker = ValueRanker()
        assert ranker.keyword_score("sleep", {"sleep": 1}) > ranker.keyword_score("sleep", {"sleep": 2})


class TestKeywordFrequencies:
    """Test frequency counting."""

    def test_counts_across_fields(self):
        """Words appearing in both fields are counted twice."""
        freqs = keyword_frequencies(tokenize("Sleep Sounds") + tokenize("Deep Sleep"))
        assert freqs["sleep"] == 2
        assert freqs["sounds"] == 1
