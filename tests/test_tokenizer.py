"""Tests for the tokenizer and stopword filter."""

from combolens.parser.tokenizer import (
    STOPWORDS,
    Field,
    Keyword,
    is_stopword,
    normalize_words,
    remove_brand_keywords,
    tokenize,
)


def _texts(keywords: list[Keyword]) -> list[str]:
    return [kw.text for kw in keywords]


class TestNormalizeWords:
    """Test normalization without filtering."""

    def test_lowercases_and_strips_symbols(self):
        """Words are lowercased and symbols removed."""
        words = normalize_words("Headspace: Meditation & Sleep")
        assert _texts(words) == ["headspace", "meditation", "sleep"]

    def test_keeps_short_words_and_stopwords(self):
        """Unfiltered normalization keeps single letters and stopwords."""
        assert _texts(normalize_words("A B the")) == ["a", "b", "the"]

    def test_positions_are_continuous(self):
        """Positions count every word across segments."""
        words = normalize_words("One: Two Three")
        assert [w.position for w in words] == [0, 1, 2]

    def test_colon_starts_new_segment(self):
        """Separator punctuation splits segments."""
        words = normalize_words("Headspace: Meditation & Sleep")
        assert words[0].segment != words[1].segment
        assert words[1].segment == words[2].segment

    def test_ampersand_does_not_break_segment(self):
        """Ampersand separates words but keeps them in one segment."""
        words = normalize_words("Mindfulness Timer & Wellness App")
        assert len({w.segment for w in words}) == 1

    def test_intra_word_hyphen(self):
        """A hyphen inside a word splits it without breaking adjacency."""
        words = normalize_words("Sleep-Tracker")
        assert _texts(words) == ["sleep", "tracker"]
        assert words[0].segment == words[1].segment

    def test_spaced_dash_breaks_segment(self):
        """A free-standing dash acts as a separator."""
        words = normalize_words("Sleep - Relax")
        assert _texts(words) == ["sleep", "relax"]
        assert words[0].segment != words[1].segment

    def test_apostrophes_removed(self):
        """Apostrophes are dropped inside words."""
        assert _texts(normalize_words("Don't Panic")) == ["dont", "panic"]

    def test_field_is_recorded(self):
        """The given field is attached to every word."""
        words = normalize_words("Calm Sleep", Field.SUBTITLE)
        assert all(w.field is Field.SUBTITLE for w in words)

    def test_empty_text(self):
        """Empty or missing text yields no words."""
        assert normalize_words("") == []
        assert normalize_words(None) == []


class TestTokenize:
    """Test keyword extraction."""

    def test_drops_stopwords(self):
        """Stopwords are removed."""
        assert _texts(tokenize("The Best App for Sleep")) == ["best", "app", "sleep"]

    def test_drops_single_characters(self):
        """Tokens shorter than two characters are removed."""
        assert tokenize("A B") == []

    def test_positions_refer_to_unfiltered_stream(self):
        """Filtered keywords keep their original positions."""
        keywords = tokenize("The Best App")
        assert [kw.position for kw in keywords] == [1, 2]

    def test_is_stopword(self):
        """is_stopword covers the shared stopword set and short tokens."""
        assert is_stopword("the")
        assert is_stopword("x")
        assert not is_stopword("meditation")
        assert "and" in STOPWORDS

    def test_deterministic(self):
        """Same input produces identical keywords."""
        text = "Calm: Sleep & Meditation"
        assert tokenize(text, Field.TITLE) == tokenize(text, Field.TITLE)


class TestRemoveBrandKeywords:
    """Test caller-side brand filtering."""

    def test_removes_brand_words(self):
        """Brand words are dropped, other keywords kept."""
        keywords = tokenize("Headspace Meditation", Field.TITLE)
        kept = remove_brand_keywords(keywords, ["Headspace"])
        assert _texts(kept) == ["meditation"]

    def test_multi_word_brand(self):
        """Every word of a multi-word brand is removed."""
        keywords = tokenize("Sleep Cycle Smart Alarm")
        kept = remove_brand_keywords(keywords, ["Sleep Cycle"])
        assert _texts(kept) == ["smart", "alarm"]

    def test_no_brands(self):
        """Without brand terms nothing is removed."""
        keywords = tokenize("Calm Sleep")
        assert remove_brand_keywords(keywords, []) == keywords
