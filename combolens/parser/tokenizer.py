"""Tokenizer and stopword filter for App Store metadata fields.

Every component that needs to split title or subtitle text into words goes
through this module, so generation and classification always agree on what
a word is and which words are filler.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

# Punctuation that ends a phrase segment: words on either side of it are
# never adjacent ("Headspace: Meditation" is two segments).
_SEGMENT_BREAK_PATTERN = re.compile(
    r'[:;,.|!?()\[\]{}/–—•]+'
    r'|(?:^|\s)-+(?=\s|$)'
)

# Apostrophes are dropped inside words (don't -> dont)
_APOSTROPHE_PATTERN = re.compile(r"['’`]")

# Letters and digits only; everything else (&, +, intra-word hyphens) just
# separates words without breaking adjacency
_WORD_PATTERN = re.compile(r'[^\W_]+')

MIN_KEYWORD_LENGTH = 2

# The one stopword set used everywhere
STOPWORDS: frozenset[str] = frozenset({
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'been', 'but', 'by',
    'can', 'could', 'did', 'do', 'does', 'for', 'from', 'had', 'has',
    'have', 'he', 'in', 'is', 'it', 'its', 'may', 'might', 'must', 'of',
    'on', 'or', 'shall', 'should', 'that', 'the', 'to', 'was', 'will',
    'with', 'would',
})


class Field(Enum):
    """Metadata field a keyword was taken from."""
    TITLE = "title"
    SUBTITLE = "subtitle"


@dataclass(frozen=True)
class Keyword:
    """A normalized word from a metadata field."""
    text: str
    field: Field | None = None
    position: int = 0  # Index in the field's normalized word stream
    segment: int = 0   # Punctuation-delimited segment the word belongs to


def normalize_words(text: str, field: Field | None = None) -> list[Keyword]:
    """Split text into normalized words without dropping any of them.

    Lowercases, removes apostrophes and symbols, and records the segment
    each word belongs to so adjacency can respect separator punctuation.

    Args:
        text: Raw field text
        field: Field the text came from, if known

    Returns:
        Words in reading order, positions numbered from 0
    """
    if not text:
        return []

    cleaned = _APOSTROPHE_PATTERN.sub('', text.lower())

    words: list[Keyword] = []
    position = 0
    for segment, chunk in enumerate(_SEGMENT_BREAK_PATTERN.split(cleaned)):
        for match in _WORD_PATTERN.finditer(chunk):
            words.append(Keyword(
                text=match.group(0),
                field=field,
                position=position,
                segment=segment,
            ))
            position += 1

    return words


def is_stopword(word: str) -> bool:
    """Return True if the word is too short or a low-value filler word."""
    return len(word) < MIN_KEYWORD_LENGTH or word in STOPWORDS


def tokenize(text: str, field: Field | None = None) -> list[Keyword]:
    """Extract ranking keywords from field text.

    Args:
        text: Raw field text
        field: Field the text came from

    Returns:
        Keywords in reading order with stopwords and 1-character tokens
        removed. Positions still refer to the unfiltered word stream.
    """
    return [w for w in normalize_words(text, field) if not is_stopword(w.text)]


def remove_brand_keywords(
    keywords: Iterable[Keyword],
    brand_terms: Iterable[str],
) -> list[Keyword]:
    """Drop keywords that belong to a brand name.

    Brand handling is a caller decision: apply this to keyword lists before
    handing them to the generator.

    Args:
        keywords: Keywords produced by tokenize()
        brand_terms: Brand names or aliases (e.g. ["Headspace", "Calm"])

    Returns:
        Keywords whose text is not a word of any brand term
    """
    brand_words = {
        w.text
        for term in brand_terms
        for w in normalize_words(term)
    }
    return [kw for kw in keywords if kw.text not in brand_words]
