"""Phrase position analysis.

Decides whether a phrase's words occur in a source text and whether they
occur there as one adjacent run.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..parser.tokenizer import Keyword, normalize_words


@dataclass(frozen=True)
class PositionAnalysis:
    """Where (and how) a phrase occurs in a source text."""
    exists: bool
    is_consecutive: bool
    positions: tuple[int, ...] = ()


_ABSENT = PositionAnalysis(exists=False, is_consecutive=False)


def phrase_words(phrase: str) -> list[str]:
    """Normalize a phrase into its word texts."""
    return [w.text for w in normalize_words(phrase)]


def analyze_in_words(
    words: Sequence[str],
    source: Sequence[Keyword],
) -> PositionAnalysis:
    """Analyze pre-normalized phrase words against pre-normalized source words.

    Each phrase word must match its own source occurrence, so "sleep sleep"
    only exists in a source that says "sleep" twice.

    Args:
        words: Phrase words in phrase order
        source: Normalized source words (from normalize_words)

    Returns:
        PositionAnalysis for the phrase
    """
    if not words:
        return _ABSENT

    occurrences: dict[str, list[int]] = {}
    for kw in source:
        occurrences.setdefault(kw.text, []).append(kw.position)

    used: dict[str, int] = {}
    matched: list[int] = []
    for word in words:
        idx = used.get(word, 0)
        slots = occurrences.get(word, [])
        if idx >= len(slots):
            return _ABSENT
        matched.append(slots[idx])
        used[word] = idx + 1

    span = len(words)
    for start in range(len(source) - span + 1):
        first = source[start]
        last = source[start + span - 1]
        if first.segment != last.segment:
            continue
        if all(source[start + i].text == words[i] for i in range(span)):
            return PositionAnalysis(
                exists=True,
                is_consecutive=True,
                positions=tuple(source[start + i].position for i in range(span)),
            )

    return PositionAnalysis(
        exists=True,
        is_consecutive=False,
        positions=tuple(matched),
    )


def analyze_in_text(phrase: str, source_text: str) -> PositionAnalysis:
    """Analyze a phrase against raw source text.

    Args:
        phrase: Candidate phrase (e.g. "meditation sleep")
        source_text: Title or subtitle text

    Returns:
        PositionAnalysis for the phrase
    """
    return analyze_in_words(phrase_words(phrase), normalize_words(source_text))
