"""Keyword combination generator.

Produces candidate search phrases from title-only, subtitle-only and
cross-element (title + subtitle) keyword sources, with a tiered scaling
policy that keeps generation bounded as the keyword count grows.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from itertools import accumulate

from ..parser.tokenizer import Field, Keyword, is_stopword
from .errors import InvalidInputError
from .ranker import ValueRanker, keyword_frequencies

logger = logging.getLogger(__name__)


class ComboSource(Enum):
    """Which keyword source produced a combination."""
    TITLE_ONLY = "title_only"
    SUBTITLE_ONLY = "subtitle_only"
    CROSS_ELEMENT = "cross_element"


class GenerationMode(Enum):
    """Scaling tier chosen from the distinct keyword count."""
    FULL = "full"                # Enumerate everything (within per-source caps)
    PRIORITIZED = "prioritized"  # Highest value first, up to a combined budget
    TOP_N = "top_n"              # Only the top N by value, analysis is partial


@dataclass(frozen=True)
class CandidateCombination:
    """A candidate multi-word search phrase."""
    text: str
    keywords: tuple[Keyword, ...]
    source: ComboSource
    value: float = 0.0  # Estimated strategic value (0-100)

    @property
    def length(self) -> int:
        return len(self.keywords)

    @property
    def words(self) -> tuple[str, ...]:
        return tuple(kw.text for kw in self.keywords)


@dataclass
class GenerationOptions:
    """Per-call generation settings."""
    min_length: int = 2
    max_length: int = 4
    include_title_only: bool = True
    include_subtitle_only: bool = True
    include_cross_element: bool = True
    per_source_cap: int = 500
    combined_budget: int = 1500
    top_n: int = 500
    full_enumeration_limit: int = 15   # k at or below this: full enumeration
    prioritized_limit: int = 30        # k at or below this: value-prioritized

    def validate(self) -> None:
        """Raise InvalidInputError if the options can never be satisfied."""
        if self.min_length < 2:
            raise InvalidInputError(f"min_length must be at least 2 (got {self.min_length})")
        if self.min_length > self.max_length:
            raise InvalidInputError(
                f"min_length ({self.min_length}) is greater than max_length ({self.max_length})"
            )
        for name in ("per_source_cap", "combined_budget", "top_n"):
            if getattr(self, name) < 1:
                raise InvalidInputError(f"{name} must be positive (got {getattr(self, name)})")
        if self.full_enumeration_limit > self.prioritized_limit:
            raise InvalidInputError(
                "full_enumeration_limit must not exceed prioritized_limit"
            )

    @property
    def lengths(self) -> range:
        return range(self.min_length, self.max_length + 1)


@dataclass
class GenerationResult:
    """Candidates plus how they were produced."""
    candidates: list[CandidateCombination] = field(default_factory=list)
    mode: GenerationMode = GenerationMode.FULL
    truncated: bool = False
    warnings: list[str] = field(default_factory=list)
    keyword_count: int = 0


_NO_POSITIONS: Mapping[Field | None, int] = {}

_FIELD_ORDER: dict[Field | None, int] = {Field.TITLE: 0, Field.SUBTITLE: 1, None: 2}


def _from_field(keywords: Sequence[Keyword], source_field: Field) -> list[Keyword]:
    """Drop filler words and tag keywords with the field they came from."""
    return [
        kw if kw.field is source_field else replace(kw, field=source_field)
        for kw in keywords
        if not is_stopword(kw.text)
    ]


def _phrase(arrangement: Sequence[Keyword]) -> str:
    return " ".join(kw.text for kw in arrangement)


def _placeable(
    kw: Keyword,
    prefix: tuple[Keyword, ...],
    last: Mapping[Field | None, int],
    remaining: int,
    missing: frozenset[Field],
) -> bool:
    """Whether ``kw`` may be the next word after ``prefix``."""
    if kw.position <= last.get(kw.field, -1):
        return False
    if any(placed.text == kw.text for placed in prefix):
        return False
    # Keep enough slots for every field that still has to appear
    return remaining > len(missing) or kw.field in missing


def search_arrangements(
    pool: Sequence[Keyword],
    length: int,
    budget: int,
    prefix: tuple[Keyword, ...] = (),
    last: Mapping[Field | None, int] = _NO_POSITIONS,
    required_fields: frozenset[Field] = frozenset(),
    produced: set[str] | None = None,
) -> list[tuple[Keyword, ...]]:
    """Backtracking search for keyword arrangements with distinct texts.

    An arrangement keeps each field's words in that field's reading order;
    words of different fields may interleave. The pool order decides which
    arrangements are found first. Of several occurrences of one word in
    one field only the first eligible one is branched on.

    Args:
        pool: Keywords to draw from, in visiting order
        length: Number of words per arrangement
        budget: Maximum number of new phrase texts to return
        prefix: Words already placed
        last: Last position used per field
        required_fields: Fields every arrangement must draw from
        produced: Phrase texts already generated; found texts are added

    Returns:
        Up to ``budget`` arrangements, in discovery order, none of whose
        texts were in ``produced``
    """
    if produced is None:
        produced = set()
    if budget <= 0:
        return []
    if len(prefix) == length:
        text = _phrase(prefix)
        if text in produced:
            return []
        produced.add(text)
        return [prefix]

    remaining = length - len(prefix)
    missing = required_fields - {kw.field for kw in prefix}

    found: list[tuple[Keyword, ...]] = []
    branched: set[tuple[str, Field | None]] = set()
    for kw in pool:
        if (kw.text, kw.field) in branched:
            continue
        if not _placeable(kw, prefix, last, remaining, missing):
            continue
        branched.add((kw.text, kw.field))

        found.extend(search_arrangements(
            pool,
            length,
            budget - len(found),
            prefix + (kw,),
            {**last, kw.field: kw.position},
            required_fields,
            produced,
        ))
        if len(found) >= budget:
            break

    return found


class BestPhraseSearch:
    """Branch-and-bound search for the highest-value phrases of one pool.

    Keeps at most ``capacity`` phrases ordered by (-value, text). Once the
    collection is full a prefix is abandoned when no completion of it can
    beat the weakest kept phrase: its value bound comes from the best word
    contributions still available, and every completion's text starts with
    the prefix text.
    """

    def __init__(
        self,
        pool: Sequence[Keyword],
        capacity: int,
        ranker: ValueRanker,
        frequencies: Mapping[str, int]
    ):
        self.pool = list(pool)
        self.capacity = capacity
        self.ranker = ranker
        self.frequencies = frequencies
        self.overflow = False  # A phrase was dropped or never built for lack of room
        self._kept: list[tuple[float, str, tuple[Keyword, ...]]] = []
        self._kept_texts: set[str] = set()
        self._components = {
            kw.text: ranker.word_components(kw.text, frequencies) for kw in self.pool
        }
        contributions = [self._components[kw.text] for kw in self.pool]
        self._best_rarity = list(accumulate(
            sorted((c[0] for c in contributions), reverse=True), initial=0.0
        ))
        self._best_specificity = list(accumulate(
            sorted((c[1] for c in contributions), reverse=True), initial=0.0
        ))

    def run(self, length: int, required_fields: frozenset[Field] = frozenset()) -> None:
        """Search all arrangements of ``length`` words."""
        if length > len(self.pool):
            return
        self._extend(length, (), _NO_POSITIONS, required_fields, 0.0, 0.0)

    def best(self) -> list[tuple[Keyword, ...]]:
        """Kept arrangements, highest value first."""
        return [arrangement for _, _, arrangement in self._kept]

    def _extend(
        self,
        length: int,
        prefix: tuple[Keyword, ...],
        last: Mapping[Field | None, int],
        required_fields: frozenset[Field],
        rarity: float,
        specificity: float,
    ) -> None:
        if len(prefix) == length:
            self._offer(prefix)
            return

        remaining = length - len(prefix)
        missing = required_fields - {kw.field for kw in prefix}

        if self._full() and not self._may_improve(length, prefix, remaining, rarity, specificity):
            if self._completable(prefix, last, remaining, missing):
                self.overflow = True
            return

        branched: set[tuple[str, Field | None]] = set()
        for kw in self.pool:
            if (kw.text, kw.field) in branched:
                continue
            if not _placeable(kw, prefix, last, remaining, missing):
                continue
            branched.add((kw.text, kw.field))

            word_rarity, word_specificity = self._components[kw.text]
            self._extend(
                length,
                prefix + (kw,),
                {**last, kw.field: kw.position},
                required_fields,
                rarity + word_rarity,
                specificity + word_specificity,
            )

    def _full(self) -> bool:
        return len(self._kept) >= self.capacity

    def _offer(self, arrangement: tuple[Keyword, ...]) -> None:
        text = _phrase(arrangement)
        if text in self._kept_texts:
            return
        value = self.ranker.score([kw.text for kw in arrangement], self.frequencies)
        if self._full():
            self.overflow = True
            if (-value, text) > self._kept[-1][:2]:
                return
            _, dropped, _ = self._kept.pop()
            self._kept_texts.discard(dropped)
        bisect.insort(self._kept, (-value, text, arrangement))
        self._kept_texts.add(text)

    def _may_improve(
        self,
        length: int,
        prefix: tuple[Keyword, ...],
        remaining: int,
        rarity: float,
        specificity: float,
    ) -> bool:
        bound = self.ranker.upper_bound(
            length,
            rarity + self._best_rarity[remaining],
            specificity + self._best_specificity[remaining],
        )
        text = _phrase(prefix) + " " if prefix else ""
        return (-bound, text) < self._kept[-1][:2]

    def _completable(
        self,
        prefix: tuple[Keyword, ...],
        last: Mapping[Field | None, int],
        remaining: int,
        missing: frozenset[Field],
    ) -> bool:
        """Whether at least one full arrangement extends ``prefix``."""
        used = {kw.text for kw in prefix}
        options = [
            kw for kw in self.pool
            if kw.position > last.get(kw.field, -1) and kw.text not in used
        ]
        texts = {kw.text for kw in options}
        if len(texts) < remaining:
            return False
        if any(all(kw.field is not f for kw in options) for f in missing):
            return False
        # Two missing fields need two different words, one from each
        return len(missing) < 2 or len(texts) >= 2


class CombinationGenerator:
    """Generates candidate combinations from title and subtitle keywords."""

    def __init__(
        self,
        options: GenerationOptions | None = None,
        ranker: ValueRanker | None = None
    ):
        """Initialize generator.

        Args:
            options: Generation settings (defaults if omitted)
            ranker: Value model used for prioritized generation
        """
        self.options = options or GenerationOptions()
        self.ranker = ranker or ValueRanker()

    def select_mode(self, keyword_count: int) -> GenerationMode:
        """Pick the scaling tier for a distinct keyword count."""
        if keyword_count <= self.options.full_enumeration_limit:
            return GenerationMode.FULL
        if keyword_count <= self.options.prioritized_limit:
            return GenerationMode.PRIORITIZED
        return GenerationMode.TOP_N

    def generate(
        self,
        title_keywords: Sequence[Keyword],
        subtitle_keywords: Sequence[Keyword],
    ) -> GenerationResult:
        """Generate deduplicated candidate combinations.

        Args:
            title_keywords: Keywords from the title, in reading order
            subtitle_keywords: Keywords from the subtitle, in reading order

        Returns:
            GenerationResult with candidates in deterministic order

        Raises:
            InvalidInputError: If the options are inconsistent
        """
        opts = self.options
        opts.validate()

        title = _from_field(title_keywords, Field.TITLE)
        subtitle = _from_field(subtitle_keywords, Field.SUBTITLE)

        frequencies = keyword_frequencies(title + subtitle)
        keyword_count = len(frequencies)
        mode = self.select_mode(keyword_count)

        logger.debug(
            "Generating combinations: %d distinct keywords, mode=%s",
            keyword_count, mode.value
        )

        sources: list[tuple[ComboSource, list[Keyword], frozenset[Field]]] = []
        if opts.include_title_only and title:
            sources.append((ComboSource.TITLE_ONLY, title, frozenset()))
        if opts.include_subtitle_only and subtitle:
            sources.append((ComboSource.SUBTITLE_ONLY, subtitle, frozenset()))
        if opts.include_cross_element and title and subtitle:
            sources.append(
                (ComboSource.CROSS_ELEMENT, title + subtitle, frozenset({Field.TITLE, Field.SUBTITLE}))
            )

        warnings: list[str] = []

        if mode is GenerationMode.FULL:
            candidates, truncated = self._enumerate(sources, frequencies)
            if truncated:
                message = (
                    f"per-source cap of {opts.per_source_cap} reached: some "
                    f"combinations were not generated"
                )
                warnings.append(message)
                logger.warning(message)
        elif mode is GenerationMode.PRIORITIZED:
            candidates, truncated = self._best_first(sources, frequencies, opts.combined_budget)
            if truncated:
                warnings.append(
                    f"{keyword_count} distinct keywords: generated the "
                    f"{len(candidates)} highest-value combinations, lower-value "
                    f"combinations were skipped"
                )
        else:
            candidates, _ = self._best_first(sources, frequencies, opts.top_n)
            truncated = True
            message = (
                f"{keyword_count} distinct keywords exceeds {opts.prioritized_limit}: "
                f"analysis is partial, showing the top {len(candidates)} combinations "
                f"by estimated value"
            )
            warnings.append(message)
            logger.warning(message)

        logger.debug(
            "Generated %d combinations (truncated=%s)", len(candidates), truncated
        )

        return GenerationResult(
            candidates=candidates,
            mode=mode,
            truncated=truncated,
            warnings=warnings,
            keyword_count=keyword_count,
        )

    def _enumerate(
        self,
        sources: Sequence[tuple[ComboSource, list[Keyword], frozenset[Field]]],
        frequencies: Mapping[str, int],
    ) -> tuple[list[CandidateCombination], bool]:
        """Enumerate every source in reading order within the per-source cap.

        A text found by an earlier source is not generated again and does
        not count against later caps.
        """
        produced: set[str] = set()
        candidates: list[CandidateCombination] = []
        truncated = False

        for source, pool, required in sources:
            arrangements, capped = self._generate_source(
                pool, self.options.per_source_cap, required, produced
            )
            truncated = truncated or capped
            candidates.extend(
                self._candidate(arrangement, source, frequencies)
                for arrangement in arrangements
            )

        return candidates, truncated

    def _generate_source(
        self,
        pool: Sequence[Keyword],
        budget: int,
        required: frozenset[Field],
        produced: set[str],
    ) -> tuple[list[tuple[Keyword, ...]], bool]:
        """Generate arrangements of every configured length for one source.

        Lengths are filled shortest first from the remaining budget.

        Returns:
            Tuple of (arrangements, whether the budget cut the search short)
        """
        found: list[tuple[Keyword, ...]] = []

        for length in self.options.lengths:
            if length > len(pool):
                break
            remaining = budget - len(found)

            # Ask for one extra to learn whether the budget was exhausted
            batch = search_arrangements(
                pool, length, remaining + 1, required_fields=required, produced=produced
            )
            if len(batch) > remaining:
                produced.discard(_phrase(batch[remaining]))
                found.extend(batch[:remaining])
                return found, True
            found.extend(batch)

        return found, False

    def _best_first(
        self,
        sources: Sequence[tuple[ComboSource, list[Keyword], frozenset[Field]]],
        frequencies: Mapping[str, int],
        limit: int,
    ) -> tuple[list[CandidateCombination], bool]:
        """Keep the ``limit`` highest-value phrases across all sources.

        Each source keeps its best ``min(per_source_cap, limit)`` phrases.
        A text several sources can build belongs to the first of them.

        Returns:
            Tuple of (candidates by value then text, whether any were skipped)
        """
        capacity = min(self.options.per_source_cap, limit)
        # Most valuable lengths first so the bound starts pruning early
        lengths = sorted(self.options.lengths, key=lambda n: (-self.ranker.length_score(n), n))

        combos: dict[str, CandidateCombination] = {}
        truncated = False

        for source, pool, required in sources:
            search = BestPhraseSearch(
                self._by_value(pool, frequencies), capacity, self.ranker, frequencies
            )
            for length in lengths:
                search.run(length, required)
            truncated = truncated or search.overflow

            for arrangement in search.best():
                text = _phrase(arrangement)
                if text not in combos:
                    combos[text] = self._candidate(arrangement, source, frequencies)

        candidates = sorted(combos.values(), key=lambda c: (-c.value, c.text))
        if len(candidates) > limit:
            truncated = True
            candidates = candidates[:limit]

        return candidates, truncated

    def _candidate(
        self,
        arrangement: tuple[Keyword, ...],
        source: ComboSource,
        frequencies: Mapping[str, int],
    ) -> CandidateCombination:
        return CandidateCombination(
            text=_phrase(arrangement),
            keywords=arrangement,
            source=source,
            value=self.ranker.score([kw.text for kw in arrangement], frequencies),
        )

    def _by_value(
        self,
        keywords: Sequence[Keyword],
        frequencies: Mapping[str, int]
    ) -> list[Keyword]:
        """Order keywords by descending value, then text, field and position."""
        return sorted(
            keywords,
            key=lambda kw: (
                -self.ranker.keyword_score(kw.text, frequencies),
                kw.text,
                _FIELD_ORDER.get(kw.field, 2),
                kw.position,
            )
        )
