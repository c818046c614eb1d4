"""Text normalization and keyword extraction for title/subtitle fields."""

from .tokenizer import (
    STOPWORDS,
    Field,
    Keyword,
    normalize_words,
    remove_brand_keywords,
    tokenize,
)

__all__ = [
    "STOPWORDS",
    "Field",
    "Keyword",
    "normalize_words",
    "remove_brand_keywords",
    "tokenize",
]
