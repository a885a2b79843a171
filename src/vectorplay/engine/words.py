"""Word normalization and the lookups the engine needs from outside."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from ..errors import InputError

MAX_WORD_LENGTH = 50


@dataclass(frozen=True)
class SimilarWord:
    word: str
    similarity: float


class SimilarityLookup(Protocol):
    """What the engine needs from the similarity oracle."""

    def similarity(self, word_a: str, word_b: str) -> float: ...

    def find_similar_words(
        self, base_word: str, limit: int = 5, threshold: float = 0.7
    ) -> list[SimilarWord]: ...


class WordCorpus(Protocol):
    """Source of candidate words for pair and trap generation."""

    def get_popular_words(self, limit: int = 50) -> list[str]: ...

    def random_words(self, exclude: Iterable[str], limit: int = 10) -> list[str]: ...


def normalize_word(word: str | None) -> str:
    """Canonical form of a player-supplied word.

    Strips surrounding whitespace and lower-cases. Rejects empty words,
    words longer than MAX_WORD_LENGTH and anything with inner whitespace.
    """
    if word is None:
        raise InputError("A word is required")
    cleaned = word.strip().lower()
    if not cleaned:
        raise InputError("A word is required")
    if len(cleaned) > MAX_WORD_LENGTH:
        raise InputError(f"Words are limited to {MAX_WORD_LENGTH} characters")
    if any(ch.isspace() for ch in cleaned):
        raise InputError(f"Expected a single word, got {word!r}")
    return cleaned


def is_blank(word: str | None) -> bool:
    return word is None or not word.strip()
