"""Similarity between words, backed by stored vectors and an embedding provider."""

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from .embeddings import EmbeddingProvider
from .engine.vectors import cosine_similarity, cosine_similarity_batch
from .engine.words import SimilarWord, normalize_word
from .errors import DependencyError, VectorMathError
from .logging import get_logger
from .wordstore import WordStore

logger = get_logger(__name__)

WARM_BATCH_SIZE = 5


@dataclass(frozen=True)
class SimilarityScore:
    value: float
    # True when the value is the length heuristic, not a real similarity.
    estimated: bool = False


def heuristic_similarity(word_a: str, word_b: str) -> float:
    """Stand-in score from word lengths, used only in degraded mode."""
    return max(0.1, 0.5 - abs(len(word_a) - len(word_b)) * 0.1)


class SimilarityOracle:
    """Symmetric word similarity with a pair cache in front of the provider."""

    def __init__(self, provider: EmbeddingProvider, store: WordStore):
        self.provider = provider
        self.store = store
        # Learned from the provider; stored vectors of another size are stale.
        self.dimension: int | None = None

    def _fetch(self, words: list[str]) -> dict[str, list[float]]:
        fetched = dict(zip(words, self.provider.batch_get_embeddings(words)))
        dimensions = {len(v) for v in fetched.values()}
        if len(dimensions) != 1:
            raise DependencyError(
                f"Embedding provider returned mixed dimensions {sorted(dimensions)}"
            )
        self.dimension = dimensions.pop()
        self.store.save_vectors(fetched)
        logger.debug("vectors_fetched", words=words, dimension=self.dimension)
        return fetched

    def vectors_for(self, words: Iterable[str]) -> dict[str, list[float]]:
        """Vectors for ``words``, fetching the missing ones in one batch.

        Stored vectors whose size differs from the provider's current
        dimension (left over from another embedding model) are fetched
        again and overwritten.
        """
        wanted = list(dict.fromkeys(words))
        vectors = self.store.get_vectors(wanted)
        if self.dimension is not None:
            vectors = {w: v for w, v in vectors.items() if len(v) == self.dimension}

        missing = [w for w in wanted if w not in vectors]
        if missing:
            vectors.update(self._fetch(missing))

        if len({len(v) for v in vectors.values()}) > 1:
            if self.dimension is None:
                stale = list(vectors)
            else:
                stale = [w for w, v in vectors.items() if len(v) != self.dimension]
            logger.info("stale_vectors_refetched", words=stale)
            vectors.update(self._fetch(stale))
        return vectors

    def similarity(self, word_a: str, word_b: str) -> float:
        """Cosine similarity of two words' embeddings.

        Provider and storage failures raise DependencyError.
        """
        word_a, word_b = normalize_word(word_a), normalize_word(word_b)
        if word_a == word_b:
            return 1.0

        cached = self.store.get_cached_similarity(word_a, word_b)
        if cached is not None:
            return cached

        vectors = self.vectors_for([word_a, word_b])
        try:
            value = cosine_similarity(vectors[word_a], vectors[word_b])
        except VectorMathError as exc:
            raise DependencyError(
                f"Unusable embeddings for '{word_a}' and '{word_b}': {exc}"
            ) from exc
        self.store.cache_similarity(word_a, word_b, value)
        logger.debug("similarity_computed", word_a=word_a, word_b=word_b, similarity=value)
        return value

    def estimate_similarity(self, word_a: str, word_b: str) -> SimilarityScore:
        """Like :meth:`similarity`, but degrades to a heuristic on failure.

        Only for exploratory checks; never use it to validate a chain.
        """
        try:
            return SimilarityScore(self.similarity(word_a, word_b))
        except DependencyError as exc:
            value = heuristic_similarity(word_a.strip(), word_b.strip())
            logger.warning(
                "similarity_degraded",
                word_a=word_a,
                word_b=word_b,
                estimate=value,
                error=str(exc),
            )
            return SimilarityScore(value, estimated=True)

    def find_similar_words(
        self, base_word: str, limit: int = 5, threshold: float = 0.7
    ) -> list[SimilarWord]:
        """Stored words closest to ``base_word``, most similar first."""
        base_word = normalize_word(base_word)
        base_vector = self.vectors_for([base_word])[base_word]

        candidates = [(w, v) for w, v in self.store.all_vectors() if w != base_word]
        candidates = [(w, v) for w, v in candidates if len(v) == len(base_vector)]
        if not candidates:
            return []

        words = [w for w, _ in candidates]
        scores = cosine_similarity_batch(base_vector, np.array([v for _, v in candidates]))
        order = np.argsort(-scores, kind="stable")
        results = [
            SimilarWord(words[i], float(scores[i]))
            for i in order
            if scores[i] >= threshold
        ]
        return results[:limit]

    def warm_vectors(self, words: Iterable[str], batch_size: int = WARM_BATCH_SIZE) -> int:
        """Embed and store every word that has no vector yet.

        A failing batch is logged and skipped. Returns the number of words
        that were newly embedded.
        """
        pending = list(dict.fromkeys(normalize_word(w) for w in words))
        stored = self.store.get_vectors(pending)
        pending = [w for w in pending if w not in stored]

        embedded = 0
        for start in range(0, len(pending), batch_size):
            batch = pending[start : start + batch_size]
            try:
                self.vectors_for(batch)
            except DependencyError as exc:
                logger.warning("warm_batch_failed", words=batch, error=str(exc))
                continue
            embedded += len(batch)
            logger.info(
                "warm_progress",
                processed=min(start + batch_size, len(pending)),
                total=len(pending),
            )
        return embedded
