"""Word vectors, the pair-similarity cache and the popular-word corpus."""

import datetime as dt
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from .errors import DependencyError
from .logging import get_logger
from .models import PopularWord, WordSimilarity, WordVector

logger = get_logger(__name__)


def pair_key(word_a: str, word_b: str) -> tuple[str, str]:
    """Cache key for an unordered word pair."""
    return (word_a, word_b) if word_a <= word_b else (word_b, word_a)


class WordStore(ABC):
    @abstractmethod
    def get_vectors(self, words: Iterable[str]) -> dict[str, list[float]]:
        """Stored vectors for whichever of ``words`` have one."""

    @abstractmethod
    def save_vectors(self, vectors: dict[str, list[float]]) -> None: ...

    @abstractmethod
    def all_vectors(self) -> list[tuple[str, list[float]]]: ...

    @abstractmethod
    def get_cached_similarity(self, word_a: str, word_b: str) -> float | None: ...

    @abstractmethod
    def cache_similarity(self, word_a: str, word_b: str, similarity: float) -> None: ...

    @abstractmethod
    def get_popular_words(self, limit: int = 50) -> list[str]:
        """Corpus words, most used first."""

    @abstractmethod
    def increment_word_usage(self, word: str) -> None: ...

    @abstractmethod
    def add_popular_words(self, words: Iterable[str]) -> int:
        """Add unseen words with a zero usage count; returns how many were new."""

    @abstractmethod
    def random_words(self, exclude: Iterable[str], limit: int = 10) -> list[str]:
        """Random words that have a stored vector, minus ``exclude``."""

    def get_vector(self, word: str) -> list[float] | None:
        return self.get_vectors([word]).get(word)


class MemoryWordStore(WordStore):
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.vectors: dict[str, list[float]] = {}
        self.similarities: dict[tuple[str, str], float] = {}
        self.usage: dict[str, int] = {}

    def get_vectors(self, words: Iterable[str]) -> dict[str, list[float]]:
        return {w: list(self.vectors[w]) for w in words if w in self.vectors}

    def save_vectors(self, vectors: dict[str, list[float]]) -> None:
        for word, embedding in vectors.items():
            self.vectors[word] = list(embedding)

    def all_vectors(self) -> list[tuple[str, list[float]]]:
        return [(w, list(v)) for w, v in self.vectors.items()]

    def get_cached_similarity(self, word_a: str, word_b: str) -> float | None:
        return self.similarities.get(pair_key(word_a, word_b))

    def cache_similarity(self, word_a: str, word_b: str, similarity: float) -> None:
        self.similarities[pair_key(word_a, word_b)] = similarity

    def get_popular_words(self, limit: int = 50) -> list[str]:
        ranked = sorted(self.usage.items(), key=lambda item: (-item[1], item[0]))
        return [word for word, _ in ranked[:limit]]

    def increment_word_usage(self, word: str) -> None:
        self.usage[word] = self.usage.get(word, 0) + 1

    def add_popular_words(self, words: Iterable[str]) -> int:
        added = 0
        for word in words:
            if word not in self.usage:
                self.usage[word] = 0
                added += 1
        return added

    def random_words(self, exclude: Iterable[str], limit: int = 10) -> list[str]:
        excluded = set(exclude)
        candidates = sorted(w for w in self.vectors if w not in excluded)
        self.rng.shuffle(candidates)
        return candidates[:limit]


class SqlWordStore(WordStore):
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db_session = Session(self.engine, expire_on_commit=False)
        try:
            yield db_session
        except SQLAlchemyError as exc:
            db_session.rollback()
            logger.error("word_store_failed", action=action, error=str(exc))
            raise DependencyError(f"Word store failed during {action}") from exc
        finally:
            db_session.close()

    def get_vectors(self, words: Iterable[str]) -> dict[str, list[float]]:
        wanted = list(dict.fromkeys(words))
        if not wanted:
            return {}
        with self._session("get_vectors") as db_session:
            rows = db_session.exec(
                select(WordVector).where(col(WordVector.word).in_(wanted))
            ).all()
            return {row.word: list(row.embedding) for row in rows}

    def save_vectors(self, vectors: dict[str, list[float]]) -> None:
        if not vectors:
            return
        now = dt.datetime.now(dt.UTC)
        with self._session("save_vectors") as db_session:
            for word, embedding in vectors.items():
                db_session.merge(
                    WordVector(word=word, embedding=list(embedding), updated_at=now)
                )
            db_session.commit()

    def all_vectors(self) -> list[tuple[str, list[float]]]:
        with self._session("all_vectors") as db_session:
            rows = db_session.exec(select(WordVector)).all()
            return [(row.word, list(row.embedding)) for row in rows]

    def get_cached_similarity(self, word_a: str, word_b: str) -> float | None:
        with self._session("get_cached_similarity") as db_session:
            row = db_session.get(WordSimilarity, pair_key(word_a, word_b))
            return row.similarity if row else None

    def cache_similarity(self, word_a: str, word_b: str, similarity: float) -> None:
        word1, word2 = pair_key(word_a, word_b)
        with self._session("cache_similarity") as db_session:
            db_session.merge(
                WordSimilarity(word1=word1, word2=word2, similarity=similarity)
            )
            db_session.commit()

    def get_popular_words(self, limit: int = 50) -> list[str]:
        with self._session("get_popular_words") as db_session:
            statement = (
                select(PopularWord.word)
                .order_by(col(PopularWord.usage_count).desc(), col(PopularWord.word))
                .limit(limit)
            )
            return list(db_session.exec(statement).all())

    def increment_word_usage(self, word: str) -> None:
        with self._session("increment_word_usage") as db_session:
            row = db_session.get(PopularWord, word)
            if row is None:
                row = PopularWord(word=word)
            row.usage_count += 1
            db_session.add(row)
            db_session.commit()

    def add_popular_words(self, words: Iterable[str]) -> int:
        wanted = list(dict.fromkeys(words))
        with self._session("add_popular_words") as db_session:
            existing = set(
                db_session.exec(
                    select(PopularWord.word).where(col(PopularWord.word).in_(wanted))
                ).all()
            )
            new_words = [w for w in wanted if w not in existing]
            for word in new_words:
                db_session.add(PopularWord(word=word))
            db_session.commit()
            return len(new_words)

    def random_words(self, exclude: Iterable[str], limit: int = 10) -> list[str]:
        excluded = list(set(exclude))
        with self._session("random_words") as db_session:
            statement = select(WordVector.word)
            if excluded:
                statement = statement.where(col(WordVector.word).not_in(excluded))
            statement = statement.order_by(func.random()).limit(limit)
            return list(db_session.exec(statement).all())
