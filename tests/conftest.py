"""Shared test fixtures for vectorplay.

Words are embedded on circles so that cosine similarity is just the cosine
of the angle between them. Maze words and survival words live on two
orthogonal planes, so their cross-similarity is exactly 0.
"""

import datetime as dt
import math
import random
from collections.abc import Sequence
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from vectorplay.errors import DependencyError
from vectorplay.games.maze import VectorMazeService
from vectorplay.games.survival import SurvivalService
from vectorplay.session import MemorySessionStore, SqlSessionStore
from vectorplay.similarity import SimilarityOracle
from vectorplay.wordstore import MemoryWordStore, SqlWordStore

# Degrees on the maze plane. Links of 60 degrees have similarity 0.5.
MAZE_ANGLES = {
    "ocean": 0,
    "sea": 10,  # too close to ocean (0.98)
    "beach": 60,
    "dune": 110,
    "sand": 120,
    "keyboard": 180,
    "tax": 100,  # too far from ocean (-0.17)
}

# Degrees on the survival plane, measured from "cat".
SURVIVAL_ANGLES = {
    "cat": 0,
    "kitten": 10,
    "pet": -5,
    "dog": -20,
    "lion": -35,
    "tiger": -44,
    "bird": 55,  # hard trap (0.57)
    "house": 65,  # medium trap (0.42)
    "car": 75,  # easy trap (0.26)
    "engine": 150,
    "keyboards": 170,
}


def angle_vector(plane: int, degrees: float) -> list[float]:
    vector = [0.0, 0.0, 0.0, 0.0]
    radians = math.radians(degrees)
    vector[2 * plane] = math.cos(radians)
    vector[2 * plane + 1] = math.sin(radians)
    return vector


class FakeEmbeddingProvider:
    """Deterministic provider; set ``fail`` to simulate an outage."""

    def __init__(self) -> None:
        self.vectors = {w: angle_vector(0, a) for w, a in MAZE_ANGLES.items()}
        self.vectors.update({w: angle_vector(1, a) for w, a in SURVIVAL_ANGLES.items()})
        self.calls: list[list[str]] = []
        self.fail = False

    @property
    def words(self) -> list[str]:
        return list(self.vectors)

    def get_embedding(self, word: str) -> list[float]:
        return self.batch_get_embeddings([word])[0]

    def batch_get_embeddings(self, words: Sequence[str]) -> list[list[float]]:
        self.calls.append(list(words))
        if self.fail:
            raise DependencyError("embedding provider unavailable")
        missing = [w for w in words if w not in self.vectors]
        if missing:
            raise DependencyError(f"no embedding for {missing}")
        return [list(self.vectors[w]) for w in words]


class FixedClock:
    def __init__(self, start: dt.datetime) -> None:
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += dt.timedelta(seconds=seconds)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


@pytest.fixture
def provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def word_store(rng: random.Random) -> MemoryWordStore:
    return MemoryWordStore(rng)


@pytest.fixture
def oracle(provider: FakeEmbeddingProvider, word_store: MemoryWordStore) -> SimilarityOracle:
    return SimilarityOracle(provider, word_store)


@pytest.fixture
def warm_oracle(oracle: SimilarityOracle, provider: FakeEmbeddingProvider) -> SimilarityOracle:
    """Oracle whose store already holds every known word's vector."""
    oracle.warm_vectors(provider.words)
    provider.calls.clear()
    return oracle


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC))


@pytest.fixture
def maze(
    session_store: MemorySessionStore,
    oracle: SimilarityOracle,
    word_store: MemoryWordStore,
    rng: random.Random,
    clock: FixedClock,
) -> VectorMazeService:
    return VectorMazeService(session_store, oracle, word_store, rng=rng, clock=clock)


@pytest.fixture
def survival(
    session_store: MemorySessionStore,
    warm_oracle: SimilarityOracle,
    word_store: MemoryWordStore,
    rng: random.Random,
) -> SurvivalService:
    word_store.add_popular_words(SURVIVAL_ANGLES)
    return SurvivalService(session_store, warm_oracle, word_store, rng=rng)


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def sql_session_store(db_engine) -> SqlSessionStore:
    return SqlSessionStore(db_engine)


@pytest.fixture
def sql_word_store(db_engine) -> SqlWordStore:
    return SqlWordStore(db_engine)
