"""Database models for vectorplay."""

import datetime as dt
import uuid
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class GameSessionRecord(SQLModel, table=True):
    __tablename__ = "game_session"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    game_type: str = Field(index=True)
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    score: int = 0
    stage: int = 1
    lives: int = 0
    created_at: dt.datetime = Field(default_factory=_now)
    updated_at: dt.datetime = Field(default_factory=_now)


class WordVector(SQLModel, table=True):
    __tablename__ = "word_vector"

    word: str = Field(primary_key=True)
    embedding: list[float] = Field(sa_column=Column(JSON))
    created_at: dt.datetime = Field(default_factory=_now)
    updated_at: dt.datetime = Field(default_factory=_now)


class WordSimilarity(SQLModel, table=True):
    """Similarity cache; (word1, word2) is stored sorted."""

    __tablename__ = "word_similarity"

    word1: str = Field(primary_key=True)
    word2: str = Field(primary_key=True)
    similarity: float
    created_at: dt.datetime = Field(default_factory=_now)


class PopularWord(SQLModel, table=True):
    __tablename__ = "popular_word"

    word: str = Field(primary_key=True)
    usage_count: int = Field(default=0, index=True)
    created_at: dt.datetime = Field(default_factory=_now)
