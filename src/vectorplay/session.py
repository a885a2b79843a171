"""Game session storage.

The game services talk to a :class:`SessionStore`. Two implementations
exist: :class:`SqlSessionStore` for real deployments and
:class:`MemorySessionStore` for tests and throwaway runs. Which one is used
is decided by ``Config.storage_backend`` and nothing else.
"""

import copy
import datetime as dt
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from .errors import DependencyError, NotFoundError
from .logging import get_logger
from .models import GameSessionRecord

logger = get_logger(__name__)


class SessionStore(ABC):
    """Key-value storage of game sessions keyed by an opaque id."""

    @abstractmethod
    def get(self, session_id: str) -> GameSessionRecord | None:
        """Return the session, or None when the id is unknown."""

    @abstractmethod
    def create(
        self,
        game_type: str,
        payload: dict[str, Any],
        score: int = 0,
        stage: int = 1,
        lives: int = 0,
    ) -> GameSessionRecord:
        """Persist a new session and return it with its id."""

    @abstractmethod
    def update(
        self,
        session_id: str,
        payload: dict[str, Any] | None = None,
        score: int | None = None,
        stage: int | None = None,
        lives: int | None = None,
    ) -> GameSessionRecord:
        """Apply a patch; raises NotFoundError for unknown ids."""


def _apply_patch(
    record: GameSessionRecord,
    payload: dict[str, Any] | None,
    score: int | None,
    stage: int | None,
    lives: int | None,
) -> None:
    if payload is not None:
        record.payload = copy.deepcopy(payload)
    if score is not None:
        record.score = score
    if stage is not None:
        record.stage = stage
    if lives is not None:
        record.lives = lives
    record.updated_at = dt.datetime.now(dt.UTC)


class MemorySessionStore(SessionStore):
    """Process-local store. Callers always get a fresh copy of a record."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    @staticmethod
    def _to_record(data: dict[str, Any]) -> GameSessionRecord:
        return GameSessionRecord(**copy.deepcopy(data))

    def get(self, session_id: str) -> GameSessionRecord | None:
        data = self._records.get(session_id)
        return self._to_record(data) if data else None

    def create(
        self,
        game_type: str,
        payload: dict[str, Any],
        score: int = 0,
        stage: int = 1,
        lives: int = 0,
    ) -> GameSessionRecord:
        record = GameSessionRecord(
            game_type=game_type,
            payload=copy.deepcopy(payload),
            score=score,
            stage=stage,
            lives=lives,
        )
        self._records[record.id] = record.model_dump()
        logger.debug("session_created", game_id=record.id, game_type=game_type)
        return self._to_record(self._records[record.id])

    def update(
        self,
        session_id: str,
        payload: dict[str, Any] | None = None,
        score: int | None = None,
        stage: int | None = None,
        lives: int | None = None,
    ) -> GameSessionRecord:
        data = self._records.get(session_id)
        if data is None:
            raise NotFoundError(f"Game session {session_id} not found")
        record = self._to_record(data)
        _apply_patch(record, payload, score, stage, lives)
        self._records[session_id] = record.model_dump()
        return self._to_record(self._records[session_id])


class SqlSessionStore(SessionStore):
    """Sessions in the ``game_session`` table, one transaction per call."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db_session = Session(self.engine, expire_on_commit=False)
        try:
            yield db_session
        except SQLAlchemyError as exc:
            db_session.rollback()
            logger.error("session_store_failed", action=action, error=str(exc))
            raise DependencyError(f"Session store failed during {action}") from exc
        finally:
            db_session.close()

    def get(self, session_id: str) -> GameSessionRecord | None:
        with self._session("get") as db_session:
            return db_session.get(GameSessionRecord, session_id)

    def create(
        self,
        game_type: str,
        payload: dict[str, Any],
        score: int = 0,
        stage: int = 1,
        lives: int = 0,
    ) -> GameSessionRecord:
        with self._session("create") as db_session:
            record = GameSessionRecord(
                game_type=game_type,
                payload=copy.deepcopy(payload),
                score=score,
                stage=stage,
                lives=lives,
            )
            db_session.add(record)
            db_session.commit()
            db_session.refresh(record)
            logger.debug("session_created", game_id=record.id, game_type=game_type)
            return record

    def update(
        self,
        session_id: str,
        payload: dict[str, Any] | None = None,
        score: int | None = None,
        stage: int | None = None,
        lives: int | None = None,
    ) -> GameSessionRecord:
        with self._session("update") as db_session:
            record = db_session.get(GameSessionRecord, session_id)
            if record is None:
                raise NotFoundError(f"Game session {session_id} not found")
            _apply_patch(record, payload, score, stage, lives)
            db_session.add(record)
            db_session.commit()
            db_session.refresh(record)
            return record
