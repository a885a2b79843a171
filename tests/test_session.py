"""Tests for game session storage."""

import pytest

from vectorplay.errors import NotFoundError
from vectorplay.session import SessionStore


@pytest.fixture(params=["memory", "sql"])
def store(request) -> SessionStore:
    name = "session_store" if request.param == "memory" else "sql_session_store"
    return request.getfixturevalue(name)


def test_create_and_get(store: SessionStore):
    """A created session can be read back."""
    record = store.create("survival", {"baseWord": "cat"}, score=0, stage=1, lives=3)
    assert record.id

    loaded = store.get(record.id)
    assert loaded.game_type == "survival"
    assert loaded.payload == {"baseWord": "cat"}
    assert (loaded.score, loaded.stage, loaded.lives) == (0, 1, 3)


def test_unknown_id(store: SessionStore):
    """Unknown ids read as None and cannot be updated."""
    assert store.get("missing") is None
    with pytest.raises(NotFoundError):
        store.update("missing", score=10)


def test_ids_are_unique(store: SessionStore):
    """Every session gets its own id."""
    ids = {store.create("vector_maze", {}).id for _ in range(5)}
    assert len(ids) == 5


def test_partial_update(store: SessionStore):
    """Only the fields passed to update change."""
    record = store.create("survival", {"baseWord": "cat"}, lives=3)

    store.update(record.id, score=120, stage=2)
    loaded = store.get(record.id)
    assert (loaded.score, loaded.stage, loaded.lives) == (120, 2, 3)
    assert loaded.payload == {"baseWord": "cat"}

    store.update(record.id, payload={"baseWord": "dog"}, lives=2)
    loaded = store.get(record.id)
    assert loaded.payload == {"baseWord": "dog"}
    assert (loaded.score, loaded.lives) == (120, 2)


def test_returned_records_are_copies(store: SessionStore):
    """Mutating a returned record does not change what is stored."""
    record = store.create("vector_maze", {"moves": ["sea"]})
    record.payload["moves"].append("beach")
    record.score = 999

    loaded = store.get(record.id)
    assert loaded.payload == {"moves": ["sea"]}
    assert loaded.score == 0
