"""Tests for service wiring."""

from vectorplay.app import create_services, load_seed_words, seed_corpus
from vectorplay.config import Config
from vectorplay.session import MemorySessionStore, SqlSessionStore
from vectorplay.wordstore import SqlWordStore


def test_seed_words():
    """The packaged seed list is clean lower-case words."""
    words = load_seed_words()
    assert len(words) > 50
    assert all(w == w.strip().lower() and not w.startswith("#") for w in words)


def test_memory_services(provider):
    """Memory backend wires shared collaborators and seeds once."""
    services = create_services(Config(storage_backend="memory"), provider=provider)
    assert isinstance(services.sessions, MemorySessionStore)
    assert services.maze.oracle is services.oracle
    assert services.survival.words is services.words

    added = seed_corpus(services)
    assert added == len(set(load_seed_words()))
    assert seed_corpus(services) == 0


def test_sql_services(provider, tmp_path):
    """SQL backend creates tables and can run a maze game."""
    config = Config(storage_backend="sql", database_url=f"sqlite:///{tmp_path}/app.db")
    services = create_services(config, provider=provider)
    assert isinstance(services.sessions, SqlSessionStore)
    assert isinstance(services.words, SqlWordStore)

    seed_corpus(services)
    game = services.maze.start_game("easy").game
    assert services.maze.get_game(game.game_id) == game
