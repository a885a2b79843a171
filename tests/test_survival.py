"""Tests for the survival service."""

import pytest

from vectorplay.engine.difficulty import DifficultyLevel
from vectorplay.engine.state import SURVIVAL, SurvivalGameState
from vectorplay.errors import DependencyError, InputError, NotFoundError, StateError
from vectorplay.games.survival import SurvivalService, game_statistics
from vectorplay.session import MemorySessionStore
from vectorplay.wordstore import MemoryWordStore


CAT_ANSWERS = {"kitten", "pet", "dog", "lion", "tiger"}


def _game_with(session_store: MemorySessionStore, base_word: str = "cat", **fields) -> str:
    """Store a survival game with a known base word."""
    state = SurvivalGameState(game_id="", current_base_word=base_word, **fields)
    record = session_store.create(
        SURVIVAL,
        state.to_payload(),
        score=state.score,
        stage=state.stage,
        lives=state.lives,
    )
    return record.id


def test_start_game(survival: SurvivalService, word_store: MemoryWordStore):
    """A new game starts at stage 1 with three lives."""
    state = survival.start_game()

    assert state.game_id
    assert state.current_base_word in word_store.get_popular_words()
    assert (state.stage, state.score, state.lives) == (1, 0, 3)
    assert state.difficulty == DifficultyLevel.EASY
    assert word_store.usage[state.current_base_word] == 1
    assert survival.get_state(state.game_id) == state


def test_start_game_without_corpus(session_store, warm_oracle, word_store, rng):
    """An empty corpus falls back to built-in base words."""
    service = SurvivalService(session_store, warm_oracle, word_store, rng=rng)
    state = service.start_game()
    assert state.current_base_word


def test_round_has_answers_and_trap(survival: SurvivalService, session_store):
    """A round offers the related words plus one trap."""
    game_id = _game_with(session_store)
    round_ = survival.generate_round(game_id)

    correct = {c.word for c in round_.choices if c.is_correct}
    traps = [c.word for c in round_.choices if not c.is_correct]
    assert correct == CAT_ANSWERS
    assert traps == ["car"]
    assert round_.base_word == "cat"
    assert survival.get_state(game_id).correct_answers


def test_round_trap_follows_difficulty(survival: SurvivalService, session_store):
    """Hard rounds use a closer trap."""
    game_id = _game_with(session_store, difficulty=DifficultyLevel.HARD)
    round_ = survival.generate_round(game_id)
    assert [c.word for c in round_.choices if not c.is_correct] == ["bird"]


def test_round_without_embeddings(survival: SurvivalService, session_store):
    """A base word with no embedding cannot make a round."""
    game_id = _game_with(session_store, base_word="zebra")
    with pytest.raises(DependencyError):
        survival.generate_round(game_id)


def test_correct_answer(survival: SurvivalService, session_store, word_store):
    """A correct answer scores, advances and changes the base word."""
    game_id = _game_with(session_store)
    survival.generate_round(game_id)

    result = survival.process_answer(game_id, "Kitten")
    assert result.is_correct
    assert result.score == 110
    assert result.stage == 2
    assert result.lives == 3
    assert not result.is_game_over
    assert result.correct_answer is None

    state = survival.get_state(game_id)
    assert state.current_base_word != "cat"
    assert word_store.usage[state.current_base_word] == 1
    assert state.correct_answers == []


def test_wrong_answer(survival: SurvivalService, session_store):
    """A wrong answer costs a life and reveals a correct word."""
    game_id = _game_with(session_store)
    survival.generate_round(game_id)

    result = survival.process_answer(game_id, "car")
    assert not result.is_correct
    assert result.lives == 2
    assert result.stage == 1
    assert result.score == 0
    assert result.correct_answer == "pet"
    assert survival.get_state(game_id).current_base_word == "cat"


def test_answer_without_round(survival: SurvivalService, session_store):
    """Correct answers are recomputed when no round was generated."""
    game_id = _game_with(session_store)
    assert survival.process_answer(game_id, "dog").is_correct


def test_out_of_lives(survival: SurvivalService, session_store):
    """Losing the last life ends the game."""
    game_id = _game_with(session_store, lives=1, stage=4, score=500)

    result = survival.process_answer(game_id, "engine")
    assert result.is_game_over
    assert result.game_over_reason == "no_lives"
    assert result.lives == 0
    assert result.final_score == 500 + 4 * 50

    with pytest.raises(StateError):
        survival.process_answer(game_id, "kitten")
    with pytest.raises(StateError):
        survival.generate_round(game_id)


def test_clearing_last_stage(survival: SurvivalService, session_store):
    """Clearing stage 20 ends the game with a win bonus."""
    game_id = _game_with(session_store, stage=20, lives=3)

    result = survival.process_answer(game_id, "tiger")
    assert result.is_game_over
    assert result.game_over_reason == "max_stage"
    assert result.stage == 21
    assert result.final_score == 300 + 21 * 50 + 3 * 100


def test_difficulty_rises_on_streak(survival: SurvivalService, session_store):
    """A run of correct answers raises the difficulty."""
    game_id = _game_with(session_store, recent_answers=[True] * 4)
    survival.process_answer(game_id, "lion")
    assert survival.get_state(game_id).difficulty == DifficultyLevel.MEDIUM


def test_difficulty_drops_on_misses(survival: SurvivalService, session_store):
    """A run of misses lowers the difficulty."""
    game_id = _game_with(
        session_store, recent_answers=[False, False], difficulty=DifficultyLevel.HARD
    )
    survival.process_answer(game_id, "car")
    assert survival.get_state(game_id).difficulty == DifficultyLevel.MEDIUM


def test_reset_game(survival: SurvivalService, session_store):
    """Reset revives a finished game at the given stage."""
    game_id = _game_with(session_store, lives=1)
    survival.process_answer(game_id, "car")
    assert survival.get_state(game_id).is_game_over

    state = survival.reset_game(game_id, stage=8, lives=2)
    assert not state.is_game_over
    assert state.difficulty == DifficultyLevel.HARD
    assert survival.get_state(game_id) == state


@pytest.mark.parametrize(("stage", "lives"), [(0, 3), (1, 0)])
def test_reset_rejects_bad_values(survival: SurvivalService, session_store, stage, lives):
    """Reset needs a positive stage and at least one life."""
    game_id = _game_with(session_store)
    with pytest.raises(InputError):
        survival.reset_game(game_id, stage=stage, lives=lives)


def test_unknown_game(survival: SurvivalService):
    """An unknown id is NotFoundError."""
    with pytest.raises(NotFoundError):
        survival.get_state("missing")


def test_game_statistics():
    """Accuracy is the share of recent correct answers."""
    state = SurvivalGameState(
        game_id="s1",
        current_base_word="cat",
        stage=5,
        score=540,
        recent_answers=[True, False, True, True],
    )
    stats = game_statistics(state)
    assert stats.accuracy == 75
    assert stats.difficulty == "easy"
    assert game_statistics(SurvivalGameState(game_id="s2", current_base_word="cat")).accuracy == 0
