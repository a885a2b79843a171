"""Tests for scoring."""

import datetime as dt

import pytest

from vectorplay.engine.chain import WordChainValidation
from vectorplay.engine.difficulty import DifficultyLevel
from vectorplay.engine.scoring import (
    ScoreResult,
    calculate_final_score,
    calculate_survival_final_score,
    maze_score,
    round_half_up,
    score_correct_answer,
    similarity_progress_points,
)
from vectorplay.engine.state import VectorMazeGameState

START = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)


def _game(moves: int) -> VectorMazeGameState:
    return VectorMazeGameState(
        game_id="g1",
        start_word="ocean",
        goal_word="keyboard",
        target_similarity=0.4,
        required_intermediate_words=2,
        difficulty=DifficultyLevel.EASY,
        start_time=START,
        moves=[f"w{i}" for i in range(moves)],
    )


def _at(seconds: float) -> dt.datetime:
    return START + dt.timedelta(seconds=seconds)


def test_failure_scores_zero():
    """A failed run scores 0."""
    assert calculate_final_score(_game(2), False) == ScoreResult(score=0, is_success=False)


def test_success_formula():
    """A successful run combines time, moves and chain quality."""
    validation = WordChainValidation(True, [0.5, 0.5, 0.5])
    result = calculate_final_score(_game(7), True, validation, _at(100))
    # 1000 + 0.5 * 500 - 2 * 20 + 0.5 * 200
    assert result == ScoreResult(score=1310, is_success=True)


def test_fewer_moves_score_higher():
    """Fewer moves beat more moves."""
    validation = WordChainValidation(True, [0.5, 0.5])
    two = calculate_final_score(_game(2), True, validation, _at(60)).score
    seven = calculate_final_score(_game(7), True, validation, _at(60)).score
    assert two > seven


def test_faster_runs_score_higher():
    """Faster runs beat slower runs."""
    validation = WordChainValidation(True, [0.5, 0.5])
    fast = calculate_final_score(_game(3), True, validation, _at(30)).score
    slow = calculate_final_score(_game(3), True, validation, _at(120)).score
    assert fast > slow


def test_time_bonus_caps():
    """The time bonus stops at the ten-minute window."""
    assert maze_score(0, 0) == 1300
    assert maze_score(600, 0) == maze_score(6000, 0) == 1000


def test_score_never_below_one():
    """A successful run always scores at least 1."""
    assert maze_score(10_000, 500, [-1.0]) == 1


def test_chain_quality_bonus_needs_trace():
    """The chain bonus needs a similarity trace."""
    assert maze_score(600, 5, None) == 1000
    assert maze_score(600, 5, [0.25, 0.75]) == 1100


def test_survival_final_score():
    """Final survival score adds stage and life bonuses."""
    assert calculate_survival_final_score(1000, 10, 2) == 1700
    assert calculate_survival_final_score(500, 5, 0) == 750


def test_correct_answer_points():
    """Correct answers are worth more at later stages."""
    assert score_correct_answer(1) == 110
    assert score_correct_answer(10) == 200


@pytest.mark.parametrize(
    ("similarity", "goal", "moves", "points"),
    [(0.34, False, 1, 3), (-0.5, False, 1, 0), (0.9, True, 2, 80), (0.9, True, 12, 10)],
)
def test_similarity_progress_points(similarity, goal, moves, points):
    """Probe points follow similarity or the goal bonus."""
    assert similarity_progress_points(similarity, goal, moves) == points


def test_half_points_round_up():
    """Half-point time bonuses always round up."""
    assert round_half_up(2.5) == 3
    assert round_half_up(1298.5) == 1299
    assert maze_score(1, 0) == 1300
    assert maze_score(3, 0) == 1299
    assert similarity_progress_points(0.25, False, 1) == 3
