"""Scoring for both game modes.

Vector maze rewards speed, few attempts and a smooth chain. Survival
rewards depth and the lives left, never speed.
"""

import datetime as dt
import math
from dataclasses import dataclass
from statistics import fmean

from .chain import WordChainValidation
from .state import VectorMazeGameState

MAZE_BASE_SCORE = 1000
TIME_BONUS_WINDOW_SECONDS = 600
TIME_BONUS_PER_SECOND = 0.5
FREE_MOVES = 5
MOVE_PENALTY = 20
CHAIN_QUALITY_WEIGHT = 200

CORRECT_ANSWER_POINTS = 100
STAGE_BONUS_MULTIPLIER = 10
FINAL_STAGE_BONUS = 50
FINAL_LIFE_BONUS = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 always going up."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ScoreResult:
    score: int
    is_success: bool


def maze_score(
    elapsed_seconds: float,
    moves_count: int,
    similarities: list[float] | None = None,
) -> int:
    """Score of a successful vector maze run. Never below 1."""
    score = float(MAZE_BASE_SCORE)
    score += TIME_BONUS_PER_SECOND * max(0.0, TIME_BONUS_WINDOW_SECONDS - elapsed_seconds)
    score -= max(0, (moves_count - FREE_MOVES) * MOVE_PENALTY)
    if similarities:
        score += fmean(similarities) * CHAIN_QUALITY_WEIGHT
    return max(1, round_half_up(score))


def elapsed_seconds(game: VectorMazeGameState, finished_at: dt.datetime | None = None) -> float:
    end = finished_at or game.end_time or dt.datetime.now(dt.UTC)
    return max(0.0, (end - game.start_time).total_seconds())


def calculate_final_score(
    game: VectorMazeGameState,
    is_success: bool,
    validation: WordChainValidation | None = None,
    finished_at: dt.datetime | None = None,
) -> ScoreResult:
    """Final vector maze score; a failed run scores 0."""
    if not is_success:
        return ScoreResult(score=0, is_success=False)

    similarities = validation.similarities if validation else None
    score = maze_score(elapsed_seconds(game, finished_at), len(game.moves), similarities)
    return ScoreResult(score=score, is_success=True)


def similarity_progress_points(similarity: float, goal_reached: bool, moves_count: int) -> int:
    """Points for one exploratory similarity probe."""
    if goal_reached:
        return max(100 - moves_count * 10, 10)
    return max(0, round_half_up(similarity * 10))


def score_correct_answer(stage: int) -> int:
    return CORRECT_ANSWER_POINTS + stage * STAGE_BONUS_MULTIPLIER


def calculate_survival_final_score(base_score: int, stage: int, lives: int) -> int:
    return base_score + stage * FINAL_STAGE_BONUS + lives * FINAL_LIFE_BONUS
