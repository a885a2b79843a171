"""Survival: pick the words related to the base word, avoid the trap."""

import random
from dataclasses import dataclass

from ..engine.difficulty import adjust_for_performance, difficulty_for_stage
from ..engine.scoring import (
    calculate_survival_final_score,
    round_half_up,
    score_correct_answer,
)
from ..engine.state import (
    INITIAL_LIVES,
    SURVIVAL,
    SurvivalGameState,
    is_valid_game_session,
    load_game_state,
)
from ..engine.traps import generate_trap_words
from ..engine.words import normalize_word
from ..errors import DependencyError, InputError, NotFoundError, StateError
from ..logging import get_logger
from ..session import SessionStore
from ..similarity import SimilarityOracle
from ..wordstore import WordStore

logger = get_logger(__name__)

CORRECT_ANSWER_COUNT = 5
CORRECT_ANSWER_THRESHOLD = 0.7
TRAPS_PER_ROUND = 1
BASE_WORD_POOL_SIZE = 50

FALLBACK_BASE_WORDS = [
    "cat",
    "dog",
    "car",
    "house",
    "book",
    "music",
    "food",
    "water",
    "tree",
    "flower",
    "sun",
    "moon",
    "computer",
    "phone",
    "game",
    "love",
    "happy",
    "beautiful",
    "strong",
    "fast",
]


@dataclass(frozen=True)
class GameChoice:
    word: str
    is_correct: bool


@dataclass
class SurvivalRound:
    base_word: str
    choices: list[GameChoice]
    stage: int
    lives: int
    score: int


@dataclass
class SurvivalAnswerResult:
    is_correct: bool
    score: int
    lives: int
    stage: int
    is_game_over: bool
    correct_answer: str | None = None
    game_over_reason: str | None = None
    final_score: int | None = None


@dataclass
class GameStatistics:
    stage: int
    score: int
    lives: int
    accuracy: int
    difficulty: str
    is_game_over: bool


class SurvivalService:
    def __init__(
        self,
        sessions: SessionStore,
        oracle: SimilarityOracle,
        words: WordStore,
        rng: random.Random | None = None,
    ):
        self.sessions = sessions
        self.oracle = oracle
        self.words = words
        self.rng = rng or random.Random()

    def _random_base_word(self, exclude: set[str] | None = None) -> str:
        exclude = exclude or set()
        try:
            popular = self.words.get_popular_words(BASE_WORD_POOL_SIZE)
        except DependencyError as exc:
            logger.warning("base_word_corpus_unavailable", error=str(exc))
            popular = []

        candidates = [w for w in popular if w not in exclude]
        if not candidates:
            candidates = [w for w in FALLBACK_BASE_WORDS if w not in exclude]
        return self.rng.choice(candidates)

    def _record_usage(self, word: str) -> None:
        try:
            self.words.increment_word_usage(word)
        except DependencyError as exc:
            # Usage counts are analytics only; the game goes on without them.
            logger.warning("word_usage_not_recorded", word=word, error=str(exc))

    def _save(self, state: SurvivalGameState) -> None:
        self.sessions.update(
            state.game_id,
            payload=state.to_payload(),
            score=state.score,
            stage=state.stage,
            lives=state.lives,
        )

    def start_game(self) -> SurvivalGameState:
        base_word = self._random_base_word()
        state = SurvivalGameState(game_id="", current_base_word=base_word)
        record = self.sessions.create(
            SURVIVAL,
            state.to_payload(),
            score=state.score,
            stage=state.stage,
            lives=state.lives,
        )
        state.game_id = record.id
        self._record_usage(base_word)

        logger.info("survival_started", game_id=state.game_id, base_word=base_word)
        return state

    def get_state(self, game_id: str) -> SurvivalGameState:
        record = self.sessions.get(game_id)
        if record is None or record.game_type != SURVIVAL:
            raise NotFoundError(f"Survival game {game_id} not found")
        return load_game_state(record)

    def _playable_state(self, game_id: str) -> SurvivalGameState:
        state = self.get_state(game_id)
        if state.is_game_over:
            raise StateError(f"Game {game_id} is already over")
        return state

    def _correct_answers(self, base_word: str) -> list[str]:
        similar = self.oracle.find_similar_words(
            base_word, CORRECT_ANSWER_COUNT, CORRECT_ANSWER_THRESHOLD
        )
        return [w.word for w in similar]

    def generate_round(self, game_id: str) -> SurvivalRound:
        """Build the choices for the current stage: related words plus a trap."""
        state = self._playable_state(game_id)

        correct_answers = self._correct_answers(state.current_base_word)
        if not correct_answers:
            raise DependencyError(
                f"No related words found for '{state.current_base_word}'"
            )

        traps = generate_trap_words(
            self.oracle,
            self.words,
            state.current_base_word,
            correct_answers,
            state.difficulty,
            TRAPS_PER_ROUND,
            self.rng,
        )
        choices = [GameChoice(word, True) for word in correct_answers]
        choices += [GameChoice(trap.word, False) for trap in traps]
        self.rng.shuffle(choices)

        state.correct_answers = correct_answers
        self._save(state)

        logger.info(
            "survival_round",
            game_id=game_id,
            stage=state.stage,
            base_word=state.current_base_word,
            difficulty=state.difficulty.label,
            choices=len(choices),
        )
        return SurvivalRound(
            base_word=state.current_base_word,
            choices=choices,
            stage=state.stage,
            lives=state.lives,
            score=state.score,
        )

    def process_answer(self, game_id: str, selected_word: str) -> SurvivalAnswerResult:
        """Score one answer, adapt the difficulty and advance the game."""
        selected_word = normalize_word(selected_word)
        state = self._playable_state(game_id)

        correct_answers = state.correct_answers or self._correct_answers(
            state.current_base_word
        )
        is_correct = selected_word in correct_answers

        if is_correct:
            state.score += score_correct_answer(state.stage)
            state.stage += 1
        else:
            state.lives = max(0, state.lives - 1)

        state.record_answer(is_correct)
        state.difficulty = adjust_for_performance(
            state.difficulty, sum(state.recent_answers), len(state.recent_answers)
        )

        reason = state.game_over_reason
        state.is_game_over = reason is not None
        state.correct_answers = []
        if is_correct and not state.is_game_over:
            state.current_base_word = self._random_base_word({state.current_base_word})
            self._record_usage(state.current_base_word)

        final_score = None
        if state.is_game_over:
            final_score = calculate_survival_final_score(state.score, state.stage, state.lives)

        self._save(state)
        logger.info(
            "survival_answer",
            game_id=game_id,
            is_correct=is_correct,
            score=state.score,
            lives=state.lives,
            stage=state.stage,
            difficulty=state.difficulty.label,
            game_over_reason=reason,
        )
        return SurvivalAnswerResult(
            is_correct=is_correct,
            score=state.score,
            lives=state.lives,
            stage=state.stage,
            is_game_over=state.is_game_over,
            correct_answer=None if is_correct or not correct_answers else correct_answers[0],
            game_over_reason=reason,
            final_score=final_score,
        )

    def reset_game(
        self, game_id: str, stage: int = 1, lives: int = INITIAL_LIVES
    ) -> SurvivalGameState:
        """Put a game back at ``stage`` with ``lives``; a testing aid."""
        if stage < 1 or lives < 1:
            raise InputError("Reset needs stage >= 1 and lives >= 1")
        state = self.get_state(game_id)

        state.stage = stage
        state.lives = lives
        state.is_game_over = state.game_over_reason is not None
        state.recent_answers = []
        state.correct_answers = []
        state.difficulty = difficulty_for_stage(stage)
        if not is_valid_game_session(state):
            raise StateError(f"Game {game_id} cannot be reset to this state")

        self._save(state)
        logger.info("survival_reset", game_id=game_id, stage=stage, lives=lives)
        return state


def game_statistics(state: SurvivalGameState) -> GameStatistics:
    total = len(state.recent_answers)
    correct = sum(state.recent_answers)
    accuracy = round_half_up(correct / total * 100) if total else 0
    return GameStatistics(
        stage=state.stage,
        score=state.score,
        lives=state.lives,
        accuracy=accuracy,
        difficulty=state.difficulty.label,
        is_game_over=state.is_game_over,
    )
