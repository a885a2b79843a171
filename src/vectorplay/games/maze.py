"""Vector maze: build a chain of words from a start word to a goal word.

Every public method is one read-modify-write against the session store.
Nothing is written when a method raises.
"""

import datetime as dt
import random
from collections.abc import Callable
from dataclasses import dataclass

from ..engine.chain import (
    StepValidation,
    WordChainValidation,
    is_goal_reached,
    is_similarity_goal_reached,
    validate_intermediate_word,
    validate_word_chain,
)
from ..engine.difficulty import DifficultyLevel, DifficultySettings, settings_for
from ..engine.pairs import generate_word_pair
from ..engine.scoring import (
    calculate_final_score,
    elapsed_seconds,
    round_half_up,
    similarity_progress_points,
)
from ..engine.state import VECTOR_MAZE, VectorMazeGameState, load_game_state
from ..engine.words import is_blank, normalize_word
from ..errors import InputError, NotFoundError, StateError
from ..logging import get_logger
from ..session import SessionStore
from ..similarity import SimilarityOracle
from ..wordstore import WordStore

logger = get_logger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass
class MazeStart:
    game: VectorMazeGameState
    settings: DifficultySettings


@dataclass
class IntermediateWordResult:
    is_valid: bool
    is_complete: bool
    similarity: float | None = None
    message: str | None = None
    chain_validation: WordChainValidation | None = None


@dataclass
class SimilarityCheckResult:
    similarity: float
    is_goal_reached: bool
    score: int
    estimated: bool = False


@dataclass
class FinishResult:
    final_score: int
    total_moves: int
    time_elapsed: int
    is_success: bool
    word_chain: list[str | None]
    similarities: list[float]
    message: str | None = None


class VectorMazeService:
    def __init__(
        self,
        sessions: SessionStore,
        oracle: SimilarityOracle,
        words: WordStore,
        rng: random.Random | None = None,
        clock: Callable[[], dt.datetime] = _utcnow,
    ):
        self.sessions = sessions
        self.oracle = oracle
        self.words = words
        self.rng = rng or random.Random()
        self.clock = clock

    def start_game(self, difficulty: str | DifficultyLevel | None = None) -> MazeStart:
        level = DifficultyLevel.from_name(difficulty)
        settings = settings_for(level)
        pair = generate_word_pair(self.oracle, self.words, level, self.rng)

        game = VectorMazeGameState(
            game_id="",
            start_word=pair.start_word,
            goal_word=pair.goal_word,
            target_similarity=pair.target_similarity,
            required_intermediate_words=pair.required_intermediate_words,
            difficulty=level,
            start_time=self.clock(),
        )
        record = self.sessions.create(VECTOR_MAZE, game.to_payload())
        game.game_id = record.id

        logger.info(
            "maze_started",
            game_id=game.game_id,
            difficulty=level.label,
            start_word=game.start_word,
            goal_word=game.goal_word,
        )
        return MazeStart(game=game, settings=settings)

    def get_game(self, game_id: str) -> VectorMazeGameState:
        record = self.sessions.get(game_id)
        if record is None or record.game_type != VECTOR_MAZE:
            raise NotFoundError(f"Vector maze game {game_id} not found")
        return load_game_state(record)

    def _active_game(self, game_id: str) -> VectorMazeGameState:
        game = self.get_game(game_id)
        if not game.is_active:
            raise StateError(f"Game {game_id} is already finished")
        return game

    def _save(self, game: VectorMazeGameState) -> None:
        self.sessions.update(game.game_id, payload=game.to_payload(), score=game.score)

    def _neighbours(self, game: VectorMazeGameState, position: int) -> tuple[str, str | None]:
        if position == 0:
            previous = game.start_word
        else:
            previous = game.intermediate_words[position - 1]
            if is_blank(previous):
                raise StateError(f"Position {position - 1} must be filled first")

        if position == game.required_intermediate_words - 1:
            following = game.goal_word
        else:
            following = game.intermediate_words[position + 1]
            if is_blank(following):
                following = None
        return previous, following

    def submit_intermediate_word(
        self, game_id: str, word: str, position: int
    ) -> IntermediateWordResult:
        """Place ``word`` at ``position`` in the chain if the step holds.

        A rejected word leaves the game untouched. Once every slot is
        filled the whole chain is re-validated and returned with the step.
        """
        word = normalize_word(word)
        game = self._active_game(game_id)

        if not 0 <= position < game.required_intermediate_words:
            raise InputError(
                f"Position must be between 0 and {game.required_intermediate_words - 1}"
            )
        max_moves = settings_for(game.difficulty).max_moves
        if len(game.moves) >= max_moves:
            raise StateError(f"Move limit of {max_moves} reached")

        previous, following = self._neighbours(game, position)
        step: StepValidation = validate_intermediate_word(
            self.oracle, previous, word, following
        )
        if not step.is_valid:
            logger.info(
                "intermediate_rejected",
                game_id=game_id,
                position=position,
                word=word,
                similarity=step.similarity,
            )
            return IntermediateWordResult(
                is_valid=False,
                is_complete=game.is_complete,
                similarity=step.similarity,
                message=step.message,
            )

        game.intermediate_words[position] = word
        game.moves.append(word)

        chain_validation = None
        if game.is_complete:
            chain_validation = validate_word_chain(
                self.oracle,
                game.start_word,
                game.intermediate_words,
                game.goal_word,
                settings_for(game.difficulty).adjacency_tolerance,
            )

        self._save(game)
        logger.info(
            "intermediate_accepted",
            game_id=game_id,
            position=position,
            word=word,
            similarity=step.similarity,
            is_complete=game.is_complete,
        )
        return IntermediateWordResult(
            is_valid=True,
            is_complete=game.is_complete,
            similarity=step.similarity,
            chain_validation=chain_validation,
        )

    def check_similarity(
        self, game_id: str, input_word: str, target_word: str
    ) -> SimilarityCheckResult:
        """Probe how close ``input_word`` is to ``target_word``.

        ``target_word`` must be the game's goal word. This is exploratory,
        so a provider outage degrades to the length heuristic (flagged as
        ``estimated``) instead of failing. Reaching the target similarity
        ends the game.
        """
        input_word = normalize_word(input_word)
        target_word = normalize_word(target_word)
        game = self._active_game(game_id)
        if target_word != game.goal_word:
            raise InputError(f"Target must be the goal word '{game.goal_word}'")

        score = self.oracle.estimate_similarity(input_word, target_word)
        goal_reached = is_similarity_goal_reached(score.value, game.target_similarity)

        game.moves.append(input_word)
        game.score += similarity_progress_points(score.value, goal_reached, len(game.moves))
        if goal_reached:
            game.finish(self.clock())

        self._save(game)
        logger.info(
            "similarity_checked",
            game_id=game_id,
            similarity=score.value,
            estimated=score.estimated,
            goal_reached=goal_reached,
        )
        return SimilarityCheckResult(
            similarity=round(score.value, 3),
            is_goal_reached=goal_reached,
            score=game.score,
            estimated=score.estimated,
        )

    def finish_game(self, game_id: str) -> FinishResult:
        """Validate the final chain, score it and close the game."""
        game = self._active_game(game_id)

        validation = validate_word_chain(
            self.oracle,
            game.start_word,
            game.intermediate_words,
            game.goal_word,
            settings_for(game.difficulty).adjacency_tolerance,
        )
        is_success = is_goal_reached(validation, game.target_similarity)

        finished_at = self.clock()
        result = calculate_final_score(game, is_success, validation, finished_at)
        time_elapsed = round_half_up(elapsed_seconds(game, finished_at))

        game.score = result.score
        game.finish(finished_at)
        self._save(game)

        logger.info(
            "maze_finished",
            game_id=game_id,
            is_success=result.is_success,
            score=result.score,
            moves=len(game.moves),
            time_elapsed=time_elapsed,
        )
        return FinishResult(
            final_score=result.score,
            total_moves=len(game.moves),
            time_elapsed=time_elapsed,
            is_success=result.is_success,
            word_chain=game.word_chain,
            similarities=validation.similarities,
            message=validation.message,
        )
