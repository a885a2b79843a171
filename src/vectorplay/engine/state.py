"""Per-game state for both modes.

Session payloads are a closed union: each game type has a dataclass with a
fixed field set. Stored payloads are decoded once, in :func:`load_game_state`,
and everything past that works with the dataclasses.
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Union

from ..errors import StateError
from .difficulty import DifficultyLevel

if TYPE_CHECKING:
    from ..models import GameSessionRecord

VECTOR_MAZE = "vector_maze"
SURVIVAL = "survival"

INITIAL_LIVES = 3
MAX_STAGE = 20
RECENT_ANSWER_WINDOW = 5


def _parse_time(value: str | None) -> dt.datetime | None:
    return dt.datetime.fromisoformat(value) if value else None


def _format_time(value: dt.datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class VectorMazeGameState:
    """A chain-building game from start word to goal word."""

    game_type: ClassVar[str] = VECTOR_MAZE

    game_id: str
    start_word: str
    goal_word: str
    target_similarity: float
    required_intermediate_words: int
    difficulty: DifficultyLevel
    start_time: dt.datetime
    intermediate_words: list[str | None] = field(default_factory=list)
    moves: list[str] = field(default_factory=list)
    is_active: bool = True
    end_time: dt.datetime | None = None
    score: int = 0

    def __post_init__(self) -> None:
        missing = self.required_intermediate_words - len(self.intermediate_words)
        if missing > 0:
            self.intermediate_words.extend([None] * missing)

    @property
    def word_chain(self) -> list[str | None]:
        return [self.start_word, *self.intermediate_words, self.goal_word]

    @property
    def is_complete(self) -> bool:
        return all(word for word in self.intermediate_words)

    def finish(self, at: dt.datetime) -> None:
        self.is_active = False
        self.end_time = at

    def to_payload(self) -> dict[str, Any]:
        return {
            "startWord": self.start_word,
            "goalWord": self.goal_word,
            "targetSimilarity": self.target_similarity,
            "requiredIntermediateWords": self.required_intermediate_words,
            "intermediateWords": list(self.intermediate_words),
            "moves": list(self.moves),
            "isActive": self.is_active,
            "startTime": _format_time(self.start_time),
            "endTime": _format_time(self.end_time),
            "difficulty": self.difficulty.label,
        }

    @classmethod
    def from_record(cls, record: "GameSessionRecord") -> "VectorMazeGameState":
        data = record.payload or {}
        return cls(
            game_id=record.id,
            start_word=data["startWord"],
            goal_word=data["goalWord"],
            target_similarity=float(data["targetSimilarity"]),
            required_intermediate_words=int(data["requiredIntermediateWords"]),
            difficulty=DifficultyLevel.from_name(data.get("difficulty")),
            start_time=_parse_time(data["startTime"]),
            intermediate_words=list(data.get("intermediateWords") or []),
            moves=list(data.get("moves") or []),
            is_active=bool(data.get("isActive", False)),
            end_time=_parse_time(data.get("endTime")),
            score=record.score or 0,
        )


@dataclass
class SurvivalGameState:
    """A multiple-choice survival run."""

    game_type: ClassVar[str] = SURVIVAL

    game_id: str
    current_base_word: str
    stage: int = 1
    score: int = 0
    lives: int = INITIAL_LIVES
    recent_answers: list[bool] = field(default_factory=list)
    difficulty: DifficultyLevel = DifficultyLevel.EASY
    is_game_over: bool = False
    correct_answers: list[str] = field(default_factory=list)

    def record_answer(self, is_correct: bool) -> None:
        self.recent_answers = [*self.recent_answers, is_correct][-RECENT_ANSWER_WINDOW:]

    @property
    def game_over_reason(self) -> str | None:
        if self.lives <= 0:
            return "no_lives"
        if self.stage > MAX_STAGE:
            return "max_stage"
        return None

    def to_payload(self) -> dict[str, Any]:
        return {
            "baseWord": self.current_base_word,
            "recentAnswers": list(self.recent_answers),
            "difficulty": int(self.difficulty),
            "isGameOver": self.is_game_over,
            "correctAnswers": list(self.correct_answers),
        }

    @classmethod
    def from_record(cls, record: "GameSessionRecord") -> "SurvivalGameState":
        data = record.payload or {}
        return cls(
            game_id=record.id,
            current_base_word=data["baseWord"],
            stage=record.stage if record.stage is not None else 1,
            score=record.score or 0,
            lives=record.lives if record.lives is not None else INITIAL_LIVES,
            recent_answers=[bool(a) for a in data.get("recentAnswers") or []],
            difficulty=DifficultyLevel.from_name(
                data.get("difficulty", DifficultyLevel.EASY)
            ),
            is_game_over=bool(data.get("isGameOver", False)),
            correct_answers=list(data.get("correctAnswers") or []),
        )


GameState = Union[VectorMazeGameState, SurvivalGameState]

_STATE_TYPES: dict[str, type] = {
    VECTOR_MAZE: VectorMazeGameState,
    SURVIVAL: SurvivalGameState,
}


def load_game_state(record: "GameSessionRecord") -> GameState:
    """Decode a stored session into its game state."""
    state_type = _STATE_TYPES.get(record.game_type)
    if state_type is None:
        raise StateError(f"Unknown game type {record.game_type!r}")
    try:
        return state_type.from_record(record)
    except (KeyError, TypeError, ValueError) as exc:
        raise StateError(f"Corrupt session payload for game {record.id}") from exc


def is_valid_game_session(state: SurvivalGameState) -> bool:
    return bool(
        state.game_id
        and state.stage > 0
        and state.lives >= 0
        and state.score >= 0
        and state.current_base_word
    )
