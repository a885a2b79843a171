"""Difficulty levels, per-level settings and adaptive adjustment.

Both game modes share one three-step scale. Harder levels ask for finer
semantic discrimination: in the vector maze that means a lower final-step
target, more hops and a narrower tolerance; in survival it means trap
words that sit closer to the base word.
"""

from dataclasses import dataclass
from enum import IntEnum


class DifficultyLevel(IntEnum):
    EASY = 1
    MEDIUM = 2
    HARD = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    def harder(self) -> "DifficultyLevel":
        return DifficultyLevel(min(self + 1, DifficultyLevel.HARD))

    def easier(self) -> "DifficultyLevel":
        return DifficultyLevel(max(self - 1, DifficultyLevel.EASY))

    @classmethod
    def from_name(cls, value: "str | int | DifficultyLevel | None") -> "DifficultyLevel":
        """Parse a level name or ordinal. Anything unrecognised is MEDIUM."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                return cls.MEDIUM
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                return cls.MEDIUM
        return cls.MEDIUM


@dataclass(frozen=True)
class DifficultySettings:
    target_similarity: float
    max_moves: int
    time_limit_seconds: int
    adjacency_tolerance: float
    required_intermediate_words: int


@dataclass(frozen=True)
class SimilarityBand:
    """Closed similarity interval [minimum, maximum]."""

    minimum: float
    maximum: float

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


_SETTINGS = {
    DifficultyLevel.EASY: DifficultySettings(
        target_similarity=0.4,
        max_moves=10,
        time_limit_seconds=300,
        adjacency_tolerance=0.3,
        required_intermediate_words=2,
    ),
    DifficultyLevel.MEDIUM: DifficultySettings(
        target_similarity=0.35,
        max_moves=12,
        time_limit_seconds=480,
        adjacency_tolerance=0.2,
        required_intermediate_words=3,
    ),
    DifficultyLevel.HARD: DifficultySettings(
        target_similarity=0.3,
        max_moves=15,
        time_limit_seconds=600,
        adjacency_tolerance=0.15,
        required_intermediate_words=4,
    ),
}

# Survival trap words: harder levels use traps closer to the base word.
_TRAP_BANDS = {
    DifficultyLevel.EASY: SimilarityBand(0.1, 0.3),
    DifficultyLevel.MEDIUM: SimilarityBand(0.3, 0.5),
    DifficultyLevel.HARD: SimilarityBand(0.5, 0.7),
}

EASY_STAGE_LIMIT = 3
MEDIUM_STAGE_LIMIT = 7

MIN_PERFORMANCE_SAMPLE = 3
RAISE_DIFFICULTY_RATE = 0.8
LOWER_DIFFICULTY_RATE = 0.4


def settings_for(
    level: "DifficultyLevel | str | int | None",
) -> DifficultySettings:
    """Settings bundle for a level; unknown input gets MEDIUM."""
    return _SETTINGS[DifficultyLevel.from_name(level)]


def trap_band(level: "DifficultyLevel | str | int | None") -> SimilarityBand:
    return _TRAP_BANDS[DifficultyLevel.from_name(level)]


def difficulty_for_stage(stage: int) -> DifficultyLevel:
    """Survival difficulty implied by the stage number."""
    if stage <= EASY_STAGE_LIMIT:
        return DifficultyLevel.EASY
    if stage <= MEDIUM_STAGE_LIMIT:
        return DifficultyLevel.MEDIUM
    return DifficultyLevel.HARD


def adjust_for_performance(
    current: DifficultyLevel,
    recent_correct: int,
    recent_total: int,
) -> DifficultyLevel:
    """Move one level up or down based on the recent success rate.

    The gap between the two thresholds is a dead zone, so a player
    hovering around 60% stays where they are.
    """
    current = DifficultyLevel.from_name(current)
    if recent_total < MIN_PERFORMANCE_SAMPLE:
        return current

    success_rate = recent_correct / recent_total
    if success_rate > RAISE_DIFFICULTY_RATE:
        return current.harder()
    if success_rate < LOWER_DIFFICULTY_RATE:
        return current.easier()
    return current
