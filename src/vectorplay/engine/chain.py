"""Vector maze chain validation.

A chain is ``[start, intermediate_0, ..., intermediate_n-1, goal]``. Every
adjacent pair must land inside CHAIN_BAND: below the minimum the words are
unrelated, above the maximum the step makes no real progress.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..logging import get_logger
from .difficulty import SimilarityBand
from .words import SimilarityLookup, is_blank

logger = get_logger(__name__)

CHAIN_BAND = SimilarityBand(minimum=0.1, maximum=0.8)


@dataclass
class WordChainValidation:
    is_valid: bool
    similarities: list[float] = field(default_factory=list)
    # Chain position of the word that broke the chain.
    invalid_step: int | None = None
    message: str | None = None


@dataclass
class StepValidation:
    is_valid: bool
    similarity: float | None = None
    message: str | None = None
    following_similarity: float | None = None


def _check_link(
    previous: str, word: str, similarity: float, band: SimilarityBand
) -> str | None:
    """Return a player-facing rejection message, or None if the link holds."""
    if similarity < band.minimum:
        return (
            f"'{word}' is too far from '{previous}' "
            f"({similarity:.2f} < {band.minimum:.2f}). "
            f"Pick a word closer to '{previous}'."
        )
    if similarity > band.maximum:
        return (
            f"'{word}' is too close to '{previous}' "
            f"({similarity:.2f} > {band.maximum:.2f}). "
            "Try a word that moves further along."
        )
    return None


def validate_word_chain(
    oracle: SimilarityLookup,
    start_word: str,
    intermediate_words: Sequence[str | None],
    goal_word: str,
    adjacency_tolerance: float | None = None,
    band: SimilarityBand = CHAIN_BAND,
) -> WordChainValidation:
    """Check every link of a chain and return the per-step similarity trace.

    Oracle failures propagate: a chain is never judged on made-up scores.
    ``adjacency_tolerance`` is recorded in the log only; the band is fixed.
    """
    chain = [start_word, *intermediate_words, goal_word]

    for position, word in enumerate(chain):
        if is_blank(word):
            return WordChainValidation(
                is_valid=False,
                invalid_step=position,
                message=f"Missing word at position {position}",
            )

    similarities: list[float] = []
    for position in range(1, len(chain)):
        previous, word = chain[position - 1], chain[position]
        similarity = oracle.similarity(previous, word)
        similarities.append(similarity)

        message = _check_link(previous, word, similarity, band)
        if message:
            logger.debug(
                "chain_rejected",
                position=position,
                previous=previous,
                word=word,
                similarity=similarity,
            )
            return WordChainValidation(
                is_valid=False,
                similarities=similarities,
                invalid_step=position,
                message=message,
            )

    logger.debug(
        "chain_validated",
        length=len(chain),
        similarities=similarities,
        adjacency_tolerance=adjacency_tolerance,
    )
    return WordChainValidation(is_valid=True, similarities=similarities)


def validate_intermediate_word(
    oracle: SimilarityLookup,
    previous_word: str,
    word: str,
    following_word: str | None = None,
    band: SimilarityBand = CHAIN_BAND,
) -> StepValidation:
    """Check one new word against its neighbours without touching game state."""
    similarity = oracle.similarity(previous_word, word)
    message = _check_link(previous_word, word, similarity, band)
    if message:
        return StepValidation(is_valid=False, similarity=similarity, message=message)

    if following_word is None:
        return StepValidation(is_valid=True, similarity=similarity)

    following_similarity = oracle.similarity(word, following_word)
    message = _check_link(word, following_word, following_similarity, band)
    return StepValidation(
        is_valid=message is None,
        similarity=similarity,
        message=message,
        following_similarity=following_similarity,
    )


def is_goal_reached(validation: WordChainValidation, target_similarity: float) -> bool:
    """A valid chain whose last link is at least ``target_similarity``."""
    if not validation.is_valid or not validation.similarities:
        return False
    return validation.similarities[-1] >= target_similarity


def is_similarity_goal_reached(similarity: float, target_similarity: float) -> bool:
    return similarity >= target_similarity
