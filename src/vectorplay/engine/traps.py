"""Trap (distractor) words for survival rounds.

Three strategies run in order until enough traps are found:

1. banded similarity: neighbours of the base word whose similarity sits in
   the difficulty's trap band;
2. category-different: popular words whose length differs a lot from the
   base word, a rough stand-in for "different kind of thing";
3. random: any unused stored word.
"""

import random
from collections.abc import Iterable
from dataclasses import dataclass

from ..errors import DependencyError
from ..logging import get_logger
from .difficulty import DifficultyLevel, trap_band
from .words import SimilarityLookup, WordCorpus

logger = get_logger(__name__)

LOW_SIMILARITY = "low_similarity"
CATEGORY_DIFFERENT = "category_different"
RANDOM = "random"

CANDIDATE_POOL_SIZE = 50
POPULAR_POOL_SIZE = 100
MIN_LENGTH_DIFFERENCE = 3
# A trap this close to a correct answer is effectively another correct answer.
MAX_ANSWER_SIMILARITY = 0.8
CATEGORY_DIFFERENT_SIMILARITY = 0.1
RANDOM_SIMILARITY = 0.05
PRECOMPUTED_TRAP_COUNT = 10


@dataclass(frozen=True)
class TrapWord:
    word: str
    similarity: float
    category: str


def _too_close_to_answer(
    oracle: SimilarityLookup, word: str, correct_answers: Iterable[str]
) -> bool:
    return any(
        oracle.similarity(word, answer) > MAX_ANSWER_SIMILARITY
        for answer in correct_answers
    )


def _banded_traps(
    oracle: SimilarityLookup,
    base_word: str,
    correct_answers: list[str],
    excluded: set[str],
    difficulty: DifficultyLevel,
    count: int,
) -> list[TrapWord]:
    band = trap_band(difficulty)
    candidates = oracle.find_similar_words(base_word, CANDIDATE_POOL_SIZE, 0.0)

    traps = []
    for candidate in candidates:
        if len(traps) >= count:
            break
        if candidate.word in excluded or not band.contains(candidate.similarity):
            continue
        if _too_close_to_answer(oracle, candidate.word, correct_answers):
            continue
        traps.append(TrapWord(candidate.word, candidate.similarity, LOW_SIMILARITY))
    return traps


def _category_different_traps(
    corpus: WordCorpus, base_word: str, excluded: set[str], count: int
) -> list[TrapWord]:
    popular = [w for w in corpus.get_popular_words(POPULAR_POOL_SIZE) if w not in excluded]

    preferred = [
        w for w in popular if abs(len(w) - len(base_word)) >= MIN_LENGTH_DIFFERENCE
    ]
    rest = [w for w in popular if w not in preferred]
    chosen = (preferred + rest)[:count]
    return [TrapWord(w, CATEGORY_DIFFERENT_SIMILARITY, CATEGORY_DIFFERENT) for w in chosen]


def _random_traps(corpus: WordCorpus, excluded: set[str], count: int) -> list[TrapWord]:
    words = corpus.random_words(excluded, count)
    return [TrapWord(w, RANDOM_SIMILARITY, RANDOM) for w in words if w not in excluded]


def generate_trap_words(
    oracle: SimilarityLookup,
    corpus: WordCorpus,
    base_word: str,
    correct_answers: Iterable[str],
    difficulty: "DifficultyLevel | str | int | None" = DifficultyLevel.EASY,
    count: int = 1,
    rng: random.Random | None = None,
) -> list[TrapWord]:
    """Produce up to ``count`` trap words for ``base_word``.

    The base word and the correct answers are never returned. A strategy
    that fails on a dependency is logged and the next one fills the gap.
    """
    rng = rng or random.Random()
    level = DifficultyLevel.from_name(difficulty)
    answers = list(correct_answers)
    excluded = {base_word, *answers}
    traps: list[TrapWord] = []

    strategies = (
        (LOW_SIMILARITY, lambda needed: _banded_traps(
            oracle, base_word, answers, excluded, level, needed
        )),
        (CATEGORY_DIFFERENT, lambda needed: _category_different_traps(
            corpus, base_word, excluded, needed
        )),
        (RANDOM, lambda needed: _random_traps(corpus, excluded, needed)),
    )

    for name, strategy in strategies:
        needed = count - len(traps)
        if needed <= 0:
            break
        try:
            found = strategy(needed)
        except DependencyError as exc:
            logger.warning("trap_strategy_failed", strategy=name, error=str(exc))
            continue
        for trap in found:
            if trap.word not in excluded:
                excluded.add(trap.word)
                traps.append(trap)

    rng.shuffle(traps)
    traps = traps[:count]
    logger.debug(
        "trap_words_generated",
        base_word=base_word,
        difficulty=level.label,
        traps=[t.word for t in traps],
    )
    return traps


def validate_trap_word(
    oracle: SimilarityLookup,
    base_word: str,
    trap_word: str,
    correct_answers: Iterable[str],
    difficulty: "DifficultyLevel | str | int | None",
) -> bool:
    """Audit a trap word against its difficulty band and the correct answers."""
    level = DifficultyLevel.from_name(difficulty)
    band = trap_band(level)

    similarity = oracle.similarity(base_word, trap_word)
    if similarity > band.maximum:
        return False
    if level != DifficultyLevel.EASY and similarity < band.minimum:
        return False
    return not _too_close_to_answer(oracle, trap_word, correct_answers)


def precompute_trap_candidates(
    oracle: SimilarityLookup,
    corpus: WordCorpus,
    base_word: str,
    difficulty: "DifficultyLevel | str | int | None" = DifficultyLevel.MEDIUM,
) -> list[TrapWord]:
    return generate_trap_words(
        oracle, corpus, base_word, [], difficulty, PRECOMPUTED_TRAP_COUNT
    )

