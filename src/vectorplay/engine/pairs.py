"""Start/goal word pair generation for the vector maze."""

import random
from dataclasses import dataclass

from ..errors import DependencyError
from ..logging import get_logger
from .difficulty import DifficultyLevel, settings_for
from .words import SimilarityLookup, WordCorpus

logger = get_logger(__name__)

# Start and goal should be far apart so the chain has somewhere to go.
MAX_PAIR_SIMILARITY = 0.3
MAX_PAIR_ATTEMPTS = 5
PAIR_POOL_SIZE = 20

FALLBACK_PAIRS = [
    ("ocean", "keyboard"),
    ("music", "volcano"),
    ("apple", "democracy"),
    ("winter", "guitar"),
    ("book", "thunder"),
    ("coffee", "planet"),
    ("garden", "engine"),
    ("river", "passport"),
]


@dataclass(frozen=True)
class WordPair:
    start_word: str
    goal_word: str
    target_similarity: float
    required_intermediate_words: int


def _pick_from_corpus(
    oracle: SimilarityLookup, corpus: WordCorpus, rng: random.Random
) -> tuple[str, str] | None:
    try:
        words = list(dict.fromkeys(corpus.get_popular_words(PAIR_POOL_SIZE)))
    except DependencyError as exc:
        logger.warning("word_pair_corpus_unavailable", error=str(exc))
        return None

    if len(words) < 2:
        return None

    for attempt in range(1, MAX_PAIR_ATTEMPTS + 1):
        start_word, goal_word = rng.sample(words, 2)
        try:
            similarity = oracle.similarity(start_word, goal_word)
        except DependencyError as exc:
            logger.warning("word_pair_similarity_unavailable", error=str(exc))
            return None
        if similarity < MAX_PAIR_SIMILARITY:
            return start_word, goal_word
        logger.debug(
            "word_pair_too_similar",
            attempt=attempt,
            start_word=start_word,
            goal_word=goal_word,
            similarity=similarity,
        )
    return None


def generate_word_pair(
    oracle: SimilarityLookup,
    corpus: WordCorpus,
    difficulty: "DifficultyLevel | str | None" = None,
    rng: random.Random | None = None,
) -> WordPair:
    """Pick two dissimilar words, falling back to a curated pair."""
    rng = rng or random.Random()
    settings = settings_for(difficulty)

    picked = _pick_from_corpus(oracle, corpus, rng)
    if picked is None:
        picked = rng.choice(FALLBACK_PAIRS)
        logger.info("word_pair_fallback", start_word=picked[0], goal_word=picked[1])

    start_word, goal_word = picked
    return WordPair(
        start_word=start_word,
        goal_word=goal_word,
        target_similarity=settings.target_similarity,
        required_intermediate_words=settings.required_intermediate_words,
    )
