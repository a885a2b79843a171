"""Tests for start/goal pair generation."""

import random

from vectorplay.engine.pairs import FALLBACK_PAIRS, generate_word_pair
from vectorplay.similarity import SimilarityOracle
from vectorplay.wordstore import MemoryWordStore


def test_pair_from_corpus(oracle: SimilarityOracle, word_store: MemoryWordStore, rng: random.Random):
    """A dissimilar corpus pair is used with the level's settings."""
    word_store.add_popular_words(["ocean", "keyboard"])
    pair = generate_word_pair(oracle, word_store, "hard", rng)
    assert {pair.start_word, pair.goal_word} == {"ocean", "keyboard"}
    assert pair.target_similarity == 0.3
    assert pair.required_intermediate_words == 4


def test_similar_corpus_falls_back(oracle: SimilarityOracle, word_store: MemoryWordStore, rng: random.Random):
    """Only near-synonyms available: retries run out and a curated pair is used."""
    word_store.add_popular_words(["ocean", "sea"])
    pair = generate_word_pair(oracle, word_store, "easy", rng)
    assert (pair.start_word, pair.goal_word) in FALLBACK_PAIRS
    assert pair.start_word != pair.goal_word


def test_empty_corpus_falls_back(oracle: SimilarityOracle, word_store: MemoryWordStore, rng: random.Random):
    """An empty corpus yields a curated pair."""
    pair = generate_word_pair(oracle, word_store, None, rng)
    assert (pair.start_word, pair.goal_word) in FALLBACK_PAIRS
    assert pair.required_intermediate_words == 3


def test_provider_outage_falls_back(oracle: SimilarityOracle, word_store: MemoryWordStore, provider, rng: random.Random):
    """Embedding failures yield a curated pair."""
    word_store.add_popular_words(["ocean", "keyboard"])
    provider.fail = True
    pair = generate_word_pair(oracle, word_store, "easy", rng)
    assert (pair.start_word, pair.goal_word) in FALLBACK_PAIRS
