"""Service wiring for vectorplay."""

from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable

from sqlmodel import SQLModel, create_engine

from .config import Config
from .embeddings import EmbeddingProvider, OpenAIEmbeddingProvider
from .games.maze import VectorMazeService
from .games.survival import SurvivalService
from .logging import get_logger
from .session import MemorySessionStore, SessionStore, SqlSessionStore
from .similarity import SimilarityOracle
from .wordstore import MemoryWordStore, SqlWordStore, WordStore

logger = get_logger(__name__)


def _get_data_path() -> Traversable:
    """Locate the seed word list via importlib.resources."""
    return resources.files("vectorplay.data").joinpath("seed_words.txt")


def load_seed_words() -> list[str]:
    text = _get_data_path().read_text(encoding="utf-8")
    words = (line.strip().lower() for line in text.splitlines())
    return [w for w in words if w and not w.startswith("#")]


@dataclass
class Services:
    config: Config
    sessions: SessionStore
    words: WordStore
    provider: EmbeddingProvider
    oracle: SimilarityOracle
    maze: VectorMazeService
    survival: SurvivalService


def create_provider(config: Config) -> OpenAIEmbeddingProvider:
    return OpenAIEmbeddingProvider(
        api_key=config.embedding_api_key,
        model=config.embedding_model,
        base_url=config.embedding_base_url,
        timeout=config.embedding_timeout,
        max_retries=config.embedding_max_retries,
        retry_delay=config.embedding_retry_delay,
    )


def create_stores(config: Config) -> tuple[SessionStore, WordStore]:
    """Build the stores picked by ``config.storage_backend``."""
    if config.storage_backend == "memory":
        logger.info("storage_configured", backend="memory")
        return MemorySessionStore(), MemoryWordStore()

    engine = create_engine(config.database_url)
    SQLModel.metadata.create_all(engine)
    logger.info("storage_configured", backend="sql", database_url=config.database_url)
    return SqlSessionStore(engine), SqlWordStore(engine)


def create_services(
    config: Config | None = None,
    provider: EmbeddingProvider | None = None,
) -> Services:
    """Construct every collaborator explicitly from ``config``."""
    config = config or Config.from_env()
    sessions, words = create_stores(config)
    provider = provider or create_provider(config)
    oracle = SimilarityOracle(provider, words)

    return Services(
        config=config,
        sessions=sessions,
        words=words,
        provider=provider,
        oracle=oracle,
        maze=VectorMazeService(sessions, oracle, words),
        survival=SurvivalService(sessions, oracle, words),
    )


def seed_corpus(services: Services) -> int:
    """Load the packaged word list into an empty popular-word corpus."""
    if services.words.get_popular_words(1):
        return 0
    added = services.words.add_popular_words(load_seed_words())
    logger.info("corpus_seeded", words=added)
    return added
