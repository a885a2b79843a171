"""Word-association games scored with embedding similarity."""

from .app import create_services, seed_corpus
from .config import Config
from .logging import configure_logging, get_logger

__all__ = ["main", "create_services", "Config"]


def main() -> None:
    """Seed the word corpus and pre-compute its embeddings."""
    config = Config.from_env()

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
        elide_vectors=config.elide_vectors,
    )

    logger = get_logger(__name__)
    logger.info(
        "application_starting",
        storage_backend=config.storage_backend,
        embedding_model=config.embedding_model,
        log_level=config.log_level,
    )

    services = create_services(config)
    seed_corpus(services)
    corpus = services.words.get_popular_words(limit=10_000)
    embedded = services.oracle.warm_vectors(corpus)
    logger.info("warm_complete", corpus=len(corpus), embedded=embedded)
