"""Configuration for vectorplay."""

import os
from dataclasses import dataclass
from pathlib import Path

STORAGE_BACKENDS = ("sql", "memory")


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./vectorplay.db"
    storage_backend: str = "sql"
    embedding_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"
    embedding_base_url: str = "https://api.openai.com/v1"
    embedding_timeout: float = 30.0
    embedding_max_retries: int = 3
    embedding_retry_delay: float = 1.0
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    elide_vectors: bool = True

    def __post_init__(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage_backend must be one of {STORAGE_BACKENDS}, "
                f"got {self.storage_backend!r}"
            )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        log_file = os.getenv("VECTORPLAY_LOG_FILE")

        return cls(
            database_url=os.getenv("VECTORPLAY_DATABASE_URL", cls.database_url),
            storage_backend=os.getenv(
                "VECTORPLAY_STORAGE_BACKEND", cls.storage_backend
            ).lower(),
            embedding_api_key=os.getenv("VECTORPLAY_EMBEDDING_API_KEY")
            or os.getenv("OPENAI_API_KEY"),
            embedding_model=os.getenv(
                "VECTORPLAY_EMBEDDING_MODEL", cls.embedding_model
            ),
            embedding_base_url=os.getenv(
                "VECTORPLAY_EMBEDDING_BASE_URL", cls.embedding_base_url
            ),
            embedding_timeout=float(
                os.getenv("VECTORPLAY_EMBEDDING_TIMEOUT", str(cls.embedding_timeout))
            ),
            embedding_max_retries=int(
                os.getenv(
                    "VECTORPLAY_EMBEDDING_MAX_RETRIES", str(cls.embedding_max_retries)
                )
            ),
            embedding_retry_delay=float(
                os.getenv(
                    "VECTORPLAY_EMBEDDING_RETRY_DELAY", str(cls.embedding_retry_delay)
                )
            ),
            log_level=os.getenv("VECTORPLAY_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("VECTORPLAY_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
            elide_vectors=os.getenv("VECTORPLAY_ELIDE_VECTORS", "true").lower()
            not in ("false", "0", "no"),
        )
