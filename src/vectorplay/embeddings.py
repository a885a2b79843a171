"""Embedding provider clients.

The game only needs ``get_embedding`` and ``batch_get_embeddings``.
:class:`OpenAIEmbeddingProvider` talks to any OpenAI-compatible
``/embeddings`` endpoint (OpenAI, OpenRouter, a local server).
"""

import time
from collections.abc import Callable, Sequence
from typing import Any, Protocol

import requests

from .errors import DependencyError
from .logging import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS = {408, 409, 429, 500, 502, 503, 504}


class EmbeddingProvider(Protocol):
    def get_embedding(self, word: str) -> list[float]: ...

    def batch_get_embeddings(self, words: Sequence[str]) -> list[list[float]]: ...


class OpenAIEmbeddingProvider:
    """HTTP embeddings client with bounded exponential-backoff retry.

    Transport errors and the status codes in RETRYABLE_STATUS are retried
    up to ``max_retries`` times, waiting ``retry_delay * 2**attempt``
    seconds between tries. Anything else, or the final failure, raises
    DependencyError.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.model = model
        self.url = base_url.rstrip("/") + "/embeddings"
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.http = session or requests.Session()
        self.sleep = sleep

    def get_embedding(self, word: str) -> list[float]:
        return self.batch_get_embeddings([word])[0]

    def batch_get_embeddings(self, words: Sequence[str]) -> list[list[float]]:
        if not words:
            return []
        if not self.api_key:
            raise DependencyError("No embedding API key configured")

        data = self._post({"model": self.model, "input": list(words), "encoding_format": "float"})
        items = sorted(data.get("data", []), key=lambda item: item.get("index", 0))
        if len(items) != len(words):
            raise DependencyError(
                f"Embedding provider returned {len(items)} vectors for {len(words)} words"
            )
        return [list(map(float, item["embedding"])) for item in items]

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        attempt = 0
        while True:
            try:
                response = self.http.post(
                    self.url, headers=headers, json=payload, timeout=self.timeout
                )
                if response.status_code in RETRYABLE_STATUS:
                    raise requests.HTTPError(
                        f"{response.status_code} from embedding provider",
                        response=response,
                    )
                response.raise_for_status()
                return response.json()
            except requests.RequestException as exc:
                status = exc.response.status_code if exc.response is not None else None
                retryable = status is None or status in RETRYABLE_STATUS
                if not retryable or attempt >= self.max_retries:
                    logger.error(
                        "embedding_request_failed",
                        status=status,
                        attempts=attempt + 1,
                        error=str(exc),
                    )
                    raise DependencyError(f"Embedding request failed: {exc}") from exc

                delay = self.retry_delay * (2**attempt)
                logger.warning(
                    "embedding_retry",
                    status=status,
                    attempt=attempt + 1,
                    delay=delay,
                )
                self.sleep(delay)
                attempt += 1
