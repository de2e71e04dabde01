"""
embedder.py
===========
Convert text strings into dense embedding vectors via a remote model.

The remote call goes through the OpenAI SDK, which speaks to any
OpenAI-compatible embeddings endpoint (EMBEDDING_BASE_URL). Transient
failures (rate limits, network blips) are retried a fixed number of times
with a fixed delay; when every attempt fails ``embed`` returns None instead
of raising, so a batch job can skip the chunk and carry on.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from rag_pipeline.config import Settings

logger = logging.getLogger(__name__)

EmbedFn = Callable[[str], List[float]]

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY  = 2.0


def _openai_embed_fn(settings: Settings, timeout: Optional[float] = None) -> EmbedFn:
    from openai import OpenAI  # type: ignore

    client = OpenAI(
        base_url = settings.embedding_base_url,
        api_key  = settings.embedding_api_key,
        timeout  = timeout if timeout is not None else settings.embedding_timeout,
        max_retries = 0,
    )

    def _embed(text: str) -> List[float]:
        response = client.embeddings.create(model=settings.embedding_model, input=text)
        return list(response.data[0].embedding)

    return _embed


class EmbeddingClient:
    """
    Bounded retry wrapper around a single-text embedding function.

    Parameters
    ----------
    embed_fn     : callable returning the vector for one text; may raise
    model_name   : label reported by the health endpoint and in logs
    max_attempts : total tries per text (first call included)
    retry_delay  : seconds slept between consecutive tries
    sleep        : injectable sleep, tests pass a no-op
    """

    def __init__(
        self,
        embed_fn: EmbedFn,
        *,
        model_name: str = "",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self._embed_fn = embed_fn
        self.model_name = model_name
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, settings: Settings, *, timeout: Optional[float] = None,
    ) -> "EmbeddingClient":
        """Client for the configured endpoint; ``timeout`` overrides EMBEDDING_TIMEOUT per call."""
        logger.info("Embedder backend: %s", settings.embedding_model)
        return cls(
            _openai_embed_fn(settings, timeout),
            model_name   = settings.embedding_model,
            max_attempts = settings.embedding_max_attempts,
            retry_delay  = settings.embedding_retry_delay,
        )

    def embed(self, text: str) -> Optional[List[float]]:
        """Return the embedding of ``text``, or None once every attempt failed."""
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                vector = self._embed_fn(text)
                if not vector:
                    raise ValueError("embedding endpoint returned an empty vector")
                return [float(v) for v in vector]
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "Embedding attempt %d/%d failed: %s", attempt, self.max_attempts, exc,
                )
                if attempt < self.max_attempts:
                    self._sleep(self.retry_delay)

        logger.error("Embedding failed after %d attempts: %s", self.max_attempts, last_error)
        return None
