"""Embedding service: text vectors and cosine similarity for semantic search.

Wraps the EmbeddingProvider port. A missing provider means semantic search is
disabled; a failed call yields ``None`` so the caller can skip that text.
"""

import logging
import math
import time

from synapse_capture.application.interfaces import EmbeddingProvider

logger = logging.getLogger(__name__)

_DEFAULT_MAX_INPUT_CHARS = 8000


class EmbeddingService:
    """Application service for generating single-text embeddings."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider | None = None,
        *,
        max_input_chars: int = _DEFAULT_MAX_INPUT_CHARS,
    ):
        self._embedding_provider = embedding_provider
        self._max_input_chars = max_input_chars

    @property
    def is_available(self) -> bool:
        return self._embedding_provider is not None

    async def embed(self, text: str) -> list[float] | None:
        """Embed one text, truncated to the provider's input limit.

        Returns:
            The embedding vector, or None when the provider is unavailable,
            the text is empty or the remote call fails.
        """
        if self._embedding_provider is None:
            return None
        if not text or not text.strip():
            return None

        start = time.monotonic()
        try:
            vectors = await self._embedding_provider.generate_embeddings(
                [text[: self._max_input_chars]]
            )
        except Exception:
            logger.warning("Embedding generation failed", exc_info=True)
            return None

        if not vectors or not vectors[0]:
            logger.warning("Embedding provider returned no vector")
            return None

        logger.debug(
            "Embedded %d chars in %dms",
            min(len(text), self._max_input_chars),
            int((time.monotonic() - start) * 1000),
        )
        return vectors[0]


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns NaN when either vector has zero magnitude; callers must exclude
    such scores.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return math.nan
    return dot / (norm_a * norm_b)
