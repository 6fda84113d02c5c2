"""OpenRouter embedding adapter: implements the EmbeddingProvider port."""

import logging

import httpx

from synapse_capture.application.interfaces import EmbeddingProvider
from synapse_capture.domain.exceptions import EmbeddingProviderError
from synapse_capture.infrastructure.openrouter.http_base import (
    DEFAULT_APP_NAME,
    DEFAULT_BASE_URL,
    OpenRouterHTTP,
)

logger = logging.getLogger(__name__)


class OpenRouterEmbeddingProvider(OpenRouterHTTP, EmbeddingProvider):
    """Batch embeddings via ``POST /embeddings``."""

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        app_name: str = DEFAULT_APP_NAME,
        model: str = "openai/text-embedding-ada-002",
        model_dimensions: int = 1536,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        super().__init__(api_key, base_url, app_name, http_client, timeout)
        self._model = model
        self._dimensions = model_dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        data = await self._post(
            "embeddings", {"model": self._model, "input": texts}, self._error
        )

        try:
            items = sorted(data.get("data") or [], key=lambda item: item.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in items]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise self._error(200, f"Malformed embeddings response: {e}") from e

        if len(vectors) != len(texts):
            raise self._error(200, f"Expected {len(texts)} embeddings, got {len(vectors)}")

        logger.debug(
            "Embedded %d text(s) with %s (%d dims)",
            len(vectors),
            self._model,
            len(vectors[0]) if vectors else 0,
        )
        return vectors

    def _error(self, status_code: int, message: str) -> EmbeddingProviderError:
        return EmbeddingProviderError(self.provider_name, status_code, message)
