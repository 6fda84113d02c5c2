"""Port for text embedding backends used by semantic search."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Turns texts into fixed-length vectors.

    Search compares vectors with cosine similarity, so every vector a
    provider returns must have ``dimensions`` components.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        ...

    @abstractmethod
    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """One vector per input text, in input order.

        Raises:
            EmbeddingProviderError: On transport failures, error statuses or
                a response that does not hold one vector per text.
        """
        ...
