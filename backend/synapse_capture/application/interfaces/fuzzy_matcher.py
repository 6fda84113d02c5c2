"""Abstract interface (port) for approximate lexical matching."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from synapse_capture.domain.entities import ContentItem


@dataclass
class FuzzyMatch:
    """One fuzzy hit. ``score`` is a similarity in [0, 1], higher is closer."""

    item: ContentItem
    score: float


class FuzzyMatcher(ABC):
    """Port for typo-tolerant search over a list of content rows."""

    @abstractmethod
    def search(self, corpus: list[ContentItem], query: str) -> list[FuzzyMatch]:
        """Return the rows that match ``query``, best match first."""
        ...
