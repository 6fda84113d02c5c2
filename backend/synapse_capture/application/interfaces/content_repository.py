"""Abstract repository interface (port) for captured content rows."""

from abc import ABC, abstractmethod

from synapse_capture.domain.entities import ContentItem, SegmentCount


class ContentRepository(ABC):
    """Port for content persistence: implemented in the infrastructure layer.

    Implementations raise ``StorageError`` when the backing store fails.
    """

    @abstractmethod
    async def insert_content_row(self, item: ContentItem) -> ContentItem:
        """Persist one content row and return it with the generated ID."""
        ...

    @abstractmethod
    async def insert_content_rows(self, items: list[ContentItem]) -> list[ContentItem]:
        """Persist the rows of one logical capture atomically, in order."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Make the rows written so far durable."""
        ...

    @abstractmethod
    async def find_by_owner(
        self, owner_id: str, segment_type: str | None = None
    ) -> list[ContentItem]:
        """All rows of one owner, newest first, optionally for one segment."""
        ...

    @abstractmethod
    async def search_by_owner(
        self,
        owner_id: str,
        query_text: str | None,
        limit: int = 100,
        segment_types: list[str] | None = None,
    ) -> list[ContentItem]:
        """Rows of one owner, newest first.

        When ``query_text`` is given, only rows whose title, body text, URL or
        metadata contain it (case-insensitive) are returned.
        """
        ...

    @abstractmethod
    async def count_by_segment(self, owner_id: str) -> list[SegmentCount]:
        """Number of rows per segment for one owner."""
        ...
