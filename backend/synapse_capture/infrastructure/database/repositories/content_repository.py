"""Concrete content repository backed by SQLAlchemy."""

import logging
from datetime import timezone

from sqlalchemy import Text, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from synapse_capture.application.interfaces import ContentRepository
from synapse_capture.domain.entities import ContentItem, SegmentCount
from synapse_capture.domain.exceptions import StorageError
from synapse_capture.infrastructure.database.models import ContentModel

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"


class SQLAlchemyContentRepository(ContentRepository):
    """Implements the ContentRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ContentModel) -> ContentItem:
        """Map ORM model → domain entity."""
        created_at = model.created_at
        # SQLite hands back naive datetimes
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return ContentItem(
            id=model.id,
            owner_id=model.owner_id,
            url=model.url,
            title=model.title,
            content_text=model.content_text,
            content_html=model.content_html,
            segment_type=model.segment_type,
            metadata=dict(model.metadata_ or {}),
            created_at=created_at,
        )

    def _to_model(self, entity: ContentItem) -> ContentModel:
        """Map domain entity → ORM model (for creation)."""
        return ContentModel(
            owner_id=entity.owner_id,
            url=entity.url,
            title=entity.title,
            content_text=entity.content_text,
            content_html=entity.content_html,
            segment_type=entity.segment_type,
            metadata_=entity.metadata,
            created_at=entity.created_at,
        )

    async def insert_content_row(self, item: ContentItem) -> ContentItem:
        rows = await self.insert_content_rows([item])
        return rows[0]

    async def insert_content_rows(self, items: list[ContentItem]) -> list[ContentItem]:
        models = [self._to_model(item) for item in items]
        try:
            self._session.add_all(models)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to insert %d content row(s)", len(models))
            raise StorageError("insert", str(e)) from e
        return [self._to_entity(m) for m in models]

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.exception("Failed to commit content rows")
            await self._session.rollback()
            raise StorageError("commit", str(e)) from e

    async def find_by_owner(
        self, owner_id: str, segment_type: str | None = None
    ) -> list[ContentItem]:
        stmt = select(ContentModel).where(ContentModel.owner_id == owner_id)
        if segment_type:
            stmt = stmt.where(ContentModel.segment_type == segment_type)
        stmt = stmt.order_by(ContentModel.created_at.desc())
        return await self._fetch(stmt, "find")

    async def search_by_owner(
        self,
        owner_id: str,
        query_text: str | None,
        limit: int = 100,
        segment_types: list[str] | None = None,
    ) -> list[ContentItem]:
        stmt = select(ContentModel).where(ContentModel.owner_id == owner_id)

        if segment_types:
            stmt = stmt.where(ContentModel.segment_type.in_(segment_types))

        if query_text and query_text.strip():
            pattern = f"%{_escape_like(query_text.strip())}%"
            stmt = stmt.where(
                or_(
                    ContentModel.title.ilike(pattern, escape=_LIKE_ESCAPE),
                    ContentModel.content_text.ilike(pattern, escape=_LIKE_ESCAPE),
                    ContentModel.url.ilike(pattern, escape=_LIKE_ESCAPE),
                    cast(ContentModel.metadata_, Text).ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )

        stmt = stmt.order_by(ContentModel.created_at.desc()).limit(limit)
        return await self._fetch(stmt, "search")

    async def count_by_segment(self, owner_id: str) -> list[SegmentCount]:
        stmt = (
            select(ContentModel.segment_type, func.count(ContentModel.id))
            .where(ContentModel.owner_id == owner_id)
            .group_by(ContentModel.segment_type)
            .order_by(ContentModel.segment_type)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception("Failed to count content for owner %s", owner_id)
            raise StorageError("count", str(e)) from e
        return [SegmentCount(segment_type=seg, count=count) for seg, count in result.all()]

    async def _fetch(self, stmt, operation: str) -> list[ContentItem]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception("Content %s query failed", operation)
            raise StorageError(operation, str(e)) from e
        return [self._to_entity(row) for row in result.scalars().all()]


def _escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
