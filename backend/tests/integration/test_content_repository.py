"""Integration tests for SQLAlchemyContentRepository against in-memory SQLite."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from synapse_capture.domain.entities import ContentItem
from synapse_capture.infrastructure.database import (
    async_database_url,
    build_engine,
    build_session_factory,
    create_tables,
)
from synapse_capture.infrastructure.database.repositories import SQLAlchemyContentRepository

T0 = datetime(2024, 11, 1, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def session():
    engine = build_engine("sqlite:///:memory:")
    await create_tables(engine)

    factory = build_session_factory(engine)
    async with factory() as s:
        yield s

    await engine.dispose()


def _row(
    owner: str = "u1",
    segment: str = "Articles",
    minutes: int = 0,
    url: str = "https://example.com/post",
    **kwargs,
) -> ContentItem:
    return ContentItem(
        owner_id=owner,
        url=url,
        segment_type=segment,
        created_at=T0 + timedelta(minutes=minutes),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_insert_assigns_ids_and_keeps_order(session):
    repo = SQLAlchemyContentRepository(session)

    stored = await repo.insert_content_rows(
        [_row(segment="Videos", title="Talk"), _row(segment="Study", title="Talk")]
    )

    assert [r.segment_type for r in stored] == ["Videos", "Study"]
    assert all(r.id for r in stored)
    assert stored[0].id != stored[1].id


@pytest.mark.asyncio
async def test_committed_rows_survive_a_later_rollback(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_rows([_row(title="Kept")])
    await repo.commit()

    await session.rollback()

    assert [r.title for r in await repo.find_by_owner("u1")] == ["Kept"]

@pytest.mark.asyncio
async def test_round_trip_keeps_metadata_and_timezone(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_row(
        _row(title="Dune", metadata={"allSegments": ["Books"], "isMultiSegment": False})
    )

    [item] = await repo.find_by_owner("u1")

    assert item.metadata == {"allSegments": ["Books"], "isMultiSegment": False}
    assert item.created_at.tzinfo is not None
    assert item.created_at == T0


@pytest.mark.asyncio
async def test_find_by_owner_is_newest_first_and_scoped(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_rows([
        _row(minutes=1, title="old"),
        _row(minutes=5, title="new", segment="Books"),
        _row(owner="u2", minutes=9, title="someone else"),
    ])

    items = await repo.find_by_owner("u1")
    books = await repo.find_by_owner("u1", "Books")

    assert [i.title for i in items] == ["new", "old"]
    assert [i.title for i in books] == ["new"]


@pytest.mark.asyncio
async def test_search_matches_any_text_field_case_insensitively(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_rows([
        _row(minutes=1, title="Postgres Indexing"),
        _row(minutes=2, content_text="all about POSTGRES vacuum"),
        _row(minutes=3, url="https://postgres.example/docs"),
        _row(minutes=4, metadata={"description": "postgres tips"}),
        _row(minutes=5, title="Sourdough"),
    ])

    items = await repo.search_by_owner("u1", "postgres")

    assert len(items) == 4
    assert all(i.title != "Sourdough" for i in items)


@pytest.mark.asyncio
async def test_search_without_text_applies_limit_and_segments(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_rows(
        [_row(minutes=n, segment="Videos" if n % 2 else "Books", title=str(n)) for n in range(6)]
    )

    latest = await repo.search_by_owner("u1", None, limit=2)
    videos = await repo.search_by_owner("u1", None, segment_types=["Videos"])

    assert [i.title for i in latest] == ["5", "4"]
    assert [i.title for i in videos] == ["5", "3", "1"]


@pytest.mark.asyncio
async def test_like_wildcards_in_query_match_literally(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_rows([
        _row(minutes=1, title="100% cotton"),
        _row(minutes=2, title="1000 cotton balls"),
    ])

    items = await repo.search_by_owner("u1", "100%")

    assert [i.title for i in items] == ["100% cotton"]


@pytest.mark.asyncio
async def test_count_by_segment(session):
    repo = SQLAlchemyContentRepository(session)
    await repo.insert_content_rows([
        _row(segment="Videos"),
        _row(segment="Study"),
        _row(segment="Study", minutes=1),
        _row(owner="u2", segment="Books"),
    ])

    counts = await repo.count_by_segment("u1")

    assert {(c.segment_type, c.count) for c in counts} == {("Videos", 1), ("Study", 2)}


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite:///synapse.db", "sqlite+aiosqlite:///synapse.db"),
        ("postgresql://u:p@db/synapse", "postgresql+asyncpg://u:p@db/synapse"),
        ("postgres://u:p@db/synapse", "postgresql+asyncpg://u:p@db/synapse"),
        ("postgresql+asyncpg://u:p@db/synapse", "postgresql+asyncpg://u:p@db/synapse"),
    ],
)
def test_async_database_url(url, expected):
    assert async_database_url(url) == expected
