"""End-to-end tests for the content and AI endpoints over in-memory SQLite."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from synapse_capture.application.services import CaptureService, ContentClassificationService, SSEManager
from synapse_capture.domain.exceptions import StorageError
from synapse_capture.infrastructure.database import (
    build_engine,
    build_session_factory,
    create_tables,
    get_db_session,
)
from synapse_capture.infrastructure.dependencies import (
    get_capture_service,
    get_chat_provider,
    get_embedding_provider,
    get_sse_manager,
)
from synapse_capture.main import app

U1 = {"X-User-Id": "u1"}
U2 = {"X-User-Id": "u2"}


@pytest_asyncio.fixture
async def client():
    engine = build_engine("sqlite:///:memory:")
    await create_tables(engine)
    factory = build_session_factory(engine)

    async def override_session():
        async with factory() as session:
            yield session
            await session.commit()

    sse = SSEManager()
    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_chat_provider] = lambda: None
    app.dependency_overrides[get_embedding_provider] = lambda: None
    app.dependency_overrides[get_sse_manager] = lambda: sse

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
    await engine.dispose()


# ── /content ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_requests_without_owner_are_unauthorized(client):
    assert (await client.post("/api/v1/content", json={"url": "https://x"})).status_code == 401
    assert (await client.get("/api/v1/content")).status_code == 401
    assert (await client.get("/api/v1/content/stream")).status_code == 401
    assert (await client.post("/api/v1/ai/search", json={"prompt": "x"})).status_code == 401


@pytest.mark.asyncio
async def test_capture_requires_url(client):
    response = await client.post("/api/v1/content", json={"title": "No url"}, headers=U1)

    assert response.status_code == 400
    assert response.json()["detail"] == "URL is required"


@pytest.mark.asyncio
async def test_capture_with_legacy_segment_type(client):
    response = await client.post(
        "/api/v1/content",
        json={"url": "https://youtube.com/watch?v=1", "title": "Talk", "segmentType": "Videos"},
        headers=U1,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["segments"] == ["Videos"]
    assert body["isMultiSegment"] is False
    assert body["message"] == "Content saved successfully"
    assert body["id"]


@pytest.mark.asyncio
async def test_multi_segment_capture_is_listed_per_segment(client):
    response = await client.post(
        "/api/v1/content",
        json={
            "url": "https://shop.example/kettle",
            "title": "Kettle",
            "content": {"text": "steel kettle"},
            "segments": ["Products", "Images"],
        },
        headers=U1,
    )
    assert response.status_code == 201
    assert response.json()["isMultiSegment"] is True

    listing = (await client.get("/api/v1/content", headers=U1)).json()
    images = (await client.get("/api/v1/content", params={"segmentType": "Images"}, headers=U1)).json()

    assert sorted(row["segment_type"] for row in listing["content"]) == ["Images", "Products"]
    assert {(s["segment_type"], s["count"]) for s in listing["stats"]} == {("Images", 1), ("Products", 1)}
    assert [row["segment_type"] for row in images["content"]] == ["Images"]
    primary = next(r for r in listing["content"] if r["segment_type"] == "Products")
    assert primary["metadata"]["isPrimarySegment"] is True
    assert primary["metadata"]["allSegments"] == ["Products", "Images"]
    assert primary["user_id"] == "u1"


@pytest.mark.asyncio
async def test_capture_classified_from_signals(client):
    response = await client.post(
        "/api/v1/content",
        json={"url": "https://vimeo.com/1", "signals": {"hasVideos": True}},
        headers=U1,
    )

    assert response.status_code == 201
    assert response.json()["segments"] == ["Videos"]
    listing = (await client.get("/api/v1/content", headers=U1)).json()
    assert listing["content"][0]["title"] == "Untitled"


@pytest.mark.asyncio
async def test_capture_with_unknown_segments_is_rejected(client):
    response = await client.post(
        "/api/v1/content",
        json={"url": "https://example.com", "segments": ["Podcasts"]},
        headers=U1,
    )

    assert response.status_code == 422
    assert (await client.get("/api/v1/content", headers=U1)).json()["content"] == []


@pytest.mark.asyncio
async def test_listing_is_scoped_to_owner(client):
    await client.post("/api/v1/content", json={"url": "https://a", "segmentType": "Books"}, headers=U1)

    listing = (await client.get("/api/v1/content", headers=U2)).json()

    assert listing == {"content": [], "stats": []}


@pytest.mark.asyncio
async def test_storage_failure_returns_500(client):
    class FailingRepo:
        async def insert_content_rows(self, items):
            raise StorageError("insert", "disk full")

    app.dependency_overrides[get_capture_service] = lambda: CaptureService(
        FailingRepo(), ContentClassificationService(None)
    )

    response = await client.post(
        "/api/v1/content", json={"url": "https://a", "segmentType": "Books"}, headers=U1
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save content"


# ── /ai ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_categorize_uses_fallback_without_credentials(client):
    response = await client.post(
        "/api/v1/ai/categorize",
        json={"text": "buy now for $5", "hasLinks": True},
        headers=U1,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["segmentType"] == "Products"
    assert body["segments"] == ["Products"]
    assert body["source"] == "fallback"
    assert body["contentType"] == {"isEducational": False, "isTechnical": False, "format": None}


@pytest.mark.asyncio
async def test_search_requires_prompt(client):
    response = await client.post("/api/v1/ai/search", json={"prompt": "  "}, headers=U1)

    assert response.status_code == 400
    assert response.json()["detail"] == "Search prompt is required"


@pytest.mark.asyncio
async def test_search_returns_ranked_and_grouped_results(client):
    await client.post(
        "/api/v1/content",
        json={
            "url": "https://blog.example/postgres",
            "title": "Postgres indexing guide",
            "segmentType": "Articles",
        },
        headers=U1,
    )
    await client.post(
        "/api/v1/content",
        json={"url": "https://cards.example/kanji", "title": "Kanji flashcards", "segmentType": "Study"},
        headers=U1,
    )
    await client.post(
        "/api/v1/content",
        json={"url": "https://blog.example/other", "title": "Postgres indexing guide", "segmentType": "Articles"},
        headers=U2,
    )

    response = await client.post("/api/v1/ai/search", json={"prompt": "postgres indexing"}, headers=U1)

    assert response.status_code == 200
    body = response.json()
    assert body["hasSemanticResults"] is False
    assert [r["url"] for r in body["results"]] == ["https://blog.example/postgres"]
    assert body["results"][0]["source"] == "fuzzy"
    assert list(body["groupedResults"]) == ["Articles"]


@pytest.mark.asyncio
async def test_search_with_no_content(client):
    response = await client.post("/api/v1/ai/search", json={"prompt": "anything"}, headers=U1)

    assert response.status_code == 200
    assert response.json() == {"results": [], "groupedResults": {}, "hasSemanticResults": False}
