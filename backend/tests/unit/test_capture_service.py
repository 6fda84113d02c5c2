"""Unit tests for CaptureService: segment resolution, row fan-out and live updates."""

import json
import logging

import pytest

from synapse_capture.application.services.capture_service import CaptureService, normalize_media
from synapse_capture.application.services.classification_service import ContentClassificationService
from synapse_capture.application.services.sse_manager import SSEManager
from synapse_capture.domain.entities import (
    ChatCompletionResult,
    CapturedContent,
    ContentItem,
    ContentSignals,
    SegmentCount,
    TokenUsage,
)
from synapse_capture.domain.exceptions import NoSegmentDeterminedError, StorageError, ValidationError


# ── Fakes ────────────────────────────────────────────────────────────


class FakeContentRepo:
    """Stores rows in a list and assigns sequential ids."""

    def __init__(self, commit_error: Exception | None = None):
        self.rows: list[ContentItem] = []
        self.insert_calls = 0
        self.commits = 0
        self._commit_error = commit_error

    async def insert_content_rows(self, items):
        self.insert_calls += 1
        for item in items:
            item.id = f"row-{len(self.rows) + 1}"
            self.rows.append(item)
        return items

    async def commit(self):
        if self._commit_error:
            raise self._commit_error
        self.commits += 1

    async def find_by_owner(self, owner_id, segment_type=None):
        rows = [r for r in self.rows if r.owner_id == owner_id]
        if segment_type:
            rows = [r for r in rows if r.segment_type == segment_type]
        return rows

    async def count_by_segment(self, owner_id):
        counts: dict[str, int] = {}
        for row in self.rows:
            if row.owner_id == owner_id:
                counts[row.segment_type] = counts.get(row.segment_type, 0) + 1
        return [SegmentCount(segment_type=s, count=c) for s, c in counts.items()]


class FakeChatProvider:
    provider_name = "fake"

    def __init__(self, payload: dict):
        self._payload = payload
        self.calls = 0

    async def complete(self, messages, model, *, temperature=None, max_tokens=None):
        self.calls += 1
        return ChatCompletionResult(
            model=model,
            content=json.dumps(self._payload),
            finish_reason="stop",
            usage=TokenUsage(total_tokens=42),
        )


class RecordingSSE:
    def __init__(self, error: Exception | None = None):
        self.events: list[tuple[str, str, dict]] = []
        self._error = error

    async def notify(self, owner_id, event_type, data):
        if self._error:
            raise self._error
        self.events.append((owner_id, event_type, data))
        return 1


def _service(payload: dict | None = None, sse=None) -> tuple[CaptureService, FakeContentRepo]:
    repo = FakeContentRepo()
    provider = FakeChatProvider(payload) if payload is not None else None
    return CaptureService(repo, ContentClassificationService(provider), sse), repo


# ── capture ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_one_row_per_resolved_segment():
    service, repo = _service(
        {
            "categories": ["Videos"],
            "title": "Intro to SQL",
            "description": "Lecture one",
            "contentType": {"isEducational": True, "isTechnical": True, "format": "video"},
        }
    )

    outcome = await service.capture(
        "u1",
        CapturedContent(
            url="https://youtube.com/watch?v=1",
            text="lecture",
            signals=ContentSignals(has_videos=True),
        ),
    )

    assert outcome.segments == ["Videos", "Study"]
    assert outcome.is_multi_segment is True
    assert [r.segment_type for r in repo.rows] == ["Videos", "Study"]
    assert repo.insert_calls == 1

    primary, secondary = repo.rows
    assert primary.metadata["isPrimarySegment"] is True
    assert "primarySegment" not in primary.metadata
    assert secondary.metadata["isPrimarySegment"] is False
    assert secondary.metadata["primarySegment"] == "Videos"
    for row in repo.rows:
        assert row.metadata["allSegments"] == ["Videos", "Study"]
        assert row.metadata["isMultiSegment"] is True
        assert row.metadata["contentType"]["isEducational"] is True
        assert row.metadata["description"] == "Lecture one"
        assert row.title == "Intro to SQL"
    assert primary.created_at == secondary.created_at


@pytest.mark.asyncio
async def test_single_segment_capture():
    service, repo = _service({"categories": ["Books"], "title": "Dune"})

    outcome = await service.capture("u1", CapturedContent(url="https://books.example/dune", title="Dune"))

    assert outcome.is_multi_segment is False
    assert len(repo.rows) == 1
    assert repo.rows[0].metadata["isMultiSegment"] is False
    assert repo.rows[0].metadata["allSegments"] == ["Books"]


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "   "])
async def test_missing_url_is_rejected_before_any_work(url):
    service, repo = _service({"categories": ["Books"]})

    with pytest.raises(ValidationError) as exc_info:
        await service.capture("u1", CapturedContent(url=url))

    assert exc_info.value.field == "url"
    assert repo.rows == []


@pytest.mark.asyncio
async def test_client_segments_skip_classification():
    provider = FakeChatProvider({"categories": ["Books"]})
    service = CaptureService(FakeContentRepo(), ContentClassificationService(provider))

    outcome = await service.capture(
        "u1",
        CapturedContent(url="https://example.com", title="Shop", segments=["Products", "Images"]),
    )

    assert provider.calls == 0
    assert outcome.segments == ["Products", "Images"]
    assert outcome.classification.source == "client"


@pytest.mark.asyncio
async def test_invalid_client_segments_store_nothing():
    service, repo = _service()

    with pytest.raises(NoSegmentDeterminedError):
        await service.capture(
            "u1", CapturedContent(url="https://example.com", segments=["Podcasts"])
        )

    assert repo.rows == []


@pytest.mark.asyncio
async def test_title_back_filled_from_classification():
    service, repo = _service({"categories": ["Articles"], "title": "How B-trees work"})

    await service.capture("u1", CapturedContent(url="https://blog.example/btrees", title="  "))

    assert repo.rows[0].title == "How B-trees work"


@pytest.mark.asyncio
async def test_title_defaults_to_untitled():
    service, repo = _service({"categories": ["Articles"]})

    await service.capture("u1", CapturedContent(url="https://blog.example/x"))

    assert repo.rows[0].title == "Untitled"


@pytest.mark.asyncio
async def test_signals_derived_from_media_when_absent():
    # No provider: the fallback sees the embedded image list
    service, repo = _service()

    await service.capture(
        "u1",
        CapturedContent(
            url="https://gallery.example",
            metadata={"content": {"images": [{"src": "a.png"}]}},
        ),
    )

    assert repo.rows[0].segment_type == "Images"


@pytest.mark.asyncio
async def test_primary_row_is_pushed_to_live_clients():
    sse = RecordingSSE()
    service, repo = _service({"categories": ["Articles", "Study"]}, sse)

    await service.capture("u1", CapturedContent(url="https://example.com/a", title="A"))

    assert len(sse.events) == 1
    owner_id, event_type, data = sse.events[0]
    assert owner_id == "u1"
    assert event_type == "content_update"
    assert data["type"] == "content_update"
    assert data["content"]["id"] == repo.rows[0].id
    assert data["content"]["segment_type"] == "Articles"


@pytest.mark.asyncio
async def test_rows_are_committed_before_live_clients_hear_about_them():
    sse = RecordingSSE()
    service, repo = _service({"categories": ["Articles"]}, sse)

    await service.capture("u1", CapturedContent(url="https://example.com/a"))

    assert repo.commits == 1
    assert len(sse.events) == 1


@pytest.mark.asyncio
async def test_capture_logs_a_summary(caplog):
    caplog.set_level(logging.INFO, logger="CaptureService")
    service, _ = _service({"categories": ["Articles", "Study"]})

    await service.capture("u1", CapturedContent(url="https://example.com/a"))

    assert any("rows: 2" in r.getMessage() and "segments: 2" in r.getMessage() for r in caplog.records)

@pytest.mark.asyncio
async def test_failed_commit_sends_no_live_update():
    sse = RecordingSSE()
    repo = FakeContentRepo(commit_error=StorageError("commit", "database is locked"))
    service = CaptureService(repo, ContentClassificationService(None), sse)

    with pytest.raises(StorageError):
        await service.capture("u1", CapturedContent(url="https://example.com/a", title="A"))

    assert sse.events == []

@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_capture():
    service, repo = _service({"categories": ["Articles"]}, RecordingSSE(RuntimeError("broken pipe")))

    outcome = await service.capture("u1", CapturedContent(url="https://example.com/a"))

    assert outcome.primary.id == "row-1"
    assert len(repo.rows) == 1


@pytest.mark.asyncio
async def test_real_sse_manager_with_no_clients():
    service, repo = _service({"categories": ["Articles"]}, SSEManager())

    outcome = await service.capture("u1", CapturedContent(url="https://example.com/a"))

    assert outcome.primary is repo.rows[0]


# ── categorize / list ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_categorize_returns_resolved_segments():
    service, _ = _service(
        {"categories": ["Articles"], "contentType": {"isEducational": True}, "title": "T"}
    )

    classification, resolved = await service.categorize(ContentSignals(text="tutorial"))

    assert classification.source == "remote"
    assert resolved.segments == ["Articles", "Study"]
    assert resolved.primary == "Articles"


@pytest.mark.asyncio
async def test_list_content_with_stats():
    service, _ = _service({"categories": ["Articles", "Study"]})
    await service.capture("u1", CapturedContent(url="https://example.com/a"))
    await service.capture("u2", CapturedContent(url="https://example.com/b"))

    items, stats = await service.list_content("u1")
    study_items, _ = await service.list_content("u1", "Study")

    assert len(items) == 2
    assert [i.segment_type for i in study_items] == ["Study"]
    assert {(s.segment_type, s.count) for s in stats} == {("Articles", 1), ("Study", 1)}


# ── normalize_media ──────────────────────────────────────────────────


def test_normalize_media_keeps_fixed_fields_only():
    metadata = {
        "source": "extension",
        "content": {
            "images": [{"src": "a.png", "alt": "A", "width": 640, "dataUrl": "data:x"}, "junk"],
            "videos": [{"src": "v.mp4", "thumbnail": "t.jpg", "duration": 12}],
            "links": ["https://x"],
        },
    }

    normalized = normalize_media(metadata)

    assert normalized["source"] == "extension"
    assert normalized["content"]["images"] == [
        {"src": "a.png", "alt": "A", "dataUrl": "data:x", "thumbnail": None}
    ]
    assert normalized["content"]["videos"] == [{"src": "v.mp4", "thumbnail": "t.jpg"}]
    assert normalized["content"]["links"] == ["https://x"]
    # input untouched
    assert metadata["content"]["images"][0]["width"] == 640


def test_normalize_media_without_content_block():
    assert normalize_media({"foo": 1}) == {"foo": 1}
