"""Capture service: classify → resolve segments → store one row per segment → notify.

A capture is either pre-segmented by the client (``segments`` or the legacy
``segmentType``) or classified from its page signals. Either way the labels
pass through the segment resolver, so nothing unsegmented is ever stored.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from synapse_capture.application.interfaces import ContentRepository
from synapse_capture.application.services.classification_service import ContentClassificationService
from synapse_capture.application.services.segment_resolver import resolve_segments
from synapse_capture.application.services.sse_manager import SSEManager
from synapse_capture.domain.entities import (
    CapturedContent,
    ClassificationResult,
    ContentItem,
    ContentSignals,
    ContentType,
    MultiCategory,
    ResolvedSegments,
    SegmentCount,
)
from synapse_capture.domain.exceptions import ValidationError
from synapse_capture.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("CaptureService")

_UNTITLED = "Untitled"


@dataclass
class CaptureOutcome:
    """Rows written for one logical capture, primary row first."""

    rows: list[ContentItem]
    segments: list[str]
    classification: ClassificationResult
    content_type: ContentType = field(default_factory=ContentType)

    @property
    def primary(self) -> ContentItem:
        return self.rows[0]

    @property
    def is_multi_segment(self) -> bool:
        return len(self.segments) > 1


class CaptureService:
    """Application service for saving captures and reading them back."""

    def __init__(
        self,
        content_repository: ContentRepository,
        classifier: ContentClassificationService,
        sse_manager: SSEManager | None = None,
    ):
        self._repository = content_repository
        self._classifier = classifier
        self._sse_manager = sse_manager

    async def categorize(
        self, signals: ContentSignals
    ) -> tuple[ClassificationResult, ResolvedSegments]:
        """Classify page signals and resolve them into valid segments.

        Raises:
            NoSegmentDeterminedError: If no valid segment remains.
        """
        with plog.timed_step(PipelineStage.CLASSIFY, "Classifying content"):
            classification = await self._classifier.classify(signals)
        plog.detail("classification", source=classification.source, labels=classification.categories)
        return classification, resolve_segments(classification)

    async def capture(self, owner_id: str, content: CapturedContent) -> CaptureOutcome:
        """Persist a capture as one row per resolved segment.

        Raises:
            ValidationError: If the URL is missing.
            NoSegmentDeterminedError: If no valid segment could be determined.
            StorageError: If the rows cannot be written.
        """
        if not content.url or not content.url.strip():
            raise ValidationError("url", "URL is required")

        plog.step_start(PipelineStage.CAPTURE, f"Capturing {content.url}", owner=owner_id)

        if content.segments:
            classification = ClassificationResult(
                labels=MultiCategory(tuple(content.segments)),
                title=content.title,
                content_type=ContentType.from_payload(content.metadata.get("contentType")),
                source="client",
            )
            resolved = resolve_segments(classification)
        else:
            classification, resolved = await self.categorize(
                content.signals or _signals_from(content)
            )

        segments = resolved.segments
        plog.step_complete(PipelineStage.SEGMENTS, f"Resolved {segments}", source=classification.source)

        title = content.title.strip() if content.title else ""
        if not title:
            title = classification.title or _UNTITLED

        rows = _build_rows(owner_id, content, title, resolved)
        with plog.timed_step(PipelineStage.STORAGE, f"Storing {len(rows)} row(s)"):
            stored = await self._repository.insert_content_rows(rows)
            await self._repository.commit()

        outcome = CaptureOutcome(
            rows=stored,
            segments=segments,
            classification=classification,
            content_type=resolved.content_type,
        )
        plog.stats(rows=len(stored), segments=len(segments), source=classification.source)
        await self._notify(owner_id, outcome.primary)
        return outcome

    async def list_content(
        self, owner_id: str, segment_type: str | None = None
    ) -> tuple[list[ContentItem], list[SegmentCount]]:
        """An owner's rows (newest first) and the per-segment row counts."""
        items = await self._repository.find_by_owner(owner_id, segment_type or None)
        stats = await self._repository.count_by_segment(owner_id)
        return items, stats

    async def _notify(self, owner_id: str, item: ContentItem) -> None:
        if self._sse_manager is None:
            return
        try:
            delivered = await self._sse_manager.notify(
                owner_id,
                "content_update",
                {"type": "content_update", "content": content_item_payload(item)},
            )
            plog.detail("live update", clients=delivered)
        except Exception as e:
            plog.step_error(PipelineStage.NOTIFY, "Live update failed; capture is stored", error=e)


def content_item_payload(item: ContentItem) -> dict[str, Any]:
    """Wire representation of a stored row."""
    return {
        "id": item.id,
        "user_id": item.owner_id,
        "url": item.url,
        "title": item.title,
        "content_text": item.content_text,
        "content_html": item.content_html,
        "segment_type": item.segment_type,
        "metadata": item.metadata,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }


def normalize_media(metadata: dict[str, Any]) -> dict[str, Any]:
    """Reduce embedded image/video descriptors to their fixed field shapes."""
    content = metadata.get("content")
    if not isinstance(content, dict):
        return dict(metadata)

    normalized = dict(content)
    if isinstance(content.get("images"), list):
        normalized["images"] = [
            {
                "src": img.get("src"),
                "alt": img.get("alt"),
                "dataUrl": img.get("dataUrl"),
                "thumbnail": img.get("thumbnail"),
            }
            for img in content["images"]
            if isinstance(img, dict)
        ]
    if isinstance(content.get("videos"), list):
        normalized["videos"] = [
            {"src": video.get("src"), "thumbnail": video.get("thumbnail")}
            for video in content["videos"]
            if isinstance(video, dict)
        ]
    return {**metadata, "content": normalized}


def _signals_from(content: CapturedContent) -> ContentSignals:
    """Derive classifier signals from the capture itself when the agent sent none."""
    media = content.metadata.get("content")
    media = media if isinstance(media, dict) else {}
    return ContentSignals(
        text=content.text,
        has_images=bool(media.get("images")),
        has_videos=bool(media.get("videos")),
        has_links=bool(media.get("links")),
    )


def _build_rows(
    owner_id: str, content: CapturedContent, title: str, resolved: ResolvedSegments
) -> list[ContentItem]:
    segments = resolved.segments
    base = normalize_media(content.metadata)
    base["contentType"] = resolved.content_type.to_dict()
    if resolved.metadata.get("description"):
        base.setdefault("description", resolved.metadata["description"])
    base["allSegments"] = list(segments)
    base["isMultiSegment"] = len(segments) > 1

    captured_at = datetime.now(timezone.utc)
    rows = []
    for index, segment in enumerate(segments):
        metadata = dict(base)
        if index == 0:
            metadata["isPrimarySegment"] = True
        else:
            metadata["isPrimarySegment"] = False
            metadata["primarySegment"] = segments[0]
        rows.append(
            ContentItem(
                owner_id=owner_id,
                url=content.url,
                segment_type=segment,
                title=title,
                content_text=content.text,
                content_html=content.html,
                metadata=metadata,
                created_at=captured_at,
            )
        )
    return rows
