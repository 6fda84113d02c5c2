"""Pydantic DTOs for capturing, listing and categorizing content."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from synapse_capture.domain.entities import CapturedContent, ContentItem, ContentSignals


# ── Request Schemas ──────────────────────────────────────────────────


class ContentSignalsSchema(BaseModel):
    """Page signals extracted by the browser agent."""

    text: str = ""
    has_images: bool = Field(default=False, alias="hasImages")
    has_videos: bool = Field(default=False, alias="hasVideos")
    has_links: bool = Field(default=False, alias="hasLinks")
    element_type: str | None = Field(default=None, alias="elementType")

    model_config = {"populate_by_name": True}

    def to_entity(self) -> ContentSignals:
        return ContentSignals(
            text=self.text,
            has_images=self.has_images,
            has_videos=self.has_videos,
            has_links=self.has_links,
            element_type=self.element_type,
        )


class CapturedTextSchema(BaseModel):
    text: str = ""


class CaptureRequest(BaseModel):
    """Request body for saving a capture.

    ``url`` is validated by the service so a missing URL is reported as a
    plain 400 rather than a schema error.
    """

    url: str | None = Field(default=None, examples=["https://example.com/post"])
    title: str = ""
    content: CapturedTextSchema = Field(default_factory=CapturedTextSchema)
    html: str = ""
    segment_type: str | None = Field(default=None, alias="segmentType")
    segments: list[str] = []
    signals: ContentSignalsSchema | None = None
    metadata: dict[str, Any] = {}

    model_config = {"populate_by_name": True}

    def to_entity(self) -> CapturedContent:
        segments = list(self.segments)
        if not segments and self.segment_type:
            segments = [self.segment_type]
        return CapturedContent(
            url=self.url or "",
            title=self.title,
            text=self.content.text,
            html=self.html,
            metadata=dict(self.metadata),
            segments=segments,
            signals=self.signals.to_entity() if self.signals else None,
        )


# ── Response Schemas ─────────────────────────────────────────────────


class ContentItemResponse(BaseModel):
    """One stored content row."""

    id: str | None = None
    user_id: str
    url: str
    title: str = ""
    content_text: str = ""
    content_html: str = ""
    segment_type: str
    metadata: dict[str, Any] = {}
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, item: ContentItem) -> "ContentItemResponse":
        return cls(
            id=item.id,
            user_id=item.owner_id,
            url=item.url,
            title=item.title,
            content_text=item.content_text,
            content_html=item.content_html,
            segment_type=item.segment_type,
            metadata=item.metadata,
            created_at=item.created_at,
        )


class SegmentCountResponse(BaseModel):
    segment_type: str
    count: int


class ContentListResponse(BaseModel):
    content: list[ContentItemResponse] = []
    stats: list[SegmentCountResponse] = []


class CaptureResponse(BaseModel):
    """Returned after a successful capture."""

    id: str | None
    segments: list[str]
    is_multi_segment: bool = Field(serialization_alias="isMultiSegment")
    message: str = "Content saved successfully"


class ContentTypeSchema(BaseModel):
    is_educational: bool = Field(default=False, serialization_alias="isEducational")
    is_technical: bool = Field(default=False, serialization_alias="isTechnical")
    format: str | None = None


class CategorizeResponse(BaseModel):
    """Classifier verdict for a set of page signals."""

    segment_type: str = Field(serialization_alias="segmentType")
    segments: list[str]
    title: str
    description: str
    content_type: ContentTypeSchema = Field(serialization_alias="contentType")
    source: str
