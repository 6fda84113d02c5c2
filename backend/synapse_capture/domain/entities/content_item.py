"""Domain entities for captured content: framework-independent."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Segment(str, Enum):
    """The fixed set of content categories an item can be filed under."""

    IMAGES = "Images"
    PRODUCTS = "Products"
    BOOKS = "Books"
    ARTICLES = "Articles"
    VIDEOS = "Videos"
    STUDY = "Study"

    @classmethod
    def labels(cls) -> list[str]:
        return [s.value for s in cls]

    @classmethod
    def is_valid(cls, label: Any) -> bool:
        return isinstance(label, str) and label in cls._value2member_map_


@dataclass
class ContentSignals:
    """Page signals extracted by the browser agent at capture time."""

    text: str = ""
    has_images: bool = False
    has_videos: bool = False
    has_links: bool = False
    element_type: str | None = None


@dataclass
class ContentItem:
    """One persisted content row.

    A logical capture with N segments is stored as N rows, one per segment.
    The first row is the primary one; the others carry ``primarySegment`` in
    their metadata.
    """

    owner_id: str
    url: str
    segment_type: str
    title: str = ""
    content_text: str = ""
    content_html: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def all_segments(self) -> list[str]:
        """Every segment of the logical capture this row belongs to."""
        segments = self.metadata.get("allSegments")
        if isinstance(segments, list) and segments:
            return [str(s) for s in segments]
        return [self.segment_type]

    @property
    def is_primary(self) -> bool:
        return self.metadata.get("isPrimarySegment", True) is not False


@dataclass
class CapturedContent:
    """A capture submitted by the browser agent, before classification."""

    url: str
    title: str = ""
    text: str = ""
    html: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    segments: list[str] = field(default_factory=list)
    signals: ContentSignals | None = None


@dataclass
class SegmentCount:
    """Number of stored rows for one segment."""

    segment_type: str
    count: int
