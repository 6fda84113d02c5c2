"""Domain entities: pure Python business objects, no framework dependencies."""

from .chat_message import ChatMessage, TokenUsage, ChatCompletionResult
from .classification import (
    CategoryLabels,
    ClassificationResult,
    ContentType,
    MultiCategory,
    ResolvedSegments,
    SingleCategory,
    category_labels_from_payload,
)
from .content_item import (
    CapturedContent,
    ContentItem,
    ContentSignals,
    Segment,
    SegmentCount,
)
from .search import (
    RankedResult,
    ResultSource,
    SearchResult,
    TimeIntent,
    TimeIntentKind,
)

__all__ = [
    "ChatMessage",
    "TokenUsage",
    "ChatCompletionResult",
    "CategoryLabels",
    "ClassificationResult",
    "ContentType",
    "MultiCategory",
    "ResolvedSegments",
    "SingleCategory",
    "category_labels_from_payload",
    "CapturedContent",
    "ContentItem",
    "ContentSignals",
    "Segment",
    "SegmentCount",
    "RankedResult",
    "ResultSource",
    "SearchResult",
    "TimeIntent",
    "TimeIntentKind",
]
