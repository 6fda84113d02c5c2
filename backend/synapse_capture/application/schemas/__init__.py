from .content import (
    CaptureRequest,
    CaptureResponse,
    CategorizeResponse,
    ContentItemResponse,
    ContentListResponse,
    ContentSignalsSchema,
    ContentTypeSchema,
    SegmentCountResponse,
)
from .search import RankedResultSchema, SearchRequest, SearchResponse

__all__ = [
    "CaptureRequest",
    "CaptureResponse",
    "CategorizeResponse",
    "ContentItemResponse",
    "ContentListResponse",
    "ContentSignalsSchema",
    "ContentTypeSchema",
    "SegmentCountResponse",
    "RankedResultSchema",
    "SearchRequest",
    "SearchResponse",
]
