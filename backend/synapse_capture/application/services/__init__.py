from .capture_service import CaptureOutcome, CaptureService
from .classification_service import ContentClassificationService, fallback_categorization
from .embedding_service import EmbeddingService, cosine_similarity
from .search_service import SearchService
from .segment_resolver import resolve_segments
from .sse_manager import SSEManager
from .temporal_parser import get_time_boost, parse_time_intent

__all__ = [
    "CaptureOutcome",
    "CaptureService",
    "ContentClassificationService",
    "fallback_categorization",
    "EmbeddingService",
    "cosine_similarity",
    "SearchService",
    "resolve_segments",
    "SSEManager",
    "get_time_boost",
    "parse_time_intent",
]
