from .chat_provider import ChatProvider
from .content_repository import ContentRepository
from .embedding_provider import EmbeddingProvider
from .fuzzy_matcher import FuzzyMatch, FuzzyMatcher

__all__ = [
    "ChatProvider",
    "ContentRepository",
    "EmbeddingProvider",
    "FuzzyMatch",
    "FuzzyMatcher",
]
