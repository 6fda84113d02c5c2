"""FastAPI dependency injection: wires infrastructure to application layer."""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from synapse_capture.config import get_settings
from synapse_capture.application.interfaces import ChatProvider, EmbeddingProvider
from synapse_capture.application.services import (
    CaptureService,
    ContentClassificationService,
    EmbeddingService,
    SearchService,
    SSEManager,
)
from synapse_capture.infrastructure.database.session import get_db_session
from synapse_capture.infrastructure.database.repositories import SQLAlchemyContentRepository
from synapse_capture.infrastructure.fuzzy.rapidfuzz_matcher import RapidFuzzMatcher
from synapse_capture.infrastructure.openrouter import OpenRouterClient, OpenRouterEmbeddingProvider

logger = logging.getLogger(__name__)


async def get_current_owner_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """Owner identity supplied by the upstream auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id.strip()


@lru_cache
def get_sse_manager() -> SSEManager:
    """Process-wide live-update broadcaster."""
    return SSEManager()


def get_chat_provider() -> ChatProvider | None:
    """OpenRouter chat provider, or None when no key is configured."""
    settings = get_settings()
    if not settings.openrouter_configured:
        return None
    return OpenRouterClient(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
    )


def get_embedding_provider() -> EmbeddingProvider | None:
    """OpenRouter embedding provider, or None when no key is configured."""
    settings = get_settings()
    if not settings.openrouter_configured:
        return None
    return OpenRouterEmbeddingProvider(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
    )


def get_classification_service(
    chat_provider: ChatProvider | None = Depends(get_chat_provider),
) -> ContentClassificationService:
    settings = get_settings()
    if chat_provider is None:
        logger.debug("OPENROUTER_API_KEY is not configured; classification uses the rule-based fallback")
    return ContentClassificationService(chat_provider, model=settings.classification_model)


def get_embedding_service(
    embedding_provider: EmbeddingProvider | None = Depends(get_embedding_provider),
) -> EmbeddingService:
    settings = get_settings()
    return EmbeddingService(
        embedding_provider, max_input_chars=settings.embedding_max_input_chars
    )


async def get_capture_service(
    session: AsyncSession = Depends(get_db_session),
    classifier: ContentClassificationService = Depends(get_classification_service),
    sse_manager: SSEManager = Depends(get_sse_manager),
) -> AsyncGenerator[CaptureService, None]:
    """Provides a CaptureService with its repository, classifier and live-update channel."""
    yield CaptureService(SQLAlchemyContentRepository(session), classifier, sse_manager)


async def get_search_service(
    session: AsyncSession = Depends(get_db_session),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> AsyncGenerator[SearchService, None]:
    """Provides a SearchService with storage, fuzzy matching and embeddings wired up."""
    settings = get_settings()
    yield SearchService(
        SQLAlchemyContentRepository(session),
        RapidFuzzMatcher(),
        embedding_service,
        candidate_limit=settings.search_candidate_limit,
        embedding_concurrency=settings.search_embedding_concurrency,
        embedding_timeout=settings.search_embedding_timeout,
        semantic_deadline=settings.search_semantic_deadline,
    )
