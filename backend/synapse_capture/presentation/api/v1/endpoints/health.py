"""Liveness probe plus a summary of which optional capabilities are active."""

from fastapi import APIRouter, Depends

from synapse_capture.application.services import SSEManager
from synapse_capture.config import get_settings
from synapse_capture.infrastructure.dependencies import get_sse_manager

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(sse: SSEManager = Depends(get_sse_manager)) -> dict:
    settings = get_settings()
    remote = settings.openrouter_configured
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "openrouter_configured": remote,
        "classification": "remote" if remote else "fallback",
        "semantic_search": remote,
        "live_clients": sse.client_count,
    }
