"""V1 API router: aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from synapse_capture.presentation.api.v1.endpoints.health import router as health_router
from synapse_capture.presentation.api.v1.endpoints.content import router as content_router
from synapse_capture.presentation.api.v1.endpoints.ai import router as ai_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(content_router)
router.include_router(ai_router)
