"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from synapse_capture.config import get_settings
from synapse_capture.infrastructure.database import create_tables, engine
from synapse_capture.infrastructure.dependencies import get_sse_manager
from synapse_capture.infrastructure.logging.log_config import setup_logging
from synapse_capture.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: configure logging, create tables, close live streams."""
    settings = get_settings()
    setup_logging()

    await create_tables(engine)

    if not settings.openrouter_configured:
        logger.warning(
            "OPENROUTER_API_KEY is not configured; classification uses the rule-based "
            "fallback and semantic search is disabled."
        )

    yield

    # Shutdown
    await get_sse_manager().shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "synapse_capture.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
