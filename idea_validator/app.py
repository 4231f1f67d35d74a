"""Application factory for the idea validator FastAPI backend."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .logger import setup_logging
from .pipeline import ValidationPipeline, build_pipeline
from .routers import chat
from .schema_registry import schema_registry

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    pipeline: ValidationPipeline | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    ``pipeline`` replaces the provider wiring, which is how tests run the
    app without network access.
    """

    settings = settings or get_settings()
    setup_logging(settings.log_level)
    # Fail fast on a malformed structured-output contract.
    schema_registry.validate()

    if pipeline is None:
        pipeline = build_pipeline(settings)
        if settings.missing_keys:
            logger.warning("Missing provider keys: %s", ", ".join(settings.missing_keys))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.pipeline.research.aclose()

    app = FastAPI(
        title="Idea Validator Backend",
        version="0.1.0",
        description="Market research and AI enrichment for startup ideas.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.pipeline = pipeline
    logger.info("Idea validator ready (mode=%s, schemas v%s)", pipeline.mode.value, schema_registry.version)
    app.include_router(chat.router)
    return app


app = create_app()
