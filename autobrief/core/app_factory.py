"""Application factory for the FastAPI app.

Centralizes app construction (process-wide state, middleware, handlers,
routers). Collaborators can be injected so tests get a fresh limiter, a fake
LLM client and an isolated knowledge store per app.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from autobrief.adapters.knowledge_store.base import AbstractKnowledgeStore
from autobrief.adapters.knowledge_store.in_memory import InMemoryKnowledgeStore
from autobrief.adapters.llm.base import AbstractLLMClient
from autobrief.adapters.llm.factory import create_llm_client
from autobrief.adapters.rate_limit.base import AbstractRateLimiter
from autobrief.adapters.rate_limit.sweeper import RateLimitSweeper
from autobrief.api.routes import books_router, health_router
from autobrief.core.admission import GATED_PATH_PREFIX, AdmissionPipeline
from autobrief.core.config import Settings, settings as default_settings
from autobrief.core.exception_handlers import setup_exception_handlers
from autobrief.core.logging import configure_logging
from autobrief.core.middleware import request_id_middleware
from autobrief.core.rate_limit import create_rate_limiter, create_sweeper
from autobrief.core.security_headers import CorsPolicy
from autobrief.services.book_service import BookService

logger = logging.getLogger(__name__)

_UNSET = object()


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    sweeper: RateLimitSweeper | None = app.state.rate_limit_sweeper
    if sweeper is not None:
        sweeper.start()
    try:
        yield
    finally:
        if sweeper is not None:
            await sweeper.stop()


def create_app(
    *,
    app_settings: Settings | None = None,
    limiter: AbstractRateLimiter | None | object = _UNSET,
    llm_client: AbstractLLMClient | None = None,
    knowledge_store: AbstractKnowledgeStore | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to build from; defaults to the global settings.
        limiter: Rate limiter to use. Omit to build one from settings; pass
            None to disable rate limiting.
        llm_client: LLM client; built from settings when omitted.
        knowledge_store: Knowledge store; a fresh in-memory store when omitted.
        configure_logs: Whether to (re)configure root logging.

    Returns:
        Configured FastAPI app.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    if limiter is _UNSET:
        limiter = create_rate_limiter(cfg.app)

    cors = CorsPolicy(allowed_origins=tuple(cfg.app.cors_origins))

    app = FastAPI(
        title="AutoBrief API",
        description=(
            "Turns a book title into a structured analysis and generates study "
            "artifacts (slides, flashcards) from it. API endpoints are rate "
            "limited per client and accept only declared JSON fields."
        ),
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.state.rate_limiter = limiter
    app.state.rate_limit_sweeper = create_sweeper(limiter, cfg.app)
    app.state.admission_pipeline = AdmissionPipeline(limiter, cors)
    app.state.max_body_bytes = cfg.app.max_body_bytes
    # An empty store has len() == 0, so test against None explicitly
    app.state.book_service = BookService(
        llm=llm_client if llm_client is not None else create_llm_client(cfg.llm),
        store=knowledge_store if knowledge_store is not None else InMemoryKnowledgeStore(),
    )

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(books_router, prefix=GATED_PATH_PREFIX)
    app.include_router(health_router)

    logger.info(
        "app.created",
        extra={
            "rate_limit_enabled": limiter is not None,
            "cors_mode": "allow_list" if cors.allow_list_mode else "permissive",
        },
    )
    return app
