"""RainbowKidz API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery), in matching order
    - Process-wide collaborators (data store, generator, rate limiter, board cache)
      live on app.state and are built once per app
    - Global error handlers map RainbowKidzError → {"ok": false, "error": code}
    - CORS origins come from settings; every response varies on Origin

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app() factory: tests inject fakes for the data store and generator
      instead of patching module globals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from rainbowkidz.api.error_handlers import register_error_handlers
from rainbowkidz.api.routes import (
    admin_content,
    board_posts,
    characters,
    comments,
    feed,
    guest_session,
    health,
    post_likes,
)
from rainbowkidz.config import Settings, get_settings
from rainbowkidz.core.board_cache import BoardCache
from rainbowkidz.core.domain_types import Table
from rainbowkidz.core.rate_limiter import RateLimiter
from rainbowkidz.infrastructure.data_store import DataStoreClient
from rainbowkidz.infrastructure.observability import setup_logging
from rainbowkidz.infrastructure.text_generation import TextGenerationClient

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "X-Admin-Key"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, settings.service_name)
    logger.info(f"{settings.service_name} {settings.service_version} started")
    yield
    logger.info(f"{settings.service_name} shutting down")
    await app.state.data_store.aclose()
    await app.state.text_generator.aclose()


def create_app(
    settings: Settings | None = None,
    *,
    data_store: DataStoreClient | None = None,
    text_generator: TextGenerationClient | None = None,
    rate_limiter: RateLimiter | None = None,
    board_cache: BoardCache | None = None,
) -> FastAPI:
    """Build the gateway app with its collaborators."""
    settings = settings or get_settings()
    app = FastAPI(
        title="RainbowKidz API", version=settings.service_version, lifespan=lifespan,
    )

    store = data_store or DataStoreClient(
        settings.data_store_url,
        settings.data_store_service_key,
        settings.storage_bucket,
        timeout_seconds=settings.data_store_timeout_seconds,
    )
    app.state.settings = settings
    app.state.data_store = store
    app.state.text_generator = text_generator or TextGenerationClient(
        settings.anthropic_api_key,
        settings.generation_model,
        timeout_seconds=settings.generation_timeout_seconds,
    )
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_entries=settings.rate_limit_max_entries,
    )
    app.state.board_cache = board_cache or BoardCache(
        lambda: store.select(Table.BOARDS, "id,slug"),
        ttl_seconds=settings.board_cache_ttl_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    @app.middleware("http")
    async def vary_on_origin(request: Request, call_next):
        response = await call_next(request)
        if "origin" not in response.headers.get("vary", "").lower():
            response.headers.add_vary_header("Origin")
        return response

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(guest_session.router)
    app.include_router(characters.router)
    app.include_router(feed.router)
    app.include_router(board_posts.router)
    app.include_router(post_likes.router)
    app.include_router(comments.router)
    app.include_router(admin_content.router)
    return app


app = create_app()
