"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads question banks, configures AI providers
    and media storage, and builds the services once
  - CORS middleware
  - Global exception handlers (SDK errors → 400/403/404/413/500)
  - All API routes mounted under ``/api``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``otassess-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from otassess_db.engine import dispose_engine, get_engine

from otassess_core.enrichment import EnrichmentGateway, ProviderSet
from otassess_core.media import LocalMediaStorage
from otassess_core.question_bank import QuestionBankStore

from otassess_server.config import (
    AISettings,
    ServerSettings,
    load_ai_settings,
    load_settings,
)
from otassess_server.dependencies import AppServices
from otassess_server.errors import EXCEPTION_HANDLERS
from otassess_server.routes import register_routes

logger = logging.getLogger(__name__)


def build_providers(ai: AISettings) -> ProviderSet:
    """Provider clients for every key that is set."""
    base_urls = {
        "openai_base_url": ai.openai_base_url,
        "grok_base_url": ai.grok_base_url,
        "gemini_base_url": ai.gemini_base_url,
    }
    providers = ProviderSet.from_keys(
        openai_api_key=ai.openai_api_key,
        grok_api_key=ai.grok_api_key,
        google_api_key=ai.google_api_key,
        timeout=ai.timeout_seconds,
        **{k: v for k, v in base_urls.items() if v},
    )
    logger.info("AI providers configured: %s", sorted(providers.providers) or "none")
    return providers


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load YAML question banks into a ``QuestionBankStore``
      2. Configure AI providers from the environment
      3. Build the services and stash them on ``app.state``

    Shutdown:
      1. Dispose the database engine's connection pool
    """
    settings: ServerSettings = app.state.settings

    # --- Load question banks ---
    store = QuestionBankStore(bank_dir=settings.question_bank_dir)
    store.load()
    logger.info("QuestionBankStore loaded successfully")

    # --- AI + storage ---
    gateway = EnrichmentGateway(build_providers(app.state.ai_settings))
    storage = LocalMediaStorage(settings.upload_dir, settings.upload_url_prefix)

    app.state.services = AppServices.build(store, gateway, storage)

    yield

    # --- Shutdown ---
    await dispose_engine()
    logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    ai_settings: AISettings | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()
    if ai_settings is None:
        ai_settings = load_ai_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="OT Assessment API Server",
        description="REST API for occupational therapy and allied health assessments",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler and dependencies can read them
    app.state.settings = settings
    app.state.ai_settings = ai_settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, handler)

    # --- Health check (outside /api prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe: verifies DB connectivity."""
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc)}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn otassess_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``otassess-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "otassess_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
