"""FastAPI application entry point for the atomic exchange.

Lifecycle:
    1. Startup: initialize logging, open the journal, replay it into the
       ledger store and build the AtomicExchange.
    2. Running: serve the REST API at /api/v1/*.
    3. Shutdown: close the journal.

Run with:
    uvicorn atomic_exchange.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from atomic_exchange.config import get_settings
from atomic_exchange.logging_config import get_logger, setup_logging
from atomic_exchange.services.exchange import AtomicExchange

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
    )
    logger = get_logger(__name__)
    logger.info("app.starting", env=settings.app_env, debug=settings.app_debug)

    owned = getattr(app.state, "exchange", None) is None
    if owned:
        app.state.exchange = AtomicExchange.from_settings(settings)

    logger.info("app.started", host=settings.app_host, port=settings.app_port)

    yield

    logger.info("app.shutting_down")
    if owned:
        app.state.exchange.close()
        app.state.exchange = None
    logger.info("app.stopped")


def create_app(exchange: AtomicExchange | None = None) -> FastAPI:
    """Application factory.

    A pre-built ``exchange`` is attached directly, which lets tests drive the
    app without running the lifespan.
    """
    settings = get_settings()

    app = FastAPI(
        title="Atomic Exchange",
        description=(
            "Cross-chain hash-time-locked swaps with multi-sig approvals, "
            "confidential proofs, mixing pools and a fee treasury."
        ),
        version=settings.contract_version,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.exchange = exchange

    from atomic_exchange.api.middleware import setup_middleware

    setup_middleware(app, cors_origins=settings.cors_origins)

    from atomic_exchange.api.routes.governance import router as governance_router
    from atomic_exchange.api.routes.health import router as health_router
    from atomic_exchange.api.routes.pools import router as pools_router
    from atomic_exchange.api.routes.swaps import router as swaps_router

    app.include_router(health_router)
    app.include_router(swaps_router)
    app.include_router(pools_router)
    app.include_router(governance_router)

    return app


# The app instance used by Uvicorn
app = create_app()
