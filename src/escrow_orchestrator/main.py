"""FastAPI application entry point for the Escrow Orchestrator.

Lifecycle:
    1. Startup: Initialize logging. The ledger connection opens lazily on
       the first request that needs it.
    2. Running: Serve REST API + MCP tools on a single Uvicorn process.
    3. Shutdown: Close the ledger websocket gracefully.

The MCP server is mounted at /mcp so AI agents can discover tools
alongside the REST API at /api/escrow/*.

Run with:
    uv run uvicorn escrow_orchestrator.main:app --reload --host 0.0.0.0 --port 10000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from escrow_orchestrator.config import get_settings
from escrow_orchestrator.ledger.gateway import XRPLGateway
from escrow_orchestrator.logging_config import get_logger, setup_logging
from escrow_orchestrator.services.escrow_service import EscrowOrchestrator

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from escrow_orchestrator.config import Settings
    from escrow_orchestrator.ledger.gateway import LedgerGateway


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings: Settings = app.state.settings

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
        network=settings.xrpl_network.value,
    )
    logger = get_logger(__name__)
    logger.info(
        "app.starting",
        env=settings.app_env,
        server_url=settings.xrpl_url,
    )
    logger.info("app.started", host=settings.app_host, port=settings.app_port)

    yield

    # Shutdown
    logger.info("app.shutting_down")
    await app.state.gateway.close()
    logger.info("app.stopped")


def create_app(
    gateway: LedgerGateway | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Application factory — creates and configures the FastAPI app.

    Args:
        gateway: Ledger gateway to use. Defaults to an XRPLGateway built
            from settings; tests pass a fake.
        settings: Defaults to the cached environment settings.
    """
    settings = settings or get_settings()
    gateway = gateway or XRPLGateway.from_settings(settings)

    app = FastAPI(
        title="Escrow Orchestrator",
        description=(
            "Prepares, submits and inspects XRP Ledger escrows. "
            "Signing stays with the caller."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.orchestrator = EscrowOrchestrator(
        gateway,
        check_multisig_on_all=settings.escrow_multisig_check_all_operations,
    )

    # --- Middleware ---
    from escrow_orchestrator.api.middleware import setup_middleware

    setup_middleware(app, settings)

    # --- REST API Routes ---
    from escrow_orchestrator.api.routes.escrow import router as escrow_router
    from escrow_orchestrator.api.routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(escrow_router)

    # --- MCP Server (mounted as sub-application) ---
    from escrow_orchestrator.mcp_server.tools import bind_orchestrator, mcp

    bind_orchestrator(app.state.orchestrator)
    app.mount("/mcp", mcp.sse_app())

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "escrow_orchestrator.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.app_log_level.lower(),
    )


# The app instance used by Uvicorn
app = create_app()
