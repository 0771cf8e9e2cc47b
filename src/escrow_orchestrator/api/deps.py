"""FastAPI dependency injection providers.

The gateway and orchestrator are built once by the application factory and
held on ``app.state``; these providers hand them to route handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TC002 - needed at runtime by FastAPI Depends()

from escrow_orchestrator.config import Settings, get_settings

if TYPE_CHECKING:
    from escrow_orchestrator.ledger.gateway import LedgerGateway
    from escrow_orchestrator.services.escrow_service import EscrowOrchestrator


def get_orchestrator(request: Request) -> EscrowOrchestrator:
    """Provide the application's EscrowOrchestrator."""
    return request.app.state.orchestrator


def get_gateway(request: Request) -> LedgerGateway:
    """Provide the application's ledger gateway."""
    return request.app.state.gateway


def get_app_settings(request: Request) -> Settings:
    """Provide the application settings, falling back to the environment."""
    return getattr(request.app.state, "settings", None) or get_settings()
