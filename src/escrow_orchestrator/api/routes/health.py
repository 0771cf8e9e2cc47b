"""Health check and index endpoints.

Reports configuration and the ledger connection state without forcing a
connection, so a health probe never blocks on the ledger network.
Used by container healthchecks, load balancers, and monitoring systems.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from escrow_orchestrator.api.deps import get_app_settings, get_gateway
from escrow_orchestrator.config import Settings
from escrow_orchestrator.ledger.gateway import LedgerGateway
from escrow_orchestrator.schemas.escrow import HealthResponse

router = APIRouter(tags=["Health"])

ENDPOINTS = {
    "health": "GET /health",
    "createEscrow": "POST /api/escrow/create",
    "finishEscrow": "POST /api/escrow/finish",
    "cancelEscrow": "POST /api/escrow/cancel",
    "submitTx": "POST /api/escrow/submit",
    "submitMultisig": "POST /api/escrow/submit-multisig",
    "getStatus": "GET /api/escrow/status/{ownerAddress}/{offerSequence}",
    "getTx": "GET /api/escrow/transaction/{txHash}",
}


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the application and its ledger connection.",
)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    gateway: LedgerGateway = Depends(get_gateway),
) -> HealthResponse:
    ledger_status = "connected" if gateway.is_connected else "disconnected"
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        network=settings.xrpl_network.value,
        ledger=ledger_status,
    )


@router.get("/", summary="Endpoint index")
async def index(settings: Settings = Depends(get_app_settings)) -> dict:
    return {
        "message": "Escrow Orchestrator API",
        "status": "running",
        "network": settings.xrpl_network.value,
        "endpoints": ENDPOINTS,
    }
