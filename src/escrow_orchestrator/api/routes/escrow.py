"""Escrow REST API routes.

These endpoints are the HTTP interface for preparing, submitting and
inspecting ledger escrows. The MCP tools in mcp_server/tools.py call the
same EscrowOrchestrator, ensuring consistency.

Routes:
    POST   /api/escrow/create                          — Prepare an EscrowCreate
    POST   /api/escrow/finish                          — Prepare an EscrowFinish
    POST   /api/escrow/cancel                          — Prepare an EscrowCancel
    POST   /api/escrow/submit                          — Submit a signed blob
    POST   /api/escrow/submit-multisig                 — Assemble + submit signatures
    GET    /api/escrow/status/{owner}/{offer_sequence} — Escrow ledger state
    GET    /api/escrow/transaction/{tx_hash}           — Transaction lookup
    GET    /api/escrow/health                          — Router liveness
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from escrow_orchestrator.api.deps import get_orchestrator
from escrow_orchestrator.api.middleware import error_response
from escrow_orchestrator.domain.models import ActiveEscrow, EscrowLookupError
from escrow_orchestrator.logging_config import get_logger
from escrow_orchestrator.schemas.escrow import (
    ApiResponse,
    CancelEscrowRequest,
    CreateEscrowRequest,
    EscrowDetailsResponse,
    EscrowStatusResponse,
    FinishEscrowRequest,
    PreparedTransactionResponse,
    SubmissionResponse,
    SubmitMultisigRequest,
    SubmitTransactionRequest,
    TransactionDetailsResponse,
)
from escrow_orchestrator.services.escrow_service import EscrowOrchestrator

router = APIRouter(prefix="/api/escrow", tags=["Escrow"])
logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Prepare
# ---------------------------------------------------------------------------


@router.post(
    "/create",
    response_model=ApiResponse[PreparedTransactionResponse],
    response_model_exclude_none=True,
    summary="Prepare an unsigned EscrowCreate",
)
async def create_escrow(
    request: CreateEscrowRequest,
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[PreparedTransactionResponse]:
    """Lock funds for a destination until FinishAfter (and optionally a condition)."""
    prepared = await orchestrator.prepare_create(request.to_domain())
    return ApiResponse(data=PreparedTransactionResponse.from_domain(prepared))


@router.post(
    "/finish",
    response_model=ApiResponse[PreparedTransactionResponse],
    response_model_exclude_none=True,
    summary="Prepare an unsigned EscrowFinish",
)
async def finish_escrow(
    request: FinishEscrowRequest,
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[PreparedTransactionResponse]:
    """Release escrowed funds. Flags finisher accounts that require multisig."""
    prepared = await orchestrator.prepare_finish(request.to_domain())
    return ApiResponse(data=PreparedTransactionResponse.from_domain(prepared))


@router.post(
    "/cancel",
    response_model=ApiResponse[PreparedTransactionResponse],
    response_model_exclude_none=True,
    summary="Prepare an unsigned EscrowCancel",
)
async def cancel_escrow(
    request: CancelEscrowRequest,
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[PreparedTransactionResponse]:
    """Return escrowed funds to the owner once CancelAfter has passed."""
    prepared = await orchestrator.prepare_cancel(request.to_domain())
    return ApiResponse(data=PreparedTransactionResponse.from_domain(prepared))


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


@router.post(
    "/submit",
    response_model=ApiResponse[SubmissionResponse],
    response_model_exclude_none=True,
    summary="Submit a signed transaction blob",
)
async def submit_transaction(
    request: SubmitTransactionRequest,
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[SubmissionResponse]:
    """Forward a signed blob. An engine rejection is a normal result with accepted=false."""
    result = await orchestrator.submit(request.signed_tx_blob)
    return ApiResponse(data=SubmissionResponse.from_domain(result))


@router.post(
    "/submit-multisig",
    response_model=ApiResponse[SubmissionResponse],
    response_model_exclude_none=True,
    summary="Assemble signatures and submit a multisigned transaction",
)
async def submit_multisig(
    request: SubmitMultisigRequest,
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[SubmissionResponse]:
    result = await orchestrator.submit_multisig(
        request.transaction,
        [signature.to_domain() for signature in request.signatures],
    )
    return ApiResponse(data=SubmissionResponse.from_domain(result))


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/status/{owner_address}/{offer_sequence}",
    response_model=ApiResponse[EscrowStatusResponse],
    response_model_exclude_none=True,
    summary="Get the ledger state of an escrow",
)
async def get_escrow_status(
    owner_address: str,
    offer_sequence: int = Path(..., gt=0),
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[EscrowStatusResponse] | JSONResponse:
    """Active, not_found, or a 400 envelope when the lookup itself failed."""
    status = await orchestrator.get_escrow_status(owner_address, offer_sequence)

    if isinstance(status, EscrowLookupError):
        logger.warning(
            "api.escrow_status.lookup_failed",
            owner=owner_address,
            seq=offer_sequence,
            error=status.message,
        )
        return error_response(400, status.message, code="ESCROW_LOOKUP_FAILED")
    if isinstance(status, ActiveEscrow):
        body = EscrowStatusResponse(
            status=status.state.value, escrow=EscrowDetailsResponse.from_domain(status)
        )
    else:
        body = EscrowStatusResponse(status=status.state.value, message=status.message)
    return ApiResponse(data=body)


@router.get(
    "/transaction/{tx_hash}",
    response_model=ApiResponse[TransactionDetailsResponse],
    summary="Get a transaction by hash",
)
async def get_transaction(
    tx_hash: str = Path(..., min_length=1),
    orchestrator: EscrowOrchestrator = Depends(get_orchestrator),
) -> ApiResponse[TransactionDetailsResponse]:
    details = await orchestrator.get_transaction_details(tx_hash)
    return ApiResponse(data=TransactionDetailsResponse.from_domain(details))


@router.get("/health", summary="Escrow router liveness")
async def escrow_routes_health() -> dict:
    return ApiResponse[dict](data={"message": "Escrow routes are working"}).model_dump(mode="json")
