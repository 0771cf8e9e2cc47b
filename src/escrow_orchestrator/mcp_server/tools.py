"""MCP Tool definitions for the Escrow Orchestrator.

These tools expose the escrow operations via the Model Context Protocol,
allowing AI agents to discover and call them programmatically.

Tools:
    - create_escrow: Prepare an unsigned EscrowCreate
    - finish_escrow: Prepare an unsigned EscrowFinish
    - cancel_escrow: Prepare an unsigned EscrowCancel
    - submit_transaction: Submit a signed transaction blob
    - submit_multisig: Assemble signatures and submit
    - escrow_status: Read an escrow's ledger state
    - transaction_details: Look up a transaction by hash

The MCP server is mounted into FastAPI at /mcp via app.mount(). Tools use
the orchestrator bound by the application factory (no FastAPI Depends here).
Failures come back as {"error": <code>, "message": ...} rather than raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from escrow_orchestrator.domain.exceptions import EscrowOrchestratorError, EscrowValidationError
from escrow_orchestrator.domain.models import ActiveEscrow, EscrowLookupError
from escrow_orchestrator.logging_config import get_logger
from escrow_orchestrator.schemas.escrow import (
    CancelEscrowRequest,
    CreateEscrowRequest,
    EscrowDetailsResponse,
    FinishEscrowRequest,
    PreparedTransactionResponse,
    SubmissionResponse,
    SubmitMultisigRequest,
    SubmitTransactionRequest,
    TransactionDetailsResponse,
)

if TYPE_CHECKING:
    from escrow_orchestrator.services.escrow_service import EscrowOrchestrator

logger = get_logger(__name__)

# Initialize the MCP server
# This will be mounted into the FastAPI app in main.py
mcp = FastMCP(
    "Escrow Orchestrator",
    json_response=True,
)

_orchestrator: EscrowOrchestrator | None = None


def bind_orchestrator(orchestrator: EscrowOrchestrator | None) -> None:
    """Attach the orchestrator the tools call into."""
    global _orchestrator
    _orchestrator = orchestrator


def _require_orchestrator() -> EscrowOrchestrator:
    if _orchestrator is None:
        raise RuntimeError("MCP tools called before an orchestrator was bound")
    return _orchestrator


def _error(tool: str, exc: Exception) -> dict[str, Any]:
    if isinstance(exc, ValidationError):
        logger.info("mcp.validation_failed", tool=tool, errors=exc.error_count())
        return {
            "error": "VALIDATION_ERROR",
            "message": "Validation failed",
            "details": [
                {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
                for e in exc.errors()
            ],
        }
    if isinstance(exc, EscrowValidationError):
        logger.info("mcp.validation_failed", tool=tool, field=exc.field)
        return {"error": exc.code, "message": exc.message, "details": exc.details()}
    if isinstance(exc, EscrowOrchestratorError):
        logger.warning("mcp.domain_error", tool=tool, code=exc.code, error=exc.message)
        return {"error": exc.code, "message": exc.message}
    logger.exception(f"mcp.{tool}.error")
    return {"error": "INTERNAL_ERROR", "message": str(exc)}


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


@mcp.tool()
async def create_escrow(
    source_address: str,
    destination_address: str,
    amount: str | dict[str, str],
    finish_after: int,
    cancel_after: int | None = None,
    condition: str | None = None,
    memo_type: str | None = None,
    memo_data: str | None = None,
    destination_tag: int | None = None,
) -> dict:
    """Prepare an unsigned EscrowCreate that locks funds for a destination.

    Args:
        source_address: Funding account (classic r-address).
        destination_address: Account that receives the funds on finish.
        amount: Drops as an integer string ("1000000" = 1 XRP), or an
            issued-currency object {"currency", "value", "issuer"}.
        finish_after: Unix time after which the escrow can be finished.
        cancel_after: Optional Unix time after which the escrow can be cancelled.
        condition: Optional hex crypto-condition.
        memo_type: Optional memo type (defaults to "escrow" when a memo is given).
        memo_data: Optional memo text.
        destination_tag: Optional destination tag.

    Returns:
        The autofilled transaction to sign, plus signing instructions.
    """
    try:
        memo = None
        if memo_type is not None or memo_data is not None:
            memo = {"type": memo_type, "data": memo_data}
        request = CreateEscrowRequest.model_validate(
            {
                "sourceAddress": source_address,
                "destinationAddress": destination_address,
                "amount": amount,
                "finishAfter": finish_after,
                "cancelAfter": cancel_after,
                "condition": condition,
                "memo": memo,
                "destinationTag": destination_tag,
            }
        )
        prepared = await _require_orchestrator().prepare_create(request.to_domain())
        return _dump(PreparedTransactionResponse.from_domain(prepared))
    except Exception as exc:
        return _error("create_escrow", exc)


@mcp.tool()
async def finish_escrow(
    finisher_address: str,
    owner_address: str,
    offer_sequence: int,
    condition: str | None = None,
    fulfillment: str | None = None,
) -> dict:
    """Prepare an unsigned EscrowFinish that releases escrowed funds.

    Args:
        finisher_address: Account executing the finish.
        owner_address: Account that created the escrow.
        offer_sequence: Sequence number of the EscrowCreate.
        condition: Hex crypto-condition, required with a fulfillment.
        fulfillment: Hex fulfillment for conditional escrows.

    Returns:
        The transaction to sign. requiresMultisig is true when the finisher
        has a signer list; signerList then names the required signers.
    """
    try:
        request = FinishEscrowRequest.model_validate(
            {
                "finisherAddress": finisher_address,
                "ownerAddress": owner_address,
                "offerSequence": offer_sequence,
                "condition": condition,
                "fulfillment": fulfillment,
            }
        )
        prepared = await _require_orchestrator().prepare_finish(request.to_domain())
        return _dump(PreparedTransactionResponse.from_domain(prepared))
    except Exception as exc:
        return _error("finish_escrow", exc)


@mcp.tool()
async def cancel_escrow(canceller_address: str, owner_address: str, offer_sequence: int) -> dict:
    """Prepare an unsigned EscrowCancel that returns funds to the owner.

    Args:
        canceller_address: Account executing the cancel.
        owner_address: Account that created the escrow.
        offer_sequence: Sequence number of the EscrowCreate.
    """
    try:
        request = CancelEscrowRequest.model_validate(
            {
                "cancellerAddress": canceller_address,
                "ownerAddress": owner_address,
                "offerSequence": offer_sequence,
            }
        )
        prepared = await _require_orchestrator().prepare_cancel(request.to_domain())
        return _dump(PreparedTransactionResponse.from_domain(prepared))
    except Exception as exc:
        return _error("cancel_escrow", exc)


@mcp.tool()
async def submit_transaction(signed_tx_blob: str) -> dict:
    """Submit a signed, hex-encoded transaction blob.

    Returns:
        accepted, transactionHash and the engine result. A rejected
        transaction is reported with accepted=false, not as an error.
    """
    try:
        request = SubmitTransactionRequest.model_validate({"signedTxBlob": signed_tx_blob})
        result = await _require_orchestrator().submit(request.signed_tx_blob)
        return _dump(SubmissionResponse.from_domain(result))
    except Exception as exc:
        return _error("submit_transaction", exc)


@mcp.tool()
async def submit_multisig(transaction: dict, signatures: list[dict]) -> dict:
    """Assemble collected signatures onto a prepared transaction and submit it.

    Args:
        transaction: The transaction object returned by a prepare tool.
        signatures: List of {"signer", "signature", "publicKey"} objects.
    """
    try:
        request = SubmitMultisigRequest.model_validate(
            {"transaction": transaction, "signatures": signatures}
        )
        result = await _require_orchestrator().submit_multisig(
            request.transaction,
            [signature.to_domain() for signature in request.signatures],
        )
        return _dump(SubmissionResponse.from_domain(result))
    except Exception as exc:
        return _error("submit_multisig", exc)


@mcp.tool()
async def escrow_status(owner_address: str, offer_sequence: int) -> dict:
    """Check whether an escrow is still on the validated ledger.

    Returns:
        status "active" with the escrow's fields, "not_found" when it was
        finished, cancelled or never created. A failed lookup comes back as
        {"error": "ESCROW_LOOKUP_FAILED", "message": ...}, like any other tool error.
    """
    try:
        status = await _require_orchestrator().get_escrow_status(owner_address, offer_sequence)
    except Exception as exc:
        return _error("escrow_status", exc)

    if isinstance(status, ActiveEscrow):
        return {"status": status.state.value, "escrow": _dump(EscrowDetailsResponse.from_domain(status))}
    if isinstance(status, EscrowLookupError):
        logger.warning(
            "mcp.escrow_status.lookup_failed",
            owner=owner_address,
            seq=offer_sequence,
            error=status.message,
        )
        return {"error": "ESCROW_LOOKUP_FAILED", "message": status.message}
    return {"status": status.state.value, "message": status.message}


@mcp.tool()
async def transaction_details(tx_hash: str) -> dict:
    """Look up a transaction by hash and return the ledger's record as-is."""
    try:
        details = await _require_orchestrator().get_transaction_details(tx_hash)
        return _dump(TransactionDetailsResponse.from_domain(details))
    except Exception as exc:
        return _error("transaction_details", exc)
