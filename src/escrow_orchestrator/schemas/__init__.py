"""Pydantic API schemas."""

from escrow_orchestrator.schemas.escrow import (
    ApiResponse,
    CancelEscrowRequest,
    CreateEscrowRequest,
    EscrowDetailsResponse,
    EscrowStatusResponse,
    ErrorResponse,
    FinishEscrowRequest,
    HealthResponse,
    PreparedTransactionResponse,
    SubmissionResponse,
    SubmitMultisigRequest,
    SubmitTransactionRequest,
    TransactionDetailsResponse,
)

__all__ = [
    "ApiResponse",
    "CancelEscrowRequest",
    "CreateEscrowRequest",
    "ErrorResponse",
    "EscrowDetailsResponse",
    "EscrowStatusResponse",
    "FinishEscrowRequest",
    "HealthResponse",
    "PreparedTransactionResponse",
    "SubmissionResponse",
    "SubmitMultisigRequest",
    "SubmitTransactionRequest",
    "TransactionDetailsResponse",
]
