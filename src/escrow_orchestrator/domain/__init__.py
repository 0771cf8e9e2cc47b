"""Domain layer — pure escrow logic with zero framework dependencies."""

from escrow_orchestrator.domain.codecs import (
    decode_memo,
    encode_memo,
    from_ledger_epoch,
    to_ledger_epoch,
)
from escrow_orchestrator.domain.enums import EscrowState, LedgerNetwork, TransactionKind
from escrow_orchestrator.domain.exceptions import (
    EmptySignatureSetError,
    EscrowOrchestratorError,
    EscrowValidationError,
    GatewayUnavailableError,
    InvalidAddressError,
    LedgerRequestError,
)
from escrow_orchestrator.domain.models import (
    ActiveEscrow,
    CancelRequest,
    EscrowLookupError,
    EscrowNotFound,
    EscrowRequest,
    EscrowStatus,
    FinishRequest,
    IssuedAmount,
    MemoInput,
    SignaturePacket,
    SignerEntry,
    SignerListQuorum,
    SubmissionResult,
    TransactionDetails,
)
from escrow_orchestrator.domain.transactions import (
    MultisignedTransaction,
    PreparedEscrow,
    UnsignedTransaction,
)

__all__ = [
    "decode_memo",
    "encode_memo",
    "from_ledger_epoch",
    "to_ledger_epoch",
    "EscrowState",
    "LedgerNetwork",
    "TransactionKind",
    "EmptySignatureSetError",
    "EscrowOrchestratorError",
    "EscrowValidationError",
    "GatewayUnavailableError",
    "InvalidAddressError",
    "LedgerRequestError",
    "ActiveEscrow",
    "CancelRequest",
    "EscrowLookupError",
    "EscrowNotFound",
    "EscrowRequest",
    "EscrowStatus",
    "FinishRequest",
    "IssuedAmount",
    "MemoInput",
    "SignaturePacket",
    "SignerEntry",
    "SignerListQuorum",
    "SubmissionResult",
    "TransactionDetails",
    "MultisignedTransaction",
    "PreparedEscrow",
    "UnsignedTransaction",
]
