"""Pydantic schemas for the Escrow API.

These schemas define the request/response shapes for the REST API and
MCP tools. JSON field names are camelCase on the wire; Python attributes
stay snake_case. Each request schema converts itself into the frozen
domain dataclass the services consume.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core.core_schema import ValidationInfo

from escrow_orchestrator.domain.models import (
    ActiveEscrow,
    CancelRequest,
    EscrowRequest,
    FinishRequest,
    IssuedAmount,
    MemoInput,
    SignaturePacket,
    SignerListQuorum,
    SubmissionResult,
    TransactionDetails,
    amount_to_ledger_json,
)
from escrow_orchestrator.domain.transactions import PreparedEscrow

# Structural shape of a classic address; the checksum is verified by the services.
CLASSIC_ADDRESS_PATTERN = r"^r[1-9A-HJ-NP-Za-km-z]{24,34}$"

ClassicAddress = Annotated[str, StringConstraints(pattern=CLASSIC_ADDRESS_PATTERN)]
DropsAmount = Annotated[str, StringConstraints(pattern=r"^\d+$")]
HexString = Annotated[str, StringConstraints(min_length=2, pattern=r"^[0-9A-Fa-f]+$")]


class CamelModel(BaseModel):
    """Base for wire schemas: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utc_now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class IssuedAmountSchema(CamelModel):
    """Issued-currency amount."""

    currency: str = Field(
        ...,
        min_length=3,
        max_length=40,
        description="Three-character code or 40-character hex currency code",
        examples=["USD"],
    )
    value: str = Field(..., min_length=1, description="Decimal amount", examples=["25.50"])
    issuer: ClassicAddress = Field(..., description="Issuing account address")

    @field_validator("currency")
    @classmethod
    def _currency_shape(cls, value: str) -> str:
        if len(value) == 3:
            return value
        if len(value) == 40 and all(c in "0123456789abcdefABCDEF" for c in value):
            return value
        raise ValueError("currency must be a 3-character code or 40 hex characters")


class MemoSchema(CamelModel):
    type: str | None = Field(default=None, max_length=100)
    data: str | None = Field(default=None, max_length=1000)


class CreateEscrowRequest(CamelModel):
    """Request body for preparing an EscrowCreate."""

    source_address: ClassicAddress = Field(..., description="Client (funding) address")
    destination_address: ClassicAddress = Field(..., description="Recipient address")
    amount: DropsAmount | IssuedAmountSchema = Field(
        ...,
        description="Drops as an integer string, or an issued-currency amount",
        examples=["1000000"],
    )
    finish_after: int = Field(..., description="Unix time after which the escrow can finish")
    cancel_after: int | None = Field(
        default=None, description="Unix time after which the escrow can be cancelled"
    )
    condition: str | None = Field(default=None, description="Hex crypto-condition")
    memo: MemoSchema | None = None
    destination_tag: int | None = Field(default=None, ge=0, le=4_294_967_295)

    @field_validator("finish_after")
    @classmethod
    def _finish_after_not_past(cls, value: int) -> int:
        now = int(utc_now().timestamp())
        if value < now:
            raise ValueError(f"must be greater than or equal to {now}")
        return value

    @field_validator("cancel_after")
    @classmethod
    def _cancel_after_not_before_finish(cls, value: int | None, info: ValidationInfo) -> int | None:
        finish_after = info.data.get("finish_after")
        if value is not None and finish_after is not None and value < finish_after:
            raise ValueError("must be greater than or equal to finishAfter")
        return value

    def to_domain(self) -> EscrowRequest:
        amount = self.amount
        if isinstance(amount, IssuedAmountSchema):
            amount = IssuedAmount(currency=amount.currency, value=amount.value, issuer=amount.issuer)
        return EscrowRequest(
            source_address=self.source_address,
            destination_address=self.destination_address,
            amount=amount,
            finish_after=self.finish_after,
            cancel_after=self.cancel_after,
            condition=self.condition,
            memo=MemoInput(type=self.memo.type, data=self.memo.data) if self.memo else None,
            destination_tag=self.destination_tag,
        )


class FinishEscrowRequest(CamelModel):
    """Request body for preparing an EscrowFinish."""

    finisher_address: ClassicAddress = Field(..., description="Address executing the finish")
    owner_address: ClassicAddress = Field(..., description="Address that created the escrow")
    offer_sequence: int = Field(..., gt=0, description="Sequence of the EscrowCreate")
    condition: str | None = Field(default=None, description="Hex crypto-condition of the escrow")
    fulfillment: str | None = Field(default=None, description="Hex crypto-condition fulfillment")

    def to_domain(self) -> FinishRequest:
        return FinishRequest(
            finisher_address=self.finisher_address,
            owner_address=self.owner_address,
            offer_sequence=self.offer_sequence,
            fulfillment=self.fulfillment,
            condition=self.condition,
        )


class CancelEscrowRequest(CamelModel):
    """Request body for preparing an EscrowCancel."""

    canceller_address: ClassicAddress = Field(..., description="Address executing the cancel")
    owner_address: ClassicAddress = Field(..., description="Address that created the escrow")
    offer_sequence: int = Field(..., gt=0, description="Sequence of the EscrowCreate")

    def to_domain(self) -> CancelRequest:
        return CancelRequest(
            canceller_address=self.canceller_address,
            owner_address=self.owner_address,
            offer_sequence=self.offer_sequence,
        )


class SubmitTransactionRequest(CamelModel):
    signed_tx_blob: HexString = Field(..., description="Hex-encoded signed transaction blob")


class SignatureSchema(CamelModel):
    signer: ClassicAddress
    signature: str = Field(..., min_length=1)
    public_key: str | None = None

    def to_domain(self) -> SignaturePacket:
        return SignaturePacket(
            signer=self.signer, signature=self.signature, public_key=self.public_key
        )


class SubmitMultisigRequest(CamelModel):
    """Request body for assembling and submitting a multisigned transaction."""

    transaction: dict[str, Any] = Field(..., description="Prepared transaction object")
    signatures: list[SignatureSchema] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class SignerEntryResponse(CamelModel):
    account: str
    weight: int


class SignerListResponse(CamelModel):
    quorum: int
    entries: list[SignerEntryResponse]

    @classmethod
    def from_domain(cls, quorum: SignerListQuorum) -> SignerListResponse:
        return cls(
            quorum=quorum.quorum,
            entries=[SignerEntryResponse(account=e.account, weight=e.weight) for e in quorum.entries],
        )


class InstructionsResponse(CamelModel):
    message: str
    signing_required: bool = True
    multisig_required: bool = False


class PreparedTransactionResponse(CamelModel):
    """Unsigned transaction plus signing instructions."""

    transaction: dict[str, Any]
    requires_multisig: bool
    signer_list: SignerListResponse | None = None
    instructions: InstructionsResponse

    @classmethod
    def from_domain(cls, prepared: PreparedEscrow) -> PreparedTransactionResponse:
        if prepared.multisig_required:
            message = (
                "This account requires multisignature. Collect signatures from "
                "required signers and submit via /api/escrow/submit-multisig"
            )
        else:
            message = (
                "Transaction prepared. Sign this transaction with your private key "
                "and submit via /api/escrow/submit"
            )
        return cls(
            transaction=prepared.transaction.to_ledger_json(),
            requires_multisig=prepared.multisig_required,
            signer_list=(
                SignerListResponse.from_domain(prepared.signer_list)
                if prepared.signer_list is not None
                else None
            ),
            instructions=InstructionsResponse(
                message=message, multisig_required=prepared.multisig_required
            ),
        )


class SubmissionResponse(CamelModel):
    accepted: bool
    transaction_hash: str | None
    engine_result_code: str
    engine_result_message: str
    validated: bool
    signer_count: int | None = None
    signers: list[str] | None = None

    @classmethod
    def from_domain(cls, result: SubmissionResult) -> SubmissionResponse:
        return cls(
            accepted=result.accepted,
            transaction_hash=result.transaction_hash,
            engine_result_code=result.engine_result_code,
            engine_result_message=result.engine_result_message,
            validated=result.validated,
            signer_count=result.signer_count,
            signers=list(result.signers) if result.signers is not None else None,
        )


class EscrowDetailsResponse(CamelModel):
    owner: str
    destination: str
    amount: str | dict[str, Any]
    finish_after: int | None = None
    cancel_after: int | None = None
    condition: str | None = None
    source_tag: int | None = None
    destination_tag: int | None = None
    previous_txn_id: str

    @classmethod
    def from_domain(cls, escrow: ActiveEscrow) -> EscrowDetailsResponse:
        return cls(
            owner=escrow.owner,
            destination=escrow.destination,
            amount=amount_to_ledger_json(escrow.amount),
            finish_after=escrow.finish_after,
            cancel_after=escrow.cancel_after,
            condition=escrow.condition,
            source_tag=escrow.source_tag,
            destination_tag=escrow.destination_tag,
            previous_txn_id=escrow.previous_txn_id,
        )


class EscrowStatusResponse(CamelModel):
    status: str
    escrow: EscrowDetailsResponse | None = None
    message: str | None = None


class TransactionDetailsResponse(CamelModel):
    transaction: dict[str, Any]
    validated: bool

    @classmethod
    def from_domain(cls, details: TransactionDetails) -> TransactionDetailsResponse:
        return cls(transaction=details.transaction, validated=details.validated)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope shared by every endpoint."""

    success: bool = True
    data: DataT
    timestamp: datetime = Field(default_factory=utc_now)


class FieldErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope. ``details`` is set only for validation failures."""

    success: bool = False
    error: str
    code: str | None = None
    details: list[FieldErrorDetail] | None = None
    path: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "1.0.0"
    network: str
    ledger: str = "unknown"
    timestamp: datetime = Field(default_factory=utc_now)
