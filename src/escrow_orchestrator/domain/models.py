"""Domain value objects for escrow requests, signatures and ledger results.

Everything here is transient: requests and signature packets are supplied by
the caller for a single call, and every result is derived fresh from the
ledger. Nothing is persisted locally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from escrow_orchestrator.domain.codecs import from_ledger_epoch
from escrow_orchestrator.domain.enums import EscrowState
from escrow_orchestrator.domain.exceptions import EscrowValidationError

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IssuedAmount:
    """An issued-currency amount: currency code, decimal value and issuer."""

    currency: str
    value: str
    issuer: str

    def to_ledger_json(self) -> dict[str, str]:
        return {"currency": self.currency, "value": self.value, "issuer": self.issuer}


# Native amounts are integer drop strings, e.g. "1000000" for 1 XRP.
Amount = str | IssuedAmount

# Ledger amount objects that are neither drops nor issued currency (MPT amounts
# carry ``mpt_issuance_id`` instead of currency/issuer) pass through as dicts.
LedgerAmount = Amount | dict[str, Any]

_ISSUED_KEYS = frozenset({"currency", "value", "issuer"})


def amount_to_ledger_json(amount: LedgerAmount) -> str | dict[str, Any]:
    if isinstance(amount, IssuedAmount):
        return amount.to_ledger_json()
    if isinstance(amount, dict):
        return dict(amount)
    return amount


def amount_from_ledger_json(raw: str | dict[str, Any]) -> LedgerAmount:
    if isinstance(raw, dict):
        if _ISSUED_KEYS <= raw.keys():
            return IssuedAmount(
                currency=raw["currency"],
                value=raw["value"],
                issuer=raw["issuer"],
            )
        return dict(raw)
    return raw


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemoInput:
    """Caller-supplied memo. Missing parts fall back to defaults at build time."""

    type: str | None = None
    data: str | None = None


@dataclass(frozen=True)
class EscrowRequest:
    """Request to lock funds from source_address for release to destination_address.

    Attributes:
        finish_after: Unix seconds after which the escrow can be finished.
        cancel_after: Optional Unix seconds after which the escrow can be cancelled.
        condition: Optional hex crypto-condition the finisher must fulfil.
    """

    source_address: str
    destination_address: str
    amount: Amount
    finish_after: int
    cancel_after: int | None = None
    condition: str | None = None
    memo: MemoInput | None = None
    destination_tag: int | None = None

    def validate(self, now: int) -> None:
        """Check the amount and time invariants against the request time."""
        if isinstance(self.amount, str) and not self.amount.isdigit():
            raise EscrowValidationError(
                "Native amount must be an integer number of drops", field="amount"
            )
        if self.finish_after < now:
            raise EscrowValidationError(
                f"finishAfter must be greater than or equal to {now}",
                field="finishAfter",
            )
        if self.cancel_after is not None and self.cancel_after < self.finish_after:
            raise EscrowValidationError(
                "cancelAfter must be greater than or equal to finishAfter",
                field="cancelAfter",
            )


@dataclass(frozen=True)
class FinishRequest:
    """Request to release an escrow to its destination.

    The ledger only accepts condition and fulfillment together.
    """

    finisher_address: str
    owner_address: str
    offer_sequence: int
    fulfillment: str | None = None
    condition: str | None = None

    def validate(self) -> None:
        if self.offer_sequence <= 0:
            raise EscrowValidationError(
                "offerSequence must be a positive integer", field="offerSequence"
            )
        if bool(self.condition) != bool(self.fulfillment):
            raise EscrowValidationError(
                "condition and fulfillment must be supplied together",
                field="fulfillment" if self.condition else "condition",
            )


@dataclass(frozen=True)
class CancelRequest:
    """Request to return an expired escrow to its owner."""

    canceller_address: str
    owner_address: str
    offer_sequence: int

    def validate(self) -> None:
        if self.offer_sequence <= 0:
            raise EscrowValidationError(
                "offerSequence must be a positive integer", field="offerSequence"
            )


# ---------------------------------------------------------------------------
# Multisig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SignerEntry:
    account: str
    weight: int


@dataclass(frozen=True)
class SignerListQuorum:
    """An account's signer list as read from the ledger.

    Never constructed from caller input.
    """

    quorum: int = 0
    entries: tuple[SignerEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @classmethod
    def from_ledger_json(cls, signer_list: dict[str, Any]) -> SignerListQuorum:
        """Parse a SignerList ledger object."""
        entries = tuple(
            SignerEntry(
                account=wrapper["SignerEntry"]["Account"],
                weight=int(wrapper["SignerEntry"]["SignerWeight"]),
            )
            for wrapper in signer_list.get("SignerEntries", [])
        )
        return cls(quorum=int(signer_list.get("SignerQuorum", 0)), entries=entries)


@dataclass(frozen=True)
class SignaturePacket:
    """One signer's signature over a prepared transaction, produced off-system."""

    signer: str
    signature: str
    public_key: str | None = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubmissionResult:
    """Normalised response to a submission.

    Attributes:
        accepted: True only for the tesSUCCESS engine result.
        validated: Provisional flag from the submit response. Not final settlement.
        signer_count: Number of signer entries, multisig submissions only.
        signers: Signer addresses in submitted order, multisig submissions only.
    """

    accepted: bool
    transaction_hash: str | None
    engine_result_code: str
    engine_result_message: str
    validated: bool = False
    signer_count: int | None = None
    signers: tuple[str, ...] | None = None


@dataclass(frozen=True)
class TransactionDetails:
    """A ledger transaction record passed through without interpretation."""

    transaction: dict[str, Any]
    validated: bool


# ---------------------------------------------------------------------------
# Escrow status variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActiveEscrow:
    """An escrow entry currently present in the validated ledger. Times are Unix seconds."""

    owner: str
    destination: str
    amount: LedgerAmount
    previous_txn_id: str
    finish_after: int | None = None
    cancel_after: int | None = None
    condition: str | None = None
    source_tag: int | None = None
    destination_tag: int | None = None
    state: EscrowState = field(default=EscrowState.ACTIVE, init=False)

    @classmethod
    def from_ledger_node(cls, node: dict[str, Any]) -> ActiveEscrow:
        finish_after = node.get("FinishAfter")
        cancel_after = node.get("CancelAfter")
        return cls(
            owner=node["Account"],
            destination=node["Destination"],
            amount=amount_from_ledger_json(node["Amount"]),
            previous_txn_id=node.get("PreviousTxnID", ""),
            finish_after=from_ledger_epoch(finish_after) if finish_after is not None else None,
            cancel_after=from_ledger_epoch(cancel_after) if cancel_after is not None else None,
            condition=node.get("Condition"),
            source_tag=node.get("SourceTag"),
            destination_tag=node.get("DestinationTag"),
        )


@dataclass(frozen=True)
class EscrowNotFound:
    message: str = "Escrow not found. It may have been finished or cancelled."
    state: EscrowState = field(default=EscrowState.NOT_FOUND, init=False)


@dataclass(frozen=True)
class EscrowLookupError:
    message: str
    state: EscrowState = field(default=EscrowState.ERROR, init=False)


EscrowStatus = ActiveEscrow | EscrowNotFound | EscrowLookupError

