"""Unsigned and multisigned transaction descriptors.

Transactions are modelled as a tagged variant over the closed set of
TransactionKind values. Each kind declares the fields it requires and the
fields it may carry; anything else is rejected, so a descriptor can only
ever hold fields the ledger defines for that kind.

A descriptor is immutable once built. The only thing a caller may add is a
signature, and signing happens off-system.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from escrow_orchestrator.domain.enums import TransactionKind
from escrow_orchestrator.domain.exceptions import EscrowValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from escrow_orchestrator.domain.models import SignaturePacket, SignerListQuorum

# Fields any transaction kind may carry (common fields plus autofill output).
COMMON_FIELDS = frozenset(
    {
        "Account",
        "Fee",
        "Sequence",
        "LastLedgerSequence",
        "Flags",
        "SigningPubKey",
        "NetworkID",
        "Memos",
        "SourceTag",
        "TicketSequence",
        "AccountTxnID",
    }
)

# kind -> (required fields, optional fields), on top of COMMON_FIELDS.
KIND_SCHEMAS: dict[TransactionKind, tuple[frozenset[str], frozenset[str]]] = {
    TransactionKind.ESCROW_CREATE: (
        frozenset({"Destination", "Amount"}),
        frozenset({"FinishAfter", "CancelAfter", "Condition", "DestinationTag"}),
    ),
    TransactionKind.ESCROW_FINISH: (
        frozenset({"Owner", "OfferSequence"}),
        frozenset({"Condition", "Fulfillment", "CredentialIDs"}),
    ),
    TransactionKind.ESCROW_CANCEL: (
        frozenset({"Owner", "OfferSequence"}),
        frozenset(),
    ),
}


@dataclass(frozen=True)
class UnsignedTransaction:
    """An unsigned transaction of one known kind.

    Attributes:
        kind: The transaction kind tag (the ledger's TransactionType).
        fields: Every other ledger field, in ledger JSON form. Read-only.
    """

    kind: TransactionKind
    fields: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(copy.deepcopy(dict(self.fields))))

    @property
    def account(self) -> str:
        return self.fields["Account"]

    @classmethod
    def from_ledger_json(cls, tx_json: Mapping[str, Any]) -> UnsignedTransaction:
        """Validate ledger JSON against its kind's schema.

        A ``Signers`` array on the input is dropped so that a previously
        assembled descriptor can be assembled again; a direct ``TxnSignature``
        is rejected because a transaction cannot be both singly and multi signed.

        Raises:
            EscrowValidationError: unknown kind, missing required fields,
                unknown fields, or an existing single signature.
        """
        raw_kind = tx_json.get("TransactionType")
        try:
            kind = TransactionKind(raw_kind)
        except ValueError as err:
            raise EscrowValidationError(
                f"Unsupported transaction type: {raw_kind}",
                field="transaction.TransactionType",
            ) from err

        if "TxnSignature" in tx_json:
            raise EscrowValidationError(
                "Transaction already carries a single signature",
                field="transaction.TxnSignature",
            )

        required, optional = KIND_SCHEMAS[kind]
        present = set(tx_json) - {"TransactionType", "Signers"}

        missing = sorted((required | {"Account"}) - present)
        if missing:
            raise EscrowValidationError(
                f"{kind} is missing required fields: {', '.join(missing)}",
                field=f"transaction.{missing[0]}",
            )

        unknown = sorted(present - required - optional - COMMON_FIELDS)
        if unknown:
            raise EscrowValidationError(
                f"{kind} does not accept fields: {', '.join(unknown)}",
                field=f"transaction.{unknown[0]}",
            )

        return cls(kind=kind, fields={name: tx_json[name] for name in present})

    def to_ledger_json(self) -> dict[str, Any]:
        return {"TransactionType": self.kind.value, **copy.deepcopy(dict(self.fields))}


@dataclass(frozen=True)
class MultisignedTransaction:
    """An unsigned transaction plus its ordered signer entries.

    The direct signing key is always empty: a multisigned transaction is
    authorised by its Signers array alone.
    """

    transaction: UnsignedTransaction
    signers: tuple[SignaturePacket, ...]

    @property
    def signer_accounts(self) -> tuple[str, ...]:
        return tuple(packet.signer for packet in self.signers)

    def to_ledger_json(self) -> dict[str, Any]:
        tx_json = self.transaction.to_ledger_json()
        tx_json["SigningPubKey"] = ""
        tx_json["Signers"] = [
            {
                "Signer": {
                    "Account": packet.signer,
                    "TxnSignature": packet.signature,
                    "SigningPubKey": packet.public_key or "",
                }
            }
            for packet in self.signers
        ]
        return tx_json


@dataclass(frozen=True)
class PreparedEscrow:
    """An autofilled, unsigned transaction ready for off-system signing.

    signer_list is attached only when multisig_required is True.
    """

    transaction: UnsignedTransaction
    multisig_required: bool = False
    signer_list: SignerListQuorum | None = None
