"""Transaction Builder — turns validated escrow requests into ledger transactions.

Building is split in two steps so that every address and invariant check
runs before any network call:
    1. build_create / build_finish / build_cancel: pure, returns ledger JSON.
    2. autofill: asks the ledger gateway for Fee, Sequence and
       LastLedgerSequence and validates the result against its kind's schema.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from xrpl.core.addresscodec import is_valid_classic_address

from escrow_orchestrator.domain.codecs import encode_memo, to_ledger_epoch
from escrow_orchestrator.domain.enums import TransactionKind
from escrow_orchestrator.domain.exceptions import InvalidAddressError
from escrow_orchestrator.domain.models import IssuedAmount, amount_to_ledger_json
from escrow_orchestrator.domain.transactions import UnsignedTransaction

if TYPE_CHECKING:
    from collections.abc import Callable

    from escrow_orchestrator.domain.models import CancelRequest, EscrowRequest, FinishRequest
    from escrow_orchestrator.ledger.gateway import LedgerGateway

DEFAULT_MEMO_TYPE = "escrow"


def unix_now() -> int:
    return int(datetime.now(UTC).timestamp())


def ensure_classic_address(address: str, role: str) -> None:
    """Raise InvalidAddressError unless address is a checksummed classic address."""
    if not isinstance(address, str) or not is_valid_classic_address(address):
        raise InvalidAddressError(str(address), role)


class TransactionBuilder:
    """Builds unsigned EscrowCreate / EscrowFinish / EscrowCancel transactions."""

    def __init__(self, gateway: LedgerGateway, clock: Callable[[], int] = unix_now) -> None:
        self._gateway = gateway
        self._clock = clock

    def build_create(self, request: EscrowRequest) -> dict[str, Any]:
        ensure_classic_address(request.source_address, "source")
        ensure_classic_address(request.destination_address, "destination")
        if isinstance(request.amount, IssuedAmount):
            ensure_classic_address(request.amount.issuer, "issuer")
        request.validate(now=self._clock())

        tx_json: dict[str, Any] = {
            "TransactionType": TransactionKind.ESCROW_CREATE.value,
            "Account": request.source_address,
            "Destination": request.destination_address,
            "Amount": amount_to_ledger_json(request.amount),
            "FinishAfter": to_ledger_epoch(request.finish_after),
        }
        if request.cancel_after is not None:
            tx_json["CancelAfter"] = to_ledger_epoch(request.cancel_after)
        if request.condition:
            tx_json["Condition"] = request.condition
        if request.destination_tag is not None:
            tx_json["DestinationTag"] = request.destination_tag
        if request.memo is not None:
            tx_json["Memos"] = [
                {
                    "Memo": {
                        "MemoType": encode_memo(request.memo.type or DEFAULT_MEMO_TYPE),
                        "MemoData": encode_memo(request.memo.data or ""),
                    }
                }
            ]
        return tx_json

    def build_finish(self, request: FinishRequest) -> dict[str, Any]:
        ensure_classic_address(request.finisher_address, "finisher")
        ensure_classic_address(request.owner_address, "owner")
        request.validate()

        tx_json: dict[str, Any] = {
            "TransactionType": TransactionKind.ESCROW_FINISH.value,
            "Account": request.finisher_address,
            "Owner": request.owner_address,
            "OfferSequence": request.offer_sequence,
        }
        if request.fulfillment:
            tx_json["Condition"] = request.condition
            tx_json["Fulfillment"] = request.fulfillment
        return tx_json

    def build_cancel(self, request: CancelRequest) -> dict[str, Any]:
        ensure_classic_address(request.canceller_address, "canceller")
        ensure_classic_address(request.owner_address, "owner")
        request.validate()

        return {
            "TransactionType": TransactionKind.ESCROW_CANCEL.value,
            "Account": request.canceller_address,
            "Owner": request.owner_address,
            "OfferSequence": request.offer_sequence,
        }

    async def autofill(
        self, tx_json: dict[str, Any], signers_count: int | None = None
    ) -> UnsignedTransaction:
        """Delegate network fields to the gateway and freeze the result.

        Raises:
            GatewayUnavailableError: the ledger could not be reached.
            LedgerRequestError: the ledger refused (e.g. unfunded account).
        """
        filled = await self._gateway.autofill(tx_json, signers_count=signers_count)
        return UnsignedTransaction.from_ledger_json(filled)
