"""Status Translator — reads escrow and transaction state from the ledger.

Escrow status is a three-way result, never an exception:
    - ActiveEscrow:       the entry exists in the validated ledger
    - EscrowNotFound:     ledger_entry answered entryNotFound (finished,
                          cancelled, or never created)
    - EscrowLookupError:  anything else, including transport failures
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from xrpl.models.requests import LedgerEntry, Tx
from xrpl.models.requests.ledger_entry import Escrow

from escrow_orchestrator.domain.enums import ENTRY_NOT_FOUND
from escrow_orchestrator.domain.exceptions import (
    GatewayUnavailableError,
    InvalidAddressError,
    LedgerRequestError,
)
from escrow_orchestrator.domain.models import (
    ActiveEscrow,
    EscrowLookupError,
    EscrowNotFound,
    TransactionDetails,
)
from escrow_orchestrator.logging_config import get_logger
from escrow_orchestrator.services.transaction_builder import ensure_classic_address

if TYPE_CHECKING:
    from escrow_orchestrator.domain.models import EscrowStatus
    from escrow_orchestrator.ledger.gateway import LedgerGateway

logger = get_logger(__name__)


class StatusTranslator:
    """Maps ledger lookups onto domain status values."""

    def __init__(self, gateway: LedgerGateway) -> None:
        self._gateway = gateway

    async def get_escrow_status(self, owner: str, offer_sequence: int) -> EscrowStatus:
        try:
            ensure_classic_address(owner, "owner")
        except InvalidAddressError as exc:
            return EscrowLookupError(message=exc.message)

        try:
            response = await self._gateway.request(
                LedgerEntry(
                    escrow=Escrow(owner=owner, seq=offer_sequence),
                    ledger_index="validated",
                )
            )
        except GatewayUnavailableError as exc:
            logger.error("status.lookup_failed", owner=owner, seq=offer_sequence, error=exc.message)
            return EscrowLookupError(message=exc.message)

        if response.is_successful():
            logger.info("status.escrow_found", owner=owner, seq=offer_sequence)
            return ActiveEscrow.from_ledger_node(response.result["node"])

        error = response.result.get("error")
        if error == ENTRY_NOT_FOUND:
            logger.info("status.escrow_not_found", owner=owner, seq=offer_sequence)
            return EscrowNotFound()

        message = response.result.get("error_message") or f"ledger_entry failed: {error}"
        logger.warning("status.lookup_rejected", owner=owner, seq=offer_sequence, error=error)
        return EscrowLookupError(message=message)

    async def get_transaction_details(self, tx_hash: str) -> TransactionDetails:
        """Return the ledger's record for a transaction hash, uninterpreted.

        Raises:
            LedgerRequestError: the node could not return the record (e.g. txnNotFound).
            GatewayUnavailableError: the ledger could not be reached.
        """
        response = await self._gateway.request(Tx(transaction=tx_hash, binary=False))
        if not response.is_successful():
            error = response.result.get("error")
            raise LedgerRequestError(
                response.result.get("error_message") or f"Transaction lookup failed: {error}",
                ledger_error=error,
            )
        return TransactionDetails(
            transaction=response.result,
            validated=bool(response.result.get("validated", False)),
        )
