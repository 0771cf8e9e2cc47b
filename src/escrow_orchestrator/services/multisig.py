"""Multisig detection and assembly.

MultisigDetector reads an account's signer list from the validated ledger.
MultisigAssembler combines a prepared transaction with the signatures the
caller collected off-system.

Signer entries are sorted ascending by decoded account ID: the ledger's
binary format requires that order and rejects a multisigned transaction
whose Signers array is out of order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from xrpl.core.addresscodec import decode_classic_address
from xrpl.models.requests import AccountInfo

from escrow_orchestrator.domain.exceptions import (
    EmptySignatureSetError,
    EscrowValidationError,
    LedgerRequestError,
)
from escrow_orchestrator.domain.models import SignerListQuorum
from escrow_orchestrator.domain.transactions import MultisignedTransaction
from escrow_orchestrator.logging_config import get_logger
from escrow_orchestrator.services.transaction_builder import ensure_classic_address

if TYPE_CHECKING:
    from collections.abc import Sequence

    from escrow_orchestrator.domain.models import SignaturePacket
    from escrow_orchestrator.domain.transactions import UnsignedTransaction
    from escrow_orchestrator.ledger.gateway import LedgerGateway

logger = get_logger(__name__)


class MultisigDetector:
    """Decides whether an account must sign with its signer list."""

    def __init__(self, gateway: LedgerGateway) -> None:
        self._gateway = gateway

    async def signer_quorum(self, address: str) -> SignerListQuorum:
        """Return the account's signer list, empty when it signs alone.

        Raises:
            LedgerRequestError: the ledger could not answer account_info
                (e.g. the account does not exist).
            GatewayUnavailableError: the ledger could not be reached.
        """
        response = await self._gateway.request(
            AccountInfo(account=address, ledger_index="validated", signer_lists=True)
        )
        if not response.is_successful():
            error = response.result.get("error")
            raise LedgerRequestError(
                response.result.get("error_message") or f"account_info failed: {error}",
                ledger_error=error,
            )

        # API v2 returns signer_lists at the top level, v1 inside account_data.
        signer_lists = response.result.get("signer_lists")
        if signer_lists is None:
            signer_lists = response.result.get("account_data", {}).get("signer_lists", [])

        if not signer_lists:
            return SignerListQuorum()

        quorum = SignerListQuorum.from_ledger_json(signer_lists[0])
        logger.debug(
            "multisig.signer_list_found",
            account=address,
            quorum=quorum.quorum,
            signers=len(quorum.entries),
        )
        return quorum


class MultisigAssembler:
    """Builds a multisigned transaction from per-signer signatures."""

    def assemble(
        self,
        transaction: UnsignedTransaction,
        signatures: Sequence[SignaturePacket],
    ) -> MultisignedTransaction:
        """Attach one signer entry per packet, in canonical ledger order.

        Raises:
            EmptySignatureSetError: no signatures supplied.
            InvalidAddressError: a signer is not a valid classic address.
            EscrowValidationError: the same signer appears twice.
        """
        if not signatures:
            raise EmptySignatureSetError()

        keyed: list[tuple[bytes, SignaturePacket]] = []
        seen: set[str] = set()
        for packet in signatures:
            ensure_classic_address(packet.signer, "signer")
            if packet.signer in seen:
                raise EscrowValidationError(
                    f"Duplicate signature from signer {packet.signer}",
                    field="signatures",
                )
            seen.add(packet.signer)
            keyed.append((decode_classic_address(packet.signer), packet))

        keyed.sort(key=lambda item: item[0])
        return MultisignedTransaction(
            transaction=transaction,
            signers=tuple(packet for _, packet in keyed),
        )
