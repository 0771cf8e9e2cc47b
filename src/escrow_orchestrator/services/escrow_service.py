"""Escrow Orchestrator — the façade behind every public escrow operation.

This is the application layer that coordinates between:
    - TransactionBuilder (ledger JSON + autofill)
    - MultisigDetector / MultisigAssembler
    - SubmissionGateway
    - StatusTranslator

Both REST routes and MCP tools call into this service, so every business
rule lives in one place. The ledger gateway is injected; the orchestrator
holds no other state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from escrow_orchestrator.domain.models import amount_to_ledger_json
from escrow_orchestrator.domain.transactions import PreparedEscrow, UnsignedTransaction
from escrow_orchestrator.logging_config import get_logger
from escrow_orchestrator.services.multisig import MultisigAssembler, MultisigDetector
from escrow_orchestrator.services.status import StatusTranslator
from escrow_orchestrator.services.submission import SubmissionGateway
from escrow_orchestrator.services.transaction_builder import TransactionBuilder, unix_now

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from escrow_orchestrator.domain.models import (
        CancelRequest,
        EscrowRequest,
        EscrowStatus,
        FinishRequest,
        SignaturePacket,
        SubmissionResult,
        TransactionDetails,
    )
    from escrow_orchestrator.ledger.gateway import LedgerGateway

logger = get_logger(__name__)


class EscrowOrchestrator:
    """Prepares, submits and inspects ledger escrows."""

    def __init__(
        self,
        gateway: LedgerGateway,
        check_multisig_on_all: bool = False,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        """
        Args:
            gateway: Connection to the ledger network.
            check_multisig_on_all: Look up signer lists for create and cancel
                as well as finish.
            clock: Source of the current Unix time for request validation.
        """
        self._gateway = gateway
        self._check_multisig_on_all = check_multisig_on_all
        self._builder = TransactionBuilder(gateway, clock=clock)
        self._detector = MultisigDetector(gateway)
        self._assembler = MultisigAssembler()
        self._submission = SubmissionGateway(gateway)
        self._status = StatusTranslator(gateway)

    # ------------------------------------------------------------------
    # Prepare
    # ------------------------------------------------------------------

    async def prepare_create(self, request: EscrowRequest) -> PreparedEscrow:
        """Prepare an unsigned EscrowCreate that locks the requested amount."""
        tx_json = self._builder.build_create(request)
        prepared = await self._prepare(tx_json, check_multisig=self._check_multisig_on_all)

        logger.info(
            "escrow.create_prepared",
            source=request.source_address,
            destination=request.destination_address,
            amount=amount_to_ledger_json(request.amount),
        )
        return prepared

    async def prepare_finish(self, request: FinishRequest) -> PreparedEscrow:
        """Prepare an unsigned EscrowFinish, flagging accounts that need multisig."""
        tx_json = self._builder.build_finish(request)
        prepared = await self._prepare(tx_json, check_multisig=True)

        logger.info(
            "escrow.finish_prepared",
            finisher=request.finisher_address,
            owner=request.owner_address,
            offer_sequence=request.offer_sequence,
            multisig=prepared.multisig_required,
        )
        return prepared

    async def prepare_cancel(self, request: CancelRequest) -> PreparedEscrow:
        """Prepare an unsigned EscrowCancel returning funds to the owner."""
        tx_json = self._builder.build_cancel(request)
        prepared = await self._prepare(tx_json, check_multisig=self._check_multisig_on_all)

        logger.info(
            "escrow.cancel_prepared",
            canceller=request.canceller_address,
            owner=request.owner_address,
            offer_sequence=request.offer_sequence,
        )
        return prepared

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit(self, tx_blob: str) -> SubmissionResult:
        """Forward a singly signed blob to the ledger."""
        return await self._submission.submit(tx_blob)

    async def submit_multisig(
        self,
        transaction: Mapping[str, Any],
        signatures: Sequence[SignaturePacket],
    ) -> SubmissionResult:
        """Assemble the caller's signatures onto a prepared transaction and submit it."""
        unsigned = UnsignedTransaction.from_ledger_json(transaction)
        multisigned = self._assembler.assemble(unsigned, signatures)
        return await self._submission.submit_multisigned(multisigned)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_escrow_status(self, owner: str, offer_sequence: int) -> EscrowStatus:
        return await self._status.get_escrow_status(owner, offer_sequence)

    async def get_transaction_details(self, tx_hash: str) -> TransactionDetails:
        return await self._status.get_transaction_details(tx_hash)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _prepare(self, tx_json: dict[str, Any], check_multisig: bool) -> PreparedEscrow:
        quorum = None
        if check_multisig:
            quorum = await self._detector.signer_quorum(tx_json["Account"])

        if quorum is None or quorum.is_empty:
            transaction = await self._builder.autofill(tx_json)
            return PreparedEscrow(transaction=transaction, multisig_required=False)

        # Multisigned fees scale with the number of signers.
        transaction = await self._builder.autofill(tx_json, signers_count=len(quorum.entries))
        return PreparedEscrow(transaction=transaction, multisig_required=True, signer_list=quorum)
