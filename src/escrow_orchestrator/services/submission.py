"""Submission Gateway — forwards signed transactions and normalises the answer.

An engine result other than tesSUCCESS is a domain-level rejection and comes
back as an ordinary SubmissionResult with accepted=False. Only transport
failures raise (GatewayUnavailableError, from the ledger gateway).

``validated`` is whatever the submit response said at that moment. It is
never final settlement and nothing here waits for it.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from xrpl.constants import XRPLException
from xrpl.core.binarycodec import encode

from escrow_orchestrator.domain.enums import ENGINE_SUCCESS
from escrow_orchestrator.domain.exceptions import EscrowValidationError
from escrow_orchestrator.domain.models import SubmissionResult
from escrow_orchestrator.logging_config import get_logger

if TYPE_CHECKING:
    from xrpl.models.response import Response

    from escrow_orchestrator.domain.transactions import MultisignedTransaction
    from escrow_orchestrator.ledger.gateway import LedgerGateway

logger = get_logger(__name__)


class SubmissionGateway:
    """Submits signed blobs and multisigned transactions to the ledger."""

    def __init__(self, gateway: LedgerGateway) -> None:
        self._gateway = gateway

    async def submit(self, tx_blob: str) -> SubmissionResult:
        """Submit an already signed, hex-encoded blob."""
        response = await self._gateway.submit(tx_blob)
        result = to_submission_result(response)

        if result.accepted:
            logger.info(
                "submission.accepted",
                tx_hash=result.transaction_hash,
                result_code=result.engine_result_code,
            )
        else:
            logger.warning(
                "submission.rejected",
                tx_hash=result.transaction_hash,
                result_code=result.engine_result_code,
                result_message=result.engine_result_message,
            )
        return result

    async def submit_multisigned(self, transaction: MultisignedTransaction) -> SubmissionResult:
        """Binary-encode a multisigned transaction and submit it."""
        try:
            tx_blob = encode(transaction.to_ledger_json())
        except (XRPLException, ValueError, TypeError, KeyError) as exc:
            raise EscrowValidationError(
                f"Transaction cannot be encoded: {exc}", field="transaction"
            ) from exc

        result = await self.submit(tx_blob)
        logger.info(
            "submission.multisig_submitted",
            tx_hash=result.transaction_hash,
            signer_count=len(transaction.signers),
        )
        return replace(
            result,
            signer_count=len(transaction.signers),
            signers=transaction.signer_accounts,
        )


def to_submission_result(response: Response) -> SubmissionResult:
    """Map a submit response onto a SubmissionResult.

    A node-level error (malformed blob, unknown field) has no engine result;
    its error code stands in as the rejection code.
    """
    result = response.result
    if not response.is_successful():
        error = result.get("error", "unknown")
        return SubmissionResult(
            accepted=False,
            transaction_hash=None,
            engine_result_code=error,
            engine_result_message=result.get("error_message")
            or result.get("error_exception")
            or error,
            validated=False,
        )

    engine_result = result.get("engine_result", "")
    return SubmissionResult(
        accepted=engine_result == ENGINE_SUCCESS,
        transaction_hash=result.get("tx_json", {}).get("hash"),
        engine_result_code=engine_result,
        engine_result_message=result.get("engine_result_message", ""),
        validated=bool(result.get("validated", False)),
    )
