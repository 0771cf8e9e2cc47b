"""Tests for submission and engine-result normalisation."""

from __future__ import annotations

import pytest
from xrpl.core.binarycodec import decode
from xrpl.models.response import Response, ResponseStatus

from escrow_orchestrator.domain.exceptions import EscrowValidationError, GatewayUnavailableError
from escrow_orchestrator.domain.models import SignaturePacket
from escrow_orchestrator.domain.transactions import MultisignedTransaction, UnsignedTransaction
from escrow_orchestrator.services.submission import SubmissionGateway, to_submission_result

TX_HASH = "E3FE6EA3D48F0C2B639448020EA4F03D4F4F8FFDB243A852A0F59177921B4879"
SIGNATURE_A = "30440220" + "1A" * 32 + "0220" + "2B" * 32
SIGNATURE_B = "30440220" + "3C" * 32 + "0220" + "4D" * 32
PUBKEY_A = "02" + "5E" * 32
PUBKEY_B = "03" + "6F" * 32


def _submit_result(engine_result: str, message: str = "", validated: bool = False) -> dict:
    return {
        "accepted": engine_result == "tesSUCCESS",
        "engine_result": engine_result,
        "engine_result_message": message,
        "tx_blob": "1200",
        "tx_json": {"hash": TX_HASH},
        "validated": validated,
    }


@pytest.fixture
def multisigned(accounts) -> MultisignedTransaction:
    unsigned = UnsignedTransaction.from_ledger_json(
        {
            "TransactionType": "EscrowFinish",
            "Account": accounts.source,
            "Owner": accounts.destination,
            "OfferSequence": 9,
            "Fee": "36",
            "Sequence": 7,
            "LastLedgerSequence": 1020,
            "Flags": 0,
            "SigningPubKey": "",
        }
    )
    return MultisignedTransaction(
        transaction=unsigned,
        signers=(
            SignaturePacket(signer=accounts.signer_a, signature=SIGNATURE_A, public_key=PUBKEY_A),
            SignaturePacket(signer=accounts.signer_b, signature=SIGNATURE_B, public_key=PUBKEY_B),
        ),
    )


class TestToSubmissionResult:
    def test_success(self) -> None:
        response = Response(
            status=ResponseStatus.SUCCESS,
            result=_submit_result("tesSUCCESS", "The transaction was applied."),
        )
        result = to_submission_result(response)

        assert result.accepted is True
        assert result.transaction_hash == TX_HASH
        assert result.engine_result_code == "tesSUCCESS"
        assert result.validated is False

    @pytest.mark.parametrize("code", ["tecNO_PERMISSION", "tefPAST_SEQ", "terQUEUED", "temBAD_FEE"])
    def test_non_success_engine_result_not_accepted(self, code: str) -> None:
        response = Response(status=ResponseStatus.SUCCESS, result=_submit_result(code, "nope"))
        result = to_submission_result(response)

        assert result.accepted is False
        assert result.engine_result_code == code
        assert result.engine_result_message == "nope"

    def test_node_error_becomes_rejection(self) -> None:
        response = Response(
            status=ResponseStatus.ERROR,
            result={"error": "invalidTransaction", "error_exception": "Unknown field"},
        )
        result = to_submission_result(response)

        assert result.accepted is False
        assert result.transaction_hash is None
        assert result.engine_result_code == "invalidTransaction"
        assert result.engine_result_message == "Unknown field"


class TestSubmissionGateway:
    @pytest.mark.asyncio
    async def test_submit_forwards_blob(self, gateway) -> None:
        gateway.respond("submit", _submit_result("tesSUCCESS"))

        result = await SubmissionGateway(gateway).submit("12000422")

        assert gateway.submitted == ["12000422"]
        assert result.accepted is True

    @pytest.mark.asyncio
    async def test_engine_rejection_is_not_raised(self, gateway) -> None:
        gateway.respond("submit", _submit_result("tecNO_DST_INSUF_XRP", "Destination unfunded."))

        result = await SubmissionGateway(gateway).submit("1200")

        assert result.accepted is False
        assert result.engine_result_code == "tecNO_DST_INSUF_XRP"

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self, gateway) -> None:
        gateway.fail("submit", GatewayUnavailableError("socket closed"))

        with pytest.raises(GatewayUnavailableError):
            await SubmissionGateway(gateway).submit("1200")

    @pytest.mark.asyncio
    async def test_multisigned_blob_carries_signers(self, gateway, multisigned, accounts) -> None:
        gateway.respond("submit", _submit_result("tesSUCCESS"))

        result = await SubmissionGateway(gateway).submit_multisigned(multisigned)

        decoded = decode(gateway.submitted[0])
        assert decoded["TransactionType"] == "EscrowFinish"
        assert decoded["SigningPubKey"] == ""
        assert [s["Signer"]["Account"] for s in decoded["Signers"]] == [
            accounts.signer_a,
            accounts.signer_b,
        ]
        assert result.signer_count == 2
        assert result.signers == (accounts.signer_a, accounts.signer_b)

    @pytest.mark.asyncio
    async def test_unencodable_transaction_rejected(self, gateway, accounts, multisigned) -> None:
        broken = MultisignedTransaction(
            transaction=multisigned.transaction,
            signers=(SignaturePacket(signer=accounts.signer_a, signature="not hex"),),
        )

        with pytest.raises(EscrowValidationError):
            await SubmissionGateway(gateway).submit_multisigned(broken)
        assert gateway.submitted == []
