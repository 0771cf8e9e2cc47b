"""Tests for escrow status and transaction lookup."""

from __future__ import annotations

import pytest

from escrow_orchestrator.domain.enums import EscrowState
from escrow_orchestrator.domain.exceptions import GatewayUnavailableError, LedgerRequestError
from escrow_orchestrator.domain.models import ActiveEscrow, EscrowLookupError, EscrowNotFound
from escrow_orchestrator.services.status import StatusTranslator

TX_HASH = "E3FE6EA3D48F0C2B639448020EA4F03D4F4F8FFDB243A852A0F59177921B4879"


class TestEscrowStatus:
    @pytest.mark.asyncio
    async def test_active_escrow(self, gateway, accounts, escrow_node) -> None:
        gateway.respond("ledger_entry", {"index": "D" * 64, "node": escrow_node, "validated": True})

        status = await StatusTranslator(gateway).get_escrow_status(accounts.source, 5)

        assert isinstance(status, ActiveEscrow)
        assert status.destination == accounts.destination
        assert status.amount == "1000000"
        assert status.finish_after == 1_800_000_000

        request = gateway.requests[0]
        assert request.escrow.owner == accounts.source
        assert request.escrow.seq == 5
        assert request.ledger_index == "validated"

    @pytest.mark.asyncio
    async def test_mpt_amount_is_passed_through(self, gateway, accounts, escrow_node) -> None:
        mpt_amount = {"mpt_issuance_id": "00" * 24, "value": "100"}
        gateway.respond("ledger_entry", {"node": {**escrow_node, "Amount": mpt_amount}})

        status = await StatusTranslator(gateway).get_escrow_status(accounts.source, 5)

        assert isinstance(status, ActiveEscrow)
        assert status.amount == mpt_amount

    @pytest.mark.asyncio
    async def test_missing_entry_is_not_found(self, gateway, accounts) -> None:
        gateway.respond_error("ledger_entry", "entryNotFound")

        status = await StatusTranslator(gateway).get_escrow_status(accounts.source, 5)

        assert isinstance(status, EscrowNotFound)
        assert status.state is EscrowState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_other_ledger_error(self, gateway, accounts) -> None:
        gateway.respond_error("ledger_entry", "lgrNotFound", "ledgerNotFound")

        status = await StatusTranslator(gateway).get_escrow_status(accounts.source, 5)

        assert isinstance(status, EscrowLookupError)
        assert status.message == "ledgerNotFound"

    @pytest.mark.asyncio
    async def test_transport_failure_is_lookup_error(self, gateway, accounts) -> None:
        gateway.fail("ledger_entry", GatewayUnavailableError("Ledger request timed out"))

        status = await StatusTranslator(gateway).get_escrow_status(accounts.source, 5)

        assert isinstance(status, EscrowLookupError)
        assert "timed out" in status.message

    @pytest.mark.asyncio
    async def test_malformed_owner_skips_network(self, gateway) -> None:
        status = await StatusTranslator(gateway).get_escrow_status("rNotAnAddress", 5)

        assert isinstance(status, EscrowLookupError)
        assert "rNotAnAddress" in status.message
        assert gateway.requests == []


class TestTransactionDetails:
    @pytest.mark.asyncio
    async def test_returns_record_unchanged(self, gateway) -> None:
        record = {"TransactionType": "EscrowCreate", "hash": TX_HASH, "validated": True}
        gateway.respond("tx", record)

        details = await StatusTranslator(gateway).get_transaction_details(TX_HASH)

        assert details.transaction == record
        assert details.validated is True
        assert gateway.requests[0].transaction == TX_HASH

    @pytest.mark.asyncio
    async def test_unknown_hash_raises(self, gateway) -> None:
        gateway.respond_error("tx", "txnNotFound", "Transaction not found.")

        with pytest.raises(LedgerRequestError) as exc_info:
            await StatusTranslator(gateway).get_transaction_details(TX_HASH)

        assert exc_info.value.ledger_error == "txnNotFound"
        assert exc_info.value.code == "LEDGER_REQUEST_FAILED"
