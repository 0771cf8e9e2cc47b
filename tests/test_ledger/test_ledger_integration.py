"""Integration tests against a REAL ledger node.

These tests open a websocket to a public test network and require:
    - XRPL_INTEGRATION_URL set (e.g. wss://s.altnet.rippletest.net:51233)

Run with:
    uv run pytest tests/test_ledger/test_ledger_integration.py -v -s

These are marked with @pytest.mark.integration so they can be skipped
in CI with: pytest -m "not integration"
"""

from __future__ import annotations

import os

import pytest

from escrow_orchestrator.domain.models import EscrowNotFound
from escrow_orchestrator.ledger.gateway import XRPLGateway
from escrow_orchestrator.services.escrow_service import EscrowOrchestrator

pytestmark = pytest.mark.integration

LEDGER_URL = os.environ.get("XRPL_INTEGRATION_URL", "")

# Genesis account: present on every network, never owns escrows at sequence 1.
GENESIS = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"


@pytest.mark.skipif(not LEDGER_URL, reason="XRPL_INTEGRATION_URL not set")
class TestLiveLedger:
    @pytest.mark.asyncio
    async def test_missing_escrow_is_not_found(self) -> None:
        gateway = XRPLGateway(LEDGER_URL, network="integration")
        try:
            status = await EscrowOrchestrator(gateway).get_escrow_status(GENESIS, 1)
        finally:
            await gateway.close()

        print(f"\n  status: {status}")
        assert isinstance(status, EscrowNotFound)

    @pytest.mark.asyncio
    async def test_connection_is_reused(self) -> None:
        gateway = XRPLGateway(LEDGER_URL, network="integration")
        orchestrator = EscrowOrchestrator(gateway)
        try:
            await orchestrator.get_escrow_status(GENESIS, 1)
            assert gateway.is_connected
            await orchestrator.get_escrow_status(GENESIS, 2)
            assert gateway.is_connected
        finally:
            await gateway.close()
        assert not gateway.is_connected
