"""Shared test fixtures for the Escrow Orchestrator test suite.

Provides:
    - FakeLedgerGateway: an in-memory LedgerGateway that records calls
    - Known-valid classic addresses
    - An orchestrator with a fixed clock
    - Async test support via pytest-asyncio
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

import pytest
from xrpl.models.response import Response, ResponseStatus

from escrow_orchestrator.services.escrow_service import EscrowOrchestrator

# Fixed "now" for service-level tests (2027-01-15T08:00:00Z).
NOW = 1_800_000_000


# ---------------------------------------------------------------------------
# Fake ledger
# ---------------------------------------------------------------------------


class FakeLedgerGateway:
    """In-memory stand-in for XRPLGateway.

    Responses are keyed by request method (``account_info``, ``ledger_entry``,
    ``tx``, ``submit``). Unconfigured account_info calls answer with an
    account that has no signer list.
    """

    def __init__(self) -> None:
        self.requests: list[Any] = []
        self.autofill_calls: list[tuple[dict[str, Any], int | None]] = []
        self.submitted: list[str] = []
        self.responses: dict[str, Response] = {}
        self.errors: dict[str, Exception] = {}
        self.connected = False
        self.closed = False

    # --- configuration helpers ---

    def respond(self, method: str, result: dict[str, Any]) -> None:
        self.responses[method] = Response(status=ResponseStatus.SUCCESS, result=result)

    def respond_error(self, method: str, error: str, message: str | None = None) -> None:
        result: dict[str, Any] = {"error": error}
        if message is not None:
            result["error_message"] = message
        self.responses[method] = Response(status=ResponseStatus.ERROR, result=result)

    def fail(self, method: str, exc: Exception) -> None:
        self.errors[method] = exc

    def set_signer_list(self, entries: list[tuple[str, int]], quorum: int) -> None:
        self.respond(
            "account_info",
            {
                "account_data": {"Account": "placeholder"},
                "signer_lists": [
                    {
                        "LedgerEntryType": "SignerList",
                        "SignerQuorum": quorum,
                        "SignerEntries": [
                            {"SignerEntry": {"Account": account, "SignerWeight": weight}}
                            for account, weight in entries
                        ],
                    }
                ],
            },
        )

    def methods(self) -> list[str]:
        return [r.method.value for r in self.requests]

    # --- LedgerGateway protocol ---

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def autofill(
        self, tx_json: dict[str, Any], signers_count: int | None = None
    ) -> dict[str, Any]:
        self.autofill_calls.append((copy.deepcopy(tx_json), signers_count))
        if "autofill" in self.errors:
            raise self.errors["autofill"]
        filled = copy.deepcopy(tx_json)
        filled["Fee"] = str(12 * (1 + (signers_count or 0)))
        filled["Sequence"] = 7
        filled["LastLedgerSequence"] = 1020
        filled["Flags"] = 0
        filled["SigningPubKey"] = ""
        return filled

    async def submit(self, tx_blob: str) -> Response:
        self.submitted.append(tx_blob)
        if "submit" in self.errors:
            raise self.errors["submit"]
        return self.responses["submit"]

    async def request(self, request: Any) -> Response:
        self.requests.append(request)
        method = request.method.value
        if method in self.errors:
            raise self.errors[method]
        if method in self.responses:
            return self.responses[method]
        if method == "account_info":
            return Response(
                status=ResponseStatus.SUCCESS,
                result={"account_data": {"Account": request.account}, "signer_lists": []},
            )
        raise AssertionError(f"No fake response configured for {method}")

    async def close(self) -> None:
        self.closed = True
        self.connected = False


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Accounts:
    """Checksummed classic addresses, listed in ascending account-ID order."""

    zero: str = "rrrrrrrrrrrrrrrrrrrrrhoLvTp"
    one: str = "rrrrrrrrrrrrrrrrrrrrBZbvji"
    destination: str = "rf1BiGeXwwQoi8Z2ueFYTEXSwuJYfV2Jpn"
    signer_a: str = "r9cZA1mLK5R5Am25ArfXFmqgNwjZgnfk59"
    source: str = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
    signer_b: str = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"


@pytest.fixture
def accounts() -> Accounts:
    return Accounts()


# ---------------------------------------------------------------------------
# Service Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def gateway() -> FakeLedgerGateway:
    return FakeLedgerGateway()


@pytest.fixture
def orchestrator(gateway: FakeLedgerGateway) -> EscrowOrchestrator:
    """Orchestrator over the fake gateway with the clock pinned to NOW."""
    return EscrowOrchestrator(gateway, clock=lambda: NOW)


@pytest.fixture
def escrow_node(accounts: Accounts) -> dict[str, Any]:
    """A ledger Escrow object as returned by ledger_entry."""
    return {
        "LedgerEntryType": "Escrow",
        "Account": accounts.source,
        "Destination": accounts.destination,
        "Amount": "1000000",
        "FinishAfter": 853_315_200,
        "CancelAfter": 853_401_600,
        "Condition": "A0258020" + "AB" * 32 + "810120",
        "DestinationTag": 42,
        "PreviousTxnID": "C" * 64,
        "Flags": 0,
        "index": "D" * 64,
    }


@pytest.fixture
def now() -> int:
    return NOW
