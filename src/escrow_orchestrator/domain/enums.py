"""Domain enumerations for the Escrow Orchestrator.

These enums define the canonical kinds and states used throughout the system.
They are framework-agnostic (no FastAPI, no xrpl-py imports).
"""

import enum


class TransactionKind(enum.StrEnum):
    """Closed set of ledger transaction kinds the orchestrator prepares.

    Values match the ledger's ``TransactionType`` field exactly.
    """

    ESCROW_CREATE = "EscrowCreate"
    ESCROW_FINISH = "EscrowFinish"
    ESCROW_CANCEL = "EscrowCancel"


class EscrowState(enum.StrEnum):
    """Outcome of an escrow status query.

    NOT_FOUND is a normal outcome: the escrow may already have been
    finished or cancelled.
    """

    ACTIVE = "active"
    NOT_FOUND = "not_found"
    ERROR = "error"


class LedgerNetwork(enum.StrEnum):
    """Named ledger network presets."""

    TESTNET = "testnet"
    MAINNET = "mainnet"
    DEVNET = "devnet"


# Engine result code for a transaction the ledger accepted into its queue.
ENGINE_SUCCESS = "tesSUCCESS"

# Error code the ledger returns from ledger_entry when no object matches.
ENTRY_NOT_FOUND = "entryNotFound"
