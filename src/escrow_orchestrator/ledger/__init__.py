"""Ledger network boundary."""

from escrow_orchestrator.ledger.gateway import LedgerGateway, XRPLGateway

__all__ = ["LedgerGateway", "XRPLGateway"]
