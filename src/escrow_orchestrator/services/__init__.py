"""Application services — escrow use case orchestration."""

from escrow_orchestrator.services.escrow_service import EscrowOrchestrator
from escrow_orchestrator.services.multisig import MultisigAssembler, MultisigDetector
from escrow_orchestrator.services.status import StatusTranslator
from escrow_orchestrator.services.submission import SubmissionGateway
from escrow_orchestrator.services.transaction_builder import TransactionBuilder

__all__ = [
    "EscrowOrchestrator",
    "MultisigAssembler",
    "MultisigDetector",
    "StatusTranslator",
    "SubmissionGateway",
    "TransactionBuilder",
]
