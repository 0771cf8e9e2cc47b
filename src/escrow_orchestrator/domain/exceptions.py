"""Domain exceptions for the Escrow Orchestrator.

These exceptions are framework-agnostic and represent failures the caller
must act on. They are caught and translated to HTTP responses by the API
layer's middleware.

Two outcomes are deliberately NOT exceptions:
    - an engine rejection of a submitted transaction (carried in SubmissionResult)
    - a missing escrow entry (the EscrowNotFound status variant)
"""


class EscrowOrchestratorError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "ESCROW_ORCHESTRATOR_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Request Errors ---


class EscrowValidationError(EscrowOrchestratorError):
    """Raised when a request violates a field-level invariant.

    Example: cancel_after earlier than finish_after.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message=message, code="VALIDATION_ERROR")
        self.field = field

    def details(self) -> list[dict[str, str]]:
        """Field-level detail entries in the HTTP envelope's shape."""
        return [{"field": self.field or "", "message": self.message}]


class InvalidAddressError(EscrowOrchestratorError):
    """Raised when a value is not a structurally valid classic ledger address."""

    def __init__(self, address: str, role: str = "account") -> None:
        super().__init__(
            message=f"Invalid {role} address: {address}",
            code="INVALID_ADDRESS",
        )
        self.address = address
        self.role = role


class EmptySignatureSetError(EscrowOrchestratorError):
    """Raised when multisig assembly is attempted with no signatures."""

    def __init__(self) -> None:
        super().__init__(
            message="At least one signature is required to assemble a multisigned transaction",
            code="EMPTY_SIGNATURE_SET",
        )


# --- Ledger Errors ---


class GatewayUnavailableError(EscrowOrchestratorError):
    """Raised when the ledger network cannot be reached or does not answer in time."""

    def __init__(self, message: str, server_url: str | None = None) -> None:
        super().__init__(message=message, code="GATEWAY_UNAVAILABLE")
        self.server_url = server_url


class LedgerRequestError(EscrowOrchestratorError):
    """Raised when a ledger node answers a request with an error.

    Only used for queries with no normal "absent" outcome, such as
    autofilling for an unfunded account or looking up an unknown hash.
    """

    def __init__(self, message: str, ledger_error: str | None = None) -> None:
        super().__init__(message=message, code="LEDGER_REQUEST_FAILED")
        self.ledger_error = ledger_error
