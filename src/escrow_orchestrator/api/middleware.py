"""FastAPI middleware and exception handlers for tracing, errors, and CORS.

Middleware stack (outermost first):
    1. RequestIDMiddleware — injects X-Request-ID and writes one access log line
    2. SecurityHeadersMiddleware — nosniff, frame and referrer policies, HSTS
    3. BodySizeLimitMiddleware — rejects bodies over APP_MAX_BODY_BYTES
    4. ErrorHandlerMiddleware — catches domain exceptions -> error envelopes
    5. CORSMiddleware — origins from ALLOWED_ORIGINS

Every failure leaves the API in the same envelope:
    {"success": false, "error": "...", "code": "...", "details": [...], "timestamp": "..."}
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from escrow_orchestrator.domain.exceptions import (
    EscrowOrchestratorError,
    EscrowValidationError,
    GatewayUnavailableError,
)
from escrow_orchestrator.schemas.escrow import ErrorResponse, FieldErrorDetail

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response
    from starlette.types import ASGIApp

    from escrow_orchestrator.config import Settings

logger = structlog.get_logger(__name__)

# Location prefixes FastAPI puts in front of the field path.
_LOCATION_PREFIXES = frozenset({"body", "path", "query", "header"})


def error_response(
    status_code: int,
    error: str,
    code: str | None = None,
    details: list[FieldErrorDetail] | None = None,
    path: str | None = None,
) -> JSONResponse:
    """Render the failure envelope."""
    body = ErrorResponse(error=error, code=code, details=details, path=path)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


# ---------------------------------------------------------------------------
# 1. Request ID Middleware
# ---------------------------------------------------------------------------
class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique X-Request-ID into every request and log the request once."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response


# ---------------------------------------------------------------------------
# 2. Security Headers Middleware
# ---------------------------------------------------------------------------
SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add the standard hardening headers without overriding ones a route set."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


# ---------------------------------------------------------------------------
# 3. Body Size Limit Middleware
# ---------------------------------------------------------------------------
class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length exceeds ``max_bytes``."""

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                return error_response(400, "Invalid Content-Length header", code="INVALID_REQUEST")
            if length > self.max_bytes:
                logger.warning(
                    "request.too_large",
                    path=request.url.path,
                    content_length=length,
                    limit=self.max_bytes,
                )
                return error_response(
                    413,
                    f"Request body exceeds {self.max_bytes} bytes",
                    code="PAYLOAD_TOO_LARGE",
                )
        return await call_next(request)


# ---------------------------------------------------------------------------
# 4. Error Handler Middleware
# ---------------------------------------------------------------------------
class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catch domain exceptions and return structured JSON error envelopes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except EscrowValidationError as exc:
            logger.warning("request.invalid", field=exc.field, error=exc.message)
            return error_response(
                400,
                "Validation failed",
                code=exc.code,
                details=[FieldErrorDetail(**d) for d in exc.details()],
            )
        except GatewayUnavailableError as exc:
            logger.error("ledger.unavailable", error=exc.message, server_url=exc.server_url)
            return error_response(400, exc.message, code=exc.code)
        except EscrowOrchestratorError as exc:
            logger.warning("domain.error", error=exc.message, code=exc.code)
            return error_response(400, exc.message, code=exc.code)
        except Exception as exc:
            logger.exception("unhandled.error", error=str(exc))
            return error_response(400, str(exc) or "Internal server error", code="INTERNAL_ERROR")


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn FastAPI's request validation errors into field-level details."""
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        details.append(FieldErrorDetail(field=".".join(location), message=error.get("msg", "")))

    logger.info("request.validation_failed", path=request.url.path, errors=len(details))
    return error_response(400, "Validation failed", code="VALIDATION_ERROR", details=details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, "Endpoint not found", path=request.url.path)
    return error_response(exc.status_code, str(exc.detail))


# ---------------------------------------------------------------------------
# Setup function
# ---------------------------------------------------------------------------
def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware and exception handlers on the application.

    Order matters — middleware is applied bottom-up, so the last added
    middleware runs first.
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # CORS (innermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Error handling
    app.add_middleware(ErrorHandlerMiddleware)

    # Body size guard
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.app_max_body_bytes)

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # Request ID + access log (runs last = outermost)
    app.add_middleware(RequestIDMiddleware)
