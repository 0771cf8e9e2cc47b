"""Ledger gateway — the network boundary to the XRP Ledger.

The services depend on the LedgerGateway protocol, not on a concrete client,
so tests can substitute a fake. XRPLGateway is the real implementation on top
of xrpl-py's AsyncWebsocketClient.

Connection model:
    - One websocket per gateway instance, opened lazily on first use.
    - Reused by concurrent requests; the websocket multiplexes them.
    - Reopened on demand when found closed.
    - No retries: a transport failure surfaces as GatewayUnavailableError.

Node-level error responses (e.g. ``entryNotFound``) are NOT exceptions here;
they come back as an unsuccessful Response for the caller to interpret.

Usage:
    gateway = XRPLGateway.from_settings(get_settings())
    response = await gateway.request(AccountInfo(account="r...", ledger_index="validated"))
    await gateway.close()
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from websockets.exceptions import WebSocketException
from xrpl.asyncio.clients import AsyncWebsocketClient
from xrpl.asyncio.clients.exceptions import (
    XRPLRequestFailureException,
    XRPLWebsocketException,
)
from xrpl.asyncio.transaction import autofill
from xrpl.models.exceptions import XRPLModelException
from xrpl.models.requests import ServerInfo, SubmitOnly
from xrpl.models.transactions import Transaction

from escrow_orchestrator.domain.exceptions import (
    EscrowValidationError,
    GatewayUnavailableError,
    LedgerRequestError,
)
from escrow_orchestrator.logging_config import get_logger

if TYPE_CHECKING:
    from xrpl.models.requests.request import Request
    from xrpl.models.response import Response

    from escrow_orchestrator.config import Settings

logger = get_logger(__name__)

# Failures that mean "could not talk to the ledger", as opposed to the
# ledger answering with an error.
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    TimeoutError,
    WebSocketException,
    XRPLWebsocketException,
)


@runtime_checkable
class LedgerGateway(Protocol):
    """Interface for ledger network operations used by the services."""

    @property
    def is_connected(self) -> bool:
        """Whether the underlying connection is currently open."""
        ...

    async def autofill(
        self, tx_json: dict[str, Any], signers_count: int | None = None
    ) -> dict[str, Any]:
        """Populate Fee, Sequence and LastLedgerSequence.

        Never changes semantic fields it was given. ``signers_count`` sizes
        the fee for a multisigned submission.
        """
        ...

    async def submit(self, tx_blob: str) -> Response:
        """Submit an already signed, hex-encoded transaction blob."""
        ...

    async def request(self, request: Request) -> Response:
        """Send a ledger request (account_info, ledger_entry, tx, ...)."""
        ...

    async def close(self) -> None:
        """Close the connection if open."""
        ...


class XRPLGateway:
    """Lazily connected, self-healing websocket gateway to a ledger node."""

    def __init__(
        self,
        server_url: str,
        network: str = "custom",
        connection_timeout: float = 10.0,
        request_timeout: float = 5.0,
    ) -> None:
        self._server_url = server_url
        self._network = network
        self._connection_timeout = connection_timeout
        self._request_timeout = request_timeout
        self._client: AsyncWebsocketClient | None = None
        self._connect_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> XRPLGateway:
        return cls(
            server_url=settings.xrpl_url,
            network=settings.xrpl_network.value,
            connection_timeout=settings.xrpl_connection_timeout_seconds,
            request_timeout=settings.xrpl_request_timeout_seconds,
        )

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def network(self) -> str:
        return self._network

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_open()

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    async def connect(self) -> AsyncWebsocketClient:
        """Return an open client, opening a new websocket if needed."""
        if self.is_connected:
            return self._client

        async with self._connect_lock:
            # Another request may have connected while we waited.
            if self.is_connected:
                return self._client

            client = AsyncWebsocketClient(self._server_url)
            try:
                await asyncio.wait_for(client.open(), timeout=self._connection_timeout)
            except TRANSPORT_ERRORS as exc:
                logger.error(
                    "ledger.connection_failed",
                    server_url=self._server_url,
                    error=str(exc) or type(exc).__name__,
                )
                raise GatewayUnavailableError(
                    f"Ledger connection failed: {str(exc) or type(exc).__name__}",
                    server_url=self._server_url,
                ) from exc

            self._client = client
            logger.info("ledger.connected", network=self._network, server_url=self._server_url)
            await self._log_server_info(client)
            return client

    async def close(self) -> None:
        if self.is_connected:
            await self._client.close()
            logger.info("ledger.disconnected", server_url=self._server_url)
        self._client = None

    async def _log_server_info(self, client: AsyncWebsocketClient) -> None:
        try:
            response = await asyncio.wait_for(
                client.request(ServerInfo()), timeout=self._request_timeout
            )
        except TRANSPORT_ERRORS as exc:
            logger.warning("ledger.server_info_unavailable", error=str(exc) or type(exc).__name__)
            return
        if not response.is_successful():
            logger.warning("ledger.server_info_unavailable", error=response.result.get("error"))
            return
        info = response.result.get("info", {})
        logger.info(
            "ledger.server_info",
            network_id=info.get("network_id"),
            ledger_index=info.get("validated_ledger", {}).get("seq"),
            server_state=info.get("server_state"),
        )

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(self, request: Request) -> Response:
        client = await self.connect()
        try:
            return await asyncio.wait_for(client.request(request), timeout=self._request_timeout)
        except TRANSPORT_ERRORS as exc:
            method = request.method.value
            logger.error("ledger.request_failed", method=method, error=str(exc) or type(exc).__name__)
            raise GatewayUnavailableError(
                f"Ledger request '{method}' failed: {str(exc) or type(exc).__name__}",
                server_url=self._server_url,
            ) from exc

    async def submit(self, tx_blob: str) -> Response:
        logger.debug("ledger.submit", tx_blob=tx_blob)
        return await self.request(SubmitOnly(tx_blob=tx_blob))

    async def autofill(
        self, tx_json: dict[str, Any], signers_count: int | None = None
    ) -> dict[str, Any]:
        try:
            transaction = Transaction.from_xrpl(tx_json)
        except XRPLModelException as exc:
            raise EscrowValidationError(str(exc), field="transaction") from exc

        client = await self.connect()
        try:
            filled = await asyncio.wait_for(
                autofill(transaction, client, signers_count),
                timeout=self._request_timeout,
            )
        except XRPLRequestFailureException as exc:
            ledger_error = getattr(exc, "error", None)
            logger.warning("ledger.autofill_rejected", error=ledger_error, detail=str(exc))
            raise LedgerRequestError(
                f"Ledger rejected autofill: {exc}", ledger_error=ledger_error
            ) from exc
        except TRANSPORT_ERRORS as exc:
            logger.error("ledger.autofill_failed", error=str(exc) or type(exc).__name__)
            raise GatewayUnavailableError(
                f"Ledger autofill failed: {str(exc) or type(exc).__name__}",
                server_url=self._server_url,
            ) from exc
        return filled.to_xrpl()
