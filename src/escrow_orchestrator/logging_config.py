"""Structured logging configuration using structlog.

JSON output outside development, coloured console output in development.
Every entry carries the request_id bound by the request middleware and the
ledger network the process talks to.

Signed blobs and signatures are clipped to a short prefix before rendering.

Usage:
    from escrow_orchestrator.logging_config import setup_logging, get_logger
    setup_logging(log_level="DEBUG", json_logs=False, network="testnet")
    logger = get_logger(__name__)
    logger.info("escrow.create_prepared", source="r...", amount="1000000")
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Event keys whose values are hex payloads rather than identifiers.
CLIPPED_KEYS = frozenset({"tx_blob", "signed_tx_blob", "signature", "fulfillment"})
CLIP_LENGTH = 16


def clip_hex_payloads(
    _logger: Any, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Shorten long hex payloads to a prefix plus their length."""
    for key in CLIPPED_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str) and len(value) > CLIP_LENGTH:
            event_dict[key] = f"{value[:CLIP_LENGTH]}...({len(value)} chars)"
    return event_dict


def add_network(network: str) -> structlog.types.Processor:
    """Processor that stamps every entry with the ledger network name."""

    def _add(
        _logger: Any, _method_name: str, event_dict: structlog.types.EventDict
    ) -> structlog.types.EventDict:
        event_dict.setdefault("network", network)
        return event_dict

    return _add


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    network: str | None = None,
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Standard Python log level string (DEBUG, INFO, WARNING, etc.)
        json_logs: If True, output JSON (for production). If False, colored console.
        network: Ledger network name added to every entry.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        clip_hex_payloads,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if network:
        shared_processors.insert(1, add_network(network))

    if json_logs:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # websockets logs every frame at DEBUG
    for noisy_logger in ("uvicorn.access", "websockets", "httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
