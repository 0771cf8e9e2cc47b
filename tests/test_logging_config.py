"""Tests for the structlog processors."""

from __future__ import annotations

from escrow_orchestrator.logging_config import add_network, clip_hex_payloads


class TestClipHexPayloads:
    def test_long_blob_is_clipped(self) -> None:
        blob = "12" * 200
        event = clip_hex_payloads(None, "info", {"event": "ledger.submit", "tx_blob": blob})
        assert event["tx_blob"] == f"{blob[:16]}...(400 chars)"

    def test_short_values_and_other_keys_untouched(self) -> None:
        event = clip_hex_payloads(
            None, "info", {"event": "x", "signature": "ABCD", "tx_hash": "F" * 64}
        )
        assert event["signature"] == "ABCD"
        assert event["tx_hash"] == "F" * 64


class TestAddNetwork:
    def test_stamps_network(self) -> None:
        processor = add_network("testnet")
        assert processor(None, "info", {"event": "x"})["network"] == "testnet"

    def test_explicit_value_wins(self) -> None:
        processor = add_network("testnet")
        assert processor(None, "info", {"event": "x", "network": "devnet"})["network"] == "devnet"
