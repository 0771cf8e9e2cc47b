"""Tests for the time and memo codecs."""

from __future__ import annotations

import pytest

from escrow_orchestrator.domain.codecs import (
    RIPPLE_EPOCH_OFFSET,
    decode_memo,
    encode_memo,
    from_ledger_epoch,
    to_ledger_epoch,
)


class TestLedgerEpoch:
    def test_offset_is_ripple_epoch(self) -> None:
        # 2000-01-01T00:00:00Z
        assert RIPPLE_EPOCH_OFFSET == 946_684_800
        assert to_ledger_epoch(946_684_800) == 0

    def test_known_conversion(self) -> None:
        assert to_ledger_epoch(1_800_000_000) == 853_315_200

    @pytest.mark.parametrize("unix_seconds", [0, 1, 946_684_800, 1_700_000_000, -5, 4_000_000_000])
    def test_round_trip(self, unix_seconds: int) -> None:
        assert from_ledger_epoch(to_ledger_epoch(unix_seconds)) == unix_seconds


class TestMemoCodec:
    def test_encodes_uppercase_hex(self) -> None:
        assert encode_memo("escrow") == "657363726F77"

    def test_empty_string_stays_empty(self) -> None:
        assert encode_memo("") == ""

    @pytest.mark.parametrize("text", ["escrow", "Milestone #2 paid", "café ☕", "多字节"])
    def test_hex_decodes_back_to_text(self, text: str) -> None:
        encoded = encode_memo(text)
        assert bytes.fromhex(encoded).decode() == text
        assert decode_memo(encoded) == text
