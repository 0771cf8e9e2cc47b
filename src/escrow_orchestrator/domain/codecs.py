"""Pure value codecs between caller conventions and ledger representations.

Time: callers speak Unix seconds, the ledger speaks seconds since the
Ripple epoch (2000-01-01T00:00:00Z).

Memo: the ledger stores memo fields as hex-encoded bytes.
"""

from __future__ import annotations

# Seconds between 1970-01-01T00:00:00Z and 2000-01-01T00:00:00Z.
RIPPLE_EPOCH_OFFSET = 946_684_800


def to_ledger_epoch(unix_seconds: int) -> int:
    """Convert Unix seconds to ledger-native seconds."""
    return unix_seconds - RIPPLE_EPOCH_OFFSET


def from_ledger_epoch(ledger_seconds: int) -> int:
    """Convert ledger-native seconds back to Unix seconds."""
    return ledger_seconds + RIPPLE_EPOCH_OFFSET


def encode_memo(text: str) -> str:
    """Encode a UTF-8 string as uppercase hex. The empty string stays empty."""
    return text.encode("utf-8").hex().upper()


def decode_memo(hex_text: str) -> str:
    """Decode a hex memo field back to text."""
    return bytes.fromhex(hex_text).decode("utf-8")
