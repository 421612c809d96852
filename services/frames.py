"""Helpers turning human-supplied text into decoder inputs."""

from __future__ import annotations

import string
from datetime import datetime, timezone

_HEX_DIGITS = frozenset(string.hexdigits)


class InvalidFrame(ValueError):
    """Raised when frame text is not an even-length hex string."""


def parse_hex_frame(text: str) -> bytes:
    """Convert hex text such as ``0512FC...`` or ``0x05 12 fc`` into bytes."""
    candidate = "".join(text.split())
    if candidate[:2].lower() == "0x":
        candidate = candidate[2:]
    if not candidate:
        raise InvalidFrame("frame is empty")
    if len(candidate) % 2:
        raise InvalidFrame(f"frame has an odd number of hex digits: {len(candidate)}")
    if not _HEX_DIGITS.issuperset(candidate):
        raise InvalidFrame("frame contains non-hex characters")
    return bytes.fromhex(candidate)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)
