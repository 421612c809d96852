"""Hardware address value type embedded in the tail of every advertisement."""

from __future__ import annotations

import re
from dataclasses import dataclass

ADDRESS_LENGTH = 6

# Each byte pair is matched on its own against an all-lower or all-upper template.
_PAIR = r"(?:[0-9a-f]{2}|[0-9A-F]{2})"
_ADDRESS_PATTERN = re.compile(rf"{_PAIR}(?::{_PAIR}){{{ADDRESS_LENGTH - 1}}}")


class InvalidAddress(ValueError):
    """Raised when text or bytes cannot be turned into an :class:`Address`."""

    def __init__(self, text: str) -> None:
        super().__init__(f"not a valid address: {text!r}")
        self.text = text


@dataclass(frozen=True, order=True, slots=True)
class Address:
    """Six raw bytes rendered as lower-case colon separated hex."""

    value: bytes

    def __post_init__(self) -> None:
        if isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, "value", bytes(self.value))
        elif not isinstance(self.value, bytes):
            raise InvalidAddress(repr(self.value))
        if len(self.value) != ADDRESS_LENGTH:
            raise InvalidAddress(self.value.hex())

    @classmethod
    def from_bytes(cls, raw: bytes | bytearray | memoryview) -> Address:
        return cls(bytes(raw))

    @classmethod
    def from_text(cls, text: str) -> Address:
        """Parse ``aa:bb:cc:dd:ee:ff`` in lower or upper case."""
        if not isinstance(text, str) or _ADDRESS_PATTERN.fullmatch(text) is None:
            raise InvalidAddress(str(text))
        return cls(bytes.fromhex(text.replace(":", "")))

    def to_text(self) -> str:
        return ":".join(f"{octet:02x}" for octet in self.value)

    def __str__(self) -> str:
        return self.to_text()

    def __bytes__(self) -> bytes:
        return self.value
