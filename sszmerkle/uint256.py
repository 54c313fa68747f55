"""Text conversion of 256-bit unsigned integers stored little endian in 32 bytes."""

from __future__ import annotations

_SIZE = 32
_DIGITS_AFTER_ZERO = "0123456789_"


def _parse_integer(text: str) -> int:
    body = text[1:] if text[:1] in ("+", "-") else text
    if not body or not body.isascii() or body != body.strip() or body[:1] in ("+", "-"):
        raise ValueError(f"invalid integer: {text!r}")
    try:
        if len(body) > 1 and body[0] == "0" and body[1] in _DIGITS_AFTER_ZERO:
            return int(body, 8)
        return int(body, 0)
    except ValueError:
        raise ValueError(f"invalid integer: {text!r}") from None


def uint256_from_text(text: str | bytes) -> bytes:
    """Parse an integer literal into 32 little endian bytes.

    Base prefixes (0x, 0o, 0b, leading 0 for octal) and underscores are
    accepted; a sign is accepted and only the magnitude is stored.
    """
    if isinstance(text, (bytes, bytearray)):
        text = text.decode("ascii", errors="strict")
    magnitude = _parse_integer(text)
    if magnitude.bit_length() > 256:
        raise ValueError("too big")
    return magnitude.to_bytes(_SIZE, "little")


def uint256_to_text(value: bytes) -> str:
    """Render 32 little endian bytes as a decimal string."""
    if len(value) != _SIZE:
        raise ValueError(f"uint256 must be {_SIZE} bytes, got {len(value)}")
    return str(int.from_bytes(value, "little"))