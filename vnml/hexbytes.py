"""
Hex <-> bytes conversions used by the ``BIN:`` key convention.

Hex text is big-endian, uppercase and ``0x``-prefixed:
``b"\\x01\\xab"`` <-> ``"0x01AB"``.
"""

from __future__ import annotations

HEX_PREFIX = "0x"


def bytes_to_hex(data: bytes) -> str:
    return HEX_PREFIX + data.hex().upper()


def hex_to_bytes(text: str) -> bytes:
    """Decode hex text, with or without the ``0x`` prefix.

    Raises ValueError for odd-length or non-hex input.
    """
    digits = text[len(HEX_PREFIX):] if text.startswith(HEX_PREFIX) else text
    if len(digits) % 2:
        raise ValueError(f"Odd-length hex string: {text!r}")
    return bytes.fromhex(digits)


def text_to_hex(text: str, encoding: str = "utf-8") -> str:
    return bytes_to_hex(text.encode(encoding))
