"""Explicit conversions between raw-byte lines and decoded code-unit lines.

Narrow lines are ``bytes`` and wide lines are ``str``.  Nothing here
truncates a character to its low byte: anything a target form cannot hold
becomes ``?``.
"""

from __future__ import annotations

import sys
from array import array

REPLACEMENT = "?"


def bytes_to_text(raw: bytes) -> str:
    """Widen each byte to the character with the same value (0-255)."""
    return raw.decode("latin-1")


def text_to_bytes(text: str) -> bytes:
    """Narrow each character to one byte; characters above 0xFF become ``?``.

    Surrogate code units are replaced one by one, so an uncombined pair
    yields ``??``.
    """
    return text.encode("latin-1", errors="replace")


def code_units(raw: bytes, byteorder: str) -> str:
    """Map every 2-byte unit of ``raw`` to one character.

    Surrogates stay uncombined so that a pair split over two buffer windows
    can be rejoined later by :func:`units_to_text`.  ``raw`` must have an
    even length.
    """
    if len(raw) % 2:
        raise ValueError(f"UTF-16 code unit data must have an even length, got {len(raw)}")
    units = array("H", raw)
    if byteorder != sys.byteorder:
        units.byteswap()
    return "".join(map(chr, units))


def units_to_text(units: str) -> str:
    """Combine valid surrogate pairs of a code-unit string into characters.

    Lone surrogates are kept as they are.
    """
    if not any("\ud800" <= ch <= "\udfff" for ch in units):
        return units
    return units.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def surrogate_pair(code_point: int) -> str:
    """Split a code point above U+FFFF into its UTF-16 surrogate pair."""
    high = (((code_point - 0x10000) & 0xFFC00) >> 10) | 0xD800
    low = (code_point & 0x3FF) | 0xDC00
    return chr(high) + chr(low)
