"""Byte layout of written lines for the buffered encodings."""

from __future__ import annotations

import re

from ._encoding import Encoding
from ._strings import REPLACEMENT, text_to_bytes

_ASTRAL = re.compile("[\U00010000-\U0010FFFF]")


def _crlf(text: str) -> str:
    return text.replace("\n", "\r\n")


def encode_utf8(text: str) -> bytes:
    """UTF-8 with 1-3 bytes per character; anything above U+FFFF becomes ``?``."""
    return _ASTRAL.sub(REPLACEMENT, _crlf(text)).encode("utf-8", "surrogatepass")


def encode_utf16le(text: str) -> bytes:
    return _crlf(text).encode("utf-16-le", "surrogatepass")


def encode_utf16be(text: str) -> bytes:
    return _crlf(text).encode("utf-16-be", "surrogatepass")


def encode_identity(text: str) -> bytes:
    return text_to_bytes(_crlf(text))


def encode_identity_raw(data: bytes) -> bytes:
    """Narrow identity writes keep the caller's bytes as they are."""
    return data.replace(b"\n", b"\r\n")


_ENCODERS = {
    Encoding.IDENTITY_8BIT: encode_identity,
    Encoding.UTF8: encode_utf8,
    Encoding.UTF16LE: encode_utf16le,
    Encoding.UTF16BE: encode_utf16be,
}


def encode_line(encoding: Encoding, text: str) -> bytes:
    """Encode ``text`` for a binary stream in ``encoding``.

    SYSTEM_TEXT is written through the text layer and has no entry here.
    """
    try:
        encoder = _ENCODERS[encoding]
    except KeyError:
        raise ValueError(f"{encoding.name} is written through the text layer") from None
    return encoder(text)
