"""Per-encoding line decoders working on a :class:`ByteWindow`.

A decoder consumes bytes from the window cursor onwards and returns the
code units it produced.  It stops at the first ``\\n`` (consumed, not
returned), at the end of the usable window content, or at an invalid
sequence.  Carriage returns are dropped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple

from ._buffer import ByteWindow
from ._encoding import Encoding
from ._strings import REPLACEMENT, bytes_to_text, code_units, surrogate_pair

# UTF-8 byte classes
UTF8_SINGLE_MAX = 0x80
UTF8_CONTINUATION_MIN = 0x80
UTF8_CONTINUATION_MAX = 0xC0

# Continuation bytes accepted by each variant
NARROW_MAX_CONTINUATION = 2
WIDE_MAX_CONTINUATION = 3


class DecodeStep(NamedTuple):
    units: str
    line_end: bool
    invalid: bool = False


def _is_continuation(b: int) -> bool:
    return UTF8_CONTINUATION_MIN <= b < UTF8_CONTINUATION_MAX


def continuation_count(lead: int) -> int:
    """Number of continuation bytes announced by a UTF-8 lead byte.

    Returns ``-1`` for bytes that cannot start a multi-byte sequence
    (continuation bytes, ``0xFE`` and ``0xFF``).
    """
    if lead & 0xE0 == 0xC0:
        return 1
    if lead & 0xF0 == 0xE0:
        return 2
    if lead & 0xF8 == 0xF0:
        return 3
    if lead & 0xFC == 0xF8:
        return 4
    if lead & 0xFE == 0xFC:
        return 5
    return -1


class LineDecoder(ABC):
    """Turns window bytes into code units up to the next line feed."""

    encoding: Encoding

    @abstractmethod
    def scan(self, window: ByteWindow) -> DecodeStep: ...


class Identity8BitDecoder(LineDecoder):
    encoding = Encoding.IDENTITY_8BIT

    def scan(self, window: ByteWindow) -> DecodeStep:
        data = window.data
        start, end = window.cursor, window.valid_length
        nl = data.find(b"\n", start, end)
        stop = end if nl < 0 else nl
        raw = bytes(data[start:stop]).replace(b"\r", b"")
        window.advance(stop - start + (0 if nl < 0 else 1))
        return DecodeStep(bytes_to_text(raw), nl >= 0)


class Utf16Decoder(LineDecoder):
    """Reads 2-byte code units; a trailing odd byte waits for more data."""

    def __init__(self, byteorder: str) -> None:
        if byteorder not in ("little", "big"):
            raise ValueError(f"byteorder must be 'little' or 'big', got {byteorder!r}")
        self._byteorder = byteorder
        self.encoding = Encoding.UTF16LE if byteorder == "little" else Encoding.UTF16BE

    def scan(self, window: ByteWindow) -> DecodeStep:
        start = window.cursor
        pairs = window.unread // 2
        units = code_units(bytes(window.data[start:start + 2 * pairs]), self._byteorder)
        nl = units.find("\n")
        if nl < 0:
            window.advance(2 * pairs)
            return DecodeStep(units.replace("\r", ""), False)
        window.advance(2 * (nl + 1))
        return DecodeStep(units[:nl].replace("\r", ""), True)


class Utf8Decoder(LineDecoder):
    """Byte-by-byte UTF-8 decoder.

    The narrow variant accepts sequences of at most 3 bytes and emits ``?``
    for every multi-byte character.  The wide variant accepts up to 4 bytes
    and emits a surrogate pair for code points above U+FFFF.
    """

    encoding = Encoding.UTF8

    def __init__(self, wide: bool) -> None:
        self._wide = wide
        self._max_continuation = WIDE_MAX_CONTINUATION if wide else NARROW_MAX_CONTINUATION

    def scan(self, window: ByteWindow) -> DecodeStep:
        data = window.data
        pos, end = window.cursor, window.valid_length
        out: list[str] = []
        while pos < end:
            b = data[pos]
            if b < UTF8_SINGLE_MAX:
                pos += 1
                if b == 0x0A:
                    window.advance(pos - window.cursor)
                    return DecodeStep("".join(out), True)
                if b != 0x0D:
                    out.append(chr(b))
                continue

            n = continuation_count(b)
            if n < 0 or n > self._max_continuation:
                return self._invalid(window, pos, out)
            if pos + n >= end:
                # Without a full window the stream has ended mid-sequence.
                if not window.is_full:
                    return self._invalid(window, pos, out)
                break
            seq = data[pos:pos + n + 1]
            if not all(_is_continuation(c) for c in seq[1:]):
                return self._invalid(window, pos, out)
            if self._wide:
                out.append(self._decode_sequence(seq))
            else:
                out.append(REPLACEMENT)
            pos += n + 1

        window.advance(pos - window.cursor)
        return DecodeStep("".join(out), False)

    @staticmethod
    def _decode_sequence(seq: bytearray) -> str:
        n = len(seq) - 1
        if n == 1:  # 110xxxxx 10xxxxxx
            return chr((seq[0] & 0x1F) << 6 | (seq[1] & 0x3F))
        if n == 2:  # 1110xxxx 10xxxxxx 10xxxxxx
            return chr((seq[0] & 0x0F) << 12 | (seq[1] & 0x3F) << 6 | (seq[2] & 0x3F))
        # 11110xxx 10xxxxxx 10xxxxxx 10xxxxxx
        cp = (seq[0] & 0x07) << 18 | (seq[1] & 0x3F) << 12 | (seq[2] & 0x3F) << 6 | (seq[3] & 0x3F)
        if cp <= 0xFFFF:
            return chr(cp)
        return surrogate_pair(cp)

    @staticmethod
    def _invalid(window: ByteWindow, pos: int, out: list[str]) -> DecodeStep:
        out.append(REPLACEMENT)
        window.advance(pos + 1 - window.cursor)
        return DecodeStep("".join(out), False, invalid=True)


def decoder_for(encoding: Encoding, wide: bool) -> LineDecoder:
    """Return the buffered decoder for ``encoding``.

    SYSTEM_TEXT has no buffered decoder; it reads through the text layer.
    """
    if encoding is Encoding.IDENTITY_8BIT:
        return Identity8BitDecoder()
    if encoding is Encoding.UTF8:
        return Utf8Decoder(wide)
    if encoding is Encoding.UTF16LE:
        return Utf16Decoder("little")
    if encoding is Encoding.UTF16BE:
        return Utf16Decoder("big")
    raise ValueError(f"No buffered decoder for {encoding.name}")
