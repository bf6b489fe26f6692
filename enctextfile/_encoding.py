"""Encodings understood by :class:`~enctextfile.TextFile` and BOM detection."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._stream import FileStream

logger = logging.getLogger(__name__)


class Encoding(enum.Enum):
    SYSTEM_TEXT = "system_text"
    IDENTITY_8BIT = "identity_8bit"
    UTF8 = "utf8"
    UTF16LE = "utf16le"
    UTF16BE = "utf16be"

    @property
    def is_unicode(self) -> bool:
        return self in (Encoding.UTF8, Encoding.UTF16LE, Encoding.UTF16BE)

    @property
    def bom(self) -> bytes:
        """Byte order mark written by ``TextFile.save`` (empty when none)."""
        return _BOMS.get(self, b"")


_BOMS: dict[Encoding, bytes] = {
    Encoding.UTF8: b"\xef\xbb\xbf",
    Encoding.UTF16LE: b"\xff\xfe",
    Encoding.UTF16BE: b"\xfe\xff",
}


def detect_encoding(stream: FileStream, default: Encoding) -> tuple[Encoding, int] | None:
    """Classify a binary stream by its leading byte order mark.

    Parameters
    ----------
    stream:
        Binary stream positioned at offset 0.
    default:
        Encoding kept when no mark is recognized.

    Returns
    -------
    tuple[Encoding, int] | None
        The encoding and the number of BOM bytes to skip, or ``None`` when a
        mark could not be read completely.  After a match the stream sits
        just past the BOM; without one it is rewound to offset 0.
    """
    length = stream.length()
    encoding, offset = default, 0
    if length >= 2:
        head = stream.read(2)
        if len(head) != 2:
            return None
        if head == b"\xff\xfe":
            encoding, offset = Encoding.UTF16LE, 2
        elif head == b"\xfe\xff":
            encoding, offset = Encoding.UTF16BE, 2
        elif head == b"\xef\xbb" and length >= 3:
            tail = stream.read(1)
            if len(tail) != 1:
                return None
            if tail == b"\xbf":
                encoding, offset = Encoding.UTF8, 3
    if offset == 0:
        stream.seek(0)
    logger.debug("Detected %s (bom_offset=%d) in %s", encoding.name, offset, stream.path)
    return encoding, offset
