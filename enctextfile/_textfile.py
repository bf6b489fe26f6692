"""TextFile: buffered, encoding-aware sequential text reader/writer.

The reader detects UTF-8 and UTF-16 byte order marks, decodes line by line
through a fixed-size :class:`ByteWindow`, and reports positions as logical
offsets that exclude the BOM and any buffered lookahead.  When a UTF-8
stream turns out to hold an invalid sequence, the current line is read
again through the platform text layer and the file stays on that path.
"""

from __future__ import annotations

import codecs
import io
import locale
import logging
import os
from collections.abc import Iterator

from ._buffer import DEFAULT_CAPACITY, ByteWindow
from ._decode import decoder_for
from ._encode import encode_identity_raw, encode_line
from ._encoding import Encoding, detect_encoding
from ._exceptions import TextFileOpenError
from ._stream import FileStream
from ._strings import bytes_to_text, text_to_bytes, units_to_text
from ._typing import LineResult, RawLineResult

logger = logging.getLogger(__name__)

TEXTFILE_BUFFER_SIZE: int = DEFAULT_CAPACITY


class TextFile:
    """Sequential text reader/writer over a file path.

    Parameters
    ----------
    encoding:
        Encoding assumed for files without a byte order mark.
    default_encoding:
        Encoding switched to when a UTF-8 stream holds an invalid sequence.
        A UTF-8 default falls back to ``SYSTEM_TEXT`` instead.
    buffer_size:
        Capacity of the read window in bytes (default 64 KiB).
    platform_encoding:
        Codec of the platform text path.  ``None`` uses the locale's
        preferred encoding.
    platform_errors:
        Codec error handler of the platform text path (default
        ``"replace"``).

    Example
    -------
    >>> tf = TextFile(Encoding.UTF8)
    >>> if tf.open("subs.srt"):
    ...     for line in tf:
    ...         print(line)
    ...     tf.close()
    """

    def __init__(
        self,
        encoding: Encoding = Encoding.SYSTEM_TEXT,
        default_encoding: Encoding = Encoding.SYSTEM_TEXT,
        *,
        buffer_size: int = TEXTFILE_BUFFER_SIZE,
        platform_encoding: str | None = None,
        platform_errors: str = "replace",
    ) -> None:
        for name, value in (("encoding", encoding), ("default_encoding", default_encoding)):
            if not isinstance(value, Encoding):
                raise ValueError(f"Invalid {name} value: {value!r}. Expected an Encoding member.")
        if platform_encoding is None:
            platform_encoding = locale.getpreferredencoding(False)
        try:
            codecs.lookup(platform_encoding)
            codecs.lookup_error(platform_errors)
        except LookupError as exc:
            raise ValueError(f"Invalid platform text settings: {exc}") from None
        self._encoding: Encoding = encoding
        self._default_encoding: Encoding = default_encoding
        self._platform_encoding: str = platform_encoding
        self._platform_errors: str = platform_errors
        self._window = ByteWindow(buffer_size)
        self._stream: FileStream | None = None
        self._path: str | None = None
        self._bom_offset: int = 0
        # Physical offset of the stream as of the last fill or seek
        self._pos_in_file: int = 0

    # -- properties --

    @property
    def encoding(self) -> Encoding:
        return self._encoding

    @encoding.setter
    def encoding(self, value: Encoding) -> None:
        if not isinstance(value, Encoding):
            raise ValueError(f"Invalid encoding value: {value!r}. Expected an Encoding member.")
        self._encoding = value

    @property
    def default_encoding(self) -> Encoding:
        return self._default_encoding

    @property
    def is_unicode(self) -> bool:
        return self._encoding.is_unicode

    @property
    def path(self) -> str | None:
        """Path of the open file, ``None`` when closed."""
        return self._path

    @property
    def bom_offset(self) -> int:
        return self._bom_offset

    @property
    def platform_encoding(self) -> str:
        return self._platform_encoding

    @property
    def closed(self) -> bool:
        return self._stream is None

    # -- open / save / close --

    def open(self, path: str | os.PathLike[str]) -> bool:
        """Open ``path`` for reading and detect its encoding.

        Returns ``False`` when the file cannot be opened or its byte order
        mark cannot be read; the instance is then closed.
        """
        self.close()
        path = os.fspath(path)
        try:
            stream = FileStream.open(path, "rb")
        except TextFileOpenError as exc:
            logger.debug("%s", exc)
            return False
        self._stream, self._path = stream, path

        try:
            detected = detect_encoding(stream, self._encoding)
        except OSError as exc:
            logger.debug("BOM detection failed for %s: %s", path, exc)
            detected = None
        if detected is None:
            self.close()
            return False
        self._encoding, self._bom_offset = detected

        if self._encoding is Encoding.SYSTEM_TEXT:
            return self._reopen(text=True)
        if self._bom_offset == 0:
            self.seek(0)
        else:
            self._pos_in_file = stream.tell()
        return True

    def save(self, path: str | os.PathLike[str], encoding: Encoding) -> bool:
        """Create ``path`` for writing in ``encoding`` and emit its BOM."""
        if not isinstance(encoding, Encoding):
            raise ValueError(f"Invalid encoding value: {encoding!r}. Expected an Encoding member.")
        self.close()
        path = os.fspath(path)
        try:
            if encoding is Encoding.SYSTEM_TEXT:
                stream = FileStream.open(
                    path, "wt", encoding=self._platform_encoding, errors=self._platform_errors
                )
            else:
                stream = FileStream.open(path, "wb")
        except TextFileOpenError as exc:
            logger.debug("%s", exc)
            return False
        self._stream, self._path = stream, path

        bom = encoding.bom
        if bom:
            try:
                stream.write(bom)
            except OSError as exc:
                logger.warning("Cannot write BOM to %s: %s", path, exc)
                self.close()
                return False
        self._bom_offset = len(bom)
        self._encoding = encoding
        return True

    def close(self) -> None:
        stream = self._stream
        self._stream = None
        self._path = None
        self._bom_offset = 0
        self._pos_in_file = 0
        self._window.reset()
        if stream is not None:
            try:
                stream.close()
            except OSError as exc:
                logger.warning("Error while closing %s: %s", stream.path, exc)

    def _reopen(self, text: bool) -> bool:
        """Reopen the current path for reading, keeping the BOM offset."""
        path, bom_offset = self._path, self._bom_offset
        if path is None:
            return False
        self.close()
        try:
            if text:
                stream = FileStream.open(
                    path, "rt", encoding=self._platform_encoding, errors=self._platform_errors
                )
            else:
                stream = FileStream.open(path, "rb")
        except TextFileOpenError as exc:
            logger.warning("%s", exc)
            return False
        self._stream, self._path, self._bom_offset = stream, path, bom_offset
        return True

    def _match_stream_mode(self, text: bool) -> bool:
        # A changed encoding may need the other read path; writers are left alone.
        stream = self._stream
        if stream is None or stream.is_text == text or stream.mode not in ("rb", "rt"):
            return stream is not None
        pos = self.tell()
        if not self._reopen(text):
            return False
        self.seek(pos)
        return True

    # -- positions --

    def tell(self) -> int:
        """Logical offset of the next unread byte."""
        if self._stream is None:
            return 0
        return self._stream.tell() - self._bom_offset - self._window.unread

    def length(self) -> int:
        """Logical length of the file (BOM excluded)."""
        if self._stream is None:
            return 0
        return self._stream.length() - self._bom_offset

    def _fast_position(self) -> int:
        return self._pos_in_file - self._bom_offset - self._window.unread

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move to a logical offset, reusing buffered bytes when possible.

        The target is clamped to ``[0, length()]``.  Returns the new logical
        position.
        """
        if self._stream is None:
            return 0
        pos = self.tell()
        length = self.length()
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = pos + offset
        elif whence == io.SEEK_END:
            target = length + offset
        else:
            raise ValueError(f"Invalid whence value: {whence}. Must be 0, 1, or 2.")
        target = min(max(target, 0), length)

        window = self._window
        if window.valid_length > 0 and window.move(target - pos):
            logger.debug("Seek to %d served from the read window", target)
        else:
            window.reset()
            self._stream.seek(target + self._bom_offset)
        self._pos_in_file = target + self._bom_offset + window.unread
        return target

    # -- reading --

    def read_line(self) -> LineResult:
        """Read the next line as text.

        Returns
        -------
        LineResult
            ``ok`` is ``False`` once the stream is exhausted.
        """
        units, ok = self._read(wide=True)
        return LineResult(units_to_text(units), ok)

    def read_line_bytes(self) -> RawLineResult:
        """Read the next line in narrow form, one byte per character.

        Characters that do not fit in a byte come back as ``?``.
        """
        units, ok = self._read(wide=False)
        return RawLineResult(text_to_bytes(units), ok)

    def _read(self, wide: bool) -> tuple[str, bool]:
        if self._stream is None:
            return "", False
        text = self._encoding is Encoding.SYSTEM_TEXT
        try:
            if not self._match_stream_mode(text):
                return "", False
            if text:
                return self._read_text()
            return self._read_buffered(wide)
        except (OSError, UnicodeError) as exc:
            logger.warning("Read from %s failed: %s", self._path, exc)
            return "", False

    def _read_text(self) -> tuple[str, bool]:
        assert self._stream is not None
        line = self._stream.read_text_line()
        if not line:
            return "", False
        if line.endswith("\n"):
            line = line[:-1]
        return line, True

    def _read_buffered(self, wide: bool) -> tuple[str, bool]:
        decoder = decoder_for(self._encoding, wide)
        line_start = self._fast_position()
        parts: list[str] = []
        produced = 0
        while True:
            step = decoder.scan(self._window)
            if step.invalid:
                return self._fall_back(line_start, wide)
            parts.append(step.units)
            produced += len(step.units)
            if step.line_end:
                return "".join(parts), True
            if self._fill():
                return "".join(parts), produced > 0

    def _fill(self) -> bool:
        assert self._stream is not None
        exhausted = self._window.fill(self._stream.read)
        self._pos_in_file = self._stream.tell()
        return exhausted

    def _fall_back(self, line_start: int, wide: bool) -> tuple[str, bool]:
        target = self._default_encoding
        if target is Encoding.UTF8:
            target = Encoding.SYSTEM_TEXT
        logger.warning(
            "Invalid UTF-8 sequence in %s (line at offset %d); switching to %s",
            self._path, line_start, target.name,
        )
        self._encoding = target
        self._window.reset()
        if not self._reopen(text=target is Encoding.SYSTEM_TEXT):
            return "", False
        self.seek(line_start)
        return self._read(wide)

    # -- writing --

    def write(self, text: str | bytes) -> bool:
        """Write ``text`` in the current encoding.

        ``bytes`` are written as-is for IDENTITY_8BIT and widened one
        character per byte otherwise.  Returns ``False`` if nothing could be
        written or the stream failed part way.
        """
        stream = self._stream
        if stream is None:
            return False
        try:
            if isinstance(text, bytes):
                if self._encoding is Encoding.IDENTITY_8BIT:
                    stream.write(encode_identity_raw(text))
                    return True
                text = bytes_to_text(text)
            if self._encoding is Encoding.SYSTEM_TEXT:
                stream.write_text(text)
            else:
                stream.write(encode_line(self._encoding, text))
        except (OSError, UnicodeError) as exc:
            logger.warning("Write to %s failed: %s", self._path, exc)
            return False
        return True

    def write_line(self, text: str | bytes) -> bool:
        """Write ``text`` followed by a line break."""
        if isinstance(text, bytes):
            return self.write(text + b"\n")
        return self.write(text + "\n")

    # -- protocol support --

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        text, ok = self.read_line()
        if not ok:
            raise StopIteration
        return text

    def __enter__(self) -> TextFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
