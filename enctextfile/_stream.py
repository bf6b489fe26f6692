from __future__ import annotations

import io
import os
import warnings
from typing import IO

from ._exceptions import TextFileOpenError

BINARY_MODES = ("rb", "wb")
TEXT_MODES = ("rt", "wt")


class FileStream:
    """Byte/text stream primitive used underneath ``TextFile``.

    Binary modes (``rb``, ``wb``) move raw bytes.  Text modes (``rt``,
    ``wt``) go through Python's text layer with universal newlines, which is
    the platform decode path the reader falls back to.
    """

    def __init__(self, file: IO, path: str, mode: str) -> None:
        self._file = file
        self._path = path
        self._mode = mode
        self._is_closed: bool = False

    @classmethod
    def open(
        cls,
        path: str,
        mode: str = "rb",
        encoding: str | None = None,
        errors: str = "replace",
    ) -> FileStream:
        if mode in BINARY_MODES:
            try:
                file = open(path, mode)
            except OSError as exc:
                raise TextFileOpenError(path, exc.strerror or str(exc)) from exc
        elif mode in TEXT_MODES:
            try:
                file = open(path, mode, encoding=encoding, errors=errors, newline=None)
            except OSError as exc:
                raise TextFileOpenError(path, exc.strerror or str(exc)) from exc
        else:
            raise ValueError(
                f"Invalid mode '{mode}'. Supported modes: {BINARY_MODES + TEXT_MODES}"
            )
        return cls(file, path, mode)

    @property
    def path(self) -> str:
        return self._path

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def is_text(self) -> bool:
        return self._mode in TEXT_MODES

    @property
    def closed(self) -> bool:
        return self._is_closed

    def _assert_readable(self) -> None:
        if self._mode in ("wb", "wt"):
            raise io.UnsupportedOperation(f"not readable in mode '{self._mode}'")

    def _assert_writable(self) -> None:
        if self._mode in ("rb", "rt"):
            raise io.UnsupportedOperation(f"not writable in mode '{self._mode}'")

    def _assert_binary(self) -> None:
        if self.is_text:
            raise io.UnsupportedOperation(f"byte I/O not available in mode '{self._mode}'")

    def _assert_text(self) -> None:
        if not self.is_text:
            raise io.UnsupportedOperation(f"text I/O not available in mode '{self._mode}'")

    def _assert_open(self) -> None:
        if self._is_closed:
            raise ValueError("I/O operation on closed file.")

    def read(self, size: int = -1) -> bytes:
        self._assert_open()
        self._assert_readable()
        self._assert_binary()
        return self._file.read(size)

    def read_text_line(self) -> str:
        """Read one line through the text layer, terminator included."""
        self._assert_open()
        self._assert_readable()
        self._assert_text()
        return self._file.readline()

    def write(self, data: bytes) -> int:
        self._assert_open()
        self._assert_writable()
        self._assert_binary()
        return self._file.write(data)

    def write_text(self, text: str) -> int:
        self._assert_open()
        self._assert_writable()
        self._assert_text()
        return self._file.write(text)

    def seek(self, offset: int, whence: int = 0) -> int:
        """Move to ``offset``.

        Text streams only accept absolute positions; callers convert
        relative targets first.
        """
        self._assert_open()
        if whence not in (0, 1, 2):
            raise ValueError(f"Invalid whence value: {whence}. Must be 0, 1, or 2.")
        if self.is_text and whence != 0:
            raise io.UnsupportedOperation("text streams only support absolute seeks")
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        self._assert_open()
        return self._file.tell()

    def length(self) -> int:
        self._assert_open()
        if self._mode in ("wb", "wt"):
            self.flush()
        return os.fstat(self._file.fileno()).st_size

    def flush(self) -> None:
        self._assert_open()
        self._file.flush()

    def close(self) -> None:
        if self._is_closed:
            return
        self._is_closed = True
        self._file.close()

    def __enter__(self) -> FileStream:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_is_closed", True):
            warnings.warn(
                f"FileStream for '{self._path}' was not closed properly. "
                "Close the owning TextFile or use it as a context manager.",
                ResourceWarning,
                stacklevel=1,
            )
            try:
                self.close()
            except OSError:
                pass
