from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY: int = 64 * 1024
MIN_CAPACITY: int = 4


class ByteWindow:
    """Fixed-capacity sliding window over a byte stream.

    ``data[0:valid_length]`` holds the bytes read so far and ``cursor``
    marks the next byte the decoder has not consumed.  Consumed bytes stay
    in place, so a backward seek can land on them again, until ``fill``
    compacts the window.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < MIN_CAPACITY:
            raise ValueError(
                f"Window capacity must be at least {MIN_CAPACITY} bytes, got {capacity}."
            )
        self._capacity: int = capacity
        self._data: bytearray = bytearray(capacity)
        self._valid: int = 0
        self._cursor: int = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def data(self) -> bytearray:
        return self._data

    @property
    def valid_length(self) -> int:
        return self._valid

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def unread(self) -> int:
        return self._valid - self._cursor

    @property
    def is_full(self) -> bool:
        return self._valid == self._capacity

    def advance(self, count: int) -> None:
        new_cursor = self._cursor + count
        if count < 0 or new_cursor > self._valid:
            raise ValueError(
                f"Cannot advance cursor by {count}: {self.unread} unread bytes in window."
            )
        self._cursor = new_cursor

    def move(self, delta: int) -> bool:
        """Shift the cursor by ``delta`` if the result stays inside the window.

        Returns ``False`` and leaves the window untouched when the target is
        outside ``[0, valid_length)``.
        """
        target = self._cursor + delta
        if target < 0 or target >= self._valid:
            return False
        self._cursor = target
        return True

    def reset(self) -> None:
        self._valid = 0
        self._cursor = 0

    def fill(self, read: Callable[[int], bytes]) -> bool:
        """Compact unread bytes to the front and top the window up.

        Parameters
        ----------
        read:
            Called once with the number of free bytes; returns at most that
            many bytes.

        Returns
        -------
        bool
            ``True`` when ``read`` produced no bytes (end of stream).
        """
        remaining = self._valid - self._cursor
        if remaining > 0:
            self._data[0:remaining] = self._data[self._cursor:self._valid]
        self._valid = remaining
        self._cursor = 0
        chunk = read(self._capacity - self._valid)
        n = len(chunk)
        if n > self._capacity - self._valid:
            raise ValueError(f"read returned {n} bytes, more than the {self._capacity - self._valid} requested")
        if n:
            self._data[self._valid:self._valid + n] = chunk
            self._valid += n
        logger.debug("Window filled: kept %d, read %d, capacity %d", remaining, n, self._capacity)
        return n == 0
