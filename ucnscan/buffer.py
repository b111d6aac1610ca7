"""Growable byte buffer used to hold data read from a serial port."""

from __future__ import annotations

DEFAULT_GROWTH = 4096


class ReadBuffer:
    """FIFO byte buffer whose capacity grows in doubling blocks.

    Capacity starts at zero, is raised to at least ``growth`` on the first
    write, and doubles until the pending data fits. ``squeeze`` shrinks it
    back to the smallest such block that still holds the pending data.
    """

    def __init__(self, growth: int = DEFAULT_GROWTH) -> None:
        if growth <= 0:
            raise ValueError("growth must be positive")
        self._growth = growth
        self._data = bytearray()
        self._capacity = 0

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    @property
    def capacity(self) -> int:
        """Number of bytes the buffer can hold before it has to grow."""
        return self._capacity

    @property
    def growth(self) -> int:
        """Basic block size used when growing or squeezing."""
        return self._growth

    def is_empty(self) -> bool:
        return not self._data

    def clear(self) -> None:
        """Drop all pending data; capacity is kept."""
        self._data.clear()

    def _reserve(self, size: int) -> None:
        needed = len(self._data) + size
        if needed > self._capacity:
            new_capacity = max(self._capacity, self._growth)
            while new_capacity < needed:
                new_capacity *= 2
            self._capacity = new_capacity

    def append(self, data: bytes) -> None:
        """Add bytes to the end of the buffer."""
        chunk = bytes(data)
        self._reserve(len(chunk))
        self._data += chunk

    def read(self, size: int) -> bytes:
        """Remove and return up to ``size`` bytes from the front."""
        if size < 0:
            raise ValueError("size must not be negative")
        count = min(size, len(self._data))
        out = bytes(self._data[:count])
        del self._data[:count]
        return out

    def read_line(self, size: int) -> bytes:
        """Remove and return bytes up to and including the first newline.

        At most ``size`` bytes are examined; if no newline is found among
        them, that many bytes (or all pending bytes) are returned.
        """
        if size < 0:
            raise ValueError("size must not be negative")
        count = min(size, len(self._data))
        eol = self._data.find(b"\n", 0, count)
        if eol != -1:
            count = eol + 1
        out = bytes(self._data[:count])
        del self._data[:count]
        return out

    def read_all(self) -> bytes:
        """Remove and return everything pending."""
        out = bytes(self._data)
        self._data.clear()
        return out

    def can_read_line(self) -> bool:
        return b"\n" in self._data

    def chop(self, size: int) -> None:
        """Discard ``size`` bytes from the end of the buffer."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size >= len(self._data):
            self.clear()
        else:
            del self._data[len(self._data) - size:]

    def squeeze(self) -> None:
        """Shrink capacity to the smallest block that holds the pending data."""
        new_capacity = self._growth
        while new_capacity < len(self._data):
            new_capacity *= 2
        if new_capacity < self._capacity:
            self._capacity = new_capacity