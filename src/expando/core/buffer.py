from __future__ import annotations

"""
buffer – Growable byte store used to build command lines and scratch strings.

A Buffer owns a ``bytearray`` that grows on demand and keeps an independent
read/write cursor. Content is NUL-terminated inside the owned array and the
cursor sits on the terminator after every append, so repeated appends never
re-scan for the current length.

Growth is in steps of at least 128 bytes (``len + 1`` for larger appends),
which keeps the number of reallocations low for long runs of small appends;
``grow_count`` reports it.
"""

import logging
from typing import Optional, Union

from expando.constants import BUFFER_GROWTH
from expando.logging.helpers import get_logger

BytesLike = Union[bytes, bytearray, memoryview, str]


class ResourceExhausted(MemoryError):
    """Raised when a Buffer cannot grow to the requested size."""


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8", "surrogateescape")
    return bytes(data)


class Buffer:
    """Auto-expanding, NUL-terminated byte store with a r/w cursor."""

    def __init__(self, seed: Optional[BytesLike] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger("buffer")
        self._data: Optional[bytearray] = None
        self._cursor = 0
        self._end = 0
        self._grows = 0
        if seed is not None:
            self.from_string(seed)

    # ------------------------------------------------------------------ #
    # lifecycle
    # ------------------------------------------------------------------ #
    def init(self) -> None:
        """Zero the descriptor.

        Live content is dropped without being cleared; see :meth:`reinit`.
        """
        self._data = None
        self._cursor = 0
        self._end = 0
        self._grows = 0

    def reinit(self) -> None:
        """Release all memory and reinitialize."""
        if self._data is not None:
            del self._data[:]
        self.init()

    def reset(self) -> None:
        """Zero every byte up to the capacity and rewind the cursor."""
        if self._data is not None:
            self._data[:] = bytes(len(self._data))
        self._end = 0
        self.rewind()

    def from_string(self, seed: Optional[BytesLike]) -> None:
        """Initialize the Buffer with a copy of *seed*, cursor at the end."""
        if seed is None:
            return
        raw = _as_bytes(seed)
        self.init()
        self._data = bytearray(raw)
        self._data.append(0)
        self._end = len(raw)
        self.seek(len(raw))

    # ------------------------------------------------------------------ #
    # cursor
    # ------------------------------------------------------------------ #
    def seek(self, offset: int) -> None:
        """Set the read/write position to *offset*."""
        if offset < 0 or offset > self.capacity:
            raise ValueError(f"seek offset {offset} outside buffer capacity {self.capacity}")
        self._cursor = offset

    def rewind(self) -> None:
        """Rewind the read/write position to the start."""
        self.seek(0)

    # ------------------------------------------------------------------ #
    # growth
    # ------------------------------------------------------------------ #
    def _grow(self, extra: int) -> None:
        offset = self._cursor
        try:
            if self._data is None:
                self._data = bytearray(extra)
            else:
                self._data.extend(bytes(extra))
        except MemoryError as exc:
            raise ResourceExhausted(f"cannot grow buffer by {extra} bytes") from exc
        self._grows += 1
        self.seek(offset)

    # ------------------------------------------------------------------ #
    # writers
    # ------------------------------------------------------------------ #
    def add(self, data: Optional[BytesLike], length: Optional[int] = None) -> None:
        """Add *data* at the cursor, expanding the Buffer if necessary.

        Growth happens in increments of at least 128 bytes and always leaves
        room for the NUL terminator.
        """
        if data is None:
            return
        raw = _as_bytes(data)
        if length is not None:
            raw = raw[:max(0, length)]
        size = len(raw)

        if self._cursor + size + 1 > self.capacity:
            self._grow(BUFFER_GROWTH if size < BUFFER_GROWTH else size + 1)

        assert self._data is not None
        end = self._cursor + size
        self._data[self._cursor:end] = raw
        self._data[end] = 0
        self._cursor = end
        self._end = end

    def addstr(self, s: Optional[BytesLike]) -> None:
        """Add a string to the Buffer."""
        self.add(s)

    def addch(self, c: Union[str, int]) -> None:
        """Add a single character (or byte value) to the Buffer."""
        if isinstance(c, int):
            self.add(bytes((c,)))
        else:
            self.add(c[:1])

    def printf(self, fmt: str, *args) -> int:
        """Format *args* into the Buffer at the cursor.

        The first attempt is probed against the room left in the Buffer; when
        it would truncate the Buffer grows once and the text is written.

        Returns:
            Number of bytes written, or -1 when formatting fails.
        """
        try:
            rendered = fmt % args
        except (TypeError, ValueError, KeyError) as exc:
            self._log.warning("⚠  buffer printf failed for %r: %s", fmt, exc)
            return -1

        raw = _as_bytes(rendered)
        offset = self._cursor
        available = self.capacity - offset
        if available == 0:
            self._grow(BUFFER_GROWTH)
            available = self.capacity - offset

        needed = len(raw) + 1
        if needed > available:
            self._grow(max(BUFFER_GROWTH, needed - available))

        assert self._data is not None
        end = offset + len(raw)
        self._data[offset:end] = raw
        self._data[end] = 0
        self._cursor = end
        self._end = end
        return len(raw)

    # ------------------------------------------------------------------ #
    # accessors
    # ------------------------------------------------------------------ #
    @property
    def capacity(self) -> int:
        return 0 if self._data is None else len(self._data)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def grow_count(self) -> int:
        """Number of reallocations since the last init."""
        return self._grows

    @property
    def data(self) -> bytes:
        """Content bytes, excluding the NUL terminator."""
        if self._data is None:
            return b""
        return bytes(self._data[:self._end])

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", "surrogateescape")

    @property
    def raw(self) -> bytes:
        """The whole owned array, terminator and spare capacity included."""
        return b"" if self._data is None else bytes(self._data)

    def remaining(self) -> bytes:
        """Content between the cursor and the end of the content."""
        if self._data is None or self._cursor >= self._end:
            return b""
        return bytes(self._data[self._cursor:self._end])

    def __len__(self) -> int:
        return self._end

    def __bool__(self) -> bool:
        return self._end > 0

    def __repr__(self) -> str:
        return f"Buffer(data={self.data!r}, cursor={self._cursor}, capacity={self.capacity})"
