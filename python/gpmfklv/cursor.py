"""Immutable big-endian reader over a byte buffer."""

from __future__ import annotations

import struct
from typing import Any

from .errors import InsufficientData

_STRUCTS = {c: struct.Struct(">" + c) for c in "bBhHiIqQfd"}


class ByteCursor:
    """A read position over a bounded slice of a buffer.

    Reads never mutate the cursor; each returns the value together with a
    new cursor advanced past it.  The underlying buffer is shared, not
    copied, so splitting off a sub-cursor is cheap.
    """

    __slots__ = ("_buf", "_pos", "_end")

    def __init__(self, data: bytes | bytearray | memoryview,
                 pos: int = 0, end: int | None = None):
        self._buf = data if isinstance(data, memoryview) else memoryview(data)
        self._pos = pos
        self._end = len(self._buf) if end is None else end

    def __repr__(self) -> str:
        return f"ByteCursor(pos={self._pos}, end={self._end})"

    @property
    def offset(self) -> int:
        """Absolute position within the underlying buffer."""
        return self._pos

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def at_end(self) -> bool:
        return self._pos >= self._end

    def _require(self, n: int) -> None:
        if n > self.remaining:
            raise InsufficientData(self._pos, n, self.remaining)

    def _advance(self, n: int) -> ByteCursor:
        return ByteCursor(self._buf, self._pos + n, self._end)

    def _unpack(self, fmt: str) -> tuple[Any, ByteCursor]:
        s = _STRUCTS[fmt]
        self._require(s.size)
        value = s.unpack_from(self._buf, self._pos)[0]
        return value, self._advance(s.size)

    # ------------------------------------------------------------------
    # Raw bytes
    # ------------------------------------------------------------------

    def read_bytes(self, n: int) -> tuple[bytes, ByteCursor]:
        self._require(n)
        return bytes(self._buf[self._pos:self._pos + n]), self._advance(n)

    def skip(self, n: int) -> ByteCursor:
        self._require(n)
        return self._advance(n)

    def split(self, n: int) -> tuple[ByteCursor, ByteCursor]:
        """Return a cursor bounded to the next n bytes, and the cursor after them."""
        self._require(n)
        sub = ByteCursor(self._buf, self._pos, self._pos + n)
        return sub, self._advance(n)

    def tobytes(self) -> bytes:
        """Copy of the unread bytes."""
        return bytes(self._buf[self._pos:self._end])

    # ------------------------------------------------------------------
    # Integers and floats
    # ------------------------------------------------------------------

    def read_u8(self) -> tuple[int, ByteCursor]:
        return self._unpack("B")

    def read_i8(self) -> tuple[int, ByteCursor]:
        return self._unpack("b")

    def read_u16(self) -> tuple[int, ByteCursor]:
        return self._unpack("H")

    def read_i16(self) -> tuple[int, ByteCursor]:
        return self._unpack("h")

    def read_u32(self) -> tuple[int, ByteCursor]:
        return self._unpack("I")

    def read_i32(self) -> tuple[int, ByteCursor]:
        return self._unpack("i")

    def read_u64(self) -> tuple[int, ByteCursor]:
        return self._unpack("Q")

    def read_i64(self) -> tuple[int, ByteCursor]:
        return self._unpack("q")

    def read_f32(self) -> tuple[float, ByteCursor]:
        return self._unpack("f")

    def read_f64(self) -> tuple[float, ByteCursor]:
        return self._unpack("d")

    def read_array(self, fmt_char: str, n: int) -> tuple[tuple, ByteCursor]:
        """Read n consecutive values of one struct format character."""
        fmt = f">{n}{fmt_char}"
        size = struct.calcsize(fmt)
        self._require(size)
        values = struct.unpack_from(fmt, self._buf, self._pos)
        return values, self._advance(size)
