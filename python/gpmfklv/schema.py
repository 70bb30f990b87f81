"""Record header layout and element types."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from .cursor import ByteCursor


class ElementType(IntEnum):
    """Element type tag byte.  Values are the ASCII type characters."""

    NESTED = 0
    INT8 = ord("b")
    UINT8 = ord("B")
    CHAR = ord("c")
    DOUBLE = ord("d")
    FLOAT = ord("f")
    FOURCC = ord("F")
    GUID = ord("G")
    INT64 = ord("j")
    UINT64 = ord("J")
    INT32 = ord("l")
    UINT32 = ord("L")
    Q15_16 = ord("q")
    Q31_32 = ord("Q")
    INT16 = ord("s")
    UINT16 = ord("S")
    UTC_DATE = ord("U")
    COMPLEX = ord("?")


# struct format chars for the numeric element types (big-endian base)
TYPE_FMT = {
    ElementType.INT8: "b",
    ElementType.UINT8: "B",
    ElementType.INT16: "h",
    ElementType.UINT16: "H",
    ElementType.INT32: "i",
    ElementType.UINT32: "I",
    ElementType.INT64: "q",
    ElementType.UINT64: "Q",
    ElementType.FLOAT: "f",
    ElementType.DOUBLE: "d",
}

# Wire format: [key 4][type 1][size 1][count 2], big-endian
HEADER_FMT = ">4sBBH"
HEADER_SIZE = struct.calcsize(HEADER_FMT)  # 8

ALIGNMENT = 4


def key_label(key: bytes) -> str:
    """Printable form of a 4-byte key.  Never fails."""
    return key.decode("latin-1")


def type_label(type_tag: int) -> str:
    if type_tag == 0:
        return "\\0"
    if 0x20 < type_tag < 0x7F:
        return chr(type_tag)
    return f"0x{type_tag:02x}"


def padding(length: int) -> int:
    """Bytes needed after a payload of the given length to reach alignment."""
    return (length + ALIGNMENT - 1) // ALIGNMENT * ALIGNMENT - length


@dataclass(frozen=True)
class KLVHeader:
    key: bytes
    type: int
    size: int
    count: int
    offset: int = 0

    @property
    def label(self) -> str:
        return key_label(self.key)

    @property
    def payload_size(self) -> int:
        return self.size * self.count

    def __str__(self) -> str:
        return (f"{self.label} type={type_label(self.type)} "
                f"size={self.size} count={self.count}")


def decode_header(cursor: ByteCursor) -> tuple[KLVHeader, ByteCursor]:
    """Read one record header.  Returns the header and the cursor at its payload."""
    offset = cursor.offset
    key, cursor = cursor.read_bytes(4)
    type_tag, cursor = cursor.read_u8()
    size, cursor = cursor.read_u8()
    count, cursor = cursor.read_u16()
    return KLVHeader(key, type_tag, size, count, offset), cursor
