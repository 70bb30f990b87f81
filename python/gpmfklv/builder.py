"""Build KLV wire bytes.  Used to produce fixtures and synthetic streams."""

from __future__ import annotations

import struct

from .schema import HEADER_FMT, ElementType, padding


def _key_bytes(key: str | bytes) -> bytes:
    raw = key.encode("latin-1") if isinstance(key, str) else key
    if len(raw) != 4:
        raise ValueError(f"key must be 4 bytes: {key!r}")
    return raw


def build_record(key: str | bytes, element_type: int, size: int, count: int,
                 payload: bytes, pad: bytes = b"\x00") -> bytes:
    """Encode one record with its alignment padding."""
    if len(payload) != size * count:
        raise ValueError(
            f"payload is {len(payload)} bytes, header says {size}x{count}")
    header = struct.pack(HEADER_FMT, _key_bytes(key), element_type, size, count)
    return header + payload + pad * padding(len(payload))


def build_container(key: str | bytes, children: list[bytes]) -> bytes:
    """Encode a nested record around already-encoded children."""
    body = b"".join(children)
    n = len(body)
    if n <= 0xFFFF:
        size, count = 1, n
    elif n % 4 == 0 and n // 4 <= 0xFFFF:
        size, count = 4, n // 4
    else:
        raise ValueError(f"container body of {n} bytes cannot be encoded")
    return build_record(key, ElementType.NESTED, size, count, body)
