"""Recursive KLV stream decoder."""

from __future__ import annotations

import logging
from typing import Protocol

from .cursor import ByteCursor
from .errors import (
    FormatMismatch, InsufficientData, NestingTooDeep, TrailingData,
    UnknownBlockType,
)
from .payload import CONTAINER_KEYS, decode_payload, is_known
from .records import ContainerRecord, CustomRecord, Record
from .schema import (
    ElementType, HEADER_SIZE, KLVHeader, decode_header, padding, type_label,
)
from .tree import describe

logger = logging.getLogger(__name__)

# GPMF streams nest two levels (DEVC > STRM); anything far deeper is hostile
DEFAULT_MAX_DEPTH = 16


class DecodeObserver(Protocol):
    """Receives each record as it is decoded.

    Children are reported before the container that holds them.
    """

    def record_decoded(self, record: Record, depth: int) -> None: ...


class LoggingObserver:
    """Writes one log line per decoded record."""

    def __init__(self, log: logging.Logger | None = None,
                 level: int = logging.DEBUG):
        self._log = log or logger
        self._level = level

    def record_decoded(self, record: Record, depth: int) -> None:
        self._log.log(self._level, "%s%s", "  " * depth, describe(record))


class KLVDecoder:
    """Decodes a complete metadata buffer into a list of records.

    The decoder holds configuration only, so one instance can decode any
    number of buffers, from any thread.  The first malformed record aborts
    the decode with a ``KLVError``; nothing partial is returned.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH,
                 observer: DecodeObserver | None = None):
        self.max_depth = max_depth
        self.observer = observer

    def decode(self, data: bytes | bytearray | memoryview) -> list[Record]:
        records, cursor = self.decode_sequence(ByteCursor(data))
        if not cursor.at_end():
            raise InsufficientData(cursor.offset, HEADER_SIZE,
                                   cursor.remaining)
        return records

    def decode_sequence(self, cursor: ByteCursor,
                        depth: int = 0) -> tuple[list[Record], ByteCursor]:
        """Decode records until fewer bytes than a header remain."""
        records: list[Record] = []
        while cursor.remaining >= HEADER_SIZE:
            record, cursor = self.decode_record(cursor, depth)
            records.append(record)
        return records, cursor

    def decode_record(self, cursor: ByteCursor,
                      depth: int = 0) -> tuple[Record, ByteCursor]:
        """Decode one record.  Returns it and the cursor past its padding."""
        header, cursor = decode_header(cursor)
        if header.key in CONTAINER_KEYS:
            record, cursor = self._decode_container(header, cursor, depth)
        elif is_known(header.key):
            record, cursor = decode_payload(header, cursor)
        else:
            record, cursor = _decode_custom(header, cursor)

        if self.observer is not None:
            self.observer.record_decoded(record, depth)
        return record, cursor

    def _decode_container(self, header: KLVHeader, cursor: ByteCursor,
                          depth: int) -> tuple[ContainerRecord, ByteCursor]:
        if header.type != ElementType.NESTED:
            raise FormatMismatch(
                f"container with type {type_label(header.type)}",
                header.offset, header.label)
        if depth >= self.max_depth:
            raise NestingTooDeep(
                f"nesting exceeds {self.max_depth} levels",
                header.offset, header.label)

        # Container length is exact; children pad themselves
        body, cursor = cursor.split(header.payload_size)
        children, rest = self.decode_sequence(body, depth + 1)
        if not rest.at_end():
            raise TrailingData(rest.offset, rest.remaining, header.label)
        return ContainerRecord(header.label, children, header), cursor


def _decode_custom(header: KLVHeader,
                   cursor: ByteCursor) -> tuple[CustomRecord, ByteCursor]:
    if header.type != ElementType.COMPLEX:
        raise UnknownBlockType(
            f"unknown key with type {type_label(header.type)}",
            header.offset, header.label)
    length = header.payload_size
    data, cursor = cursor.read_bytes(length)
    return CustomRecord(header.label, data, header), cursor.skip(padding(length))


def decode_record(cursor: ByteCursor) -> tuple[Record, ByteCursor]:
    """Decode a single record at the cursor with default settings."""
    return KLVDecoder().decode_record(cursor)


def decode_stream(data: bytes | bytearray | memoryview, *,
                  max_depth: int = DEFAULT_MAX_DEPTH,
                  observer: DecodeObserver | None = None) -> list[Record]:
    """Decode a complete metadata buffer into its record tree."""
    return KLVDecoder(max_depth, observer).decode(data)
