"""Decode failures.

Every error is fatal to the decode that raised it: the caller gets one
exception and no partial tree.
"""

from __future__ import annotations


class KLVError(ValueError):
    """Base class for all KLV decode failures."""

    def __init__(self, message: str, offset: int, key: str | None = None):
        self.offset = offset
        self.key = key
        where = f"offset {offset}"
        if key is not None:
            where = f"{key} at {where}"
        super().__init__(f"{message} ({where})")


class InsufficientData(KLVError):
    """Buffer ran out before a read completed."""

    def __init__(self, offset: int, needed: int, available: int,
                 key: str | None = None):
        self.needed = needed
        self.available = available
        super().__init__(
            f"need {needed} bytes, {available} available", offset, key)


class FormatMismatch(KLVError):
    """Element type tag, size or count does not fit the record key."""


class InvalidText(KLVError):
    """Text payload is not valid UTF-8."""


class TrailingData(KLVError):
    """Container payload was not fully consumed by its children."""

    def __init__(self, offset: int, leftover: int, key: str | None = None):
        self.leftover = leftover
        super().__init__(f"{leftover} unconsumed bytes in container",
                         offset, key)


class UnknownBlockType(KLVError):
    """Key has no decoder and its tag is not the custom marker."""


class NestingTooDeep(KLVError):
    """Containers nested deeper than the decoder allows."""
