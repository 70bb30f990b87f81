"""Decoded record variants.

A decoded stream is a list of records.  The variant set is closed:
every record is exactly one of the classes in ``Record``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Union

import numpy as np

from .schema import ElementType, KLVHeader, TYPE_FMT

_NUMPY_DTYPE = {
    ElementType.INT8: np.int8,
    ElementType.UINT8: np.uint8,
    ElementType.INT16: np.int16,
    ElementType.UINT16: np.uint16,
    ElementType.INT32: np.int32,
    ElementType.UINT32: np.uint32,
    ElementType.INT64: np.int64,
    ElementType.UINT64: np.uint64,
    ElementType.FLOAT: np.float32,
    ElementType.DOUBLE: np.float64,
}


@dataclass(frozen=True)
class ScalarRecord:
    key: str
    value: int | float
    header: KLVHeader | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TextRecord:
    key: str
    value: str | list[str]
    header: KLVHeader | None = field(default=None, compare=False, repr=False)

    __hash__ = None  # value may be a list


@dataclass(frozen=True)
class SampleRecord:
    """Fixed-width sample tuples, raw and unscaled.

    Multi-component elements are lists, e.g. ``[[x, y, z], ...]``;
    single-component elements are plain numbers.
    """

    key: str
    samples: list
    header: KLVHeader | None = field(default=None, compare=False, repr=False)

    __hash__ = None

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def components(self) -> int:
        if self.header is None:
            first = self.samples[0] if self.samples else None
            return len(first) if isinstance(first, list) else 1
        width = struct.calcsize(TYPE_FMT[ElementType(self.header.type)])
        return self.header.size // width

    def to_numpy(self) -> np.ndarray:
        """Samples as an array of shape (count,) or (count, components)."""
        dtype = None
        if self.header is not None:
            dtype = _NUMPY_DTYPE[ElementType(self.header.type)]
        arr = np.asarray(self.samples, dtype=dtype)
        if self.components > 1:
            arr = arr.reshape(-1, self.components)
        return arr


@dataclass(frozen=True)
class ContainerRecord:
    key: str
    children: list[Record]
    header: KLVHeader | None = field(default=None, compare=False, repr=False)

    __hash__ = None

    def __iter__(self):
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def get(self, key: str) -> Record | None:
        """First direct child with the given key, or None."""
        for child in self.children:
            if child.key == key:
                return child
        return None


@dataclass(frozen=True)
class CustomRecord:
    """Payload of a key with no dedicated decoder, kept as raw bytes."""

    key: str
    data: bytes
    header: KLVHeader | None = field(default=None, compare=False, repr=False)


Record = Union[ScalarRecord, TextRecord, SampleRecord, ContainerRecord,
               CustomRecord]
