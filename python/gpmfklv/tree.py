"""Helpers for navigating a decoded record tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .records import (
    ContainerRecord, CustomRecord, Record, SampleRecord, ScalarRecord,
    TextRecord,
)

_PREVIEW = 3


def describe(record: Record) -> str:
    """One-line human-readable summary of a record."""
    if isinstance(record, ContainerRecord):
        return f"{record.key} ({len(record.children)} records)"
    if isinstance(record, ScalarRecord):
        return f"{record.key}: {record.value}"
    if isinstance(record, TextRecord):
        return f"{record.key}: {record.value!r}"
    if isinstance(record, SampleRecord):
        preview = ", ".join(str(s) for s in record.samples[:_PREVIEW])
        more = ", ..." if len(record.samples) > _PREVIEW else ""
        return f"{record.key}: {len(record.samples)} samples [{preview}{more}]"
    if isinstance(record, CustomRecord):
        return f"{record.key}: {len(record.data)} bytes {record.data[:8].hex()}"
    raise TypeError(f"not a record: {record!r}")


def walk(records: list[Record],
         path: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Record]]:
    """Yield (path, record) depth-first, containers before their children.

    ``path`` holds the keys of the enclosing containers.
    """
    for record in records:
        yield path, record
        if isinstance(record, ContainerRecord):
            yield from walk(record.children, path + (record.key,))


def find_all(records: list[Record], key: str) -> list[Record]:
    return [r for _, r in walk(records) if r.key == key]


@dataclass
class StreamInfo:
    """Summary of one STRM container.  Values are raw; no scaling applied."""

    device_name: str | None
    device_id: int | None
    name: str | None
    sample_key: str | None
    sample_count: int
    units: str | list[str] | None = None
    scale: int | list[int] | None = None


def _value(container: ContainerRecord, key: str):
    child = container.get(key)
    if isinstance(child, (ScalarRecord, TextRecord)):
        return child.value
    if isinstance(child, SampleRecord):
        return child.samples
    return None


def _stream_info(stream: ContainerRecord,
                 device: ContainerRecord | None) -> StreamInfo:
    samples = next((c for c in stream.children
                    if isinstance(c, SampleRecord) and c.key != "SCAL"), None)
    units = _value(stream, "SIUN")
    if units is None:
        units = _value(stream, "UNIT")
    return StreamInfo(
        device_name=_value(device, "DVNM") if device is not None else None,
        device_id=_value(device, "DVID") if device is not None else None,
        name=_value(stream, "STNM"),
        sample_key=samples.key if samples is not None else None,
        sample_count=len(samples) if samples is not None else 0,
        units=units,
        scale=_value(stream, "SCAL"),
    )


def streams(records: list[Record]) -> list[StreamInfo]:
    """Summarise every stream in the tree, in arrival order."""
    result: list[StreamInfo] = []
    for record in records:
        if not isinstance(record, ContainerRecord):
            continue
        if record.key == "STRM":
            result.append(_stream_info(record, None))
        elif record.key == "DEVC":
            for child in record.children:
                if isinstance(child, ContainerRecord) and child.key == "STRM":
                    result.append(_stream_info(child, record))
    return result
