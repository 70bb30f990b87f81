"""Per-key payload decoders.

Each known key maps to one or more ``PayloadSpec`` entries describing the
element type and size it must carry and how its payload is shaped.  A key
with several specs (``SCAL``) is resolved by the header's type tag.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum

from .cursor import ByteCursor
from .errors import FormatMismatch, InvalidText
from .records import Record, SampleRecord, ScalarRecord, TextRecord
from .schema import (
    ElementType, KLVHeader, TYPE_FMT, padding, type_label,
)

# Trailing byte of unit strings meaning "squared" (Latin-1 superscript two)
UNITS_SQUARED_BYTE = 0xB2

CONTAINER_KEYS = frozenset({b"DEVC", b"STRM"})


class PayloadKind(Enum):
    SCALAR = "scalar"
    TEXT = "text"
    UNITS = "units"
    SAMPLES = "samples"


@dataclass(frozen=True)
class PayloadSpec:
    key: bytes
    kind: PayloadKind
    type: ElementType
    size: int | None  # None: any element size
    description: str


_S = PayloadKind.SCALAR
_T = PayloadKind.TEXT
_U = PayloadKind.UNITS
_N = PayloadKind.SAMPLES
_E = ElementType

_SPECS = [
    PayloadSpec(b"DVID", _S, _E.UINT32, 4, "device id"),
    PayloadSpec(b"TSMP", _S, _E.UINT32, 4, "total sample count"),
    PayloadSpec(b"STMP", _S, _E.UINT64, 8, "stream start timestamp (us)"),
    PayloadSpec(b"TMPC", _S, _E.FLOAT, 4, "sensor temperature (C)"),
    PayloadSpec(b"GPSF", _S, _E.UINT32, 4, "GPS fix (0, 2D or 3D)"),
    PayloadSpec(b"GPSP", _S, _E.UINT16, 2, "GPS precision (DOP x 100)"),
    PayloadSpec(b"SCAL", _S, _E.INT16, 2, "scaling factor"),
    PayloadSpec(b"SCAL", _N, _E.INT32, 4, "scaling factor vector"),
    PayloadSpec(b"DVNM", _T, _E.CHAR, None, "device name"),
    PayloadSpec(b"STNM", _T, _E.CHAR, None, "stream name"),
    PayloadSpec(b"ORIN", _T, _E.CHAR, None, "input orientation"),
    PayloadSpec(b"TYPE", _T, _E.CHAR, None, "type label"),
    PayloadSpec(b"UNIT", _T, _E.CHAR, None, "display units"),
    PayloadSpec(b"GPSU", _T, _E.UTC_DATE, 16, "GPS UTC timestamp"),
    PayloadSpec(b"SIUN", _U, _E.CHAR, None, "SI units"),
    PayloadSpec(b"ACCL", _N, _E.INT16, 6, "accelerometer (z, x, y)"),
    PayloadSpec(b"GYRO", _N, _E.INT16, 6, "gyroscope (z, x, y)"),
    PayloadSpec(b"GRAV", _N, _E.INT16, 6, "gravity vector"),
    PayloadSpec(b"CORI", _N, _E.INT16, 8, "camera orientation (w, x, y, z)"),
    PayloadSpec(b"IORI", _N, _E.INT16, 8, "image orientation (w, x, y, z)"),
    PayloadSpec(b"GPS5", _N, _E.INT32, 20, "GPS lat, lon, alt, 2D, 3D speed"),
    PayloadSpec(b"SHUT", _N, _E.FLOAT, 4, "shutter speed (s)"),
    PayloadSpec(b"WRGB", _N, _E.FLOAT, 12, "white balance RGB gains"),
    PayloadSpec(b"UNIF", _N, _E.FLOAT, 4, "image uniformity"),
    PayloadSpec(b"WBAL", _N, _E.UINT16, 2, "white balance (K)"),
    PayloadSpec(b"ISOE", _N, _E.UINT16, 2, "sensor ISO"),
    PayloadSpec(b"WNDM", _N, _E.UINT8, 2, "wind processing"),
    PayloadSpec(b"MWET", _N, _E.UINT8, 3, "microphone wet"),
    PayloadSpec(b"AALP", _N, _E.INT8, 2, "audio level (rms, peak dBFS)"),
    PayloadSpec(b"MSKP", _N, _E.INT16, 2, "main video frame skip"),
    PayloadSpec(b"LSKP", _N, _E.INT16, 2, "low-res video frame skip"),
]

PAYLOAD_TABLE: dict[bytes, tuple[PayloadSpec, ...]] = {}
for _spec in _SPECS:
    PAYLOAD_TABLE[_spec.key] = PAYLOAD_TABLE.get(_spec.key, ()) + (_spec,)
del _spec


def is_known(key: bytes) -> bool:
    return key in PAYLOAD_TABLE


def select_spec(header: KLVHeader) -> PayloadSpec:
    """Pick the spec for this header's key and check its tag and size."""
    specs = PAYLOAD_TABLE[header.key]
    for spec in specs:
        if spec.type == header.type:
            break
    else:
        expected = "/".join(type_label(s.type) for s in specs)
        raise FormatMismatch(
            f"type {type_label(header.type)}, expected {expected}",
            header.offset, header.label)

    if spec.size is not None and header.size != spec.size:
        raise FormatMismatch(
            f"element size {header.size}, expected {spec.size}",
            header.offset, header.label)
    if spec.kind is PayloadKind.SCALAR and header.count != 1:
        raise FormatMismatch(
            f"count {header.count}, expected 1",
            header.offset, header.label)
    if spec.kind is PayloadKind.UNITS and header.size < 1:
        raise FormatMismatch(
            "unit string with zero element size",
            header.offset, header.label)
    return spec


def decode_payload(header: KLVHeader,
                   cursor: ByteCursor) -> tuple[Record, ByteCursor]:
    """Decode the payload of a known key and skip its alignment padding."""
    spec = select_spec(header)
    length = header.payload_size
    body, cursor = cursor.split(length)

    if spec.kind is PayloadKind.SCALAR:
        record = _decode_scalar(header, body)
    elif spec.kind is PayloadKind.TEXT:
        record = _decode_text(header, body.tobytes())
    elif spec.kind is PayloadKind.UNITS:
        record = _decode_units(header, body.tobytes())
    else:
        record = _decode_samples(header, body)

    return record, cursor.skip(padding(length))


def _decode_scalar(header: KLVHeader, body: ByteCursor) -> ScalarRecord:
    (value,), _ = body.read_array(TYPE_FMT[ElementType(header.type)], 1)
    return ScalarRecord(header.label, value, header)


def _decode_samples(header: KLVHeader, body: ByteCursor) -> SampleRecord:
    fmt = TYPE_FMT[ElementType(header.type)]
    components = header.size // struct.calcsize(fmt)
    values, _ = body.read_array(fmt, components * header.count)
    if components == 1:
        samples = list(values)
    else:
        samples = [list(values[i:i + components])
                   for i in range(0, len(values), components)]
    return SampleRecord(header.label, samples, header)


def _unpack_str(header: KLVHeader, raw: bytes) -> str:
    """Decode a UTF-8 string element, dropping trailing NUL padding."""
    try:
        return raw.decode("utf-8").rstrip("\x00")
    except UnicodeDecodeError as e:
        raise InvalidText(f"invalid UTF-8: {e.reason}",
                          header.offset, header.label) from e


def _elements(header: KLVHeader, raw: bytes) -> list[bytes]:
    size = header.size
    return [raw[i:i + size] for i in range(0, size * header.count, size)]


def _decode_text(header: KLVHeader, raw: bytes) -> TextRecord:
    # One string unless the payload is an array of fixed-width strings
    if header.count <= 1 or header.size <= 1:
        return TextRecord(header.label, _unpack_str(header, raw), header)
    values = [_unpack_str(header, elem) for elem in _elements(header, raw)]
    return TextRecord(header.label, values, header)


def _decode_units(header: KLVHeader, raw: bytes) -> TextRecord:
    # Each element keeps all of its size bytes: the final byte is either the
    # 0xB2 "squared" suffix, rewritten to '2', or ordinary text/NUL padding.
    # Consuming size * count keeps the following record aligned.
    values = []
    for elem in _elements(header, raw):
        if elem[-1] == UNITS_SQUARED_BYTE:
            elem = elem[:-1] + b"2"
        values.append(_unpack_str(header, elem))
    if header.count == 1:
        return TextRecord(header.label, values[0], header)
    if header.count == 0:
        return TextRecord(header.label, "", header)
    return TextRecord(header.label, values, header)
