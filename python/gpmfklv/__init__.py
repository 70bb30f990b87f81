"""gpmfklv - GPMF telemetry KLV decoder."""

from .errors import (
    KLVError, InsufficientData, FormatMismatch, InvalidText, TrailingData,
    UnknownBlockType, NestingTooDeep,
)
from .cursor import ByteCursor
from .schema import ElementType, KLVHeader, decode_header
from .records import (
    Record, ScalarRecord, TextRecord, SampleRecord, ContainerRecord,
    CustomRecord,
)
from .payload import PAYLOAD_TABLE, PayloadKind, PayloadSpec
from .decoder import (
    DEFAULT_MAX_DEPTH, KLVDecoder, DecodeObserver, LoggingObserver,
    decode_record, decode_stream,
)
from .builder import build_record, build_container
from .tree import StreamInfo, describe, find_all, streams, walk

__all__ = [
    "KLVError", "InsufficientData", "FormatMismatch", "InvalidText",
    "TrailingData", "UnknownBlockType", "NestingTooDeep",
    "ByteCursor", "ElementType", "KLVHeader", "decode_header",
    "Record", "ScalarRecord", "TextRecord", "SampleRecord",
    "ContainerRecord", "CustomRecord",
    "PAYLOAD_TABLE", "PayloadKind", "PayloadSpec",
    "DEFAULT_MAX_DEPTH", "KLVDecoder", "DecodeObserver", "LoggingObserver",
    "decode_record", "decode_stream",
    "build_record", "build_container",
    "StreamInfo", "describe", "find_all", "streams", "walk",
]
