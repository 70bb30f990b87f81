#!/usr/bin/env python3
"""Decode a raw GPMF metadata file and print each stream's first samples.

Extract the metadata track first, e.g. with ffmpeg:
    ffmpeg -i GX010003.MP4 -codec copy -map 0:3 -f rawvideo GX010003.bin

Then:
    python examples/print_streams.py GX010003.bin
"""

import sys

from gpmfklv import KLVError, SampleRecord, decode_stream, streams, walk

with open(sys.argv[1], "rb") as f:
    data = f.read()

try:
    records = decode_stream(data)
except KLVError as e:
    print(f"decode failed: {e}", file=sys.stderr)
    sys.exit(1)

for info in streams(records):
    print(f"{info.device_name}/{info.name}: {info.sample_count} x "
          f"{info.sample_key} units={info.units} scale={info.scale}")

for path, record in walk(records):
    if isinstance(record, SampleRecord) and record.key != "SCAL":
        print(record.key, record.to_numpy()[:3].tolist())
