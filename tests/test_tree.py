"""Tests for tree navigation, numpy export and the command-line tool.

Run from the repo root:
    python3 -m pytest tests/test_tree.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import io
import struct
import tempfile
from contextlib import redirect_stdout

import numpy as np
import pytest

from gpmfklv import cli
from gpmfklv.builder import build_container, build_record
from gpmfklv.cli import main
from gpmfklv.decoder import decode_stream
from gpmfklv.records import CustomRecord, SampleRecord, ScalarRecord, TextRecord
from gpmfklv.schema import ElementType
from gpmfklv.tree import describe, find_all, streams, walk

E = ElementType


def make_test_stream() -> bytes:
    accl = build_container("STRM", [
        build_record("STNM", E.CHAR, 13, 1, b"Accelerometer"),
        build_record("SIUN", E.CHAR, 4, 1, b"m/s\xb2"),
        build_record("SCAL", E.INT16, 2, 1, struct.pack(">h", 418)),
        build_record("ACCL", E.INT16, 6, 3,
                     struct.pack(">9h", 1, 2, 3, 4, 5, 6, 7, 8, 9)),
    ])
    gps = build_container("STRM", [
        build_record("STNM", E.CHAR, 3, 1, b"GPS"),
        build_record("GPSU", E.UTC_DATE, 16, 1, b"230815123456.789"),
        build_record("SIUN", E.CHAR, 4, 5, b"deg\x00deg\x00m\x00\x00\x00m/s\x00m/s\x00"),
        build_record("SCAL", E.INT32, 4, 5,
                     struct.pack(">5i", 10000000, 10000000, 1000, 1000, 100)),
        build_record("GPS5", E.INT32, 20, 2, struct.pack(
            ">10i", 1, 2, 3, 4, 5, 6, 7, 8, 9, 10)),
    ])
    return build_container("DEVC", [
        build_record("DVID", E.UINT32, 4, 1, struct.pack(">I", 1)),
        build_record("DVNM", E.CHAR, 6, 1, b"Camera"),
        accl,
        gps,
    ])


def test_walk():
    print("test_walk...", end="")

    records = decode_stream(make_test_stream())
    visited = [(path, r.key) for path, r in walk(records)]

    assert visited[0] == ((), "DEVC")
    assert visited[1] == (("DEVC",), "DVID")
    assert visited[3] == (("DEVC",), "STRM")
    assert visited[4] == (("DEVC", "STRM"), "STNM")
    assert len(visited) == 1 + 2 + 2 + 4 + 5

    print(" OK")


def test_find_all():
    print("test_find_all...", end="")

    records = decode_stream(make_test_stream())
    names = [r.value for r in find_all(records, "STNM")]
    assert names == ["Accelerometer", "GPS"]
    scal = find_all(records, "SCAL")
    assert isinstance(scal[0], ScalarRecord)
    assert isinstance(scal[1], SampleRecord)
    assert find_all(records, "GYRO") == []

    print(" OK")


def test_streams():
    """Stream summaries carry raw scale factors without applying them."""
    print("test_streams...", end="")

    infos = streams(decode_stream(make_test_stream()))
    assert len(infos) == 2

    accl, gps = infos
    assert accl.device_name == "Camera"
    assert accl.device_id == 1
    assert accl.name == "Accelerometer"
    assert accl.sample_key == "ACCL"
    assert accl.sample_count == 3
    assert accl.units == "m/s2"
    assert accl.scale == 418

    assert gps.sample_key == "GPS5"
    assert gps.sample_count == 2
    assert gps.units == ["deg", "deg", "m", "m/s", "m/s"]
    assert gps.scale == [10000000, 10000000, 1000, 1000, 100]

    print(" OK")


def test_to_numpy():
    print("test_to_numpy...", end="")

    records = decode_stream(make_test_stream())
    accl = find_all(records, "ACCL")[0]
    arr = accl.to_numpy()
    assert arr.dtype == np.int16
    assert arr.shape == (3, 3)
    assert arr[2].tolist() == [7, 8, 9]

    gps = find_all(records, "GPS5")[0].to_numpy()
    assert gps.dtype == np.int32
    assert gps.shape == (2, 5)

    shut = decode_stream(build_record(
        "SHUT", E.FLOAT, 4, 2, struct.pack(">2f", 0.5, 0.25)))[0]
    arr = shut.to_numpy()
    assert arr.dtype == np.float32
    assert arr.shape == (2,)

    empty = decode_stream(build_record("ACCL", E.INT16, 6, 0, b""))[0]
    assert empty.to_numpy().shape == (0, 3)

    print(" OK")


def test_describe():
    print("test_describe...", end="")

    assert describe(ScalarRecord("TSMP", 100)) == "TSMP: 100"
    assert describe(TextRecord("STNM", "GPS")) == "STNM: 'GPS'"
    assert describe(CustomRecord("ABCD", b"\x01\x02")) == "ABCD: 2 bytes 0102"
    assert describe(SampleRecord("ACCL", [[1, 2, 3]])) == \
        "ACCL: 1 samples [[1, 2, 3]]"
    assert describe(SampleRecord("SHUT", [1, 2, 3, 4])) == \
        "SHUT: 4 samples [1, 2, 3, ...]"

    print(" OK")


def test_record_hashing():
    """Records holding lists are unhashable; the others hash by value."""
    print("test_record_hashing...", end="")

    records = decode_stream(make_test_stream())
    for record in (records[0], find_all(records, "ACCL")[0],
                   TextRecord("SIUN", ["deg", "m"]), TextRecord("STNM", "GPS")):
        with pytest.raises(TypeError, match="unhashable"):
            hash(record)

    assert hash(ScalarRecord("TSMP", 100)) == hash(ScalarRecord("TSMP", 100))
    assert len({CustomRecord("ABCD", b"\x01"), CustomRecord("ABCD", b"\x01")}) == 1

    print(" OK")


def _run_cli(argv):
    out = io.StringIO()
    with redirect_stdout(out):
        rc = main(argv)
    return rc, out.getvalue()


def test_cli():
    print("test_cli...", end="")

    with tempfile.NamedTemporaryFile(suffix=".bin", delete=False) as f:
        f.write(make_test_stream())
        good = f.name
    with tempfile.NamedTemporaryFile(suffix=".bin", delete=False) as f:
        f.write(build_record("ABCD", E.UINT8, 1, 1, b"\x00"))
        bad = f.name

    try:
        rc, out = _run_cli(["dump", good])
        assert rc == 0
        assert "DEVC (4 records)" in out
        assert "    ACCL: 3 samples" in out

        rc, out = _run_cli(["info", good])
        assert rc == 0
        assert "Accelerometer" in out
        assert "GPS5" in out

        rc, out = _run_cli(["keys"])
        assert rc == 0
        assert "SIUN" in out
        assert cli.logger.name == "gpmfklv.cli"

        rc, _ = _run_cli(["dump", bad])
        assert rc == 2

        rc, _ = _run_cli(["dump", good + ".missing"])
        assert rc == 1
    finally:
        os.unlink(good)
        os.unlink(bad)

    print(" OK")


if __name__ == "__main__":
    print("gpmfklv tree tests")
    print("==================\n")

    test_walk()
    test_find_all()
    test_streams()
    test_to_numpy()
    test_describe()
    test_record_hashing()
    test_cli()

    print("\nAll tests passed.")
