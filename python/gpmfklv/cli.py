"""gpmfklv command-line tool."""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

from .decoder import DEFAULT_MAX_DEPTH, KLVDecoder, LoggingObserver
from .errors import KLVError
from .payload import CONTAINER_KEYS, PAYLOAD_TABLE
from .records import Record
from .schema import key_label, type_label
from .tree import describe, streams, walk

logger = logging.getLogger(__name__)


def _decode_file(args: argparse.Namespace) -> list[Record]:
    data = Path(args.file).read_bytes()
    observer = LoggingObserver() if args.verbose else None
    return KLVDecoder(max_depth=args.max_depth, observer=observer).decode(data)


def cmd_dump(args: argparse.Namespace) -> None:
    """Print the record tree."""
    for path, record in walk(_decode_file(args)):
        print(f"{'  ' * len(path)}{describe(record)}")


def cmd_info(args: argparse.Namespace) -> None:
    """Print summary info about a metadata file."""
    records = _decode_file(args)
    key_counts = Counter(record.key for _, record in walk(records))

    print(f"File:       {args.file}")
    print(f"Size:       {Path(args.file).stat().st_size:,} bytes")
    print(f"Records:    {sum(key_counts.values()):,}")

    infos = streams(records)
    print(f"\nStreams ({len(infos)}):")
    print(f"  {'Device':<20s}  {'Stream':<32s}  {'Key':<4s}  {'Samples':>8s}  Units")
    print(f"  {'-' * 20}  {'-' * 32}  {'-' * 4}  {'-' * 8}  {'-' * 10}")
    for s in infos:
        units = s.units if isinstance(s.units, str) else ",".join(s.units or [])
        print(f"  {s.device_name or '?':<20s}  {s.name or '?':<32s}  "
              f"{s.sample_key or '-':<4s}  {s.sample_count:8,}  {units}")

    print(f"\nKeys ({len(key_counts)}):")
    for key, count in sorted(key_counts.items()):
        print(f"  {key}  {count:6,}")


def cmd_keys(args: argparse.Namespace) -> None:
    """List the keys the decoder understands."""
    for key in sorted(CONTAINER_KEYS):
        print(f"  {key_label(key)}  {'container':<8s}  type=\\0")
    for key, specs in sorted(PAYLOAD_TABLE.items()):
        for spec in specs:
            size = "any" if spec.size is None else str(spec.size)
            print(f"  {key_label(key)}  {spec.kind.value:<8s}  "
                  f"type={type_label(spec.type)} size={size:<3s}  "
                  f"{spec.description}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="gpmfklv",
                                     description="GPMF telemetry decoder")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every record as it is decoded")
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
                        help="Maximum container nesting depth")
    sub = parser.add_subparsers(dest="command")

    p_dump = sub.add_parser("dump", help="Print the decoded record tree")
    p_dump.add_argument("file", help="Path to raw metadata (.bin)")

    p_info = sub.add_parser("info", help="Show streams and key counts")
    p_info.add_argument("file", help="Path to raw metadata (.bin)")

    sub.add_parser("keys", help="List known record keys")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    commands = {"dump": cmd_dump, "info": cmd_info, "keys": cmd_keys}
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        command(args)
    except KLVError as e:
        logger.error("decode failed: %s", e)
        return 2
    except OSError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
