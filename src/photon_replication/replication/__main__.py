"""Command line inspection of a replication log directory."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from ..config import load_settings
from ..errors import SegmentFormatError
from .actions import action_to_dict
from .reader import ReplicationLogReader


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Photon replication log inspector")
    parser.add_argument(
        "--dir",
        type=Path,
        default=None,
        help="Replication directory (defaults to REPLICATION_DIR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show the published checkpoint")
    subparsers.add_parser("list", help="List published segment sequences")

    dump_parser = subparsers.add_parser("dump", help="Print one segment as JSON")
    dump_parser.add_argument("sequence", type=int, help="Segment sequence number")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, settings.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        )

    reader = ReplicationLogReader(
        args.dir or settings.replication_dir,
        width=settings.sequence_width,
        segment_suffix=settings.segment_suffix,
    )

    if args.command == "status":
        latest = reader.latest()
        if latest is None:
            print(f"No checkpoint published in {reader.directory}")
            return 1
        print(json.dumps(latest.to_dict(), indent=2))
        return 0

    if args.command == "list":
        for sequence in reader.sequences():
            print(sequence)
        return 0

    if args.command == "dump":
        try:
            actions = reader.read_segment(args.sequence)
        except (SegmentFormatError, ValueError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        print(
            json.dumps(
                [action_to_dict(record) for record in actions],
                ensure_ascii=False,
                indent=2,
            )
        )
        return 0

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":
    sys.exit(main())
