from __future__ import annotations

import argparse
import json
import logging
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, Iterator

from photon_replication.config import load_settings
from photon_replication.document import Document
from photon_replication.replication.writer import build_replication_writer
from photon_replication.sink import EventSink

"""
Feed a JSONL file of change events through a replication log writer as one
synchronisation run.

Each line is an object such as:
  {"event": "create", "doc": {"uid": "n1", "name": "Berlin"}}
  {"event": "delete", "id": "n1"}
  {"event": "delete_osm", "osmType": "way", "osmId": 123, "osmKey": "highway"}

The log directory comes from REPLICATION_DIR unless --dir is given.

Example:
  uv run python scripts/write_events.py --events changes.jsonl --dir replication
"""


@contextmanager
def _timed(label: str, sink: Dict[str, float]):
    start = perf_counter()
    try:
        yield
    finally:
        sink[label] = sink.get(label, 0.0) + (perf_counter() - start)


def _iter_events(path: Path) -> Iterator[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as exc:
                raise SystemExit(f"{path}:{lineno}: invalid JSON ({exc})") from exc


def _dispatch(sink: EventSink, event: Dict[str, Any]) -> None:
    kind = event.get("event")
    if kind in {"create", "update", "update_or_create"}:
        getattr(sink, kind)(Document.from_dict(event["doc"]))
    elif kind == "delete":
        sink.delete(event["id"])
    elif kind == "delete_osm":
        sink.delete_osm(
            event["osmType"],
            int(event["osmId"]),
            event.get("osmKey"),
            event.get("osmValue"),
        )
    else:
        raise SystemExit(f"unknown event type: {kind!r}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Write a JSONL event file as one replication segment"
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="Path to the JSONL event file",
    )
    parser.add_argument(
        "--dir",
        type=Path,
        default=None,
        help="Replication directory (overrides REPLICATION_DIR)",
    )
    args = parser.parse_args()

    if not args.events.exists():
        raise SystemExit(f"Event file not found: {args.events}")

    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    if args.dir is not None:
        settings = replace(settings, replication_dir=args.dir)

    timings: Dict[str, float] = {}
    overall_start = perf_counter()
    writer = build_replication_writer(settings)
    sequence = writer.sequence_number

    count = 0
    with _timed("dispatch", timings):
        for event in _iter_events(args.events):
            _dispatch(writer, event)
            count += 1

    with _timed("flush", timings):
        writer.finish()

    total = perf_counter() - overall_start
    if count:
        print(
            f"Wrote {count} events as sequence {sequence} "
            f"in {settings.replication_dir}"
        )
    else:
        print("No events found; nothing written")
    for label, seconds in timings.items():
        print(f"  {label:<10} {seconds * 1000:8.1f} ms")
    print(f"  {'total':<10} {total * 1000:8.1f} ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
