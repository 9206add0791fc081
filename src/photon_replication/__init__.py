"""Replication log for synchronising a Photon geocoding index."""

from .document import Document
from .errors import (
    ActionValidationError,
    FlushError,
    ReplicationError,
    SegmentFormatError,
)
from .sink import EventSink, FanOutSink, NullSink


def main() -> None:
    """Entrypoint proxy that defers importing the inspector until needed."""

    from .replication.__main__ import main as _inspector_main

    raise SystemExit(_inspector_main())


__all__ = [
    "ActionValidationError",
    "Document",
    "EventSink",
    "FanOutSink",
    "FlushError",
    "NullSink",
    "ReplicationError",
    "SegmentFormatError",
    "main",
]
