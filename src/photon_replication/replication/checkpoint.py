"""Checkpoint records naming the latest published sequence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .fileio import write_atomic

logger = logging.getLogger(__name__)

REPLICATION_FORMAT = "0.0.0"

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(raw: str) -> datetime:
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class Checkpoint:
    """State of the log after one flush."""

    sequence_number: int
    replication_format: str
    timestamp: datetime

    def __post_init__(self) -> None:
        if isinstance(self.sequence_number, bool) or not isinstance(
            self.sequence_number, int
        ):
            raise ValueError("sequenceNumber must be an integer")
        if self.sequence_number < 0:
            raise ValueError("sequenceNumber must not be negative")
        if not isinstance(self.replication_format, str):
            raise ValueError("replicationFormat must be a string")
        # wire format carries whole seconds only
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        object.__setattr__(
            self, "timestamp", ts.astimezone(timezone.utc).replace(microsecond=0)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequenceNumber": self.sequence_number,
            "replicationFormat": self.replication_format,
            "timestamp": format_timestamp(self.timestamp),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Checkpoint":
        if not isinstance(data, Mapping):
            raise ValueError("checkpoint must be a JSON object")
        timestamp = data["timestamp"]
        if not isinstance(timestamp, str):
            raise ValueError("timestamp must be a string")
        return cls(
            sequence_number=data["sequenceNumber"],
            replication_format=data["replicationFormat"],
            timestamp=parse_timestamp(timestamp),
        )


def read_checkpoint(path: Path) -> Optional[Checkpoint]:
    """Load the checkpoint at ``path``.

    Any failure (missing file, truncated or malformed content) yields
    ``None``; callers treat that as a log without history.
    """
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
        return Checkpoint.from_dict(json.loads(raw))
    except (OSError, UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
        logger.warning("ignoring unreadable checkpoint %s: %s", path, exc)
        return None


def write_checkpoint(
    path: Path, checkpoint: Checkpoint, *, fsync: bool = False
) -> None:
    """Persist ``checkpoint`` to ``path``; errors propagate."""
    write_atomic(path, checkpoint.to_json().encode("utf-8"), fsync=fsync)


__all__ = [
    "Checkpoint",
    "REPLICATION_FORMAT",
    "format_timestamp",
    "parse_timestamp",
    "read_checkpoint",
    "write_checkpoint",
]
