"""File naming for replication segments and per-sequence checkpoints."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

SEGMENT_PREFIX = "segment"
CHECKPOINT_PREFIX = "checkpoint"
SEGMENT_SUFFIX = ".json.gz"
CHECKPOINT_SUFFIX = ".state.json"
POINTER_NAME = "state.json"
DEFAULT_WIDTH = 9


class SegmentNamer:
    """Map ``(sequence, suffix)`` onto paths inside one log directory.

    Sequence numbers are zero-padded to a fixed width so a plain
    lexicographic listing of the directory yields numeric order. Numbers
    wider than ``width`` are rejected rather than silently breaking that
    ordering.
    """

    def __init__(
        self,
        directory: Path | str,
        *,
        width: int = DEFAULT_WIDTH,
        segment_suffix: str = SEGMENT_SUFFIX,
    ) -> None:
        if width <= 0:
            raise ValueError("width must be positive")
        if not segment_suffix.startswith("."):
            raise ValueError("segment_suffix must start with '.'")
        self.directory = Path(directory)
        self.width = width
        self.segment_suffix = segment_suffix

    @property
    def max_sequence(self) -> int:
        return 10**self.width - 1

    def format_sequence(self, sequence: int) -> str:
        if isinstance(sequence, bool) or not isinstance(sequence, int):
            raise TypeError("sequence must be an int")
        if sequence < 0:
            raise ValueError("sequence must not be negative")
        if sequence > self.max_sequence:
            raise ValueError(
                f"sequence {sequence} exceeds {self.width} digit naming scheme"
            )
        return f"{sequence:0{self.width}d}"

    def path_for(self, sequence: int, suffix: str, *, prefix: str) -> Path:
        return self.directory / f"{prefix}-{self.format_sequence(sequence)}{suffix}"

    def segment_path(self, sequence: int) -> Path:
        return self.path_for(sequence, self.segment_suffix, prefix=SEGMENT_PREFIX)

    def checkpoint_path(self, sequence: int) -> Path:
        return self.path_for(sequence, CHECKPOINT_SUFFIX, prefix=CHECKPOINT_PREFIX)

    @property
    def pointer_path(self) -> Path:
        return self.directory / POINTER_NAME

    def _pattern(self, prefix: str, suffix: str) -> "re.Pattern[str]":
        return re.compile(
            rf"^{re.escape(prefix)}-(\d{{{self.width}}}){re.escape(suffix)}$"
        )

    def parse_segment_name(self, name: str) -> Optional[int]:
        """Return the sequence encoded in a segment file name, if it is one."""
        match = self._pattern(SEGMENT_PREFIX, self.segment_suffix).match(name)
        return int(match.group(1)) if match else None

    def parse_checkpoint_name(self, name: str) -> Optional[int]:
        match = self._pattern(CHECKPOINT_PREFIX, CHECKPOINT_SUFFIX).match(name)
        return int(match.group(1)) if match else None

    def list_segments(self) -> List[int]:
        """Sequence numbers of the segment files present, ascending."""
        if not self.directory.is_dir():
            return []
        sequences = []
        for entry in sorted(self.directory.iterdir()):
            sequence = self.parse_segment_name(entry.name)
            if sequence is not None and entry.is_file():
                sequences.append(sequence)
        return sequences


__all__ = [
    "CHECKPOINT_PREFIX",
    "CHECKPOINT_SUFFIX",
    "DEFAULT_WIDTH",
    "POINTER_NAME",
    "SEGMENT_PREFIX",
    "SEGMENT_SUFFIX",
    "SegmentNamer",
]
