"""Local consumer side of a replication log directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..errors import SegmentFormatError
from ..sink import EventSink
from .actions import (
    ActionRecord,
    ActionType,
    DeleteAction,
    DeleteOsmAction,
    DocumentAction,
    decode_batch,
)
from .checkpoint import Checkpoint, read_checkpoint
from .naming import DEFAULT_WIDTH, SEGMENT_SUFFIX, SegmentNamer

logger = logging.getLogger(__name__)


def apply_actions(actions: List[ActionRecord], sink: EventSink) -> int:
    """Replay ``actions`` into ``sink`` in order; returns the count applied.

    ``finish`` is left to the caller so several segments can be replayed as
    one run.
    """
    applied = 0
    for record in actions:
        if isinstance(record, DocumentAction):
            if record.action is ActionType.CREATE:
                sink.create(record.doc)
            elif record.action is ActionType.UPDATE:
                sink.update(record.doc)
            else:
                sink.update_or_create(record.doc)
        elif isinstance(record, DeleteAction):
            sink.delete(record.id)
        elif isinstance(record, DeleteOsmAction):
            sink.delete_osm(
                record.osm_type, record.osm_id, record.osm_key, record.osm_value
            )
        else:
            raise TypeError(f"unsupported record type {type(record).__name__}")
        applied += 1
    return applied


class ReplicationLogReader:
    """Read checkpoints and segments produced by a ReplicationLogWriter."""

    def __init__(
        self,
        directory: Path | str,
        *,
        width: int = DEFAULT_WIDTH,
        segment_suffix: str = SEGMENT_SUFFIX,
    ) -> None:
        self._namer = SegmentNamer(
            directory, width=width, segment_suffix=segment_suffix
        )

    @property
    def directory(self) -> Path:
        return self._namer.directory

    def latest(self) -> Optional[Checkpoint]:
        """Checkpoint currently published through the pointer."""
        return read_checkpoint(self._namer.pointer_path)

    def checkpoint(self, sequence: int) -> Optional[Checkpoint]:
        return read_checkpoint(self._namer.checkpoint_path(sequence))

    def sequences(self) -> List[int]:
        """Published segment sequences, ascending.

        Segments above the pointer's sequence belong to a flush that never
        published and are not reported.
        """
        latest = self.latest()
        if latest is None:
            return []
        return [
            seq
            for seq in self._namer.list_segments()
            if seq <= latest.sequence_number
        ]

    def read_segment(self, sequence: int) -> List[ActionRecord]:
        path = self._namer.segment_path(sequence)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            raise SegmentFormatError(
                f"segment {sequence} not found at {path}"
            ) from exc
        return decode_batch(data)

    def pending(
        self, after: Optional[int] = None
    ) -> Iterator[Tuple[int, List[ActionRecord]]]:
        """Yield ``(sequence, actions)`` for each segment newer than ``after``.

        ``after=None`` starts from the oldest segment. Missing sequences
        between ``after`` and the pointer raise SegmentFormatError since the
        consumer could not catch up without them.
        """
        latest = self.latest()
        if latest is None:
            return
        start = 0 if after is None else after + 1
        for sequence in range(start, latest.sequence_number + 1):
            logger.debug("reading replication sequence %d", sequence)
            yield sequence, self.read_segment(sequence)

    def replay(self, sink: EventSink, after: Optional[int] = None) -> Optional[int]:
        """Apply every pending segment to ``sink`` and finish it.

        Returns the last sequence applied, or ``after`` when nothing was
        pending.
        """
        last = after
        applied = 0
        for sequence, actions in self.pending(after):
            applied += apply_actions(actions, sink)
            last = sequence
        sink.finish()
        logger.info("replayed %d actions up to sequence %s", applied, last)
        return last


__all__ = ["ReplicationLogReader", "apply_actions"]
