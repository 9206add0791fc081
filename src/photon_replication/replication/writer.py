"""Replication log writer.

Accumulates change events as action records, forwards each event to an
optional wrapped sink, and on ``finish`` durably writes the batch as the
next numbered segment and republishes the ``state.json`` pointer.

Flush order is segment, then per-sequence checkpoint, then pointer. The
in-memory sequence counter and batch only change after all three succeed,
so a failed flush leaves a directory whose pointer still names the previous
sequence.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from ..document import DocumentLike
from ..errors import FlushError
from ..sink import EventSink
from .actions import (
    ActionRecord,
    ActionType,
    DeleteAction,
    DeleteOsmAction,
    document_action,
    encode_batch,
)
from .checkpoint import (
    REPLICATION_FORMAT,
    Checkpoint,
    read_checkpoint,
    write_checkpoint,
)
from .fileio import publish_pointer, write_atomic
from .naming import DEFAULT_WIDTH, SEGMENT_SUFFIX, SegmentNamer

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReplicationLogWriter:
    """Event sink that records every event into a sequence-numbered log.

    A second sink can be daisy-chained via ``wrapped``; it sees every call
    before the event is recorded, and a failure there propagates without
    the event being recorded.
    """

    def __init__(
        self,
        directory: Path | str,
        wrapped: Optional[EventSink] = None,
        *,
        width: int = DEFAULT_WIDTH,
        segment_suffix: str = SEGMENT_SUFFIX,
        compression_level: int = 9,
        fsync: bool = False,
        create_dir: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._directory = Path(directory)
        self._wrapped = wrapped
        self._namer = SegmentNamer(
            self._directory, width=width, segment_suffix=segment_suffix
        )
        self._compression_level = compression_level
        self._fsync = fsync
        self._clock = clock
        self._actions: List[ActionRecord] = []
        if create_dir:
            self._directory.mkdir(parents=True, exist_ok=True)

        state = read_checkpoint(self._namer.pointer_path)
        if state is None:
            self._sequence_number = 0
        else:
            self._sequence_number = state.sequence_number + 1
        logger.info(
            "replication log %s: next sequence number %d",
            self._directory,
            self._sequence_number,
        )

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def pointer_path(self) -> Path:
        return self._namer.pointer_path

    @property
    def namer(self) -> SegmentNamer:
        return self._namer

    @property
    def wrapped(self) -> Optional[EventSink]:
        return self._wrapped

    @property
    def sequence_number(self) -> int:
        """Sequence number the next non-empty flush will write."""
        return self._sequence_number

    @property
    def pending(self) -> Tuple[ActionRecord, ...]:
        return tuple(self._actions)

    # Event sink operations ----------------------------------------------
    def create(self, doc: DocumentLike) -> None:
        record = document_action(ActionType.CREATE, doc)
        if self._wrapped is not None:
            self._wrapped.create(doc)
        self._actions.append(record)

    def update(self, doc: DocumentLike) -> None:
        record = document_action(ActionType.UPDATE, doc)
        if self._wrapped is not None:
            self._wrapped.update(doc)
        self._actions.append(record)

    def update_or_create(self, doc: DocumentLike) -> None:
        record = document_action(ActionType.UPDATE_OR_CREATE, doc)
        if self._wrapped is not None:
            self._wrapped.update_or_create(doc)
        self._actions.append(record)

    def delete(self, doc_id: str) -> None:
        record = DeleteAction(id=doc_id)
        if self._wrapped is not None:
            self._wrapped.delete(doc_id)
        self._actions.append(record)

    def delete_osm(
        self,
        osm_type: str,
        osm_id: int,
        osm_key: Optional[str] = None,
        osm_value: Optional[str] = None,
    ) -> None:
        record = DeleteOsmAction(
            osm_type=osm_type,
            osm_id=osm_id,
            osm_key=osm_key,
            osm_value=osm_value,
        )
        if self._wrapped is not None:
            self._wrapped.delete_osm(osm_type, osm_id, osm_key, osm_value)
        self._actions.append(record)

    def finish(self) -> None:
        """Close the run: finish the wrapped sink, then flush the batch."""
        if self._wrapped is not None:
            self._wrapped.finish()
        if not self._actions:
            logger.warning("replication batch empty; nothing written")
            return
        self._flush()

    # Flush --------------------------------------------------------------
    def _flush(self) -> None:
        sequence = self._sequence_number
        try:
            segment_path = self._namer.segment_path(sequence)
            checkpoint_path = self._namer.checkpoint_path(sequence)
            payload = encode_batch(
                self._actions, compresslevel=self._compression_level
            )
            write_atomic(segment_path, payload, fsync=self._fsync)
            checkpoint = Checkpoint(
                sequence_number=sequence,
                replication_format=REPLICATION_FORMAT,
                timestamp=self._clock(),
            )
            write_checkpoint(checkpoint_path, checkpoint, fsync=self._fsync)
            publish_pointer(
                self._namer.pointer_path, checkpoint_path, fsync=self._fsync
            )
        except (OSError, TypeError, ValueError) as exc:
            logger.error(
                "failed to write replication sequence %d in %s: %s",
                sequence,
                self._directory,
                exc,
            )
            raise FlushError(
                f"replication sequence {sequence} could not be written: {exc}",
                sequence_number=sequence,
            ) from exc

        logger.info(
            "wrote replication sequence %d (%d actions) to %s",
            sequence,
            len(self._actions),
            segment_path,
        )
        self._sequence_number = sequence + 1
        self._actions.clear()


def build_replication_writer(
    settings: "Settings", wrapped: Optional[EventSink] = None
) -> ReplicationLogWriter:
    """Construct a writer from runtime settings."""
    return ReplicationLogWriter(
        settings.replication_dir,
        wrapped,
        width=settings.sequence_width,
        segment_suffix=settings.segment_suffix,
        compression_level=settings.compression_level,
        fsync=settings.fsync,
        create_dir=settings.create_dir,
    )


__all__ = ["ReplicationLogWriter", "build_replication_writer"]
