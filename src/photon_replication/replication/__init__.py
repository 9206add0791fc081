"""Sequence-numbered replication log for geocoding index changes."""

from .actions import (
    ActionRecord,
    ActionType,
    DeleteAction,
    DeleteOsmAction,
    DocumentAction,
    action_from_dict,
    action_to_dict,
    decode_batch,
    encode_batch,
)
from .checkpoint import REPLICATION_FORMAT, Checkpoint, read_checkpoint
from .naming import SegmentNamer
from .reader import ReplicationLogReader, apply_actions
from .writer import ReplicationLogWriter, build_replication_writer

__all__ = [
    "ActionRecord",
    "ActionType",
    "Checkpoint",
    "DeleteAction",
    "DeleteOsmAction",
    "DocumentAction",
    "REPLICATION_FORMAT",
    "ReplicationLogReader",
    "ReplicationLogWriter",
    "SegmentNamer",
    "action_from_dict",
    "action_to_dict",
    "apply_actions",
    "build_replication_writer",
    "decode_batch",
    "encode_batch",
    "read_checkpoint",
]
