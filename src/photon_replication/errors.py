"""Exception hierarchy for the replication log."""

from __future__ import annotations


class ReplicationError(RuntimeError):
    """Base class for replication log failures."""


class ActionValidationError(ReplicationError, ValueError):
    """Raised when an action record carries fields illegal for its variant."""


class SegmentFormatError(ReplicationError):
    """Raised when a segment file cannot be decoded."""


class FlushError(ReplicationError):
    """Raised when a batch could not be durably written and published.

    Fatal for the current synchronisation run: the batch and the sequence
    counter are left untouched and nothing is retried.
    """

    def __init__(self, message: str, *, sequence_number: int) -> None:
        super().__init__(message)
        self.sequence_number = sequence_number


__all__ = [
    "ActionValidationError",
    "FlushError",
    "ReplicationError",
    "SegmentFormatError",
]
