"""Crash-safe file writes used by the replication log."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# errno values meaning "this filesystem cannot hard link here"
_NO_LINK_ERRNOS = frozenset(
    code
    for code in (
        getattr(errno, "EPERM", None),
        getattr(errno, "EXDEV", None),
        getattr(errno, "EMLINK", None),
        getattr(errno, "ENOTSUP", None),
        getattr(errno, "EOPNOTSUPP", None),
        getattr(errno, "ENOSYS", None),
    )
    if code is not None
)


def fsync_directory(directory: Path) -> None:
    try:
        dir_fd = os.open(directory, os.O_RDONLY)
    except OSError:  # pragma: no cover - platform dependent
        return
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def _discard(path: Optional[str]) -> None:
    if path is None:
        return
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("unable to remove temporary file %s: %s", path, exc)


def default_file_mode() -> int:
    """Mode a plain ``open()`` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(
    path: Path, data: bytes, *, fsync: bool = False, mode: Optional[int] = None
) -> None:
    """Write ``data`` to ``path`` so readers see either nothing or all of it.

    The bytes go to a temp file in the same directory which is then renamed
    over ``path``. Errors propagate after the temp file is removed. The
    file gets ``mode`` (umask-derived by default) instead of the 0600 that
    ``mkstemp`` uses, so the published file is readable by other users.
    """
    temp_fd: Optional[int] = None
    temp_path: Optional[str] = None
    try:
        temp_fd, temp_path = tempfile.mkstemp(
            prefix=f".{path.name}.", dir=str(path.parent)
        )
        with os.fdopen(temp_fd, "wb") as tmp:
            temp_fd = None  # ownership transferred to file object
            tmp.write(data)
            tmp.flush()
            os.fchmod(tmp.fileno(), default_file_mode() if mode is None else mode)
            if fsync:
                os.fsync(tmp.fileno())
        os.replace(temp_path, path)
        temp_path = None
        if fsync:
            fsync_directory(path.parent)
    finally:
        if temp_fd is not None:
            try:
                os.close(temp_fd)
            except OSError:
                pass
        _discard(temp_path)


def publish_pointer(pointer: Path, target: Path, *, fsync: bool = False) -> None:
    """Make ``pointer`` carry the content of ``target`` in one rename.

    A hard link to ``target`` is staged under a temp name and renamed over
    the pointer, so the pointer is never missing or partially written. Where
    the filesystem refuses hard links the staged file is a byte copy instead.
    """
    staged = pointer.parent / f".{pointer.name}.{os.getpid()}.tmp"
    _discard(str(staged))
    try:
        try:
            os.link(target, staged)
        except OSError as exc:
            if exc.errno not in _NO_LINK_ERRNOS:
                raise
            logger.debug(
                "hard link unsupported for %s (%s); copying instead", target, exc
            )
            shutil.copyfile(target, staged)
            if fsync:
                with open(staged, "rb+") as handle:
                    os.fsync(handle.fileno())
        os.replace(staged, pointer)
        if fsync:
            fsync_directory(pointer.parent)
    finally:
        # rename() is a no-op when both names already link the same inode
        _discard(str(staged))


__all__ = ["default_file_mode", "fsync_directory", "publish_pointer", "write_atomic"]
