"""Runtime configuration for the replication log."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .replication.naming import DEFAULT_WIDTH, SEGMENT_SUFFIX


@dataclass(frozen=True)
class Settings:
    """Immutable container for replication log configuration."""

    replication_dir: Path
    segment_suffix: str = SEGMENT_SUFFIX
    sequence_width: int = DEFAULT_WIDTH
    compression_level: int = 9
    fsync: bool = False
    create_dir: bool = True
    log_level: str = "INFO"


def _as_bool(value: Optional[str], default: bool) -> bool:
    """Convert environment strings to booleans."""
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no"}


def _as_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _coerce_suffix(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return SEGMENT_SUFFIX
    normalized = value.strip()
    if not normalized.startswith("."):
        normalized = "." + normalized
    return normalized


def _coerce_log_level(value: Optional[str]) -> str:
    if value is None:
        return "INFO"
    normalized = value.strip().upper()
    if normalized in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return normalized
    return "INFO"


def load_settings() -> Settings:
    """Load configuration from the environment (and `.env`)."""
    load_dotenv()
    replication_dir = Path(os.getenv("REPLICATION_DIR", "replication"))
    segment_suffix = _coerce_suffix(os.getenv("REPLICATION_SEGMENT_SUFFIX"))
    sequence_width = max(
        1, _as_int(os.getenv("REPLICATION_SEQUENCE_WIDTH"), DEFAULT_WIDTH)
    )
    compression_level = min(
        9, max(0, _as_int(os.getenv("REPLICATION_COMPRESSION_LEVEL"), 9))
    )
    fsync = _as_bool(os.getenv("REPLICATION_FSYNC"), False)
    create_dir = _as_bool(os.getenv("REPLICATION_CREATE_DIR"), True)
    log_level = _coerce_log_level(os.getenv("LOG_LEVEL"))

    return Settings(
        replication_dir=replication_dir,
        segment_suffix=segment_suffix,
        sequence_width=sequence_width,
        compression_level=compression_level,
        fsync=fsync,
        create_dir=create_dir,
        log_level=log_level,
    )
