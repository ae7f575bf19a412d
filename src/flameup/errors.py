"""Domain-specific exceptions for snapshot management."""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class ErrorKind(StrEnum):
    """Stable identifiers for the failure classes callers branch on."""

    CONFIG = "config"
    CLOCK = "clock"
    SOURCE_MISSING = "source-missing"
    SNAPSHOT_NOT_FOUND = "snapshot-not-found"
    COPY = "copy"
    DELETE = "delete"
    CATALOG = "catalog"
    LOCK = "lock"


class FlameUpError(RuntimeError):
    """Base error for backup lifecycle failures."""

    kind: ClassVar[ErrorKind]


class ConfigError(FlameUpError):
    """Raised when CLI arguments or the source path file are invalid."""

    kind = ErrorKind.CONFIG


class ClockError(FlameUpError):
    """Raised when the local time cannot be turned into a snapshot name."""

    kind = ErrorKind.CLOCK


class SourceMissingError(FlameUpError):
    """Raised when the source directory is absent or not a directory."""

    kind = ErrorKind.SOURCE_MISSING


class SnapshotNotFoundError(FlameUpError):
    """Raised when a named snapshot does not exist under the backup root."""

    kind = ErrorKind.SNAPSHOT_NOT_FOUND


class CopyError(FlameUpError):
    """Raised when a recursive copy fails or its destination is taken."""

    kind = ErrorKind.COPY


class DeleteError(FlameUpError):
    """Raised when removing a snapshot subtree fails."""

    kind = ErrorKind.DELETE


class CatalogError(FlameUpError):
    """Raised when the backup root exists but cannot be listed."""

    kind = ErrorKind.CATALOG


class LockError(FlameUpError):
    """Raised when the backup root lock cannot be acquired or released."""

    kind = ErrorKind.LOCK


__all__ = [
    "ErrorKind",
    "FlameUpError",
    "ConfigError",
    "ClockError",
    "SourceMissingError",
    "SnapshotNotFoundError",
    "CopyError",
    "DeleteError",
    "CatalogError",
    "LockError",
]
