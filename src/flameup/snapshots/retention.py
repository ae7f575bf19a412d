"""Retention rotation for snapshots under a backup root."""

from __future__ import annotations

from pathlib import Path

from flameup.core.logging import Logger, get_logger
from flameup.errors import ConfigError
from flameup.snapshots.catalog import scan_catalog
from flameup.snapshots.operations import delete_snapshot

__all__ = ["enforce_retention"]


def enforce_retention(
    root: Path,
    max_count: int,
    *,
    verbose: bool = False,
    logger: Logger | None = None,
) -> list[str]:
    """Evict the oldest snapshots so one more fits under ``max_count``.

    Runs before a new snapshot is created, so it keeps evicting while the
    catalog holds ``max_count`` or more entries.

    Args:
        root: Backup root holding the snapshots.
        max_count: Maximum number of snapshots kept after the next create.
        verbose: Log each eviction at INFO instead of DEBUG.
        logger: Optional logger override.

    Returns:
        Names of the evicted snapshots, oldest first.

    Raises:
        ConfigError: If ``max_count`` is below one.
        DeleteError: If a removal fails; earlier evictions are kept.
    """

    if max_count < 1:
        raise ConfigError(f"Retention count must be >= 1, got {max_count}.")

    log = logger or get_logger(__name__, component="retention")
    working = scan_catalog(root).oldest_first()
    evicted: list[str] = []

    while len(working) >= max_count:
        oldest = working[0]
        if verbose:
            log.info("snapshot-evicted", snapshot=oldest.name)
        else:
            log.debug("snapshot-evicted", snapshot=oldest.name)
        delete_snapshot(oldest.name, root)
        working.pop(0)
        evicted.append(oldest.name)

    return evicted
