"""Filesystem operations that create, restore, and delete snapshots.

None of these operations are transactional: a failure part way through a
copy or removal leaves a partial tree behind and nothing is rolled back.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from flameup.errors import (
    CopyError,
    DeleteError,
    SnapshotNotFoundError,
    SourceMissingError,
)
from flameup.snapshots.naming import is_snapshot_name

__all__ = [
    "create_snapshot",
    "delete_snapshot",
    "remove_tree",
    "resolve_snapshot_path",
    "restore_snapshot",
]


def remove_tree(path: Path) -> None:
    """Remove ``path`` whether it is a directory, file, or symlink."""

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def resolve_snapshot_path(name: str, root: Path) -> Path:
    """Return the directory for snapshot ``name`` under ``root``.

    Only bare snapshot names are accepted so that callers cannot reach
    outside the backup root.

    Raises:
        SnapshotNotFoundError: If ``name`` is not a snapshot in ``root``.
    """

    bare = Path(name).name == name and name not in {"", ".", ".."}
    if not bare or not is_snapshot_name(name):
        raise SnapshotNotFoundError(f"Backup not found: {name}")

    path = Path(root) / name
    if not path.is_dir():
        raise SnapshotNotFoundError(f"Backup not found: {name}")
    return path


def create_snapshot(source: Path, destination: Path) -> Path:
    """Copy the ``source`` tree into the new snapshot ``destination``.

    Raises:
        SourceMissingError: If ``source`` is absent or not a directory.
        CopyError: If ``destination`` already exists or the copy fails.
    """

    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise SourceMissingError(f"Source directory does not exist: {source}")
    if destination.exists():
        raise CopyError(f"Snapshot already exists: {destination}")

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, destination, symlinks=True)
    except (OSError, shutil.Error) as exc:
        raise CopyError(
            f"Failed copying {source} to {destination}: {exc}"
        ) from exc
    return destination


def _overlaps(first: Path, second: Path) -> bool:
    return (
        first == second
        or first.is_relative_to(second)
        or second.is_relative_to(first)
    )


def restore_snapshot(name: str, root: Path, target: Path) -> Path:
    """Replace ``target`` with a full copy of snapshot ``name``.

    The target is only touched once the snapshot is known to exist and the
    target does not overlap the backup root or the snapshot itself.

    Raises:
        SnapshotNotFoundError: If the snapshot does not exist.
        CopyError: If the target overlaps the backups, or clearing the
            target or copying fails.
    """

    snapshot_path = resolve_snapshot_path(name, root)
    target = Path(target)

    resolved_target = target.resolve(strict=False)
    for guarded in (Path(root).resolve(), snapshot_path.resolve()):
        if _overlaps(resolved_target, guarded):
            raise CopyError(
                f"Restore target {target} overlaps backup storage at {guarded}"
            )

    try:
        if target.exists() or target.is_symlink():
            remove_tree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(snapshot_path, target, symlinks=True)
    except (OSError, shutil.Error) as exc:
        raise CopyError(
            f"Failed restoring {name} to {target}: {exc}"
        ) from exc
    return target


def delete_snapshot(name: str, root: Path) -> Path:
    """Remove snapshot ``name`` from ``root``.

    A snapshot entry that is a symlink is unlinked; its target is kept.

    Raises:
        SnapshotNotFoundError: If the snapshot does not exist.
        DeleteError: If the removal fails.
    """

    snapshot_path = resolve_snapshot_path(name, root)
    try:
        remove_tree(snapshot_path)
    except OSError as exc:
        raise DeleteError(f"Failed deleting {name}: {exc}") from exc
    return snapshot_path
