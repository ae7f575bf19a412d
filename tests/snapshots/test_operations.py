"""Tests for :mod:`flameup.snapshots.operations`."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from flameup.errors import (
    CopyError,
    DeleteError,
    SnapshotNotFoundError,
    SourceMissingError,
)
from flameup.snapshots.operations import (
    create_snapshot,
    delete_snapshot,
    resolve_snapshot_path,
    restore_snapshot,
)

NAME = "Backup_2024-01-01_12-00-00"


def test_create_snapshot_copies_tree(
    source_tree: Path,
    backup_root: Path,
    listing,
) -> None:
    destination = create_snapshot(source_tree, backup_root / NAME)

    assert destination == backup_root / NAME
    assert listing(destination) == listing(source_tree)
    assert (destination / "empty").is_dir()


def test_create_snapshot_requires_directory_source(
    tmp_path: Path,
    backup_root: Path,
) -> None:
    with pytest.raises(SourceMissingError):
        create_snapshot(tmp_path / "missing", backup_root / NAME)

    file_source = tmp_path / "file.txt"
    file_source.write_text("x", encoding="utf-8")
    with pytest.raises(SourceMissingError):
        create_snapshot(file_source, backup_root / NAME)

    assert not backup_root.exists()


def test_create_snapshot_refuses_existing_destination(
    source_tree: Path,
    backup_root: Path,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)
    (source_tree / "new.txt").write_text("later", encoding="utf-8")

    with pytest.raises(CopyError, match="already exists"):
        create_snapshot(source_tree, backup_root / NAME)

    assert not (backup_root / NAME / "new.txt").exists()


def test_create_snapshot_wraps_copy_failures(
    source_tree: Path,
    backup_root: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _explode(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(shutil, "copytree", _explode)

    with pytest.raises(CopyError, match="denied"):
        create_snapshot(source_tree, backup_root / NAME)


def test_restore_round_trip_matches_source(
    source_tree: Path,
    backup_root: Path,
    tmp_path: Path,
    listing,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)
    target = tmp_path / "restored" / "deep" / "copy"

    restored = restore_snapshot(NAME, backup_root, target)

    assert restored == target
    assert listing(target) == listing(source_tree)


def test_restore_replaces_existing_target(
    source_tree: Path,
    backup_root: Path,
    tmp_path: Path,
    listing,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)
    target = tmp_path / "restore-here"
    target.mkdir()
    (target / "stale.txt").write_text("old", encoding="utf-8")

    restore_snapshot(NAME, backup_root, target)

    assert not (target / "stale.txt").exists()
    assert listing(target) == listing(source_tree)


def test_restore_replaces_file_target(
    source_tree: Path,
    backup_root: Path,
    tmp_path: Path,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)
    target = tmp_path / "restore.txt"
    target.write_text("file", encoding="utf-8")

    restore_snapshot(NAME, backup_root, target)

    assert target.is_dir()
    assert (target / "readme.txt").read_text(encoding="utf-8") == "hello\n"


def test_restore_unknown_snapshot_leaves_target_untouched(
    backup_root: Path,
    tmp_path: Path,
) -> None:
    backup_root.mkdir()
    target = tmp_path / "keep"
    target.mkdir()
    (target / "important.txt").write_text("keep me", encoding="utf-8")

    with pytest.raises(SnapshotNotFoundError):
        restore_snapshot("Backup_1999-01-01_00-00-00", backup_root, target)

    assert (target / "important.txt").read_text(encoding="utf-8") == "keep me"


@pytest.mark.parametrize(
    "name",
    ["../outside", "Backup_x/../../etc", "", ".", "..", "not-a-backup"],
)
def test_resolve_snapshot_path_rejects_non_snapshot_names(
    backup_root: Path,
    tmp_path: Path,
    name: str,
) -> None:
    backup_root.mkdir()
    (tmp_path / "outside").mkdir()
    (backup_root / "not-a-backup").mkdir()

    with pytest.raises(SnapshotNotFoundError):
        resolve_snapshot_path(name, backup_root)


def test_delete_snapshot_removes_tree(
    source_tree: Path,
    backup_root: Path,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)

    removed = delete_snapshot(NAME, backup_root)

    assert removed == backup_root / NAME
    assert not removed.exists()
    assert backup_root.is_dir()


def test_delete_snapshot_missing(backup_root: Path) -> None:
    backup_root.mkdir()

    with pytest.raises(SnapshotNotFoundError):
        delete_snapshot(NAME, backup_root)


def test_delete_snapshot_wraps_removal_failures(
    source_tree: Path,
    backup_root: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)

    def _explode(*args, **kwargs):
        raise PermissionError("in use")

    monkeypatch.setattr(shutil, "rmtree", _explode)

    with pytest.raises(DeleteError, match="in use"):
        delete_snapshot(NAME, backup_root)


@pytest.mark.parametrize(
    "target_for",
    [
        lambda root: root,
        lambda root: root.parent,
        lambda root: root / NAME,
        lambda root: root / NAME / "docs",
        lambda root: root / "restored",
    ],
    ids=["root", "root-parent", "snapshot", "inside-snapshot", "inside-root"],
)
def test_restore_refuses_targets_overlapping_backups(
    source_tree: Path,
    backup_root: Path,
    listing,
    target_for,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)
    create_snapshot(source_tree, backup_root / "Backup_2024-01-02_12-00-00")
    before = listing(backup_root)

    with pytest.raises(CopyError, match="overlaps backup storage"):
        restore_snapshot(NAME, backup_root, target_for(backup_root))

    assert listing(backup_root) == before
    assert listing(source_tree) == listing(backup_root / NAME)


def test_restore_refuses_target_reached_through_symlink(
    source_tree: Path,
    backup_root: Path,
    tmp_path: Path,
) -> None:
    create_snapshot(source_tree, backup_root / NAME)
    alias = tmp_path / "alias"
    alias.symlink_to(backup_root, target_is_directory=True)

    with pytest.raises(CopyError):
        restore_snapshot(NAME, backup_root, alias)

    assert (backup_root / NAME / "readme.txt").is_file()


def test_delete_snapshot_unlinks_symlinked_entry(
    source_tree: Path,
    backup_root: Path,
) -> None:
    backup_root.mkdir()
    link = backup_root / NAME
    link.symlink_to(source_tree, target_is_directory=True)

    removed = delete_snapshot(NAME, backup_root)

    assert removed == link
    assert not link.is_symlink()
    assert (source_tree / "readme.txt").is_file()
