"""Tests for :mod:`flameup.core.paths`."""

from __future__ import annotations

from pathlib import Path

import pytest

from flameup.core.config import BackupConfig
from flameup.core.paths import (
    ensure_backup_root,
    parse_source_line,
    read_source_path,
    resolve_source_path,
)
from flameup.errors import ConfigError


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("/srv/data", "/srv/data"),
        ("  C:\\MyFiles \t", "C:\\MyFiles"),
        ("", None),
        ("   ", None),
        ("# comment", None),
        ("  // comment", None),
        ("-- comment", None),
    ],
)
def test_parse_source_line(line: str, expected: str | None) -> None:
    assert parse_source_line(line) == expected


def test_read_source_path_returns_first_valid_line(tmp_path: Path) -> None:
    config_file = tmp_path / "paths.txt"
    config_file.write_text(
        "\n# where to back up from\n\t/srv/first  \n/srv/second\n",
        encoding="utf-8",
    )

    assert read_source_path(config_file) == Path("/srv/first")


def test_read_source_path_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot open config file"):
        read_source_path(tmp_path / "absent.txt")


def test_read_source_path_only_comments(tmp_path: Path) -> None:
    config_file = tmp_path / "paths.txt"
    config_file.write_text("# nothing\n// here\n\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="No valid path found"):
        read_source_path(config_file)


def test_resolve_source_path_prefers_override(tmp_path: Path) -> None:
    config = BackupConfig(
        source_path=tmp_path / "override",
        config_file=tmp_path / "does-not-matter.txt",
    )

    assert resolve_source_path(config) == tmp_path / "override"


def test_resolve_source_path_falls_back_to_file(tmp_path: Path) -> None:
    config_file = tmp_path / "paths.txt"
    config_file.write_text(str(tmp_path / "from-file"), encoding="utf-8")

    config = BackupConfig(config_file=config_file)

    assert resolve_source_path(config) == tmp_path / "from-file"


def test_ensure_backup_root_creates_once(tmp_path: Path) -> None:
    root = tmp_path / "nested" / "CopiedFiles"

    assert ensure_backup_root(root) is True
    assert root.is_dir()
    assert ensure_backup_root(root) is False


def test_ensure_backup_root_rejects_files(tmp_path: Path) -> None:
    root = tmp_path / "CopiedFiles"
    root.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ConfigError):
        ensure_backup_root(root)
