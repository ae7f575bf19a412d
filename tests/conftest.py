"""Shared pytest fixtures for snapshot lifecycle tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from flameup.core.config import ENV_VARIABLES


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # pragma: no cover
            pass


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Ensure each test runs with a clean logging configuration."""

    _clear_root_handlers()
    yield
    _clear_root_handlers()


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ``FLAMEUP_*`` variables inherited from the developer shell."""

    for variable in ENV_VARIABLES:
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Create a small source directory with nested content."""

    source = tmp_path / "source"
    (source / "docs" / "drafts").mkdir(parents=True)
    (source / "empty").mkdir()
    (source / "readme.txt").write_text("hello\n", encoding="utf-8")
    (source / "docs" / "notes.md").write_text("# notes\n", encoding="utf-8")
    (source / "docs" / "drafts" / "v1.bin").write_bytes(b"\x00\x01\x02\x03")
    return source


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    """Return a backup root path that does not exist yet."""

    return tmp_path / "CopiedFiles"


@pytest.fixture
def seed_snapshots(backup_root: Path) -> Callable[..., list[Path]]:
    """Create empty-ish snapshot directories with the given names."""

    def _seed(*names: str) -> list[Path]:
        created = []
        for name in names:
            path = backup_root / name
            path.mkdir(parents=True)
            (path / "marker.txt").write_text(name, encoding="utf-8")
            created.append(path)
        return created

    return _seed


def tree_listing(root: Path) -> dict[str, bytes | None]:
    """Map relative paths to file contents (``None`` for directories)."""

    listing: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root).as_posix()
        listing[relative] = None if path.is_dir() else path.read_bytes()
    return listing


class RecordingLogger:
    """Stand-in for a bound structlog logger that records calls."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def bind(self, **_: Any) -> "RecordingLogger":
        return self

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.events.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)

    def named(self, event: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [entry for entry in self.events if entry[1] == event]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def listing() -> Callable[[Path], dict[str, bytes | None]]:
    """Expose :func:`tree_listing` to tests."""

    return tree_listing
