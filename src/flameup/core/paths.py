"""Source and backup-root path helpers for :mod:`flameup`."""

from __future__ import annotations

from pathlib import Path

from flameup.core.config import BackupConfig
from flameup.errors import ConfigError

__all__ = [
    "COMMENT_PREFIXES",
    "ensure_backup_root",
    "parse_source_line",
    "read_source_path",
    "resolve_source_path",
]

COMMENT_PREFIXES = ("#", "//", "--")


def parse_source_line(line: str) -> str | None:
    """Return the trimmed path on ``line`` or ``None`` for blanks/comments.

    Example:
        >>> parse_source_line("  /srv/data  ")
        '/srv/data'
        >>> parse_source_line("// old location") is None
        True
    """

    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIXES):
        return None
    return stripped


def read_source_path(config_file: Path) -> Path:
    """Return the source directory named in ``config_file``.

    The first non-blank line that is not a comment wins.

    Raises:
        ConfigError: If the file cannot be read or holds no path.
    """

    config_file = Path(config_file)
    try:
        text = config_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot open config file: {config_file}") from exc

    for line in text.splitlines():
        candidate = parse_source_line(line)
        if candidate is not None:
            return Path(candidate).expanduser()

    raise ConfigError(f"No valid path found in file: {config_file}")


def resolve_source_path(config: BackupConfig) -> Path:
    """Return the source directory, preferring the explicit override."""

    if config.source_path is not None:
        return config.source_path.expanduser()
    return read_source_path(config.config_file)


def ensure_backup_root(backup_root: Path) -> bool:
    """Create ``backup_root`` if needed; return ``True`` when created.

    Raises:
        ConfigError: If the path exists as a file or cannot be created.
    """

    root = Path(backup_root)
    if root.is_dir():
        return False
    if root.exists():
        raise ConfigError(f"Backup root is not a directory: {root}")
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Cannot create backup root {root}: {exc}") from exc
    return True
