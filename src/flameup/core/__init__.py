"""Core utilities shared across :mod:`flameup` modules.

The core namespace holds configuration loading, logging setup, and path
resolution so the snapshot modules stay focused on the filesystem work.

Example:
    >>> from flameup.core import BackupConfig
    >>> BackupConfig().backup_root.name
    'CopiedFiles'
"""

from __future__ import annotations

from .config import BackupConfig, load_config, render_config
from .logging import configure_logging, get_logger
from .paths import ensure_backup_root, read_source_path, resolve_source_path

__all__ = [
    "BackupConfig",
    "configure_logging",
    "ensure_backup_root",
    "get_logger",
    "load_config",
    "read_source_path",
    "render_config",
    "resolve_source_path",
]
