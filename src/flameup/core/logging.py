"""Logging helpers for :mod:`flameup`.

Events flow through structlog into the standard library root logger, which
fans them out to a Rich console handler on stderr and, when a log directory
is configured, to a JSON file rotated nightly with gzip compression.
"""

from __future__ import annotations

import gzip
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import shutil
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
import structlog

Logger = structlog.stdlib.BoundLogger

LOG_FILENAME = "flameup.log"
_ARCHIVE_DAYS = 7


def normalize_level(level: str) -> int:
    """Return the numeric level for a case-insensitive level name.

    Example:
        >>> normalize_level("info")
        20

    Raises:
        ValueError: If the level name is not recognized.
    """

    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unsupported log level: {level!r}")
    return value


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _formatted(
    handler: logging.Handler,
    level: int,
    renderer: Any,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_pre_chain(),
        )
    )
    return handler


def _compress_archive(source: str, dest: str) -> None:
    src_path = Path(source)
    with src_path.open("rb") as raw, gzip.open(dest, "wb") as packed:
        shutil.copyfileobj(raw, packed)
    src_path.unlink(missing_ok=True)


def _console_handler(level: int, console: Console | None) -> logging.Handler:
    handler = RichHandler(
        console=console if console is not None else Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        enable_link_path=False,
        log_time_format="%H:%M:%S",
    )
    return _formatted(handler, level, structlog.dev.ConsoleRenderer(colors=False))


def _file_handler(log_dir: Path, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        log_dir / LOG_FILENAME,
        when="midnight",
        utc=True,
        backupCount=_ARCHIVE_DAYS,
        encoding="utf-8",
        delay=True,
    )
    handler.suffix = "%Y-%m-%d"
    handler.namer = lambda default_name: default_name + ".gz"
    handler.rotator = _compress_archive
    return _formatted(
        handler,
        level,
        structlog.processors.JSONRenderer(sort_keys=True),
    )


def _swap_root_handlers(
    root: logging.Logger,
    handlers: list[logging.Handler],
) -> None:
    for stale in list(root.handlers):
        root.removeHandler(stale)
        stale.close()
    for handler in handlers:
        root.addHandler(handler)


def configure_logging(
    *,
    level: str = "WARNING",
    log_dir: str | Path | None = None,
    console: Console | None = None,
) -> None:
    """Route structlog events to the console and an optional log file.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        level: Level name applied to the root logger and every handler.
        log_dir: Directory receiving ``flameup.log``; no file is written when
            omitted.
        console: Rich console override, mostly useful in tests.

    Raises:
        ValueError: If ``level`` is not a recognized level name.

    Example:
        >>> from pathlib import Path
        >>> target = Path("/tmp/flameup-log-example")
        >>> configure_logging(level="debug", log_dir=target)
        >>> get_logger(__name__).info("configured", example=True)
        >>> (target / "flameup.log").exists()
        True
    """

    numeric = normalize_level(level)

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers = [_console_handler(numeric, console)]
    if log_dir is not None:
        directory = Path(log_dir).expanduser().resolve(strict=False)
        handlers.append(_file_handler(directory, numeric))

    root = logging.getLogger()
    root.setLevel(numeric)
    _swap_root_handlers(root, handlers)
    logging.captureWarnings(True)


def get_logger(name: str | None = None, **initial_context: Any) -> Logger:
    """Return a structlog logger with ``initial_context`` already bound.

    Example:
        >>> logger = get_logger(__name__, component="scheduler")
        >>> isinstance(logger, structlog.stdlib.BoundLogger)
        True
    """

    return structlog.get_logger(name).bind(**initial_context)


__all__ = [
    "LOG_FILENAME",
    "Logger",
    "configure_logging",
    "get_logger",
    "normalize_level",
]
