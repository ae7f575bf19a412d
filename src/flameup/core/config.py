"""Configuration model and loaders for :mod:`flameup`."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, ValidationError, field_validator

from flameup.core.logging import normalize_level
from flameup.errors import ConfigError
from flameup.resources import get_resource

__all__ = [
    "BackupConfig",
    "DEFAULTS_RESOURCE_NAME",
    "ENV_VARIABLES",
    "env_overrides",
    "load_config",
    "load_packaged_defaults",
    "read_packaged_defaults_text",
    "render_config",
]


class BackupConfig(BaseModel):
    """Validated, immutable settings for one ``flameup`` invocation.

    Example:
        >>> config = BackupConfig(max_backups=3)
        >>> config.interval.total_seconds()
        1800.0
    """

    source_path: Path | None = Field(
        default=None,
        description="Source directory; overrides the source path file.",
    )
    config_file: Path = Field(
        default=Path("paths.txt"),
        description="Line-oriented file naming the source directory.",
    )
    backup_root: Path = Field(
        default=Path("CopiedFiles"),
        description="Directory holding every snapshot.",
    )
    max_backups: int = Field(
        default=10,
        ge=1,
        description="Number of snapshots retained after each backup.",
    )
    interval_minutes: int = Field(
        default=30,
        ge=1,
        description="Minutes between backup cycles in daemon mode.",
    )
    verbose: bool = Field(
        default=False,
        description="Report progress and evictions.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level for the application runtime.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for the rotating JSON log file.",
    )
    daemon: bool = False
    instant: bool = False
    list_backups: bool = False
    restore_name: str | None = None
    restore_to: Path | None = None
    delete_name: str | None = None

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalize_level(value)
        return value.upper()

    @field_validator("source_path", "log_dir", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def interval(self) -> timedelta:
        """Return the daemon cycle interval."""

        return timedelta(minutes=self.interval_minutes)

    @property
    def effective_log_level(self) -> str:
        """Return the log level, raised to INFO when verbose."""

        if self.verbose and normalize_level(self.log_level) > normalize_level(
            "INFO"
        ):
            return "INFO"
        return self.log_level


DEFAULTS_RESOURCE_NAME = "flameup.defaults.toml"

ENV_VARIABLES: Mapping[str, str] = {
    "FLAMEUP_CONFIG": "config_file",
    "FLAMEUP_OUTPUT": "backup_root",
    "FLAMEUP_MAX_BACKUPS": "max_backups",
    "FLAMEUP_INTERVAL": "interval_minutes",
    "FLAMEUP_LOG_LEVEL": "log_level",
    "FLAMEUP_LOG_DIR": "log_dir",
}


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content.

    Example:
        >>> text = read_packaged_defaults_text()
        >>> text.startswith("#")
        True
    """

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["max_backups"]
        10
    """

    text = read_packaged_defaults_text()
    data: dict[str, Any] = tomllib.loads(text)
    return data


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect configuration overrides from ``FLAMEUP_*`` variables."""

    source = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for variable, key in ENV_VARIABLES.items():
        value = source.get(variable)
        if value:
            overrides[key] = value
    return overrides


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "config"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def load_config(
    *,
    defaults: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> BackupConfig:
    """Load configuration according to the precedence stack.

    Args:
        defaults: Packaged defaults; loaded from the package when omitted.
        env_config: Settings derived from environment variables.
        cli_overrides: Settings supplied via CLI flags. ``None`` values are
            treated as "not provided".

    Returns:
        A validated :class:`BackupConfig` instance.

    Raises:
        ConfigError: If the merged values fail validation.
    """

    stack = dict(load_packaged_defaults() if defaults is None else defaults)
    stack.update(env_config or {})
    stack.update(
        (key, value)
        for key, value in (cli_overrides or {}).items()
        if value is not None
    )

    try:
        return BackupConfig(**stack)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration: {_describe_validation_error(exc)}"
        ) from exc
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def render_config(config: BackupConfig) -> str:
    """Render the effective settings as a TOML document.

    Example:
        >>> "max_backups = 10" in render_config(BackupConfig())
        True
    """

    document = tomlkit.document()
    document.add(tomlkit.comment("Effective flameup configuration"))
    document.add(
        tomlkit.comment("Precedence: CLI flags > FLAMEUP_* env vars > defaults")
    )
    document.add(tomlkit.nl())

    if config.source_path is not None:
        document["source_path"] = str(config.source_path)
    document["config_file"] = str(config.config_file)
    document["backup_root"] = str(config.backup_root)
    document["max_backups"] = config.max_backups
    document["interval_minutes"] = config.interval_minutes
    document["verbose"] = config.verbose
    document["log_level"] = config.log_level
    if config.log_dir is not None:
        document["log_dir"] = str(config.log_dir)

    return tomlkit.dumps(document)
