"""Snapshot naming helpers.

Snapshot directories are named ``Backup_<YYYY>-<MM>-<DD>_<HH>-<MM>-<SS>``
from the local wall-clock time. Every field is zero padded to a fixed
width, so plain string comparison on names matches chronological order.

Two snapshots created within the same second map to the same name; the
create operation refuses to reuse an existing directory, so the second
attempt fails instead of merging into the first.

Example:
    >>> from datetime import datetime
    >>> make_name(datetime(2024, 1, 2, 3, 4, 5))
    'Backup_2024-01-02_03-04-05'
    >>> is_snapshot_name("Backup_2024-01-02_03-04-05")
    True
"""

from __future__ import annotations

from datetime import datetime

from flameup.errors import ClockError

__all__ = [
    "SNAPSHOT_PREFIX",
    "TIMESTAMP_FORMAT",
    "is_snapshot_name",
    "local_now",
    "make_name",
    "parse_name",
]

SNAPSHOT_PREFIX = "Backup_"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

# %Y only renders four digits for these years on every platform.
_MIN_YEAR = 1000
_MAX_YEAR = 9999


def local_now() -> datetime:
    """Return the current local time truncated to whole seconds.

    Raises:
        ClockError: If the platform cannot convert the clock to local time.
    """

    try:
        return datetime.now().astimezone().replace(microsecond=0)
    except (OSError, OverflowError, ValueError) as exc:
        raise ClockError(f"Cannot read local time: {exc}") from exc


def make_name(now: datetime) -> str:
    """Return the snapshot name for ``now``.

    Args:
        now: Local wall-clock timestamp of the snapshot.

    Returns:
        Fixed-width snapshot name carrying the ``Backup_`` prefix.

    Raises:
        ClockError: If ``now`` cannot be rendered at fixed width.
    """

    if not _MIN_YEAR <= now.year <= _MAX_YEAR:
        raise ClockError(
            f"Timestamp year {now.year} cannot be encoded in a snapshot name."
        )
    try:
        stamp = now.strftime(TIMESTAMP_FORMAT)
    except (OverflowError, ValueError) as exc:
        raise ClockError(f"Cannot format timestamp {now!r}: {exc}") from exc
    return f"{SNAPSHOT_PREFIX}{stamp}"


def is_snapshot_name(name: str) -> bool:
    """Return ``True`` when ``name`` belongs in the snapshot catalog."""

    return name.startswith(SNAPSHOT_PREFIX)


def parse_name(name: str) -> datetime | None:
    """Return the timestamp encoded in ``name`` or ``None``.

    Example:
        >>> parse_name("Backup_2024-01-02_03-04-05").day
        2
        >>> parse_name("Backup_manual") is None
        True
    """

    if not is_snapshot_name(name):
        return None
    try:
        return datetime.strptime(name[len(SNAPSHOT_PREFIX) :], TIMESTAMP_FORMAT)
    except ValueError:
        return None
