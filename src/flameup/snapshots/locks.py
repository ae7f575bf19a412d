"""Lock file guarding a backup root against concurrent writers."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path

from flameup.errors import LockError

__all__ = [
    "LOCK_FILENAME",
    "RootLock",
    "build_lock_path",
]

LOCK_FILENAME = ".flameup.lock"


def _pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True


@dataclass(slots=True)
class RootLock:
    """Lock file carrying the owner PID, with timeout semantics.

    A lock left behind by a process that no longer exists is reclaimed. The
    file is only removed if it is still the same file, with the same owner,
    that was judged stale, so a lock freshly taken by another instance in
    the meantime survives.
    """

    path: Path
    timeout: float = 0.0
    poll_interval: float = 0.1
    _handle: int | None = field(init=False, default=None, repr=False)

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        """Acquire the lock, waiting up to ``timeout`` seconds."""

        if self._handle is not None:
            return

        deadline = time.monotonic() + max(self.timeout, 0.0)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LockError(
                f"Failed preparing lock directory for {self.path}: {exc}"
            ) from exc

        while True:
            try:
                handle = os.open(
                    self.path,
                    os.O_CREAT | os.O_EXCL | os.O_WRONLY,
                )
            except FileExistsError:
                if self._reclaim_stale():
                    continue
                if time.monotonic() >= deadline:
                    owner = self._read_owner()
                    detail = f" (held by pid {owner})" if owner else ""
                    raise LockError(
                        f"Backup root is locked by another instance{detail}: "
                        f"{self.path}"
                    ) from None
                time.sleep(self.poll_interval)
                continue
            except OSError as exc:  # pragma: no cover - surfaced at runtime
                raise LockError(
                    f"Failed acquiring lock at {self.path}: {exc}"
                ) from exc

            os.write(handle, str(os.getpid()).encode("ascii"))
            self._handle = handle
            return

    def release(self) -> None:
        """Release the lock if held."""

        handle = self._handle
        if handle is None:
            return

        try:
            os.close(handle)
        finally:
            self._handle = None
            try:
                self.path.unlink()
            except FileNotFoundError:  # pragma: no cover - best effort cleanup
                pass
            except OSError as exc:  # pragma: no cover - surfaced at runtime
                raise LockError(
                    f"Failed removing lock at {self.path}: {exc}"
                ) from exc

    def _read_owner(self) -> int | None:
        try:
            raw = self.path.read_text(encoding="ascii").strip()
        except (OSError, UnicodeDecodeError):
            return None
        return int(raw) if raw.isdigit() else None

    def _identity(self) -> tuple[int, int] | None:
        try:
            stat = self.path.stat()
        except OSError:
            return None
        return stat.st_dev, stat.st_ino

    def _reclaim_stale(self) -> bool:
        identity = self._identity()
        if identity is None:
            return True
        owner = self._read_owner()
        if owner is None or _pid_alive(owner):
            return False
        # Another instance may have replaced the stale file meanwhile.
        if self._identity() != identity or self._read_owner() != owner:
            return False
        try:
            self.path.unlink()
        except FileNotFoundError:
            return True
        except OSError:
            return False
        return True

    def __enter__(self) -> "RootLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def build_lock_path(backup_root: Path) -> Path:
    """Return the lock file path for ``backup_root``."""

    return Path(backup_root) / LOCK_FILENAME
