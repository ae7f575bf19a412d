"""Fixed-interval scheduler driving repeated backup cycles.

Deadlines are anchored on the start of each cycle (``start + interval``)
rather than on its end, so per-cycle overhead does not accumulate as drift.
A cycle that overruns the interval is followed immediately by the next one,
with no catch-up for the missed slot.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import Callable, Protocol

from flameup.core.logging import Logger, get_logger
from flameup.errors import FlameUpError

__all__ = [
    "BackupScheduler",
    "CycleReport",
    "SchedulerState",
    "next_deadline",
    "seconds_until",
]


class CycleOutcome(Protocol):
    """Minimal view of an operation result consumed by the scheduler."""

    ok: bool
    message: str


class SchedulerState(StrEnum):
    """Lifecycle states of :class:`BackupScheduler`."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class CycleReport:
    """Summary of one scheduler cycle."""

    index: int
    started_at: float
    deadline: float
    ok: bool
    waited: float
    message: str = ""


def next_deadline(started_at: float, interval_seconds: float) -> float:
    """Return the instant the next cycle is due.

    Example:
        >>> next_deadline(100.0, 60.0)
        160.0
    """

    return started_at + interval_seconds


def seconds_until(deadline: float, now: float) -> float:
    """Return the time left before ``deadline``, never negative.

    Example:
        >>> seconds_until(160.0, 170.0)
        0.0
    """

    return max(0.0, deadline - now)


class BackupScheduler:
    """Run ``cycle`` every ``interval`` until the process is stopped."""

    def __init__(
        self,
        cycle: Callable[[], CycleOutcome],
        interval: timedelta,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        logger: Logger | None = None,
    ) -> None:
        if interval.total_seconds() <= 0:
            raise ValueError("Scheduler interval must be positive.")
        self._cycle = cycle
        self._interval = interval.total_seconds()
        self._clock = clock
        self._sleep = sleep
        self._logger = logger or get_logger(__name__, component="scheduler")
        self._state = SchedulerState.IDLE
        self._cycles = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def cycles(self) -> int:
        return self._cycles

    def run_cycle(self) -> CycleReport:
        """Run one backup, then wait until the next deadline."""

        index = self._cycles
        started_at = self._clock()
        log = self._logger.bind(cycle=index)
        log.info("cycle-started")

        try:
            outcome = self._cycle()
        except FlameUpError as exc:
            ok, message = False, str(exc)
        else:
            ok, message = outcome.ok, outcome.message

        minutes = self._interval / 60
        if ok:
            log.info("cycle-completed")
        else:
            log.warning(
                "cycle-failed",
                error=message,
                retry_in_minutes=round(minutes, 2),
            )

        deadline = next_deadline(started_at, self._interval)
        wait = seconds_until(deadline, self._clock())
        if wait > 0:
            log.info("cycle-waiting", seconds=round(wait, 3))
            self._sleep(wait)

        self._cycles += 1
        return CycleReport(
            index=index,
            started_at=started_at,
            deadline=deadline,
            ok=ok,
            waited=wait,
            message=message,
        )

    def run(self, *, max_cycles: int | None = None) -> None:
        """Loop until interrupted, or for ``max_cycles`` cycles when set."""

        self._state = SchedulerState.RUNNING
        self._logger.info(
            "scheduler-started",
            interval_seconds=self._interval,
        )
        while max_cycles is None or self._cycles < max_cycles:
            self.run_cycle()
