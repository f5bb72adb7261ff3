"""Wait for active sessions to drain before a disruptive restart.

The loop polls the session count with a fixed interval between attempts:

1. Probe the server (attempt ``n``, starting at 1)
2. Zero sessions → ``DRAINED`` at attempt ``n``
3. Otherwise sleep ``sleep_interval``, move to attempt ``n + 1``
4. Once the attempt number exceeds ``max_attempts`` → ``FORCED``

So a run that never drains sleeps exactly ``max_attempts`` times and
probes ``max_attempts`` times before forcing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

from plex_updater.errors import RunCancelledError
from plex_updater.logging import get_logger
from plex_updater.models import DrainAttempt, DrainOutcome, DrainStatus

log = get_logger("plex_updater.drain")

SleepFunc = Callable[[float], Awaitable[None]]


class SessionCounter(Protocol):
    async def get_active_session_count(self) -> int: ...


class DrainScheduler:
    """Bounded, fixed-interval polling of the active session count."""

    def __init__(
        self,
        probe: SessionCounter,
        max_attempts: int = 12,
        sleep_interval: float = 300,
        sleep: SleepFunc = asyncio.sleep,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if sleep_interval <= 0:
            raise ValueError("sleep_interval must be > 0")
        self._probe = probe
        self._max_attempts = max_attempts
        self._sleep_interval = sleep_interval
        self._sleep = sleep
        self._stop_event = stop_event

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def sleep_interval(self) -> float:
        return self._sleep_interval

    async def wait_for_drain(self) -> DrainOutcome:
        """Poll until no sessions remain or the attempt budget is spent.

        Probe failures propagate as ``RetrievalError``. A set stop event is
        honoured only between attempts and raises ``RunCancelledError``.
        """
        attempt = 1
        self._check_stop(attempt)
        while True:
            count = await self._probe.get_active_session_count()

            if count == 0:
                log.info("drain_complete", attempt=attempt)
                return DrainOutcome(DrainStatus.DRAINED, attempts=attempt, last_session_count=0)

            record = DrainAttempt(attempt=attempt, session_count=count)
            log.info(
                "drain_attempt",
                attempt=record.attempt,
                active_sessions=record.session_count,
                sleep_seconds=self._sleep_interval,
                at=record.timestamp,
            )
            await self._sleep(self._sleep_interval)

            attempt += 1
            self._check_stop(attempt)
            if attempt > self._max_attempts:
                log.warning(
                    "drain_max_attempts_reached",
                    max_attempts=self._max_attempts,
                    active_sessions=count,
                )
                return DrainOutcome(
                    DrainStatus.FORCED,
                    attempts=self._max_attempts,
                    last_session_count=count,
                )

    def _check_stop(self, attempt: int) -> None:
        if self._stop_event is not None and self._stop_event.is_set():
            log.warning("drain_cancelled", attempt=attempt)
            raise RunCancelledError(f"Stop requested before drain attempt {attempt}")
