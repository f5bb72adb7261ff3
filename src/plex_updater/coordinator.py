"""Update coordinator: version check, drain wait, container restart.

Typical flow:
1. ``VersionSource.get_current_version()`` and ``get_latest_version()``
2. Equal versions → ``UP_TO_DATE``
3. ``DrainScheduler.wait_for_drain()`` until no one is watching
4. ``ContainerRestarter.restart()`` exactly once
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from plex_updater.drain import DrainScheduler, SessionCounter, SleepFunc
from plex_updater.errors import RestartActionError, RetrievalError, RunCancelledError
from plex_updater.logging import get_logger
from plex_updater.models import Channel, RestartOutcome, RunOutcome, RunStatus
from plex_updater.restart import ContainerRestarter
from plex_updater.sessions import SessionProbe
from plex_updater.versions import VersionSource

if TYPE_CHECKING:
    from plex_updater.config import Settings

log = get_logger("plex_updater.coordinator")


class VersionLookup(Protocol):
    async def get_current_version(self) -> str: ...

    async def get_latest_version(self, channel: Channel) -> str: ...


class Restarter(Protocol):
    @property
    def container(self) -> str: ...

    async def restart(self) -> RestartOutcome: ...


class UpdateCoordinator:
    """Runs one update check end to end and reports a ``RunOutcome``."""

    def __init__(
        self,
        settings: Settings,
        versions: VersionLookup,
        probe: SessionCounter,
        restarter: Restarter,
        sleep: SleepFunc = asyncio.sleep,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self._settings = settings
        self._versions = versions
        self._probe = probe
        self._restarter = restarter
        self._sleep = sleep
        self._stop_event = stop_event

    @classmethod
    def from_settings(
        cls, settings: Settings, stop_event: asyncio.Event | None = None
    ) -> UpdateCoordinator:
        """Wire the HTTP and docker collaborators from configuration."""
        versions = VersionSource(
            server_url=settings.server_url,
            token=settings.token,
            platform=settings.plex_platform,
            feed_url=settings.release_feed_url,
            timeout=settings.http_timeout,
        )
        probe = SessionProbe(
            server_url=settings.server_url,
            token=settings.token,
            timeout=settings.http_timeout,
        )
        restarter = ContainerRestarter(
            container=settings.container_name,
            docker_binary=settings.docker_binary,
            timeout=settings.restart_timeout,
        )
        return cls(settings, versions, probe, restarter, stop_event=stop_event)

    async def run(
        self,
        channel: Channel | None = None,
        max_attempts: int | None = None,
        sleep_interval: float | None = None,
    ) -> RunOutcome:
        """Check for an update and restart the container if one is available.

        Arguments left as None fall back to the configured values.
        """
        channel = channel or self._settings.plex_channel
        max_attempts = max_attempts or self._settings.max_attempts
        sleep_interval = sleep_interval or self._settings.sleep_interval

        outcome = RunOutcome(status=RunStatus.ABORTED)
        log.info("update_check_started", channel=channel.value)
        try:
            return await self._run(outcome, channel, max_attempts, sleep_interval)
        finally:
            outcome.completed_at = datetime.now().isoformat()
            log.info("update_check_completed", **outcome.to_dict())

    async def _run(
        self,
        outcome: RunOutcome,
        channel: Channel,
        max_attempts: int,
        sleep_interval: float,
    ) -> RunOutcome:
        try:
            outcome.current_version = await self._versions.get_current_version()
        except RetrievalError as exc:
            return self._abort(outcome, "current_version_unavailable", exc)
        log.info("current_version", version=outcome.current_version)

        try:
            outcome.latest_version = await self._versions.get_latest_version(channel)
        except RetrievalError as exc:
            return self._abort(outcome, "latest_version_unavailable", exc)
        log.info("latest_version", version=outcome.latest_version, channel=channel.value)

        if outcome.current_version == outcome.latest_version:
            outcome.status = RunStatus.UP_TO_DATE
            log.info("up_to_date", version=outcome.current_version)
            return outcome

        log.info(
            "update_available",
            current=outcome.current_version,
            latest=outcome.latest_version,
        )

        scheduler = DrainScheduler(
            self._probe,
            max_attempts=max_attempts,
            sleep_interval=sleep_interval,
            sleep=self._sleep,
            stop_event=self._stop_event,
        )
        try:
            outcome.drain = await scheduler.wait_for_drain()
        except (RetrievalError, RunCancelledError) as exc:
            return self._abort(outcome, "drain_aborted", exc)

        if outcome.drain.forced:
            log.warning("forcing_restart", attempts=outcome.drain.attempts)
        else:
            log.info("no_active_sessions", attempts=outcome.drain.attempts)

        log.info("restarting_container", container=self._restarter.container)
        outcome.restart = await self._restarter.restart()
        outcome.status = RunStatus.RESTARTED

        if outcome.restart.output:
            log.info("restart_output", output=outcome.restart.output)

        if outcome.restart.succeeded:
            log.info("container_restarted", container=outcome.restart.container)
        else:
            error = RestartActionError(outcome.restart.reason or "restart failed")
            outcome.error = f"{type(error).__name__}: {error}"
            log.error(
                "restart_failed",
                container=outcome.restart.container,
                returncode=outcome.restart.returncode,
                reason=outcome.restart.reason,
            )
        return outcome

    @staticmethod
    def _abort(outcome: RunOutcome, event: str, exc: Exception) -> RunOutcome:
        outcome.status = RunStatus.ABORTED
        outcome.error = f"{type(exc).__name__}: {exc}"
        log.error(event, error=str(exc))
        return outcome
