"""Main entry point for plex_updater: run one update check."""

from __future__ import annotations

import asyncio
import signal
import sys

from plex_updater.config import Settings, get_settings
from plex_updater.coordinator import UpdateCoordinator
from plex_updater.errors import ConfigurationError, LockHeldError
from plex_updater.lock import RunLock
from plex_updater.logging import get_logger, setup_logging
from plex_updater.models import ExitCode

log = get_logger("plex_updater.main")


def _install_stop_handlers(stop_event: asyncio.Event) -> list[signal.Signals]:
    """Set *stop_event* on SIGINT/SIGTERM so the drain loop can stop cleanly."""
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError, ValueError):
            log.debug("signal_handler_unavailable", signal=sig.name)
        else:
            installed.append(sig)
    return installed


async def main(settings: Settings) -> ExitCode:
    """Run one update check under the single-instance lock."""
    try:
        settings.validate_for_run()
    except ConfigurationError as exc:
        log.error("configuration_error", error=str(exc))
        return ExitCode.ABORTED

    lock = RunLock(settings.lock_file)
    try:
        lock.acquire()
    except LockHeldError as exc:
        log.error("update_check_already_running", error=str(exc))
        return ExitCode.ABORTED

    stop_event = asyncio.Event()
    installed = _install_stop_handlers(stop_event)
    try:
        coordinator = UpdateCoordinator.from_settings(settings, stop_event=stop_event)
        outcome = await coordinator.run()
    finally:
        loop = asyncio.get_running_loop()
        for sig in installed:
            loop.remove_signal_handler(sig)
        lock.release()

    return outcome.exit_code(settings.fail_on_restart_error)


def run() -> None:
    """Run the application and exit with the outcome's status."""
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(ExitCode.ABORTED)

    setup_logging(settings)
    sys.exit(asyncio.run(main(settings)))


if __name__ == "__main__":
    run()
