"""Single-instance run lock.

Overlapping cron invocations must not both reach the restart step, so each
run holds an exclusive ``flock`` on a pid file for its whole duration.
"""

from __future__ import annotations

import fcntl
import os
from pathlib import Path
from types import TracebackType
from typing import IO

from plex_updater.errors import LockHeldError
from plex_updater.logging import get_logger

log = get_logger("plex_updater.lock")


class RunLock:
    """Non-blocking exclusive lock on a pid file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._fd: IO[str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        """Take the lock or raise ``LockHeldError`` if another run holds it."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # "a+" so every opener shares the inode; flock is per inode
        fd = open(self._path, "a+", encoding="utf-8")  # noqa: SIM115
        try:
            fcntl.flock(fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            fd.close()
            raise LockHeldError(f"Another update check holds {self._path}") from exc

        fd.seek(0)
        fd.truncate()
        fd.write(str(os.getpid()))
        fd.flush()
        self._fd = fd
        log.debug("run_lock_acquired", path=str(self._path))

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd.fileno(), fcntl.LOCK_UN)
        finally:
            self._fd.close()
            self._fd = None
        log.debug("run_lock_released", path=str(self._path))

    def __enter__(self) -> RunLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
