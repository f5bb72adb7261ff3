"""Data models for a single update-check run.

Everything here is transient: created fresh for each run and discarded
when it ends. All models are plain dataclasses with ``to_dict`` for
structured logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

# Opaque build identifier, compared for equality only
VersionIdentifier = str


class Channel(Enum):
    """Release track selector."""

    STABLE = "stable"
    BETA = "beta"

    @property
    def feed_value(self) -> str:
        """Value the plex.tv downloads feed expects for ``channel=``."""
        return _FEED_VALUES[self]

    @property
    def requires_token(self) -> bool:
        return self is Channel.BETA

    @classmethod
    def parse(cls, value: str | Channel) -> Channel:
        """Accept ``stable``/``beta`` as well as ``public``/``plexpass``."""
        if isinstance(value, Channel):
            return value
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown channel: {value!r}")


_FEED_VALUES = {Channel.STABLE: "public", Channel.BETA: "plexpass"}
_ALIASES = {
    "stable": Channel.STABLE,
    "public": Channel.STABLE,
    "beta": Channel.BETA,
    "plexpass": Channel.BETA,
}


class DrainStatus(Enum):
    """Terminal state of the drain loop."""

    DRAINED = "drained"
    FORCED = "forced"


class RunStatus(Enum):
    """Terminal state of a coordinator run."""

    UP_TO_DATE = "up_to_date"
    ABORTED = "aborted"
    RESTARTED = "restarted"


class ExitCode(IntEnum):
    """Process exit statuses for automation."""

    OK = 0
    ABORTED = 1
    RESTART_FAILED = 2


@dataclass(frozen=True)
class DrainAttempt:
    """One polling cycle that still saw active sessions."""

    attempt: int
    session_count: int
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass(frozen=True)
class DrainOutcome:
    """How the drain loop ended."""

    status: DrainStatus
    attempts: int
    last_session_count: int

    @property
    def forced(self) -> bool:
        return self.status is DrainStatus.FORCED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "attempts": self.attempts,
            "last_session_count": self.last_session_count,
        }


@dataclass(frozen=True)
class RestartOutcome:
    """Result of invoking the container restart command."""

    succeeded: bool
    container: str
    returncode: int | None = None
    output: str = ""
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "container": self.container,
            "returncode": self.returncode,
            "reason": self.reason,
        }


@dataclass
class RunOutcome:
    """Structured report of one coordinator run."""

    status: RunStatus
    current_version: VersionIdentifier | None = None
    latest_version: VersionIdentifier | None = None
    drain: DrainOutcome | None = None
    restart: RestartOutcome | None = None
    error: str | None = None
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    completed_at: str | None = None

    @property
    def restart_failed(self) -> bool:
        return self.restart is not None and not self.restart.succeeded

    def exit_code(self, fail_on_restart_error: bool = True) -> ExitCode:
        """Map the outcome to a process exit status."""
        if self.status is RunStatus.ABORTED:
            return ExitCode.ABORTED
        if self.restart_failed and fail_on_restart_error:
            return ExitCode.RESTART_FAILED
        return ExitCode.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "current_version": self.current_version,
            "latest_version": self.latest_version,
            "drain": self.drain.to_dict() if self.drain else None,
            "restart": self.restart.to_dict() if self.restart else None,
            "error": self.error,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }
