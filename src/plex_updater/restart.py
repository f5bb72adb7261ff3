"""Container restart action.

The only subprocess call in the package: ``docker restart <container>``.
One attempt, no retries. The command output is returned verbatim so the
caller can log it.
"""

from __future__ import annotations

import asyncio

from plex_updater.errors import RestartActionError
from plex_updater.logging import get_logger
from plex_updater.models import RestartOutcome

log = get_logger("plex_updater.restart")


class ContainerRestarter:
    """Restarts a Docker container through the docker CLI."""

    def __init__(self, container: str, docker_binary: str = "docker", timeout: int = 120) -> None:
        self._container = container
        self._docker = docker_binary
        self._timeout = timeout

    @property
    def container(self) -> str:
        return self._container

    async def restart(self) -> RestartOutcome:
        """Restart the container and report the outcome.

        Never raises for a failed restart; the failure is carried in the
        returned ``RestartOutcome``.
        """
        try:
            returncode, output = await self._run(self._docker, "restart", self._container)
        except RestartActionError as exc:
            return RestartOutcome(succeeded=False, container=self._container, reason=str(exc))

        if returncode != 0:
            return RestartOutcome(
                succeeded=False,
                container=self._container,
                returncode=returncode,
                output=output,
                reason=f"docker restart exited with status {returncode}",
            )
        return RestartOutcome(
            succeeded=True,
            container=self._container,
            returncode=returncode,
            output=output,
        )

    async def _run(self, *args: str) -> tuple[int, str]:
        """Run a command with stderr folded into stdout."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            log.warning("restart_cmd_error", cmd=" ".join(args), error=str(exc))
            raise RestartActionError(f"Could not run {args[0]}: {exc}") from exc

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except TimeoutError as exc:
            proc.kill()
            await proc.wait()
            log.warning("restart_cmd_timeout", cmd=" ".join(args), timeout=self._timeout)
            raise RestartActionError(
                f"docker restart timed out after {self._timeout}s"
            ) from exc

        return proc.returncode or 0, stdout.decode(errors="replace")
