"""Tests for plex_updater.restart — the docker restart action."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from plex_updater.restart import ContainerRestarter


def _mock_proc(returncode: int = 0, output: bytes = b"plex\n") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(output, None))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestContainerRestarter:
    """Tests for ContainerRestarter.restart()."""

    async def test_success(self) -> None:
        proc = _mock_proc(0, b"plex\n")
        with patch(
            "asyncio.create_subprocess_exec", new_callable=AsyncMock, return_value=proc
        ) as exec_mock:
            outcome = await ContainerRestarter("plex").restart()

        assert outcome.succeeded is True
        assert outcome.container == "plex"
        assert outcome.returncode == 0
        assert outcome.output == "plex\n"
        assert outcome.reason is None
        assert exec_mock.await_args.args == ("docker", "restart", "plex")
        assert exec_mock.await_args.kwargs["stderr"] == asyncio.subprocess.STDOUT

    async def test_custom_binary(self) -> None:
        proc = _mock_proc()
        with patch(
            "asyncio.create_subprocess_exec", new_callable=AsyncMock, return_value=proc
        ) as exec_mock:
            await ContainerRestarter("media", docker_binary="/usr/local/bin/docker").restart()

        assert exec_mock.await_args.args == ("/usr/local/bin/docker", "restart", "media")

    async def test_non_zero_exit_is_failure_with_output(self) -> None:
        proc = _mock_proc(1, b"Error response from daemon: No such container: plex\n")
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock, return_value=proc):
            outcome = await ContainerRestarter("plex").restart()

        assert outcome.succeeded is False
        assert outcome.returncode == 1
        assert "No such container" in outcome.output
        assert "status 1" in (outcome.reason or "")

    async def test_missing_binary_is_failure(self) -> None:
        with patch(
            "asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=FileNotFoundError("docker"),
        ):
            outcome = await ContainerRestarter("plex").restart()

        assert outcome.succeeded is False
        assert outcome.returncode is None
        assert "Could not run docker" in (outcome.reason or "")

    async def test_timeout_kills_process(self) -> None:
        async def _hang() -> tuple[bytes, None]:
            await asyncio.sleep(10)
            return b"", None

        proc = _mock_proc()
        proc.communicate = AsyncMock(side_effect=_hang)
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock, return_value=proc):
            outcome = await ContainerRestarter("plex", timeout=0.01).restart()

        assert outcome.succeeded is False
        assert "timed out" in (outcome.reason or "")
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()
