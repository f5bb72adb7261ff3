"""Tests for plex_updater.lock — single-instance run lock."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from plex_updater.errors import LockHeldError
from plex_updater.lock import RunLock


class TestRunLock:
    """Tests for RunLock acquire/release semantics."""

    def test_acquire_writes_pid(self, tmp_path: Path) -> None:
        path = tmp_path / "run" / "update.lock"
        lock = RunLock(path)

        lock.acquire()
        try:
            assert lock.held is True
            assert path.read_text(encoding="utf-8") == str(os.getpid())
        finally:
            lock.release()

        assert lock.held is False

    def test_second_lock_is_refused(self, tmp_path: Path) -> None:
        path = tmp_path / "update.lock"
        with RunLock(path):
            with pytest.raises(LockHeldError, match="update.lock"):
                RunLock(path).acquire()

    def test_lock_reusable_after_release(self, tmp_path: Path) -> None:
        path = tmp_path / "update.lock"
        with RunLock(path):
            pass

        second = RunLock(path)
        second.acquire()
        assert second.held is True
        second.release()

    def test_release_without_acquire_is_noop(self, tmp_path: Path) -> None:
        RunLock(tmp_path / "update.lock").release()
