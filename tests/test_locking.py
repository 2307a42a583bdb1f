"""Tests for agileflow.lib.locking module."""

import fcntl
import logging

import pytest

from agileflow.lib.errors import MalformedInput
from agileflow.lib.locking import LockTimeout, is_locked, issue_lock


class TestIssueLock:

    def test_creates_lock_file_and_releases(self, agile_root):
        with issue_lock(agile_root, "fix-login"):
            assert (agile_root / ".locks" / "fix-login.lock").exists()
        assert not is_locked(agile_root, "fix-login")

    def test_never_locked(self, agile_root):
        assert not is_locked(agile_root, "fix-login")

    def test_held_elsewhere_times_out(self, agile_root):
        lock_file = agile_root / ".locks" / "fix-login.lock"
        lock_file.parent.mkdir()
        with open(lock_file, "w") as holder:
            fcntl.flock(holder, fcntl.LOCK_EX)
            assert is_locked(agile_root, "fix-login")
            with pytest.raises(LockTimeout) as exc:
                with issue_lock(agile_root, "fix-login", timeout=0):
                    pass
            assert exc.value.exit_code == 1

    def test_different_issues_independent(self, agile_root):
        with issue_lock(agile_root, "fix-login"):
            with issue_lock(agile_root, "export-reports", timeout=0):
                assert is_locked(agile_root, "fix-login")

    def test_invalid_name(self, agile_root):
        with pytest.raises(MalformedInput):
            with issue_lock(agile_root, "../etc"):
                pass

    def test_held_lock_reported_before_waiting(self, agile_root, caplog):
        lock_file = agile_root / ".locks" / "fix-login.lock"
        lock_file.parent.mkdir()
        with open(lock_file, "w") as holder:
            fcntl.flock(holder, fcntl.LOCK_EX)
            with caplog.at_level(logging.WARNING), pytest.raises(LockTimeout):
                with issue_lock(agile_root, "fix-login", timeout=0):
                    pass
        assert "'fix-login' is held by another process" in caplog.text

    def test_free_lock_not_reported(self, agile_root, caplog):
        with caplog.at_level(logging.WARNING):
            with issue_lock(agile_root, "fix-login"):
                pass
        assert "held by another process" not in caplog.text
