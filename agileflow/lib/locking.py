"""
Advisory per-issue locking.

Uses flock on agile/.locks/<issue>.lock so that two invocations mutating the
same issue run one after the other instead of silently overwriting each
other. Readers never take the lock.
"""

import fcntl
import logging
import os
import sys
import time
import signal
import atexit
from pathlib import Path
from contextlib import contextmanager

from agileflow.lib.constants import LOCKS_DIR, NAME_PATTERN
from agileflow.lib.errors import AgileError, MalformedInput

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.25


class LockTimeout(AgileError):
    """Lock acquisition timed out."""
    pass


def is_locked(agile_root: Path, issue_name: str) -> bool:
    """True if another process currently holds the issue's lock."""
    lock_file = agile_root / LOCKS_DIR / f"{issue_name}.lock"
    if not lock_file.exists():
        return False

    try:
        with open(lock_file, 'r') as fd:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                fcntl.flock(fd, fcntl.LOCK_UN)
            except BlockingIOError:
                return True
    except OSError:
        pass
    return False


@contextmanager
def _acquire_lock(lock_file: Path, timeout: float, lock_name: str):
    """
    Internal helper to acquire a file lock.

    Lock files are never deleted: removing one while another process waits on
    it would let two processes hold "exclusive" locks on different inodes.

    Args:
        lock_file: Path to the lock file
        timeout: Seconds to wait for lock
        lock_name: Human-readable name for error messages
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    fd = open(lock_file, 'w')
    start = time.time()

    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            break
        except BlockingIOError:
            if time.time() - start >= timeout:
                fd.close()
                raise LockTimeout(f"Could not acquire {lock_name} within {timeout}s")
            time.sleep(POLL_INTERVAL)

    def cleanup():
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
            fd.close()
        except (OSError, ValueError):
            pass

    atexit.register(cleanup)
    original_sigterm = signal.signal(signal.SIGTERM, lambda *_: sys.exit(1))

    try:
        fd.write(f"{os.getpid()}\n")
        fd.flush()
        yield
    finally:
        atexit.unregister(cleanup)
        signal.signal(signal.SIGTERM, original_sigterm)
        cleanup()


@contextmanager
def issue_lock(agile_root: Path, issue_name: str, timeout: float = 10):
    """
    Acquire the per-issue lock, yield, release on exit.

    Different issues can be mutated in parallel.
    """
    if not NAME_PATTERN.match(issue_name):
        raise MalformedInput(f"Invalid issue name '{issue_name}'")
    lock_file = agile_root / LOCKS_DIR / f"{issue_name}.lock"
    if is_locked(agile_root, issue_name):
        logger.warning(f"[LOCK] '{issue_name}' is held by another process, waiting up to {timeout}s")
    with _acquire_lock(lock_file, timeout, f"lock for issue '{issue_name}'"):
        yield
