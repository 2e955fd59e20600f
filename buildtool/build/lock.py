"""
Snapshot lock manager.
"""
import asyncio
import time
from pathlib import Path
import logging
import os
import fcntl
from typing import Optional, TextIO


class SnapshotLockManager:
    """
    Advisory lock protecting the shared snapshot install tree.

    Uses an exclusive flock on a file in the snapshot directory. The lock
    file itself is never removed, so every process always locks the same
    inode.
    """

    LOCK_FILE_NAME = ".snapshot.lock"

    def __init__(self, lock_dir: Path, timeout: int = 30, poll_interval: float = 0.5):
        """
        Initialize snapshot lock manager.

        Args:
            lock_dir: Directory holding the lock file
            timeout: Lock acquisition timeout in seconds
            poll_interval: Delay between acquisition attempts in seconds
        """
        self.lock_dir = Path(lock_dir)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.lock_file_path = self.lock_dir / self.LOCK_FILE_NAME
        self.lock_file: Optional[TextIO] = None
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self):
        """Acquire lock (async context manager)"""
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Release lock (async context manager)"""
        await self.release()
        return False

    async def acquire(self):
        """
        Acquire snapshot lock with timeout.

        Raises:
            TimeoutError: If lock cannot be acquired within timeout
        """
        if self.lock_file is not None:
            return

        self.lock_dir.mkdir(parents=True, exist_ok=True)
        start_time = time.time()

        self.logger.debug(f"Attempting to acquire snapshot lock: {self.lock_file_path}")

        while True:
            lock_file = open(self.lock_file_path, 'a+')
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                lock_file.close()
                elapsed = time.time() - start_time

                if elapsed >= self.timeout:
                    self.logger.error(
                        f"Failed to acquire snapshot lock after {self.timeout}s timeout"
                    )
                    raise TimeoutError(
                        f"Could not acquire snapshot lock within {self.timeout}s. "
                        "Another build may be writing to the snapshot."
                    )

                self.logger.debug(
                    f"Snapshot lock held by another process, retrying... "
                    f"({elapsed:.1f}s / {self.timeout}s)"
                )
                await asyncio.sleep(self.poll_interval)
                continue
            except Exception:
                lock_file.close()
                raise

            lock_file.seek(0)
            lock_file.truncate()
            lock_file.write(f"{os.getpid()}\n")
            lock_file.flush()
            self.lock_file = lock_file

            self.logger.info("Snapshot lock acquired")
            return

    async def release(self):
        """Release snapshot lock; releasing an unheld lock does nothing"""
        if self.lock_file is None:
            return

        lock_file, self.lock_file = self.lock_file, None
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            lock_file.close()

        self.logger.info("Snapshot lock released")

    def is_locked(self) -> bool:
        """
        Check if some holder currently has the lock (non-blocking check).

        Returns:
            True if locked
        """
        if not self.lock_file_path.exists():
            return False

        with open(self.lock_file_path, 'r') as test_file:
            try:
                fcntl.flock(test_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                return True
            fcntl.flock(test_file.fileno(), fcntl.LOCK_UN)
            return False
