"""
Per-key locking for reservation workflows

Two workflows on the same reservation id run one after the other; workflows
on different ids do not block each other.
"""

from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, Tuple
import threading
import structlog

logger = structlog.get_logger(__name__)


class KeyedLock:
    """Registry of reference-counted locks, one per key"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, Tuple[threading.Lock, int]] = {}

    def _acquire_entry(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock, waiters = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, waiters + 1)
            return lock

    def _release_entry(self, key: Hashable) -> None:
        with self._guard:
            lock, waiters = self._locks[key]
            if waiters <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, waiters - 1)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block"""
        lock = self._acquire_entry(key)
        try:
            with lock:
                logger.debug(f"Acquired workflow lock for {key}")
                yield
        finally:
            self._release_entry(key)

    def is_held(self, key: Hashable) -> bool:
        """Check whether any caller currently holds or waits on ``key``"""
        with self._guard:
            return key in self._locks

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Process-wide lock registry for reservation workflows
reservation_locks = KeyedLock()
