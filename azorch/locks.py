"""Per-name locks so operations on the same project run one at a time."""

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """
    A lock per key, created on first use and dropped when no one holds or waits on it.

    Usage:
        locks = KeyedLock()
        with locks.hold("azorch_etl-job-1"):
            ...
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
