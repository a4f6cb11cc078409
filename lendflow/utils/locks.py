import threading
from contextlib import contextmanager

from lendflow.core.exceptions import ConflictError


class KeyedLock:
    """
    One mutex per key, created on demand and dropped once nobody holds or
    waits on it. Holders of different keys never block each other.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, holders + waiters]
        self._entries: dict = {}

    def _checkout(self, key) -> threading.Lock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1
            return entry[0]

    def _release(self, key) -> None:
        with self._guard:
            entry = self._entries[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, key, timeout: float = -1):
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=timeout):
                raise ConflictError(
                    "Another update to this record is in progress, try again",
                    {"key": key, "timeout": timeout},
                )
            try:
                yield
            finally:
                lock.release()
        finally:
            self._release(key)

    def __len__(self):
        with self._guard:
            return len(self._entries)


# shared by every request handler of the process
loan_locks = KeyedLock()
