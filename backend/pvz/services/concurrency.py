# Overview: Concurrency primitives shared by the reception and product services.

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator

from pvz.errors import StoreTimeoutError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


class Deadline:
    """
    Caller-supplied time limit for one manager operation.

    timeout=None means no deadline. Checked before every store call and used
    to bound lock acquisition.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, operation: str) -> None:
        if self.expired:
            raise StoreTimeoutError(f"deadline of {self.timeout}s exceeded before {operation}")


class KeyedLock:
    """
    One mutex per key, created on demand and dropped when no thread holds
    or waits for it.

    Used to serialize lifecycle operations per pickup point. Different keys
    never contend.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [Lock, waiters]

    @contextmanager
    def hold(self, key: str, deadline: Deadline | None = None) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            remaining = deadline.remaining() if deadline else None
            acquired = entry[0].acquire(timeout=-1 if remaining is None else remaining)
            if not acquired:
                raise StoreTimeoutError(f"timed out waiting for lock on {key}")
            try:
                yield
            finally:
                entry[0].release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
