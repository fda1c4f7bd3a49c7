"""Per-event reader/writer locks.

Seat mutations for one event are serialized behind the event's write lock;
reads share the read lock and never observe a half-applied mutation. Every
acquisition is bounded by a timeout.
"""

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from seatadmin.exceptions import LockTimeoutError
from seatadmin.logger_config import logger


class ReadWriteLock:
    """Shared/exclusive lock preferring writers. The write side is re-entrant
    for the owning thread, which may also take the read side while writing."""

    def __init__(self, name: str = "lock"):
        self.name = name
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers_waiting = 0
        self._writer = None
        self._depth = 0

    @contextmanager
    def read(self, timeout: float) -> Iterator[None]:
        me = threading.get_ident()
        with self._cond:
            nested = self._writer == me
            if not nested:
                acquired = self._cond.wait_for(
                    lambda: self._writer is None and self._writers_waiting == 0,
                    timeout,
                )
                if not acquired:
                    logger.warning(f"Timed out waiting to read {self.name}")
                    raise LockTimeoutError(f"Timed out waiting for {self.name}")
                self._readers += 1
        try:
            yield
        finally:
            if not nested:
                with self._cond:
                    self._readers -= 1
                    if self._readers == 0:
                        self._cond.notify_all()

    @contextmanager
    def write(self, timeout: float) -> Iterator[None]:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._depth += 1
            else:
                self._writers_waiting += 1
                try:
                    acquired = self._cond.wait_for(
                        lambda: self._writer is None and self._readers == 0,
                        timeout,
                    )
                finally:
                    self._writers_waiting -= 1
                if not acquired:
                    # Readers held back for this writer may go ahead
                    self._cond.notify_all()
                    logger.warning(f"Timed out waiting to write {self.name}")
                    raise LockTimeoutError(f"Timed out waiting for {self.name}")
                self._writer = me
                self._depth = 1
        try:
            yield
        finally:
            with self._cond:
                self._depth -= 1
                if self._depth == 0:
                    self._writer = None
                    self._cond.notify_all()


class EventLockRegistry:
    """One ReadWriteLock per event id, created on first use.

    Locks are held weakly: an entry lives only while some thread holds or
    waits on it, so deleted events and ids probed by reads leave nothing
    behind.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: "weakref.WeakValueDictionary[int, ReadWriteLock]" = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._locks)

    def _lock_for(self, event_id: int) -> ReadWriteLock:
        with self._guard:
            lock = self._locks.get(event_id)
            if lock is None:
                lock = ReadWriteLock(f"event {event_id}")
                self._locks[event_id] = lock
            return lock

    def read(self, event_id: int):
        return self._lock_for(event_id).read(self.timeout)

    def write(self, event_id: int):
        return self._lock_for(event_id).write(self.timeout)
