"""Bounded in-memory store with least-recently-used eviction and expiry."""

from __future__ import annotations

import time
from collections import OrderedDict
from threading import Lock
from typing import Callable, Generic, Hashable, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLLRUCache(Generic[K, V]):
    """Thread-safe mapping bounded by entry count and entry age.

    Entries are never updated in place. Eviction and expiry both happen inside
    :meth:`get` and :meth:`set` under the store's own lock.
    """

    def __init__(
        self,
        maxsize: int,
        ttl: float,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be a positive integer")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.maxsize = maxsize
        self.ttl = ttl
        self._timer = timer
        self._lock = Lock()
        self._data: "OrderedDict[K, Tuple[float, V]]" = OrderedDict()

    def get(self, key: K) -> V | None:
        """Return the value stored for *key*, or ``None`` if absent or expired."""
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._timer() >= expires_at:
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return value

    def set(self, key: K, value: V) -> None:
        """Insert *value* for *key*, evicting the least recently used entries."""
        with self._lock:
            now = self._timer()
            entry = self._data.get(key)
            if entry is not None and now < entry[0]:
                self._data.move_to_end(key)
                return
            self._data.pop(key, None)
            self._data[key] = (now + self.ttl, value)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
