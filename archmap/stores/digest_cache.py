"""Bounded in-memory cache of file content digests."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional, Tuple

DEFAULT_CAPACITY = 50_000

_Key = Tuple[str, int, int]


class DigestCache:
    """Reuses content digests for files whose size and mtime are unchanged.

    Entries are keyed by ``(path, size, mtime_ns)``; the least recently used
    entry is evicted once ``capacity`` is reached. Safe to share between the
    worker threads of one scan and across scans in one process.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: "OrderedDict[_Key, str]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, path: str, *, size: int, mtime_ns: int) -> Optional[str]:
        key = (path, size, mtime_ns)
        with self._lock:
            digest = self._entries.get(key)
            if digest is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return digest

    def store(self, path: str, *, size: int, mtime_ns: int, digest: str) -> None:
        key = (path, size, mtime_ns)
        with self._lock:
            self._entries[key] = digest
            self._entries.move_to_end(key)
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["DigestCache"]
