"""Bounded cache for per-file summaries keyed by content hash and path."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar

from ..config import DEFAULT_SUMMARY_CACHE_SIZE

T = TypeVar("T")


class SummaryCache(Generic[T]):
    """Holds summaries so an unchanged file at the same path is summarised once.

    The cache is an explicit object owned by whoever creates the summarizer;
    its lifetime ends with that owner. Least recently used entries are
    evicted beyond ``capacity``.
    """

    def __init__(self, capacity: int = DEFAULT_SUMMARY_CACHE_SIZE) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: "OrderedDict[Hashable, T]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: Hashable) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def store(self, key: Hashable, summary: T) -> None:
        with self._lock:
            self._entries[key] = summary
            self._entries.move_to_end(key)
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["SummaryCache"]
