"""Bounded, TTL-expiring in-memory cache of provider results keyed by H3 cell.

Thread-safe LRU used by the resolver to skip the aggregate query for cells
looked up recently. Entries are never persisted; a restart starts cold.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from broadband_api.lib.availability.aggregate import ProviderAvailability

ProviderList = tuple[ProviderAvailability, ...]


class ResultCache:
    """LRU cache with per-entry expiry.

    Args:
        max_size: Maximum number of cells held; the least recently used entry
            is evicted when a new cell is added beyond this bound.
        ttl_seconds: Seconds an entry stays valid after it was stored.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 10000,
        ttl_seconds: float = 86400.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            msg = "max_size must be positive"
            raise ValueError(msg)
        self._max_size = max_size
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, ProviderList]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, cell_id: str) -> ProviderList | None:
        """Return cached providers for a cell, or None if absent or expired."""
        with self._lock:
            item = self._entries.get(cell_id)
            if item is None:
                return None
            stored_at, providers = item
            if self._clock() - stored_at >= self._ttl_seconds:
                del self._entries[cell_id]
                return None
            self._entries.move_to_end(cell_id)
            return providers

    def set(self, cell_id: str, providers: list[ProviderAvailability] | ProviderList) -> None:
        """Store providers for a cell, evicting the least recently used entry if full."""
        with self._lock:
            self._entries[cell_id] = (self._clock(), tuple(providers))
            self._entries.move_to_end(cell_id)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)

    def invalidate(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
