"""
Compiled Template Cache - one compile per view location, many renders.

Provides:
- ViewCache protocol consumed by the engine
- DefaultViewCache: thread-safe, single-flight get-or-add with statistics

Entries live for the cache lifetime. There is no eviction and no file
watching; hosts that need fresh templates call ``invalidate`` or ``clear``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol, runtime_checkable

logger = logging.getLogger("liquidview.cache")

_ABSENT = object()


@runtime_checkable
class ViewCache(Protocol):
    """Keyed store of compiled templates."""

    def get_or_add(self, key: Any, factory: Callable[[Any], Any]) -> Any:
        """
        Return the entry for ``key``, computing it with ``factory(key)`` on
        the first miss. ``factory`` runs at most once per key, including
        when several callers miss at the same time.
        """
        ...


@dataclass
class ViewCacheStats:
    """Counters for observability."""
    hits: int = 0
    misses: int = 0
    stampede_joins: int = 0     # Callers that waited on an in-flight compile
    errors: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits / total) * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "stampede_joins": self.stampede_joins,
            "errors": self.errors,
            "size": self.size,
            "hit_rate": round(self.hit_rate, 2),
        }


class DefaultViewCache:
    """
    In-process view cache with single-flight compilation.

    The first caller to miss a key computes the entry outside the lock;
    concurrent callers for the same key wait on that computation and share
    its result or its exception. A failed computation leaves the key empty.

    Example:
        cache = DefaultViewCache()
        template = cache.get_or_add(location, compile_view)
    """

    def __init__(self):
        self._entries: Dict[Any, Any] = {}
        self._inflight: Dict[Any, Future] = {}
        self._lock = threading.Lock()
        self._stats = ViewCacheStats()

    def get_or_add(self, key: Any, factory: Callable[[Any], Any]) -> Any:
        with self._lock:
            if key in self._entries:
                self._stats.hits += 1
                return self._entries[key]

            future = self._inflight.get(key)
            if future is not None:
                self._stats.stampede_joins += 1
                owner = False
            else:
                self._stats.misses += 1
                future = Future()
                self._inflight[key] = future
                owner = True

        if not owner:
            # Wait outside the lock
            return future.result()

        try:
            value = factory(key)
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
                self._stats.errors += 1
            future.set_exception(exc)
            raise

        with self._lock:
            self._entries[key] = value
            self._inflight.pop(key, None)
            self._stats.size = len(self._entries)
        future.set_result(value)

        logger.debug(f"Cached compiled view {key!r}")
        return value

    def get(self, key: Any) -> Any:
        """Return the cached entry or ``None``."""
        with self._lock:
            return self._entries.get(key)

    def invalidate(self, key: Any) -> bool:
        """
        Drop one entry.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            removed = self._entries.pop(key, _ABSENT) is not _ABSENT
            self._stats.size = len(self._entries)
        if removed:
            logger.debug(f"Invalidated compiled view {key!r}")
        return removed

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()
            self._stats.size = 0

    def stats(self) -> ViewCacheStats:
        """Snapshot of the cache counters."""
        with self._lock:
            return ViewCacheStats(**vars(self._stats))

    def __contains__(self, key: Any) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
