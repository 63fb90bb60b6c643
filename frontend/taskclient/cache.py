"""Keyed store of server state with staleness and invalidation.

Keys are tuples such as ``("projects",)`` or ``("tasks", project_id)``; a
prefix like ``("tasks",)`` addresses every key that starts with it.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_STALE_TIME = 120.0


@dataclass
class _Entry:
    data: Any
    updated_at: float
    invalidated: bool = False


def _matches(key: tuple, prefix: tuple) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    def __init__(self, stale_time: float = DEFAULT_STALE_TIME, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: dict[tuple, _Entry] = {}
        self._generations: dict[tuple, int] = {}

    def get_query_data(self, key: tuple):
        entry = self._entries.get(key)
        return entry.data if entry else None

    def set_query_data(self, key: tuple, value) -> Any:
        """Store ``value``, or the result of calling it with the current data when it is callable."""
        if callable(value):
            value = value(self.get_query_data(key))
        self._entries[key] = _Entry(value, self._clock())
        return value

    def invalidate_queries(self, prefix: tuple) -> int:
        count = 0
        for key, entry in self._entries.items():
            if _matches(key, prefix):
                entry.invalidated = True
                count += 1
        logger.debug("Invalidated %d queries under %s", count, prefix)
        return count

    def is_stale(self, key: tuple, stale_time: float | None = None) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return True
        limit = self.stale_time if stale_time is None else stale_time
        return self._clock() - entry.updated_at >= limit

    async def cancel_queries(self, prefix: tuple) -> None:
        # results of fetches started before this call are discarded when they land
        for key in list(self._generations):
            if _matches(key, prefix):
                self._generations[key] += 1

    async def fetch_query(self, key: tuple, fetcher: Callable[[], Awaitable[Any]], stale_time: float | None = None):
        if not self.is_stale(key, stale_time):
            return self.get_query_data(key)

        generation = self._generations.setdefault(key, 0)
        data = await fetcher()
        if self._generations[key] != generation:
            logger.debug("Discarding cancelled fetch for %s", key)
            return self.get_query_data(key)
        return self.set_query_data(key, lambda _: data)

    def remove_queries(self, prefix: tuple = ()) -> None:
        for key in [k for k in self._entries if _matches(k, prefix)]:
            del self._entries[key]
