"""Reusable identifier allocation for time intervals."""

from __future__ import annotations

import heapq
from itertools import count
from typing import Iterable, List, Sequence, Tuple

from sscexport.errors import ConfigurationError, OrderingError, PoolExhaustedError


class IdentifierAllocator:
    """Hands out identifiers from a fixed pool to ``[start, start + duration)`` intervals.

    Requests must arrive in non-decreasing start order. Before each allocation,
    identifiers whose interval ended strictly before the new start tick go back
    to the free stack, soonest-ending first. An interval ending exactly at the
    new start tick is still considered live for that request.
    """

    def __init__(self, identifiers: Iterable[str]) -> None:
        pool = tuple(identifiers)
        if len(set(pool)) != len(pool):
            raise ConfigurationError("identifier pool must not contain duplicates", field="identifiers")
        self._pool = pool
        self._free: List[str] = []
        self._in_use: List[Tuple[int, int, str]] = []
        self._sequence = count()
        self._last_start_tick = 0
        self.clear()

    @classmethod
    def numbered(cls, size: int) -> "IdentifierAllocator":
        """Allocator over ``"0"`` .. ``str(size - 1)``."""
        if size <= 0:
            raise ConfigurationError("identifier pool size must be positive", field="size")
        return cls(str(i) for i in range(size))

    @property
    def pool(self) -> Sequence[str]:
        return self._pool

    @property
    def pool_size(self) -> int:
        return len(self._pool)

    @property
    def in_use_count(self) -> int:
        return len(self._in_use)

    def clear(self) -> None:
        """Return every identifier to the pool and forget the last start tick."""
        self._last_start_tick = 0
        self._free = list(reversed(self._pool))
        self._in_use = []
        self._sequence = count()

    def allocate(self, start_tick: int, duration: int) -> str:
        if start_tick < self._last_start_tick:
            raise OrderingError(start_tick=start_tick, last_start_tick=self._last_start_tick)
        if duration < 0:
            raise ValueError(f"duration must not be negative: {duration}")
        while self._in_use and self._in_use[0][0] < start_tick:
            _, _, identifier = heapq.heappop(self._in_use)
            self._free.append(identifier)
        if not self._free:
            raise PoolExhaustedError(tick=start_tick, pool_size=len(self._pool))
        identifier = self._free.pop()
        end_tick = start_tick + duration
        heapq.heappush(self._in_use, (end_tick, next(self._sequence), identifier))
        self._last_start_tick = start_tick
        return identifier
