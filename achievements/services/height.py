"""Height sources: the store's notion of "now".

The ledger that owns the real chain height is external.  The store only
needs a non-decreasing integer, injected through the HeightSource
protocol.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class HeightSource(Protocol):
    def current_height(self) -> int: ...


class ManualHeightSource:
    """Height advanced explicitly by the caller.  Used by tests and scripts."""

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError("height must be non-negative")
        self._height = height

    def current_height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("height cannot move backwards")
        self._height += blocks
        return self._height

    def set(self, height: int) -> None:
        if height < self._height:
            raise ValueError(
                f"height cannot move backwards ({self._height} -> {height})"
            )
        self._height = height


class ClockHeightSource:
    """Derives height from wall-clock time in fixed block intervals.

    A clock step backwards (NTP correction) repeats the last height
    instead of returning a smaller one.
    """

    def __init__(
        self,
        block_interval_seconds: int,
        *,
        genesis: float = 0.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if block_interval_seconds <= 0:
            raise ValueError("block_interval_seconds must be positive")
        self._interval = block_interval_seconds
        self._genesis = genesis
        self._clock = clock
        self._last = 0

    def current_height(self) -> int:
        height = max(0, int((self._clock() - self._genesis) // self._interval))
        self._last = max(self._last, height)
        return self._last
