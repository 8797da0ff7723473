"""Sighting ID generation.

IDs are millisecond timestamps, the same shape the mobile client produced,
made strictly increasing per process so two captures in the same
millisecond never collide.

Example:
    >>> from cardex.utils.ids import SightingIdGenerator
    >>> gen = SightingIdGenerator(clock=lambda: 1_700_000_000.0)
    >>> gen.next_id(), gen.next_id()
    ('1700000000000', '1700000000001')
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class SightingIdGenerator:
    """Monotonic, time-based ID source.

    Args:
        clock: Returns seconds since the epoch (default ``time.time``).
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            if now_ms <= self._last:
                now_ms = self._last + 1
            self._last = now_ms
            return str(now_ms)


_default_generator = SightingIdGenerator()


def new_sighting_id() -> str:
    """Next ID from the process-wide generator."""
    return _default_generator.next_id()
