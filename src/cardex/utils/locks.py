"""Keyed asyncio locks.

Merges for the same (user, model) key must not interleave their
read-modify-write, while merges for different keys may run side by side.
Maintenance work such as rebuilding the whole index takes the lock
exclusively and waits for in-flight keyed holders to drain.

Example:
    >>> import asyncio
    >>> from cardex.utils.locks import KeyedLock
    >>> async def example():
    ...     locks = KeyedLock()
    ...     async with locks.hold(("user-1", "5")):
    ...         return locks.active
    >>> asyncio.run(example())
    1
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """One ``asyncio.Lock`` per key plus an exclusive mode over all keys."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._cond = asyncio.Condition()
        self._active = 0
        self._exclusive = False

    @property
    def active(self) -> int:
        """Number of keyed holders currently inside or waiting for their key."""
        return self._active

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key``."""
        async with self._cond:
            await self._cond.wait_for(lambda: not self._exclusive)
            self._active += 1
        try:
            lock = self._locks.setdefault(key, asyncio.Lock())
            async with lock:
                yield
        finally:
            async with self._cond:
                self._active -= 1
                self._cond.notify_all()

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold every key at once."""
        async with self._cond:
            await self._cond.wait_for(lambda: not self._exclusive)
            self._exclusive = True
            await self._cond.wait_for(lambda: self._active == 0)
        try:
            yield
        finally:
            async with self._cond:
                self._exclusive = False
                self._cond.notify_all()
