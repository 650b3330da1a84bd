"""Shared in-memory storage primitives."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Hashable, Iterable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class StorageError(Exception):
    """Raised when a store cannot complete an operation (never for "not found")."""


class InMemoryTable(Generic[K, V]):
    """Key-value map guarded by a single lock.

    Every read and write takes the lock, which gives serializable per-key access
    without cross-key transactions.
    """

    def __init__(self, key: Callable[[V], K], rows: Iterable[V] = ()) -> None:
        self._key = key
        self._rows: dict[K, V] = {key(row): row for row in rows}
        self._lock = asyncio.Lock()

    async def get(self, key: K) -> V | None:
        """Return the row stored under key, if any."""
        async with self._lock:
            return self._rows.get(key)

    async def put(self, row: V) -> None:
        """Insert or replace a row."""
        async with self._lock:
            self._rows[self._key(row)] = row

    async def delete(self, key: K) -> bool:
        """Remove a row and report whether it existed."""
        async with self._lock:
            return self._rows.pop(key, None) is not None

    async def select(self, predicate: Callable[[V], bool]) -> list[V]:
        """Return a snapshot of all rows matching predicate."""
        async with self._lock:
            return [row for row in self._rows.values() if predicate(row)]
