"""Thread-safe keyed state store.

Per-actor state (rate-limit windows, in-flight counters, daily activity) is
kept in a fixed number of shards, each a plain dict guarded by its own lock.
Operations on one key only ever hold that key's shard lock, so unrelated
actors do not contend on a single global mutex.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
R = TypeVar("R")

DEFAULT_SHARDS = 16


class KeyedStore(Generic[K, V]):
    """Sharded map with atomic per-key read-modify-write."""

    def __init__(self, shards: int = DEFAULT_SHARDS) -> None:
        if shards <= 0:
            raise ValueError("shards must be positive")
        self._locks = [threading.Lock() for _ in range(shards)]
        self._maps: list[dict[K, V]] = [{} for _ in range(shards)]

    def _index(self, key: K) -> int:
        return hash(key) % len(self._maps)

    def compute(self, key: K, fn: Callable[[V | None], tuple[V | None, R]]) -> R:
        """Atomically replace the value at ``key``.

        ``fn`` receives the current value (or None) and returns
        ``(new_value, result)``. A ``new_value`` of None removes the key.
        ``fn`` runs under the shard lock and must not call back into the store.
        """
        idx = self._index(key)
        with self._locks[idx]:
            bucket = self._maps[idx]
            new_value, result = fn(bucket.get(key))
            if new_value is None:
                bucket.pop(key, None)
            else:
                bucket[key] = new_value
            return result

    def get(self, key: K) -> V | None:
        idx = self._index(key)
        with self._locks[idx]:
            return self._maps[idx].get(key)

    def pop(self, key: K) -> V | None:
        idx = self._index(key)
        with self._locks[idx]:
            return self._maps[idx].pop(key, None)

    def snapshot(self) -> dict[K, V]:
        """Shallow copy of all entries, taken shard by shard."""
        out: dict[K, V] = {}
        for lock, bucket in zip(self._locks, self._maps):
            with lock:
                out.update(bucket)
        return out

    def remove_if(self, predicate: Callable[[K, V], bool]) -> int:
        """Remove every entry matching ``predicate``; return how many were removed."""
        removed = 0
        for lock, bucket in zip(self._locks, self._maps):
            with lock:
                doomed = [k for k, v in bucket.items() if predicate(k, v)]
                for k in doomed:
                    del bucket[k]
                removed += len(doomed)
        return removed

    def clear(self) -> None:
        for lock, bucket in zip(self._locks, self._maps):
            with lock:
                bucket.clear()

    def __len__(self) -> int:
        total = 0
        for lock, bucket in zip(self._locks, self._maps):
            with lock:
                total += len(bucket)
        return total
