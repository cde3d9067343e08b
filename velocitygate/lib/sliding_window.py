"""Per-key sliding window store using monotonic timestamps."""

from __future__ import annotations

import bisect
import threading
import time
from collections import deque
from typing import Callable

WINDOW_SECONDS = 1.0
IDLE_THRESHOLD_SECONDS = 60.0
DEFAULT_SHARDS = 64


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[str, deque[float]] = {}


def _trim(timestamps: deque[float], cutoff: float) -> None:
    while timestamps and timestamps[0] < cutoff:
        timestamps.popleft()


class VelocityWindowStore:
    """Tracks per-key request timestamps within a sliding time window.

    Keys are spread over a fixed set of shards, each guarded by its own lock,
    so callers working on different keys rarely contend. Timestamps are kept
    in arrival order, which makes trimming a pop from the left of a deque.

    Args:
        window: Counting window in seconds.
        idle_threshold: Age in seconds after which :meth:`evict_idle` drops
            a timestamp. Must be larger than ``window``.
        shards: Number of lock shards.
        clock: Monotonic time source used when ``now`` is not given.
    """

    def __init__(
        self,
        window: float = WINDOW_SECONDS,
        idle_threshold: float = IDLE_THRESHOLD_SECONDS,
        shards: int = DEFAULT_SHARDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window <= 0:
            raise ValueError("window must be positive")
        if idle_threshold <= window:
            raise ValueError("idle_threshold must be greater than window")
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self.window = window
        self.idle_threshold = idle_threshold
        self._clock = clock
        self._shards = [_Shard() for _ in range(shards)]

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def record_and_count(self, key: str | None, now: float | None = None) -> int:
        """Record a hit for *key* and return the hits within the window.

        The returned count includes this hit. A blank key is not tracked and
        returns 0.
        """
        if not key or key.isspace():
            return 0

        shard = self._shard_for(key)
        with shard.lock:
            if now is None:
                now = self._clock()
            timestamps = shard.entries.get(key)
            if timestamps is None:
                timestamps = shard.entries[key] = deque()
            if timestamps and now < timestamps[-1]:
                bisect.insort(timestamps, now)
            else:
                timestamps.append(now)
            _trim(timestamps, now - self.window)
            return len(timestamps)

    def current_count(self, key: str | None, now: float | None = None) -> int:
        """Return the number of hits for *key* within the current window."""
        if not key or key.isspace():
            return 0

        shard = self._shard_for(key)
        with shard.lock:
            timestamps = shard.entries.get(key)
            if timestamps is None:
                return 0
            if now is None:
                now = self._clock()
            _trim(timestamps, now - self.window)
            if not timestamps:
                del shard.entries[key]
                return 0
            return len(timestamps)

    def evict_idle(self, now: float | None = None) -> int:
        """Drop timestamps older than the idle threshold and remove empty keys.

        Shards are swept one at a time so foreground calls only ever wait on
        a single shard. Returns the number of keys removed.
        """
        if now is None:
            now = self._clock()
        cutoff = now - self.idle_threshold
        removed = 0
        for shard in self._shards:
            with shard.lock:
                stale_keys = []
                for key, timestamps in shard.entries.items():
                    _trim(timestamps, cutoff)
                    if not timestamps:
                        stale_keys.append(key)
                for key in stale_keys:
                    del shard.entries[key]
                removed += len(stale_keys)
        return removed

    def reset(self) -> None:
        """Forget every tracked key."""
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()

    def tracked_key_count(self) -> int:
        """Return the number of keys currently held."""
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total
