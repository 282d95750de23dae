"""
Fixed-window request limiting per client address.

Supports an in-memory counter for tests/local runs and a Redis-backed
implementation shared between API processes.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

import redis


@dataclass(frozen=True)
class WindowState:
    count: int
    limit: int
    reset_in_ms: int

    @property
    def exceeded(self) -> bool:
        return self.count > self.limit

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


class RateLimiter(Protocol):
    """Counts one hit for ``key`` and reports the state of its window."""

    def hit(self, key: str) -> WindowState:
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class InMemoryRateLimiter:
    """Per-process counters; windows are aligned to multiples of ``window_ms``."""

    window_ms: int
    max_requests: int
    clock: Callable[[], int] = _now_ms
    _counters: dict[str, tuple[int, int]] = field(default_factory=dict)
    _window_start: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def hit(self, key: str) -> WindowState:
        now = self.clock()
        window_start = now - (now % self.window_ms)
        with self._lock:
            if window_start != self._window_start:
                # Every stored counter belongs to an older window.
                self._counters.clear()
                self._window_start = window_start
            start, count = self._counters.get(key, (window_start, 0))
            count += 1
            self._counters[key] = (start, count)
        return WindowState(
            count=count,
            limit=self.max_requests,
            reset_in_ms=start + self.window_ms - now,
        )

    @property
    def tracked_keys(self) -> int:
        return len(self._counters)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


@dataclass
class RedisRateLimiter:
    """Redis-backed counters using INCR with a window-length expiry."""

    url: str
    window_ms: int
    max_requests: int
    prefix: str = "mamacita:ratelimit"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def hit(self, key: str) -> WindowState:
        redis_key = f"{self.prefix}:{key}"
        pipe = self.client.pipeline()
        pipe.incr(redis_key)
        pipe.pttl(redis_key)
        count, ttl = pipe.execute()
        if ttl is None or ttl < 0:
            # First hit in this window (or a key that lost its expiry).
            self.client.pexpire(redis_key, self.window_ms)
            ttl = self.window_ms
        return WindowState(count=int(count), limit=self.max_requests, reset_in_ms=int(ttl))
