"""Fixed-window rate limiting for anonymous callers, keyed by client address.

The limiter is backed by a WindowStore so the process-local default can be swapped for
Redis when several API instances must share counts.
"""

import logging
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

import redis
from fastapi import Request

logger = logging.getLogger(__name__)

ANONYMOUS_LIMIT_MESSAGE = "Rate limit exceeded. Sign up for unlimited access!"


class WindowStore(Protocol):
    def count(self, key: str) -> int:
        """Hits recorded in the key's current window (0 when expired or unknown)."""

    def incr(self, key: str, window_seconds: int) -> int:
        """Record a hit, opening a new window if none is active. Returns the new count."""


class InMemoryWindowStore:
    def __init__(self, time_fn: Callable[[], float] = time.monotonic):
        self.time_fn = time_fn
        self.windows: Dict[str, Tuple[float, int]] = {}  # key -> (expires_at, count)

    def _active(self, key: str) -> Optional[Tuple[float, int]]:
        entry = self.windows.get(key)
        if entry is None:
            return None
        if self.time_fn() >= entry[0]:
            del self.windows[key]
            return None
        return entry

    def count(self, key: str) -> int:
        entry = self._active(key)
        return entry[1] if entry else 0

    def incr(self, key: str, window_seconds: int) -> int:
        entry = self._active(key)
        if entry is None:
            self.purge_expired()
            self.windows[key] = (self.time_fn() + window_seconds, 1)
            return 1
        expires_at, count = entry
        self.windows[key] = (expires_at, count + 1)
        return count + 1

    def purge_expired(self) -> int:
        now = self.time_fn()
        expired = [k for k, (expires_at, _) in self.windows.items() if now >= expires_at]
        for k in expired:
            del self.windows[k]
        return len(expired)


class RedisWindowStore:
    """Window counts in Redis; the key's TTL is the window."""

    def __init__(self, client, prefix: str = "ratelimit:anon:"):
        self.client = client
        self.prefix = prefix

    def count(self, key: str) -> int:
        value = self.client.get(self.prefix + key)
        return int(value) if value else 0

    def incr(self, key: str, window_seconds: int) -> int:
        full_key = self.prefix + key
        pipe = self.client.pipeline()
        pipe.incr(full_key)
        pipe.expire(full_key, window_seconds, nx=True)
        count, _ = pipe.execute()
        return int(count)


class FixedWindowLimiter:
    def __init__(self, store: WindowStore, limit: int, window_seconds: int):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds

    def check(self, key: str) -> bool:
        return self.store.count(key) < self.limit

    def record(self, key: str) -> None:
        self.store.incr(key, self.window_seconds)

    def allow(self, key: str) -> bool:
        """Check and record in one step. Denied attempts are not counted."""
        if not self.check(key):
            logger.info("Anonymous rate limit hit for %s", key)
            return False
        self.record(key)
        return True


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def build_anonymous_limiter(settings) -> FixedWindowLimiter:
    if settings.anonymous_rate_limit_backend == "redis":
        store: WindowStore = RedisWindowStore(redis.Redis.from_url(settings.redis_url))
    else:
        store = InMemoryWindowStore()
    return FixedWindowLimiter(
        store,
        limit=settings.anonymous_rate_limit,
        window_seconds=settings.anonymous_rate_window_seconds,
    )
