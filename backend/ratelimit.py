"""Per-client fixed-window rate limiting.

The limiter only talks to a RateLimitStore, so the in-memory store can be
swapped for a shared one (e.g. Redis) when running several workers.
"""

import logging
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_in_s: float

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(math.ceil(self.reset_in_s)),
        }


class RateLimitStore(ABC):
    """Counts hits per key inside a fixed window."""

    @abstractmethod
    def hit(self, key: str, window_s: float) -> tuple[int, float]:
        """Record one hit; return (hits in current window, seconds until reset)."""

    @abstractmethod
    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key when ``key`` is None."""


class InMemoryStore(RateLimitStore):
    """Process-local store. Not shared between workers."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}

    def hit(self, key: str, window_s: float) -> tuple[int, float]:
        now = self._clock()
        count, reset_at = self._windows.get(key, (0, 0.0))
        if now >= reset_at:
            count, reset_at = 0, now + window_s
            self._prune(now)
        count += 1
        self._windows[key] = (count, reset_at)
        return count, reset_at - now

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    def _prune(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._windows.items() if now >= reset_at]
        for k in expired:
            del self._windows[k]


class RateLimiter:
    def __init__(self, store: RateLimitStore | None = None, max_requests: int = 50, window_s: float = 900):
        self.store = store or InMemoryStore()
        self.max_requests = max_requests
        self.window_s = window_s

    def check(self, key: str) -> RateLimitResult:
        count, reset_in = self.store.hit(key, self.window_s)
        allowed = count <= self.max_requests
        if not allowed:
            logger.warning("Rate limit exceeded for %s (%d requests)", key, count)
        return RateLimitResult(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(self.max_requests - count, 0),
            reset_in_s=reset_in,
        )
