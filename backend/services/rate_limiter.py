"""In-memory fixed-window rate limiter.

Advisory only: counters live in this process and are lost on restart, so
several instances each apply their own window. At most ``max_clients``
identifiers are tracked; when full, expired windows are dropped first and
then the window closest to expiry.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float
    retry_after: int = 0


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Counts requests per client identifier in fixed windows."""

    def __init__(
        self,
        limit: int = 100,
        window_seconds: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
        max_clients: int = 10000,
    ):
        self.limit = limit
        self.max_clients = max_clients
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateLimitResult:
        """Record one request for ``identifier`` and report whether it is allowed."""
        now = self._clock()
        with self._lock:
            if identifier not in self._windows and len(self._windows) >= self.max_clients:
                self._prune_locked(now)
                if len(self._windows) >= self.max_clients:
                    self._evict_oldest_locked()
            window = self._windows.get(identifier)
            if window is None or now >= window.reset_at:
                window = _Window(count=1, reset_at=now + self.window_seconds)
                self._windows[identifier] = window
                return RateLimitResult(True, self.limit - 1, window.reset_at)

            if window.count >= self.limit:
                retry_after = max(1, math.ceil(window.reset_at - now))
                return RateLimitResult(False, 0, window.reset_at, retry_after)

            window.count += 1
            return RateLimitResult(True, self.limit - window.count, window.reset_at)

    def prune(self) -> int:
        """Drop expired windows; returns how many were removed."""
        with self._lock:
            return self._prune_locked(self._clock())

    def _prune_locked(self, now: float) -> int:
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def _evict_oldest_locked(self) -> None:
        oldest = min(self._windows, key=lambda key: self._windows[key].reset_at)
        del self._windows[oldest]

    def __len__(self) -> int:
        return len(self._windows)
