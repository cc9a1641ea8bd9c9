import time
from collections import deque
from typing import Deque, Dict

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Sliding-window limiter keyed by an arbitrary string (client IP in practice)."""

    def __init__(self) -> None:
        self._buckets: Dict[str, Deque[float]] = {}
        self._last_sweep = 0.0

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds
        if now - self._last_sweep >= window_seconds:
            self._sweep(window_start)
            self._last_sweep = now

        q = self._buckets.setdefault(key, deque())
        while q and q[0] <= window_start:
            q.popleft()
        if len(q) >= max_requests:
            return False
        q.append(now)
        return True

    def _sweep(self, window_start: float) -> None:
        # Drop clients whose newest hit has left the window
        stale = [k for k, q in self._buckets.items() if not q or q[-1] <= window_start]
        for k in stale:
            del self._buckets[k]

    def reset(self) -> None:
        self._buckets.clear()
        self._last_sweep = 0.0
