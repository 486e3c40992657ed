"""Sliding-window rate limiting for admin routes.

PATTERN: Per-client timestamp windows guarded by a lock
CRITICAL: The number of tracked clients is bounded (least recently seen evicted)
GOTCHA: Idle clients are dropped lazily when their window empties
"""

import logging
import threading
import time
from collections import OrderedDict, deque
from typing import Callable, Deque, NamedTuple

logger = logging.getLogger(__name__)


class RateLimitDecision(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class SlidingWindowRateLimiter:
    """
    Allows at most ``limit`` requests per client within ``window`` seconds.

    Args:
        limit: Requests allowed per window
        window: Window length (seconds)
        max_clients: Upper bound on tracked clients
        clock: Time source (seconds)
    """

    def __init__(
        self,
        limit: int = 60,
        window: float = 60.0,
        max_clients: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window = window
        self.max_clients = max_clients
        self._clock = clock
        self._clients: "OrderedDict[str, Deque[float]]" = OrderedDict()
        self._lock = threading.Lock()
        self.logger = logger

    def check(self, client_id: str) -> RateLimitDecision:
        """
        Record a request for ``client_id`` if it is within the limit.

        Returns:
            RateLimitDecision; ``retry_after`` is whole seconds until the
            oldest request leaves the window when denied
        """
        now = self._clock()
        cutoff = now - self.window

        with self._lock:
            self._evict_idle(cutoff)
            timestamps = self._clients.get(client_id)
            if timestamps is None:
                timestamps = deque()
                self._clients[client_id] = timestamps
                self._evict_overflow()
            else:
                self._clients.move_to_end(client_id)

            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()

            if len(timestamps) >= self.limit:
                retry_after = max(1, int(timestamps[0] + self.window - now + 0.999))
                self.logger.warning(f"Rate limit exceeded for client {client_id}")
                return RateLimitDecision(False, 0, retry_after)

            timestamps.append(now)
            return RateLimitDecision(True, self.limit - len(timestamps), 0)

    def _evict_idle(self, cutoff: float) -> None:
        # Ordered least recently seen first, so stop at the first active client
        while self._clients:
            oldest_id, timestamps = next(iter(self._clients.items()))
            if timestamps and timestamps[-1] > cutoff:
                break
            del self._clients[oldest_id]

    def _evict_overflow(self) -> None:
        while len(self._clients) > self.max_clients:
            self._clients.popitem(last=False)

    def cleanup(self) -> int:
        """Drop clients with no requests inside the window."""
        cutoff = self._clock() - self.window
        with self._lock:
            idle = [cid for cid, ts in self._clients.items() if not ts or ts[-1] <= cutoff]
            for cid in idle:
                del self._clients[cid]
        return len(idle)

    def reset(self, client_id: str) -> None:
        with self._lock:
            self._clients.pop(client_id, None)

    def __len__(self) -> int:
        return len(self._clients)
