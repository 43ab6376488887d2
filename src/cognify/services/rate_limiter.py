"""Sliding-window admission control."""

import threading
import time
from collections import deque
from typing import Callable, Deque


class SlidingWindowRateLimiter:
    """Grant at most `max_requests` calls in any trailing `window` seconds.

    One instance is shared by every session in the process.
    """

    def __init__(
        self,
        max_requests: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._granted: Deque[float] = deque()
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        window_start = now - self.window
        while self._granted and self._granted[0] <= window_start:
            self._granted.popleft()

    def allow(self) -> bool:
        """Record and grant a request, or refuse it without recording."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if len(self._granted) >= self.max_requests:
                return False
            self._granted.append(now)
            return True

    def retry_after(self) -> float:
        """Seconds until the oldest grant leaves the window."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if len(self._granted) < self.max_requests:
                return 0.0
            return max(0.0, self._granted[0] + self.window - now)

    def reset(self) -> None:
        with self._lock:
            self._granted.clear()
