"""
In-process token bucket used by the load-weighted admission strategy.

Tokens refill continuously at ``rate`` per second up to ``burst``; the bucket
starts full. Unlike a client-side limiter this one never waits: a request
either gets its tokens now or is turned away.
"""

import threading
import time
from typing import Callable, Dict, Any


class TokenBucket:
    """
    Thread-safe, non-blocking token bucket.

    :param rate: Tokens added per second.
    :param burst: Maximum number of tokens the bucket can hold.
    :param clock: Monotonic time source in seconds, injectable for tests.
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst <= 0:
            raise ValueError("burst must be positive")
        self.rate = float(rate)
        self.burst = int(burst)
        self._clock = clock
        self._tokens = float(self.burst)
        self._last = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        # Caller holds the lock
        now = self._clock()
        elapsed = now - self._last
        if elapsed > 0:
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last = now

    def try_acquire(self, n: int = 1) -> bool:
        """
        Take ``n`` tokens if they are available right now.

        Refill, check and decrement happen under one lock, so concurrent
        callers can never spend the same tokens twice. ``n == 0`` always
        succeeds and leaves the bucket untouched.
        """
        if n < 0:
            raise ValueError("n must not be negative")
        if n == 0:
            return True

        with self._lock:
            self._refill()
            if self._tokens >= n:
                self._tokens -= n
                return True
            return False

    def available(self) -> float:
        """Tokens available at this instant."""
        with self._lock:
            self._refill()
            return self._tokens

    def get_status(self) -> Dict[str, Any]:
        """Rate, burst and current occupancy for the status endpoint."""
        return {
            "rate": self.rate,
            "burst": self.burst,
            "available": round(self.available(), 3),
        }
