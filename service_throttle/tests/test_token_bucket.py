"""
Unit tests for the in-process TokenBucket.
"""

import pytest
import threading
from concurrent.futures import ThreadPoolExecutor

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_throttle.app.throttle.token_bucket import TokenBucket


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestTokenBucket:
    """Test cases for TokenBucket."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def bucket(self, clock):
        """Bucket with rate 5/s and burst 10, starting full."""
        return TokenBucket(rate=5.0, burst=10, clock=clock)

    def test_starts_full(self, bucket):
        assert bucket.available() == 10

    def test_admit_consumes_exactly_n(self, bucket):
        """A load within the burst is admitted and costs exactly its size."""
        assert bucket.try_acquire(4) is True
        assert bucket.available() == 6

    def test_second_request_beyond_remaining_is_rejected(self, bucket):
        """After taking n, a request for burst - n + 1 does not fit."""
        assert bucket.try_acquire(4) is True
        assert bucket.try_acquire(10 - 4 + 1) is False
        # A rejected request consumes nothing
        assert bucket.available() == 6

    def test_refill_makes_rejected_request_admissible(self, bucket, clock):
        assert bucket.try_acquire(10) is True
        assert bucket.try_acquire(3) is False

        clock.advance(1.0)

        assert bucket.try_acquire(3) is True
        assert bucket.available() == pytest.approx(2.0)

    def test_refill_is_capped_at_burst(self, bucket, clock):
        bucket.try_acquire(5)
        clock.advance(3600)
        assert bucket.available() == 10

    def test_load_larger_than_burst_never_fits(self, bucket, clock):
        clock.advance(3600)
        assert bucket.try_acquire(11) is False

    def test_zero_load_always_admitted_without_change(self, bucket):
        """Zero-cost requests pass even when the bucket is empty."""
        assert bucket.try_acquire(0) is True
        assert bucket.available() == 10

        bucket.try_acquire(10)
        assert bucket.try_acquire(0) is True
        assert bucket.available() == 0

    def test_negative_load_rejected(self, bucket):
        with pytest.raises(ValueError):
            bucket.try_acquire(-1)

    @pytest.mark.parametrize("rate,burst", [(0, 10), (-1, 10), (1, 0), (1, -5)])
    def test_invalid_configuration(self, rate, burst):
        with pytest.raises(ValueError):
            TokenBucket(rate=rate, burst=burst)

    def test_get_status(self, bucket):
        bucket.try_acquire(2)
        assert bucket.get_status() == {"rate": 5.0, "burst": 10, "available": 8.0}

    def test_concurrent_acquire_no_double_spend(self, clock):
        """N callers each asking for k tokens out of exactly N*k all succeed, once."""
        workers, cost = 50, 3
        bucket = TokenBucket(rate=1.0, burst=workers * cost, clock=clock)
        barrier = threading.Barrier(workers)

        def acquire():
            barrier.wait()
            return bucket.try_acquire(cost)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: acquire(), range(workers)))

        assert results.count(True) == workers
        assert bucket.available() == 0

    def test_concurrent_oversubscription(self, clock):
        """Twice as many callers as capacity: exactly half succeed."""
        workers, cost = 40, 5
        bucket = TokenBucket(rate=1.0, burst=(workers // 2) * cost, clock=clock)
        barrier = threading.Barrier(workers)

        def acquire():
            barrier.wait()
            return bucket.try_acquire(cost)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: acquire(), range(workers)))

        assert results.count(True) == workers // 2
        assert results.count(False) == workers // 2
        assert bucket.available() == 0
