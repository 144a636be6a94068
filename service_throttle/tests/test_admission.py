"""
Unit tests for admission strategies and the AdmissionController.
"""

import pytest
import random

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_throttle.app.throttle.admission import (
    AdmissionController,
    ProbabilisticStrategy,
    TokenBucketStrategy,
    build_strategy,
)
from service_throttle.app.throttle.mode_store import ModeStore
from service_throttle.app.throttle.models import Verdict
from service_throttle.app.throttle.token_bucket import TokenBucket
from shared.errors import InvalidArgumentError
from shared.metrics import MetricsCollector


TRIALS = 10000


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestProbabilisticStrategy:
    """Test cases for probabilistic admission."""

    @pytest.fixture
    def store(self):
        return ModeStore()

    @pytest.fixture
    def controller(self, store):
        return AdmissionController(store, ProbabilisticStrategy(rng=random.Random(20240901)))

    def _acceptance_rate(self, controller, load=1):
        accepted = sum(controller.decide(load) is Verdict.ACCEPT for _ in range(TRIALS))
        return accepted / TRIALS

    def test_accepting_always_admits(self, controller):
        assert self._acceptance_rate(controller) == 1.0

    def test_throttled_zero_always_admits(self, store, controller):
        store.set_throttled(0)
        assert self._acceptance_rate(controller) == 1.0

    def test_throttled_hundred_always_rejects(self, store, controller):
        store.set_throttled(100)
        assert self._acceptance_rate(controller) == 0.0

    def test_throttled_fifty_is_roughly_half(self, store, controller):
        store.set_throttled(50)
        assert self._acceptance_rate(controller) == pytest.approx(0.5, abs=0.03)

    def test_throttled_rate_tracks_intensity(self, store, controller):
        store.set_throttled(20)
        assert self._acceptance_rate(controller) == pytest.approx(0.8, abs=0.03)

    def test_accepting_ignores_leftover_intensity(self, store, controller):
        """Returning to accepting admits everything regardless of the old rate."""
        store.set_throttled(100)
        store.set_accepting()
        assert self._acceptance_rate(controller) == 1.0

    def test_load_does_not_matter(self, store, controller):
        store.set_throttled(100)
        assert controller.decide(0) is Verdict.REJECT
        store.set_accepting()
        assert controller.decide(10000) is Verdict.ACCEPT

    def test_draw_boundary(self, store):
        """Reject iff the draw is below the intensity."""

        class FixedRandom(random.Random):
            def __init__(self, value):
                super().__init__()
                self.value = value

            def randrange(self, *args, **kwargs):
                return self.value

        store.set_throttled(30)
        assert AdmissionController(store, ProbabilisticStrategy(FixedRandom(29))).decide(1) is Verdict.REJECT
        assert AdmissionController(store, ProbabilisticStrategy(FixedRandom(30))).decide(1) is Verdict.ACCEPT


class TestTokenBucketStrategy:
    """Test cases for load-weighted admission."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def bucket(self, clock):
        return TokenBucket(rate=2.0, burst=10, clock=clock)

    @pytest.fixture
    def store(self):
        return ModeStore()

    @pytest.fixture
    def controller(self, store, bucket):
        return AdmissionController(store, TokenBucketStrategy(bucket))

    def test_load_within_burst_admitted(self, controller, bucket):
        assert controller.decide(7) is Verdict.ACCEPT
        assert bucket.available() == 3

    def test_load_beyond_remaining_rejected(self, controller):
        assert controller.decide(7) is Verdict.ACCEPT
        assert controller.decide(10 - 7 + 1) is Verdict.REJECT

    def test_refill_readmits(self, controller, clock):
        assert controller.decide(10) is Verdict.ACCEPT
        assert controller.decide(4) is Verdict.REJECT
        clock.now += 2.0
        assert controller.decide(4) is Verdict.ACCEPT

    def test_zero_load_always_admitted(self, controller, bucket):
        controller.decide(10)
        assert controller.decide(0) is Verdict.ACCEPT
        assert bucket.available() == 0

    def test_mode_does_not_gate_admission(self, store, controller):
        """Throttled(100) has no effect on bucket admission."""
        store.set_throttled(100)
        assert controller.decide(5) is Verdict.ACCEPT

    def test_accepting_mode_does_not_bypass_bucket(self, store, controller):
        store.set_accepting()
        assert controller.decide(10) is Verdict.ACCEPT
        assert controller.decide(1) is Verdict.REJECT

    def test_get_status_reports_mode_and_bucket(self, store, controller):
        store.set_throttled(40)
        controller.decide(4)
        status = controller.get_status()
        assert status["status"] == "Throttled"
        assert status["intensity"] == 40
        assert status["strategy"] == "token_bucket"
        assert status["bucket"] == {"rate": 2.0, "burst": 10, "available": 6.0}


class TestAdmissionController:
    """Test cases shared by both strategies."""

    @pytest.mark.parametrize("load", [-1, "5", 2.5, None])
    def test_invalid_load(self, load):
        controller = AdmissionController(ModeStore(), ProbabilisticStrategy())
        with pytest.raises(InvalidArgumentError):
            controller.decide(load)

    def test_records_decisions(self):
        metrics = MetricsCollector("throttle")
        store = ModeStore()
        controller = AdmissionController(store, ProbabilisticStrategy(), metrics=metrics)

        controller.decide(3)
        store.set_throttled(100)
        controller.decide(2)

        registry = metrics.registry
        assert registry.get_sample_value(
            "admission_decisions_total", {"strategy": "probabilistic", "verdict": "accept"}
        ) == 1
        assert registry.get_sample_value(
            "admission_decisions_total", {"strategy": "probabilistic", "verdict": "reject"}
        ) == 1
        assert registry.get_sample_value("admission_load_sum", {"strategy": "probabilistic"}) == 5
        assert registry.get_sample_value("admission_load_count", {"strategy": "probabilistic"}) == 2


class TestBuildStrategy:
    """Test cases for strategy selection."""

    def test_probabilistic(self):
        strategy = build_strategy("probabilistic")
        assert isinstance(strategy, ProbabilisticStrategy)
        assert strategy.describe() == {"strategy": "probabilistic"}

    def test_token_bucket(self):
        strategy = build_strategy("token_bucket", bucket_rate=3.0, bucket_burst=6)
        assert isinstance(strategy, TokenBucketStrategy)
        assert strategy.bucket.rate == 3.0
        assert strategy.bucket.burst == 6

    def test_unknown(self):
        with pytest.raises(InvalidArgumentError):
            build_strategy("leaky_bucket")
