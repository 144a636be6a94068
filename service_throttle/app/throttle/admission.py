"""
Admission control: turn (mode, load) into an accept/reject verdict.

Two strategies exist and exactly one is chosen when the service starts:

- ``probabilistic``: while throttled, each request is rejected with
  probability ``intensity`` percent. The load is ignored.
- ``token_bucket``: each request costs ``load`` tokens from a shared bucket.
  The operating mode is reported but does not gate admission; the bucket's
  rate and burst are the only admission parameters.
"""

import random
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

from shared.config import STRATEGY_PROBABILISTIC, STRATEGY_TOKEN_BUCKET
from shared.errors import InvalidArgumentError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .models import ModeSnapshot, Verdict, validate_load
from .mode_store import ModeStore
from .token_bucket import TokenBucket


class AdmissionStrategy(ABC):
    """Decides whether one request is admitted."""

    name: str = ""

    @abstractmethod
    def admit(self, load: int, snapshot: ModeSnapshot) -> Verdict:
        """Return the verdict for a request of ``load`` items under ``snapshot``."""

    def describe(self) -> Dict[str, Any]:
        return {"strategy": self.name}


class ProbabilisticStrategy(AdmissionStrategy):
    """Reject ``intensity`` percent of requests while throttled."""

    name = STRATEGY_PROBABILISTIC

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def admit(self, load: int, snapshot: ModeSnapshot) -> Verdict:
        if not snapshot.throttled:
            return Verdict.ACCEPT

        draw = self.rng.randrange(100)
        if draw < snapshot.intensity:
            return Verdict.REJECT
        return Verdict.ACCEPT


class TokenBucketStrategy(AdmissionStrategy):
    """Charge each request its load in tokens; the mode is informational only."""

    name = STRATEGY_TOKEN_BUCKET

    def __init__(self, bucket: TokenBucket):
        self.bucket = bucket

    def admit(self, load: int, snapshot: ModeSnapshot) -> Verdict:
        if self.bucket.try_acquire(load):
            return Verdict.ACCEPT
        return Verdict.REJECT

    def describe(self) -> Dict[str, Any]:
        status = super().describe()
        status["bucket"] = self.bucket.get_status()
        return status


def build_strategy(
    name: str,
    *,
    bucket_rate: float = 10.0,
    bucket_burst: int = 20,
    rng: Optional[random.Random] = None,
) -> AdmissionStrategy:
    """Create the admission strategy named by configuration."""
    if name == STRATEGY_PROBABILISTIC:
        return ProbabilisticStrategy(rng=rng)
    if name == STRATEGY_TOKEN_BUCKET:
        return TokenBucketStrategy(TokenBucket(rate=bucket_rate, burst=bucket_burst))
    raise InvalidArgumentError(
        f"Unknown admission strategy: {name}",
        details={"strategy": name, "supported": [STRATEGY_PROBABILISTIC, STRATEGY_TOKEN_BUCKET]}
    )


class AdmissionController:
    """Evaluates requests against the mode store with one fixed strategy."""

    def __init__(
        self,
        mode_store: ModeStore,
        strategy: AdmissionStrategy,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.mode_store = mode_store
        self.strategy = strategy
        self.metrics = metrics
        self.logger = get_logger("throttle.admission")

    def decide(self, load: int) -> Verdict:
        """
        Admit or reject a request carrying ``load`` items.

        Rejection is a normal verdict, not an error. Only a malformed load
        (negative or not an integer) raises InvalidArgumentError.
        """
        load = validate_load(load)
        snapshot = self.mode_store.read()
        verdict = self.strategy.admit(load, snapshot)

        if self.metrics:
            self.metrics.record_admission(self.strategy.name, verdict.value, load)
        if verdict is Verdict.REJECT:
            self.logger.debug(
                "Request throttled",
                strategy=self.strategy.name,
                load=load,
                status=snapshot.mode.value,
                throttle_rate=snapshot.intensity
            )
        return verdict

    def get_status(self) -> Dict[str, Any]:
        """Current mode plus the strategy's own state."""
        status = self.mode_store.read().to_dict()
        status.update(self.strategy.describe())
        return status
