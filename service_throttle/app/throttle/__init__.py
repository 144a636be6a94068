"""
Throttle-state and admission-control engine.

Everything in here is in-memory and safe to call from concurrent request
handlers. The service constructs one ModeStore, one AdmissionController and
(for the token bucket strategy) one TokenBucket, and owns them for its
lifetime.
"""

from .models import OperatingMode, ModeSnapshot, Verdict, validate_intensity, validate_load
from .mode_store import ModeStore
from .token_bucket import TokenBucket
from .admission import (
    AdmissionController,
    AdmissionStrategy,
    ProbabilisticStrategy,
    TokenBucketStrategy,
    build_strategy,
)

__all__ = [
    "OperatingMode",
    "ModeSnapshot",
    "Verdict",
    "validate_intensity",
    "validate_load",
    "ModeStore",
    "TokenBucket",
    "AdmissionController",
    "AdmissionStrategy",
    "ProbabilisticStrategy",
    "TokenBucketStrategy",
    "build_strategy",
]
