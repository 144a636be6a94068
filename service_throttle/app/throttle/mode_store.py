"""
Concurrency-safe holder of the current operating mode.
"""

import threading
from typing import Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .models import ACCEPTING, ModeSnapshot, OperatingMode, validate_intensity


class ModeStore:
    """
    Holds the operating mode as an immutable ModeSnapshot.

    Writers serialize on a lock and publish a fresh snapshot; readers just
    take the current reference, so the admission path never waits on an
    administrative update and every read is entirely before or after a write.
    """

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self.logger = get_logger("throttle.mode_store")
        self.metrics = metrics
        self._lock = threading.Lock()
        self._snapshot: ModeSnapshot = ACCEPTING

    def read(self) -> ModeSnapshot:
        """Return the current mode and intensity as one snapshot."""
        return self._snapshot

    def set_accepting(self) -> ModeSnapshot:
        """Switch to accepting; intensity is cleared to 0."""
        return self._publish(ACCEPTING)

    def set_throttled(self, intensity: int) -> ModeSnapshot:
        """Switch to throttled at ``intensity`` percent.

        Raises InvalidArgumentError, leaving the current mode in place, when
        the intensity is not an integer in [0, 100].
        """
        intensity = validate_intensity(intensity)
        return self._publish(ModeSnapshot(OperatingMode.THROTTLED, intensity))

    def _publish(self, snapshot: ModeSnapshot) -> ModeSnapshot:
        with self._lock:
            previous = self._snapshot
            self._snapshot = snapshot
            # Gauges must end up matching the last published snapshot
            if self.metrics:
                self.metrics.record_mode(snapshot.mode.value, snapshot.intensity, snapshot.throttled)

        self.logger.info(
            "mode changed",
            old_status=previous.mode.value,
            old_throttle_rate=previous.intensity,
            status=snapshot.mode.value,
            throttle_rate=snapshot.intensity
        )
        return snapshot
