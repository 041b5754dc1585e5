"""
Hysteresis filter that turns per-sample detections into confirmed presence.

Confirmation is quick (few positive samples) and release is slower (more
negative samples), so a real visitor is not missed and brief detector
dropouts do not end a visit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

# Run-length counters saturate here.
MAX_RUN_LENGTH = 10_000


@dataclass
class ConfirmationConfig:
    """
    Attributes:
        positive_threshold: Consecutive positive samples needed to confirm presence.
        negative_threshold: Consecutive negative samples needed to confirm absence.
    """
    positive_threshold: int = 2
    negative_threshold: int = 3


class Observation(NamedTuple):
    """Result of feeding one sample to the filter."""
    changed: bool
    confirmed: bool
    count: int


class ConfirmationFilter:
    """
    Converts raw (detected, count) samples into a stable `confirmed` flag.

    Invariant: at most one of the two run-length counters is nonzero.
    `confirmed` becomes True only once `consecutive_positive` reaches the
    positive threshold, and False only once `consecutive_negative` reaches
    the negative threshold.
    """

    def __init__(self, config: ConfirmationConfig | None = None):
        self._config = config or ConfirmationConfig()
        if self._config.positive_threshold < 1 or self._config.negative_threshold < 1:
            raise ValueError("confirmation thresholds must be >= 1")
        self.consecutive_positive = 0
        self.consecutive_negative = 0
        self.confirmed = False
        self.count = 0

    @property
    def positive_threshold(self) -> int:
        return self._config.positive_threshold

    @property
    def negative_threshold(self) -> int:
        return self._config.negative_threshold

    def observe(self, detected: bool, count: int = 0) -> Observation:
        """
        Feed one sample.

        Returns:
            Observation(changed, confirmed, count). `changed` is True only on
            the sample that flips `confirmed` (rising or falling edge).
        """
        changed = False

        if detected:
            self.consecutive_positive = min(self.consecutive_positive + 1, MAX_RUN_LENGTH)
            self.consecutive_negative = 0
            self.count = max(0, count)
            if not self.confirmed and self.consecutive_positive >= self.positive_threshold:
                self.confirmed = True
                changed = True
        else:
            self.consecutive_negative = min(self.consecutive_negative + 1, MAX_RUN_LENGTH)
            self.consecutive_positive = 0
            if self.confirmed and self.consecutive_negative >= self.negative_threshold:
                self.confirmed = False
                changed = True
            if not self.confirmed:
                self.count = 0

        return Observation(changed=changed, confirmed=self.confirmed, count=self.count)

    def reset(self) -> None:
        self.consecutive_positive = 0
        self.consecutive_negative = 0
        self.confirmed = False
        self.count = 0
