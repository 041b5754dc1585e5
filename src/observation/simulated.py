"""
Simulated presence detector for kiosk bring-up and demos.

Reports a face with a fixed probability on every poll, which produces the
kind of jittery signal the confirmation filter is meant to smooth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from models.sample import DetectionResult
from .base import DetectorConfig, PresenceDetector


@dataclass
class SimulatedDetectorConfig(DetectorConfig):
    """
    Attributes:
        probability: Chance (0-1) that a poll reports a face.
        seed: RNG seed for reproducible runs.
    """
    probability: float = 0.8
    seed: Optional[int] = None


class SimulatedDetector(PresenceDetector):
    def __init__(self, config: SimulatedDetectorConfig):
        super().__init__(config)
        self._sim_config = config
        self._rng = np.random.default_rng(config.seed)

    def open(self) -> None:
        self._is_open = True

    def detect(self) -> DetectionResult:
        if not self._is_open:
            return DetectionResult.failed()
        detected = bool(self._rng.random() < self._sim_config.probability)
        return DetectionResult(
            faces_detected=detected,
            face_count=1 if detected else 0,
            confidence=0.95 if detected else 0.0,
            success=True,
        )

    def close(self) -> None:
        self._is_open = False
