"""
PresenceDetector interface for pluggable presence sources.

This defines the contract that every detector must implement so the poller
can work with any source:
- OpenCV camera + Haar cascade face detection
- Simulated presence (demo / kiosk bring-up)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from models.sample import DetectionResult


@dataclass
class DetectorConfig:
    """
    Base configuration for presence detectors.

    Attributes:
        source_id: Identifier for this detector (e.g., "kiosk-cam").
    """
    source_id: str = "default"


class PresenceDetector(ABC):
    """
    Abstract base class for presence detectors.

    Lifecycle:
        1. Create instance with config
        2. Call open() to initialize the detector
        3. Call detect() once per poll
        4. Call close() to release resources

    Can also be used as a context manager:
        with OpenCVFaceDetector(config) as detector:
            result = detector.detect()
    """

    def __init__(self, config: DetectorConfig):
        self._config = config
        self._is_open = False

    @property
    def source_id(self) -> str:
        """Identifier for this detector."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the detector is open and ready."""
        return self._is_open

    @abstractmethod
    def open(self) -> None:
        """
        Open/initialize the detector.

        Raises:
            RuntimeError: If the detector cannot be opened.
        """
        pass

    @abstractmethod
    def detect(self) -> DetectionResult:
        """
        Analyse the current scene.

        Returns:
            DetectionResult. `success` is False when nothing could be analysed
            (detector closed, camera not ready, frame read failure).
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release detector resources.

        Safe to call multiple times.
        """
        pass

    def __enter__(self) -> "PresenceDetector":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
