"""
Observation layer for pluggable presence detectors.

This layer abstracts where presence comes from (camera + face detector,
simulation) from the greeting engine. Each detector implements the
PresenceDetector interface; the DetectionPoller feeds its results to the
engine.
"""

from __future__ import annotations

from typing import Any

from .base import DetectorConfig, PresenceDetector
from .poller import DetectionPoller
from .simulated import SimulatedDetector, SimulatedDetectorConfig


def create_detector_from_config(detection_cfg: Any) -> PresenceDetector:
    """
    Factory: build a detector from models.config.DetectionConfig.

    The OpenCV backend is imported lazily so the simulated backend runs
    without a camera stack.
    """
    if detection_cfg.backend == "simulated":
        return SimulatedDetector(
            SimulatedDetectorConfig(
                source_id="simulated",
                probability=float(detection_cfg.simulated_probability),
            )
        )
    if detection_cfg.backend == "opencv":
        from .opencv_face import OpenCVFaceDetector, OpenCVFaceDetectorConfig
        return OpenCVFaceDetector(OpenCVFaceDetectorConfig.from_camera_config(detection_cfg.camera))
    raise ValueError(f"Unknown detection backend: {detection_cfg.backend}")


__all__ = [
    "PresenceDetector",
    "DetectorConfig",
    "DetectionPoller",
    "SimulatedDetector",
    "SimulatedDetectorConfig",
    "create_detector_from_config",
]
