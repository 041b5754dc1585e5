"""
OpenCV face detector.

Grabs one frame per poll from a cv2.VideoCapture device (USB camera index,
RTSP URL or video file) and counts faces with a Haar cascade.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional, Union

import cv2
import numpy as np

from models.sample import DetectionResult
from .base import DetectorConfig, PresenceDetector

DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


@dataclass
class OpenCVFaceDetectorConfig(DetectorConfig):
    """
    Configuration for the OpenCV face detector.

    Attributes:
        device_id: Camera index (int), RTSP URL (str), or file path (str).
        cascade_path: Haar cascade XML. None = OpenCV's bundled frontal-face cascade.
        scale_factor: detectMultiScale scale step.
        min_neighbors: detectMultiScale neighbour threshold.
        min_face_size: Smallest face (pixels, square) to report.
        max_read_failures: Consecutive read failures before the capture is reopened.
    """
    device_id: Union[int, str] = 0
    cascade_path: Optional[str] = None
    scale_factor: float = 1.1
    min_neighbors: int = 5
    min_face_size: int = 30
    max_read_failures: int = 3

    @classmethod
    def from_camera_config(cls, camera_cfg: Any, source_id: str = "kiosk-camera") -> "OpenCVFaceDetectorConfig":
        """Adapter: Create from models.config.CameraConfig."""
        return cls(
            source_id=source_id,
            device_id=camera_cfg.device_id,
            cascade_path=camera_cfg.cascade_path,
            scale_factor=camera_cfg.scale_factor,
            min_neighbors=camera_cfg.min_neighbors,
            min_face_size=camera_cfg.min_face_size,
        )


def resolve_cascade_path(cascade_path: Optional[str]) -> str:
    if cascade_path:
        return cascade_path
    return os.path.join(cv2.data.haarcascades, DEFAULT_CASCADE)


class OpenCVFaceDetector(PresenceDetector):
    """
    Presence detector backed by cv2.VideoCapture + CascadeClassifier.

    Example:
        config = OpenCVFaceDetectorConfig(device_id=0)
        with OpenCVFaceDetector(config) as detector:
            result = detector.detect()
    """

    def __init__(self, config: OpenCVFaceDetectorConfig):
        super().__init__(config)
        self._cv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._cascade: Optional[cv2.CascadeClassifier] = None
        self._consecutive_failures = 0

    @property
    def device_id(self) -> Union[int, str]:
        return self._cv_config.device_id

    def open(self) -> None:
        if self._is_open:
            return

        cascade_path = resolve_cascade_path(self._cv_config.cascade_path)
        if not os.path.exists(cascade_path):
            raise RuntimeError(f"Missing cascade file: {cascade_path}")
        self._cascade = cv2.CascadeClassifier(cascade_path)
        if self._cascade.empty():
            raise RuntimeError(f"Failed to load cascade: {cascade_path}")

        self._open_capture()
        self._is_open = True
        logging.info(f"OpenCVFaceDetector opened: source_id={self.source_id}, cascade={cascade_path}")

    def _open_capture(self) -> None:
        if self._cap is not None:
            self._cap.release()
        self._cap = cv2.VideoCapture(self.device_id)
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise RuntimeError(f"Failed to open camera device {self.device_id}")
        self._consecutive_failures = 0

    def detect(self) -> DetectionResult:
        if not self._is_open or self._cap is None or self._cascade is None:
            return DetectionResult.failed()

        ret, frame = self._cap.read()
        if not ret or frame is None:
            self._consecutive_failures += 1
            logging.warning(f"Failed to read frame (failures: {self._consecutive_failures})")
            if self._consecutive_failures >= self._cv_config.max_read_failures:
                try:
                    self._open_capture()
                except RuntimeError as e:
                    logging.error(f"Camera reinitialization failed: {e}")
            return DetectionResult.failed()

        self._consecutive_failures = 0
        faces = self.find_faces(frame)
        count = len(faces)
        return DetectionResult(
            faces_detected=count > 0,
            face_count=count,
            confidence=1.0 if count else 0.0,
            success=True,
        )

    def find_faces(self, frame: np.ndarray) -> list[tuple[int, int, int, int]]:
        """Return face boxes as (x, y, w, h)."""
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
        size = self._cv_config.min_face_size
        faces = self._cascade.detectMultiScale(
            gray,
            scaleFactor=self._cv_config.scale_factor,
            minNeighbors=self._cv_config.min_neighbors,
            minSize=(size, size),
        )
        return [(int(x), int(y), int(w), int(h)) for (x, y, w, h) in faces]

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._is_open = False
        logging.info(f"OpenCVFaceDetector closed: source_id={self.source_id}")

