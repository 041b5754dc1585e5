"""
Detection models: raw detector results and the samples fed to the engine.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DetectionResult:
    """
    Output of a presence detector for one polled frame.

    Attributes:
        faces_detected: Whether at least one face/person was found.
        face_count: Number of faces found.
        confidence: Detector confidence (0-1), 0 when nothing was found.
        success: False when the detector could not analyse a frame
            (camera not ready, read failure, detector error).
    """
    faces_detected: bool
    face_count: int = 0
    confidence: float = 0.0
    success: bool = True

    @classmethod
    def failed(cls) -> "DetectionResult":
        return cls(faces_detected=False, face_count=0, confidence=0.0, success=False)


@dataclass(frozen=True)
class DetectionSample:
    """
    One normalized observation as seen by the engine.

    Attributes:
        detected: Presence reported for this sample.
        count: Number of people reported (never negative).
        timestamp: Arrival time in seconds, used for debouncing.
    """
    detected: bool
    count: int
    timestamp: float

    @classmethod
    def normalize(cls, detected: bool, count: int, timestamp: float, success: bool = True) -> "DetectionSample":
        """
        Build a sample from raw detector output.

        Unsuccessful detections and negative counts are treated as absence.
        """
        if not success or count is None or count < 0:
            return cls(detected=False, count=0, timestamp=timestamp)
        detected = bool(detected)
        return cls(detected=detected, count=int(count) if detected else 0, timestamp=timestamp)
