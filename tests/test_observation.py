"""
Tests for presence detectors and the detection poller.
"""

import threading
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from models.config import DetectionConfig
from models.sample import DetectionResult
from observation import (
    DetectionPoller,
    PresenceDetector,
    SimulatedDetector,
    SimulatedDetectorConfig,
    create_detector_from_config,
)
from observation.base import DetectorConfig


class StubDetector(PresenceDetector):
    def __init__(self, results=None, error=None):
        super().__init__(DetectorConfig(source_id="stub"))
        self.results = list(results or [])
        self.error = error
        self.opened = 0
        self.closed = 0

    def open(self):
        self.opened += 1
        self._is_open = True

    def detect(self):
        if self.error is not None:
            raise self.error
        if self.results:
            return self.results.pop(0)
        return DetectionResult(faces_detected=True, face_count=1, confidence=1.0)

    def close(self):
        self.closed += 1
        self._is_open = False


class TestSimulatedDetector:
    def test_closed_detector_reports_failure(self):
        detector = SimulatedDetector(SimulatedDetectorConfig(probability=1.0))
        assert detector.detect().success is False

    def test_probability_one_always_detects(self):
        with SimulatedDetector(SimulatedDetectorConfig(probability=1.0, seed=7)) as detector:
            results = [detector.detect() for _ in range(10)]
        assert all(r.faces_detected and r.face_count == 1 for r in results)
        assert detector.is_open is False

    def test_probability_zero_never_detects(self):
        with SimulatedDetector(SimulatedDetectorConfig(probability=0.0)) as detector:
            results = [detector.detect() for _ in range(10)]
        assert not any(r.faces_detected for r in results)
        assert all(r.success for r in results)

    def test_seed_is_reproducible(self):
        def run():
            with SimulatedDetector(SimulatedDetectorConfig(probability=0.5, seed=42)) as d:
                return [d.detect().faces_detected for _ in range(20)]

        assert run() == run()


class TestDetectorFactory:
    def test_simulated_backend(self):
        detector = create_detector_from_config(DetectionConfig(backend="simulated"))
        assert isinstance(detector, SimulatedDetector)
        assert detector.source_id == "simulated"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_detector_from_config(DetectionConfig(backend="lidar"))


class TestDetectionPoller:
    def test_poll_delivers_to_consumer(self):
        consumer = MagicMock()
        poller = DetectionPoller(StubDetector([DetectionResult(True, 2, 0.9)]))
        poller.set_consumer(consumer)

        poller.poll_once()
        consumer.assert_called_once_with(True, 2, True)
        assert poller.polls == 1

    def test_detector_exception_becomes_failed_sample(self):
        consumer = MagicMock()
        poller = DetectionPoller(StubDetector(error=RuntimeError("camera unplugged")))
        poller.set_consumer(consumer)

        result = poller.poll_once()
        assert result.success is False
        assert poller.failures == 1
        consumer.assert_called_once_with(False, 0, False)

    def test_single_consumer_slot(self):
        first = MagicMock()
        second = MagicMock()
        poller = DetectionPoller(StubDetector())
        poller.set_consumer(first)
        poller.set_consumer(second)

        poller.poll_once()
        first.assert_not_called()
        second.assert_called_once()

    def test_detached_consumer(self):
        consumer = MagicMock()
        poller = DetectionPoller(StubDetector())
        poller.set_consumer(consumer)
        poller.set_consumer(None)

        poller.poll_once()
        consumer.assert_not_called()
        assert poller.consumer is None

    def test_consumer_error_is_contained(self):
        poller = DetectionPoller(StubDetector())
        poller.set_consumer(MagicMock(side_effect=RuntimeError("queue closed")))
        result = poller.poll_once()
        assert result.success is True

    def test_start_and_stop(self):
        detector = StubDetector()
        polled = threading.Event()
        poller = DetectionPoller(detector, interval_s=0.05)
        poller.set_consumer(lambda detected, count, success: polled.set())

        poller.start()
        try:
            assert polled.wait(timeout=2.0)
            assert poller.is_running
            assert detector.opened == 1
        finally:
            poller.stop(timeout=2.0)

        assert poller.is_running is False
        assert detector.closed == 1


class TestOpenCVFaceDetector:
    @pytest.fixture
    def capture(self):
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.read.return_value = (True, np.zeros((240, 320, 3), dtype=np.uint8))
        return cap

    def test_blank_frame_has_no_faces(self, capture):
        from observation.opencv_face import OpenCVFaceDetector, OpenCVFaceDetectorConfig

        with patch("observation.opencv_face.cv2.VideoCapture", return_value=capture):
            with OpenCVFaceDetector(OpenCVFaceDetectorConfig(device_id=0)) as detector:
                result = detector.detect()

        assert result.success is True
        assert result.faces_detected is False
        assert result.face_count == 0
        capture.release.assert_called()

    def test_read_failures_reopen_capture(self, capture):
        from observation.opencv_face import OpenCVFaceDetector, OpenCVFaceDetectorConfig

        capture.read.return_value = (False, None)
        config = OpenCVFaceDetectorConfig(device_id=0, max_read_failures=2)
        with patch("observation.opencv_face.cv2.VideoCapture", return_value=capture) as video_capture:
            detector = OpenCVFaceDetector(config)
            detector.open()
            results = [detector.detect() for _ in range(2)]
            detector.close()

        assert all(r.success is False for r in results)
        assert video_capture.call_count == 2

    def test_missing_cascade_file(self, tmp_path):
        from observation.opencv_face import OpenCVFaceDetector, OpenCVFaceDetectorConfig

        config = OpenCVFaceDetectorConfig(cascade_path=str(tmp_path / "missing.xml"))
        with pytest.raises(RuntimeError):
            OpenCVFaceDetector(config).open()

    def test_closed_detector_reports_failure(self):
        from observation.opencv_face import OpenCVFaceDetector, OpenCVFaceDetectorConfig

        assert OpenCVFaceDetector(OpenCVFaceDetectorConfig()).detect().success is False
