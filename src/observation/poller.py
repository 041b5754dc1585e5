"""
Detection poller: runs a PresenceDetector on a fixed cadence and hands each
result to a single consumer.

There is exactly one consumer slot. Registering a new consumer replaces the
previous one, so a settings change can never leave two engines receiving
samples at the same time.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from models.sample import DetectionResult
from .base import PresenceDetector

# (detected, count, success)
SampleConsumer = Callable[[bool, int, bool], None]


class DetectionPoller:
    """
    Polls a detector every `interval_s` on a background thread.

    Example:
        poller = DetectionPoller(detector, interval_s=1.0)
        poller.set_consumer(engine.on_sample)
        poller.start()
    """

    def __init__(self, detector: PresenceDetector, interval_s: float = 1.0):
        self.detector = detector
        self.interval_s = max(0.05, float(interval_s))
        self._consumer: Optional[SampleConsumer] = None
        self._consumer_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.polls = 0
        self.failures = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def consumer(self) -> Optional[SampleConsumer]:
        with self._consumer_lock:
            return self._consumer

    def set_consumer(self, consumer: Optional[SampleConsumer]) -> None:
        """Register the sole consumer (None detaches)."""
        with self._consumer_lock:
            replaced = self._consumer is not None and consumer is not None
            self._consumer = consumer
        if replaced:
            logging.info("Detection consumer replaced")

    def poll_once(self) -> DetectionResult:
        """Run the detector once and deliver the result."""
        self.polls += 1
        try:
            result = self.detector.detect()
        except Exception as e:
            self.failures += 1
            logging.warning(f"Presence detection error: {e}")
            result = DetectionResult.failed()

        if not result.success:
            logging.debug("Detection failed, camera may not be ready yet")

        with self._consumer_lock:
            consumer = self._consumer
        if consumer is not None:
            try:
                consumer(result.faces_detected, result.face_count, result.success)
            except Exception as e:
                logging.warning(f"Detection consumer error: {e}")
        return result

    def start(self) -> None:
        if self.is_running:
            logging.info("Detection poller already running")
            return
        if not self.detector.is_open:
            self.detector.open()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="detection-poller", daemon=True)
        self._thread.start()
        logging.info(f"Detection poller started: source={self.detector.source_id}, interval={self.interval_s}s")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        try:
            self.detector.close()
        except Exception as e:
            logging.warning(f"Error closing detector: {e}")
        logging.info("Detection poller stopped")

    def _run(self) -> None:
        while not self._stop.is_set():
            started = time.monotonic()
            self.poll_once()
            elapsed = time.monotonic() - started
            self._stop.wait(max(0.0, self.interval_s - elapsed))
