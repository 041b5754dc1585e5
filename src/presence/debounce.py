"""
Debouncing of raw detection samples.

The detector can emit bursts of identical results; without debouncing the
confirmation counters would follow the burst rate instead of real-time
stability. Timestamps come from the engine's monotonic clock.
"""

from __future__ import annotations

import logging
from typing import Optional

from models.sample import DetectionSample


class Debouncer:
    """
    Drops a sample that repeats the last accepted value too soon.

    A sample is dropped when it reports the same `detected` value as the
    previously accepted sample and arrives less than `window_s` after it.
    Everything else is forwarded and becomes the new last-accepted sample.
    """

    def __init__(self, window_ms: int = 500):
        self._window_s = max(0, window_ms) / 1000.0
        self._last: Optional[DetectionSample] = None
        self.dropped = 0

    @property
    def window_s(self) -> float:
        return self._window_s

    @property
    def last_accepted(self) -> Optional[DetectionSample]:
        return self._last

    def submit(self, sample: DetectionSample) -> Optional[DetectionSample]:
        """Return the sample if accepted, None if it was dropped."""
        last = self._last
        # A sample stamped before the last accepted one (clock stepped back) is never dropped.
        if (
            last is not None
            and sample.detected == last.detected
            and 0.0 <= sample.timestamp - last.timestamp < self._window_s
        ):
            self.dropped += 1
            logging.debug(
                f"Debounced sample detected={sample.detected} "
                f"dt={sample.timestamp - last.timestamp:.3f}s"
            )
            return None

        self._last = sample
        return sample

    def reset(self) -> None:
        self._last = None
