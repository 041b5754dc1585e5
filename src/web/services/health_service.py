from __future__ import annotations

import os
import platform
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class HealthService:
    stats: Dict[str, Any]

    def get_health_summary(self) -> Dict[str, Any]:
        return {
            "timestamp": time.time(),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "cwd": os.getcwd(),
        }

    def poll_failure_ratio(self) -> Optional[float]:
        polls = self.stats.get("polls") or 0
        if not polls:
            return None
        return (self.stats.get("poll_failures") or 0) / polls

    @staticmethod
    def compute_warnings(
        engine_running: bool,
        poll_failure_ratio: Optional[float],
        cpu_temp_c: Optional[float],
    ) -> List[str]:
        """
        Warning flags for /api/health.

        Thresholds:
        - engine_stopped: engine worker not running
        - detector_failing: more than half of polls raised
        - temp_high: cpu_temp_c > 80
        """
        warnings = []
        if not engine_running:
            warnings.append("engine_stopped")
        if poll_failure_ratio is not None and poll_failure_ratio > 0.5:
            warnings.append("detector_failing")
        if cpu_temp_c is not None and cpu_temp_c > 80:
            warnings.append("temp_high")
        return warnings

    @staticmethod
    def read_cpu_temp_c() -> Optional[float]:
        """
        Best-effort CPU temperature read; returns None if unavailable.
        """
        candidates = [
            "/sys/class/thermal/thermal_zone0/temp",
            "/sys/class/hwmon/hwmon0/temp1_input",
        ]
        for path in candidates:
            try:
                if os.path.exists(path):
                    with open(path, "r") as f:
                        raw = f.read().strip()
                        return float(raw) / 1000.0 if len(raw) > 3 else float(raw)
            except (OSError, ValueError):
                continue
        return None
