"""
Typed models for the kiosk greeter.

Detection samples flow in from the detector, sessions and cooldowns are
owned by the greeting engine, and GreetingStatus is what the UI reads.
"""

from .sample import DetectionResult, DetectionSample
from .session import CooldownWindow, GreetingStatus, Session
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    GreetingConfig,
    SpeechConfig,
    WebConfig,
)

__all__ = [
    # Detection
    "DetectionResult",
    "DetectionSample",
    # Session
    "Session",
    "CooldownWindow",
    "GreetingStatus",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "GreetingConfig",
    "SpeechConfig",
    "WebConfig",
]
