"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass
class CameraConfig:
    """Camera used by the OpenCV face detector."""
    device_id: Union[int, str] = 0
    cascade_path: Optional[str] = None
    scale_factor: float = 1.1
    min_neighbors: int = 5
    min_face_size: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            cascade_path=d.get("cascade_path"),
            scale_factor=d.get("scale_factor", 1.1),
            min_neighbors=d.get("min_neighbors", 5),
            min_face_size=d.get("min_face_size", 30),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "device_id": self.device_id,
            "scale_factor": self.scale_factor,
            "min_neighbors": self.min_neighbors,
            "min_face_size": self.min_face_size,
        }
        if self.cascade_path is not None:
            d["cascade_path"] = self.cascade_path
        return d


@dataclass
class DetectionConfig:
    """Presence detection and signal conditioning."""
    enabled: bool = True
    backend: str = "opencv"
    poll_interval_s: float = 1.0
    debounce_ms: int = 500
    positive_threshold: int = 2
    negative_threshold: int = 3
    simulated_probability: float = 0.8
    camera: CameraConfig = field(default_factory=CameraConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            enabled=d.get("enabled", True),
            backend=d.get("backend", "opencv"),
            poll_interval_s=d.get("poll_interval_s", 1.0),
            debounce_ms=d.get("debounce_ms", 500),
            positive_threshold=d.get("positive_threshold", 2),
            negative_threshold=d.get("negative_threshold", 3),
            simulated_probability=d.get("simulated_probability", 0.8),
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "backend": self.backend,
            "poll_interval_s": self.poll_interval_s,
            "debounce_ms": self.debounce_ms,
            "positive_threshold": self.positive_threshold,
            "negative_threshold": self.negative_threshold,
            "simulated_probability": self.simulated_probability,
            "camera": self.camera.to_dict(),
        }


@dataclass
class GreetingConfig:
    """Session lifecycle timing and greeting language."""
    auto_interaction_enabled: bool = True
    language: str = "en-US"
    session_duration_s: float = 60.0
    cooldown_s: float = 30.0
    face_lost_grace_s: float = 8.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GreetingConfig":
        return cls(
            auto_interaction_enabled=d.get("auto_interaction_enabled", True),
            language=d.get("language", "en-US"),
            session_duration_s=d.get("session_duration_s", 60.0),
            cooldown_s=d.get("cooldown_s", 30.0),
            face_lost_grace_s=d.get("face_lost_grace_s", 8.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "auto_interaction_enabled": self.auto_interaction_enabled,
            "language": self.language,
            "session_duration_s": self.session_duration_s,
            "cooldown_s": self.cooldown_s,
            "face_lost_grace_s": self.face_lost_grace_s,
        }


@dataclass
class SpeechConfig:
    """Speech output backend."""
    backend: str = "pyttsx3"
    rate: int = 170
    volume: float = 1.0
    voice: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SpeechConfig":
        return cls(
            backend=d.get("backend", "pyttsx3"),
            rate=d.get("rate", 170),
            volume=d.get("volume", 1.0),
            voice=d.get("voice"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "backend": self.backend,
            "rate": self.rate,
            "volume": self.volume,
        }
        if self.voice is not None:
            d["voice"] = self.voice
        return d


@dataclass
class WebConfig:
    """Status API server."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "host": self.host,
            "port": self.port,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    greeting: GreetingConfig = field(default_factory=GreetingConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/kiosk_greeter.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            greeting=GreetingConfig.from_dict(d.get("greeting", {}) or {}),
            speech=SpeechConfig.from_dict(d.get("speech", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/kiosk_greeter.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging the effective config)."""
        return {
            "detection": self.detection.to_dict(),
            "greeting": self.greeting.to_dict(),
            "speech": self.speech.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
