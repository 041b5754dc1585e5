from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from greeting.engine import EngineConfig, GreetingEngine
from models.config import Config
from observation import DetectionPoller, create_detector_from_config
from speech import SpeechOutput, create_speech_from_config


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: Config
    engine: GreetingEngine
    poller: Optional[DetectionPoller]
    speech: SpeechOutput
    start_time: float = field(default_factory=time.time)

    def start(self) -> None:
        self.engine.start()
        if self.poller is not None:
            self.engine.attach(self.poller)
            self.poller.start()

    def shutdown(self) -> None:
        if self.poller is not None:
            self.poller.set_consumer(None)
            self.poller.stop()
        self.engine.stop()
        try:
            self.speech.close()
        except Exception as e:
            logging.warning(f"Error closing speech backend: {e}")

    def uptime_seconds(self) -> float:
        return time.time() - self.start_time

    def stats_snapshot(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {
            "uptime_seconds": int(self.uptime_seconds()),
            "samples_received": self.engine.samples_received,
            "samples_accepted": self.engine.samples_accepted,
            "sessions_started": self.engine.sessions.sessions_started,
            "greetings_failed": self.engine.executor.failures,
        }
        if self.poller is not None:
            stats["polls"] = self.poller.polls
            stats["poll_failures"] = self.poller.failures
        return stats


def build_context(config: Config, with_poller: bool = True) -> RuntimeContext:
    """Wire detector, poller, speech backend and engine from config."""
    speech = create_speech_from_config(config.speech)
    engine = GreetingEngine(speech, EngineConfig.from_config(config))
    poller = None
    if with_poller:
        detector = create_detector_from_config(config.detection)
        poller = DetectionPoller(detector, interval_s=config.detection.poll_interval_s)
    return RuntimeContext(config=config, engine=engine, poller=poller, speech=speech)
