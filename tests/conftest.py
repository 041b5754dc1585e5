"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from greeting.engine import EngineConfig, GreetingEngine  # noqa: E402
from greeting.session import SessionTimings  # noqa: E402
from speech.base import LogOnlySpeech, SpeechOutput  # noqa: E402


class FakeClock:
    """Manually advanced clock; can be stepped backwards."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Simulate the timer thread calling back, even if cancelled."""
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    """Records every timer created so tests can fire them by kind."""

    def __init__(self):
        self.created = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.created.append(timer)
        return timer

    def live(self, kind):
        """Most recent non-cancelled timer of `kind`, or None."""
        for timer in reversed(self.created):
            if timer.args and timer.args[0] == kind and not timer.cancelled:
                return timer
        return None

    def latest(self, kind):
        """Most recent timer of `kind`, cancelled or not."""
        for timer in reversed(self.created):
            if timer.args and timer.args[0] == kind:
                return timer
        return None


class FailingSpeech(SpeechOutput):
    def __init__(self):
        self.calls = 0

    def synthesize_and_play(self, text, language):
        self.calls += 1
        raise RuntimeError("audio device unavailable")


def run_inline(fn):
    fn()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def speech():
    return LogOnlySpeech()


@pytest.fixture
def engine_config():
    """Engine config with the production defaults spelled out."""
    return EngineConfig(
        debounce_ms=500,
        positive_threshold=2,
        negative_threshold=3,
        timings=SessionTimings(session_duration_s=60.0, cooldown_s=30.0, face_lost_grace_s=8.0),
        language="en-US",
    )


@pytest.fixture
def engine(speech, engine_config, clock, timer_factory):
    """Engine driven synchronously via drain(), with fake time and timers."""
    return GreetingEngine(
        speech,
        engine_config,
        clock=clock,
        wall_clock=clock,
        timer_factory=timer_factory,
        greeting_runner=run_inline,
    )


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
detection:
  backend: "opencv"
  poll_interval_s: 1.0
  debounce_ms: 500
  positive_threshold: 2
  negative_threshold: 3
  camera:
    device_id: 0

greeting:
  language: "en-US"
  session_duration_s: 60
  cooldown_s: 30
  face_lost_grace_s: 8

speech:
  backend: "pyttsx3"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "detection": {
            "enabled": True,
            "backend": "simulated",
            "poll_interval_s": 1.0,
            "debounce_ms": 500,
            "positive_threshold": 2,
            "negative_threshold": 3,
            "simulated_probability": 0.8,
            "camera": {"device_id": 0},
        },
        "greeting": {
            "auto_interaction_enabled": True,
            "language": "en-US",
            "session_duration_s": 60,
            "cooldown_s": 30,
            "face_lost_grace_s": 8,
        },
        "speech": {
            "backend": "log",
        },
        "web": {
            "enabled": True,
            "host": "127.0.0.1",
            "port": 5000,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
