"""
Greeting session engine.

The engine owns presence confirmation and the session lifecycle:
- GreetingEngine: serialized event processing and status projection
- SessionStateMachine: IDLE/ACTIVE lifecycle with cooldown
- GreetingExecutor: one greeting at a time through a SpeechOutput
- TimerManager: generation-stamped session timers
"""

from .engine import EngineConfig, GreetingEngine
from .executor import GreetingExecutor
from .phrases import DEFAULT_LANGUAGE, GREETINGS, select_greeting
from .session import SessionState, SessionStateMachine, SessionTimings
from .timers import (
    TIMER_COOLDOWN,
    TIMER_FACE_LOST_GRACE,
    TIMER_KINDS,
    TIMER_SESSION_DURATION,
    TimerManager,
)

__all__ = [
    "GreetingEngine",
    "EngineConfig",
    "GreetingExecutor",
    "SessionStateMachine",
    "SessionState",
    "SessionTimings",
    "TimerManager",
    "TIMER_SESSION_DURATION",
    "TIMER_COOLDOWN",
    "TIMER_FACE_LOST_GRACE",
    "TIMER_KINDS",
    "DEFAULT_LANGUAGE",
    "GREETINGS",
    "select_greeting",
]
