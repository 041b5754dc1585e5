"""
Greeting session state machine.

States are IDLE and ACTIVE, with an orthogonal cooldown flag:

    IDLE   + rising edge, no cooldown -> start session (greet, arm timers)
    IDLE   + rising edge, cooldown    -> ignored
    ACTIVE + falling edge             -> arm face-lost grace timer
    ACTIVE + rising edge              -> cancel grace timer, stay ACTIVE
    ACTIVE + grace/duration timeout   -> session reset (cooldown kept)
    cooldown timeout                  -> cooldown off
    manual reset                      -> full reset (cooldown cleared)

Every method runs on the engine's processing thread.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from models.session import CooldownWindow, Session
from presence.confirmation import Observation
from .executor import GreetingExecutor
from .phrases import DEFAULT_LANGUAGE, greeting_message
from .timers import (
    TIMER_COOLDOWN,
    TIMER_FACE_LOST_GRACE,
    TIMER_SESSION_DURATION,
    TimerManager,
)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class SessionTimings:
    """
    Attributes:
        session_duration_s: Maximum length of one visit.
        cooldown_s: Quiet period after a greeting starts.
        face_lost_grace_s: Delay between confirmed absence and session end.
    """
    session_duration_s: float = 60.0
    cooldown_s: float = 30.0
    face_lost_grace_s: float = 8.0

    @classmethod
    def from_greeting_config(cls, greeting_cfg: Any) -> "SessionTimings":
        """Adapter: Create from models.config.GreetingConfig."""
        return cls(
            session_duration_s=float(greeting_cfg.session_duration_s),
            cooldown_s=float(greeting_cfg.cooldown_s),
            face_lost_grace_s=float(greeting_cfg.face_lost_grace_s),
        )


def _noop() -> None:
    pass


class SessionStateMachine:
    """
    Owns the lifecycle of a single visit.

    Args:
        timers: Timer manager shared with the engine.
        executor: Plays the greeting.
        timings: Session/cooldown/grace durations.
        clock: Monotonic clock used for cooldown timing.
        wall_clock: Unix clock used only for the displayed timestamps.
        language_provider: Returns the language selected at fire time.
        on_change: Called after every transition so the status projection
            can be refreshed in the same step.
        on_session_reset: Called whenever the session is reset, after timers
            are cancelled.
    """

    def __init__(
        self,
        timers: TimerManager,
        executor: GreetingExecutor,
        timings: Optional[SessionTimings] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        language_provider: Callable[[], str] = lambda: DEFAULT_LANGUAGE,
        on_change: Callable[[], None] = _noop,
        on_session_reset: Callable[[], None] = _noop,
    ):
        self._timers = timers
        self._executor = executor
        self._timings = timings or SessionTimings()
        self._clock = clock
        self._wall_clock = wall_clock
        self._language_provider = language_provider
        self._on_change = on_change
        self._on_session_reset = on_session_reset

        self.state = SessionState.IDLE
        self.session: Optional[Session] = None
        self.cooldown = CooldownWindow()
        self.has_greeted = False
        self.greeting_message = ""
        self.sessions_started = 0

    @property
    def timings(self) -> SessionTimings:
        return self._timings

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def on_presence(self, observation: Observation) -> None:
        """Route a confirmation-filter result to the edge handlers."""
        if not observation.changed:
            return
        if observation.confirmed:
            self.on_rising_edge()
        else:
            self.on_falling_edge()

    def on_rising_edge(self) -> None:
        if self.is_active:
            if self._timers.cancel(TIMER_FACE_LOST_GRACE):
                logging.info("Presence re-confirmed, face-lost timer cancelled")
            return

        if self.cooldown.active:
            remaining = self.cooldown.remaining(self._clock(), self._timings.cooldown_s)
            logging.info(f"Still in global cooldown ({remaining:.1f}s left), ignoring new visitor")
            return

        self._start_session()

    def on_falling_edge(self) -> None:
        if not self.is_active:
            return
        logging.info(f"Presence lost, ending session in {self._timings.face_lost_grace_s:.1f}s unless re-confirmed")
        self._timers.schedule(
            TIMER_FACE_LOST_GRACE,
            self._timings.face_lost_grace_s,
            self._on_face_lost_timeout,
        )

    def reset_session(self) -> None:
        """
        End the current session and return to IDLE.

        All timers are cancelled together with clearing the session. A
        cooldown that has not elapsed yet is re-armed for its remaining time.
        """
        self._timers.cancel_all()
        self.state = SessionState.IDLE
        self.session = None
        self.has_greeted = False
        self.greeting_message = ""

        remaining = self.cooldown.remaining(self._clock(), self._timings.cooldown_s)
        if remaining > 0:
            self._timers.schedule(TIMER_COOLDOWN, remaining, self._on_cooldown_end)
        else:
            self.cooldown.active = False

        self._on_session_reset()
        self._on_change()

    def manual_reset(self) -> None:
        """Full reset: timers, session and cooldown."""
        self._timers.cancel_all()
        self.state = SessionState.IDLE
        self.session = None
        self.cooldown = CooldownWindow()
        self.has_greeted = False
        self.greeting_message = ""
        self._on_session_reset()
        self._on_change()

    def _start_session(self) -> None:
        now = self._clock()
        greeted_at = self._wall_clock()
        language, text = self._executor.compose(self._language_provider())

        self.state = SessionState.ACTIVE
        self.session = Session(started_at=greeted_at, language=language, greeting_text=text)
        self.cooldown = CooldownWindow(active=True, started_at=now, last_greeting_at=greeted_at)
        self.has_greeted = True
        self.greeting_message = greeting_message(language, text)
        self.sessions_started += 1

        self._timers.schedule(
            TIMER_SESSION_DURATION,
            self._timings.session_duration_s,
            self._on_session_timeout,
        )
        self._timers.schedule(TIMER_COOLDOWN, self._timings.cooldown_s, self._on_cooldown_end)
        logging.info(f"New visitor, starting session #{self.sessions_started} ({language})")
        self._on_change()

        self._executor.fire(language)

    def _on_face_lost_timeout(self) -> None:
        logging.info("Face-lost timeout reached, resetting session")
        self.reset_session()

    def _on_session_timeout(self) -> None:
        logging.info("Session duration expired, ending session")
        self.reset_session()

    def _on_cooldown_end(self) -> None:
        self.cooldown.active = False
        logging.info("Cooldown period ended")
        self._on_change()
