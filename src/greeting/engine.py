"""
Greeting engine: the single owner of presence and session state.

Detection samples, timer expiries and control calls are all posted onto one
queue and handled run-to-completion, either by the engine's worker thread
(`start()`) or synchronously by `drain()`. Handlers never overlap, so the
debouncer, confirmation filter, session state machine and timers need no
locking of their own. Only the status projection is read from other threads
and is guarded by a lock.
"""

from __future__ import annotations

import functools
import logging
import queue
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from models.sample import DetectionSample
from models.session import GreetingStatus
from presence.confirmation import ConfirmationConfig, ConfirmationFilter
from presence.debounce import Debouncer
from speech.base import SpeechOutput
from .executor import GreetingExecutor, Runner
from .phrases import AUTO_INTERACTION_DISABLED, DEFAULT_LANGUAGE, FACE_DETECTION_DISABLED
from .session import SessionStateMachine, SessionTimings
from .timers import TimerManager

_STOP = object()


@dataclass
class EngineConfig:
    """
    Configuration for the greeting engine.

    Attributes:
        debounce_ms: Minimum spacing between identical samples.
        positive_threshold: Consecutive positives to confirm presence.
        negative_threshold: Consecutive negatives to confirm absence.
        timings: Session, cooldown and grace durations.
        language: Initial greeting language tag.
        detection_enabled: Face detection switch.
        auto_interaction_enabled: Auto-greeting switch.
    """
    debounce_ms: int = 500
    positive_threshold: int = 2
    negative_threshold: int = 3
    timings: SessionTimings = field(default_factory=SessionTimings)
    language: str = DEFAULT_LANGUAGE
    detection_enabled: bool = True
    auto_interaction_enabled: bool = True

    @classmethod
    def from_config(cls, config: Any) -> "EngineConfig":
        """Adapter: Create from models.config.Config."""
        det = config.detection
        return cls(
            debounce_ms=int(det.debounce_ms),
            positive_threshold=int(det.positive_threshold),
            negative_threshold=int(det.negative_threshold),
            timings=SessionTimings.from_greeting_config(config.greeting),
            language=config.greeting.language,
            detection_enabled=bool(det.enabled),
            auto_interaction_enabled=bool(config.greeting.auto_interaction_enabled),
        )


class GreetingEngine:
    """
    Turns a noisy presence signal into exactly one greeting per visit.

    Pipeline per sample: Debouncer -> ConfirmationFilter -> SessionStateMachine
    -> GreetingExecutor.

    Example:
        engine = GreetingEngine(LogOnlySpeech(), EngineConfig())
        engine.start()
        poller.set_consumer(engine.on_sample)
        ...
        print(engine.status().has_greeted)
        engine.stop()
    """

    def __init__(
        self,
        speech: SpeechOutput,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        timer_factory: Callable[..., Any] = threading.Timer,
        greeting_runner: Optional[Runner] = None,
    ):
        self.config = config or EngineConfig()
        self._clock = clock
        self._queue: "queue.Queue[Any]" = queue.Queue()
        # Held while a handler runs; drain() holds it for the whole pass.
        self._handler_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._running = False

        self._language = self.config.language
        self._detection_enabled = self.config.detection_enabled
        self._auto_interaction_enabled = self.config.auto_interaction_enabled

        self._debouncer = Debouncer(self.config.debounce_ms)
        self._filter = ConfirmationFilter(
            ConfirmationConfig(
                positive_threshold=self.config.positive_threshold,
                negative_threshold=self.config.negative_threshold,
            )
        )
        self._timers = TimerManager(dispatch=self.post, timer_factory=timer_factory)
        self._executor = GreetingExecutor(speech, runner=greeting_runner)
        self._sessions = SessionStateMachine(
            self._timers,
            self._executor,
            timings=self.config.timings,
            clock=clock,
            wall_clock=wall_clock,
            language_provider=lambda: self._language,
            on_change=self._publish,
            on_session_reset=self._filter.reset,
        )

        self._status_lock = threading.Lock()
        self._status = GreetingStatus()
        self.samples_received = 0
        self.samples_accepted = 0
        self._publish()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def detection_enabled(self) -> bool:
        return self._detection_enabled

    @property
    def auto_interaction_enabled(self) -> bool:
        return self._auto_interaction_enabled

    @property
    def language(self) -> str:
        return self._language

    @property
    def enabled(self) -> bool:
        return self._detection_enabled and self._auto_interaction_enabled

    @property
    def timers(self) -> TimerManager:
        return self._timers

    @property
    def sessions(self) -> SessionStateMachine:
        return self._sessions

    @property
    def executor(self) -> GreetingExecutor:
        return self._executor

    @property
    def confirmation(self) -> ConfirmationFilter:
        return self._filter

    def status(self) -> GreetingStatus:
        """Latest status projection (a copy, safe to hand to other threads)."""
        with self._status_lock:
            return replace(self._status)

    # ------------------------------------------------------------------
    # Inputs (thread-safe; everything is queued)
    # ------------------------------------------------------------------

    def post(self, fn: Callable[[], None]) -> None:
        """Queue a handler for run-to-completion processing."""
        self._queue.put(fn)

    def on_sample(self, detected: bool, count: int = 0, success: bool = True) -> None:
        """
        Detector consumer callback.

        The arrival time is stamped here so debouncing follows queue order,
        not the time the worker gets around to the sample.
        """
        sample = DetectionSample.normalize(detected, count, self._clock(), success=success)
        self.post(functools.partial(self._handle_sample, sample))

    def attach(self, poller: Any) -> None:
        """Register this engine as the poller's sole sample consumer."""
        poller.set_consumer(self.on_sample)

    def set_enabled(self, detection: bool, auto_interaction: bool = True, wait: bool = False) -> bool:
        """Toggle detection / auto interaction. Disabling forces a full reset."""
        return self._call(functools.partial(self._apply_enabled, bool(detection), bool(auto_interaction)), wait)

    def manual_reset(self, wait: bool = False) -> bool:
        """Cancel timers and clear session and cooldown."""
        return self._call(self._apply_manual_reset, wait)

    def set_language(self, language: str, wait: bool = False) -> bool:
        """Change the language used by the next greeting."""
        return self._call(functools.partial(self._apply_language, language), wait)

    # ------------------------------------------------------------------
    # Processing loop
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._running = True
        self._thread = threading.Thread(target=self._run, name="greeting-engine", daemon=True)
        self._thread.start()
        logging.info("Greeting engine started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the worker, cancel timers and wait briefly for playback to end."""
        if self._thread is not None:
            self._running = False
            self._queue.put(_STOP)
            self._thread.join(timeout=timeout)
            self._thread = None
        self._timers.cancel_all()
        self._executor.wait_idle(timeout)
        logging.info("Greeting engine stopped")

    def drain(self) -> int:
        """
        Process every queued handler on the calling thread. Returns the count.

        Concurrent callers are serialized: one drains the queue in order while
        the others wait, so handlers still never overlap.
        """
        processed = 0
        with self._handler_lock:
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    return processed
                if item is _STOP:
                    continue
                self._execute(item)
                processed += 1

    def _run(self) -> None:
        while self._running:
            try:
                item = self._queue.get(timeout=0.25)
            except queue.Empty:
                continue
            if item is _STOP:
                break
            with self._handler_lock:
                self._execute(item)

    def _execute(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as e:
            logging.error(f"Greeting engine handler failed: {e}", exc_info=True)

    def _call(self, fn: Callable[[], None], wait: bool, timeout: float = 2.0) -> bool:
        done = threading.Event()

        def task():
            try:
                fn()
            finally:
                done.set()

        self.post(task)
        if not wait:
            return True
        if not self._running:
            self.drain()
        return done.wait(timeout)

    # ------------------------------------------------------------------
    # Handlers (engine thread only)
    # ------------------------------------------------------------------

    def _handle_sample(self, sample: DetectionSample) -> None:
        self.samples_received += 1
        if not self.enabled:
            return

        accepted = self._debouncer.submit(sample)
        if accepted is None:
            return
        self.samples_accepted += 1

        observation = self._filter.observe(accepted.detected, accepted.count)
        if observation.changed:
            if observation.confirmed:
                logging.info(f"Presence confirmed (count={observation.count})")
            else:
                logging.info("Presence no longer confirmed")

        self._sessions.on_presence(observation)
        self._publish()

    def _apply_enabled(self, detection: bool, auto_interaction: bool) -> None:
        was_enabled = self.enabled
        self._detection_enabled = detection
        self._auto_interaction_enabled = auto_interaction

        if not self.enabled:
            if was_enabled:
                logging.info("Auto-greeting disabled, resetting session")
            self._full_reset()
        elif not was_enabled:
            logging.info("Auto-greeting enabled")
        self._publish()

    def _apply_manual_reset(self) -> None:
        logging.info("Manual greeting reset")
        self._full_reset()
        self._publish()

    def _apply_language(self, language: str) -> None:
        if language != self._language:
            logging.info(f"Greeting language set to {language}")
        self._language = language
        self._publish()

    def _full_reset(self) -> None:
        self._sessions.manual_reset()
        self._debouncer.reset()
        self._filter.reset()

    def _publish(self) -> None:
        sessions = self._sessions
        if not self._detection_enabled:
            message = FACE_DETECTION_DISABLED
        elif not self._auto_interaction_enabled:
            message = AUTO_INTERACTION_DISABLED
        else:
            message = sessions.greeting_message

        status = GreetingStatus(
            greeting_message=message,
            has_greeted=sessions.has_greeted,
            is_on_cooldown=sessions.cooldown.active,
            last_greeting_time=sessions.cooldown.last_greeting_at,
            session_active=sessions.is_active,
            presence_confirmed=self._filter.confirmed,
            face_count=self._filter.count,
            enabled=self.enabled,
            language=self._language,
            session_started_at=sessions.session.started_at if sessions.session else None,
        )
        with self._status_lock:
            self._status = status
