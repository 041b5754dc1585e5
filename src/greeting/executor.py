"""
One-shot greeting side effect: pick the text, synthesize, play.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Callable, Optional, Tuple

from speech.base import SpeechOutput
from .phrases import select_greeting

Runner = Callable[[Callable[[], None]], None]


def _run_in_thread(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, name="greeting-playback", daemon=True).start()


class GreetingExecutor:
    """
    Plays a greeting without blocking the caller.

    An in-flight flag guards against overlapping greetings: `fire` while a
    previous greeting is still playing is a silent no-op. Speech failures are
    logged and swallowed; the greeting still counts as delivered.

    Args:
        speech: Speech backend; `synthesize_and_play` blocks until playback ends.
        runner: Runs the playback job. Defaults to a daemon thread; tests pass
            an inline runner.
    """

    def __init__(self, speech: SpeechOutput, runner: Optional[Runner] = None):
        self._speech = speech
        self._runner = runner or _run_in_thread
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self.played = 0
        self.failures = 0

    @property
    def in_flight(self) -> bool:
        return not self._idle.is_set()

    @staticmethod
    def compose(language: str) -> Tuple[str, str]:
        """Return (language, text) that `fire(language)` would speak."""
        return select_greeting(language)

    def fire(self, language: str) -> bool:
        """
        Start playing the greeting for `language`.

        Returns:
            True if a greeting was started, False if one was already in flight.
        """
        with self._lock:
            if not self._idle.is_set():
                logging.debug("Greeting already in progress, skipping")
                return False
            self._idle.clear()

        lang, text = self.compose(language)
        try:
            self._runner(functools.partial(self._play, text, lang))
        except Exception as e:
            logging.error(f"Could not start greeting playback: {e}")
            self._idle.set()
        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no greeting is playing. Returns False on timeout."""
        return self._idle.wait(timeout)

    def _play(self, text: str, language: str) -> None:
        try:
            logging.info(f"Playing greeting ({language})")
            self._speech.synthesize_and_play(text, language)
            self.played += 1
            logging.info("Greeting played successfully")
        except Exception as e:
            self.failures += 1
            logging.warning(f"Greeting playback failed: {e}")
        finally:
            self._idle.set()
