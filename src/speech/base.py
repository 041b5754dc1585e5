"""
SpeechOutput interface for pluggable speech synthesis/playback backends.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod


class SpeechError(RuntimeError):
    """Raised by a backend when synthesis or playback fails."""


class SpeechOutput(ABC):
    """
    Abstract base class for speech output.

    Implementations synthesize `text` in `language` and block until playback
    has finished. Failures are raised (SpeechError or any other exception);
    the caller decides whether they matter.
    """

    @abstractmethod
    def synthesize_and_play(self, text: str, language: str) -> None:
        """
        Speak `text` and return once playback completes.

        Raises:
            SpeechError: If synthesis or playback fails.
        """
        pass

    def close(self) -> None:
        """Release backend resources. Safe to call multiple times."""
        pass


class LogOnlySpeech(SpeechOutput):
    """Headless backend: logs the greeting instead of speaking it."""

    def __init__(self):
        self.spoken: list[tuple[str, str]] = []

    def synthesize_and_play(self, text: str, language: str) -> None:
        self.spoken.append((text, language))
        logging.info(f"[speech:{language}] {text}")
