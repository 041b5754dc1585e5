"""
Offline speech output using pyttsx3.

A fresh engine is created per utterance: pyttsx3 engines are not safe to
reuse across threads, and greetings are played from the executor's worker
thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import pyttsx3

from .base import SpeechError, SpeechOutput


@dataclass
class Pyttsx3SpeechConfig:
    """
    Attributes:
        rate: Words per minute.
        volume: 0.0 - 1.0.
        voice: Substring of a preferred voice name; overrides language matching.
    """
    rate: int = 170
    volume: float = 1.0
    voice: Optional[str] = None

    @classmethod
    def from_speech_config(cls, speech_cfg: Any) -> "Pyttsx3SpeechConfig":
        """Adapter: Create from models.config.SpeechConfig."""
        return cls(rate=speech_cfg.rate, volume=speech_cfg.volume, voice=speech_cfg.voice)


def _voice_languages(voice: Any) -> list[str]:
    langs = []
    for lang in getattr(voice, "languages", None) or []:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", errors="ignore")
        langs.append(str(lang).lstrip("\x05").lower())
    return langs


def pick_voice_id(voices: list, language: str, preferred: Optional[str] = None) -> Optional[str]:
    """
    Choose a voice id for `language`.

    A `preferred` name substring wins; otherwise a voice whose language
    matches the tag (e.g. "en-US" ~ "en_us" / "en"); None keeps the default.
    """
    if preferred:
        for v in voices:
            if preferred.lower() in (getattr(v, "name", "") or "").lower():
                return v.id

    tag = language.lower().replace("_", "-")
    primary = tag.split("-")[0]
    fallback = None
    for v in voices:
        for lang in _voice_languages(v):
            norm = lang.replace("_", "-")
            if norm == tag:
                return v.id
            if fallback is None and norm.split("-")[0] == primary:
                fallback = v.id
    return fallback


class Pyttsx3Speech(SpeechOutput):
    """Speaks greetings through the platform TTS engine (SAPI5, NSSS, eSpeak)."""

    def __init__(self, config: Optional[Pyttsx3SpeechConfig] = None):
        self._config = config or Pyttsx3SpeechConfig()

    def synthesize_and_play(self, text: str, language: str) -> None:
        text = (text or "").strip()
        if not text:
            return

        try:
            eng = pyttsx3.init()
        except Exception as e:
            raise SpeechError(f"TTS engine init failed: {e}") from e

        try:
            eng.setProperty("rate", self._config.rate)
            eng.setProperty("volume", self._config.volume)
            voice_id = pick_voice_id(eng.getProperty("voices") or [], language, self._config.voice)
            if voice_id:
                eng.setProperty("voice", voice_id)
            else:
                logging.debug(f"No TTS voice for {language}, using default voice")
            eng.say(text)
            eng.runAndWait()
        except Exception as e:
            raise SpeechError(f"TTS playback failed: {e}") from e
        finally:
            try:
                eng.stop()
            except Exception as e:
                logging.debug(f"TTS engine stop failed: {e}")
