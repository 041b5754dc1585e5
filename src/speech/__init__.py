"""
Speech output backends used to play greetings.
"""

from __future__ import annotations

from typing import Any

from .base import LogOnlySpeech, SpeechError, SpeechOutput


def create_speech_from_config(speech_cfg: Any) -> SpeechOutput:
    """
    Factory: build a speech backend from models.config.SpeechConfig.

    pyttsx3 is imported lazily so headless deployments ("log" backend) do
    not need a TTS driver installed.
    """
    if speech_cfg.backend == "log":
        return LogOnlySpeech()
    if speech_cfg.backend == "pyttsx3":
        from .pyttsx3_speech import Pyttsx3Speech, Pyttsx3SpeechConfig
        return Pyttsx3Speech(Pyttsx3SpeechConfig.from_speech_config(speech_cfg))
    raise ValueError(f"Unknown speech backend: {speech_cfg.backend}")


__all__ = [
    "SpeechOutput",
    "SpeechError",
    "LogOnlySpeech",
    "create_speech_from_config",
]
