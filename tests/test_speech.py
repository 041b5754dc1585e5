"""
Tests for speech backends and voice selection.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from models.config import SpeechConfig
from speech import LogOnlySpeech, SpeechError, create_speech_from_config
from speech.pyttsx3_speech import Pyttsx3Speech, Pyttsx3SpeechConfig, pick_voice_id


def _voice(voice_id, name, languages):
    return SimpleNamespace(id=voice_id, name=name, languages=languages)


VOICES = [
    _voice("v-en-gb", "English (UK)", [b"\x05en-gb"]),
    _voice("v-en-us", "English (America)", ["en_US"]),
    _voice("v-hi", "Hindi", ["hi"]),
]


class TestPickVoiceId:
    def test_exact_language_match(self):
        assert pick_voice_id(VOICES, "en-US") == "v-en-us"

    def test_primary_language_fallback(self):
        assert pick_voice_id(VOICES, "hi-IN") == "v-hi"

    def test_no_match_keeps_default(self):
        assert pick_voice_id(VOICES, "ta-IN") is None

    def test_preferred_name_wins(self):
        assert pick_voice_id(VOICES, "en-US", preferred="uk") == "v-en-gb"


class TestSpeechFactory:
    def test_log_backend(self):
        assert isinstance(create_speech_from_config(SpeechConfig(backend="log")), LogOnlySpeech)

    def test_pyttsx3_backend(self):
        speech = create_speech_from_config(SpeechConfig(backend="pyttsx3", rate=150))
        assert isinstance(speech, Pyttsx3Speech)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_speech_from_config(SpeechConfig(backend="cloud"))


class TestPyttsx3Speech:
    def test_speaks_with_matching_voice(self):
        eng = MagicMock()
        eng.getProperty.return_value = VOICES
        with patch("speech.pyttsx3_speech.pyttsx3.init", return_value=eng):
            Pyttsx3Speech(Pyttsx3SpeechConfig(rate=150, volume=0.5)).synthesize_and_play("Hello", "en-US")

        eng.setProperty.assert_any_call("rate", 150)
        eng.setProperty.assert_any_call("volume", 0.5)
        eng.setProperty.assert_any_call("voice", "v-en-us")
        eng.say.assert_called_once_with("Hello")
        eng.runAndWait.assert_called_once()
        eng.stop.assert_called_once()

    def test_empty_text_is_skipped(self):
        with patch("speech.pyttsx3_speech.pyttsx3.init") as init:
            Pyttsx3Speech().synthesize_and_play("  ", "en-US")
        init.assert_not_called()

    def test_init_failure_raises_speech_error(self):
        with patch("speech.pyttsx3_speech.pyttsx3.init", side_effect=OSError("no driver")):
            with pytest.raises(SpeechError):
                Pyttsx3Speech().synthesize_and_play("Hello", "en-US")

    def test_playback_failure_raises_speech_error(self):
        eng = MagicMock()
        eng.getProperty.return_value = []
        eng.runAndWait.side_effect = RuntimeError("run loop already started")
        with patch("speech.pyttsx3_speech.pyttsx3.init", return_value=eng):
            with pytest.raises(SpeechError):
                Pyttsx3Speech().synthesize_and_play("Hello", "en-US")
        eng.stop.assert_called_once()


class TestLogOnlySpeech:
    def test_records_utterances(self):
        speech = LogOnlySpeech()
        speech.synthesize_and_play("Hi", "en-US")
        assert speech.spoken == [("Hi", "en-US")]
