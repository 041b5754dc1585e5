"""
Greeting phrases and status messages.
"""

from __future__ import annotations

from typing import Dict, Tuple

DEFAULT_LANGUAGE = "en-US"

GREETINGS: Dict[str, str] = {
    "en-US": "Hello! Welcome to our hospital. How can I help you today?",
    "hi-IN": "नमस्ते! हमारे अस्पताल में आपका स्वागत है। आज मैं आपकी कैसे सहायता कर सकता हूं?",
    "ml-IN": "നമസ്കാരം! ഞങ്ങളുടെ ആശുപത്രിയിലേക്ക് സ്വാഗതം. ഇന്ന് ഞാൻ നിങ്ങളെ എങ്ങനെ സഹായിക്കാം?",
    "ta-IN": "வணக்கம்! எங்கள் மருத்துவமனைக்கு வரவேற்கிறோம். இன்று நான் உங்களுக்கு எப்படி உதவ முடியும்?",
}

FACE_DETECTION_DISABLED = "Face detection is disabled"
AUTO_INTERACTION_DISABLED = "Auto interaction is disabled"


def supported_languages() -> Tuple[str, ...]:
    return tuple(GREETINGS)


def select_greeting(language: str) -> Tuple[str, str]:
    """
    Pick the greeting for a language tag.

    Unsupported tags fall back to DEFAULT_LANGUAGE, and the returned tag is
    the one the text is actually written in.

    Returns:
        (language, text)
    """
    if language in GREETINGS:
        return language, GREETINGS[language]
    return DEFAULT_LANGUAGE, GREETINGS[DEFAULT_LANGUAGE]


def greeting_message(language: str, text: str) -> str:
    """Status line shown by the UI when a greeting starts."""
    return f"Auto-greeting ({language}): {text}"
