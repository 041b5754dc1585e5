"""
Session, cooldown and status projection models.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class Session:
    """
    A single visit, from confirmed presence to reset.

    Attributes:
        started_at: Unix timestamp when the session started (display only).
        language: Language tag the greeting was selected for.
        greeting_text: Greeting text spoken for this visit.
    """
    started_at: float
    language: str
    greeting_text: str


@dataclass
class CooldownWindow:
    """
    Global quiet period that follows every greeting.

    Attributes:
        active: True while new sessions are suppressed.
        started_at: Monotonic time the window opened, used for timing.
        last_greeting_at: Unix time of the greeting, for display only.
    """
    active: bool = False
    started_at: float = 0.0
    last_greeting_at: float = 0.0

    def remaining(self, now: float, duration_s: float) -> float:
        """Seconds left in the window (0 when elapsed, never more than duration_s)."""
        if not self.active:
            return 0.0
        return min(duration_s, max(0.0, duration_s - (now - self.started_at)))


@dataclass
class GreetingStatus:
    """
    Read-only projection of the engine state for the UI.

    Updated in the same step as each transition, so a reader never sees
    a session without its greeting flags.
    """
    greeting_message: str = ""
    has_greeted: bool = False
    is_on_cooldown: bool = False
    last_greeting_time: float = 0.0
    session_active: bool = False
    presence_confirmed: bool = False
    face_count: int = 0
    enabled: bool = True
    language: str = "en-US"
    session_started_at: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
