from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field


class GreetingStatusResponse(BaseModel):
    """
    Greeting status for kiosk UI polling.
    Mirrors the engine's status projection plus a derived `phase`.
    """
    phase: str = Field(..., description="disabled|idle|active|cooldown")
    greeting_message: str = Field("", description="Latest greeting or disabled notice")
    has_greeted: bool = Field(False, description="True while the current visitor has been greeted")
    is_on_cooldown: bool = Field(False, description="True while new sessions are suppressed")
    last_greeting_time: float = Field(0.0, description="Unix time of the last greeting, 0 if none")
    session_active: bool = False
    session_started_at: Optional[float] = None
    presence_confirmed: bool = False
    face_count: int = 0
    enabled: bool = True
    language: str = "en-US"


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their current value."""
    face_detection_enabled: Optional[bool] = None
    auto_interaction_enabled: Optional[bool] = None
    language: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(..., description="running|degraded")
    warnings: list[str]
    uptime_seconds: int
    engine_running: bool
    poller_running: bool
    stats: Dict[str, object]
    platform: str
    python: str
    cpu_temp_c: Optional[float] = None
    timestamp: float
