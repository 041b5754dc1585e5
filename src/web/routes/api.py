from __future__ import annotations

import time

from fastapi import APIRouter, HTTPException, Request

from greeting.phrases import supported_languages
from models.session import GreetingStatus
from runtime.context import RuntimeContext
from ..api_models import GreetingStatusResponse, HealthResponse, SettingsUpdate
from ..services.health_service import HealthService

router = APIRouter()


def _ctx(request: Request) -> RuntimeContext:
    return request.app.state.ctx


def _derive_phase(status: GreetingStatus) -> str:
    """
    Single-word summary for the kiosk banner.
    disabled > active > cooldown > idle.
    """
    if not status.enabled:
        return "disabled"
    if status.session_active:
        return "active"
    if status.is_on_cooldown:
        return "cooldown"
    return "idle"


def _status_response(status: GreetingStatus) -> GreetingStatusResponse:
    return GreetingStatusResponse(phase=_derive_phase(status), **status.to_dict())


@router.get("/greeting/status", response_model=GreetingStatusResponse)
def greeting_status(request: Request):
    return _status_response(_ctx(request).engine.status())


@router.post("/greeting/reset", response_model=GreetingStatusResponse)
def greeting_reset(request: Request):
    engine = _ctx(request).engine
    engine.manual_reset(wait=True)
    return _status_response(engine.status())


@router.put("/greeting/settings", response_model=GreetingStatusResponse)
def greeting_settings(update: SettingsUpdate, request: Request):
    """
    Update detection / auto-interaction switches and the greeting language.
    Disabling either switch ends the current session and clears the cooldown.
    """
    engine = _ctx(request).engine

    if update.language is not None:
        if update.language not in supported_languages():
            raise HTTPException(status_code=400, detail=f"Unsupported language: {update.language}")
        engine.set_language(update.language, wait=True)

    if update.face_detection_enabled is not None or update.auto_interaction_enabled is not None:
        detection = update.face_detection_enabled
        if detection is None:
            detection = engine.detection_enabled
        auto = update.auto_interaction_enabled
        if auto is None:
            auto = engine.auto_interaction_enabled
        engine.set_enabled(detection, auto, wait=True)

    return _status_response(engine.status())


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    ctx = _ctx(request)
    stats = ctx.stats_snapshot()
    service = HealthService(stats=stats)
    summary = service.get_health_summary()
    temp_c = HealthService.read_cpu_temp_c()
    engine_running = ctx.engine.is_running
    poller_running = ctx.poller.is_running if ctx.poller is not None else False

    warnings = HealthService.compute_warnings(engine_running, service.poll_failure_ratio(), temp_c)
    return {
        "status": "degraded" if warnings else "running",
        "warnings": warnings,
        "uptime_seconds": stats["uptime_seconds"],
        "engine_running": engine_running,
        "poller_running": poller_running,
        "stats": stats,
        "platform": summary["platform"],
        "python": summary["python"],
        "cpu_temp_c": temp_c,
        "timestamp": time.time(),
    }
