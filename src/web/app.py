"""
FastAPI application factory for the kiosk greeter.

Routes:
- /api/greeting/status   -> current greeting/session projection
- /api/greeting/reset    -> manual reset
- /api/greeting/settings -> detection / auto-interaction / language
- /api/health            -> service health
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runtime.context import RuntimeContext
from .routes import api


def create_app(ctx: RuntimeContext) -> FastAPI:
    """Create the FastAPI app bound to one runtime context."""
    app = FastAPI(
        title="Kiosk Greeter",
        version="0.1.0",
        description="Presence-triggered greeting service for hospital kiosks",
    )
    app.state.ctx = ctx

    # CORS for the kiosk UI dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    return app
