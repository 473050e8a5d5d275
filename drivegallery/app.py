"""
FastAPI application entry point for the gallery API.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from drivegallery.config import Settings, get_settings
from drivegallery.dependencies import build_context
from drivegallery.drive import FileStoreClient
from drivegallery.renderer import DocumentRenderer
from drivegallery.routes import health_router, router


def create_app(
    settings: Optional[Settings] = None,
    *,
    drive_client: Optional[FileStoreClient] = None,
    renderer: Optional[DocumentRenderer] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Drive Gallery API", version="0.1.0")
    app.state.context = build_context(
        settings, drive_client=drive_client, renderer=renderer, clock=clock
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(health_router)
    return app
