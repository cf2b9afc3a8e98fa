"""SimplestClaw FastAPI application (desktop front end <-> gateway supervisor)."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool

from . import __version__
from .config import ConfigError, load_config
from .errors import SidecarError
from .routes import config_router, gateway_router
from .sidecar import SidecarManager


logger = logging.getLogger(__name__)

# The desktop webview and local dev servers only.
_LOOPBACK_ORIGIN_REGEX = r"^(https?|tauri)://(localhost|127\.0\.0\.1|\[::1\]|tauri\.localhost)(:\d+)?$"


def _auto_start(mgr: SidecarManager) -> None:
    try:
        cfg = load_config()
    except ConfigError as e:
        logger.warning("auto-start skipped: %s", e)
        return
    if not cfg.auto_start_gateway or not cfg.has_api_key():
        return
    try:
        info = mgr.start()
        logger.info("auto-started openclaw gateway at %s", info.url)
    except SidecarError as e:
        logger.warning("auto-start failed: %s", e)


def create_app(*, manager: Optional[SidecarManager] = None, auto_start: bool = True) -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        mgr = manager if manager is not None else SidecarManager()
        app.state.sidecar = mgr
        if auto_start:
            await run_in_threadpool(_auto_start, mgr)
        try:
            yield
        finally:
            # Window-close contract: never leave an orphaned gateway behind.
            try:
                await run_in_threadpool(mgr.stop)
            except SidecarError as e:
                logger.warning("gateway stop on shutdown failed: %s", e)

    app = FastAPI(
        title="SimplestClaw",
        description="Desktop shim supervising a local OpenClaw gateway sidecar.",
        version=__version__,
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=_LOOPBACK_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(gateway_router, prefix="/api")
    app.include_router(config_router, prefix="/api")

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "simplestclaw"}

    return app
