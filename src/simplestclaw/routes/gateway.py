"""Gateway sidecar commands for the desktop front end.

Handlers are plain `def` so FastAPI runs them on its threadpool: `stop` blocks until
the child is reaped and must not stall the event loop.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..errors import ConfigurationMissing, ExecutableNotFound, SidecarError
from ..sidecar import GatewayInfo, GatewayStatus, SidecarManager


router = APIRouter(prefix="/gateway", tags=["gateway"])
logger = logging.getLogger(__name__)


def get_sidecar(request: Request) -> SidecarManager:
    mgr = getattr(request.app.state, "sidecar", None)
    if not isinstance(mgr, SidecarManager):
        raise HTTPException(status_code=503, detail="Gateway supervisor is not initialized")
    return mgr


def _status_code_for(err: SidecarError) -> int:
    if isinstance(err, ConfigurationMissing):
        return 400
    if isinstance(err, ExecutableNotFound):
        return 404
    return 500


@router.post("/start", response_model=GatewayInfo)
def start_gateway(mgr: SidecarManager = Depends(get_sidecar)) -> GatewayInfo:
    try:
        return mgr.start()
    except SidecarError as e:
        logger.warning("gateway start failed: %s", e)
        raise HTTPException(status_code=_status_code_for(e), detail=str(e))


@router.post("/stop")
def stop_gateway(mgr: SidecarManager = Depends(get_sidecar)) -> Dict[str, Any]:
    try:
        mgr.stop()
    except SidecarError as e:
        logger.warning("gateway stop failed: %s", e)
        raise HTTPException(status_code=_status_code_for(e), detail=str(e))
    return {"ok": True}


@router.get("/status", response_model=GatewayStatus)
def get_gateway_status(mgr: SidecarManager = Depends(get_sidecar)) -> GatewayStatus:
    return mgr.status()


@router.get("/logs/tail")
def gateway_log_tail(
    max_bytes: int = Query(default=80_000, ge=1, le=2_000_000),
    mgr: SidecarManager = Depends(get_sidecar),
) -> Dict[str, Any]:
    return mgr.log_tail(max_bytes=max_bytes)
