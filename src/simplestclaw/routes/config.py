from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import ConfigError, load_config, mask_secret, set_api_key


router = APIRouter(prefix="/config", tags=["config"])


class SetApiKeyRequest(BaseModel):
    key: str = Field(..., description="Anthropic API key passed to the gateway as ANTHROPIC_API_KEY.")


@router.get("")
def get_config() -> Dict[str, Any]:
    """Current config. The API key is returned masked, never in full."""
    try:
        cfg = load_config()
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))
    out = cfg.model_dump(by_alias=True)
    out["anthropicApiKey"] = mask_secret(cfg.anthropic_api_key)
    return out


@router.post("/api-key")
def post_api_key(req: SetApiKeyRequest) -> Dict[str, Any]:
    try:
        set_api_key(req.key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True}


@router.get("/has-api-key")
def get_has_api_key() -> Dict[str, Any]:
    try:
        cfg = load_config()
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"hasApiKey": cfg.has_api_key()}
