from __future__ import annotations

from .config import router as config_router
from .gateway import router as gateway_router

__all__ = ["config_router", "gateway_router"]
