"""SimplestClaw: desktop shim that supervises a local OpenClaw gateway sidecar."""

from __future__ import annotations

from .config import AppConfig, ConfigError, load_config, save_config
from .errors import ConfigurationMissing, ExecutableNotFound, SidecarError, SpawnFailure, TerminationFailure
from .sidecar import GatewayInfo, GatewayStatus, SidecarManager

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigurationMissing",
    "ExecutableNotFound",
    "GatewayInfo",
    "GatewayStatus",
    "SidecarError",
    "SidecarManager",
    "SpawnFailure",
    "TerminationFailure",
    "load_config",
    "save_config",
]
