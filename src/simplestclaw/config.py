from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


APP_DIR_NAME = "simplestclaw"
CONFIG_FILE_NAME = "config.json"
DEFAULT_GATEWAY_PORT = 18789


class ConfigError(Exception):
    """The persisted config could not be located, read, parsed or written."""


class AppConfig(BaseModel):
    """Persisted desktop settings.

    Serialized with camelCase keys (`anthropicApiKey`, `gatewayPort`, `autoStartGateway`)
    so the file and the HTTP payloads match what the front end reads.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    anthropic_api_key: Optional[str] = None
    gateway_port: int = Field(default=DEFAULT_GATEWAY_PORT, ge=1, le=65535)
    auto_start_gateway: bool = True

    def has_api_key(self) -> bool:
        return bool(str(self.anthropic_api_key or "").strip())


def _platform_config_dir() -> Optional[Path]:
    if sys.platform.startswith("win"):
        appdata = os.getenv("APPDATA")
        return Path(appdata) if appdata else None
    home = os.getenv("HOME")
    if sys.platform == "darwin":
        return Path(home) / "Library" / "Application Support" if home else None
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg and xdg.strip():
        return Path(xdg)
    return Path(home) / ".config" if home else None


def app_dir() -> Path:
    """Directory holding config.json (and session logs by default).

    `SIMPLESTCLAW_CONFIG_DIR` is used verbatim when set.
    """
    override = str(os.getenv("SIMPLESTCLAW_CONFIG_DIR") or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    base = _platform_config_dir()
    if base is None:
        raise ConfigError("Failed to get config directory")
    return (base / APP_DIR_NAME).expanduser().resolve()


def config_path() -> Path:
    d = app_dir()
    try:
        d.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"IO error: {e}") from e
    return d / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> AppConfig:
    p = Path(path) if path is not None else config_path()
    if not p.exists():
        return AppConfig()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"IO error: {e}") from e
    try:
        return AppConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"JSON error: {e}") from e


def save_config(cfg: AppConfig, path: Optional[Path] = None) -> None:
    p = Path(path) if path is not None else config_path()
    data = json.dumps(cfg.model_dump(by_alias=True), ensure_ascii=False, indent=2) + "\n"
    tmp = p.with_suffix(".tmp")
    try:
        tmp.write_text(data, encoding="utf-8")
        # Best-effort: the file holds an API key.
        try:
            os.chmod(tmp, 0o600)
        except OSError:
            pass
        tmp.replace(p)
    except OSError as e:
        raise ConfigError(f"IO error: {e}") from e


def set_api_key(key: str, path: Optional[Path] = None) -> AppConfig:
    k = str(key or "").strip()
    if not k:
        raise ValueError("API key must not be empty")
    cfg = load_config(path)
    cfg = cfg.model_copy(update={"anthropic_api_key": k})
    save_config(cfg, path)
    return cfg


def has_api_key(path: Optional[Path] = None) -> bool:
    return load_config(path).has_api_key()


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Redact a secret for display, keeping a short prefix/suffix."""
    s = str(value or "").strip()
    if not s:
        return None
    if len(s) <= 10:
        return "*" * len(s)
    return f"{s[:3]}...{s[-4:]}"
