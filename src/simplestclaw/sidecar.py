"""OpenClaw gateway sidecar supervisor.

One `SidecarManager` owns at most one `openclaw gateway` child process:
- `start()` spawns it (or returns the live session's info unchanged),
- `stop()` kills and reaps it,
- `status()` reports liveness.

Every public call reconciles the held handle against the OS (`Popen.poll()`) inside
the same critical section that decides and mutates, so racing callers never observe
stale liveness or spawn twice. There is no background watcher: a gateway that exits
on its own is noticed on the next call.

References:
- OpenClaw gateway CLI: https://docs.clawd.bot/cli/gateway
- OpenClaw gateway protocol: https://docs.clawd.bot/gateway/protocol
"""

from __future__ import annotations

import datetime
import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .config import AppConfig, ConfigError, app_dir, load_config
from .errors import ConfigurationMissing, ExecutableNotFound, SpawnFailure, TerminationFailure
from .locator import INSTALL_HINT, find_openclaw
from .tokens import generate_token


logger = logging.getLogger(__name__)

API_KEY_ENV = "ANTHROPIC_API_KEY"
GATEWAY_TOKEN_ENV = "OPENCLAW_GATEWAY_TOKEN"


class GatewayInfo(BaseModel):
    """Connection info handed to the front end (it connects over WebSocket itself)."""

    model_config = ConfigDict(frozen=True)

    url: str
    port: int
    token: str


class GatewayStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    running: bool
    info: Optional[GatewayInfo] = None


def _ts_compact_utc() -> str:
    return datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")


def gateway_command(executable: str, *, port: int) -> List[str]:
    # `--allow-unconfigured` skips the gateway's own config file requirement.
    return [str(executable), "gateway", "--port", str(int(port)), "--allow-unconfigured"]


def _default_log_dir() -> Path:
    override = str(os.getenv("SIMPLESTCLAW_LOG_DIR") or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return app_dir() / "logs"


class SidecarManager:
    def __init__(
        self,
        *,
        config_loader: Callable[[], AppConfig] = load_config,
        locate: Callable[[], Optional[str]] = find_openclaw,
        token_factory: Callable[[], str] = generate_token,
        log_dir: Optional[Path] = None,
        status_lock_timeout_s: float = 5.0,
    ):
        self._config_loader = config_loader
        self._locate = locate
        self._token_factory = token_factory
        self._log_dir = Path(log_dir).expanduser().resolve() if log_dir is not None else None
        self._status_lock_timeout_s = float(status_lock_timeout_s)

        self._lock = threading.Lock()
        # Updated together under the lock: both None (idle) or both set (running).
        self._process: Optional[subprocess.Popen[bytes]] = None
        self._info: Optional[GatewayInfo] = None
        self._log_path: Optional[Path] = None

    @property
    def log_dir(self) -> Path:
        if self._log_dir is None:
            self._log_dir = _default_log_dir()
        return self._log_dir

    # ----------------------------
    # Public API
    # ----------------------------

    def start(self) -> GatewayInfo:
        with self._lock:
            self._reconcile_locked()
            if self._process is not None and self._info is not None:
                return self._info

            try:
                cfg = self._config_loader()
            except ConfigError as e:
                raise ConfigurationMissing(f"Failed to load config: {e}") from e
            api_key = str(cfg.anthropic_api_key or "").strip()
            if not api_key:
                raise ConfigurationMissing("No API key configured. Please enter your Anthropic API key.")
            port = int(cfg.gateway_port)

            token = self._token_factory()

            exe = self._locate()
            if not exe:
                raise ExecutableNotFound(INSTALL_HINT)

            env = dict(os.environ)
            # Secrets go through the environment so they never show up in process listings.
            env[API_KEY_ENV] = api_key
            env[GATEWAY_TOKEN_ENV] = token

            proc = self._spawn_locked(gateway_command(exe, port=port), env=env)

            info = GatewayInfo(url=f"ws://localhost:{port}", port=port, token=token)
            self._process = proc
            self._info = info
            logger.info("openclaw gateway started url=%s pid=%s exe=%s", info.url, proc.pid, exe)
            return info

    def stop(self) -> None:
        with self._lock:
            self._reconcile_locked()
            proc = self._process
            if proc is None:
                return
            try:
                # kill() is SIGKILL on POSIX and TerminateProcess on Windows.
                proc.kill()
                rc = proc.wait()
            except OSError as e:
                raise TerminationFailure(f"Failed to stop gateway: {e}") from e
            finally:
                self._clear_locked()
            logger.info("openclaw gateway stopped pid=%s exit_code=%s", proc.pid, rc)

    def status(self) -> GatewayStatus:
        acquired = self._lock.acquire(timeout=max(0.0, self._status_lock_timeout_s))
        if not acquired:
            logger.warning("gateway status: supervisor lock busy; reporting not running")
            return GatewayStatus(running=False, info=None)
        try:
            self._reconcile_locked()
            return GatewayStatus(running=self._process is not None, info=self._info)
        except Exception:
            logger.warning("gateway status: reconciliation failed; reporting not running", exc_info=True)
            return GatewayStatus(running=False, info=None)
        finally:
            self._lock.release()

    def log_tail(self, *, max_bytes: int = 80_000) -> Dict[str, Any]:
        """Tail of the current (or most recent) gateway session's stdout/stderr."""
        with self._lock:
            path = self._log_path
        if path is None:
            return {"bytes": 0, "truncated": False, "content": "", "log_path": None}
        if not path.exists():
            return {"bytes": 0, "truncated": False, "content": "", "log_path": str(path)}

        limit = max(1, int(max_bytes))
        try:
            with open(path, "rb") as f:
                f.seek(0, os.SEEK_END)
                size = int(f.tell() or 0)
                begin = max(0, size - limit)
                f.seek(begin, os.SEEK_SET)
                data = f.read(limit)
        except OSError:
            logger.warning("gateway log tail failed path=%s", path, exc_info=True)
            return {"bytes": 0, "truncated": False, "content": "", "log_path": str(path)}

        return {
            "bytes": len(data),
            "truncated": begin > 0,
            "content": data.decode("utf-8", errors="replace"),
            "log_path": str(path),
        }

    # ----------------------------
    # Internals
    # ----------------------------

    def _spawn_locked(self, command: List[str], *, env: Dict[str, str]) -> subprocess.Popen[bytes]:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, ConfigError) as e:
            raise SpawnFailure(f"Failed to spawn gateway: cannot create log dir: {e}") from e
        log_path = (self.log_dir / f"openclaw.{_ts_compact_utc()}.log").resolve()

        try:
            f = open(log_path, "ab", buffering=0)
        except OSError as e:
            raise SpawnFailure(f"Failed to spawn gateway: cannot open log file: {e}") from e
        try:
            proc = subprocess.Popen(
                command,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=f,
                stderr=subprocess.STDOUT,
            )
        except (OSError, ValueError) as e:
            raise SpawnFailure(f"Failed to spawn gateway: {e}") from e
        finally:
            # The child keeps its own descriptor.
            f.close()

        self._log_path = log_path
        return proc

    def _reconcile_locked(self) -> None:
        proc = self._process
        if proc is None:
            self._clear_locked()
            return
        try:
            rc = proc.poll()
        except Exception:
            logger.warning("gateway poll failed pid=%s; treating as exited", proc.pid, exc_info=True)
            self._clear_locked()
            return
        if rc is not None:
            logger.info("openclaw gateway exited pid=%s exit_code=%s", proc.pid, rc)
            self._clear_locked()

    def _clear_locked(self) -> None:
        self._process = None
        self._info = None
