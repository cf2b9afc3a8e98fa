from __future__ import annotations

import itertools
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from simplestclaw.config import AppConfig


_pids = itertools.count(40_000)


class FakePopen:
    """Stand-in for subprocess.Popen that never launches anything."""

    def __init__(self, args, **kwargs: Any):
        self.args: List[str] = list(args)
        self.kwargs: Dict[str, Any] = dict(kwargs)
        self.pid = next(_pids)
        self.returncode: Optional[int] = None
        self.killed = False
        self.poll_error: Optional[Exception] = None
        self.kill_error: Optional[Exception] = None

    def poll(self) -> Optional[int]:
        if self.poll_error is not None:
            raise self.poll_error
        return self.returncode

    def kill(self) -> None:
        if self.kill_error is not None:
            raise self.kill_error
        self.killed = True
        if self.returncode is None:
            self.returncode = -9

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        return self.returncode


class PopenRecorder:
    def __init__(self) -> None:
        self.spawned: List[FakePopen] = []
        self.error: Optional[Exception] = None

    def __call__(self, args, **kwargs: Any) -> FakePopen:
        if self.error is not None:
            raise self.error
        proc = FakePopen(args, **kwargs)
        self.spawned.append(proc)
        return proc


def config_with_key(key: Optional[str] = "sk-ant-test-0123456789", port: int = 18789) -> AppConfig:
    return AppConfig(anthropic_api_key=key, gateway_port=port)


FAKE_OPENCLAW_SOURCE = """
import os, sys, time
print("argv=" + " ".join(sys.argv[1:]), flush=True)
print("token=" + os.environ.get("OPENCLAW_GATEWAY_TOKEN", ""), flush=True)
print("has_key=" + str(bool(os.environ.get("ANTHROPIC_API_KEY"))), flush=True)
if os.environ.get("FAKE_OPENCLAW_EXIT_NOW") == "1":
    sys.exit(3)
time.sleep(60)
"""


def write_fake_openclaw(dir_path: Path) -> Path:
    """An executable `openclaw` script that echoes its inputs and then sleeps."""
    dir_path.mkdir(parents=True, exist_ok=True)
    path = dir_path / "openclaw"
    path.write_text(f"#!{sys.executable}\n{FAKE_OPENCLAW_SOURCE}", encoding="utf-8")
    os.chmod(path, 0o755)
    return path
