from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_simplestclaw_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    # Never read or write a developer's real config (it holds an API key).
    base = Path(str(tmp_path_factory.mktemp("simplestclaw-test-env")))
    monkeypatch.setenv("SIMPLESTCLAW_CONFIG_DIR", str(base / "config"))
    monkeypatch.setenv("SIMPLESTCLAW_LOG_DIR", str(base / "logs"))
    monkeypatch.delenv("SIMPLESTCLAW_OPENCLAW_BIN", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("OPENCLAW_GATEWAY_TOKEN", raising=False)
