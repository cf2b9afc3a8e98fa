from __future__ import annotations

import os
from pathlib import Path

import pytest

import simplestclaw.locator as locator


def _touch_exe(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    os.chmod(path, 0o755)
    return path


@pytest.fixture
def no_path_hit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(locator.shutil, "which", lambda name: None)


@pytest.fixture
def no_system_candidates(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(locator, "SYSTEM_CANDIDATES", (str(tmp_path / "nowhere" / "openclaw"),))


@pytest.mark.basic
def test_path_lookup_wins_over_candidates(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    home = tmp_path / "home"
    _touch_exe(home / ".npm-global" / "bin" / "openclaw")
    monkeypatch.setenv("HOME", str(home))
    seen = []

    def _which(name: str):
        seen.append(name)
        return "/usr/bin/openclaw"

    monkeypatch.setattr(locator.shutil, "which", _which)

    assert locator.find_openclaw() == "/usr/bin/openclaw"
    assert seen == ["openclaw"]


@pytest.mark.basic
def test_home_candidates_are_searched_in_order(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, no_path_hit: None, no_system_candidates: None
) -> None:
    home = tmp_path / "home"
    second = _touch_exe(home / "node_modules" / ".bin" / "openclaw")
    monkeypatch.setenv("HOME", str(home))

    assert locator.find_openclaw() == str(second)

    first = _touch_exe(home / ".npm-global" / "bin" / "openclaw")
    assert locator.find_openclaw() == str(first)


@pytest.mark.basic
def test_system_candidates_used_when_home_unset(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, no_path_hit: None) -> None:
    sys_exe = _touch_exe(tmp_path / "usr-local-bin" / "openclaw")
    monkeypatch.setattr(locator, "SYSTEM_CANDIDATES", (str(tmp_path / "missing" / "openclaw"), str(sys_exe)))
    monkeypatch.delenv("HOME", raising=False)

    assert locator.find_openclaw() == str(sys_exe)


@pytest.mark.basic
def test_returns_none_when_nothing_matches(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, no_path_hit: None, no_system_candidates: None
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "empty-home"))
    assert locator.find_openclaw() is None


@pytest.mark.basic
def test_env_override_is_used_only_when_it_exists(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, no_path_hit: None, no_system_candidates: None
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "empty-home"))
    monkeypatch.setenv("SIMPLESTCLAW_OPENCLAW_BIN", str(tmp_path / "does-not-exist"))
    assert locator.find_openclaw() is None

    exe = _touch_exe(tmp_path / "custom" / "openclaw")
    monkeypatch.setenv("SIMPLESTCLAW_OPENCLAW_BIN", str(exe))
    assert locator.find_openclaw() == str(exe)


@pytest.mark.basic
def test_candidate_paths_interpolate_home() -> None:
    paths = locator.candidate_paths(home="/home/u")
    assert paths[:2] == [
        str(Path("/home/u", ".npm-global", "bin", "openclaw")),
        str(Path("/home/u", "node_modules", ".bin", "openclaw")),
    ]
    assert paths[2:] == list(locator.SYSTEM_CANDIDATES)
    assert locator.candidate_paths(home=None) == list(locator.SYSTEM_CANDIDATES)
