from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import List, Optional


EXECUTABLE_NAME = "openclaw"

# Relative to $HOME: npm global prefixes commonly used instead of a sudo install.
HOME_CANDIDATES = (
    (".npm-global", "bin", EXECUTABLE_NAME),
    ("node_modules", ".bin", EXECUTABLE_NAME),
)

SYSTEM_CANDIDATES = (
    "/usr/local/bin/openclaw",
    "/opt/homebrew/bin/openclaw",
)

INSTALL_HINT = "OpenClaw not found. Please install it with: npm install -g openclaw\nSee: https://docs.clawd.bot/install"


def candidate_paths(*, home: Optional[str]) -> List[str]:
    """Well-known install locations, in search order."""
    out: List[str] = []
    h = str(home or "").strip()
    if h:
        for parts in HOME_CANDIDATES:
            out.append(str(Path(h, *parts)))
    out.extend(SYSTEM_CANDIDATES)
    return out


def find_openclaw() -> Optional[str]:
    """Resolve the `openclaw` executable.

    Order: `SIMPLESTCLAW_OPENCLAW_BIN` (when it names an existing file), the PATH,
    then `candidate_paths()`. Returns None when nothing matches.
    """
    override = str(os.getenv("SIMPLESTCLAW_OPENCLAW_BIN") or "").strip()
    if override and os.path.isfile(override):
        return override

    found = shutil.which(EXECUTABLE_NAME)
    if found:
        return found

    for loc in candidate_paths(home=os.getenv("HOME")):
        if os.path.exists(loc):
            return loc
    return None
