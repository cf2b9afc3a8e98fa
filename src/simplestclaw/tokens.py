from __future__ import annotations

import threading
import time


TOKEN_PREFIX = "sclw-"

_LAST_NS_LOCK = threading.Lock()
_LAST_NS: int = 0


def _now_ns() -> int:
    try:
        return int(time.time_ns())
    except Exception:
        return 0


def generate_token() -> str:
    """Session token for OPENCLAW_GATEWAY_TOKEN.

    Not a secret in the cryptographic sense: the gateway listens on localhost for a
    single desktop user. Values strictly increase within this process, so two calls
    never return the same token even on coarse clocks.
    """
    global _LAST_NS
    with _LAST_NS_LOCK:
        ns = _now_ns()
        if ns <= _LAST_NS:
            ns = _LAST_NS + 1
        _LAST_NS = ns
    secs, nanos = divmod(ns, 1_000_000_000)
    return f"{TOKEN_PREFIX}{secs:x}{nanos:x}"
