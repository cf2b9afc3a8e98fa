from __future__ import annotations

import argparse
import copy
import json
import logging
import signal
import sys
import threading


def _stderr(line: str) -> None:
    print(str(line), file=sys.stderr)


_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LOG_DATEFMT = "%H:%M:%S"


def _configure_console_logging(level: int = logging.INFO) -> None:
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT)
    root = logging.getLogger()
    if root.handlers:
        for h in list(root.handlers):
            h.setFormatter(formatter)
        root.setLevel(int(level))
        return
    logging.basicConfig(level=int(level), format=_LOG_FORMAT, datefmt=_LOG_DATEFMT)


def _build_uvicorn_log_config(*, uvicorn) -> dict:
    """uvicorn's default log_config with our console format."""
    base = getattr(getattr(uvicorn, "config", None), "LOGGING_CONFIG", None)
    if not isinstance(base, dict):
        return {}
    log_config = copy.deepcopy(base)
    access_fmt = '%(asctime)s [%(levelname)s] %(name)s: %(client_addr)s - "%(request_line)s" %(status_code)s'
    fmts = log_config.setdefault("formatters", {})
    fmts["default"] = {"()": "logging.Formatter", "fmt": _LOG_FORMAT, "datefmt": _LOG_DATEFMT}
    fmts["access"] = {"()": "uvicorn.logging.AccessFormatter", "fmt": access_fmt, "datefmt": _LOG_DATEFMT}
    return log_config


def _is_loopback_host(host: str) -> bool:
    h = str(host or "").strip().lower()
    return h in {"127.0.0.1", "::1", "localhost"}


def _print_json(obj) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True))


def main(argv: list[str] | None = None) -> None:
    _configure_console_logging()
    parser = argparse.ArgumentParser(prog="simplestclaw", description="SimplestClaw (OpenClaw gateway desktop shim)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    serve = sub.add_parser("serve", help="Run the desktop command API (HTTP) for the front end")
    serve.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=18790, help="Bind port (default: 18790)")
    serve.add_argument("--no-auto-start", action="store_true", help="Do not start the gateway on startup")

    sub.add_parser("start", help="Start the gateway in the foreground and stop it on Ctrl-C")
    sub.add_parser("status", help="Print gateway status as JSON")

    key = sub.add_parser("set-api-key", help="Store the Anthropic API key in the config file")
    key.add_argument("key", help="API key value")

    cfg = sub.add_parser("config", help="Show the current config (API key masked)")
    cfg.add_argument("--json", action="store_true", help="Emit machine-readable JSON output")

    args = parser.parse_args(argv)

    if args.cmd == "serve":
        if not _is_loopback_host(str(args.host)):
            _stderr(
                "[WARN] Binding to a non-loopback host. Gateway session tokens are not cryptographically strong "
                "and are only meant for a single local user."
            )
        try:
            import uvicorn
        except Exception as e:
            raise SystemExit(f"uvicorn is required for `simplestclaw serve` (import failed: {e})")

        from .app import create_app

        run_kwargs: dict[str, object] = {"host": str(args.host), "port": int(args.port)}
        log_config = _build_uvicorn_log_config(uvicorn=uvicorn)
        if log_config:
            run_kwargs["log_config"] = log_config
        uvicorn.run(create_app(auto_start=not bool(args.no_auto_start)), **run_kwargs)
        return

    if args.cmd == "start":
        from .errors import SidecarError
        from .sidecar import SidecarManager

        mgr = SidecarManager()
        try:
            info = mgr.start()
        except SidecarError as e:
            raise SystemExit(str(e))
        _print_json(info.model_dump())

        stop = threading.Event()

        def _handle(_signum, _frame) -> None:  # pragma: no cover
            stop.set()

        try:
            signal.signal(signal.SIGINT, _handle)
            signal.signal(signal.SIGTERM, _handle)
        except Exception:
            # Some platforms (or embedded interpreters) may not support signals.
            pass

        try:
            while not stop.is_set():
                if not mgr.status().running:
                    _stderr("Gateway exited.")
                    break
                stop.wait(0.5)
        finally:
            try:
                mgr.stop()
            except SidecarError as e:
                _stderr(f"[WARN] {e}")
        return

    if args.cmd == "status":
        from .sidecar import SidecarManager

        _print_json(SidecarManager().status().model_dump())
        return

    if args.cmd == "set-api-key":
        from .config import ConfigError, set_api_key

        try:
            set_api_key(str(args.key))
        except (ValueError, ConfigError) as e:
            raise SystemExit(str(e))
        print("API key saved.")
        return

    if args.cmd == "config":
        from .config import ConfigError, config_path, load_config, mask_secret

        try:
            current = load_config()
        except ConfigError as e:
            raise SystemExit(str(e))
        out = current.model_dump(by_alias=True)
        out["anthropicApiKey"] = mask_secret(current.anthropic_api_key)
        if bool(args.json):
            _print_json(out)
        else:
            print(f"Config file: {config_path()}")
            print(f"API key: {out['anthropicApiKey'] or '(not set)'}")
            print(f"Gateway port: {current.gateway_port}")
            print(f"Auto-start gateway: {current.auto_start_gateway}")
        return

    raise SystemExit(2)


if __name__ == "__main__":
    main()
