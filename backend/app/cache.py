# app/cache.py
"""
Derived-artifact caches, built at deploy time by the container entrypoint.

    python -m app.cache build {config,route,view,event}
    python -m app.cache clear [config|route|view|event]

Every artifact can be regenerated from code and settings, so deleting one is
always safe: the application just does the work at request time instead.
"""
import argparse
import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from app.config import settings
from app.logging_config import configure_logging

logger = logging.getLogger("uvicorn.error")

EXIT_USAGE = 2


def artifact_paths(base_dir: Optional[Path] = None) -> Dict[str, Path]:
    base = Path(base_dir) if base_dir else settings.base_dir
    return {
        "config": base / "bootstrap" / "cache" / "config.json",
        "route": base / "bootstrap" / "cache" / "routes.json",
        "view": base / "storage" / "framework" / "views" / "openapi.json",
        "event": base / "bootstrap" / "cache" / "events.json",
    }


def _write_json(path: Path, payload: Any) -> None:
    """Write next to the target, then rename, so readers never see half a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True, default=str)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _config_payload() -> Dict[str, Any]:
    data = settings.model_dump()
    data["base_dir"] = str(settings.base_dir)
    return data


def _route_payload() -> list:
    from app.main import app

    routes = []
    for route in app.routes:
        routes.append({
            "path": getattr(route, "path", None),
            "name": getattr(route, "name", None),
            "methods": sorted(getattr(route, "methods", None) or []),
        })
    return routes


def _view_payload() -> Dict[str, Any]:
    from app.main import app

    return app.openapi()


def _event_payload() -> Dict[str, list]:
    from app.main import app

    def names(handlers):
        return [getattr(h, "__qualname__", repr(h)) for h in handlers]

    return {
        "startup": names(getattr(app.router, "on_startup", [])),
        "shutdown": names(getattr(app.router, "on_shutdown", [])),
    }


BUILDERS: Dict[str, Callable[[], Any]] = {
    "config": _config_payload,
    "route": _route_payload,
    "view": _view_payload,
    "event": _event_payload,
}


def build(kind: str, base_dir: Optional[Path] = None) -> Path:
    """
    Build one cache artifact.

    Raises:
        KeyError: Unknown kind
    """
    builder = BUILDERS[kind]
    path = artifact_paths(base_dir)[kind]
    _write_json(path, builder())
    logger.info("[cache] %s cached at %s", kind, path)
    return path


def clear(kind: Optional[str] = None, base_dir: Optional[Path] = None) -> list:
    """Remove one artifact, or all of them when `kind` is None."""
    paths = artifact_paths(base_dir)
    targets = [paths[kind]] if kind else list(paths.values())
    removed = []
    for path in targets:
        if path.exists():
            path.unlink()
            removed.append(path)
    logger.info("[cache] cleared %s", kind or "all caches")
    return removed


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m app.cache")
    sub = parser.add_subparsers(dest="action", required=True)
    build_p = sub.add_parser("build", help="build one cache artifact")
    build_p.add_argument("kind", choices=sorted(BUILDERS))
    clear_p = sub.add_parser("clear", help="remove one or all cache artifacts")
    clear_p.add_argument("kind", nargs="?", choices=sorted(BUILDERS))

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_USAGE if exc.code else 0

    configure_logging()
    try:
        if args.action == "build":
            build(args.kind)
        else:
            clear(args.kind)
    except Exception:
        logger.exception("[cache] %s %s failed", args.action, args.kind or "")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
