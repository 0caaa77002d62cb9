# app/entrypoint/storage.py
"""
Filesystem phases: writable working directories and the static health marker.
"""
from __future__ import annotations

import logging
import os

from app.entrypoint.config import BootstrapConfig
from app.entrypoint.policy import Phase, PhaseResult

logger = logging.getLogger("app.entrypoint.storage")

DIR_MODE = 0o775


def prepare_storage_layout(config: BootstrapConfig) -> PhaseResult:
    """
    Make sure cache, session, log, view and bootstrap-cache directories exist.

    Creation is create-if-missing. The chmod afterwards is best effort: the
    container may run as a non-root user that does not own a mounted volume,
    so a refused chmod is only logged.

    Returns:
        PhaseResult: ok with the list of directories, or failed if a
        directory could not be created at all
    """
    created = []
    for path in config.storage_dirs:
        try:
            if not path.is_dir():
                path.mkdir(parents=True, exist_ok=True)
                created.append(str(path))
        except OSError as exc:
            logger.error("[entrypoint] Cannot create %s: %s", path, exc)
            return PhaseResult.failure(Phase.STORAGE, f"cannot create {path}: {exc}")

        try:
            os.chmod(path, DIR_MODE)
        except OSError as exc:
            logger.warning("[entrypoint] chmod %o %s failed (%s), continuing", DIR_MODE, path, exc)

    logger.info("[entrypoint] Storage layout ready (%d created)", len(created))
    return PhaseResult.ok(Phase.STORAGE, created=created)


def publish_health_marker(config: BootstrapConfig) -> PhaseResult:
    """Write public/healthz.html once, if the served root is writable."""
    marker = config.health_marker
    if marker.exists():
        return PhaseResult.skipped(Phase.HEALTH, "marker already present")

    public_dir = marker.parent
    try:
        public_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("[entrypoint] Cannot create %s: %s", public_dir, exc)
        return PhaseResult.skipped(Phase.HEALTH, "public dir not writable")

    if not os.access(public_dir, os.W_OK):
        logger.warning("[entrypoint] %s is not writable, skipping health marker", public_dir)
        return PhaseResult.skipped(Phase.HEALTH, "public dir not writable")

    try:
        marker.write_text("OK\n", encoding="utf-8")
    except OSError as exc:
        return PhaseResult.failure(Phase.HEALTH, f"cannot write {marker}: {exc}")

    logger.info("[entrypoint] Health marker written to %s", marker)
    return PhaseResult.ok(Phase.HEALTH, path=str(marker))
