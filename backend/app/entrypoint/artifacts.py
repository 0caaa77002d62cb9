# app/entrypoint/artifacts.py
"""
Derived-artifact caches (config, route, view, event).

Caches are an optimization only. A kind that fails to build is cleared so the
application falls back to its uncached path; the other kinds still build.
"""
from __future__ import annotations

import logging
from typing import Optional

from app.entrypoint.commands import CommandRunner, run_command
from app.entrypoint.config import BootstrapConfig
from app.entrypoint.policy import Phase, PhaseResult

logger = logging.getLogger("app.entrypoint.artifacts")

CACHE_KINDS = ("config", "route", "view", "event")


async def optimize_artifacts(
    config: BootstrapConfig,
    runner: Optional[CommandRunner] = None,
) -> PhaseResult:
    """
    Clear stale caches, then rebuild them in production-like environments.

    Returns:
        PhaseResult: `data["kinds"]` maps each kind to "built", "cleared"
        (build failed, fell back to uncached) or "failed" (even clearing
        failed); status is failed if any kind did not build
    """
    if not config.run_optimize:
        return PhaseResult.skipped(Phase.OPTIMIZE, "disabled")

    runner = runner or run_command
    base = list(config.cache_command)

    if config.cache_clear or not config.config_cache.exists():
        code = await runner(base + ["clear"], config.base_dir)
        if code != 0:
            logger.warning("[entrypoint] Clearing caches failed (exit %d)", code)

    if not config.production_like:
        logger.info("[entrypoint] APP_ENV=%s, caches left unbuilt", config.app_env)
        return PhaseResult.skipped(Phase.OPTIMIZE, "not a production-like environment")

    kinds: dict[str, str] = {}
    for kind in CACHE_KINDS:
        code = await runner(base + ["build", kind], config.base_dir)
        if code == 0:
            kinds[kind] = "built"
            continue
        logger.warning("[entrypoint] %s cache build failed (exit %d), clearing it", kind, code)
        clear_code = await runner(base + ["clear", kind], config.base_dir)
        kinds[kind] = "cleared" if clear_code == 0 else "failed"

    failed = [k for k, v in kinds.items() if v != "built"]
    if failed:
        return PhaseResult.failure(
            Phase.OPTIMIZE, f"uncached: {', '.join(failed)}", kinds=kinds
        )
    logger.info("[entrypoint] Caches built: %s", ", ".join(CACHE_KINDS))
    return PhaseResult.ok(Phase.OPTIMIZE, kinds=kinds)
