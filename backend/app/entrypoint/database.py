# app/entrypoint/database.py
"""
Schema migration and one-time seeding.

Both phases shell out (Aerich for migrations, `python -m app.seed` for
seeding) and report the exit code; neither raises. Seeding is guarded by an
idempotence marker per environment name so a container restart does not
seed twice.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from app.entrypoint.commands import CommandRunner, run_command
from app.entrypoint.config import BootstrapConfig
from app.entrypoint.policy import Phase, PhaseResult

logger = logging.getLogger("app.entrypoint.database")


async def run_migrations(
    config: BootstrapConfig,
    runner: Optional[CommandRunner] = None,
) -> PhaseResult:
    """
    Apply pending migrations with MIGRATE_COMMAND (default `aerich upgrade`).

    Must only be called once the database is known to be reachable, or when
    the readiness wait is disabled.
    """
    if not config.run_migrations:
        logger.info("[entrypoint] RUN_MIGRATIONS=false, skipping migrations")
        return PhaseResult.skipped(Phase.MIGRATIONS, "disabled")

    runner = runner or run_command
    code = await runner(config.migrate_command, config.base_dir)
    if code != 0:
        logger.error("[entrypoint] Migrations failed (exit %d)", code)
        return PhaseResult.failure(Phase.MIGRATIONS, f"exit code {code}", exit_code=code)

    logger.info("[entrypoint] Migrations applied")
    return PhaseResult.ok(Phase.MIGRATIONS, exit_code=code)


async def run_seeders(
    config: BootstrapConfig,
    runner: Optional[CommandRunner] = None,
) -> PhaseResult:
    """
    Run the seeders once per environment name.

    Gates, in order:
      - RUN_SEEDERS must be enabled
      - FORCE_SEED removes the marker before it is checked
      - an existing marker means seeding already happened

    The marker is written only after a successful run, so a failed attempt
    is retried on the next container start.
    """
    if not config.run_seeders:
        logger.info("[entrypoint] RUN_SEEDERS=false, skipping seeders")
        return PhaseResult.skipped(Phase.SEEDERS, "disabled")

    marker = config.seed_marker
    if config.force_seed and marker.exists():
        logger.warning("[entrypoint] FORCE_SEED set, removing %s", marker)
        try:
            marker.unlink()
        except OSError as exc:
            return PhaseResult.failure(Phase.SEEDERS, f"cannot remove marker: {exc}")

    if marker.exists():
        logger.info("[entrypoint] Seeders already ran for '%s', skipping", config.app_env)
        return PhaseResult.skipped(Phase.SEEDERS, "marker present")

    runner = runner or run_command
    code = await runner(config.seed_command, config.base_dir)
    if code != 0:
        logger.error("[entrypoint] Seeders failed (exit %d); will retry on next start", code)
        return PhaseResult.failure(Phase.SEEDERS, f"exit code {code}", exit_code=code)

    try:
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text(dt.datetime.now(dt.timezone.utc).isoformat() + "\n", encoding="utf-8")
    except OSError as exc:
        return PhaseResult.failure(Phase.SEEDERS, f"seeded but cannot write marker: {exc}")

    logger.info("[entrypoint] Seeders finished, marker written to %s", marker)
    return PhaseResult.ok(Phase.SEEDERS, marker=str(marker))
