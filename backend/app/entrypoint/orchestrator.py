# app/entrypoint/orchestrator.py
"""Startup orchestrator - takes the container from cold to serving requests."""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from app.entrypoint.artifacts import optimize_artifacts
from app.entrypoint.commands import EXIT_NOT_FOUND, CommandRunner, run_command
from app.entrypoint.config import BootstrapConfig
from app.entrypoint.database import run_migrations, run_seeders
from app.entrypoint.handoff import ExecFn, handoff
from app.entrypoint.keys import resolve_secrets
from app.entrypoint.policy import Phase, PhaseResult, Severity, build_policy
from app.entrypoint.readiness import Probe, Sleep, wait_for_dependency
from app.entrypoint.storage import prepare_storage_layout, publish_health_marker

logger = logging.getLogger("app.entrypoint")

EXIT_FATAL = 1


class StartupOrchestrator:
    """
    Runs the startup phases in dependency order:

    1. storage layout and APP_KEY resolution (concurrently)
    2. database readiness wait
    3. migrations, then seeders (only if the database is ready)
    4. cache optimization
    5. health marker
    6. handoff to the server or to the supplied command

    Every phase returns a PhaseResult; the policy table decides whether a
    failure stops the run.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        runner: Optional[CommandRunner] = None,
        exec_fn: Optional[ExecFn] = None,
        probe: Optional[Probe] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.config = config
        self.policy = build_policy(config)
        self.runner = runner or run_command
        self.exec_fn = exec_fn
        self.probe = probe
        self.sleep = sleep
        self.results: List[PhaseResult] = []

    # ---- phases (one method each so they can be traced or overridden) ----
    def prepare_storage_layout(self) -> PhaseResult:
        return prepare_storage_layout(self.config)

    def resolve_secrets(self) -> PhaseResult:
        return resolve_secrets(self.config)

    async def wait_for_dependency(self) -> PhaseResult:
        cfg = self.config
        if not cfg.db_wait:
            return PhaseResult.skipped(Phase.DEPENDENCY, "DB_WAIT disabled")
        if not cfg.db_host:
            return PhaseResult.skipped(Phase.DEPENDENCY, "no database host configured")

        logger.info("[entrypoint] Waiting for %s:%s (up to %ds)",
                    cfg.db_host, cfg.db_port, cfg.db_wait_timeout)
        ready = await wait_for_dependency(
            cfg.db_host, cfg.db_port, cfg.db_wait_timeout,
            probe=self.probe, sleep=self.sleep,
        )
        if ready:
            return PhaseResult.ok(Phase.DEPENDENCY, f"{cfg.db_host}:{cfg.db_port} reachable")
        return PhaseResult.failure(
            Phase.DEPENDENCY,
            f"{cfg.db_host}:{cfg.db_port} unreachable after {cfg.db_wait_timeout}s",
        )

    async def run_migrations(self) -> PhaseResult:
        return await run_migrations(self.config, self.runner)

    async def run_seeders(self) -> PhaseResult:
        return await run_seeders(self.config, self.runner)

    async def optimize_artifacts(self) -> PhaseResult:
        return await optimize_artifacts(self.config, self.runner)

    def publish_health_marker(self) -> PhaseResult:
        return publish_health_marker(self.config)

    def handoff(self, command: Optional[Sequence[str]]) -> List[str]:
        return handoff(self.config, command, self.exec_fn)

    # ---- sequencing ----
    def _record(self, result: PhaseResult) -> bool:
        """Log a result against the policy; return True if the run must stop."""
        self.results.append(result)
        if not result.failed:
            logger.info("[entrypoint] %s: %s %s", result.phase.value,
                        result.status.value, result.detail)
            return False

        severity = self.policy[result.phase]
        if severity is Severity.FATAL:
            logger.critical("[entrypoint] FATAL %s: %s", result.phase.value, result.detail)
            return True
        if severity is Severity.DEGRADE:
            logger.error("[entrypoint] DEGRADED %s: %s (continuing)",
                         result.phase.value, result.detail)
        else:
            logger.warning("[entrypoint] WARNING %s: %s", result.phase.value, result.detail)
        return False

    async def prepare(self) -> int:
        """
        Run every phase up to (not including) the handoff.

        Returns:
            int: 0 when the server may start, EXIT_FATAL otherwise
        """
        logger.info("[entrypoint] Bootstrapping APP_ENV=%s in %s",
                    self.config.app_env, self.config.base_dir)

        # No shared state between these two, so they can run side by side
        storage, secrets = await asyncio.gather(
            asyncio.to_thread(self.prepare_storage_layout),
            asyncio.to_thread(self.resolve_secrets),
        )
        stop = self._record(storage)
        stop = self._record(secrets) or stop
        if stop:
            return EXIT_FATAL

        dependency = await self.wait_for_dependency()
        if self._record(dependency):
            return EXIT_FATAL
        db_ready = not dependency.failed

        if db_ready:
            if self._record(await self.run_migrations()):
                return EXIT_FATAL
            self._record(await self.run_seeders())
        else:
            logger.warning("[entrypoint] Database not ready, skipping migrations and seeders")
            self._record(PhaseResult.skipped(Phase.MIGRATIONS, "database not ready"))
            self._record(PhaseResult.skipped(Phase.SEEDERS, "database not ready"))

        self._record(await self.optimize_artifacts())
        self._record(self.publish_health_marker())
        self._log_summary()
        return 0

    def _log_summary(self) -> None:
        counts = {"ok": 0, "skipped": 0, "failed": 0}
        for r in self.results:
            counts[r.status.value] += 1
        logger.info(
            "[entrypoint] Bootstrap completed: %d ok, %d skipped, %d failed",
            counts["ok"], counts["skipped"], counts["failed"],
        )

    def bootstrap(self, command: Optional[Sequence[str]] = None) -> int:
        """
        Prepare the container, then exec into the server or `command`.

        With the real exec this only returns on failure.
        """
        code = asyncio.run(self.prepare())
        if code:
            return code
        try:
            self.handoff(command)
        except OSError as exc:
            self._record(PhaseResult.failure(Phase.HANDOFF, f"exec failed: {exc}"))
            return EXIT_NOT_FOUND
        self._record(PhaseResult.ok(Phase.HANDOFF))
        return 0


def bootstrap(argv: Optional[Sequence[str]] = None, config: Optional[BootstrapConfig] = None) -> int:
    """Entry operation: `bootstrap(args) -> exec(command) | exit(code)`."""
    if config is None:
        config = BootstrapConfig.from_env()
    return StartupOrchestrator(config).bootstrap(list(argv or []))


def main() -> None:
    from app.logging_config import configure_logging

    configure_logging()
    sys.exit(bootstrap(sys.argv[1:]))
