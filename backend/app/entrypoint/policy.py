# app/entrypoint/policy.py
"""
Phase results and the severity policy table.

Each startup phase reports a `PhaseResult` instead of raising. The
orchestrator looks the phase up in the policy table to decide whether a
failure stops the container (fatal), is logged and skipped (degrade) or is
only worth a warning (warn).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from app.entrypoint.config import BootstrapConfig


class Phase(str, Enum):
    STORAGE = "storage"
    SECRETS = "secrets"
    DEPENDENCY = "dependency"
    MIGRATIONS = "migrations"
    SEEDERS = "seeders"
    OPTIMIZE = "optimize"
    HEALTH = "health"
    HANDOFF = "handoff"


class Severity(str, Enum):
    FATAL = "fatal"
    DEGRADE = "degrade"
    WARN = "warn"


class Status(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class PhaseResult:
    phase: Phase
    status: Status
    detail: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.status is Status.FAILED

    @classmethod
    def ok(cls, phase: Phase, detail: str = "", **data: Any) -> "PhaseResult":
        return cls(phase, Status.OK, detail, data)

    @classmethod
    def skipped(cls, phase: Phase, detail: str = "", **data: Any) -> "PhaseResult":
        return cls(phase, Status.SKIPPED, detail, data)

    @classmethod
    def failure(cls, phase: Phase, detail: str = "", **data: Any) -> "PhaseResult":
        return cls(phase, Status.FAILED, detail, data)


DEFAULT_POLICY: Dict[Phase, Severity] = {
    Phase.STORAGE: Severity.WARN,
    Phase.SECRETS: Severity.FATAL,
    Phase.DEPENDENCY: Severity.DEGRADE,
    Phase.MIGRATIONS: Severity.DEGRADE,
    Phase.SEEDERS: Severity.DEGRADE,
    Phase.OPTIMIZE: Severity.DEGRADE,
    Phase.HEALTH: Severity.WARN,
    Phase.HANDOFF: Severity.FATAL,
}


def build_policy(config: BootstrapConfig) -> Dict[Phase, Severity]:
    """
    Build the phase -> severity table for one run.

    DB_REQUIRED escalates an unreachable database to fatal and
    MIGRATIONS_FAIL_ON_ERROR does the same for a failed migration.
    """
    policy = dict(DEFAULT_POLICY)
    if config.db_required:
        policy[Phase.DEPENDENCY] = Severity.FATAL
    if config.migrations_fail_on_error:
        policy[Phase.MIGRATIONS] = Severity.FATAL
    return policy
