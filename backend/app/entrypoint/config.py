# app/entrypoint/config.py
"""
Configuration for the container entrypoint.

Every setting the startup phases need is resolved once into a
`BootstrapConfig` and handed to each phase explicitly. Values come from two
sources, in increasing priority:
  1. the `.env` file at the base directory (KEY=value lines)
  2. the process environment
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlsplit

from dotenv import dotenv_values
from pydantic import BaseModel, Field

from app.entrypoint.commands import parse_command

logger = logging.getLogger("app.entrypoint.config")

TRUTHY = ("true", "1", "yes", "on")

# Environment names that get the optimized (cached, multi-worker) setup
PRODUCTION_LIKE = ("production", "staging")

# Writable working directories, relative to the base directory
STORAGE_DIRS = (
    "storage/framework/cache",
    "storage/framework/sessions",
    "storage/framework/views",
    "storage/logs",
    "storage/app",
    "bootstrap/cache",
)


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUTHY


def _int(name: str, value: Optional[str], default: int) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("[entrypoint] %s=%r is not an integer, using %d", name, value, default)
        return default


def _command(name: str, value: Optional[str], default: list[str]) -> list[str]:
    if value is None or value.strip() == "":
        return default
    try:
        return parse_command(value)
    except ValueError as exc:
        logger.warning("[entrypoint] %s cannot be parsed (%s), using %s", name, exc, " ".join(default))
        return default


def _endpoint_from_url(url: Optional[str]) -> tuple[Optional[str], Optional[int]]:
    """Extract host/port from a DATABASE_URL such as postgres://u:p@db:5432/app."""
    if not url:
        return None, None
    parts = urlsplit(url)
    try:
        port = parts.port
    except ValueError:
        port = None
    return parts.hostname, port


class BootstrapConfig(BaseModel):
    base_dir: Path
    app_env: str = "local"
    # Key material known from each source, kept apart so the secret
    # phase can tell "already in the file" from "supplied by the environment"
    file_app_key: Optional[str] = None
    env_app_key: Optional[str] = None
    env_file_exists: bool = False

    database_url: Optional[str] = None
    db_host: Optional[str] = None
    db_port: int = 5432
    db_wait: bool = True
    db_wait_timeout: int = 30
    db_required: bool = False

    run_migrations: bool = True
    migrations_fail_on_error: bool = False
    migrate_command: list[str] = Field(default_factory=lambda: ["aerich", "upgrade"])

    run_seeders: bool = True
    force_seed: bool = False
    seed_command: list[str] = Field(default_factory=lambda: [sys.executable, "-m", "app.seed"])

    run_optimize: bool = True
    cache_clear: bool = False
    cache_command: list[str] = Field(default_factory=lambda: [sys.executable, "-m", "app.cache"])

    app_port: int = 8000
    web_concurrency: int = 2

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base_dir: Optional[Path] = None,
    ) -> "BootstrapConfig":
        """
        Build the configuration from the process environment and `.env`.

        Args:
            environ: Environment mapping (defaults to `os.environ`)
            base_dir: Base directory override (defaults to APP_BASE_DIR or cwd)

        Returns:
            BootstrapConfig: Fully resolved, immutable-by-convention settings
        """
        environ = dict(os.environ if environ is None else environ)
        if base_dir is None:
            base_dir = Path(environ.get("APP_BASE_DIR") or os.getcwd())
        base_dir = Path(base_dir)

        env_file = base_dir / ".env"
        file_values: dict[str, Optional[str]] = {}
        if env_file.is_file():
            file_values = dict(dotenv_values(env_file))

        def get(name: str) -> Optional[str]:
            # Process environment overrides the file
            if environ.get(name) not in (None, ""):
                return environ[name]
            return file_values.get(name)

        database_url = get("DATABASE_URL")
        url_host, url_port = _endpoint_from_url(database_url)
        db_port = _int("DB_PORT", get("DB_PORT"), url_port or 5432)

        return cls(
            base_dir=base_dir,
            app_env=(get("APP_ENV") or "local").strip().lower(),
            file_app_key=file_values.get("APP_KEY") or None,
            env_app_key=environ.get("APP_KEY") or None,
            env_file_exists=env_file.is_file(),
            database_url=database_url,
            db_host=get("DB_HOST") or url_host,
            db_port=db_port,
            db_wait=_flag(get("DB_WAIT"), True),
            db_wait_timeout=_int("DB_WAIT_TIMEOUT", get("DB_WAIT_TIMEOUT"), 30),
            db_required=_flag(get("DB_REQUIRED"), False),
            run_migrations=_flag(get("RUN_MIGRATIONS"), True),
            migrations_fail_on_error=_flag(get("MIGRATIONS_FAIL_ON_ERROR"), False),
            migrate_command=_command("MIGRATE_COMMAND", get("MIGRATE_COMMAND"), ["aerich", "upgrade"]),
            run_seeders=_flag(get("RUN_SEEDERS"), True),
            force_seed=_flag(get("FORCE_SEED"), False),
            seed_command=_command("SEED_COMMAND", get("SEED_COMMAND"), [sys.executable, "-m", "app.seed"]),
            run_optimize=_flag(get("RUN_OPTIMIZE"), True),
            cache_clear=_flag(get("CACHE_CLEAR"), False),
            cache_command=_command("CACHE_COMMAND", get("CACHE_COMMAND"), [sys.executable, "-m", "app.cache"]),
            app_port=_int("APP_PORT", get("APP_PORT"), 8000),
            web_concurrency=_int("WEB_CONCURRENCY", get("WEB_CONCURRENCY"), 2),
        )

    @property
    def env_file(self) -> Path:
        return self.base_dir / ".env"

    @property
    def production_like(self) -> bool:
        return self.app_env in PRODUCTION_LIKE

    @property
    def seed_marker(self) -> Path:
        """One marker per environment name, e.g. storage/app/.seeded-production."""
        return self.base_dir / "storage" / "app" / f".seeded-{self.app_env}"

    @property
    def health_marker(self) -> Path:
        return self.base_dir / "public" / "healthz.html"

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "bootstrap" / "cache"

    @property
    def config_cache(self) -> Path:
        return self.cache_dir / "config.json"

    @property
    def storage_dirs(self) -> list[Path]:
        return [self.base_dir / d for d in STORAGE_DIRS]
