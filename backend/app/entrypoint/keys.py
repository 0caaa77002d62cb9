# app/entrypoint/keys.py
"""
Application key resolution.

APP_KEY signs every access token the API hands out, so the container must not
start without one. Resolution order:
  1. `.env` already holds a valid-looking APP_KEY -> nothing to do
  2. APP_KEY is set in the environment -> persist it into `.env`
     (best effort: an unwritable `.env` only warns)
  3. `.env` exists -> generate a fresh key and persist it
  4. neither `.env` nor APP_KEY -> fatal
"""
from __future__ import annotations

import base64
import binascii
import logging
import secrets
from typing import Optional

from dotenv import set_key

from app.entrypoint.config import BootstrapConfig
from app.entrypoint.policy import Phase, PhaseResult

logger = logging.getLogger("app.entrypoint.keys")

KEY_NAME = "APP_KEY"
KEY_PREFIX = "base64:"
KEY_BYTES = 32
MIN_PLAIN_LENGTH = 32


def generate_key() -> str:
    """Return `base64:` followed by 32 bytes from the OS CSPRNG."""
    return KEY_PREFIX + base64.b64encode(secrets.token_bytes(KEY_BYTES)).decode("ascii")


def looks_valid(value: Optional[str]) -> bool:
    """
    Heuristic for "someone already configured a real key".

    Accepts `base64:<payload>` decoding to at least 16 bytes, or any plain
    value of 32 characters or more.
    """
    if not value:
        return False
    value = value.strip()
    if value.startswith(KEY_PREFIX):
        try:
            raw = base64.b64decode(value[len(KEY_PREFIX):], validate=True)
        except (binascii.Error, ValueError):
            return False
        return len(raw) >= 16
    return len(value) >= MIN_PLAIN_LENGTH


def _persist(config: BootstrapConfig, value: str) -> None:
    env_file = config.env_file
    if not env_file.exists():
        env_file.parent.mkdir(parents=True, exist_ok=True)
        env_file.touch()
    set_key(str(env_file), KEY_NAME, value, quote_mode="never")


def resolve_secrets(config: BootstrapConfig) -> PhaseResult:
    """
    Make sure `.env` ends up with a usable APP_KEY line.

    Returns:
        PhaseResult: ok with `source` in {"file", "environment", "generated"},
        or failed when no key source exists at all
    """
    if config.env_file_exists and looks_valid(config.file_app_key):
        logger.info("[entrypoint] APP_KEY already present in %s", config.env_file)
        return PhaseResult.ok(Phase.SECRETS, "key already configured", source="file")

    if config.env_app_key:
        try:
            _persist(config, config.env_app_key)
        except OSError as exc:
            # The server inherits APP_KEY from this process, so it can still start
            logger.warning("[entrypoint] APP_KEY from environment not written to %s: %s",
                           config.env_file, exc)
            return PhaseResult.ok(Phase.SECRETS, "key taken from environment (not persisted)",
                                  source="environment", persisted=False)
        logger.info("[entrypoint] APP_KEY from environment written to %s", config.env_file)
        return PhaseResult.ok(Phase.SECRETS, "key taken from environment", source="environment")

    if not config.env_file_exists:
        message = (
            f"No {config.env_file} file and no APP_KEY environment variable; "
            "mount a .env file or set APP_KEY"
        )
        return PhaseResult.failure(Phase.SECRETS, message)

    try:
        _persist(config, generate_key())
    except OSError as exc:
        return PhaseResult.failure(Phase.SECRETS, f"cannot write {config.env_file}: {exc}")
    logger.warning("[entrypoint] Generated a new APP_KEY in %s", config.env_file)
    return PhaseResult.ok(Phase.SECRETS, "key generated", source="generated")
