# app/entrypoint/handoff.py
"""
Process handoff: replace the entrypoint with the server (or a given command).

`os.execvp` keeps the PID, so the container runtime's signals and the exit
code go straight to the server instead of through a supervising parent.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, NoReturn, Optional, Sequence

from app.entrypoint.config import BootstrapConfig

logger = logging.getLogger("app.entrypoint.handoff")

SERVER_HOST = "0.0.0.0"
ASGI_APP = "app.main:app"
DEV_ENVIRONMENTS = ("local", "development")

ExecFn = Callable[[str, Sequence[str]], NoReturn]


def server_command(config: BootstrapConfig) -> list[str]:
    """uvicorn with --reload for local/development, workers otherwise."""
    cmd = ["uvicorn", ASGI_APP, "--host", SERVER_HOST, "--port", str(config.app_port)]
    if config.app_env in DEV_ENVIRONMENTS:
        cmd.append("--reload")
    else:
        cmd += ["--workers", str(config.web_concurrency), "--proxy-headers"]
    return cmd


def handoff(
    config: BootstrapConfig,
    command: Optional[Sequence[str]] = None,
    exec_fn: Optional[ExecFn] = None,
) -> list[str]:
    """
    Exec into `command` if one was given, else into the uvicorn server.

    With the real `os.execvp` this never returns. An injected `exec_fn` that
    does return lets callers observe the final argv, which is returned.

    Raises:
        OSError: If the target executable cannot be started
    """
    argv = list(command) if command else server_command(config)
    exec_fn = exec_fn or os.execvp
    logger.info("[entrypoint] Handing off to: %s", " ".join(argv))
    exec_fn(argv[0], argv)
    return argv
