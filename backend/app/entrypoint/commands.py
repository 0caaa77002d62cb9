# app/entrypoint/commands.py
"""
Subprocess execution for migration, seed and cache-build commands.
"""
from __future__ import annotations

import asyncio
import logging
import shlex
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

logger = logging.getLogger("app.entrypoint.commands")

# Shell convention for "command not found"
EXIT_NOT_FOUND = 127

CommandRunner = Callable[[Sequence[str], Optional[Path]], Awaitable[int]]


def parse_command(text: str) -> list[str]:
    return shlex.split(text)


async def run_command(argv: Sequence[str], cwd: Optional[Path] = None) -> int:
    """
    Run a command to completion and return its exit code.

    Output goes straight to the container's stdout/stderr. A command that
    cannot be started at all is reported as exit code 127.
    """
    printable = " ".join(shlex.quote(a) for a in argv)
    logger.info("[entrypoint] $ %s", printable)
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv, cwd=str(cwd) if cwd else None
        )
    except OSError as exc:
        logger.error("[entrypoint] Cannot start %s: %s", argv[0], exc)
        return EXIT_NOT_FOUND
    code = await proc.wait()
    if code != 0:
        logger.warning("[entrypoint] %s exited with %d", argv[0], code)
    return code
