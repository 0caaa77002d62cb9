# app/entrypoint/readiness.py
"""
Readiness wait for the database (or any TCP dependency).

This is the only phase that blocks on the network: one connection attempt
per interval, for a fixed number of attempts. There is no backoff; the
ceiling is a hard timeout.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

logger = logging.getLogger("app.entrypoint.readiness")

DEFAULT_TIMEOUT = 30
POLL_INTERVAL = 1.0
CONNECT_TIMEOUT = 1.0

Probe = Callable[[str, int], Awaitable[bool]]
Sleep = Callable[[float], Awaitable[None]]


class ProbeState(str, Enum):
    UNKNOWN = "unknown"
    READY = "ready"
    TIMED_OUT = "failed-timeout"


async def tcp_probe(host: str, port: int) -> bool:
    """Return True if a TCP connection to host:port can be opened."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=CONNECT_TIMEOUT
        )
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


class ReadinessProbe:
    """
    Tracks one dependency from unknown to ready or timed out.

    The state only moves forward; a probe that has settled cannot be reused.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: int = DEFAULT_TIMEOUT,
        interval: float = POLL_INTERVAL,
        probe: Optional[Probe] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.host = host
        self.port = port
        if int(timeout) < 1:
            logger.warning("[entrypoint] DB_WAIT_TIMEOUT=%s is below 1, probing once", timeout)
        self.timeout = max(int(timeout), 1)
        self.interval = interval
        self._probe = probe or tcp_probe
        self._sleep = sleep or asyncio.sleep
        self.state = ProbeState.UNKNOWN
        self.attempts = 0

    def _settle(self, state: ProbeState) -> None:
        if self.state is not ProbeState.UNKNOWN:
            raise RuntimeError(f"probe already settled as {self.state.value}")
        self.state = state

    async def wait(self) -> bool:
        """Poll until reachable or until `timeout` attempts have failed."""
        if self.state is not ProbeState.UNKNOWN:
            raise RuntimeError(f"probe already settled as {self.state.value}")

        for attempt in range(1, self.timeout + 1):
            self.attempts = attempt
            if await self._probe(self.host, self.port):
                logger.info(
                    "[entrypoint] %s:%s reachable after %d attempt(s)",
                    self.host, self.port, attempt,
                )
                self._settle(ProbeState.READY)
                return True
            logger.debug("[entrypoint] %s:%s not reachable (%d/%d)",
                         self.host, self.port, attempt, self.timeout)
            if attempt < self.timeout:
                await self._sleep(self.interval)

        logger.warning(
            "[entrypoint] %s:%s still unreachable after %d attempts",
            self.host, self.port, self.timeout,
        )
        self._settle(ProbeState.TIMED_OUT)
        return False


async def wait_for_dependency(
    host: str,
    port: int,
    timeout: int = DEFAULT_TIMEOUT,
    *,
    interval: float = POLL_INTERVAL,
    probe: Optional[Probe] = None,
    sleep: Optional[Sleep] = None,
) -> bool:
    """
    Wait for host:port to accept TCP connections.

    Args:
        host: Dependency host name
        port: Dependency TCP port
        timeout: Number of attempts, one per interval (default 30)

    Returns:
        bool: True once reachable, False after `timeout` failed attempts.
        Never raises on timeout; the caller decides how bad that is.
    """
    return await ReadinessProbe(host, port, timeout, interval, probe, sleep).wait()
