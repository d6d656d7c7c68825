"""
Connectivity probes - answer "can we reach the network right now?" before a
request is attempted, so offline calls fail fast instead of waiting for a
timeout.
"""

import asyncio
import time
from typing import Protocol

import httpx
from loguru import logger


class ConnectivityProbe(Protocol):
    async def is_online(self) -> bool: ...


class StaticConnectivityProbe:
    """Probe with an explicitly controlled answer (manual offline mode)."""

    def __init__(self, online: bool = True):
        self.online = online

    def set_online(self, online: bool) -> None:
        if online != self.online:
            logger.info(f"Connectivity set to {'online' if online else 'offline'}")
        self.online = online

    async def is_online(self) -> bool:
        return self.online


class SocketConnectivityProbe:
    """
    Checks reachability by opening a TCP connection to the backend host.

    The answer is memoised for ``ttl`` seconds so a burst of requests does
    not open one probe connection each.
    """

    def __init__(self, base_url: str, timeout: float = 3.0, ttl: float = 5.0):
        url = httpx.URL(base_url)
        self.host = url.host
        self.port = url.port or (443 if url.scheme == "https" else 80)
        self.timeout = timeout
        self.ttl = ttl
        self._last_result: bool | None = None
        self._checked_at = 0.0

    async def is_online(self) -> bool:
        now = time.monotonic()
        if self._last_result is not None and now - self._checked_at < self.ttl:
            return self._last_result

        result = await self._probe()
        if result != self._last_result:
            state = "reachable" if result else "unreachable"
            logger.info(f"Backend {self.host}:{self.port} is {state}")
        self._last_result = result
        self._checked_at = time.monotonic()
        return result

    async def _probe(self) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout,
            )
        except (OSError, asyncio.TimeoutError):
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True
