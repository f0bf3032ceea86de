"""
BrowserStack Local - Lifecycle wrapper around the local tunnel daemon.

The tunnel exposes a localhost endpoint to the BrowserStack grid. One tunnel
is shared by every suite in the process: it is started before the first suite
that needs it and stopped after the last one.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from browserstack.local import Local

from browser_e2e.config import E2EConfig
from browser_e2e.core.errors import TunnelError

logger = logging.getLogger("browser_e2e")


class LocalTunnel:
    """
    A single BrowserStack Local daemon.

    Usage:
        async with LocalTunnel(key) as tunnel:
            ...  # sessions with "local": "true" can now reach localhost
    """

    def __init__(
        self,
        key: str,
        *,
        force: bool = True,
        local_identifier: Optional[str] = None,
        binary_path: Optional[str] = None,
    ):
        self.key = key
        self.force = force
        self.local_identifier = local_identifier
        self.binary_path = binary_path
        self._local = Local()

    async def __aenter__(self) -> LocalTunnel:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    def _start_args(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {"key": self.key}
        if self.force:
            # Kill other BrowserStack Local instances running with this key
            args["force"] = "true"
        if self.local_identifier:
            args["localIdentifier"] = self.local_identifier
        if self.binary_path:
            args["binarypath"] = self.binary_path
        return args

    async def start(self) -> None:
        """
        Start the daemon and wait until it is connected.

        Raises:
            TunnelError: The daemon failed to start.
        """
        logger.info("BrowserStack is enabled and the test endpoint is localhost, setting up BrowserStack Local...")
        try:
            await asyncio.to_thread(self._local.start, **self._start_args())
        except Exception as e:
            logger.error(f"Error starting BrowserStack Local: {e}")
            raise TunnelError(
                f"Error starting BrowserStack Local: {e}",
                method="LocalTunnel.start",
            ) from e
        logger.info("BrowserStack Local started")

    def is_running(self) -> bool:
        return bool(self._local.isRunning())

    async def stop(self) -> None:
        """Stop the daemon if it is running. Errors are logged, not raised."""
        if not self.is_running():
            return
        try:
            await asyncio.to_thread(self._local.stop)
            logger.info("BrowserStack Local stopped")
        except Exception as e:
            logger.error(f"Error stopping BrowserStack Local: {e}")


class TunnelManager:
    """Owns the process-wide tunnel and starts it at most once."""

    def __init__(self, tunnel_factory=LocalTunnel):
        self._tunnel_factory = tunnel_factory
        self._tunnel: Optional[LocalTunnel] = None
        self._start_error: Optional[TunnelError] = None

    @property
    def tunnel(self) -> Optional[LocalTunnel]:
        return self._tunnel

    async def ensure_started(self, config: E2EConfig) -> Optional[LocalTunnel]:
        """
        Start the tunnel if the config needs one and it is not running yet.

        A failed start is remembered and raised again for every later suite,
        rather than retrying the daemon once per suite.
        """
        bs = config.browserstack
        if not bs.local_enabled:
            return None
        if self._start_error is not None:
            raise self._start_error
        if self._tunnel is None:
            tunnel = self._tunnel_factory(
                bs.key,
                local_identifier=bs.local_identifier,
                binary_path=bs.local_binary_path,
            )
            try:
                await tunnel.start()
            except TunnelError as e:
                self._start_error = e
                raise
            self._tunnel = tunnel
        return self._tunnel

    async def stop(self) -> None:
        if self._tunnel is not None:
            await self._tunnel.stop()
            self._tunnel = None
