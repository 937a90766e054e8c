"""Application runner for decom-status."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Final, TextIO

from decom_status.core.admin_client import AdminClient
from decom_status.core.alias_store import AliasConfig
from decom_status.core.config import MainConfig
from decom_status.core.report import render_report
from decom_status.core.watcher import (
    WATCH_INTERVAL_SECONDS,
    local_now,
    poll_once,
    watch_decommission,
)
from decom_status.types.protocols import SnapshotSource

__all__ = ["ApplicationRunner"]

# ANSI: cursor home, clear screen
CLEAR_SCREEN: Final[str] = "\033[H\033[2J"

type SourceFactory = Callable[[AliasConfig, MainConfig], AbstractAsyncContextManager[SnapshotSource]]


def _default_source_factory(alias: AliasConfig, config: MainConfig) -> AdminClient:
    return AdminClient(
        alias,
        timeout_seconds=config.connection.timeout_seconds,
        verify_tls=config.connection.verify_tls,
        region=config.connection.region,
    )


class ApplicationRunner:
    """Run one status query, or poll repeatedly in watch mode."""

    def __init__(
        self,
        *,
        alias: AliasConfig,
        config: MainConfig,
        watch: bool = False,
        interval: float = WATCH_INTERVAL_SECONDS,
        out: TextIO | None = None,
        source_factory: SourceFactory = _default_source_factory,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        """Initialize the application runner.

        Args:
            alias: Connection details of the cluster alias
            config: Validated application settings
            watch: Poll repeatedly and redraw the screen instead of exiting
            interval: Seconds between polls in watch mode
            out: Stream the report is written to (default: stdout)
            source_factory: Builds the admin client for the alias
            clock: Source of the ``now`` reference for each report
        """
        self.alias: AliasConfig = alias
        self.config: MainConfig = config
        self.watch: bool = watch
        self.interval: float = interval
        self._out: TextIO = out if out is not None else sys.stdout
        self._source_factory: SourceFactory = source_factory
        self._clock: Callable[[], datetime] = clock
        self._shutdown_event: asyncio.Event = asyncio.Event()
        self._logger: logging.Logger = logging.getLogger(__name__)

    def request_shutdown(self) -> None:
        """Stop scheduling further polls."""
        if self._shutdown_event.is_set():
            return
        self._logger.info("Shutdown requested")
        self._shutdown_event.set()

    async def run(self) -> None:
        """Run the application until the report is printed or shutdown.

        Raises:
            AdminAPIError: If the one-shot status query fails
        """
        async with self._source_factory(self.alias, self.config) as client:
            if self.watch:
                await self._run_watch(client)
            else:
                report = await poll_once(client, clock=self._clock)
                _ = self._out.write(render_report(report))
                self._out.flush()

    async def _run_watch(self, source: SnapshotSource) -> None:
        loop = asyncio.get_running_loop()
        signals = (signal.SIGINT, signal.SIGTERM)
        for sig in signals:
            loop.add_signal_handler(sig, self.request_shutdown)

        try:
            async for result in watch_decommission(
                source,
                interval=self.interval,
                clock=self._clock,
                shutdown_event=self._shutdown_event,
            ):
                if self._out.isatty():
                    _ = self._out.write(CLEAR_SCREEN)
                if result.report is not None:
                    _ = self._out.write(render_report(result.report))
                else:
                    _ = self._out.write(f"Error: {result.error}\n")
                self._out.flush()
        finally:
            for sig in signals:
                _ = loop.remove_signal_handler(sig)
