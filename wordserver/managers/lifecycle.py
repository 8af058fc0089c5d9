from __future__ import annotations
import asyncio
import contextlib
import logging
import signal
import time
from typing import Awaitable, Callable, Optional

import uvicorn

from ..schemas import LifecycleState

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 5.0  # seconds
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

class ShutdownTimeout(Exception):
    """In-flight requests did not finish before the drain deadline."""

class Server(uvicorn.Server):
    """uvicorn server that leaves signal handling to the LifecycleController."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield

class LifecycleController:
    """Drives serving -> draining -> stopped for a single server.

    ``server`` is anything with an async ``serve()`` and writable
    ``should_exit``/``force_exit`` flags (a uvicorn.Server in production).
    ``sleep`` is the deadline timer; tests swap it out instead of waiting.
    """

    def __init__(
        self,
        server,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        install_signals: bool = True,
    ):
        self.server = server
        self.shutdown_timeout = shutdown_timeout
        self.state: LifecycleState = 'starting'
        self._sleep = sleep
        self._install_signals = install_signals
        self._stop: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def request_shutdown(self) -> None:
        if self.state != 'serving':
            logger.info("Shutdown already in progress (%s)", self.state)
            return
        logger.info("Shutdown requested, draining connections")
        self.state = 'draining'
        if self._stop is not None:
            self._stop.set()

    async def run(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        if self._install_signals:
            self._add_signal_handlers()
        serve_task = asyncio.ensure_future(self.server.serve())
        stop_task = asyncio.ensure_future(self._stop.wait())
        self.state = 'serving'
        try:
            done, _ = await asyncio.wait({serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            if serve_task in done:
                # the server stopped on its own, e.g. the listener failed to bind
                stop_task.cancel()
                self.state = 'stopped'
                serve_task.result()
                return
            await self._drain(serve_task)
        finally:
            if self._install_signals:
                self._remove_signal_handlers()

    async def _drain(self, serve_task: asyncio.Future) -> None:
        started = time.monotonic()
        self.server.should_exit = True
        deadline = asyncio.ensure_future(self._sleep(self.shutdown_timeout))
        done, _ = await asyncio.wait({serve_task, deadline}, return_when=asyncio.FIRST_COMPLETED)
        if serve_task not in done:
            self.server.force_exit = True
            self.state = 'stopped'
            serve_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await serve_task
            raise ShutdownTimeout(
                f"connections still open after {self.shutdown_timeout:.1f}s"
            )
        deadline.cancel()
        self.state = 'stopped'
        serve_task.result()
        logger.info("Drained in %.2fs", time.monotonic() - started)

    def _add_signal_handlers(self) -> None:
        for sig in SHUTDOWN_SIGNALS:
            try:
                self._loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                signal.signal(sig, lambda *_: self._loop.call_soon_threadsafe(self.request_shutdown))

    def _remove_signal_handlers(self) -> None:
        for sig in SHUTDOWN_SIGNALS:
            try:
                self._loop.remove_signal_handler(sig)
            except NotImplementedError:
                signal.signal(sig, signal.SIG_DFL)
