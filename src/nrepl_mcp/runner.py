"""BridgeServer - wires settings, session, evaluator and dispatcher to uvicorn."""

from __future__ import annotations

import logging
import socket

import anyio
import uvicorn
from anyio.abc import TaskGroup, TaskStatus

from nrepl_mcp.evaluator.nrepl import NReplEvaluator
from nrepl_mcp.server import Dispatcher
from nrepl_mcp.session import BridgeSession
from nrepl_mcp.settings import LOOPBACK_HOST, BridgeSettings
from nrepl_mcp.transport.starlette import create_starlette_app

logger = logging.getLogger(__name__)


class BridgeServer:
    """The running bridge: one session, one nREPL connection, one HTTP listener.

    Usage:
        server = BridgeServer(BridgeSettings(nrepl_port=7888))
        await server.run()  # until cancelled

    ``run`` owns the task group the HTTP server lives in, so ``restart`` (and
    ``start``/``stop``) only work while ``run`` is active.
    """

    def __init__(self, settings: BridgeSettings, evaluator: NReplEvaluator | None = None) -> None:
        self.settings = settings
        self.session = BridgeSession(default_namespace=settings.default_namespace)
        if evaluator is None:
            evaluator = NReplEvaluator(
                settings.nrepl_host,
                settings.resolve_nrepl_port(),
                connect_timeout=settings.connect_timeout,
            )
        self.evaluator = evaluator
        self.dispatcher = Dispatcher(self.session, evaluator)
        self.app = create_starlette_app(self.dispatcher)
        self.port: int | None = None
        self._task_group: TaskGroup | None = None
        self._server: uvicorn.Server | None = None
        self._stopped: anyio.Event | None = None
        self._stopping = False
        self._socket: socket.socket | None = None
        self._port_file_written = False

    @property
    def running(self) -> bool:
        return self._server is not None

    async def run(self, *, task_status: TaskStatus[int] = anyio.TASK_STATUS_IGNORED) -> None:
        """Start, serve until cancelled or signalled, then stop.

        Raises:
            EvaluatorError: if nREPL cannot be reached
            OSError: if the HTTP port cannot be bound
        """
        # Connect and bind outside the task group so failures are not wrapped in an ExceptionGroup.
        if not self.evaluator.connected:
            await self.evaluator.connect()
        try:
            self._socket = self._bind()
        except OSError:
            await self.evaluator.aclose()
            raise
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            try:
                port = await self.start()
                task_status.started(port)
                await anyio.sleep_forever()
            finally:
                with anyio.CancelScope(shield=True):
                    await self.stop()
                self._task_group = None

    async def start(self) -> int:
        """Connect to nREPL, bind the HTTP socket and publish the port. Returns the bound port."""
        if self._task_group is None:
            raise RuntimeError("BridgeServer.start() must be called from within run()")
        if self._server is not None:
            raise RuntimeError("BridgeServer is already running")

        if not self.evaluator.connected:
            await self.evaluator.connect()

        sock, self._socket = self._socket or self._bind(), None
        self.port = sock.getsockname()[1]
        config = uvicorn.Config(
            self.app,
            host=LOOPBACK_HOST,
            port=self.port,
            log_level=self.settings.log_level.lower(),
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._stopped = anyio.Event()
        self._stopping = False
        self._task_group.start_soon(self._serve_http, self._server, sock, self._stopped)

        while not self._server.started and not self._stopped.is_set():
            await anyio.sleep(0.01)
        if self._stopped.is_set():
            raise RuntimeError(f"HTTP server on {LOOPBACK_HOST}:{self.port} failed to start")

        self._write_port_file(self.port)
        logger.info("MCP bridge listening on http://%s:%d", LOOPBACK_HOST, self.port)
        return self.port

    async def stop(self) -> None:
        """Shut the HTTP listener down and release the session, port file and nREPL connection."""
        self._stopping = True
        if self._server is not None:
            self._server.should_exit = True
            if self._stopped is not None:
                await self._stopped.wait()
            self._server = None
            logger.info("MCP bridge stopped")
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self.session.reset()
        self._remove_port_file()
        if self.evaluator.connected:
            await self.evaluator.aclose()
        self.port = None

    async def restart(self) -> int:
        await self.stop()
        return await self.start()

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((LOOPBACK_HOST, self.settings.port))
        except OSError:
            sock.close()
            raise
        return sock

    async def _serve_http(self, server: uvicorn.Server, sock: socket.socket, stopped: anyio.Event) -> None:
        try:
            # Only stop() ends the server, so in-flight requests are drained on shutdown.
            with anyio.CancelScope(shield=True):
                await server.serve(sockets=[sock])
        finally:
            sock.close()
            stopped.set()
        # uvicorn exits on its own after SIGINT/SIGTERM; take the bridge down with it.
        if not self._stopping and self._task_group is not None:
            self._task_group.cancel_scope.cancel()

    def _write_port_file(self, port: int) -> None:
        path = self.settings.port_file_path
        path.write_text(str(port))
        self._port_file_written = True
        logger.info("Wrote port %d to %s", port, path)

    def _remove_port_file(self) -> None:
        # Only the file this instance wrote; another bridge may own an existing one.
        if not self._port_file_written:
            return
        self._port_file_written = False
        path = self.settings.port_file_path
        if path.exists():
            path.unlink()
            logger.info("Removed %s", path)
