"""
server_manager.py
=================
Runs the main server and the application server side by side in one
event loop.

Per server:
  NOT_STARTED → BINDING → RUNNING → TERMINATED (error or clean)

Both listen sockets are bound before anything is served, so a bind
failure on either port leaves neither port reachable. Once serving, the
first server to stop with an error (or without a shutdown having been
requested) takes its sibling down gracefully and run() raises ServerError.
A partial run is never a valid operating mode.
"""

import asyncio
import contextlib
import logging
import signal
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI

from simple_api.core.app_factory import create_application_app, create_main_app
from simple_api.core.config import Config
from simple_api.core.errors import ServerError

logger = logging.getLogger(__name__)

MAIN_SERVER = "main"
APP_SERVER = "application"

BACKLOG = 2048
STARTUP_POLL_INTERVAL = 0.02  # seconds


class ServerState(str, Enum):
    NOT_STARTED = "not_started"
    BINDING = "binding"
    RUNNING = "running"
    TERMINATED = "terminated"


class _UvicornServer(uvicorn.Server):
    """uvicorn.Server with its signal handling switched off; ServerManager owns signals."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


@dataclass
class ServerUnit:
    """One listener: its app, its port and where it is in its lifecycle."""

    name: str
    port: int
    app: FastAPI
    state: ServerState = ServerState.NOT_STARTED
    error: Optional[ServerError] = None
    sock: Optional[socket.socket] = None
    server: Optional[_UvicornServer] = None


def bind_socket(host: str, port: int, server_name: Optional[str] = None) -> socket.socket:
    """
    Bind and listen on host:port.

    Listening right away matters: on Linux two SO_REUSEADDR sockets may
    bind the same port as long as neither is listening yet.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = None
    try:
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(BACKLOG)
    except OSError as exc:
        if sock is not None:
            sock.close()
        label = f"{server_name} server" if server_name else "server"
        raise ServerError(
            f"{label} failed to bind {host}:{port}: {exc}",
            server=server_name,
            host=host,
            port=port,
        ) from exc
    return sock


class ServerManager:
    """
    Owns startup, running and joint failure of the two HTTP servers.

    Example:
        manager = ServerManager(load_config(), install_signal_handlers=True)
        asyncio.run(manager.run())  # returns after SIGINT/SIGTERM, raises ServerError on failure
    """

    def __init__(self, config: Config, install_signal_handlers: bool = False):
        self.config = config
        self.install_signal_handlers = install_signal_handlers
        self.units: List[ServerUnit] = [
            ServerUnit(MAIN_SERVER, config.main_port, create_main_app()),
            ServerUnit(APP_SERVER, config.app_port, create_application_app()),
        ]
        self._run_called = False
        self._shutdown_requested = False
        self._stopping = False
        self._errors: List[ServerError] = []
        self._running = asyncio.Event()
        self._stopped = asyncio.Event()

    # ─────────────────────────────
    # Public API
    # ─────────────────────────────

    @property
    def states(self) -> Dict[str, ServerState]:
        return {unit.name: unit.state for unit in self.units}

    @property
    def is_running(self) -> bool:
        return all(unit.state is ServerState.RUNNING for unit in self.units)

    def shutdown(self) -> None:
        """Ask both servers to stop gracefully. Safe to call more than once."""
        if not self._shutdown_requested:
            logger.info("Shutdown requested, stopping servers")
        self._shutdown_requested = True
        self._stop_servers()

    async def wait_until_running(self, timeout: Optional[float] = None) -> bool:
        """Wait until both servers are RUNNING; False if run() ended first or timeout hit."""
        waiters = {
            asyncio.ensure_future(self._running.wait()),
            asyncio.ensure_future(self._stopped.wait()),
        }
        try:
            await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
        return self.is_running

    async def run(self) -> None:
        """
        Bind both ports, serve until both servers have terminated.

        Returns normally only after shutdown() (directly or via a signal).

        Raises:
            ServerError: a bind failed, a server crashed or stopped on its own.
        """
        if self._run_called:
            raise RuntimeError("ServerManager.run() can only be called once")
        self._run_called = True

        logger.info(
            "Starting servers (bind_address=%s, main_port=%d, app_port=%d)",
            self.config.bind_address,
            self.config.main_port,
            self.config.app_port,
        )
        try:
            self._bind_all()
            if self._shutdown_requested:
                return
            await self._serve_all()
        finally:
            self._close_sockets()
            self._stopped.set()

        if self._errors:
            raise self._errors[0]
        logger.info("Both servers shut down gracefully")

    # ─────────────────────────────
    # Internals
    # ─────────────────────────────

    def _bind_all(self) -> None:
        for unit in self.units:
            unit.state = ServerState.BINDING
            try:
                unit.sock = bind_socket(self.config.bind_address, unit.port, unit.name)
            except ServerError as exc:
                unit.state = ServerState.TERMINATED
                unit.error = exc
                raise

    def _close_sockets(self) -> None:
        for unit in self.units:
            if unit.sock is not None:
                unit.sock.close()
            if unit.state is not ServerState.NOT_STARTED:
                unit.state = ServerState.TERMINATED

    def _stop_servers(self) -> None:
        self._stopping = True
        for unit in self.units:
            if unit.server is not None:
                unit.server.should_exit = True

    async def _serve_all(self) -> None:
        with self._signal_handlers():
            tasks = [
                asyncio.create_task(self._serve(unit), name=f"{unit.name}-server")
                for unit in self.units
            ]
            watcher = asyncio.create_task(self._watch_startup(), name="startup-watcher")
            try:
                # Whoever finishes first, for whatever reason, ends the run
                await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
                self._stop_servers()
                await asyncio.wait(tasks)
            finally:
                watcher.cancel()
                for task in tasks:
                    if not task.done():
                        task.cancel()

    async def _serve(self, unit: ServerUnit) -> None:
        uv_config = uvicorn.Config(
            unit.app,
            host=self.config.bind_address,
            port=unit.port,
            log_level=self.config.log_level,
            log_config=None,
            access_log=True,
            backlog=BACKLOG,
            timeout_graceful_shutdown=self.config.shutdown_timeout,
        )
        unit.server = _UvicornServer(uv_config)
        if self._stopping:
            unit.server.should_exit = True

        error: Optional[ServerError] = None
        try:
            await unit.server.serve(sockets=[unit.sock])
        except SystemExit as exc:
            # uvicorn calls sys.exit(1) when startup fails
            error = self._server_error(unit, f"failed to start (exit code {exc.code})")
        except Exception as exc:
            error = self._server_error(unit, f"crashed: {exc}")
            error.__cause__ = exc
        else:
            if not self._stopping:
                reason = "stopped unexpectedly" if unit.server.started else "failed to start"
                error = self._server_error(unit, reason)
        finally:
            for listener in getattr(unit.server, "servers", []):
                listener.close()
            unit.state = ServerState.TERMINATED

        if error is not None:
            unit.error = error
            self._errors.append(error)
            logger.error("%s", error)
        else:
            logger.info("%s server stopped", unit.name)

    def _server_error(self, unit: ServerUnit, reason: str) -> ServerError:
        return ServerError(
            f"{unit.name} server on {self.config.bind_address}:{unit.port} {reason}",
            server=unit.name,
            host=self.config.bind_address,
            port=unit.port,
        )

    async def _watch_startup(self) -> None:
        # uvicorn exposes no startup event, only the Server.started flag
        while not self.is_running:
            for unit in self.units:
                if (
                    unit.state is ServerState.BINDING
                    and unit.server is not None
                    and unit.server.started
                ):
                    unit.state = ServerState.RUNNING
                    logger.info(
                        "%s server listening on http://%s:%d",
                        unit.name.capitalize(),
                        self.config.bind_address,
                        unit.port,
                    )
            if self.is_running:
                break
            await asyncio.sleep(STARTUP_POLL_INTERVAL)
        self._running.set()
        logger.info("Both servers are running")

    @contextlib.contextmanager
    def _signal_handlers(self):
        installed = []
        if self.install_signal_handlers:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, self._handle_signal, sig)
                except (NotImplementedError, RuntimeError):
                    # Windows, or not on the main thread
                    logger.debug("Cannot install handler for %s", sig.name)
                else:
                    installed.append(sig)
        try:
            yield
        finally:
            loop = asyncio.get_running_loop()
            for sig in installed:
                loop.remove_signal_handler(sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s", sig.name)
        self.shutdown()
