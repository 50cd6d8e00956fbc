"""
Process lifecycle for catalog services.

A service process moves through ``starting -> running -> draining -> stopped``
exactly once. Process-wide handles (the cache connection and the HTTP
listener) are opened while starting and torn down in the opposite order on a
termination request: the listener stops accepting connections and drains
in-flight requests before any resource it depends on is closed.
"""

import asyncio
import signal
import socket
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterable, List, Optional, Protocol

import uvicorn

from shared.errors import StartupError
from shared.logging import get_logger


class LifecycleState(str, Enum):
    """Lifecycle states of a service process."""
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


_TRANSITIONS = {
    LifecycleState.STARTING: {LifecycleState.RUNNING, LifecycleState.STOPPED},
    LifecycleState.RUNNING: {LifecycleState.DRAINING},
    LifecycleState.DRAINING: {LifecycleState.STOPPED},
    LifecycleState.STOPPED: set(),
}


class ManagedResource(Protocol):
    """Anything with an async start/stop pair owned by the lifecycle."""

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


class Listener(ManagedResource, Protocol):
    """A managed resource that can also report when it stops serving on its own."""

    async def wait_closed(self) -> None: ...


class _ManagedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the lifecycle manager."""

    def install_signal_handlers(self) -> None:
        return None

    @contextmanager
    def capture_signals(self):
        yield


class HttpListener:
    """Network listener serving an ASGI app on a socket bound at start."""

    def __init__(
        self,
        app: Any,
        host: str = "0.0.0.0",
        port: int = 2000,
        drain_timeout: Optional[float] = None,
        poll_interval: float = 0.05,
    ):
        self.app = app
        self.host = host
        self.port = port
        self.drain_timeout = drain_timeout
        self.poll_interval = poll_interval
        self.logger = get_logger("lifecycle.listener")

        self.config = uvicorn.Config(
            app,
            host=host,
            port=port,
            lifespan="off",
            log_config=None,
            access_log=False,
            timeout_graceful_shutdown=drain_timeout,
        )
        self._server: Optional[_ManagedServer] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_serving(self) -> bool:
        return bool(self._server and self._server.started and not self._server.should_exit)

    async def start(self) -> None:
        """Bind the socket and wait until the server accepts connections."""
        try:
            sock = socket.create_server((self.host, self.port))
        except OSError as e:
            self.logger.error("Failed to bind listener", host=self.host, port=self.port, error=str(e))
            raise StartupError("listener", str(e), {"host": self.host, "port": self.port}) from e

        # Port 0 asks the OS for a free port
        self.port = sock.getsockname()[1]

        self._server = _ManagedServer(self.config)
        self._task = asyncio.create_task(self._server.serve(sockets=[sock]))

        while not self._server.started:
            if self._task.done():
                sock.close()
                error = self._task.exception()
                raise StartupError(
                    "listener",
                    str(error) if error else "server exited before accepting connections",
                    {"host": self.host, "port": self.port},
                )
            await asyncio.sleep(self.poll_interval)

        self.logger.info("Server is running", host=self.host, port=self.port)

    async def stop(self) -> None:
        """Stop accepting connections and wait for in-flight requests."""
        if self._server is None or self._task is None:
            return

        self._server.should_exit = True
        try:
            await self._task
        except Exception as e:
            self.logger.error("Server exited with error", error=str(e))
        self._server = None
        self._task = None
        self.logger.info("Server closed")

    async def wait_closed(self) -> None:
        """Return once the server task has finished, whatever the reason."""
        if self._task is not None:
            await asyncio.wait([self._task])


class LifecycleManager:
    """Owns startup and ordered teardown of a service's process-wide handles."""

    def __init__(self, listener: Listener, resources: Iterable[ManagedResource] = (), logger=None):
        self.listener = listener
        self.resources: List[ManagedResource] = list(resources)
        self.logger = logger or get_logger("lifecycle.manager")
        self.state = LifecycleState.STARTING

        self._started: List[ManagedResource] = []
        self._shutdown_requested = asyncio.Event()
        self._shutdown_lock = asyncio.Lock()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested.is_set()

    def _transition(self, new_state: LifecycleState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid lifecycle transition: {self.state.value} -> {new_state.value}"
            )
        self.logger.info("Lifecycle state changed", from_state=self.state.value, to_state=new_state.value)
        self.state = new_state

    async def start(self) -> None:
        """Open resources in order, then bind the listener."""
        if self.state is not LifecycleState.STARTING or self._started:
            raise RuntimeError(f"Cannot start from state {self.state.value}")

        try:
            for resource in self.resources:
                await resource.start()
                self._started.append(resource)
            await self.listener.start()
        except Exception as e:
            self.logger.error("Startup failed", error=str(e))
            await self._stop_resources()
            self._transition(LifecycleState.STOPPED)
            if isinstance(e, StartupError):
                raise
            raise StartupError("lifecycle", str(e)) from e

        self._transition(LifecycleState.RUNNING)

    def request_shutdown(self, signal_name: Optional[str] = None) -> None:
        """Record an external termination request."""
        if self._shutdown_requested.is_set():
            return
        self.logger.info(
            "Shutdown signal received: closing server and cache client",
            signal=signal_name,
        )
        self._shutdown_requested.set()

    async def wait_for_shutdown(self) -> None:
        await self._shutdown_requested.wait()

    async def shutdown(self) -> None:
        """Drain the listener, then close resources in reverse order."""
        async with self._shutdown_lock:
            if self.state is LifecycleState.STOPPED:
                return

            if self.state is LifecycleState.STARTING:
                await self._stop_resources()
                self._transition(LifecycleState.STOPPED)
                return

            self._transition(LifecycleState.DRAINING)
            await self.listener.stop()
            await self._stop_resources()
            self._transition(LifecycleState.STOPPED)

    async def _stop_resources(self) -> None:
        while self._started:
            resource = self._started.pop()
            try:
                await resource.stop()
            except Exception as e:
                # Keep closing the remaining handles; the process is going down anyway
                self.logger.error(
                    "Failed to stop resource",
                    resource=type(resource).__name__,
                    error=str(e),
                )

    async def run(self) -> int:
        """Start, serve until SIGINT/SIGTERM or the listener exits, then shut down.

        Returns 0 after a requested shutdown and 1 when the listener died first.
        """
        await self.start()

        loop = asyncio.get_running_loop()
        signals = (signal.SIGINT, signal.SIGTERM)
        for sig in signals:
            loop.add_signal_handler(sig, self.request_shutdown, sig.name)

        try:
            exit_code = await self._serve_until_stopped()
        finally:
            for sig in signals:
                loop.remove_signal_handler(sig)
            await self.shutdown()

        return exit_code

    async def _serve_until_stopped(self) -> int:
        waiters = [
            asyncio.ensure_future(self.wait_for_shutdown()),
            asyncio.ensure_future(self.listener.wait_closed()),
        ]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

        if self.shutdown_requested:
            return 0

        self.logger.error("Listener stopped unexpectedly; shutting down")
        return 1
