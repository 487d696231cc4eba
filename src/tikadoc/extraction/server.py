"""Lifecycle of a long-running engine process listening on a local port."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import signal
import subprocess
import threading
import time
from typing import Callable

from tikadoc.extraction.command import build_server_command
from tikadoc.extraction.config import EngineSettings
from tikadoc.extraction.errors import EngineError
from tikadoc.extraction.models import OutputKind


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServerHandle:
    """Identity of the running engine server; replaced or cleared as a whole."""

    pid: int
    port: int
    kind: OutputKind
    include_ocr: bool = False


class EngineServer:
    """Session object owning at most one engine server process.

    The engine gives no readiness signal, so ``start`` waits a fixed settle
    delay before returning.  ``start`` and ``stop`` are serialized; starting
    an already running session stops the previous process first.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._popen = popen
        self._sleep = sleep
        self._lock = threading.Lock()
        self._process: subprocess.Popen | None = None
        self._handle: ServerHandle | None = None

    @property
    def handle(self) -> ServerHandle | None:
        return self._handle

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(
        self,
        kind: OutputKind | str,
        port: int | None = None,
        *,
        include_ocr: bool = False,
    ) -> ServerHandle:
        output_kind = OutputKind.coerce(kind)
        server_port = port or self._settings.server_port

        with self._lock:
            if self._handle is not None:
                logger.warning(
                    "Engine server already running (pid=%s, port=%s); stopping it before restart",
                    self._handle.pid,
                    self._handle.port,
                )
                self._stop_locked()

            command = build_server_command(self._settings, output_kind, server_port, include_ocr=include_ocr)
            logger.info("Starting engine server on port %s for %s output", server_port, output_kind.value)
            try:
                process = self._popen(command, stdin=subprocess.DEVNULL)
            except OSError as exc:
                raise EngineError(f"Failed to spawn engine server {command[0]!r}: {exc}") from exc

            self._sleep(self._settings.server_settle_seconds)

            returncode = process.poll()
            if returncode is not None:
                raise EngineError("Engine server exited during start-up", returncode=returncode)

            self._process = process
            self._handle = ServerHandle(
                pid=process.pid,
                port=server_port,
                kind=output_kind,
                include_ocr=include_ocr,
            )
            return self._handle

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        if self._handle is None:
            return

        process = self._process
        handle = self._handle
        self._process = None
        self._handle = None

        logger.info("Stopping engine server (pid=%s, port=%s)", handle.pid, handle.port)
        if process is not None:
            try:
                process.send_signal(signal.SIGINT)
            except ProcessLookupError:
                logger.debug("Engine server pid=%s already exited", handle.pid)

    def __enter__(self) -> "EngineServer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
