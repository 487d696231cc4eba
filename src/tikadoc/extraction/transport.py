"""Byte transports to the engine: per-call subprocess or persistent socket."""

from __future__ import annotations

import logging
import socket
import subprocess
from typing import Callable, Sequence

from tikadoc.extraction.errors import EngineError


logger = logging.getLogger(__name__)

_STDERR_TAIL_CHARS = 800

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]
Connector = Callable[..., socket.socket]


def run_transient(
    command: Sequence[str],
    data: bytes,
    *,
    runner: Runner = subprocess.run,
) -> bytes:
    """Spawn *command*, pipe *data* to stdin and return everything written to stdout."""

    logger.debug("Spawning engine: %s", " ".join(command))
    try:
        completed = runner(list(command), input=data, capture_output=True, check=False)
    except OSError as exc:
        raise EngineError(f"Failed to spawn engine {command[0]!r}: {exc}") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
        detail = stderr[-_STDERR_TAIL_CHARS:] or "no stderr output"
        raise EngineError(f"Engine exited abnormally: {detail}", returncode=completed.returncode)

    return completed.stdout or b""


def run_persistent(
    port: int,
    data: bytes,
    *,
    chunk_size: int,
    host: str = "localhost",
    connect: Connector = socket.create_connection,
) -> bytes:
    """Stream *data* to a listening engine, half-close, then read the full reply."""

    logger.debug("Connecting to engine server at %s:%s", host, port)
    try:
        with connect((host, port)) as conn:
            view = memoryview(data)
            for offset in range(0, len(view), chunk_size):
                conn.sendall(view[offset : offset + chunk_size])
            conn.shutdown(socket.SHUT_WR)

            parts: list[bytes] = []
            while True:
                chunk = conn.recv(chunk_size)
                if not chunk:
                    break
                parts.append(chunk)
    except OSError as exc:
        raise EngineError(f"Engine server connection to {host}:{port} failed: {exc}") from exc

    return b"".join(parts)
