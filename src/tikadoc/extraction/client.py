"""Extraction requests against the engine and decoding of its replies."""

from __future__ import annotations

import json
import logging
import socket
import subprocess
from typing import Any

from charset_normalizer import from_bytes

from tikadoc.extraction.command import build_engine_command, switches_for
from tikadoc.extraction.config import EngineSettings
from tikadoc.extraction.errors import DecodeError, EngineError
from tikadoc.extraction.mime_registry import MimeRegistry, build_mime_registry
from tikadoc.extraction.models import ExtractionOptions, Metadata, MimeType, OutputKind
from tikadoc.extraction.server import EngineServer
from tikadoc.extraction.transport import Connector, Runner, run_persistent, run_transient


logger = logging.getLogger(__name__)

CONTENT_TYPE_KEY = "Content-Type"


def decode_text(raw: bytes) -> str:
    """Decode an engine text reply, detecting the charset when it is not UTF-8."""

    if not raw:
        return ""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    best = from_bytes(raw).best()
    if best and best.encoding:
        return raw.decode(best.encoding, errors="replace")
    return raw.decode("utf-8", errors="replace")


def decode_metadata(raw: bytes, *, kind: OutputKind = OutputKind.METADATA) -> Metadata:
    try:
        parsed = json.loads(decode_text(raw))
    except json.JSONDecodeError as exc:
        raise DecodeError(kind.value, f"Engine reply is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise DecodeError(kind.value, f"Engine reply is JSON {type(parsed).__name__}, expected an object")
    return parsed


def first_value(value: Any) -> Any:
    """Return the first element of a multi-valued metadata field."""

    if isinstance(value, list):
        return value[0] if value else None
    return value


class ExtractionClient:
    """Send document bytes to the engine and decode the reply per output kind.

    When the attached ``EngineServer`` is running, requests go over its
    socket; otherwise each request spawns a one-shot engine process.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        server: EngineServer | None = None,
        mime_registry: MimeRegistry | None = None,
        runner: Runner = subprocess.run,
        connect: Connector = socket.create_connection,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._server = server if server is not None else EngineServer(self._settings)
        self._mime_registry = mime_registry or build_mime_registry(self._settings.mime_library)
        self._runner = runner
        self._connect = connect

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def server(self) -> EngineServer:
        return self._server

    @property
    def mime_registry(self) -> MimeRegistry:
        return self._mime_registry

    def engine_command(self, kind: OutputKind | str, *, include_ocr: bool = False) -> list[str]:
        return build_engine_command(self._settings, kind, include_ocr=include_ocr)

    def read(
        self,
        kind: OutputKind | str,
        data: bytes,
        options: ExtractionOptions | None = None,
    ) -> str | Metadata | MimeType | None:
        """Extract *kind* from *data* and return the decoded result."""

        output_kind = OutputKind.coerce(kind)
        raw = self.read_raw(output_kind, data, options)

        if output_kind in (OutputKind.TEXT, OutputKind.HTML):
            return decode_text(raw)

        metadata = decode_metadata(raw, kind=output_kind)
        if output_kind is OutputKind.METADATA:
            return metadata

        content_type = first_value(metadata.get(CONTENT_TYPE_KEY))
        if not content_type:
            raise DecodeError(output_kind.value, f"Engine reply has no {CONTENT_TYPE_KEY} field")
        return self.mimetype(str(content_type))

    def read_raw(
        self,
        kind: OutputKind | str,
        data: bytes,
        options: ExtractionOptions | None = None,
    ) -> bytes:
        output_kind = OutputKind.coerce(kind)
        include_ocr = (options or ExtractionOptions()).include_ocr

        handle = self._server.handle
        if handle is None:
            command = self.engine_command(output_kind, include_ocr=include_ocr)
            return run_transient(command, data, runner=self._runner)

        if switches_for(handle.kind) != switches_for(output_kind):
            raise EngineError(
                f"Engine server on port {handle.port} was started for {handle.kind.value} output, "
                f"cannot serve {output_kind.value}"
            )
        if handle.include_ocr != include_ocr:
            profile = "with" if handle.include_ocr else "without"
            raise EngineError(f"Engine server on port {handle.port} was started {profile} OCR")

        logger.debug("Using engine server on port %s for %s", handle.port, output_kind.value)
        return run_persistent(
            handle.port,
            data,
            chunk_size=self._settings.socket_chunk_size,
            connect=self._connect,
        )

    def mimetype(self, content_type: str) -> MimeType | None:
        return self._mime_registry.lookup(content_type)
