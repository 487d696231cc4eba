"""Process-wide default client and convenience wrappers around it."""

from __future__ import annotations

from dataclasses import replace
import threading
from typing import Any

from tikadoc.extraction.client import ExtractionClient
from tikadoc.extraction.config import EngineSettings
from tikadoc.extraction.models import ExtractionOptions, Metadata, MimeType, OutputKind
from tikadoc.extraction.server import ServerHandle


_default_lock = threading.Lock()
_default_client: ExtractionClient | None = None


def default_client() -> ExtractionClient:
    """Return the shared client, building it from the environment on first use."""

    global _default_client

    with _default_lock:
        if _default_client is None:
            _default_client = ExtractionClient(EngineSettings.from_env())
        return _default_client


def configure(**changes: Any) -> EngineSettings:
    """Replace settings fields on the shared client, e.g. ``configure(mime_library="filetype")``.

    A running engine server of the previous client is stopped.
    """

    global _default_client

    current = default_client()
    settings = replace(current.settings, **changes)
    with _default_lock:
        current.server.stop()
        _default_client = ExtractionClient(settings)
    return settings


def read(
    kind: OutputKind | str,
    data: bytes,
    *,
    include_ocr: bool = False,
) -> str | Metadata | MimeType | None:
    """Read text, HTML, metadata or the mimetype from a byte buffer.

        data = Path("sample.docx").read_bytes()
        text = read("text", data)
        metadata = read("metadata", data)
    """

    return default_client().read(kind, data, ExtractionOptions(include_ocr=include_ocr))


def start_server(
    kind: OutputKind | str,
    port: int | None = None,
    *,
    include_ocr: bool = False,
) -> ServerHandle:
    return default_client().server.start(kind, port, include_ocr=include_ocr)


def stop_server() -> None:
    default_client().server.stop()
