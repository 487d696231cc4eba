"""Engine-backed extraction: request protocol, transports and server lifecycle."""

from .api import configure, default_client, read, start_server, stop_server
from .client import ExtractionClient
from .config import EngineSettings
from .errors import (
    DecodeError,
    EngineError,
    InvalidInputError,
    MissingFileError,
    SourceReadError,
    TikaDocError,
    TimeParseError,
)
from .models import ExtractionOptions, Metadata, MimeType, OutputKind
from .server import EngineServer, ServerHandle

__all__ = [
    "DecodeError",
    "EngineError",
    "EngineServer",
    "EngineSettings",
    "ExtractionClient",
    "ExtractionOptions",
    "InvalidInputError",
    "Metadata",
    "MimeType",
    "MissingFileError",
    "OutputKind",
    "ServerHandle",
    "SourceReadError",
    "TikaDocError",
    "TimeParseError",
    "configure",
    "default_client",
    "read",
    "start_server",
    "stop_server",
]
