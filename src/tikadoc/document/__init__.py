"""Document handles over paths, URIs and streams."""

from .document import Document
from .source import PathSource, Source, StreamSource, UriSource, read_source, resolve_source

__all__ = [
    "Document",
    "PathSource",
    "Source",
    "StreamSource",
    "UriSource",
    "read_source",
    "resolve_source",
]
