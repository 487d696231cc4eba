"""Classify document inputs and read their bytes exactly once."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import re
from typing import Any, Callable, Union

import requests

from tikadoc.extraction.errors import InvalidInputError, MissingFileError, SourceReadError


# scheme ":" rest, with no whitespace anywhere (RFC 3986 absolute URI shape)
_URI_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:\S+$")


@dataclass(frozen=True, slots=True)
class PathSource:
    path: Path

    def describe(self) -> str:
        return str(self.path)


@dataclass(frozen=True, slots=True)
class UriSource:
    uri: str

    def describe(self) -> str:
        return self.uri


@dataclass(frozen=True, slots=True)
class StreamSource:
    stream: Any

    def describe(self) -> str:
        return str(getattr(self.stream, "name", None) or type(self.stream).__name__)


Source = Union[PathSource, UriSource, StreamSource]
HttpGet = Callable[..., requests.Response]


def is_uri(value: str) -> bool:
    return bool(_URI_PATTERN.match(value))


def resolve_source(value: Any) -> Source:
    """Return the single source kind described by *value*.

    Strings and path-like objects naming an existing file become a
    ``PathSource``; other strings shaped like an absolute URI become a
    ``UriSource``; objects with a ``read`` method become a ``StreamSource``.
    """

    if isinstance(value, (str, os.PathLike)):
        raw = os.fspath(value)
        if not raw:
            raise InvalidInputError("can't read from an empty path or URI")
        if Path(raw).is_file():
            return PathSource(Path(raw))
        if isinstance(value, str) and is_uri(raw):
            return UriSource(raw)
        raise MissingFileError(raw)

    if callable(getattr(value, "read", None)):
        return StreamSource(value)

    raise InvalidInputError(f"can't read from {type(value).__name__}")


def read_source(
    source: Source,
    *,
    http_get: HttpGet = requests.get,
    timeout: float | None = None,
) -> bytes:
    """Materialize the full content of *source* as bytes."""

    if isinstance(source, PathSource):
        try:
            return source.path.read_bytes()
        except OSError as exc:
            raise SourceReadError(source.describe(), f"Failed to read source file: {exc}") from exc

    if isinstance(source, UriSource):
        try:
            response = http_get(source.uri, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SourceReadError(source.describe(), f"Failed to fetch document: {exc}") from exc
        return response.content

    try:
        payload = source.stream.read()
    except OSError as exc:
        raise SourceReadError(source.describe(), f"Failed to read stream: {exc}") from exc
    if payload is None:
        return b""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)
