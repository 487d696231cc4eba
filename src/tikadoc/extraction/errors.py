"""Error taxonomy shared by document resolution and engine extraction."""

from __future__ import annotations

import errno
from dataclasses import dataclass


class TikaDocError(Exception):
    """Base class for every failure raised by tikadoc."""


class InvalidInputError(TikaDocError, TypeError):
    """Document input is neither a path, a URI nor a readable stream."""


class MissingFileError(TikaDocError, FileNotFoundError):
    """Path-like input does not reference an existing file."""

    def __init__(self, path: str) -> None:
        super().__init__(errno.ENOENT, "missing file or invalid URI", path)


@dataclass(slots=True)
class SourceReadError(TikaDocError):
    """Reading the document bytes from its source failed."""

    source: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (source={self.source})"


@dataclass(slots=True)
class EngineError(TikaDocError):
    """The extraction engine could not be spawned, reached or completed."""

    message: str
    returncode: int | None = None

    def __str__(self) -> str:
        if self.returncode is None:
            return self.message
        return f"{self.message} (returncode={self.returncode})"


@dataclass(slots=True)
class DecodeError(TikaDocError, ValueError):
    """An engine reply could not be decoded for the requested output kind."""

    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (kind={self.kind})"


@dataclass(slots=True)
class TimeParseError(TikaDocError, ValueError):
    """A creation-date metadata value is present but not a timestamp."""

    key: str
    value: str

    def __str__(self) -> str:
        return f"Unparsable timestamp {self.value!r} in metadata field {self.key!r}"
