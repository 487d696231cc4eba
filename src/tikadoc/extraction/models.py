"""Value types exchanged between documents, the client and the engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


Metadata = dict[str, Union[str, list[str]]]


class OutputKind(Enum):
    TEXT = "text"
    HTML = "html"
    METADATA = "metadata"
    MIMETYPE = "mimetype"

    @classmethod
    def coerce(cls, value: "OutputKind | str") -> "OutputKind":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    """Per-call switches forwarded to the engine invocation."""

    include_ocr: bool = False


@dataclass(frozen=True, slots=True)
class MimeType:
    """Registry entry resolved from a content-type string."""

    content_type: str
    extensions: tuple[str, ...] = ()

    @property
    def extension(self) -> str | None:
        return self.extensions[0] if self.extensions else None
