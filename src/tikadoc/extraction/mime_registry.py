"""Content-type to file-extension lookups behind one registry contract.

Two backends are available and picked by ``EngineSettings.mime_library``:

``mimetypes``
    The standard library's built-in table plus the office formats the
    engine commonly reports.  Host ``mime.types`` files are not consulted.
    Default.
``filetype``
    The signature table shipped with the ``filetype`` package.  It knows
    fewer types but returns the same answers on every platform.
"""

from __future__ import annotations

import mimetypes
from typing import Protocol, runtime_checkable

import filetype

from tikadoc.extraction.models import MimeType


def normalize_content_type(content_type: str) -> str:
    """Drop parameters such as ``; charset=UTF-8`` and lowercase the type."""

    return content_type.split(";", 1)[0].strip().lower()


@runtime_checkable
class MimeRegistry(Protocol):
    name: str

    def lookup(self, content_type: str) -> MimeType | None:
        """Return the registry entry for *content_type*, or None when unknown."""


# Office and iWork formats the engine reports that the built-in table lacks.
_EXTRA_TYPES = (
    ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "docx"),
    ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
    ("application/vnd.openxmlformats-officedocument.presentationml.presentation", "pptx"),
    ("application/vnd.oasis.opendocument.text", "odt"),
    ("application/vnd.oasis.opendocument.spreadsheet", "ods"),
    ("application/vnd.oasis.opendocument.presentation", "odp"),
    ("application/vnd.oasis.opendocument.graphics", "odg"),
    ("application/vnd.apple.pages", "pages"),
    ("application/vnd.apple.numbers", "numbers"),
    ("application/vnd.apple.keynote", "key"),
    ("application/epub+zip", "epub"),
    ("application/rtf", "rtf"),
)


class StdlibMimeRegistry:
    name = "mimetypes"

    def __init__(self) -> None:
        # A private table holds only the built-in defaults, never the host's mime.types files.
        self._types = mimetypes.MimeTypes()
        for content_type, extension in _EXTRA_TYPES:
            self._types.add_type(content_type, f".{extension}")

    def lookup(self, content_type: str) -> MimeType | None:
        normalized = normalize_content_type(content_type)
        if not normalized:
            return None

        extensions: list[str] = []
        for suffix in self._types.guess_all_extensions(normalized, strict=False):
            extension = suffix.lstrip(".")
            if extension and extension not in extensions:
                extensions.append(extension)
        if not extensions:
            return None
        return MimeType(content_type=normalized, extensions=tuple(extensions))


class FiletypeMimeRegistry:
    name = "filetype"

    def lookup(self, content_type: str) -> MimeType | None:
        normalized = normalize_content_type(content_type)
        if not normalized:
            return None

        kind = filetype.get_type(mime=normalized)
        if kind is None:
            return None
        return MimeType(content_type=kind.mime, extensions=(kind.extension,))


_REGISTRIES: dict[str, type] = {
    StdlibMimeRegistry.name: StdlibMimeRegistry,
    FiletypeMimeRegistry.name: FiletypeMimeRegistry,
}


def build_mime_registry(name: str) -> MimeRegistry:
    """Instantiate the registry backend registered under *name*."""

    try:
        registry_cls = _REGISTRIES[name]
    except KeyError:
        supported = ", ".join(sorted(_REGISTRIES))
        raise ValueError(f"Unknown mime library {name!r}; expected one of: {supported}") from None
    return registry_cls()
