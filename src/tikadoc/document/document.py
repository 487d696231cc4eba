"""User-facing document handle with memoized extraction results."""

from __future__ import annotations

from datetime import datetime
import logging
import re
from pathlib import Path
from typing import Any, Callable, TypeVar

from tikadoc.document.source import PathSource, Source, StreamSource, UriSource, read_source, resolve_source
from tikadoc.extraction.api import default_client
from tikadoc.extraction.client import CONTENT_TYPE_KEY, ExtractionClient, first_value
from tikadoc.extraction.errors import TimeParseError
from tikadoc.extraction.models import ExtractionOptions, Metadata, MimeType, OutputKind


logger = logging.getLogger(__name__)

T = TypeVar("T")

CREATION_DATE_KEYS = ("dcterms:created", "meta:creation-date", "Creation-Date", "created")

_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d|$)")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def _pad_fraction(match: re.Match[str]) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(key: str, value: str) -> datetime:
    """Parse an ISO-8601 engine timestamp.

    A trailing ``Z``, offsets written as ``+0100`` and fractions of any
    precision are accepted on every supported interpreter.
    """

    candidate = value.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    if "T" in candidate or " " in candidate:
        candidate = _COMPACT_OFFSET.sub(r"\1:\2", candidate)
        candidate = _FRACTION.sub(_pad_fraction, candidate)
    try:
        return datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise TimeParseError(key, value) from exc


class Document:
    """A document given as a file path, a URI or a readable stream.

    The source is classified on construction.  Its bytes are read on first
    use and every derived result is computed at most once:

        document = Document("sample.docx")
        document.text()
        document.metadata()["Content-Type"]
        document.mimetype().extensions

    ``mimetype()`` and ``creation_date()`` are read from the cached metadata
    and never trigger an extra engine call.
    """

    def __init__(self, value: Any, *, client: ExtractionClient | None = None) -> None:
        self._source: Source = resolve_source(value)
        self._client = client
        self._data: bytes | None = None
        self._results: dict[tuple[str, bool], Any] = {}

    @property
    def source(self) -> Source:
        return self._source

    @property
    def client(self) -> ExtractionClient:
        """The injected client, or the current shared client on every access."""

        if self._client is not None:
            return self._client
        return default_client()

    @property
    def path(self) -> Path | None:
        return self._source.path if isinstance(self._source, PathSource) else None

    @property
    def uri(self) -> str | None:
        return self._source.uri if isinstance(self._source, UriSource) else None

    @property
    def stream(self) -> Any:
        return self._source.stream if isinstance(self._source, StreamSource) else None

    def is_path(self) -> bool:
        return isinstance(self._source, PathSource)

    def is_uri(self) -> bool:
        return isinstance(self._source, UriSource)

    def is_stream(self) -> bool:
        return isinstance(self._source, StreamSource)

    def data(self) -> bytes:
        """Return the raw document bytes, reading the source on first call only."""

        if self._data is None:
            logger.debug("Reading document bytes from %s", self._source.describe())
            self._data = read_source(
                self._source,
                timeout=self.client.settings.http_timeout_seconds,
            )
        return self._data

    def text(self, include_ocr: bool = False) -> str:
        return self._memoized(
            ("text", include_ocr),
            lambda: self._read(OutputKind.TEXT, include_ocr=include_ocr),
        )

    def html(self, include_ocr: bool = False) -> str:
        return self._memoized(
            ("html", include_ocr),
            lambda: self._read(OutputKind.HTML, include_ocr=include_ocr),
        )

    def metadata(self) -> Metadata:
        return self._memoized(("metadata", False), lambda: self._read(OutputKind.METADATA))

    def mimetype(self) -> MimeType | None:
        def compute() -> MimeType | None:
            content_type = first_value(self.metadata().get(CONTENT_TYPE_KEY))
            if not content_type:
                return None
            return self.client.mimetype(str(content_type))

        return self._memoized(("mimetype", False), compute)

    def creation_date(self) -> datetime | None:
        def compute() -> datetime | None:
            metadata = self.metadata()
            for key in CREATION_DATE_KEYS:
                value = first_value(metadata.get(key))
                if value:
                    return parse_timestamp(key, str(value))
            return None

        return self._memoized(("creation_date", False), compute)

    def _read(self, kind: OutputKind, *, include_ocr: bool = False) -> Any:
        return self.client.read(kind, self.data(), ExtractionOptions(include_ocr=include_ocr))

    def _memoized(self, key: tuple[str, bool], compute: Callable[[], T]) -> T:
        if key not in self._results:
            self._results[key] = compute()
        return self._results[key]

    def __repr__(self) -> str:
        return f"Document({self._source.describe()!r})"
