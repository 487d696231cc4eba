from __future__ import annotations

import io
import json
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from tikadoc.document import Document
from tikadoc.document.document import parse_timestamp
from tikadoc.extraction import api
from tikadoc.extraction.client import ExtractionClient
from tikadoc.extraction.config import EngineSettings
from tikadoc.extraction.errors import EngineError, InvalidInputError, MissingFileError, TimeParseError
from tikadoc.extraction.server import EngineServer

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class _CountingEngine:
    """Fake engine process recording every invocation."""

    def __init__(self, *, text: bytes = b"", ocr_text: bytes = b"", metadata: dict | None = None) -> None:
        self.text = text
        self.ocr_text = ocr_text
        self.metadata = metadata or {}
        self.calls: list[list[str]] = []
        self.fail_next = False

    def __call__(self, cmd: list[str], *, input: bytes, capture_output: bool, check: bool) -> subprocess.CompletedProcess[bytes]:
        self.calls.append(cmd)
        if self.fail_next:
            self.fail_next = False
            return subprocess.CompletedProcess(cmd, 1, b"", b"java.lang.OutOfMemoryError")
        ocr = any(part.endswith("/tika-config.xml") for part in cmd)
        if "-m" in cmd:
            reply = json.dumps(self.metadata).encode()
        elif cmd[-1] == "-h":
            reply = b"<html><body>" + (self.ocr_text if ocr else self.text) + b"</body></html>"
        else:
            reply = self.ocr_text if ocr else self.text
        return subprocess.CompletedProcess(cmd, 0, reply, b"")


def _client(engine: _CountingEngine) -> ExtractionClient:
    settings = EngineSettings(jar_path=Path("/opt/tika/tika-app.jar"))
    server = EngineServer(settings, popen=lambda *_a, **_k: None, sleep=lambda _sec: None)
    return ExtractionClient(settings, server=server, runner=engine)


@pytest.fixture()
def sample(tmp_path: Path) -> Path:
    path = tmp_path / "sample.docx"
    path.write_bytes(b"PK\x03\x04 fake docx")
    return path


def test_path_document_reports_only_path(sample: Path) -> None:
    document = Document(str(sample), client=_client(_CountingEngine()))

    assert document.is_path()
    assert not document.is_uri()
    assert not document.is_stream()
    assert document.path == sample
    assert document.uri is None
    assert document.stream is None


def test_uri_document_reports_only_uri() -> None:
    document = Document("http://svn.apache.org/repos/asf/poi/trunk/test-data/document/sample.docx")

    assert document.is_uri()
    assert not document.is_path()
    assert not document.is_stream()


def test_stream_document_reports_only_stream(sample: Path) -> None:
    with sample.open("rb") as handle:
        document = Document(handle)

        assert document.is_stream()
        assert not document.is_path()
        assert not document.is_uri()
        assert document.stream is handle


def test_construction_fails_fast_for_bad_inputs() -> None:
    with pytest.raises(MissingFileError):
        Document("test/sample/missing.pages")
    for value in (None, 1, 1.1):
        with pytest.raises(InvalidInputError):
            Document(value)


def test_data_reads_stream_once() -> None:
    reads: list[int] = []

    class _Stream:
        def read(self) -> bytes:
            reads.append(1)
            return b"stream body"

    document = Document(_Stream(), client=_client(_CountingEngine()))

    assert document.data() == b"stream body"
    assert document.data() == b"stream body"
    assert reads == [1]


def test_text_is_memoized_after_one_engine_call(sample: Path) -> None:
    engine = _CountingEngine(text=b"The quick brown fox jumped over the lazy cat.")
    document = Document(sample, client=_client(engine))

    assert document.text() == "The quick brown fox jumped over the lazy cat."
    assert document.text() == "The quick brown fox jumped over the lazy cat."
    assert len(engine.calls) == 1


def test_image_without_text_yields_empty_string_and_ocr_text_separately() -> None:
    engine = _CountingEngine(text=b"", ocr_text=b"West Side\n\nSea Island\n")
    document = Document(io.BytesIO(b"\x89PNG"), client=_client(engine))

    assert document.text() == ""
    assert "West Side\n\nSea Island\n" in document.text(include_ocr=True)
    assert "Sea Island" in document.html(include_ocr=True)
    assert document.html() == "<html><body></body></html>"
    assert len(engine.calls) == 4


def test_metadata_mimetype_and_creation_date_share_one_engine_call(sample: Path) -> None:
    engine = _CountingEngine(
        metadata={
            "Content-Type": DOCX_TYPE,
            "dcterms:created": "2013-07-29T09:20:00Z",
        }
    )
    document = Document(sample, client=_client(engine))

    assert document.metadata()["Content-Type"] == DOCX_TYPE
    mimetype = document.mimetype()
    created = document.creation_date()

    assert mimetype is not None
    assert mimetype.content_type == DOCX_TYPE
    assert "docx" in mimetype.extensions
    assert created == datetime(2013, 7, 29, 9, 20, tzinfo=timezone.utc)
    assert len(engine.calls) == 1


def test_mimetype_uses_first_of_multi_valued_content_type(sample: Path) -> None:
    engine = _CountingEngine(metadata={"Content-Type": ["image/png", "image/png"]})
    document = Document(sample, client=_client(engine))

    mimetype = document.mimetype()

    assert mimetype is not None
    assert mimetype.content_type == "image/png"
    assert "png" in mimetype.extensions


def test_creation_date_is_none_when_metadata_has_no_date(sample: Path) -> None:
    document = Document(sample, client=_client(_CountingEngine(metadata={"Content-Type": "text/plain"})))

    assert document.creation_date() is None


def test_creation_date_falls_back_to_alternate_keys(sample: Path) -> None:
    engine = _CountingEngine(metadata={"meta:creation-date": ["2020-01-02T03:04:05", "ignored"]})
    document = Document(sample, client=_client(engine))

    assert document.creation_date() == datetime(2020, 1, 2, 3, 4, 5)


def test_unparsable_creation_date_raises_time_parse_error(sample: Path) -> None:
    engine = _CountingEngine(metadata={"dcterms:created": "last tuesday"})
    document = Document(sample, client=_client(engine))

    with pytest.raises(TimeParseError, match="last tuesday"):
        document.creation_date()


def test_failed_extraction_is_not_cached(sample: Path) -> None:
    engine = _CountingEngine(text=b"recovered")
    engine.fail_next = True
    document = Document(sample, client=_client(engine))

    with pytest.raises(EngineError):
        document.text()

    assert document.text() == "recovered"
    assert len(engine.calls) == 2


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2013-07-29T09:20:00.1Z", datetime(2013, 7, 29, 9, 20, 0, 100000, tzinfo=timezone.utc)),
        ("2013-07-29T09:20:00.123456789Z", datetime(2013, 7, 29, 9, 20, 0, 123456, tzinfo=timezone.utc)),
        ("2013-07-29T09:20:00+0100", datetime(2013, 7, 29, 9, 20, tzinfo=timezone(timedelta(hours=1)))),
        ("2013-07-29T09:20:00.25-0530", datetime(2013, 7, 29, 9, 20, 0, 250000, tzinfo=timezone(-timedelta(hours=5, minutes=30)))),
        ("2013-07-29", datetime(2013, 7, 29)),
    ],
)
def test_parse_timestamp_accepts_engine_variants(value: str, expected: datetime) -> None:
    assert parse_timestamp("dcterms:created", value) == expected


def test_document_without_client_follows_reconfigured_default(monkeypatch: pytest.MonkeyPatch, sample: Path) -> None:
    monkeypatch.setattr(api, "_default_client", _client(_CountingEngine()))
    document = Document(sample)
    assert document.client is api.default_client()

    api.configure(http_timeout_seconds=5.0)

    assert document.client is api.default_client()
    assert document.client.settings.http_timeout_seconds == 5.0


def test_injected_client_survives_reconfiguring_default(monkeypatch: pytest.MonkeyPatch, sample: Path) -> None:
    monkeypatch.setattr(api, "_default_client", _client(_CountingEngine()))
    client = _client(_CountingEngine())
    document = Document(sample, client=client)

    api.configure(http_timeout_seconds=5.0)

    assert document.client is client
