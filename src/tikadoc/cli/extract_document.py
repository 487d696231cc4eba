"""CLI command for extracting text, HTML, metadata or the mimetype of a document."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from tikadoc.document import Document
from tikadoc.extraction.client import ExtractionClient
from tikadoc.extraction.config import EngineSettings
from tikadoc.extraction.errors import TikaDocError
from tikadoc.extraction.models import OutputKind


LOGGER = logging.getLogger(__name__)

_KINDS = [kind.value for kind in OutputKind]


def _render(document: Document, kind: OutputKind, include_ocr: bool) -> str:
    if kind is OutputKind.TEXT:
        return document.text(include_ocr=include_ocr)
    if kind is OutputKind.HTML:
        return document.html(include_ocr=include_ocr)
    if kind is OutputKind.METADATA:
        return json.dumps(document.metadata(), ensure_ascii=False, indent=2)

    mimetype = document.mimetype()
    payload = None
    if mimetype is not None:
        payload = {"content_type": mimetype.content_type, "extensions": list(mimetype.extensions)}
    return json.dumps(payload, ensure_ascii=False, indent=2)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract content from a document through the Tika engine")
    parser.add_argument("input", help="File path, URI, or '-' to read the document from stdin")
    parser.add_argument("--kind", choices=_KINDS, default=OutputKind.TEXT.value, help="What to extract")
    parser.add_argument("--ocr", action="store_true", help="Use the OCR-enabled engine profile")
    parser.add_argument(
        "--server",
        action="store_true",
        help="Start a persistent engine server for this run and send the document over its socket",
    )
    parser.add_argument("--port", type=int, default=None, help="Port for --server (default from settings)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    kind = OutputKind(args.kind)
    client = ExtractionClient(EngineSettings.from_env())
    source = sys.stdin.buffer if args.input == "-" else args.input

    try:
        document = Document(source, client=client)
        if args.server:
            client.server.start(kind, args.port, include_ocr=args.ocr)
        try:
            output = _render(document, kind, args.ocr)
        finally:
            client.server.stop()
    except TikaDocError as exc:
        LOGGER.debug("Extraction failed", exc_info=True)
        print(json.dumps({"input": args.input, "error": str(exc)}, ensure_ascii=True), file=sys.stderr)
        return 1

    sys.stdout.write(output)
    if output and not output.endswith("\n"):
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
