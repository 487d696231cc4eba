"""Engine command-line construction for one-shot and server invocations."""

from __future__ import annotations

import os

from tikadoc.extraction.config import EngineSettings
from tikadoc.extraction.models import OutputKind


HEADLESS_FLAG = "-Djava.awt.headless=true"

_SWITCHES: dict[OutputKind, tuple[str, ...]] = {
    OutputKind.TEXT: ("-t",),
    OutputKind.HTML: ("-h",),
    OutputKind.METADATA: ("-m", "-j"),
    OutputKind.MIMETYPE: ("-m", "-j"),
}


def java_path(java_home: str | None) -> str:
    """Return the Java binary under *java_home*, or the bare name for PATH lookup."""

    if java_home:
        return os.path.join(java_home, "bin", "java")
    return "java"


def switches_for(kind: OutputKind | str) -> tuple[str, ...]:
    return _SWITCHES[OutputKind.coerce(kind)]


def config_path_for(settings: EngineSettings, *, include_ocr: bool) -> str:
    path = settings.ocr_config_path if include_ocr else settings.config_path
    return str(path)


def build_engine_command(
    settings: EngineSettings,
    kind: OutputKind | str,
    *,
    include_ocr: bool = False,
) -> list[str]:
    """Build the argv for a transient engine run reading stdin and writing stdout."""

    return [
        java_path(settings.java_home),
        HEADLESS_FLAG,
        "-jar",
        str(settings.jar_path),
        f"--config={config_path_for(settings, include_ocr=include_ocr)}",
        *switches_for(kind),
    ]


def build_server_command(
    settings: EngineSettings,
    kind: OutputKind | str,
    port: int,
    *,
    include_ocr: bool = False,
) -> list[str]:
    """Build the argv for a long-running engine listening on *port*."""

    command = build_engine_command(settings, kind, include_ocr=include_ocr)
    switches = switches_for(kind)
    base = command[: len(command) - len(switches)]
    return [*base, "--server", "--port", str(port), *switches]
