"""Runtime configuration for the extraction engine and its transports."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


PACKAGE_ROOT = Path(__file__).resolve().parent.parent
JAR_DIR = PACKAGE_ROOT / "jar"

DEFAULT_JAR_PATH = JAR_DIR / "tika-app-2.3.0.jar"
DEFAULT_CONFIG_PATH = JAR_DIR / "tika-config-without-ocr.xml"
DEFAULT_OCR_CONFIG_PATH = JAR_DIR / "tika-config.xml"
DEFAULT_SERVER_PORT = 9293
DEFAULT_SERVER_SETTLE_SECONDS = 2.0
DEFAULT_SOCKET_CHUNK_SIZE = 64 * 1024
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_MIME_LIBRARY = "mimetypes"

MIME_LIBRARIES = ("mimetypes", "filetype")


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.0) -> float:
    value = float(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Validated engine locations and transport tuning."""

    java_home: str | None = None
    jar_path: Path = DEFAULT_JAR_PATH
    config_path: Path = DEFAULT_CONFIG_PATH
    ocr_config_path: Path = DEFAULT_OCR_CONFIG_PATH
    server_port: int = DEFAULT_SERVER_PORT
    server_settle_seconds: float = DEFAULT_SERVER_SETTLE_SECONDS
    socket_chunk_size: int = DEFAULT_SOCKET_CHUNK_SIZE
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    mime_library: str = DEFAULT_MIME_LIBRARY

    def __post_init__(self) -> None:
        if self.mime_library not in MIME_LIBRARIES:
            supported = ", ".join(MIME_LIBRARIES)
            raise ValueError(f"mime_library must be one of: {supported}")
        if not 0 < self.server_port < 65536:
            raise ValueError("server_port must be between 1 and 65535")
        if self.socket_chunk_size < 1:
            raise ValueError("socket_chunk_size must be >= 1")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        java_home = source.get("JAVA_HOME", "").strip() or None
        jar_raw = source.get("TIKADOC_JAR_PATH", str(DEFAULT_JAR_PATH)).strip()
        config_raw = source.get("TIKADOC_CONFIG_PATH", str(DEFAULT_CONFIG_PATH)).strip()
        ocr_config_raw = source.get("TIKADOC_OCR_CONFIG_PATH", str(DEFAULT_OCR_CONFIG_PATH)).strip()
        port_raw = source.get("TIKADOC_SERVER_PORT", str(DEFAULT_SERVER_PORT)).strip()
        settle_raw = source.get("TIKADOC_SERVER_SETTLE_SECONDS", str(DEFAULT_SERVER_SETTLE_SECONDS)).strip()
        chunk_raw = source.get("TIKADOC_SOCKET_CHUNK_SIZE", str(DEFAULT_SOCKET_CHUNK_SIZE)).strip()
        timeout_raw = source.get("TIKADOC_HTTP_TIMEOUT_SECONDS", str(DEFAULT_HTTP_TIMEOUT_SECONDS)).strip()
        mime_library = source.get("TIKADOC_MIME_LIBRARY", DEFAULT_MIME_LIBRARY).strip().lower()

        if not jar_raw:
            raise ValueError("TIKADOC_JAR_PATH cannot be empty")
        if not config_raw:
            raise ValueError("TIKADOC_CONFIG_PATH cannot be empty")
        if not ocr_config_raw:
            raise ValueError("TIKADOC_OCR_CONFIG_PATH cannot be empty")
        if mime_library not in MIME_LIBRARIES:
            supported = ", ".join(MIME_LIBRARIES)
            raise ValueError(f"TIKADOC_MIME_LIBRARY must be one of: {supported}")

        server_port = _parse_positive_int(name="TIKADOC_SERVER_PORT", raw_value=port_raw, minimum=1)
        if server_port > 65535:
            raise ValueError("TIKADOC_SERVER_PORT must be <= 65535")

        return cls(
            java_home=java_home,
            jar_path=Path(jar_raw).expanduser(),
            config_path=Path(config_raw).expanduser(),
            ocr_config_path=Path(ocr_config_raw).expanduser(),
            server_port=server_port,
            server_settle_seconds=_parse_positive_float(
                name="TIKADOC_SERVER_SETTLE_SECONDS",
                raw_value=settle_raw,
            ),
            socket_chunk_size=_parse_positive_int(
                name="TIKADOC_SOCKET_CHUNK_SIZE",
                raw_value=chunk_raw,
                minimum=1,
            ),
            http_timeout_seconds=_parse_positive_float(
                name="TIKADOC_HTTP_TIMEOUT_SECONDS",
                raw_value=timeout_raw,
                minimum=0.1,
            ),
            mime_library=mime_library,
        )
