"""
Service configuration.

All settings come from environment variables and are read once at
startup. Defaults mirror a single-node deployment with ephemeral storage
in the system temp directory.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


# Environment variables
ENV_UPLOAD_DIR = "PRORES_UPLOAD_DIR"
ENV_OUTPUT_DIR = "PRORES_OUTPUT_DIR"
ENV_FFMPEG_PATH = "PRORES_FFMPEG_PATH"
ENV_MAX_UPLOAD_BYTES = "PRORES_MAX_UPLOAD_BYTES"
ENV_API_PREFIX = "PRORES_API_PREFIX"
ENV_CORS_ORIGINS = "PRORES_CORS_ORIGINS"
ENV_LOG_LEVEL = "PRORES_LOG_LEVEL"
ENV_HOST = "HOST"
ENV_PORT = "PORT"

DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024 * 1024  # 2 GiB
DEFAULT_API_PREFIX = "/api"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_DOWNLOAD_PREFIX = "prores4444xq"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def _read_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _read_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def normalize_api_prefix(prefix: str) -> str:
    """Return a route prefix with one leading slash and no trailing slash ("" for none)."""
    prefix = prefix.strip().strip("/")
    return f"/{prefix}" if prefix else ""


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the conversion service.

    Attributes:
        upload_dir: Where uploaded inputs are stored until conversion ends
        output_dir: Where converted .mov files are written
        ffmpeg_path: Explicit converter binary; PATH lookup when None
        max_upload_bytes: Uploads larger than this are rejected
        api_prefix: Prefix for the convert/status/download routes
        cors_origins: Allowed CORS origins ("*" reflects any origin)
        download_prefix: Leading part of the suggested download filename
        log_level: Root logging level name
        host: Bind address for run_server
        port: Bind port for run_server
    """

    upload_dir: Path
    output_dir: Path
    ffmpeg_path: Optional[str] = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    api_prefix: str = DEFAULT_API_PREFIX
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    download_prefix: str = DEFAULT_DOWNLOAD_PREFIX
    log_level: str = "INFO"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self):
        object.__setattr__(self, "api_prefix", normalize_api_prefix(self.api_prefix))

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed or is out of range
        """
        tmp_root = Path(tempfile.gettempdir())

        max_upload_bytes = _read_int(ENV_MAX_UPLOAD_BYTES, DEFAULT_MAX_UPLOAD_BYTES)
        if max_upload_bytes <= 0:
            raise ValueError(f"{ENV_MAX_UPLOAD_BYTES} must be positive, got {max_upload_bytes}")

        return cls(
            upload_dir=Path(os.environ.get(ENV_UPLOAD_DIR) or tmp_root / "uploads"),
            output_dir=Path(os.environ.get(ENV_OUTPUT_DIR) or tmp_root / "outputs"),
            ffmpeg_path=os.environ.get(ENV_FFMPEG_PATH) or None,
            max_upload_bytes=max_upload_bytes,
            api_prefix=os.environ.get(ENV_API_PREFIX, DEFAULT_API_PREFIX),
            cors_origins=_read_list(ENV_CORS_ORIGINS, ["*"]),
            log_level=os.environ.get(ENV_LOG_LEVEL, "INFO").upper(),
            host=os.environ.get(ENV_HOST, DEFAULT_HOST),
            port=_read_int(ENV_PORT, DEFAULT_PORT),
        )

    def ensure_directories(self) -> None:
        """Create the upload and output directories if missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the server process."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(numeric_level)
