"""
Tests for environment-driven settings.
"""

import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path

import pytest

from prores_convert.config import (
    DEFAULT_API_PREFIX,
    DEFAULT_MAX_UPLOAD_BYTES,
    DEFAULT_PORT,
    Settings,
    normalize_api_prefix,
)

BACKEND_DIR = Path(__file__).resolve().parent.parent


ALL_VARS = [
    "PRORES_UPLOAD_DIR",
    "PRORES_OUTPUT_DIR",
    "PRORES_FFMPEG_PATH",
    "PRORES_MAX_UPLOAD_BYTES",
    "PRORES_API_PREFIX",
    "PRORES_CORS_ORIGINS",
    "PRORES_LOG_LEVEL",
    "HOST",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ALL_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    tmp_root = Path(tempfile.gettempdir())
    assert settings.upload_dir == tmp_root / "uploads"
    assert settings.output_dir == tmp_root / "outputs"
    assert settings.ffmpeg_path is None
    assert settings.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES
    assert settings.api_prefix == DEFAULT_API_PREFIX
    assert settings.cors_origins == ["*"]
    assert settings.port == DEFAULT_PORT
    assert settings.download_prefix == "prores4444xq"


def test_overrides(clean_env, tmp_path):
    clean_env.setenv("PRORES_UPLOAD_DIR", str(tmp_path / "in"))
    clean_env.setenv("PRORES_OUTPUT_DIR", str(tmp_path / "out"))
    clean_env.setenv("PRORES_FFMPEG_PATH", "/opt/ffmpeg/bin/ffmpeg")
    clean_env.setenv("PRORES_MAX_UPLOAD_BYTES", "1048576")
    clean_env.setenv("PRORES_API_PREFIX", "/v1/")
    clean_env.setenv("PRORES_CORS_ORIGINS", "https://codepen.io, https://cdpn.io")
    clean_env.setenv("PRORES_LOG_LEVEL", "debug")
    clean_env.setenv("PORT", "8080")

    settings = Settings.from_env()

    assert settings.upload_dir == tmp_path / "in"
    assert settings.output_dir == tmp_path / "out"
    assert settings.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"
    assert settings.max_upload_bytes == 1048576
    assert settings.api_prefix == "/v1"
    assert settings.cors_origins == ["https://codepen.io", "https://cdpn.io"]
    assert settings.log_level == "DEBUG"
    assert settings.port == 8080


@pytest.mark.parametrize("name, value", [
    ("PORT", "eighty"),
    ("PRORES_MAX_UPLOAD_BYTES", "lots"),
    ("PRORES_MAX_UPLOAD_BYTES", "0"),
])
def test_invalid_numbers_fail_at_startup(clean_env, name, value):
    clean_env.setenv(name, value)

    with pytest.raises(ValueError):
        Settings.from_env()


def test_ensure_directories(tmp_path):
    settings = Settings(upload_dir=tmp_path / "a" / "uploads", output_dir=tmp_path / "b" / "outputs")

    settings.ensure_directories()

    assert settings.upload_dir.is_dir()
    assert settings.output_dir.is_dir()


@pytest.mark.parametrize("raw, expected", [
    ("/api", "/api"),
    ("api", "/api"),
    ("/v1/", "/v1"),
    (" v1/convert ", "/v1/convert"),
    ("/", ""),
    ("", ""),
])
def test_api_prefix_normalized(tmp_path, raw, expected):
    assert normalize_api_prefix(raw) == expected
    assert Settings(upload_dir=tmp_path, output_dir=tmp_path, api_prefix=raw).api_prefix == expected


def test_api_prefix_without_slash_from_env(clean_env):
    clean_env.setenv("PRORES_API_PREFIX", "api")

    assert Settings.from_env().api_prefix == "/api"


def test_module_app_applies_log_level(tmp_path):
    """
    GIVEN: PRORES_LOG_LEVEL=DEBUG
    WHEN: The module-level app is imported, as `uvicorn prores_convert.main:app` does
    THEN: The root logger is set to DEBUG
    """
    env = dict(os.environ)
    env.update(
        PYTHONPATH=str(BACKEND_DIR),
        PRORES_LOG_LEVEL="DEBUG",
        PRORES_UPLOAD_DIR=str(tmp_path / "uploads"),
        PRORES_OUTPUT_DIR=str(tmp_path / "outputs"),
    )
    env.pop("PRORES_API_PREFIX", None)
    env.pop("PRORES_MAX_UPLOAD_BYTES", None)
    env.pop("PORT", None)

    result = subprocess.run(
        [
            sys.executable, "-c",
            "import logging, prores_convert.main; print(logging.getLogger().level)",
        ],
        capture_output=True,
        text=True,
        env=env,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == str(logging.DEBUG)
