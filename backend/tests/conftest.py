"""
Pytest configuration and shared fixtures.

The fake converter is a small POSIX shell script that behaves like
ffmpeg as far as the supervisor can tell: it writes diagnostics to
stderr, writes its last argument as the output file and exits with a
chosen code.
"""

import itertools
import sys
import time
from pathlib import Path

import pytest

# Add backend to Python path for test imports
backend_path = Path(__file__).parent.parent
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from prores_convert.config import Settings
from prores_convert.jobs.models import JobStatus
from prores_convert.jobs.registry import JobRegistry


FAKE_FFMPEG_TEMPLATE = """#!/bin/sh
for last; do :; done
printf '%s\\n' "$@" > "{args_file}"
{gate}
i=0
while [ $i -lt {stderr_lines} ]; do
  echo "frame=$i fps=24.0 time=00:00:0$i.00 bitrate=N/A" >&2
  i=$((i + 1))
done
{write}
exit {exit_code}
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: requires a real ffmpeg binary"
    )


class FakeFFmpeg:
    """Handle to a generated fake converter script."""

    def __init__(self, path: Path, args_file: Path, release_file: Path):
        self.path = path
        self.args_file = args_file
        self.release_file = release_file

    def release(self) -> None:
        """Let a gated script continue past its start."""
        self.release_file.touch()

    def recorded_args(self) -> list:
        """Arguments the script was last invoked with."""
        return self.args_file.read_text().splitlines()


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """
    Factory for fake converter scripts.

    Args (to the factory):
        exit_code: Exit status of the script
        payload: Bytes written to the output path, or None to write nothing
        stderr_lines: Number of diagnostic lines written to stderr
        gated: If True, the script waits for release() before doing anything else
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    counter = itertools.count()

    def _make(exit_code=0, payload="FAKE-PRORES-4444XQ", stderr_lines=3, gated=False):
        n = next(counter)
        script = bin_dir / f"ffmpeg-{n}"
        args_file = bin_dir / f"ffmpeg-{n}.args"
        release_file = bin_dir / f"ffmpeg-{n}.release"

        gate = ""
        if gated:
            gate = f'while [ ! -f "{release_file}" ]; do sleep 0.02; done'

        write = ""
        if payload is not None:
            write = f"printf '%s' '{payload}' > \"$last\""

        script.write_text(FAKE_FFMPEG_TEMPLATE.format(
            args_file=args_file,
            gate=gate,
            stderr_lines=stderr_lines,
            write=write,
            exit_code=exit_code,
        ))
        script.chmod(0o755)
        return FakeFFmpeg(script, args_file, release_file)

    return _make


@pytest.fixture
def make_settings(tmp_path):
    """Factory for Settings rooted in tmp_path."""

    def _make(ffmpeg_path=None, **overrides):
        values = dict(
            upload_dir=tmp_path / "uploads",
            output_dir=tmp_path / "outputs",
            ffmpeg_path=str(ffmpeg_path) if ffmpeg_path else None,
        )
        values.update(overrides)
        settings = Settings(**values)
        settings.ensure_directories()
        return settings

    return _make


@pytest.fixture
def registry():
    return JobRegistry()


@pytest.fixture
def wait_for_terminal():
    """Poll a registry until a job leaves PROCESSING."""

    def _wait(registry, job_id, timeout=10.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            job = registry.get(job_id)
            if job is not None and job.status != JobStatus.PROCESSING:
                return job
            time.sleep(0.02)
        raise AssertionError(f"Job {job_id} did not finish within {timeout}s")

    return _wait
