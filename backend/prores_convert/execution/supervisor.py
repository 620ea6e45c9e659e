"""
Converter process supervision.

Design rules:
- One subprocess per job, one daemon thread per subprocess
- stdin and stdout are closed; ffmpeg diagnostics arrive on stderr only
- Every stderr chunk is an activity heartbeat (see progress.py)
- Input file is deleted exactly once, after the process exits
- Non-zero exit code = ERROR, partial output removed
- No timeout and no cancellation: a hung converter keeps its thread
"""

import logging
import re
import subprocess
import threading
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List

from .errors import ConverterLaunchError
from ..jobs.models import Job
from ..jobs.registry import JobRegistry
from ..jobs.state import is_job_terminal, mark_done, mark_failed, record_activity

logger = logging.getLogger(__name__)


# Max bytes read from stderr per heartbeat
STDERR_CHUNK_SIZE = 64 * 1024

# Number of stderr lines kept for the failure log
STDERR_TAIL_LINES = 20

_LINE_BREAK = re.compile(rb"[\r\n]+")


def remove_quietly(path: Path) -> None:
    """Best-effort file deletion. Failures are logged and ignored."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"[FFmpeg] Could not remove {path}: {e}")


class ProcessSupervisor:
    """
    Starts converter processes and applies their outcome to the registry.

    Each supervised job touches only its own registry entry.
    """

    def __init__(self, registry: JobRegistry, chunk_size: int = STDERR_CHUNK_SIZE):
        self._registry = registry
        self._chunk_size = chunk_size
        self._active_processes: Dict[str, subprocess.Popen] = {}
        self._lock = threading.Lock()

    @property
    def active_count(self) -> int:
        """Number of converter processes that have not exited yet."""
        with self._lock:
            return len(self._active_processes)

    def start(self, job: Job, command: List[str]) -> threading.Thread:
        """
        Launch the converter for a registered job and supervise it.

        Returns immediately once the process is running.

        Args:
            job: The job, already present in the registry
            command: Full command line (binary first)

        Returns:
            The supervising thread

        Raises:
            ConverterLaunchError: If the process cannot be started
        """
        cmd_string = " ".join(command)
        logger.info(f"[FFmpeg] Executing: {cmd_string}")

        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ConverterLaunchError(command[0], str(e)) from e

        logger.info(f"[FFmpeg] Started PID {process.pid} for job {job.id}")

        with self._lock:
            self._active_processes[job.id] = process

        thread = threading.Thread(
            target=self._supervise,
            args=(job.id, process, Path(job.input_path), Path(job.output_path)),
            daemon=True,
            name=f"ffmpeg-{job.id}",
        )
        thread.start()
        return thread

    def _supervise(
        self,
        job_id: str,
        process: subprocess.Popen,
        input_path: Path,
        output_path: Path,
    ) -> None:
        stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)

        try:
            self._drain_stderr(job_id, process, stderr_tail)
        except Exception:
            logger.exception(f"[FFmpeg] Lost stderr stream for job {job_id}")
        finally:
            process.stderr.close()

        exit_code = process.wait()

        with self._lock:
            self._active_processes.pop(job_id, None)

        logger.info(f"[FFmpeg] PID {process.pid} exited with code {exit_code}")

        try:
            self._finalize(job_id, exit_code, input_path, output_path, stderr_tail)
        except Exception as e:
            logger.exception(f"[FFmpeg] Could not finalize job {job_id}")
            self._fail_unfinished(job_id, f"Conversion could not be finalized: {e}")

    def _fail_unfinished(self, job_id: str, reason: str) -> None:
        """Move a job still PROCESSING to ERROR. Terminal jobs are left as they are."""

        def _mark(job):
            if not is_job_terminal(job.status):
                mark_failed(job, reason)

        try:
            self._registry.update(job_id, _mark)
        except Exception:
            logger.exception(f"[FFmpeg] Could not mark job {job_id} as failed")

    def _drain_stderr(
        self,
        job_id: str,
        process: subprocess.Popen,
        stderr_tail: Deque[str],
    ) -> None:
        """Read stderr until EOF, counting each chunk as a heartbeat."""
        stream = process.stderr
        pending = b""

        for chunk in iter(lambda: stream.read1(self._chunk_size), b""):
            self._registry.update(job_id, record_activity)

            lines = _LINE_BREAK.split(pending + chunk)
            pending = lines.pop()[-self._chunk_size:]
            for line in lines:
                if line.strip():
                    stderr_tail.append(line.decode("utf-8", errors="replace"))

        if pending.strip():
            stderr_tail.append(pending.decode("utf-8", errors="replace"))

    def _finalize(
        self,
        job_id: str,
        exit_code: int,
        input_path: Path,
        output_path: Path,
        stderr_tail: Deque[str],
    ) -> None:
        """Apply the terminal state for a finished converter. Runs once per job."""
        remove_quietly(input_path)

        if self._registry.get(job_id) is None:
            logger.info(f"[FFmpeg] Job {job_id} was removed before completion")
            return

        if exit_code == 0 and output_path.is_file():
            self._registry.update(job_id, mark_done)
            logger.info(f"[FFmpeg] Completed job {job_id}: {output_path}")
            return

        if exit_code == 0:
            reason = "ffmpeg exited with code 0 but did not create an output file"
        else:
            reason = f"ffmpeg exited with code {exit_code}"

        # Partial output is gone before ERROR becomes visible
        remove_quietly(output_path)
        self._registry.update(job_id, lambda job: mark_failed(job, reason))

        logger.error(f"[FFmpeg] Job {job_id} failed: {reason}")
        if stderr_tail:
            logger.error(f"[FFmpeg] stderr tail for job {job_id}:\n" + "\n".join(stderr_tail))
