"""
Job lifecycle: submit, status, download.

The engine turns an upload into a registered job with a running
converter and answers status and download queries from the registry.

Design rules:
- Submission never waits for conversion
- Setup failures are raised synchronously and leave no job behind
- Everything after submission is recorded on the job, never raised
- Status of an unknown job is a normal None result, not an error
"""

import logging
import re
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import (
    JobNotFoundError,
    JobNotReadyError,
    MissingUploadError,
    UploadTooLargeError,
)
from .ids import new_job_id
from .models import (
    ConvertOptions,
    DownloadArtifact,
    Job,
    JobStatus,
    JobStatusResponse,
)
from .registry import JobRegistry
from ..config import Settings
from ..execution.errors import ConverterNotFoundError
from ..execution.ffmpeg import OUTPUT_EXTENSION, build_ffmpeg_command, find_ffmpeg
from ..execution.progress import PROGRESS_INITIAL
from ..execution.supervisor import ProcessSupervisor, remove_quietly

logger = logging.getLogger(__name__)


# Upload copy buffer
UPLOAD_CHUNK_SIZE = 1024 * 1024

# Client extensions that may be kept on the stored input
_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def _input_suffix(filename: Optional[str]) -> str:
    if not filename:
        return ""
    suffix = Path(filename).suffix
    return suffix.lower() if _SAFE_SUFFIX.match(suffix) else ""


class JobEngine:
    """
    Conversion job lifecycle.

    Owns nothing but references: the registry and supervisor are shared
    with the rest of the application.
    """

    def __init__(
        self,
        settings: Settings,
        registry: JobRegistry,
        supervisor: Optional[ProcessSupervisor] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.supervisor = supervisor or ProcessSupervisor(registry)

    def submit(
        self,
        upload: Optional[BinaryIO],
        filename: Optional[str] = None,
        options: Optional[ConvertOptions] = None,
    ) -> str:
        """
        Store an upload, register a job and start its converter.

        Args:
            upload: Binary stream with the uploaded file, or None if none was attached
            filename: Client-side filename (only its extension is used)
            options: Conversion options; defaults keep audio and copy metadata

        Returns:
            The new job ID

        Raises:
            MissingUploadError: No file, or an empty file, was attached
            UploadTooLargeError: The upload exceeds the configured limit
            ConverterNotFoundError: ffmpeg cannot be located
            ConverterLaunchError: ffmpeg could not be started
            OSError: The upload could not be written
        """
        if upload is None:
            raise MissingUploadError()

        options = options or ConvertOptions()
        job_id = new_job_id()

        self.settings.ensure_directories()
        input_path = self.settings.upload_dir / f"{job_id}{_input_suffix(filename)}"
        output_path = self.settings.output_dir / f"{job_id}.{OUTPUT_EXTENSION}"

        self._store_upload(upload, input_path)

        try:
            ffmpeg_path = find_ffmpeg(self.settings.ffmpeg_path)
            if ffmpeg_path is None:
                raise ConverterNotFoundError("ffmpeg is not installed or not in PATH")

            command = build_ffmpeg_command(
                ffmpeg_path,
                str(input_path),
                str(output_path),
                keep_audio=options.keep_audio,
                copy_metadata=options.copy_metadata,
            )

            job = Job(
                id=job_id,
                status=JobStatus.PROCESSING,
                progress=PROGRESS_INITIAL,
                input_path=str(input_path),
                output_path=str(output_path),
                keep_audio=options.keep_audio,
                copy_metadata=options.copy_metadata,
            )
            self.registry.create(job)
        except Exception:
            remove_quietly(input_path)
            raise

        try:
            self.supervisor.start(job, command)
        except Exception:
            self.registry.remove(job_id)
            remove_quietly(input_path)
            raise

        logger.info(
            f"[Jobs] Submitted job {job_id} "
            f"(keep_audio={options.keep_audio}, copy_metadata={options.copy_metadata})"
        )
        return job_id

    def _store_upload(self, upload: BinaryIO, input_path: Path) -> None:
        """
        Copy the upload stream to input_path in chunks.

        Removes the partial file if the upload is empty, too large, or
        the copy fails. The limit applies to this copy: the framework has
        already spooled the full request body to temporary storage, so an
        oversized upload briefly takes up to twice its size on disk.
        """
        limit = self.settings.max_upload_bytes
        written = 0

        try:
            with open(input_path, "wb") as out:
                while True:
                    chunk = upload.read(UPLOAD_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > limit:
                        raise UploadTooLargeError(limit)
                    out.write(chunk)
        except Exception:
            remove_quietly(input_path)
            raise

        if written == 0:
            remove_quietly(input_path)
            raise MissingUploadError("Uploaded file is empty")

    def get_status(self, job_id: str) -> Optional[JobStatusResponse]:
        """
        Get the public status of a job.

        Returns:
            Status view, or None if the job is unknown
        """
        job = self.registry.get(job_id)
        if job is None:
            return None
        return JobStatusResponse.from_job(job)

    def get_download(self, job_id: str) -> DownloadArtifact:
        """
        Resolve the finished output file for a job.

        Raises:
            JobNotFoundError: If the job (or its output file) does not exist
            JobNotReadyError: If the job has not reached DONE
        """
        job = self.registry.get_or_raise(job_id)

        if job.status != JobStatus.DONE:
            raise JobNotReadyError(job_id, job.status.value)

        output_path = Path(job.output_path)
        if not output_path.is_file():
            logger.warning(f"[Jobs] Output for done job {job_id} is missing: {output_path}")
            raise JobNotFoundError(job_id)

        return DownloadArtifact(
            path=output_path,
            filename=f"{self.settings.download_prefix}-{job_id}.{OUTPUT_EXTENSION}",
        )
