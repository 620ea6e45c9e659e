"""
Job data models.

A Job tracks one uploaded file through a single ffmpeg conversion.
State transitions are validated externally (see state.py).

All models use Pydantic for validation.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """
    Job-level status.

    PROCESSING is the only non-terminal state.
    """

    PROCESSING = "processing"  # Converter running (or about to)
    DONE = "done"  # Converter exited 0, output is complete
    ERROR = "error"  # Converter exited nonzero, output removed


class ConvertOptions(BaseModel):
    """Per-job conversion options supplied with the upload."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    keep_audio: bool = True
    copy_metadata: bool = True


class Job(BaseModel):
    """
    A single conversion job.

    input_path is owned by the job until its converter exits.
    output_path holds a complete file if and only if status is DONE.
    """

    model_config = ConfigDict(extra="forbid")

    # Identity
    id: str

    # State
    status: JobStatus = JobStatus.PROCESSING
    progress: int = Field(default=1, ge=0, le=100)
    error: Optional[str] = None

    # Files
    input_path: str
    output_path: str

    # Options the job was submitted with
    keep_audio: bool = True
    copy_metadata: bool = True

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None


class JobStatusResponse(BaseModel):
    """Public status view of a job."""

    status: JobStatus
    progress: int
    error: Optional[str] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusResponse":
        return cls(status=job.status, progress=job.progress, error=job.error)


class SubmitResponse(BaseModel):
    """Response body for an accepted upload."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")


class DownloadArtifact(BaseModel):
    """A finished output file ready to be streamed."""

    path: Path
    filename: str
