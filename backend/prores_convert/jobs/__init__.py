"""
Conversion job tracking.

This package manages job identity, state and storage.
It does NOT run the converter; see prores_convert.execution.

The lifecycle API (JobEngine) lives in prores_convert.jobs.engine and is
imported from there directly.
"""

from .errors import (
    JobError,
    JobNotFoundError,
    JobNotReadyError,
    DuplicateJobError,
    InvalidStateTransitionError,
    UploadError,
    MissingUploadError,
    UploadTooLargeError,
)
from .models import (
    JobStatus,
    ConvertOptions,
    Job,
    JobStatusResponse,
)
from .state import (
    is_job_terminal,
    can_transition_job,
)
from .ids import new_job_id
from .registry import JobRegistry

__all__ = [
    # Errors
    "JobError",
    "JobNotFoundError",
    "JobNotReadyError",
    "DuplicateJobError",
    "InvalidStateTransitionError",
    "UploadError",
    "MissingUploadError",
    "UploadTooLargeError",
    # Models
    "JobStatus",
    "ConvertOptions",
    "Job",
    "JobStatusResponse",
    # State validation
    "is_job_terminal",
    "can_transition_job",
    # Identity
    "new_job_id",
    # Registry
    "JobRegistry",
]
