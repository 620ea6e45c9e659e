"""
Job-specific error types.

All errors inherit from JobError for easy catching.
Errors are explicit and provide actionable messages.
"""


class JobError(Exception):
    """Base exception for all job-related failures."""
    pass


class JobNotFoundError(JobError):
    """Raised when a job cannot be found in the registry."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class JobNotReadyError(JobError):
    """Raised when a job's output is requested before the job is done."""

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Job {job_id} is not ready (status: {status})")


class DuplicateJobError(JobError):
    """Raised when a job ID is registered twice. Indicates a logic error."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job with ID '{job_id}' already exists")


class InvalidStateTransitionError(JobError):
    """Raised when attempting an illegal state transition."""

    def __init__(self, entity_type: str, current_state: str, target_state: str):
        self.entity_type = entity_type
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid {entity_type} state transition: "
            f"{current_state} -> {target_state}"
        )


class UploadError(JobError):
    """Raised when an upload cannot be accepted. No job is created."""
    pass


class MissingUploadError(UploadError):
    """Raised when no file (or an empty file) was attached."""

    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class UploadTooLargeError(UploadError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"Uploaded file exceeds the {limit_bytes} byte limit")
