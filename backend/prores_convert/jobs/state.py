"""
State transition validation and mutators for jobs.

Job lifecycle: PROCESSING → DONE | ERROR

INVARIANT: Terminal job states (DONE, ERROR) are immutable. Once a job
enters a terminal state, no state transition is allowed and progress is
frozen. Repeated status polls of a terminal job return identical results.

The mutators below are applied through JobRegistry.update(), which runs
them under the registry lock against a private copy of the job.
"""

from datetime import datetime
from typing import FrozenSet, Set, Tuple

from .models import Job, JobStatus
from .errors import InvalidStateTransitionError
from ..execution.progress import PROGRESS_COMPLETE, next_activity_progress


TERMINAL_JOB_STATES: FrozenSet[JobStatus] = frozenset({
    JobStatus.DONE,
    JobStatus.ERROR,
})


_JOB_TRANSITIONS: Set[Tuple[JobStatus, JobStatus]] = {
    (JobStatus.PROCESSING, JobStatus.DONE),
    (JobStatus.PROCESSING, JobStatus.ERROR),
}


def is_job_terminal(status: JobStatus) -> bool:
    """Check if a job status is terminal (immutable)."""
    return status in TERMINAL_JOB_STATES


def can_transition_job(from_status: JobStatus, to_status: JobStatus) -> bool:
    """
    Check if a job state transition is legal.

    Unlike a no-op update, re-entering a terminal state is rejected:
    a job finishes exactly once.

    Args:
        from_status: Current job status
        to_status: Target job status

    Returns:
        True if the transition is allowed, False otherwise
    """
    if is_job_terminal(from_status):
        return False

    return (from_status, to_status) in _JOB_TRANSITIONS


def validate_job_transition(from_status: JobStatus, to_status: JobStatus) -> None:
    """
    Validate a job state transition, raising an exception if illegal.

    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    if not can_transition_job(from_status, to_status):
        raise InvalidStateTransitionError("job", from_status.value, to_status.value)


# ============================================================================
# MUTATORS
# ============================================================================

def record_activity(job: Job) -> None:
    """Advance the activity heuristic. Ignored once the job is terminal."""
    if job.status != JobStatus.PROCESSING:
        return
    job.progress = next_activity_progress(job.progress)


def mark_done(job: Job) -> None:
    """
    Move a job to DONE with progress pinned to 100.

    Raises:
        InvalidStateTransitionError: If the job is already terminal
    """
    validate_job_transition(job.status, JobStatus.DONE)
    job.status = JobStatus.DONE
    job.progress = PROGRESS_COMPLETE
    job.error = None
    job.completed_at = datetime.now()


def mark_failed(job: Job, reason: str) -> None:
    """
    Move a job to ERROR with a human-readable reason.

    Progress is left where the heuristic stopped.

    Raises:
        InvalidStateTransitionError: If the job is already terminal
    """
    validate_job_transition(job.status, JobStatus.ERROR)
    job.status = JobStatus.ERROR
    job.error = reason
    job.completed_at = datetime.now()
