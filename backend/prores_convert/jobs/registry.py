"""
In-memory job registry.

The registry provides:
- Job storage and retrieval by ID
- Atomic per-job state updates
- Listing and counting jobs

One instance is created per application and shared by the request
handlers and the supervisor threads. Jobs are kept for the lifetime of
the process; there is no eviction, so memory grows with every
submission.
"""

import threading
from typing import Callable, Dict, List, Optional

from .models import Job
from .errors import DuplicateJobError, JobNotFoundError


JobMutator = Callable[[Job], None]


class JobRegistry:
    """
    Thread-safe in-memory registry for job tracking.

    Callers always receive copies. Stored jobs are only changed through
    update(), which swaps in a fully mutated copy so readers never see a
    half-applied transition.
    """

    def __init__(self):
        # job_id -> Job
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, job: Job) -> None:
        """
        Add a job to the registry.

        Args:
            job: The job to add

        Raises:
            DuplicateJobError: If a job with the same ID already exists
        """
        with self._lock:
            if job.id in self._jobs:
                raise DuplicateJobError(job.id)
            self._jobs[job.id] = job.model_copy(deep=True)

    def get(self, job_id: str) -> Optional[Job]:
        """
        Retrieve a snapshot of a job by ID.

        Returns:
            A copy of the job if found, None otherwise
        """
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job is not None else None

    def get_or_raise(self, job_id: str) -> Job:
        """
        Retrieve a job by ID, raising an exception if not found.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        job = self.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def update(self, job_id: str, mutator: JobMutator) -> Optional[Job]:
        """
        Atomically apply a mutation to a stored job.

        The mutator runs against a copy under the registry lock. If it
        raises, the stored job is left untouched and the exception
        propagates.

        Args:
            job_id: The job ID
            mutator: Callable that modifies the job in place

        Returns:
            Snapshot of the updated job, or None if the job no longer exists
        """
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None

            updated = current.model_copy(deep=True)
            mutator(updated)
            self._jobs[job_id] = updated
            return updated.model_copy(deep=True)

    def remove(self, job_id: str) -> bool:
        """
        Remove a job from the registry.

        Returns:
            True if a job was removed, False if it did not exist
        """
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def list_jobs(self) -> List[Job]:
        """
        List all jobs in the registry.

        Returns:
            Copies of all jobs, ordered by creation time (newest first)
        """
        with self._lock:
            jobs = [job.model_copy(deep=True) for job in self._jobs.values()]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return jobs

    def count(self) -> int:
        """Get the total number of jobs in the registry."""
        with self._lock:
            return len(self._jobs)

    def clear(self) -> None:
        """
        Clear all jobs from the registry.

        Useful for testing or resetting state.
        """
        with self._lock:
            self._jobs.clear()
