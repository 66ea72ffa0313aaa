"""Job lifecycle exceptions."""

from .base import AegisError


class JobError(AegisError):
    """Base class for job store errors."""

    pass


class JobNotFoundError(JobError):
    """Raised when a job id is unknown."""

    def __init__(self, job_id: str):
        super().__init__(f"Analysis not found: {job_id}", details={"job_id": job_id})
        self.job_id = job_id


class JobNotReadyError(JobError):
    """Raised when a result is requested before the job has completed."""

    def __init__(self, job_id: str, status: str):
        super().__init__(
            f"Analysis not ready: {job_id}",
            details={"job_id": job_id, "status": status},
        )
        self.job_id = job_id
        self.status = status


class DuplicateJobError(JobError):
    """Raised when a job with the same id already exists."""

    def __init__(self, job_id: str):
        super().__init__(f"Analysis already exists: {job_id}", details={"job_id": job_id})
        self.job_id = job_id


class InvalidTransitionError(JobError):
    """Raised when a status change would break the job state machine."""

    def __init__(self, job_id: str, current: str, target: str):
        super().__init__(
            f"Invalid status transition for {job_id}: {current} -> {target}",
            details={"job_id": job_id, "current": current, "target": target},
        )
        self.job_id = job_id
        self.current = current
        self.target = target
