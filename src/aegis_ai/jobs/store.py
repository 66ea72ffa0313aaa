"""In-memory, thread-safe job registry with a compare-and-swap state machine."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

from ..exceptions import (
    DuplicateJobError,
    InvalidTransitionError,
    JobNotFoundError,
    JobNotReadyError,
)
from ..logging_config import get_logger
from ..models import AnalysisJob, AnalysisResult, JobStatus, Page, utc_now

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


class _Record:
    __slots__ = ("lock", "job")

    def __init__(self, job: AnalysisJob) -> None:
        self.lock = threading.Lock()
        self.job = job


class JobStore:
    """Owns every job record for the life of the process.

    Thread-safe: a short index lock guards lookup and insertion, and each
    record has its own lock for transitions and reads. Readers always get
    a copy, never the live record.
    """

    def __init__(self) -> None:
        self._index_lock = threading.Lock()
        self._records: dict[str, _Record] = {}

    def __len__(self) -> int:
        with self._index_lock:
            return len(self._records)

    def create(self, job: AnalysisJob) -> AnalysisJob:
        """Insert *job* as Pending unless its id is taken.

        Raises:
            DuplicateJobError: If a job with the same id exists
        """
        job = replace(job, status=JobStatus.PENDING, result=None, error=None)
        with self._index_lock:
            if job.id in self._records:
                raise DuplicateJobError(job.id)
            self._records[job.id] = _Record(job)
        logger.debug("Created job %s (%s)", job.id, job.kind.value)
        return replace(job)

    def transition(
        self,
        job_id: str,
        expected: JobStatus,
        target: JobStatus,
        *,
        result: Optional[AnalysisResult] = None,
        error: Optional[str] = None,
    ) -> AnalysisJob:
        """Move *job_id* from *expected* to *target* atomically.

        Raises:
            JobNotFoundError: If the job is unknown
            InvalidTransitionError: If the job is not in *expected* or the
                state machine forbids *target*
        """
        record = self._record(job_id)
        with record.lock:
            current = record.job.status
            if current is not expected or target not in ALLOWED_TRANSITIONS[current]:
                raise InvalidTransitionError(job_id, current.value, target.value)

            changes: dict = {"status": target, "updated_at": utc_now()}
            if target is JobStatus.COMPLETED:
                changes["result"] = result
            if target is JobStatus.FAILED:
                changes["error"] = error
            record.job = replace(record.job, **changes)
            snapshot = replace(record.job)

        logger.info("Job %s: %s -> %s", job_id, current.value, target.value)
        return snapshot

    def start(self, job_id: str) -> AnalysisJob:
        return self.transition(job_id, JobStatus.PENDING, JobStatus.PROCESSING)

    def complete(self, job_id: str, result: AnalysisResult) -> AnalysisJob:
        return self.transition(job_id, JobStatus.PROCESSING, JobStatus.COMPLETED, result=result)

    def fail(self, job_id: str, error: str) -> AnalysisJob:
        return self.transition(job_id, JobStatus.PROCESSING, JobStatus.FAILED, error=error)

    def get(self, job_id: str) -> AnalysisJob:
        record = self._record(job_id)
        with record.lock:
            return replace(record.job)

    def status(self, job_id: str) -> JobStatus:
        return self.get(job_id).status

    def result(self, job_id: str) -> AnalysisResult:
        """Result of a completed job.

        Raises:
            JobNotFoundError: If the job is unknown
            JobNotReadyError: If the job has not completed
        """
        job = self.get(job_id)
        if job.status is not JobStatus.COMPLETED or job.result is None:
            raise JobNotReadyError(job_id, job.status.value)
        return job.result

    def list_completed(self, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Page:
        """One page of completed jobs, oldest first.

        A page below 1 becomes 1; a limit outside 1..100 becomes the default.
        """
        if page < 1:
            page = 1
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            limit = DEFAULT_PAGE_LIMIT

        with self._index_lock:
            records = list(self._records.values())

        completed = []
        for record in records:
            with record.lock:
                if record.job.status is JobStatus.COMPLETED:
                    completed.append(replace(record.job))
        completed.sort(key=lambda job: (job.created_at, job.id))

        offset = (page - 1) * limit
        return Page(items=completed[offset:offset + limit], page=page, limit=limit, total=len(completed))

    def _record(self, job_id: str) -> _Record:
        with self._index_lock:
            record = self._records.get(job_id)
        if record is None:
            raise JobNotFoundError(job_id)
        return record
