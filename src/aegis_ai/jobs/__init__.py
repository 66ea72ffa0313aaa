"""Job lifecycle: the in-memory store and the orchestrator driving it."""

from .orchestrator import Orchestrator, PullRequestEvent, new_manual_job_id
from .store import ALLOWED_TRANSITIONS, JobStore

__all__ = [
    "ALLOWED_TRANSITIONS",
    "JobStore",
    "Orchestrator",
    "PullRequestEvent",
    "new_manual_job_id",
]
