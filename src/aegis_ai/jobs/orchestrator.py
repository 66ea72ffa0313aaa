"""Job entry points: manual and webhook submissions, fix application.

Submissions create and start the job before returning, then hand the
clone-and-analyze work to a thread pool. Fix application runs
synchronously in the caller.
"""

from __future__ import annotations

import tempfile
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from ..config import AegisConfig
from ..exceptions import DuplicateJobError, FixIndexInvalidError
from ..logging_config import get_logger, redact
from ..models import AnalysisJob, AnalysisResult, FixApplicationResult, JobKind, JobStatus, Page
from ..pipeline import AnalysisPipeline
from ..reporting import render_pr_comment
from ..vcs import FixApplier, GitCLI, GitHubClient, VersionControl, parse_repo_slug, resolve_location
from .store import DEFAULT_PAGE_LIMIT, JobStore

logger = get_logger(__name__)


def new_manual_job_id() -> str:
    return f"analysis_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class PullRequestEvent:
    """The fields of a pull-request webhook payload the service uses."""

    action: str
    number: int
    repo: str  # owner/name
    clone_url: str
    html_url: str = ""

    @property
    def job_id(self) -> str:
        owner, _, name = self.repo.partition("/")
        return f"pr-{owner}.{name}.{self.number}"

    @classmethod
    def from_payload(cls, payload: Any) -> "PullRequestEvent":
        """Build an event from a decoded webhook body.

        Raises:
            ValueError: If required fields are missing or mistyped
        """
        if not isinstance(payload, dict):
            raise ValueError("Webhook payload must be a JSON object")

        action = payload.get("action")
        pull_request = payload.get("pull_request") or {}
        repository = payload.get("repository") or {}
        number = payload.get("number", pull_request.get("number"))
        clone_url = repository.get("clone_url")

        if not isinstance(action, str) or not action:
            raise ValueError("Webhook payload has no action")
        if not isinstance(number, int) or isinstance(number, bool):
            raise ValueError("Webhook payload has no pull request number")
        if not isinstance(clone_url, str) or not clone_url:
            raise ValueError("Webhook payload has no repository clone_url")

        repo = repository.get("full_name")
        if not isinstance(repo, str) or "/" not in repo:
            repo = parse_repo_slug(clone_url)

        return cls(
            action=action,
            number=number,
            repo=repo,
            clone_url=clone_url,
            html_url=str(pull_request.get("html_url") or ""),
        )


class Orchestrator:
    """Runs analysis jobs in the background and applies fixes on request."""

    def __init__(
        self,
        store: JobStore,
        pipeline: AnalysisPipeline,
        vcs: VersionControl,
        applier: FixApplier,
        *,
        github: Optional[GitHubClient] = None,
        workers: int = 4,
        id_factory: Callable[[], str] = new_manual_job_id,
    ):
        self.store = store
        self.pipeline = pipeline
        self.vcs = vcs
        self.applier = applier
        self.github = github
        self.id_factory = id_factory
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="aegis-job")
        self._futures: dict[str, Future] = {}

    @classmethod
    def from_config(cls, config: AegisConfig) -> "Orchestrator":
        vcs = GitCLI(
            timeout=config.git_timeout_seconds,
            clone_depth=config.clone_depth,
            author_name=config.git_author_name,
            author_email=config.git_author_email,
        )
        github = GitHubClient(config.github_token, config.github_api_url)
        return cls(
            JobStore(),
            AnalysisPipeline.from_config(config),
            vcs,
            FixApplier(vcs, github, branch_prefix=config.fix_branch_prefix),
            github=github,
            workers=config.analysis_workers,
        )

    # Submission

    def submit_manual(self, repo_url: str) -> AnalysisJob:
        job = AnalysisJob(id=self.id_factory(), kind=JobKind.MANUAL, repo_url=repo_url)
        return self._launch(job)

    def submit_webhook(self, event: PullRequestEvent) -> Optional[AnalysisJob]:
        """Start a job for an ``opened`` event; other actions return None.

        Raises:
            DuplicateJobError: If the event was already delivered; no new
                work is started
        """
        if event.action != "opened":
            logger.debug("Ignoring pull request action '%s'", event.action)
            return None

        job = AnalysisJob(
            id=event.job_id,
            kind=JobKind.WEBHOOK,
            repo_url=event.clone_url,
            pull_request_number=event.number,
            pull_request_url=event.html_url or None,
        )
        try:
            return self._launch(job, event)
        except DuplicateJobError:
            logger.info("Job %s already exists; ignoring redelivery", job.id)
            raise

    def _launch(self, job: AnalysisJob, event: Optional[PullRequestEvent] = None) -> AnalysisJob:
        self.store.create(job)
        started = self.store.start(job.id)
        future = self._executor.submit(self._run, job.id, job.repo_url, event)
        self._futures[job.id] = future
        future.add_done_callback(lambda _: self._futures.pop(job.id, None))
        logger.info("Started %s analysis %s for %s", job.kind.value, job.id, redact(job.repo_url))
        return started

    def _run(self, job_id: str, repo_url: str, event: Optional[PullRequestEvent]) -> None:
        try:
            with tempfile.TemporaryDirectory(prefix="aegis-scan-") as tmp:
                checkout = Path(tmp) / "repo"
                self.vcs.clone(repo_url, checkout)
                result = self.pipeline.run(checkout)
        except Exception as e:
            logger.error("Analysis %s failed: %s", job_id, redact(str(e)))
            self.store.fail(job_id, str(e))
            return

        self.store.complete(job_id, result)
        if event is not None:
            self._report(event, result)

    def _report(self, event: PullRequestEvent, result: AnalysisResult) -> None:
        body = render_pr_comment(result)
        if self.github is None or not self.github.token:
            logger.info("No GitHub token configured; comment for %s:\n%s", event.job_id, body)
            return
        try:
            self.github.post_comment(event.repo, event.number, body)
        except httpx.HTTPError as e:
            logger.warning("Could not post comment on %s: %s", event.job_id, e)

    # Reads

    def wait(self, job_id: str, timeout: Optional[float] = None) -> AnalysisJob:
        """Block until the background work for *job_id* has finished.

        Finished work is no longer tracked; the stored job is returned as is.
        """
        future = self._futures.get(job_id)
        if future is not None:
            future.result(timeout=timeout)
        return self.store.get(job_id)

    def status(self, job_id: str) -> JobStatus:
        return self.store.status(job_id)

    def get(self, job_id: str) -> AnalysisJob:
        return self.store.get(job_id)

    def result(self, job_id: str) -> AnalysisResult:
        return self.store.result(job_id)

    def list_completed(self, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Page:
        return self.store.list_completed(page, limit)

    # Fixes

    def apply_fix(
        self, job_id: str, fix_index: int, credential: Optional[str] = None
    ) -> FixApplicationResult:
        """Apply auto-fix *fix_index* of a completed job.

        Raises:
            JobNotFoundError: If the job is unknown
            JobNotReadyError: If the job has not completed
            FixIndexInvalidError: If no auto-fix has that index
            FixApplicationError: If a fatal workflow step fails
            LineOutOfRangeError: If the target line does not exist
        """
        result = self.store.result(job_id)
        if not 0 <= fix_index < len(result.auto_fixes):
            raise FixIndexInvalidError(fix_index, len(result.auto_fixes))

        fix = result.auto_fixes[fix_index]
        location = resolve_location(fix, result)
        logger.info(
            "Resolved fix %d of %s to %s:%d (%s)",
            fix_index, job_id, location.file_path, location.line_number, location.strategy,
        )
        job = self.store.get(job_id)
        return self.applier.apply(job.repo_url, fix, location, credential)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        self.pipeline.close()
        if self.github is not None:
            self.github.close()
