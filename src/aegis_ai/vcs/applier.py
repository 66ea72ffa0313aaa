"""Apply one auto-fix to a fresh working copy and push it as a branch."""

from __future__ import annotations

import secrets
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional

from ..exceptions import (
    FixApplicationError,
    LineOutOfRangeError,
    PullRequestCreationError,
    SecurityError,
)
from ..logging_config import get_logger
from ..models import AutoFix, FixApplicationResult
from .base import PullRequestOpener, VersionControl
from .resolve import Location

logger = get_logger(__name__)


def commit_message(fix: AutoFix) -> str:
    return (
        f"Security fix: {fix.risk_title}\n\n"
        f"{fix.explanation}\n\n"
        f"Regulation: {fix.regulation}\n"
        "Applied by Aegis AI"
    )


def pull_request_body(fix: AutoFix, location: Location) -> str:
    return "\n".join([
        "## Automated security fix",
        "",
        f"**Risk:** {fix.risk_title}",
        f"**Location:** `{location.file_path}:{location.line_number}`",
        f"**Regulation:** {fix.regulation}",
        "",
        fix.explanation,
        "",
        "**Before:**",
        "```",
        fix.original,
        "```",
        "",
        "**After:**",
        "```",
        fix.fixed,
        "```",
        "",
        "_Applied by Aegis AI. Review before merging._",
    ])


def replace_line(content: str, line_number: int, replacement: str, file_path: str = "") -> str:
    """Replace the 1-based *line_number* of *content* with *replacement*.

    The original line ending is kept, and so is its indentation when the
    replacement has none of its own.

    Raises:
        LineOutOfRangeError: If the line does not exist
    """
    lines = content.splitlines(keepends=True)
    if not 1 <= line_number <= len(lines):
        raise LineOutOfRangeError(file_path, line_number, len(lines))

    old = lines[line_number - 1]
    body = old.rstrip("\r\n")
    ending = old[len(body):]
    indent = body[: len(body) - len(body.lstrip())]
    if indent and replacement == replacement.lstrip():
        replacement = indent + replacement
    lines[line_number - 1] = replacement + ending
    return "".join(lines)


class FixApplier:
    """Clone, rewrite one line, branch, commit, push, then try to open a PR.

    The first five steps are fatal: each failure raises and nothing after
    it runs. Opening the pull request is best-effort and only adds a note.
    The temporary working copy is removed on every path.
    """

    def __init__(
        self,
        vcs: VersionControl,
        opener: Optional[PullRequestOpener] = None,
        *,
        branch_prefix: str = "security-fix",
        clock: Callable[[], float] = time.time,
    ):
        self.vcs = vcs
        self.opener = opener
        self.branch_prefix = branch_prefix
        self.clock = clock

    def new_branch_name(self) -> str:
        return f"{self.branch_prefix}-{int(self.clock())}-{secrets.token_hex(3)}"

    def apply(
        self,
        repo_url: str,
        fix: AutoFix,
        location: Location,
        credential: Optional[str] = None,
    ) -> FixApplicationResult:
        branch = self.new_branch_name()
        logger.info(
            "Applying fix for '%s' at %s:%d on %s",
            fix.risk_title, location.file_path, location.line_number, branch,
        )

        with tempfile.TemporaryDirectory(prefix="aegis-fix-") as tmp:
            workdir = Path(tmp) / "repo"
            self.vcs.clone(repo_url, workdir, credential)
            self._rewrite(workdir, location, fix)
            self.vcs.create_branch(workdir, branch)
            commit_sha = self.vcs.commit(workdir, commit_message(fix))
            self.vcs.push(workdir, branch)

        pr_url, note = self._open_pull_request(repo_url, branch, fix, location, credential)
        message = (
            f"Fix applied and pull request opened for branch {branch}"
            if pr_url
            else f"Fix applied and pushed to branch {branch}"
        )
        return FixApplicationResult(
            success=True,
            message=message,
            branch=branch,
            commit_sha=commit_sha,
            pr_url=pr_url,
            note=note,
        )

    def _rewrite(self, workdir: Path, location: Location, fix: AutoFix) -> None:
        target = self._contained_path(workdir, location.file_path)
        if not target.is_file():
            raise FixApplicationError("locate file", f"{location.file_path} does not exist")

        try:
            content = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FixApplicationError("apply fix to file", str(e))

        updated = replace_line(content, location.line_number, fix.fixed, location.file_path)

        try:
            target.write_text(updated, encoding="utf-8")
        except OSError as e:
            raise FixApplicationError("apply fix to file", str(e))

    @staticmethod
    def _contained_path(workdir: Path, file_path: str) -> Path:
        root = workdir.resolve()
        target = (root / file_path.strip().lstrip("/")).resolve()
        try:
            target.relative_to(root)
        except ValueError:
            raise SecurityError("Fix target escapes the working copy", Path(file_path))
        if target == root:
            raise SecurityError("Fix target is the working copy itself", Path(file_path))
        return target

    def _open_pull_request(
        self,
        repo_url: str,
        branch: str,
        fix: AutoFix,
        location: Location,
        credential: Optional[str],
    ) -> tuple[Optional[str], Optional[str]]:
        if self.opener is None:
            return None, "Pull request not opened: no pull request service configured"
        try:
            url = self.opener.open_pull_request(
                repo_url,
                branch,
                f"Security fix: {fix.risk_title}",
                pull_request_body(fix, location),
                credential,
            )
        except PullRequestCreationError as e:
            logger.warning("Pull request for %s not opened: %s", branch, e.reason)
            return None, f"Branch {branch} was pushed but the pull request could not be opened: {e.reason}"
        return url or None, None
