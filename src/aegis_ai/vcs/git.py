"""Git working-copy operations via subprocess."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from ..exceptions import FixApplicationError
from ..logging_config import get_logger, redact

logger = get_logger(__name__)


def with_credential(url: str, credential: Optional[str]) -> str:
    """Embed *credential* as the userinfo of an https clone URL.

    Non-https URLs (local paths, ssh) are returned unchanged.
    """
    if not credential:
        return url
    parts = urlsplit(url)
    if parts.scheme != "https" or not parts.hostname:
        return url
    netloc = f"x-access-token:{credential}@{parts.hostname}"
    if parts.port:
        netloc += f":{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class GitCLI:
    """VersionControl backed by the ``git`` executable.

    Every command runs with a timeout and without terminal prompts; a
    failure raises FixApplicationError naming the workflow step.
    """

    def __init__(
        self,
        timeout: int = 300,
        clone_depth: int = 1,
        author_name: str = "Aegis AI",
        author_email: str = "aegis-ai@users.noreply.github.com",
    ):
        self.timeout = timeout
        self.clone_depth = clone_depth
        self.author_name = author_name
        self.author_email = author_email

    def clone(self, url: str, destination: Path, credential: Optional[str] = None) -> None:
        cmd = ["git", "clone"]
        if self.clone_depth:
            cmd += ["--depth", str(self.clone_depth)]
        cmd += [with_credential(url, credential), str(destination)]
        self._run(cmd, step="clone repository", secrets=(credential,))
        logger.info("Cloned %s", redact(url, (credential,)))

    def create_branch(self, repo_dir: Path, branch: str) -> None:
        self._run(["git", "-C", str(repo_dir), "checkout", "-b", branch], step="create branch")

    def commit(self, repo_dir: Path, message: str) -> str:
        """Stage everything, commit, and return the new commit SHA."""
        repo = str(repo_dir)
        self._run(["git", "-C", repo, "add", "-A"], step="commit changes")
        self._run(
            [
                "git", "-C", repo,
                "-c", f"user.name={self.author_name}",
                "-c", f"user.email={self.author_email}",
                "commit", "-m", message,
            ],
            step="commit changes",
        )
        result = self._run(["git", "-C", repo, "rev-parse", "HEAD"], step="commit changes")
        return result.stdout.strip()

    def push(self, repo_dir: Path, branch: str) -> None:
        self._run(
            ["git", "-C", str(repo_dir), "push", "origin", f"{branch}:{branch}"],
            step="push branch",
        )

    def _run(
        self, cmd: list[str], step: str, secrets: tuple[Optional[str], ...] = ()
    ) -> subprocess.CompletedProcess:
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError:
            raise FixApplicationError(step, "git executable not found")
        except subprocess.TimeoutExpired:
            raise FixApplicationError(step, f"git timed out after {self.timeout}s")

        if result.returncode != 0:
            stderr = redact(result.stderr.strip(), secrets)
            logger.warning("git failed during %s: %s", step, stderr)
            raise FixApplicationError(step, stderr or f"git exited with {result.returncode}")
        return result
