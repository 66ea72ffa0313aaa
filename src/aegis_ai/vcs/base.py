"""Interfaces the fix workflow and orchestrator depend on."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol


class VersionControl(Protocol):
    """Working-copy operations. Each raises FixApplicationError on failure."""

    def clone(self, url: str, destination: Path, credential: Optional[str] = None) -> None: ...

    def create_branch(self, repo_dir: Path, branch: str) -> None: ...

    def commit(self, repo_dir: Path, message: str) -> str: ...

    def push(self, repo_dir: Path, branch: str) -> None: ...


class PullRequestOpener(Protocol):
    """Opens a pull request for a pushed branch and returns its URL.

    Raises PullRequestCreationError on failure.
    """

    def open_pull_request(
        self,
        repo_url: str,
        branch: str,
        title: str,
        body: str,
        credential: Optional[str] = None,
    ) -> str: ...
