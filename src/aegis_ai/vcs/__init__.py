"""Version control: git working copies, GitHub API and the fix workflow."""

from .applier import FixApplier, commit_message, replace_line
from .base import PullRequestOpener, VersionControl
from .git import GitCLI, with_credential
from .github import GitHubClient, parse_pull_request_url, parse_repo_slug
from .resolve import Location, guess_path_from_title, resolve_location

__all__ = [
    "FixApplier",
    "GitCLI",
    "GitHubClient",
    "Location",
    "PullRequestOpener",
    "VersionControl",
    "commit_message",
    "guess_path_from_title",
    "parse_pull_request_url",
    "parse_repo_slug",
    "replace_line",
    "resolve_location",
    "with_credential",
]
