"""Minimal GitHub REST client: pull requests and PR comments."""

from __future__ import annotations

import re
from typing import Any, Optional

import httpx

from ..exceptions import PullRequestCreationError
from ..logging_config import get_logger, redact

logger = get_logger(__name__)

_SLUG_RE = re.compile(
    r"^(?:https?://[^/]+/|git@[^:]+:)(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?/?$"
)
_PR_URL_RE = re.compile(r"/(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)/pull/(?P<number>\d+)")


def parse_repo_slug(repo_url: str) -> str:
    """``https://github.com/acme/shop.git`` -> ``acme/shop``.

    Raises:
        ValueError: If the URL does not name an owner and repository
    """
    match = _SLUG_RE.match(repo_url.strip())
    if not match:
        raise ValueError(f"Cannot determine repository from URL: {repo_url}")
    return f"{match.group('owner')}/{match.group('repo')}"


def parse_pull_request_url(pr_url: str) -> tuple[str, int]:
    """``https://github.com/acme/shop/pull/7`` -> (``acme/shop``, 7)."""
    match = _PR_URL_RE.search(pr_url)
    if not match:
        raise ValueError(f"Cannot determine pull request from URL: {pr_url}")
    return f"{match.group('owner')}/{match.group('repo')}", int(match.group("number"))


class GitHubClient:
    """PullRequestOpener and comment poster for the GitHub REST API.

    ``token`` is the service token used for comments; fix pull requests
    are opened with the caller's credential when one is given.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        *,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout, trust_env=False)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _headers(self, token: Optional[str]) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, token: Optional[str], **kwargs: Any) -> httpx.Response:
        return self._client.request(
            method, f"{self.api_url}{path}", headers=self._headers(token), **kwargs
        )

    def open_pull_request(
        self,
        repo_url: str,
        branch: str,
        title: str,
        body: str,
        credential: Optional[str] = None,
    ) -> str:
        """Open a pull request from *branch* into the default branch.

        Raises:
            PullRequestCreationError: On any network or API failure
        """
        token = credential or self.token
        try:
            slug = parse_repo_slug(repo_url)
        except ValueError as e:
            raise PullRequestCreationError(branch, str(e))

        try:
            base = self._default_branch(slug, token)
            response = self._request(
                "POST",
                f"/repos/{slug}/pulls",
                token,
                json={"title": title, "head": branch, "base": base, "body": body},
            )
        except httpx.HTTPError as e:
            raise PullRequestCreationError(branch, redact(str(e), (token,)))

        if response.status_code != 201:
            raise PullRequestCreationError(
                branch,
                _error_message(response),
                status_code=response.status_code,
            )
        payload = _json_object(response)
        url = payload.get("html_url") if payload is not None else None
        if not isinstance(url, str) or not url:
            raise PullRequestCreationError(
                branch,
                "Unexpected response body from pull request API",
                status_code=response.status_code,
            )
        logger.info("Opened pull request %s", url)
        return url

    def _default_branch(self, slug: str, token: Optional[str]) -> str:
        response = self._request("GET", f"/repos/{slug}", token)
        payload = _json_object(response) if response.is_success else None
        branch = payload.get("default_branch") if payload is not None else None
        if isinstance(branch, str) and branch:
            return branch
        return "main"

    def post_comment(self, repo: str, number: int, body: str) -> None:
        """Post *body* on pull request *number* of *repo* (``owner/name``).

        Raises:
            httpx.HTTPError: If the request fails or GitHub rejects it
        """
        response = self._request(
            "POST", f"/repos/{repo}/issues/{number}/comments", self.token, json={"body": body}
        )
        response.raise_for_status()
        logger.info("Posted analysis comment on %s#%d", repo, number)


def _json_object(response: httpx.Response) -> Optional[dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code}"
