"""Tests for the clone/rewrite/branch/commit/push fix workflow."""

import re

import httpx
import pytest

from aegis_ai.exceptions import FixApplicationError, LineOutOfRangeError, SecurityError
from aegis_ai.vcs import FixApplier, GitHubClient, Location, commit_message, replace_line

from conftest import FakeOpener, FakeVCS

REPO_URL = "https://github.com/acme/shop.git"


@pytest.fixture
def fix(analysis_result):
    return analysis_result.auto_fixes[0]


def at(line, path="app.py"):
    return Location(path, line, "fix")


class TestReplaceLine:
    def test_replaces_one_line(self):
        assert replace_line("a\nb\nc\n", 2, "B") == "a\nB\nc\n"

    def test_keeps_crlf(self):
        assert replace_line("a\r\nb\r\n", 1, "A") == "A\r\nb\r\n"

    def test_last_line_without_newline(self):
        assert replace_line("a\nb", 2, "B") == "a\nB"

    def test_indentation_preserved(self):
        assert replace_line("def f():\n    x = 1\n", 2, "x = 2") == "def f():\n    x = 2\n"

    def test_explicit_indentation_wins(self):
        assert replace_line("    x = 1\n", 1, "  x = 2") == "  x = 2\n"

    @pytest.mark.parametrize("line", [0, 4, -1])
    def test_out_of_range(self, line):
        with pytest.raises(LineOutOfRangeError) as exc_info:
            replace_line("a\nb\nc\n", line, "x", "app.py")
        assert exc_info.value.total_lines == 3


class TestCommitMessage:
    def test_format(self, fix):
        message = commit_message(fix)
        assert message.splitlines()[0] == "Security fix: Hardcoded Database Password"
        assert f"Regulation: {fix.regulation}" in message
        assert message.endswith("Applied by Aegis AI")


class TestApply:
    def test_success_with_pull_request(self, fake_vcs, fake_opener, fix):
        outcome = FixApplier(fake_vcs, fake_opener).apply(REPO_URL, fix, at(4), "ghp_user")
        assert outcome.success
        assert outcome.pr_url == "https://github.com/acme/shop/pull/42"
        assert outcome.commit_sha == "0123456789abcdef0123456789abcdef01234567"
        assert outcome.message == f"Fix applied and pull request opened for branch {outcome.branch}"
        assert fake_vcs.calls == ["clone", "create_branch", "commit", "push"]
        assert fake_vcs.written["app.py"].splitlines()[3] == 'password = os.getenv("PASSWORD")'
        assert fake_vcs.written["app.py"].splitlines()[2] == "DEBUG = True"

    def test_only_target_line_changes(self, fake_vcs, fix):
        FixApplier(fake_vcs).apply(REPO_URL, fix, at(4))
        before = fake_vcs.files["app.py"].splitlines()
        after = fake_vcs.written["app.py"].splitlines()
        assert [i for i, (a, b) in enumerate(zip(before, after)) if a != b] == [3]
        assert fake_vcs.written["config/settings.yml"] == fake_vcs.files["config/settings.yml"]

    def test_branch_name(self, fake_vcs, fix):
        applier = FixApplier(fake_vcs, clock=lambda: 1_700_000_000)
        outcome = applier.apply(REPO_URL, fix, at(4))
        assert re.fullmatch(r"security-fix-1700000000-[0-9a-f]{6}", outcome.branch)

    def test_credential_reaches_clone_and_pr(self, fake_vcs, fake_opener, fix):
        FixApplier(fake_vcs, fake_opener).apply(REPO_URL, fix, at(4), "ghp_user")
        assert fake_vcs.clone_credentials == ["ghp_user"]
        request = fake_opener.requests[0]
        assert request["credential"] == "ghp_user"
        assert request["title"] == "Security fix: Hardcoded Database Password"
        assert "`app.py:4`" in request["body"]

    def test_pull_request_failure_is_not_fatal(self, fake_vcs, fix):
        opener = FakeOpener(error="Validation Failed")
        outcome = FixApplier(fake_vcs, opener).apply(REPO_URL, fix, at(4))
        assert outcome.success
        assert outcome.pr_url is None
        assert "Validation Failed" in outcome.note
        assert outcome.message == f"Fix applied and pushed to branch {outcome.branch}"

    @pytest.mark.parametrize(
        "repo_response, pulls_response, pr_url",
        [
            (httpx.Response(200, text="<html>maintenance</html>"), httpx.Response(201, json={"html_url": "u"}), "u"),
            (httpx.Response(200, json={"default_branch": "main"}), httpx.Response(201, text="created"), None),
        ],
    )
    def test_garbled_github_reply_is_not_fatal(self, fake_vcs, fix, repo_response, pulls_response, pr_url):
        def handler(request):
            return repo_response if request.method == "GET" else pulls_response

        github = GitHubClient(
            "ghs_service",
            "https://api.github.test",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        outcome = FixApplier(fake_vcs, github).apply(REPO_URL, fix, at(4))
        assert fake_vcs.calls == ["clone", "create_branch", "commit", "push"]
        assert outcome.success
        assert outcome.pr_url == pr_url
        assert (outcome.note is None) == (pr_url is not None)

    def test_no_opener(self, fake_vcs, fix):
        outcome = FixApplier(fake_vcs).apply(REPO_URL, fix, at(4))
        assert outcome.pr_url is None
        assert "no pull request service" in outcome.note
        assert outcome.to_dict()["note"] == outcome.note

    def test_working_copy_removed(self, fake_vcs, fix):
        FixApplier(fake_vcs).apply(REPO_URL, fix, at(4))
        assert not fake_vcs.clone_destinations[0].parent.exists()


class TestFatalSteps:
    @pytest.mark.parametrize(
        "fail_at, expected_calls",
        [
            ("clone", ["clone"]),
            ("create_branch", ["clone", "create_branch"]),
            ("commit", ["clone", "create_branch", "commit"]),
            ("push", ["clone", "create_branch", "commit", "push"]),
        ],
    )
    def test_failure_stops_workflow(self, fix, fake_opener, fail_at, expected_calls):
        vcs = FakeVCS(fail_at=fail_at)
        with pytest.raises(FixApplicationError):
            FixApplier(vcs, fake_opener).apply(REPO_URL, fix, at(4))
        assert vcs.calls == expected_calls
        assert fake_opener.requests == []

    def test_failure_removes_working_copy(self, fix):
        vcs = FakeVCS(fail_at="push")
        with pytest.raises(FixApplicationError):
            FixApplier(vcs).apply(REPO_URL, fix, at(4))
        assert not vcs.clone_destinations[0].parent.exists()

    def test_line_out_of_range_before_branching(self, fake_vcs, fix):
        with pytest.raises(LineOutOfRangeError):
            FixApplier(fake_vcs).apply(REPO_URL, fix, at(400))
        assert fake_vcs.calls == ["clone"]

    def test_missing_file(self, fake_vcs, fix):
        with pytest.raises(FixApplicationError) as exc_info:
            FixApplier(fake_vcs).apply(REPO_URL, fix, at(1, "config/database.yml"))
        assert exc_info.value.step == "locate file"

    @pytest.mark.parametrize("path", ["../outside.py", "config/../../etc/passwd", "."])
    def test_path_escape(self, fake_vcs, fix, path):
        with pytest.raises(SecurityError):
            FixApplier(fake_vcs).apply(REPO_URL, fix, at(1, path))
        assert fake_vcs.calls == ["clone"]
