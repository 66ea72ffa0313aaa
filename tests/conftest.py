"""Shared test fixtures for Aegis AI tests."""

import json
from pathlib import Path
from typing import Optional

import pytest

from aegis_ai.autofix import AutoFixEngine
from aegis_ai.exceptions import FixApplicationError, PullRequestCreationError
from aegis_ai.models import AnalysisResult, AnalysisSummary, AutoFix, Finding, Severity
from aegis_ai.pipeline import AnalysisPipeline
from aegis_ai.providers import Completion
from aegis_ai.sampling import CodebaseSampler

SAMPLE_FILES = {
    "app.py": (
        "import os\n"
        "\n"
        "DEBUG = True\n"
        'password = "super_secret_123"\n'
        "\n"
        "def get_user(cursor, user_id):\n"
        '    return cursor.execute("SELECT * FROM users WHERE id = " + user_id)\n'
    ),
    "config/settings.yml": "database:\n  password: \"hunter2\"\n",
    "static/index.js": "console.log('hello');\n",
    "README.md": "# Payments service\nHandles card transactions.\n",
}


def make_finding(
    severity: Severity = Severity.CRITICAL,
    index: int = 0,
    title: str = "Hardcoded Database Password",
    file_path: str = "app.py",
    line_number: Optional[int] = 4,
    code_snippet: str = 'password = "super_secret_123"',
    confidence: float = 0.95,
) -> Finding:
    return Finding(
        id=f"{severity.value}-{index}",
        severity=severity,
        title=title,
        description="Secret committed to source",
        impact="Credential exposure",
        file_path=file_path,
        line_number=line_number,
        confidence=confidence,
        code_snippet=code_snippet,
    )


def completion_payload(**overrides) -> str:
    """A well-formed model response wrapped in chatter."""
    data = {
        "critical_risks": [
            {
                "file": "app.py",
                "line": 4,
                "title": "Hardcoded Database Password",
                "description": "Password literal in source",
                "impact": "Database compromise",
                "confidence": 0.97,
                "code_snippet": 'password = "super_secret_123"',
                "compliance_violations": ["PCI-DSS Requirement 8"],
            }
        ],
        "high_risks": [
            {
                "file_path": "app.py",
                "line_number": 3,
                "title": "Debug mode enabled",
                "description": "Debug left on",
                "impact": "Information disclosure",
                "confidence": 0.8,
                "code_snippet": "DEBUG = True",
            }
        ],
        "medium_risks": [
            {
                "file": "static/index.js",
                "line": 1,
                "title": "Verbose logging",
                "confidence": 0.4,
                "code_snippet": "console.log('hello');",
            }
        ],
        "explanations": ["Two secrets and a debug flag."],
        "summary": {"total_critical": 9, "total_high": 9, "total_medium": 9},
    }
    data.update(overrides)
    return "Here is the analysis you asked for:\n" + json.dumps(data) + "\nLet me know!"


def write_files(root: Path, files: dict) -> Path:
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


class FakeVCS:
    """VersionControl double that records calls and materializes a checkout."""

    def __init__(self, files: Optional[dict] = None, fail_at: Optional[str] = None):
        self.files = SAMPLE_FILES if files is None else files
        self.fail_at = fail_at
        self.calls: list[str] = []
        self.clone_credentials: list[Optional[str]] = []
        self.clone_destinations: list[Path] = []
        self.commit_messages: list[str] = []
        self.written: dict[str, str] = {}

    def _step(self, name: str, step: str) -> None:
        self.calls.append(name)
        if self.fail_at == name:
            raise FixApplicationError(step, f"simulated {name} failure")

    def clone(self, url, destination, credential=None):
        self._step("clone", "clone repository")
        self.clone_credentials.append(credential)
        self.clone_destinations.append(Path(destination))
        write_files(Path(destination), self.files)

    def create_branch(self, repo_dir, branch):
        self._step("create_branch", "create branch")

    def commit(self, repo_dir, message):
        self._step("commit", "commit changes")
        self.commit_messages.append(message)
        for rel in self.files:
            self.written[rel] = (Path(repo_dir) / rel).read_text(encoding="utf-8")
        return "0123456789abcdef0123456789abcdef01234567"

    def push(self, repo_dir, branch):
        self._step("push", "push branch")


class FakeOpener:
    """PullRequestOpener double; fails when ``error`` is set."""

    def __init__(self, url: str = "https://github.com/acme/shop/pull/42", error: Optional[str] = None):
        self.url = url
        self.error = error
        self.requests: list[dict] = []

    def open_pull_request(self, repo_url, branch, title, body, credential=None):
        self.requests.append(
            {"repo_url": repo_url, "branch": branch, "title": title, "body": body, "credential": credential}
        )
        if self.error:
            raise PullRequestCreationError(branch, self.error, status_code=422)
        return self.url


class FakeProviderClient:
    """ProviderClient double returning canned completion text."""

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None):
        self.text = completion_payload() if text is None else text
        self.error = error
        self.prompts: list[str] = []
        self.closed = False

    def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return Completion(text=self.text, backend="fake", model="fake-model", attempts=1)

    def close(self):
        self.closed = True


@pytest.fixture
def sample_repo(tmp_path):
    """A small checkout with a few obvious security problems."""
    return write_files(tmp_path / "repo", SAMPLE_FILES)


@pytest.fixture
def fake_vcs():
    return FakeVCS()


@pytest.fixture
def fake_opener():
    return FakeOpener()


@pytest.fixture
def fake_client():
    return FakeProviderClient()


@pytest.fixture
def pipeline(fake_client):
    return AnalysisPipeline(CodebaseSampler(), fake_client, AutoFixEngine())


@pytest.fixture
def analysis_result():
    """A completed result with one templated fix located at app.py:4."""
    critical = make_finding()
    high = make_finding(
        Severity.HIGH, 0, title="Debug mode enabled", line_number=3, code_snippet="DEBUG = True"
    )
    fixes = AutoFixEngine().generate_fixes([critical, high])
    return AnalysisResult(
        critical_risks=[critical],
        high_risks=[high],
        auto_fixes=fixes,
        summary=AnalysisSummary(total_critical=1, total_high=1),
    )


@pytest.fixture
def unlocated_fix():
    return AutoFix(
        finding_id="critical-9",
        risk_title="Hardcoded Database Password",
        original='password = "x"',
        fixed='password = os.getenv("PASSWORD")',
        explanation="Replace hardcoded password with environment variable",
        regulation="GDPR Article 32",
    )
