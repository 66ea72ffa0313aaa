"""Data models shared by the analysis pipeline, job store and fix applier."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobKind(str, Enum):
    MANUAL = "manual"
    WEBHOOK = "webhook"


class ResultOrigin(str, Enum):
    """Whether findings came from parsed model output or a synthetic placeholder."""

    NORMALIZED = "normalized"
    FALLBACK = "fallback"


# File paths the model uses when it cannot name a real location
UNKNOWN_LOCATIONS = frozenset({"", "unknown", ":0", "n/a", "ai analysis"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Finding:
    """A single security risk reported by the provider."""

    id: str
    severity: Severity
    title: str
    description: str = ""
    impact: str = ""
    file_path: str = ""
    line_number: Optional[int] = None
    confidence: float = 0.0
    code_snippet: str = ""
    compliance_violations: tuple[str, ...] = ()

    @property
    def has_location(self) -> bool:
        return self.file_path.strip().lower() not in UNKNOWN_LOCATIONS

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "file": self.file_path,
            "line": self.line_number or 0,
            "file_path": self.file_path,
            "line_number": self.line_number or 0,
            "confidence": self.confidence,
            "code_snippet": self.code_snippet,
            "compliance_violations": list(self.compliance_violations),
        }


@dataclass(frozen=True)
class AutoFix:
    """A mechanical remediation proposal for one finding.

    ``finding_id`` is the authoritative link back to the finding;
    ``risk_title`` is kept for display and best-effort lookup only.
    """

    finding_id: str
    risk_title: str
    original: str
    fixed: str
    explanation: str
    regulation: str
    strategy: str = ""
    file_path: str = ""
    line_number: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "finding_id": self.finding_id,
            "risk_title": self.risk_title,
            "original": self.original,
            "fixed": self.fixed,
            "explanation": self.explanation,
            "regulation": self.regulation,
            "strategy": self.strategy,
            "file_path": self.file_path,
            "line_number": self.line_number or 0,
        }


@dataclass
class AnalysisSummary:
    total_critical: int = 0
    total_high: int = 0
    total_medium: int = 0
    business_type: str = ""
    compliance: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_critical": self.total_critical,
            "total_high": self.total_high,
            "total_medium": self.total_medium,
            "business_type": self.business_type,
            "compliance_requirements": list(self.compliance),
        }


@dataclass
class ArchitectureAnalysis:
    overview: str = ""
    strengths: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class ComplianceAnalysis:
    standards: list[str] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class AnalysisContext:
    """What the sampler and context inference know before asking the model."""

    languages: list[str] = field(default_factory=list)
    business_type: str = "technology"
    requirements: list[str] = field(default_factory=list)


@dataclass
class AnalysisResult:
    """Findings grouped by tier plus the auto-fixes derived from them."""

    critical_risks: list[Finding] = field(default_factory=list)
    high_risks: list[Finding] = field(default_factory=list)
    medium_risks: list[Finding] = field(default_factory=list)
    auto_fixes: list[AutoFix] = field(default_factory=list)
    explanations: list[str] = field(default_factory=list)
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)
    architecture: Optional[ArchitectureAnalysis] = None
    compliance: Optional[ComplianceAnalysis] = None
    origin: ResultOrigin = ResultOrigin.NORMALIZED

    @property
    def findings(self) -> list[Finding]:
        """All findings, most severe tier first."""
        return [*self.critical_risks, *self.high_risks, *self.medium_risks]

    @property
    def is_fallback(self) -> bool:
        return self.origin is ResultOrigin.FALLBACK

    def find(self, finding_id: str) -> Optional[Finding]:
        for finding in self.findings:
            if finding.id == finding_id:
                return finding
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": self.origin.value,
            "critical_risks": [f.to_dict() for f in self.critical_risks],
            "high_risks": [f.to_dict() for f in self.high_risks],
            "medium_risks": [f.to_dict() for f in self.medium_risks],
            "auto_fixes": [fix.to_dict() for fix in self.auto_fixes],
            "explanations": list(self.explanations),
            "summary": self.summary.to_dict(),
            "architecture": asdict(self.architecture) if self.architecture else None,
            "compliance": asdict(self.compliance) if self.compliance else None,
        }


@dataclass
class AnalysisJob:
    """One unit of end-to-end analysis tracked through the job state machine."""

    id: str
    kind: JobKind
    repo_url: str
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    pull_request_number: Optional[int] = None
    pull_request_url: Optional[str] = None
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None  # internal only, never surfaced by status reads

    @property
    def repo_name(self) -> str:
        parts = self.repo_url.rstrip("/").removesuffix(".git").split("/")
        return "/".join(parts[-2:]) if len(parts) >= 2 else self.repo_url

    def to_dict(self, include_result: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "repo_url": self.repo_url,
            "repo_name": self.repo_name,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.pull_request_number is not None:
            data["pull_request"] = {
                "number": self.pull_request_number,
                "url": self.pull_request_url,
            }
        if include_result and self.result is not None:
            data["result"] = self.result.to_dict()
        return data


@dataclass(frozen=True)
class FixApplicationResult:
    success: bool
    message: str
    branch: str
    commit_sha: str = ""
    pr_url: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "branch": self.branch,
            "commit_sha": self.commit_sha,
            "pr_url": self.pr_url,
        }
        if self.note:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class Page:
    items: list[AnalysisJob]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [job.to_dict(include_result=True) for job in self.items],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "totalPages": self.total_pages,
            },
        }
