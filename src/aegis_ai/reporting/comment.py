"""Markdown pull-request comment for a finished analysis."""

from __future__ import annotations

from ..models import AnalysisResult, Finding


def compliance_score(result: AnalysisResult) -> int:
    """100 minus 25 per critical, 15 per high and 5 per medium, floored at 0."""
    score = (
        100
        - 25 * len(result.critical_risks)
        - 15 * len(result.high_risks)
        - 5 * len(result.medium_risks)
    )
    return max(score, 0)


def _location(finding: Finding) -> str:
    return f"{finding.file_path or 'unknown'}:{finding.line_number or 0}"


def _code_block(text: str) -> list[str]:
    return ["```", text, "```"]


def render_pr_comment(result: AnalysisResult) -> str:
    out = [
        "## Aegis AI Security Analysis",
        "",
        "### Executive Summary",
        f"- **Critical Risks**: {len(result.critical_risks)}",
        f"- **High Risks**: {len(result.high_risks)}",
        f"- **Medium Risks**: {len(result.medium_risks)}",
        f"- **Auto-Fixes Provided**: {len(result.auto_fixes)}",
        "",
        f"### Compliance Score: {compliance_score(result)}/100",
        "",
    ]

    if result.critical_risks:
        out += ["### Critical Security Risks", ""]
        for i, risk in enumerate(result.critical_risks, 1):
            out += [
                f"#### {i}. {risk.title}",
                f"- **File**: `{_location(risk)}`",
                f"- **Confidence**: {risk.confidence * 100:.0f}%",
                f"- **Impact**: {risk.impact}",
                f"- **Description**: {risk.description}",
            ]
            if risk.code_snippet:
                out += _code_block(risk.code_snippet)
            out.append("")

    if result.high_risks:
        out += ["### High Security Risks", ""]
        for i, risk in enumerate(result.high_risks, 1):
            out.append(
                f"{i}. **{risk.title}** - `{_location(risk)}` "
                f"({risk.confidence * 100:.0f}% confidence)"
            )
            out.append(f"   - {risk.description}")
        out.append("")

    if result.auto_fixes:
        out += ["### Auto-Fix Suggestions", ""]
        for i, fix in enumerate(result.auto_fixes, 1):
            out.append(f"#### Fix {i}: {fix.risk_title}")
            out.append("**Original Code:**")
            out += _code_block(fix.original)
            out.append("**Fixed Code:**")
            out += _code_block(fix.fixed)
            out += [f"**Explanation**: {fix.explanation}", ""]

    if result.architecture is not None:
        out += ["### Architecture Analysis", result.architecture.overview, ""]

    if result.compliance is not None:
        out += ["### Compliance Report", ", ".join(result.compliance.standards), ""]

    out += ["---", "**Powered by Aegis AI** - automated security analysis for pull requests"]
    return "\n".join(out) + "\n"
