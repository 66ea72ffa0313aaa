"""Render the security-audit prompt from a sampled codebase.

Files are split into three priority tiers by name, each truncated to its
own character budget, and emitted tier by tier (sorted by path within a
tier) so the prompt is deterministic for a given sample.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum

from ..config import PromptBudgets
from ..models import AnalysisContext


class FileTier(IntEnum):
    SECURITY_CRITICAL = 1
    CONFIGURATION = 2
    SOURCE = 3


SECURITY_CRITICAL_PATTERNS: tuple[str, ...] = (
    "config", ".env", "secret", "key", "credential", "password",
    "database", "auth", "login", "token", "jwt", "oauth",
    "dockerfile", "compose", "kube", "setting", "property",
    "package.json", "requirements.txt", "pom.xml", "build.gradle",
    "web.config", "application.yml", "settings.py", "config.py",
)

CONFIG_PATTERNS: tuple[str, ...] = (
    ".json", ".yaml", ".yml", ".xml", ".properties", ".conf",
    ".config", ".ini", ".cfg", ".toml",
)

_SECTION_HEADERS = {
    FileTier.SECURITY_CRITICAL: "=== PRIORITY SECURITY FILES (High Risk) ===",
    FileTier.CONFIGURATION: "=== CONFIGURATION FILES (Medium Risk) ===",
    FileTier.SOURCE: "=== SOURCE CODE FILES (Context) ===",
}

SYSTEM_PROMPT = (
    "You are a senior security engineer with 15+ years of experience in application "
    "security, penetration testing, and compliance auditing. Provide comprehensive "
    "security analysis with detailed risk categorization, compliance mapping, and "
    "architectural insights. Respond with strict JSON only."
)

RESPONSE_SCHEMA = """{
    "critical_risks": [
        {
            "file": "config/database.yml",
            "line": 15,
            "title": "Hardcoded Database Password",
            "description": "Database password is exposed in plain text",
            "impact": "Complete data breach potential",
            "confidence": 0.98,
            "code_snippet": "password: \\"mysecretpassword123\\"",
            "compliance_violations": ["GDPR Article 32", "PCI-DSS Requirement 8"]
        }
    ],
    "high_risks": [ /* same shape as critical_risks */ ],
    "medium_risks": [ /* same shape as critical_risks */ ],
    "explanations": ["Overall security posture: ..."],
    "summary": {
        "total_critical": 1,
        "total_high": 0,
        "total_medium": 0,
        "business_type": "fintech",
        "compliance_requirements": ["GDPR", "PCI-DSS"]
    },
    "architecture": {
        "overview": "...",
        "strengths": ["..."],
        "concerns": ["..."],
        "recommendations": ["..."]
    },
    "compliance": {
        "standards": ["..."],
        "gaps": ["..."],
        "recommendations": ["..."]
    }
}"""

_INSTRUCTIONS = """COMPREHENSIVE SECURITY ANALYSIS REQUEST

You are conducting a production security audit of the codebase above.

FOCUS AREAS:
1. Authentication & authorization: hardcoded credentials, API keys, tokens, broken access control, session management
2. Data protection & privacy: PII exposure, payment data, unencrypted sensitive data, leakage in logs and errors
3. Injection & input validation: SQL injection, XSS, command injection, XXE, unsafe deserialization, path traversal
4. Configuration & deployment: debug mode in production, exposed admin interfaces, CORS misconfiguration, default credentials
5. Dependency & supply chain: vulnerable or outdated libraries, untrusted package sources
6. API & network security: unauthenticated endpoints, missing rate limiting, TLS misconfiguration

For every risk give the file path, the 1-based line number and the exact line of code
as "code_snippet" so the line can be replaced mechanically.
Map findings to GDPR, HIPAA, PCI-DSS, SOC2 and ISO27001 where relevant.

REQUIRED RESPONSE FORMAT (STRICT JSON, no prose outside the object):
"""


def classify_file(path: str) -> FileTier:
    """Assign *path* to exactly one tier by case-insensitive name matching."""
    lowered = path.lower()
    if any(pattern in lowered for pattern in SECURITY_CRITICAL_PATTERNS):
        return FileTier.SECURITY_CRITICAL
    if any(pattern in lowered for pattern in CONFIG_PATTERNS):
        return FileTier.CONFIGURATION
    return FileTier.SOURCE


def truncate_content(content: str, max_chars: int) -> str:
    if len(content) <= max_chars:
        return content
    return (
        content[:max_chars]
        + f"\n\n// ... [truncated for analysis - {len(content)} chars total]"
    )


def _budget_for(tier: FileTier, budgets: PromptBudgets) -> int:
    if tier is FileTier.SECURITY_CRITICAL:
        return budgets.security_critical_chars
    if tier is FileTier.CONFIGURATION:
        return budgets.config_chars
    return budgets.source_chars


def build_prompt(
    codebase: Mapping[str, str],
    context: AnalysisContext,
    budgets: PromptBudgets | None = None,
) -> str:
    """Render the single user prompt for *codebase*.

    Output order: context header, tier 1 files, tier 2 files, tier 3 files,
    then the fixed instruction block with the response schema.
    """
    budgets = budgets or PromptBudgets()

    tiers: dict[FileTier, list[str]] = {tier: [] for tier in FileTier}
    for path in sorted(codebase):
        tiers[classify_file(path)].append(path)

    parts = [
        "COMPREHENSIVE SECURITY AUDIT - PRODUCTION READINESS REVIEW",
        "",
        f"BUSINESS CONTEXT: {context.business_type}",
        f"COMPLIANCE REQUIREMENTS: {', '.join(context.requirements)}",
        f"LANGUAGES DETECTED: {', '.join(context.languages)}",
        "",
    ]
    for tier in FileTier:
        parts.append(_SECTION_HEADERS[tier])
        budget = _budget_for(tier, budgets)
        for path in tiers[tier]:
            parts.append(f"FILE: {path}")
            parts.append(truncate_content(codebase[path], budget))
            parts.append("")

    parts.append(_INSTRUCTIONS + RESPONSE_SCHEMA)
    return "\n".join(parts)
