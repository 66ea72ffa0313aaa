"""Synthesize mechanical remediations for findings."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Optional

from ..logging_config import get_logger
from ..models import AutoFix, Finding
from .templates import DEFAULT_TEMPLATES, FixContext, FixTemplate, context_for, env_var_name

logger = get_logger(__name__)

REVIEW_MARKER = "SECURITY FIX APPLIED - REVIEW NEEDED"

SECRET_KEYWORDS = ("hardcoded", "password", "secret", "api key", "credential", "token")
INJECTION_KEYWORDS = ("sql", "injection")
DEBUG_KEYWORDS = ("debug", "production")
CORS_KEYWORDS = ("cors", "origin")

_QUOTED_ASSIGNMENT_RE = re.compile(r"([\w.-]+)(\s*[\"']?\s*[:=]\s*)([\"'])([^\"'\n]+)\3")
_SQL_KEYWORD_RE = re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE)\b", re.IGNORECASE)
_SQL_CONCAT_RE = re.compile(r"([\"'])\s*\+\s*[\w.\[\]]+")
_TRUE_RE = re.compile(r"\b(True|true|TRUE)\b")
_WILDCARD_RE = re.compile(r"([\"'])\*\1")


class AutoFixEngine:
    """Produce at most one AutoFix per finding.

    Templates run first, in order. When none changes the snippet, a keyword
    classifier over the finding title picks a heuristic, and if that cannot
    change the text either a review marker comment is appended.
    """

    def __init__(
        self,
        templates: Iterable[FixTemplate] = DEFAULT_TEMPLATES,
        allowed_origin: str = "https://app.example.com",
    ):
        self.templates = tuple(templates)
        self.allowed_origin = allowed_origin

    def generate_fixes(
        self,
        findings: Iterable[Finding],
        codebase: Optional[Mapping[str, str]] = None,
    ) -> list[AutoFix]:
        fixes = []
        for finding in findings:
            fix = self.generate_fix(finding, codebase)
            if fix is not None:
                fixes.append(fix)
        logger.info("Generated %d auto-fix(es)", len(fixes))
        return fixes

    def generate_fix(
        self, finding: Finding, codebase: Optional[Mapping[str, str]] = None
    ) -> Optional[AutoFix]:
        snippet = finding.code_snippet
        if not snippet.strip():
            return None

        file_path = self._resolve_path(finding, codebase)
        ctx = context_for(file_path, self.allowed_origin)

        candidate = self._from_templates(snippet, ctx) or self._from_heuristics(finding, ctx)
        fixed, explanation, regulation, strategy = candidate

        if fixed == snippet:
            logger.debug("Dropping no-op fix for %s", finding.id)
            return None

        return AutoFix(
            finding_id=finding.id,
            risk_title=finding.title,
            original=snippet,
            fixed=fixed,
            explanation=explanation,
            regulation=regulation,
            strategy=strategy,
            file_path=file_path,
            line_number=finding.line_number if file_path else None,
        )

    def _from_templates(
        self, snippet: str, ctx: FixContext
    ) -> Optional[tuple[str, str, str, str]]:
        for template in self.templates:
            fixed = template.apply(snippet, ctx)
            if fixed != snippet:
                return fixed, template.explanation, template.regulation, f"template:{template.name}"
        return None

    def _from_heuristics(self, finding: Finding, ctx: FixContext) -> tuple[str, str, str, str]:
        title = finding.title.lower()
        snippet = finding.code_snippet

        if _mentions(title, SECRET_KEYWORDS):
            fixed = _replace_secret(snippet, ctx)
            category = ("secret", "Replaced hardcoded secret with environment variable reference", "GDPR, PCI-DSS")
        elif _mentions(title, INJECTION_KEYWORDS):
            fixed = _parameterize_sql(snippet, ctx)
            category = ("injection", "Converted string concatenation to parameterized query", "OWASP Top 10")
        elif _mentions(title, DEBUG_KEYWORDS):
            fixed = _TRUE_RE.sub(_flip_true, snippet)
            category = ("debug", "Disabled debug mode for production security", "Security Best Practices")
        elif _mentions(title, CORS_KEYWORDS):
            fixed = _WILDCARD_RE.sub(lambda m: f"{m.group(1)}{ctx.allowed_origin}{m.group(1)}", snippet)
            category = ("cors", "Restricted CORS origins to specific domains for security", "Security Headers")
        else:
            fixed = snippet
            category = ("generic", "", "")

        name, explanation, regulation = category
        if fixed != snippet:
            return fixed, explanation, regulation, f"heuristic:{name}"

        return (
            f"{snippet.rstrip()} {ctx.comment(REVIEW_MARKER)}",
            "Applied security fix. Please review the change.",
            "Security Best Practices",
            "heuristic:marker",
        )

    @staticmethod
    def _resolve_path(finding: Finding, codebase: Optional[Mapping[str, str]]) -> str:
        if not finding.has_location:
            return ""
        path = finding.file_path.strip().removeprefix("./")
        if codebase and path not in codebase:
            matches = [p for p in codebase if p.endswith("/" + path)]
            if len(matches) == 1:
                return matches[0]
        return path


def _mentions(title: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in title for keyword in keywords)


def _replace_secret(snippet: str, ctx: FixContext) -> str:
    def repl(match: re.Match) -> str:
        identifier, separator = match.group(1), match.group(2)
        return f"{identifier}{separator}{ctx.env_lookup(env_var_name(identifier))}"

    return _QUOTED_ASSIGNMENT_RE.sub(repl, snippet, count=1)


def _parameterize_sql(snippet: str, ctx: FixContext) -> str:
    if not _SQL_KEYWORD_RE.search(snippet):
        return snippet
    fixed = _SQL_CONCAT_RE.sub(lambda m: f"?{m.group(1)}", snippet)
    if fixed == snippet:
        return snippet
    return f"{fixed.rstrip()}  {ctx.comment('Use parameterized queries')}"


def _flip_true(match: re.Match) -> str:
    return {"True": "False", "true": "false", "TRUE": "FALSE"}[match.group(1)]
