"""Decide which file and line an auto-fix should be written to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..logging_config import get_logger
from ..models import UNKNOWN_LOCATIONS, AnalysisResult, AutoFix, Finding

logger = get_logger(__name__)

# (title keywords, guessed path); first match wins
_TITLE_PATH_GUESSES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("database", "password"), "config/database.yml"),
    (("api", "key"), "config/application.yml"),
    (("environment", "env"), ".env.example"),
    (("docker",), "Dockerfile"),
    (("package", "dependency"), "package.json"),
    (("requirement",), "requirements.txt"),
    (("python",), "app.py"),
    (("javascript", "node"), "index.js"),
    (("java",), "src/main/java/Application.java"),
    (("go",), "main.go"),
    (("config",), "config.yml"),
    (("setting",), "settings.py"),
)
DEFAULT_GUESS = "config/security_fixes.yml"


@dataclass(frozen=True)
class Location:
    file_path: str
    line_number: int
    strategy: str


def guess_path_from_title(title: str) -> str:
    lowered = title.lower()
    for keywords, path in _TITLE_PATH_GUESSES:
        if any(keyword in lowered for keyword in keywords):
            return path
    return DEFAULT_GUESS


def _usable(path: Optional[str]) -> bool:
    return bool(path) and path.strip().lower() not in UNKNOWN_LOCATIONS


def _from_finding(finding: Finding, strategy: str) -> Location:
    return Location(finding.file_path, finding.line_number or 1, strategy)


def resolve_location(fix: AutoFix, result: AnalysisResult) -> Location:
    """Where to apply *fix*, trying the most precise source first.

    Order: the fix itself, its finding by id, a finding with the same
    title, a finding with a similar title, any located finding, and last a
    guess from the title keywords at line 1.
    """
    finding = result.find(fix.finding_id)

    if _usable(fix.file_path):
        line = fix.line_number or (finding.line_number if finding else None) or 1
        return Location(fix.file_path, line, "fix")

    if finding is not None and finding.has_location:
        return _from_finding(finding, "finding_id")

    located = [f for f in result.findings if f.has_location]

    for candidate in located:
        if candidate.title == fix.risk_title:
            return _from_finding(candidate, "title")

    title = fix.risk_title.lower()
    for candidate in located:
        other = candidate.title.lower()
        if other and title and (other in title or title in other):
            return _from_finding(candidate, "similar_title")

    if located:
        logger.warning("No matching finding for '%s'; using %s", fix.risk_title, located[0].file_path)
        return _from_finding(located[0], "any_finding")

    guessed = guess_path_from_title(fix.risk_title)
    logger.warning("No located finding for '%s'; guessing %s", fix.risk_title, guessed)
    return Location(guessed, 1, "title_guess")
