"""Regex remediation templates and the per-file syntax they render into.

Templates are tried in the order of ``DEFAULT_TEMPLATES``; the first one
whose substitution changes the snippet wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Optional

HASH_COMMENT_EXTENSIONS = frozenset({
    ".py", ".rb", ".sh", ".bash", ".yml", ".yaml", ".toml", ".env", ".conf",
    ".cfg", ".ini", ".properties", ".r", ".pl", ".tf", ".txt",
})
HASH_COMMENT_NAMES = frozenset({"dockerfile", "makefile", "procfile", ".env"})

# Config formats where ${VAR} interpolation is the usual indirection
_PLACEHOLDER_EXTENSIONS = frozenset({
    ".yml", ".yaml", ".toml", ".env", ".conf", ".cfg", ".ini", ".properties",
})

_ENV_LOOKUPS: dict[str, str] = {
    ".py": 'os.getenv("{name}")',
    ".js": "process.env.{name}",
    ".jsx": "process.env.{name}",
    ".ts": "process.env.{name}",
    ".tsx": "process.env.{name}",
    ".mjs": "process.env.{name}",
    ".cjs": "process.env.{name}",
    ".go": 'os.Getenv("{name}")',
    ".rb": 'ENV["{name}"]',
    ".java": 'System.getenv("{name}")',
    ".kt": 'System.getenv("{name}")',
    ".scala": 'System.getenv("{name}")',
    ".php": 'getenv("{name}")',
    ".cs": 'Environment.GetEnvironmentVariable("{name}")',
    ".rs": 'std::env::var("{name}")',
}
_DEFAULT_ENV_LOOKUP = 'os.getenv("{name}")'


@dataclass(frozen=True)
class FixContext:
    """Syntax of the file a fix is written for."""

    extension: str = ""
    filename: str = ""
    allowed_origin: str = "https://app.example.com"

    def comment(self, text: str) -> str:
        if self.extension in (".html", ".htm", ".xml"):
            return f"<!-- {text} -->"
        if self.extension == ".sql":
            return f"-- {text}"
        if self.extension in HASH_COMMENT_EXTENSIONS or self.filename in HASH_COMMENT_NAMES:
            return f"# {text}"
        return f"// {text}"

    def env_lookup(self, name: str) -> str:
        if self.extension in _PLACEHOLDER_EXTENSIONS or self.filename in HASH_COMMENT_NAMES:
            return "${" + name + "}"
        return _ENV_LOOKUPS.get(self.extension, _DEFAULT_ENV_LOOKUP).format(name=name)


def context_for(file_path: str, allowed_origin: str = "https://app.example.com") -> FixContext:
    path = PurePosixPath(file_path.strip().replace("\\", "/") or "snippet")
    name = path.name.lower()
    extension = path.suffix.lower()
    if name.startswith(".env"):
        extension = ".env"
    return FixContext(extension=extension, filename=name, allowed_origin=allowed_origin)


def env_var_name(identifier: str) -> str:
    """``db-password`` -> ``DB_PASSWORD``."""
    name = re.sub(r"\W+", "_", identifier.strip("\"' ")).strip("_").upper()
    return name or "SECRET"


Replacement = Callable[[re.Match, FixContext], str]


@dataclass(frozen=True)
class FixTemplate:
    name: str
    pattern: re.Pattern
    replacement: Replacement
    explanation: str
    regulation: str
    trailer: Optional[str] = None  # comment appended after the rewritten snippet

    def apply(self, snippet: str, ctx: FixContext) -> str:
        fixed = self.pattern.sub(lambda m: self.replacement(m, ctx), snippet)
        if fixed != snippet and self.trailer:
            fixed = f"{fixed.rstrip()}  {ctx.comment(self.trailer)}"
        return fixed


def _secret_to_env(match: re.Match, ctx: FixContext) -> str:
    identifier, separator = match.group(1), match.group(2)
    return f"{identifier}{separator}{ctx.env_lookup(env_var_name(identifier))}"


def _database_url_to_env(match: re.Match, ctx: FixContext) -> str:
    return ctx.env_lookup("DATABASE_URL")


def _comment_out_pii(match: re.Match, ctx: FixContext) -> str:
    return ctx.comment(f"{match.group(0)} - REMOVED: PII data should not be logged")


def _sql_placeholder(match: re.Match, ctx: FixContext) -> str:
    quote, query = match.group(1), match.group(2)
    return f"{quote}{query.rstrip()} ?{quote}"


def _disable_flag(match: re.Match, ctx: FixContext) -> str:
    value = match.group(3)
    if value.isupper():
        replacement = "FALSE"
    elif value[0].isupper():
        replacement = "False"
    else:
        replacement = "false"
    return f"{match.group(1)}{match.group(2)}{replacement}"


def _restrict_origin(match: re.Match, ctx: FixContext) -> str:
    quote = match.group(2)
    return f"{match.group(1)}{quote}{ctx.allowed_origin}{quote}"


_ASSIGN = r"(\s*[\"']?\s*[:=]\s*)"
_QUOTED = r"[\"']([^\"'\n]+)[\"']"

AWS_CREDENTIALS = FixTemplate(
    name="aws_credentials",
    pattern=re.compile(
        r"(\w*aws[_-]?(?:access[_-]?key(?:[_-]?id)?|secret[_-]?(?:access[_-]?)?key))"
        + _ASSIGN + _QUOTED,
        re.IGNORECASE,
    ),
    replacement=_secret_to_env,
    explanation="Replace hardcoded AWS credentials with environment variables",
    regulation="GDPR Article 32",
)

DATABASE_URL = FixTemplate(
    name="database_url",
    pattern=re.compile(
        r"[\"']?(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis)://[^:/\s\"']+:[^@\s\"']+@[^\s\"']*[\"']?",
        re.IGNORECASE,
    ),
    replacement=_database_url_to_env,
    explanation="Replace hardcoded database URL with environment variable",
    regulation="GDPR Article 32",
)

HARDCODED_API_KEY = FixTemplate(
    name="hardcoded_api_key",
    pattern=re.compile(
        r"(\w*(?:api|secret|access|auth)[_-]?(?:key|token)\w*)" + _ASSIGN + _QUOTED,
        re.IGNORECASE,
    ),
    replacement=_secret_to_env,
    explanation="Replace hardcoded secret with environment variable",
    regulation="GDPR Article 32",
)

HARDCODED_PASSWORD = FixTemplate(
    name="hardcoded_password",
    pattern=re.compile(
        r"(\w*(?:password|passwd|pwd|pass))" + _ASSIGN + _QUOTED,
        re.IGNORECASE,
    ),
    replacement=_secret_to_env,
    explanation="Replace hardcoded password with environment variable",
    regulation="GDPR Article 32, PCI-DSS Requirement 8",
)

PII_LOGGING = FixTemplate(
    name="pii_logging",
    pattern=re.compile(
        r"\b(?:print|console\.log|log(?:ger)?\.(?:info|debug|warn(?:ing)?|error))\s*"
        r"\([^)\n]*(?:email|phone|address|ssn|credit[_-]?card)[^)\n]*\)",
        re.IGNORECASE,
    ),
    replacement=_comment_out_pii,
    explanation="Remove PII data from logs to prevent exposure",
    regulation="GDPR Article 5, CCPA Section 1798.100",
)

SQL_INJECTION = FixTemplate(
    name="sql_injection",
    pattern=re.compile(
        r"([\"'])((?:SELECT|INSERT|UPDATE|DELETE)\b[^\"'\n]*?)\s*\1\s*\+\s*[\w.\[\]]+",
        re.IGNORECASE,
    ),
    replacement=_sql_placeholder,
    explanation="Replace string concatenation with parameterized queries to prevent SQL injection",
    regulation="OWASP Top 10",
    trailer="Use parameterized queries and bind values separately",
)

DEBUG_MODE = FixTemplate(
    name="debug_mode",
    pattern=re.compile(r"\b(debug|development)(\s*[\"']?\s*[:=]\s*)(true)\b", re.IGNORECASE),
    replacement=_disable_flag,
    explanation="Disable debug mode for production security",
    regulation="Security Best Practices",
)

CORS_WILDCARD = FixTemplate(
    name="cors_wildcard",
    pattern=re.compile(
        r"(Access-Control-Allow-Origin[\"']?\s*[:,=]\s*)([\"'])\*\2", re.IGNORECASE
    ),
    replacement=_restrict_origin,
    explanation="Restrict CORS to specific domain instead of wildcard",
    regulation="Security Headers",
)

DEFAULT_TEMPLATES: tuple[FixTemplate, ...] = (
    AWS_CREDENTIALS,
    DATABASE_URL,
    HARDCODED_API_KEY,
    HARDCODED_PASSWORD,
    PII_LOGGING,
    SQL_INJECTION,
    DEBUG_MODE,
    CORS_WILDCARD,
)
