"""Keyword inference of business domain and compliance regimes from sampled code."""

from __future__ import annotations

from collections.abc import Mapping

from ..models import AnalysisContext

# First matching domain wins
BUSINESS_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("healthcare", ("patient", "medical", "health", "hospital")),
    ("fintech", ("payment", "invoice", "bank", "financial", "transaction", "card")),
    ("ecommerce", ("user", "customer", "cart", "product", "order", "shop")),
    ("education", ("education", "school", "university", "course")),
    ("government", ("government", "public", "citizen", "agency")),
)
DEFAULT_BUSINESS_TYPE = "technology"

COMPLIANCE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("GDPR", ("gdpr", "europe", "privacy", "data protection")),
    ("HIPAA", ("hipaa", "medical", "health", "patient")),
    ("PCI-DSS", ("pci", "payment", "card", "transaction")),
    ("CCPA", ("ccpa", "california", "consumer", "privacy act")),
    ("SOC2", ("soc2", "soc", "service organization")),
    ("ISO27001", ("iso27001", "iso", "information security")),
)
BASELINE_STANDARDS = ("OWASP Top 10", "Security Best Practices")


def _corpus(codebase: Mapping[str, str]) -> str:
    return "\n".join(f"{path}\n{content}" for path, content in codebase.items()).lower()


def detect_business_type(codebase: Mapping[str, str]) -> str:
    text = _corpus(codebase)
    for business_type, keywords in BUSINESS_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return business_type
    return DEFAULT_BUSINESS_TYPE


def detect_compliance_requirements(codebase: Mapping[str, str]) -> list[str]:
    """Regimes suggested by the code, always followed by the baseline standards."""
    text = _corpus(codebase)
    requirements = [
        regime for regime, keywords in COMPLIANCE_KEYWORDS
        if any(keyword in text for keyword in keywords)
    ]
    requirements.extend(BASELINE_STANDARDS)
    return list(dict.fromkeys(requirements))


def infer_context(codebase: Mapping[str, str], languages: list[str]) -> AnalysisContext:
    return AnalysisContext(
        languages=list(languages),
        business_type=detect_business_type(codebase),
        requirements=detect_compliance_requirements(codebase),
    )
