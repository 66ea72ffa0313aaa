"""
Aegis AI - AI-assisted security analysis and remediation

Samples a repository, asks an LLM for a structured security assessment,
synthesizes mechanical fixes for the findings, and applies a chosen fix
back to the repository as a pushed branch.
"""

__version__ = "0.1.0"

from .config import AegisConfig, load_config
from .models import AnalysisResult, AutoFix, Finding, JobStatus, Severity
from .pipeline import AnalysisPipeline

__all__ = [
    "AegisConfig",
    "AnalysisPipeline",
    "AnalysisResult",
    "AutoFix",
    "Finding",
    "JobStatus",
    "Severity",
    "load_config",
]
