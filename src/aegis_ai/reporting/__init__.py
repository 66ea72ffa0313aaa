"""Human-readable renderings of analysis results."""

from .comment import compliance_score, render_pr_comment

__all__ = ["compliance_score", "render_pr_comment"]
