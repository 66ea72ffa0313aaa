"""Repository sampling and context inference."""

from .context import detect_business_type, detect_compliance_requirements, infer_context
from .sampler import CodebaseSampler, SampledCodebase

__all__ = [
    "CodebaseSampler",
    "SampledCodebase",
    "detect_business_type",
    "detect_compliance_requirements",
    "infer_context",
]
