"""Stage sequencing for one analysis: sample, prompt, complete, normalize, fix."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .autofix import AutoFixEngine
from .config import AegisConfig, PromptBudgets
from .logging_config import get_logger
from .models import AnalysisResult
from .normalizer import normalize_completion
from .prompting import build_prompt
from .providers import ProviderClient, backends_from_config
from .sampling import CodebaseSampler, infer_context

logger = get_logger(__name__)


class AnalysisPipeline:
    """Run the analysis stages over a local checkout.

    Any stage error propagates unchanged; the caller decides whether it
    fails a job or aborts a CLI run.
    """

    def __init__(
        self,
        sampler: CodebaseSampler,
        client: ProviderClient,
        engine: AutoFixEngine,
        budgets: Optional[PromptBudgets] = None,
    ):
        self.sampler = sampler
        self.client = client
        self.engine = engine
        self.budgets = budgets or PromptBudgets()

    @classmethod
    def from_config(cls, config: AegisConfig) -> "AnalysisPipeline":
        return cls(
            sampler=CodebaseSampler(
                max_files=config.max_files,
                max_file_size_bytes=config.max_file_size_bytes,
                max_total_bytes=config.max_total_bytes,
            ),
            client=ProviderClient(
                backends_from_config(config),
                timeout=config.provider_timeout_seconds,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                top_p=config.top_p,
            ),
            engine=AutoFixEngine(allowed_origin=config.allowed_origin),
            budgets=config.budgets,
        )

    def run(self, repo_path: Path | str) -> AnalysisResult:
        sample = self.sampler.extract(repo_path)
        context = infer_context(sample.files, sample.languages)
        logger.info(
            "Context: business=%s compliance=%s", context.business_type, ", ".join(context.requirements)
        )

        prompt = build_prompt(sample.files, context, self.budgets)
        completion = self.client.complete(prompt)

        result = normalize_completion(completion.text, context)
        if result.is_fallback:
            logger.warning("Model output from %s could not be parsed", completion.model)

        # Only the two most severe tiers get fixes
        result.auto_fixes = self.engine.generate_fixes(
            [*result.critical_risks, *result.high_risks], sample.files
        )
        logger.info(
            "Analysis complete: %d critical, %d high, %d medium, %d fix(es)",
            result.summary.total_critical,
            result.summary.total_high,
            result.summary.total_medium,
            len(result.auto_fixes),
        )
        return result

    def close(self) -> None:
        self.client.close()
