"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AegisConfig, load_config

console = Console()

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
}


def resolve_config(
    config: Optional[Path] = None,
    max_files: Optional[int] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AegisConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if max_files is not None:
        overrides["max_files"] = max_files
    if workers is not None:
        overrides["analysis_workers"] = workers
    return load_config(config_file=config, verbose=verbose, quiet=quiet, **overrides)
