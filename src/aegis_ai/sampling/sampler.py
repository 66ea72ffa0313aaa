"""Bounded codebase sampling for AI analysis."""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..exceptions import SamplingError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Sampling priority: earlier patterns are collected first when the file cap bites
PRIORITY_PATTERNS: tuple[str, ...] = (
    "*.py", "*.js", "*.ts", "*.jsx", "*.tsx", "*.java", "*.go", "*.rb", "*.php",
    "*.cpp", "*.c", "*.h", "*.hpp", "*.cs", "*.swift", "*.kt", "*.rs", "*.scala",
    "*.pl", "*.r", "*.m", "*.sql", "*.sh", "*.bash",
    "config.*", "*.config", "*.env*", "*.json", "*.yaml", "*.yml", "*.xml",
    "package.json", "requirements.txt", "pom.xml", "build.gradle", "composer.json",
    "Dockerfile", "docker-compose.yml", "*.tf", "*.pp", "*.md", "*.txt",
    "*.html", "*.htm", "*.css", "*.scss", "*.sass", "*.less",
)

EXCLUDED_DIRS = frozenset({
    ".git", "node_modules", "vendor", "dist", "build", "target",
    "__pycache__", ".next", ".nuxt", ".output", "coverage",
    "test", "tests", "tmp", "temp", "logs", "cache",
    ".venv", "venv", ".tox", ".mypy_cache", ".pytest_cache",
})


@dataclass
class SampledCodebase:
    files: dict[str, str] = field(default_factory=dict)  # relative posix path -> content
    languages: list[str] = field(default_factory=list)  # lowercase extensions, e.g. ".py"
    candidates: int = 0  # matching files seen before caps were applied

    @property
    def total_bytes(self) -> int:
        return sum(len(content.encode("utf-8")) for content in self.files.values())


class CodebaseSampler:
    """Collect a bounded, deterministic sample of a repository's files.

    Skips dependency, build, test and VCS directories by name, symlinks,
    files over the per-file size cap, and stops at the file-count or
    total-size cap.
    """

    def __init__(
        self,
        max_files: int = 25,
        max_file_size_bytes: int = 200_000,
        max_total_bytes: int = 1_500_000,
        patterns: tuple[str, ...] = PRIORITY_PATTERNS,
        excluded_dirs: frozenset[str] = EXCLUDED_DIRS,
    ):
        self.max_files = max_files
        self.max_file_size_bytes = max_file_size_bytes
        self.max_total_bytes = max_total_bytes
        self.patterns = patterns
        self.excluded_dirs = excluded_dirs

    def extract(self, repo_path: Path | str) -> SampledCodebase:
        """Sample *repo_path*.

        Raises:
            SamplingError: If the path is not a directory or yields no files
        """
        root = Path(repo_path).resolve()
        if not root.is_dir():
            raise SamplingError(root, "Path does not exist or is not a directory")

        candidates = self._collect_candidates(root)
        sample = SampledCodebase(candidates=len(candidates))
        languages: set[str] = set()
        total = 0

        for path in candidates:
            if len(sample.files) >= self.max_files:
                break
            try:
                size = path.stat().st_size
            except OSError as e:
                logger.debug("Skipping unreadable %s: %s", path, e)
                continue
            if size > self.max_file_size_bytes:
                logger.debug("Skipping %s (%d bytes over cap)", path, size)
                continue
            if total + size > self.max_total_bytes:
                logger.debug("Total size cap reached at %s", path)
                break
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.debug("Skipping unreadable %s: %s", path, e)
                continue

            relative = path.relative_to(root).as_posix()
            sample.files[relative] = content
            total += size
            if path.suffix:
                languages.add(path.suffix.lower())

        if not sample.files:
            raise SamplingError(root, "No analyzable files found")

        sample.languages = sorted(languages)
        logger.info(
            "Sampled %d/%d files (%d bytes) from %s",
            len(sample.files), len(candidates), total, root,
        )
        return sample

    def _collect_candidates(self, root: Path) -> list[Path]:
        ranked: list[tuple[int, str, Path]] = []
        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.is_symlink():
                    continue
                rank = self._priority(name)
                if rank is not None:
                    ranked.append((rank, path.relative_to(root).as_posix(), path))
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [path for _, _, path in ranked]

    def _priority(self, filename: str) -> Optional[int]:
        for index, pattern in enumerate(self.patterns):
            if fnmatch.fnmatchcase(filename, pattern):
                return index
        return None
