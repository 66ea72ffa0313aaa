"""Tests for bounded codebase sampling."""

import os

import pytest

from aegis_ai.exceptions import SamplingError
from aegis_ai.sampling import CodebaseSampler

from conftest import write_files


class TestExtract:
    def test_reads_sample_repo(self, sample_repo):
        sample = CodebaseSampler().extract(sample_repo)
        assert set(sample.files) == {"app.py", "config/settings.yml", "static/index.js", "README.md"}
        assert sample.files["app.py"].startswith("import os")
        assert sample.languages == [".js", ".md", ".py", ".yml"]

    def test_paths_are_relative_posix(self, sample_repo):
        sample = CodebaseSampler().extract(sample_repo)
        assert all(not p.startswith("/") and "\\" not in p for p in sample.files)

    def test_excluded_directories_skipped(self, tmp_path):
        write_files(
            tmp_path,
            {
                "main.py": "print('hi')\n",
                "node_modules/lib/index.js": "module.exports = 1\n",
                "tests/test_main.py": "assert True\n",
                ".git/config": "[core]\n",
                "build/out.js": "x\n",
            },
        )
        sample = CodebaseSampler().extract(tmp_path)
        assert list(sample.files) == ["main.py"]

    def test_unmatched_files_ignored(self, tmp_path):
        write_files(tmp_path, {"main.py": "x = 1\n", "logo.png": "not really a png"})
        assert list(CodebaseSampler().extract(tmp_path).files) == ["main.py"]

    def test_file_count_cap_prefers_source(self, tmp_path):
        write_files(
            tmp_path,
            {"b.py": "b\n", "a.py": "a\n", "notes.md": "n\n", "data.json": "{}\n"},
        )
        sample = CodebaseSampler(max_files=2).extract(tmp_path)
        assert list(sample.files) == ["a.py", "b.py"]
        assert sample.candidates == 4

    def test_oversized_file_skipped(self, tmp_path):
        write_files(tmp_path, {"big.py": "x" * 500, "small.py": "y = 1\n"})
        sample = CodebaseSampler(max_file_size_bytes=100, max_total_bytes=1000).extract(tmp_path)
        assert list(sample.files) == ["small.py"]

    def test_total_size_cap_stops_sampling(self, tmp_path):
        write_files(tmp_path, {"a.py": "a" * 60, "b.py": "b" * 60, "c.py": "c" * 60})
        sample = CodebaseSampler(max_file_size_bytes=100, max_total_bytes=130).extract(tmp_path)
        assert list(sample.files) == ["a.py", "b.py"]
        assert sample.total_bytes <= 130

    def test_invalid_utf8_is_replaced(self, tmp_path):
        (tmp_path / "odd.py").write_bytes(b"name = '\xff\xfe'\n")
        sample = CodebaseSampler().extract(tmp_path)
        assert "�" in sample.files["odd.py"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinks_skipped(self, tmp_path):
        outside = tmp_path / "outside.py"
        outside.write_text("SECRET = 'x'\n")
        repo = write_files(tmp_path / "repo", {"main.py": "x = 1\n"})
        (repo / "link.py").symlink_to(outside)
        assert list(CodebaseSampler().extract(repo).files) == ["main.py"]

    def test_deterministic(self, sample_repo):
        first = CodebaseSampler().extract(sample_repo)
        second = CodebaseSampler().extract(sample_repo)
        assert list(first.files) == list(second.files)


class TestErrors:
    def test_missing_path(self, tmp_path):
        with pytest.raises(SamplingError):
            CodebaseSampler().extract(tmp_path / "missing")

    def test_nothing_to_sample(self, tmp_path):
        write_files(tmp_path, {"image.png": "binary"})
        with pytest.raises(SamplingError) as exc_info:
            CodebaseSampler().extract(tmp_path)
        assert "No analyzable files" in exc_info.value.reason
