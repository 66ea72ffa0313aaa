"""Tests for AutoFixEngine: template selection, heuristics and the review marker."""

import re

import pytest

from aegis_ai.autofix import REVIEW_MARKER, AutoFixEngine, FixTemplate
from aegis_ai.models import Severity

from conftest import make_finding


@pytest.fixture
def engine():
    return AutoFixEngine()


class TestTemplateFixes:
    def test_password_literal_removed(self, engine):
        fix = engine.generate_fix(make_finding())
        assert fix.fixed == 'password = os.getenv("PASSWORD")'
        assert "super_secret_123" not in fix.fixed
        assert fix.strategy == "template:hardcoded_password"
        assert fix.regulation == "GDPR Article 32, PCI-DSS Requirement 8"

    def test_links_back_to_finding(self, engine):
        finding = make_finding(Severity.HIGH, 3)
        fix = engine.generate_fix(finding)
        assert fix.finding_id == "high-3"
        assert fix.risk_title == finding.title
        assert fix.original == finding.code_snippet
        assert (fix.file_path, fix.line_number) == ("app.py", 4)

    def test_first_matching_template_wins(self, engine):
        finding = make_finding(code_snippet='DEBUG = True; password = "x"')
        fix = engine.generate_fix(finding)
        assert fix.strategy == "template:hardcoded_password"
        assert fix.fixed.startswith("DEBUG = True;")

    def test_custom_template_order(self):
        first = FixTemplate("first", re.compile("x"), lambda m, ctx: "1", "first", "R1")
        second = FixTemplate("second", re.compile("x"), lambda m, ctx: "2", "second", "R2")
        fix = AutoFixEngine(templates=[first, second]).generate_fix(make_finding(code_snippet="x"))
        assert (fix.fixed, fix.strategy) == ("1", "template:first")

    def test_file_syntax_drives_rendering(self, engine):
        finding = make_finding(file_path="web/api.js", code_snippet='const authToken = "abc"')
        assert engine.generate_fix(finding).fixed == "const authToken = process.env.AUTHTOKEN"

    def test_allowed_origin_passed_through(self):
        engine = AutoFixEngine(allowed_origin="https://dash.acme.io")
        finding = make_finding(
            title="CORS wildcard", code_snippet='headers = {"Access-Control-Allow-Origin": "*"}'
        )
        assert "https://dash.acme.io" in engine.generate_fix(finding).fixed


class TestHeuristics:
    def test_secret_assignment(self, engine):
        finding = make_finding(
            title="Hardcoded secret", file_path="src/app.js", code_snippet="secretValue: 'abc123'"
        )
        fix = engine.generate_fix(finding)
        assert fix.fixed == "secretValue: process.env.SECRETVALUE"
        assert fix.strategy == "heuristic:secret"

    def test_debug_flag(self, engine):
        finding = make_finding(title="Debug output in production", code_snippet="set_verbose(True)")
        fix = engine.generate_fix(finding)
        assert fix.fixed == "set_verbose(False)"
        assert fix.strategy == "heuristic:debug"

    def test_marker_when_nothing_applies(self, engine):
        finding = make_finding(
            title="Missing rate limiting", file_path="routes.js", code_snippet='app.post("/login", handler)'
        )
        fix = engine.generate_fix(finding)
        assert fix.fixed == f'app.post("/login", handler) // {REVIEW_MARKER}'
        assert fix.strategy == "heuristic:marker"

    def test_marker_for_unmatched_secret(self, engine):
        finding = make_finding(title="Exposed credential", code_snippet="load_creds(vault)")
        fix = engine.generate_fix(finding)
        assert fix.fixed.endswith(f"# {REVIEW_MARKER}")


class TestEdgeCases:
    @pytest.mark.parametrize("snippet", ["", "   ", "\n"])
    def test_blank_snippet_yields_no_fix(self, engine, snippet):
        assert engine.generate_fix(make_finding(code_snippet=snippet)) is None

    def test_unlocated_finding(self, engine):
        fix = engine.generate_fix(make_finding(file_path="unknown", line_number=None))
        assert fix.file_path == ""
        assert fix.line_number is None
        assert fix.fixed == 'password = os.getenv("PASSWORD")'

    def test_path_resolved_against_codebase(self, engine):
        codebase = {"config/settings.yml": "", "app.py": ""}
        finding = make_finding(file_path="settings.yml", code_snippet='password: "hunter2"')
        fix = engine.generate_fix(finding, codebase)
        assert fix.file_path == "config/settings.yml"
        assert fix.fixed == "password: ${PASSWORD}"

    def test_dot_slash_prefix_stripped(self, engine):
        assert engine.generate_fix(make_finding(file_path="./app.py")).file_path == "app.py"

    def test_fixed_always_differs(self, engine):
        findings = [
            make_finding(code_snippet=snippet, title=title)
            for title, snippet in [
                ("Hardcoded Database Password", 'password = "a"'),
                ("SQL injection", 'db.query("SELECT * FROM t WHERE id=" + uid)'),
                ("Debug mode", "DEBUG = True"),
                ("Weak hashing", "hashlib.md5(data)"),
                ("Open redirect", "redirect(request.args['next'])"),
            ]
        ]
        fixes = engine.generate_fixes(findings)
        assert len(fixes) == len(findings)
        assert all(fix.fixed != fix.original for fix in fixes)

    def test_generate_fixes_skips_blank(self, engine):
        findings = [make_finding(), make_finding(Severity.HIGH, 0, code_snippet="")]
        assert [fix.finding_id for fix in engine.generate_fixes(findings)] == ["critical-0"]
