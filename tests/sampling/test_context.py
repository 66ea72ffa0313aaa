"""Tests for business-domain and compliance inference."""

from aegis_ai.sampling import detect_business_type, detect_compliance_requirements, infer_context
from aegis_ai.sampling.context import BASELINE_STANDARDS


class TestBusinessType:
    def test_healthcare_wins_over_later_domains(self):
        codebase = {"models.py": "class Patient: customer_id = None"}
        assert detect_business_type(codebase) == "healthcare"

    def test_fintech(self):
        assert detect_business_type({"pay.py": "def charge_payment(): ..."}) == "fintech"

    def test_file_path_counts(self):
        assert detect_business_type({"shop/cart.py": "x = 1"}) == "ecommerce"

    def test_default(self):
        assert detect_business_type({"main.go": "package main"}) == "technology"


class TestCompliance:
    def test_regimes_then_baseline(self):
        requirements = detect_compliance_requirements({"billing.py": "# PCI scope: card data"})
        assert requirements == ["PCI-DSS", *BASELINE_STANDARDS]

    def test_multiple_regimes_no_duplicates(self):
        codebase = {"a.py": "patient privacy under GDPR", "b.py": "more patient data"}
        requirements = detect_compliance_requirements(codebase)
        assert requirements[:2] == ["GDPR", "HIPAA"]
        assert len(requirements) == len(set(requirements))

    def test_baseline_only(self):
        assert detect_compliance_requirements({"x.go": "package x"}) == list(BASELINE_STANDARDS)


class TestInferContext:
    def test_combines_everything(self):
        context = infer_context({"README.md": "Payments service"}, [".md", ".py"])
        assert context.business_type == "fintech"
        assert context.languages == [".md", ".py"]
        assert "PCI-DSS" in context.requirements
