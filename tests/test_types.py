"""Tests for regulium/engine/types.py - shared records."""

import pytest

from regulium.engine.types import (
    ComplianceReport,
    ComplianceStatus,
    ComplianceSummary,
    Correction,
    CorrectionKind,
    CorrectionStatus,
    Law,
    ScreeningResult,
    Verdict,
)


class TestComplianceStatus:
    @pytest.mark.parametrize("raw, expected", [
        ("compliant", ComplianceStatus.COMPLIANT),
        ("NON_COMPLIANT", ComplianceStatus.NON_COMPLIANT),
        (" Requires Review ", ComplianceStatus.REQUIRES_REVIEW),
        ("unknown", ComplianceStatus.REQUIRES_REVIEW),
        ("", ComplianceStatus.REQUIRES_REVIEW),
        (42, ComplianceStatus.REQUIRES_REVIEW),
    ])
    def test_coerce(self, raw, expected):
        """Status variants coerce onto the enum."""
        assert ComplianceStatus.coerce(raw) is expected

    def test_enum_has_three_members(self):
        """The status enum has exactly three values."""
        assert [s.value for s in ComplianceStatus] == ["compliant", "non-compliant", "requires-review"]


class TestCorrection:
    def test_persisted_keys(self):
        """to_dict() uses the persisted key names."""
        item = Correction(
            id="feedback_1_a", feature_name="F", law_title="L", kind=CorrectionKind.CORRECTION,
            message="m", created_at="2025-01-01T00:00:00+00:00", contact="x@y.test",
        )
        assert item.to_dict() == {
            "id": "feedback_1_a",
            "feature_name": "F",
            "law_title": "L",
            "feedback_type": "correction",
            "message": "m",
            "user_email": "x@y.test",
            "timestamp": "2025-01-01T00:00:00+00:00",
            "status": "pending",
        }
        assert Correction.from_dict(item.to_dict()) == item

    def test_from_dict_tolerates_unknown_values(self):
        """Unknown kind or status falls back to defaults."""
        item = Correction.from_dict({"id": "x", "feedback_type": "rant", "status": "archived"})
        assert item.kind is CorrectionKind.SUGGESTION
        assert item.status is CorrectionStatus.PENDING
        assert item.contact is None


class TestReport:
    def test_to_dict_with_screening(self):
        """Discovery reports include the screening block."""
        law = Law("1", "GDPR", "d")
        verdict = Verdict("F", "GDPR", "d", ComplianceStatus.COMPLIANT, "ok", ("a",))
        report = ComplianceReport(
            mode="discovery",
            results=(verdict,),
            summary=ComplianceSummary(total_features=1, total_laws=2, relevant_laws=1, compliant_count=1),
            timestamp="t",
            screening=ScreeningResult(laws=(law,), raw_titles=("gdpr",)),
        )
        payload = report.to_dict()

        assert payload["results"][0]["compliance_status"] == "compliant"
        assert payload["results"][0]["recommendations"] == ["a"]
        assert payload["summary"]["relevant_laws"] == 1
        assert payload["screening"] == {"relevant_laws": ["GDPR"], "raw_titles": ["gdpr"], "failed_open": False}

    def test_explicit_report_has_no_screening_block(self):
        """Explicit reports omit the screening block."""
        report = ComplianceReport(mode="explicit", results=(), summary=ComplianceSummary(), timestamp="t")
        assert "screening" not in report.to_dict()
