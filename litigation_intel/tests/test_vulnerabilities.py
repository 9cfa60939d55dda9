"""
Tests for Opponent Vulnerability Aggregation
============================================

Tests:
1. Leverage / compliance / weak-spot mapping onto the vulnerability taxonomy
2. Expert non-compliance and defective notice checks
3. Empty upstream input
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.context import DetectorContext
from litigation_intel.schemas import (
    ApplicationType,
    CaseMaterial,
    ComplianceIssue,
    EscalationType,
    InsightKind,
    LeveragePoint,
    LeverageType,
    Severity,
    VulnerabilityType,
    WeakSpot,
    WeakSpotType,
)
from litigation_intel.vulnerabilities import aggregate_vulnerabilities


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def make_ctx(practice_area="other_litigation", **material_fields):
    material = CaseMaterial(case_id="c1", practice_area=practice_area, **material_fields)
    return DetectorContext.create(material, now=NOW, missing_evidence=[])


def leverage(type_, severity=Severity.HIGH):
    return LeveragePoint(
        id=f"leverage-c1-{type_.value}",
        case_id="c1",
        type=type_,
        description="Opponent has not responded for 30 days",
        severity=severity,
        evidence=["Last letter sent: 2025-05-01"],
        suggested_escalation=EscalationType.UNLESS_ORDER,
        escalation_text="Apply for an unless order",
    )


def compliance(breach, application=ApplicationType.FURTHER_INFORMATION):
    return ComplianceIssue(
        id="cpr-c1-x",
        case_id="c1",
        rule="CPR 31.10",
        breach=breach,
        severity=Severity.HIGH,
        suggested_application=application,
    )


def weak_spot(type_):
    return WeakSpot(
        id=f"weakspot-c1-{type_.value}",
        case_id="c1",
        type=type_,
        description="Landlord records incomplete",
        severity=Severity.HIGH,
        impact="Records gap undermines the defence",
    )


class TestLeverageMapping:

    def test_late_response(self):
        vuln = aggregate_vulnerabilities(make_ctx(), leverage_points=[leverage(LeverageType.LATE_RESPONSE)])[0]
        assert vuln.type == VulnerabilityType.LATE_RESPONSE
        assert vuln.id == "vuln-leverage-c1-late_response"
        assert vuln.source == InsightKind.LEVERAGE
        assert vuln.cost_to_opponent == "Potential costs order"
        assert vuln.recommended_action == "Apply for an unless order"

    def test_critical_late_response_cost(self):
        point = leverage(LeverageType.LATE_RESPONSE, Severity.CRITICAL)
        vuln = aggregate_vulnerabilities(make_ctx(), leverage_points=[point])[0]
        assert vuln.cost_to_opponent == "Potential costs order and/or strike-out risk"

    @pytest.mark.parametrize("type_,expected", [
        (LeverageType.MISSING_PRE_ACTION, VulnerabilityType.MISSING_PRE_ACTION),
        (LeverageType.MISSING_EVIDENCE, VulnerabilityType.MISSING_PARTICULARS),
        (LeverageType.DISCLOSURE_FAILURE, VulnerabilityType.INCOMPLETE_DISCLOSURE),
        (LeverageType.AWAABS_LAW_BREACH, VulnerabilityType.MISSING_RECORDS),
    ])
    def test_mapped_types(self, type_, expected):
        assert aggregate_vulnerabilities(make_ctx(), leverage_points=[leverage(type_)])[0].type == expected

    def test_awaabs_law_breach_cost(self):
        vuln = aggregate_vulnerabilities(make_ctx(), leverage_points=[leverage(LeverageType.AWAABS_LAW_BREACH)])[0]
        assert vuln.cost_to_opponent == "Statutory breach: potential injunction, damages and costs"

    def test_unmapped_types_skipped(self):
        points = [leverage(LeverageType.ADMINISTRATIVE_GAP), leverage(LeverageType.GUIDELINE_BREACH)]
        assert aggregate_vulnerabilities(make_ctx(), leverage_points=points) == []


class TestComplianceMapping:

    @pytest.mark.parametrize("breach,expected", [
        ("Late or missing disclosure list: post-issue for 40 days", VulnerabilityType.INCOMPLETE_DISCLOSURE),
        ("Missing or incomplete particulars of claim", VulnerabilityType.MISSING_PARTICULARS),
        ("Missing letter before action", VulnerabilityType.MISSING_PRE_ACTION),
        ("Pre-action protocol not followed", VulnerabilityType.MISSING_PRE_ACTION),
    ])
    def test_breach_text_mapping(self, breach, expected):
        vuln = aggregate_vulnerabilities(make_ctx(), compliance_issues=[compliance(breach)])[0]
        assert vuln.type == expected
        assert vuln.source == InsightKind.COMPLIANCE
        assert vuln.id == "vuln-cpr-c1-x"

    def test_unmapped_breach(self):
        assert aggregate_vulnerabilities(make_ctx(), compliance_issues=[compliance("No chronological clarity")]) == []

    def test_unless_order_raises_cost(self):
        issue = compliance("Late or missing disclosure list: post-issue for 60 days", ApplicationType.UNLESS_ORDER)
        vuln = aggregate_vulnerabilities(make_ctx(), compliance_issues=[issue])[0]
        assert vuln.cost_to_opponent == "Potential strike-out and costs"


class TestWeakSpotMapping:

    def test_records_and_silence(self):
        spots = [weak_spot(WeakSpotType.MISSING_RECORDS), weak_spot(WeakSpotType.NO_RESPONSE)]
        vulns = aggregate_vulnerabilities(make_ctx(), weak_spots=spots)
        assert [v.type for v in vulns] == [VulnerabilityType.MISSING_RECORDS, VulnerabilityType.LATE_RESPONSE]
        assert vulns[0].leverage == "Records gap undermines the defence"

    def test_contradiction_not_mapped(self):
        assert aggregate_vulnerabilities(make_ctx(), weak_spots=[weak_spot(WeakSpotType.CONTRADICTION)]) == []


class TestDocumentChecks:

    def test_multiple_expert_reports(self):
        ctx = make_ctx(documents=[
            {"id": "d1", "name": "Expert Report - Structural", "created_at": days_ago(10)},
            {"id": "d2", "name": "Surveyor findings", "created_at": days_ago(5)},
        ])
        vuln = aggregate_vulnerabilities(ctx)[0]
        assert vuln.id == "vuln-c1-expert_non_compliance"
        assert vuln.severity == Severity.MEDIUM
        assert vuln.evidence[0] == "2 expert reports found"

    def test_single_expert_report(self):
        ctx = make_ctx(documents=[{"id": "d1", "name": "Expert Report", "created_at": days_ago(10)}])
        assert aggregate_vulnerabilities(ctx) == []

    def test_defective_notice(self):
        ctx = make_ctx(
            "housing_disrepair",
            documents=[{"id": "d1", "name": "Section 21 Notice", "created_at": days_ago(10)}],
            timeline=[{"date": days_ago(40), "description": "Tenant reported leak to landlord"}],
        )
        vuln = aggregate_vulnerabilities(ctx)[0]
        assert vuln.type == VulnerabilityType.DEFECTIVE_NOTICE
        assert vuln.id == "vuln-c1-defective_notice"

    def test_notice_without_complaint(self):
        ctx = make_ctx(
            "housing_disrepair",
            documents=[{"id": "d1", "name": "Section 21 Notice", "created_at": days_ago(10)}],
        )
        assert aggregate_vulnerabilities(ctx) == []

    def test_notice_outside_housing(self):
        ctx = make_ctx(
            documents=[{"id": "d1", "name": "Section 21 Notice", "created_at": days_ago(10)}],
            timeline=[{"date": days_ago(40), "description": "Tenant reported leak to landlord"}],
        )
        assert aggregate_vulnerabilities(ctx) == []


def test_empty_inputs():
    assert aggregate_vulnerabilities(make_ctx(), [], [], []) == []
