"""
Tests for Procedural Compliance Checks
======================================

Tests:
1. Disclosure and particulars after issue
2. Pre-action letter, tenancy, chronology, hazard assessment
3. Role-aware medical/expert evidence checks
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.compliance import check_compliance
from litigation_intel.context import DetectorContext
from litigation_intel.schemas import ApplicationType, CaseMaterial, CaseRole, Severity


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def make_ctx(practice_area="other_litigation", **material_fields):
    material = CaseMaterial(case_id="c1", practice_area=practice_area, **material_fields)
    return DetectorContext.create(material, now=NOW)


def by_rule_breach(issues):
    return {i.breach: i for i in issues}


def issued(days):
    return [{"date": days_ago(days), "description": "Claim form issued"}]


class TestPostIssue:

    def test_late_disclosure(self):
        issues = by_rule_breach(check_compliance(make_ctx(timeline=issued(40))))
        issue = issues["Late or missing disclosure list: post-issue for 40 days"]
        assert issue.rule == "CPR 31.10"
        assert issue.severity == Severity.HIGH
        assert issue.suggested_application == ApplicationType.FURTHER_INFORMATION

    def test_very_late_disclosure(self):
        issues = by_rule_breach(check_compliance(make_ctx(timeline=issued(60))))
        issue = issues["Late or missing disclosure list: post-issue for 60 days"]
        assert issue.severity == Severity.CRITICAL
        assert issue.suggested_application == ApplicationType.UNLESS_ORDER

    def test_missing_particulars(self):
        issues = by_rule_breach(check_compliance(make_ctx(timeline=issued(10))))
        assert issues["Missing or incomplete particulars of claim"].rule == "CPR 16.4"

    def test_particulars_on_file(self):
        ctx = make_ctx(
            timeline=issued(10),
            documents=[{"id": "d1", "name": "Particulars of Claim", "created_at": days_ago(10)}],
        )
        assert "Missing or incomplete particulars of claim" not in by_rule_breach(check_compliance(ctx))

    def test_nothing_before_issue(self):
        breaches = by_rule_breach(check_compliance(make_ctx()))
        assert breaches == {}


class TestPreAction:

    def test_missing_letter_before_action_any_area(self):
        ctx = make_ctx(timeline=[{"date": days_ago(45), "description": "Contract terminated"}])
        issue = by_rule_breach(check_compliance(ctx))["Missing letter before action"]
        assert issue.suggested_application == ApplicationType.DIRECTION
        assert issue.severity == Severity.HIGH

    def test_protocol_letter_on_file(self):
        ctx = make_ctx(
            timeline=[{"date": days_ago(45), "description": "Contract terminated"}],
            letters=[{"id": "l1", "created_at": days_ago(40), "template_id": "pre_action_letter"}],
        )
        assert "Missing letter before action" not in by_rule_breach(check_compliance(ctx))

    def test_chronology_needed_for_long_timeline(self):
        timeline = [{"date": days_ago(20 - i), "description": f"Meeting {i}"} for i in range(6)]
        issue = by_rule_breach(check_compliance(make_ctx(timeline=timeline)))["No chronological clarity"]
        assert issue.severity == Severity.MEDIUM

    def test_chronology_supplied(self):
        timeline = [{"date": days_ago(20 - i), "description": f"Meeting {i}"} for i in range(6)]
        ctx = make_ctx(timeline=timeline, chronology=["2025-05-12 first meeting"])
        assert "No chronological clarity" not in by_rule_breach(check_compliance(ctx))


class TestHousing:

    def test_missing_tenancy(self):
        assert "Missing tenancy agreement" in by_rule_breach(check_compliance(make_ctx("housing_disrepair")))

    def test_hazard_assessment(self):
        ctx = make_ctx("housing_disrepair", timeline=[{"date": days_ago(10), "description": "Damp and mould in bedroom"}])
        assert by_rule_breach(check_compliance(ctx))["Missing hazard assessment"].severity == Severity.HIGH

    def test_hazard_assessment_on_file(self):
        ctx = make_ctx(
            "housing_disrepair",
            timeline=[{"date": days_ago(10), "description": "Damp and mould in bedroom"}],
            documents=[{"id": "d1", "name": "HHSRS inspection", "created_at": days_ago(5)}],
        )
        assert "Missing hazard assessment" not in by_rule_breach(check_compliance(ctx))


class TestMedicalEvidence:

    def test_claimant_with_records_needs_expert(self):
        ctx = make_ctx(
            "clinical_negligence",
            documents=[{"id": "d1", "name": "Full Medical Records", "created_at": days_ago(30)}],
        )
        issues = [i for i in check_compliance(ctx) if i.id == "cpr-c1-missing_expert"]
        assert len(issues) == 1
        assert issues[0].severity == Severity.CRITICAL
        assert issues[0].evidence == ["Expert opinion on the standard of care"]

    def test_claimant_without_records(self):
        issues = [i for i in check_compliance(make_ctx("personal_injury")) if i.id == "cpr-c1-missing_medical"]
        assert issues[0].severity == Severity.HIGH
        assert issues[0].breach.startswith("Expert evidence required")

    def test_defendant_without_records(self):
        ctx = make_ctx("personal_injury", role=CaseRole.DEFENDANT)
        issue = [i for i in check_compliance(ctx) if i.id == "cpr-c1-missing_medical"][0]
        assert issue.severity == Severity.CRITICAL
        assert issue.breach == "Missing medical evidence: required for causation"

    def test_not_for_other_areas(self):
        ids = [i.id for i in check_compliance(make_ctx("criminal"))]
        assert "cpr-c1-missing_medical" not in ids
