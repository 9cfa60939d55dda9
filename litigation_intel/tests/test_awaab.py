"""
Tests for the Awaab's Law Detector
==================================

Tests:
1. Applicability (housing only, social landlord, qualifying hazard)
2. Investigation and work start deadlines and breach state
3. Late investigation counts as a breach
4. Emergency hazards and the recommended move
5. Settings override the statutory day counts
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.awaab import detect_awaabs_law
from litigation_intel.config import Settings
from litigation_intel.context import DetectorContext
from litigation_intel.schemas import AwaabBreachState, CaseMaterial


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def event(days, description):
    return {"date": days_ago(days), "description": description}


def make_ctx(timeline=(), documents=(), practice_area="housing_disrepair", settings=None):
    material = CaseMaterial(
        case_id="c1",
        practice_area=practice_area,
        role="claimant",
        timeline=list(timeline),
        documents=list(documents),
    )
    return DetectorContext.create(material, now=NOW, settings=settings, missing_evidence=[])


class TestApplicability:

    def test_not_housing(self):
        result = detect_awaabs_law(make_ctx([event(30, "Reported damp to the council")], practice_area="personal_injury"))
        assert not result.applies
        assert result.countdown_status == "Not applicable - not a housing disrepair case"

    def test_private_landlord(self):
        result = detect_awaabs_law(make_ctx([event(30, "Tenant reported mould to the landlord")]))
        assert not result.applies
        assert result.countdown_status == "Not applicable - private landlord"
        assert result.breach_state == AwaabBreachState.NONE

    def test_no_qualifying_hazard(self):
        result = detect_awaabs_law(make_ctx([event(30, "Tenant wrote to the council about noise")]))
        assert not result.applies
        assert result.countdown_status == "Not applicable - no qualifying hazards detected"

    def test_landlord_named_in_document(self):
        ctx = make_ctx(
            [event(5, "Tenant reported damp in the bedroom")],
            [{"id": "d1", "name": "Housing Association tenancy", "created_at": days_ago(400)}],
        )
        result = detect_awaabs_law(ctx)
        assert result.applies
        assert result.triggers == ["Damp detected", "Complaint made"]


class TestDeadlines:

    def test_investigation_breached(self):
        result = detect_awaabs_law(make_ctx([event(30, "Tenant reported damp to the council")]))
        assert result.applies
        assert result.first_report_date == days_ago(30)
        assert result.investigation_deadline == days_ago(16)
        assert result.investigation_breached
        assert not result.work_start_breached
        assert result.breach_state == AwaabBreachState.INVESTIGATION
        assert result.breached
        assert result.countdown_status == "Investigation deadline breached: 16 days overdue"
        assert result.recommended_move == "Letter before action citing the Awaab's Law breach, with settlement pressure"

    def test_investigation_deadline_running(self):
        result = detect_awaabs_law(make_ctx([event(10, "Tenant reported damp to the council")]))
        assert not result.breached
        assert result.days_until_investigation_deadline == 4
        assert result.countdown_status == "4 days until investigation deadline"
        assert result.recommended_move.startswith("Monitor the Awaab's Law deadlines")

    def test_investigation_deadline_close(self):
        result = detect_awaabs_law(make_ctx([event(12, "Tenant reported damp to the council")]))
        assert result.days_until_investigation_deadline == 2
        assert result.recommended_move.startswith("Prepare a letter before action")

    def test_work_start_breached(self):
        result = detect_awaabs_law(make_ctx([
            event(30, "Tenant reported damp to the council"),
            event(20, "Council inspection of the damp"),
        ]))
        assert result.investigation_date == days_ago(20)
        assert not result.investigation_breached
        assert result.work_start_deadline == days_ago(13)
        assert result.breach_state == AwaabBreachState.WORK_START
        assert result.countdown_status == "Work start deadline breached: 13 days overdue"
        assert "Inspection mentioned" in result.triggers

    def test_late_investigation_and_no_works(self):
        result = detect_awaabs_law(make_ctx([
            event(40, "Tenant reported damp to the council"),
            event(20, "Council inspection of the damp"),
        ]))
        assert result.investigation_breached
        assert result.work_start_breached
        assert result.breach_state == AwaabBreachState.BOTH
        assert result.countdown_status == "Investigation carried out 6 days after the deadline"

    def test_works_started_in_time(self):
        result = detect_awaabs_law(make_ctx([
            event(30, "Tenant reported damp to the council"),
            event(20, "Council inspection of the damp"),
            event(15, "Contractor started repairs"),
        ]))
        assert result.work_start_date == days_ago(15)
        assert result.breach_state == AwaabBreachState.NONE
        assert result.countdown_status == "Awaab's Law applies - monitoring deadlines"

    def test_complaint_document_sets_first_report(self):
        ctx = make_ctx(
            [event(5, "Tenant reported mould to the council")],
            [{"id": "d1", "name": "Complaint letter", "created_at": days_ago(25)}],
        )
        result = detect_awaabs_law(ctx)
        assert result.first_report_date == days_ago(25)
        assert result.investigation_breached

    def test_no_report_no_deadline(self):
        result = detect_awaabs_law(make_ctx([event(30, "Black mould in the council flat")]))
        assert result.applies
        assert result.investigation_deadline is None
        assert result.breach_state == AwaabBreachState.NONE


class TestEmergency:

    def test_health_with_mould(self):
        result = detect_awaabs_law(make_ctx([
            event(30, "Tenant reported mould to the council"),
            event(25, "GP letter: child's asthma made worse"),
        ]))
        assert result.emergency
        assert "Health impact indicators" in result.triggers
        assert result.recommended_move.startswith("Urgent letter before action")

    def test_category_one_hazard(self):
        result = detect_awaabs_law(make_ctx([
            event(30, "Tenant reported excess cold to the council"),
            event(28, "Surveyor found a Category 1 hazard"),
        ]))
        assert result.emergency

    def test_cold_without_health_is_not_emergency(self):
        result = detect_awaabs_law(make_ctx([event(30, "Tenant reported broken heating to the council")]))
        assert result.triggers[0] == "Excess cold/heating issues"
        assert not result.emergency


def test_settings_override_investigation_days():
    timeline = [event(20, "Tenant reported damp to the council")]
    assert detect_awaabs_law(make_ctx(timeline)).investigation_breached

    result = detect_awaabs_law(make_ctx(timeline, settings=Settings(awaab_investigation_days=28)))
    assert not result.investigation_breached
    assert result.days_until_investigation_deadline == 8
