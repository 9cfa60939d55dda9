"""
Tests for Time-Pressure Analysis
================================

Tests:
1. Opponent delay bands and the ideal window
2. Disclosure overdue window
3. Hearing preparation / silence, approaching deadlines
4. Settlement window
5. Awaab's Law deadlines
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.context import DetectorContext
from litigation_intel.schemas import (
    AwaabBreachState,
    AwaabsLawAssessment,
    CaseMaterial,
    OpponentActivity,
    Severity,
    TimePressureIssue,
)
from litigation_intel.time_pressure import analyze_time_pressure


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def days_ahead(n):
    return NOW + timedelta(days=n)


def make_ctx(silence=0, **material_fields):
    material = CaseMaterial(case_id="c1", practice_area="other_litigation", **material_fields)
    return DetectorContext.create(
        material, now=NOW, opponent=OpponentActivity(silence_days=silence), missing_evidence=[],
    )


def by_issue(points):
    return {p.issue: p for p in points}


class TestOpponentDelay:

    def test_ideal_window(self):
        point = by_issue(analyze_time_pressure(make_ctx(25)))[TimePressureIssue.OPPONENT_DELAY]
        assert point.severity == Severity.HIGH
        assert point.ideal_window
        assert point.days == 25

    def test_extreme_delay(self):
        point = by_issue(analyze_time_pressure(make_ctx(30)))[TimePressureIssue.OPPONENT_DELAY]
        assert point.severity == Severity.CRITICAL
        assert not point.ideal_window

    def test_approaching_window(self):
        point = by_issue(analyze_time_pressure(make_ctx(16)))[TimePressureIssue.OPPONENT_DELAY]
        assert point.severity == Severity.HIGH
        assert not point.ideal_window
        assert point.action == "Send a formal chaser warning of an application"

    def test_below_notice(self):
        assert analyze_time_pressure(make_ctx(14)) == []


class TestDisclosure:

    def test_overdue_window(self):
        ctx = make_ctx(timeline=[{"date": days_ago(40), "description": "Proceedings issued"}])
        assert by_issue(analyze_time_pressure(ctx))[TimePressureIssue.DISCLOSURE_OVERDUE].days == 40

    def test_past_window(self):
        ctx = make_ctx(timeline=[{"date": days_ago(60), "description": "Proceedings issued"}])
        assert TimePressureIssue.DISCLOSURE_OVERDUE not in by_issue(analyze_time_pressure(ctx))


class TestHearing:

    def test_urgent_preparation(self):
        point = by_issue(analyze_time_pressure(make_ctx(next_hearing_date=days_ahead(5))))[
            TimePressureIssue.HEARING_PREPARATION
        ]
        assert point.severity == Severity.CRITICAL
        assert point.deadline == days_ahead(5)

    def test_preparation(self):
        point = by_issue(analyze_time_pressure(make_ctx(next_hearing_date=days_ahead(15))))[
            TimePressureIssue.HEARING_PREPARATION
        ]
        assert point.severity == Severity.HIGH

    def test_bundle_in_timeline(self):
        ctx = make_ctx(
            next_hearing_date=days_ahead(5),
            timeline=[{"date": days_ago(2), "description": "Trial bundle agreed"}],
        )
        assert TimePressureIssue.HEARING_PREPARATION not in by_issue(analyze_time_pressure(ctx))

    def test_hearing_silence(self):
        point = by_issue(analyze_time_pressure(make_ctx(20, next_hearing_date=days_ahead(10))))[
            TimePressureIssue.HEARING_SILENCE
        ]
        assert point.severity == Severity.CRITICAL

    def test_settlement_window(self):
        points = by_issue(analyze_time_pressure(make_ctx(25, next_hearing_date=days_ahead(20))))
        assert points[TimePressureIssue.SETTLEMENT_WINDOW].severity == Severity.MEDIUM

    def test_past_hearing_ignored(self):
        assert analyze_time_pressure(make_ctx(next_hearing_date=days_ago(3))) == []


class TestDeadlines:

    def test_urgent_deadline(self):
        ctx = make_ctx(deadlines=[{"id": "d1", "title": "File listing questionnaire", "due_date": days_ahead(2)}])
        point = analyze_time_pressure(ctx)[0]
        assert point.id == "pressure-c1-deadline-d1"
        assert point.severity == Severity.CRITICAL

    def test_warning_deadline(self):
        ctx = make_ctx(deadlines=[{"id": "d1", "title": "Serve schedule", "due_date": days_ahead(6)}])
        assert analyze_time_pressure(ctx)[0].severity == Severity.HIGH

    def test_completed_and_distant_ignored(self):
        ctx = make_ctx(deadlines=[
            {"id": "d1", "title": "Serve schedule", "due_date": days_ahead(2), "status": "completed"},
            {"id": "d2", "title": "Exchange reports", "due_date": days_ahead(20)},
        ])
        assert analyze_time_pressure(ctx) == []


class TestAwaabsLaw:

    def breach(self):
        return AwaabsLawAssessment(
            applies=True,
            first_report_date=days_ago(30),
            investigation_deadline=days_ago(16),
            investigation_breached=True,
            breach_state=AwaabBreachState.INVESTIGATION,
            countdown_status="Investigation deadline breached: 16 days overdue",
            recommended_move="Letter before action citing the Awaab's Law breach, with settlement pressure",
        )

    def test_breached_deadline_is_critical(self):
        ctx = make_ctx(role="claimant")
        ctx.awaab = self.breach()
        point = by_issue(analyze_time_pressure(ctx))[TimePressureIssue.AWAABS_LAW_DEADLINE]
        assert point.severity == Severity.CRITICAL
        assert point.days == 16
        assert point.deadline == days_ago(16)
        assert point.description == "Awaab's Law deadline breached: Investigation deadline breached: 16 days overdue"
        assert point.action == "Letter before action citing the Awaab's Law breach, with settlement pressure"

    def test_approaching_deadline(self):
        ctx = make_ctx(role="claimant")
        ctx.awaab = AwaabsLawAssessment(
            applies=True,
            first_report_date=days_ago(10),
            investigation_deadline=days_ahead(4),
            days_until_investigation_deadline=4,
        )
        point = by_issue(analyze_time_pressure(ctx))[TimePressureIssue.AWAABS_LAW_DEADLINE]
        assert point.severity == Severity.HIGH
        assert point.days == 4
        assert point.description == "Awaab's Law investigation deadline in 4 days"

    def test_distant_deadline_ignored(self):
        ctx = make_ctx(role="claimant")
        ctx.awaab = AwaabsLawAssessment(applies=True, investigation_deadline=days_ahead(10))
        assert TimePressureIssue.AWAABS_LAW_DEADLINE not in by_issue(analyze_time_pressure(ctx))

    def test_defendant_action(self):
        ctx = make_ctx(role="defendant")
        ctx.awaab = self.breach()
        point = by_issue(analyze_time_pressure(ctx))[TimePressureIssue.AWAABS_LAW_DEADLINE]
        assert point.action.startswith("Arrange the investigation and works")
