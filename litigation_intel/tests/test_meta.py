"""
Tests for Strategic Insight Meta

Tests:
- Template selection and fallbacks never fail
- Practice-area variants
- Case-specific triggers and alternatives
- Judicial status wording
- attach_meta covers every insight
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.context import DetectorContext
from litigation_intel.meta import (
    FALLBACK_TEMPLATE,
    GENERIC_TEMPLATES,
    MetaGenerator,
    attach_meta,
    generate_meta,
    select_template,
)
from litigation_intel.schemas import (
    CaseMaterial,
    CaseMomentum,
    CaseRole,
    Confidence,
    Contradiction,
    EscalationType,
    ExpectationStatus,
    InsightKind,
    JudicialAssessment,
    JudicialCategory,
    JudicialExpectation,
    JudicialStatus,
    LeveragePoint,
    LeverageType,
    LitigationStage,
    MomentumState,
    OpponentVulnerability,
    ProceduralScenario,
    RouteId,
    Severity,
    StrategicAnalysis,
    TimePressureIssue,
    VulnerabilityType,
    WeakSpotType,
)


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def make_ctx(practice_area="other_litigation", contradictions=None, missing_evidence=(), **material_fields):
    material = CaseMaterial(case_id="c1", practice_area=practice_area, **material_fields)
    return DetectorContext.create(
        material,
        now=NOW,
        contradictions=contradictions,
        missing_evidence=None if missing_evidence is None else list(missing_evidence),
    )


class TestSelection:
    """Tests for select_template / generate_meta fallbacks"""

    def test_unknown_kind(self):
        """Unknown kinds use the catch-all"""
        assert select_template("not-a-kind", "anything") is FALLBACK_TEMPLATE
        meta = generate_meta("not-a-kind", "anything")
        assert meta.best_stage_to_use == "CCMC / case management"
        assert meta.triggered_by == ["Case analysis"]

    def test_unknown_key(self):
        """Unknown keys use the kind's generic template"""
        assert select_template(InsightKind.TIME_PRESSURE, "mystery") is GENERIC_TEMPLATES[InsightKind.TIME_PRESSURE]
        assert generate_meta(InsightKind.TIME_PRESSURE, "mystery").best_stage_to_use == "As soon as possible"

    def test_none_key(self):
        assert select_template(InsightKind.SCENARIO, None) is GENERIC_TEMPLATES[InsightKind.SCENARIO]

    def test_string_and_enum_keys(self):
        """Kinds and keys may be enums or raw strings"""
        by_enum = generate_meta(InsightKind.LEVERAGE, LeverageType.LATE_RESPONSE)
        by_string = generate_meta("leverage", "LATE_RESPONSE")
        assert by_enum == by_string
        assert by_enum.triggered_by == ["No response received within a reasonable time"]

    def test_description_when_no_triggers(self):
        """Insights with no trigger source fall back to their description"""
        meta = generate_meta(InsightKind.COMPLIANCE, "mystery", description="Rule not followed")
        assert meta.triggered_by == ["Rule not followed"]

    def test_every_field_populated(self):
        meta = generate_meta(InsightKind.STRATEGY, RouteId.DEFAULT)
        assert meta.why_recommended
        assert meta.risk_if_ignored
        assert meta.best_stage_to_use
        assert meta.how_this_helps_you_win
        assert meta.alternatives[0].label == "Targeted route"


class TestVariants:
    """Practice-area variants"""

    def test_criminal_stage(self):
        meta = generate_meta(InsightKind.LEVERAGE, LeverageType.LATE_RESPONSE, make_ctx("criminal"))
        assert meta.best_stage_to_use == "At next hearing"

    def test_housing_pre_action(self):
        meta = generate_meta(InsightKind.LEVERAGE, LeverageType.MISSING_PRE_ACTION, make_ctx("housing_disrepair"))
        assert meta.best_stage_to_use == "Early PAP stage"
        assert "Awaab's Law" in meta.why_recommended
        assert meta.triggered_by == ["Pre-action protocol letter not found", "Awaab's Law compliance check"]

    def test_non_housing_pre_action(self):
        meta = generate_meta(InsightKind.LEVERAGE, LeverageType.MISSING_PRE_ACTION, make_ctx())
        assert meta.triggered_by == ["Pre-action protocol letter not found"]


class TestCaseTriggers:
    """Triggers and alternatives drawn from the case itself"""

    def test_last_letter(self):
        ctx = make_ctx(letters=[
            {"id": "l1", "created_at": datetime(2025, 3, 1, tzinfo=timezone.utc)},
            {"id": "l2", "created_at": datetime(2025, 5, 1, tzinfo=timezone.utc)},
        ])
        meta = generate_meta(InsightKind.LEVERAGE, LeverageType.LATE_RESPONSE, ctx)
        assert "Last letter sent: 2025-05-01" in meta.triggered_by

    def test_contradictions(self):
        ctx = make_ctx(contradictions=[Contradiction(description="Inspection dates differ")])
        meta = generate_meta(InsightKind.WEAK_SPOT, WeakSpotType.CONTRADICTION, ctx)
        assert meta.best_stage_to_use == "At trial / cross-examination"
        assert meta.triggered_by == ["Contradiction: Inspection dates differ"]

    def test_injury_missing_evidence(self):
        ctx = make_ctx("personal_injury", missing_evidence=None)
        meta = generate_meta(InsightKind.WEAK_SPOT, WeakSpotType.MISSING_EVIDENCE, ctx)
        assert meta.best_stage_to_use == "Pre-trial review"
        assert "Missing: Medical Records (GP & Hospital)" in meta.triggered_by
        assert "Missing: Client Identification" not in meta.triggered_by
        assert len(meta.alternatives) == 1
        assert meta.alternatives[0].label == "Complete evidence route"
        assert "Upload Medical Records (GP & Hospital)" in meta.alternatives[0].unlocked_by

    def test_evidence_and_template_triggers_deduplicated(self):
        meta = generate_meta(
            InsightKind.TIME_PRESSURE,
            TimePressureIssue.OPPONENT_DELAY,
            evidence=["Opponent delays detected", "opponent  delays detected "],
        )
        assert meta.triggered_by == ["Opponent delays detected", "Response time analysis"]

    def test_hearing_date_for_settlement_route(self):
        ctx = make_ctx(next_hearing_date=datetime(2025, 6, 21, tzinfo=timezone.utc))
        meta = generate_meta(InsightKind.STRATEGY, RouteId.D, ctx)
        assert "Next hearing: 2025-06-21" in meta.triggered_by

    def test_vulnerabilities_feed_procedural_route(self):
        vuln = OpponentVulnerability(
            id="v1", case_id="c1", type=VulnerabilityType.LATE_RESPONSE,
            description="Opponent silent for 30 days", severity=Severity.HIGH, source=InsightKind.LEVERAGE,
        )
        meta = MetaGenerator(make_ctx(), [vuln]).generate(InsightKind.STRATEGY, RouteId.A)
        assert "Opponent silent for 30 days" in meta.triggered_by


class TestJudicialStatus:

    def test_met(self):
        meta = MetaGenerator().generate(InsightKind.JUDICIAL, JudicialCategory.DIRECTIONS, status=ExpectationStatus.MET)
        assert meta.why_recommended.endswith("Your file already shows this.")
        assert meta.risk_if_ignored == "Maintaining compliance is important."

    def test_not_met(self):
        meta = MetaGenerator().generate(
            InsightKind.JUDICIAL, JudicialCategory.DIRECTIONS, status=ExpectationStatus.NOT_MET,
        )
        assert meta.why_recommended.endswith("addressing it will strengthen the case.")
        assert meta.risk_if_ignored == "Sanctions with relief only under CPR 3.9."


def test_attach_meta_covers_every_insight():
    """Every insight in the analysis carries meta; the input is not modified"""
    analysis = StrategicAnalysis(
        case_id="c1",
        practice_area="other_litigation",
        role=CaseRole.CLAIMANT,
        generated_at=NOW,
        momentum=CaseMomentum(
            case_id="c1", state=MomentumState.BALANCED, score=0, explanation="x",
            confidence=Confidence.LOW, role=CaseRole.CLAIMANT,
        ),
        leverage_points=[LeveragePoint(
            id="leverage-c1-late_response", case_id="c1", type=LeverageType.LATE_RESPONSE,
            description="No reply", severity=Severity.HIGH, suggested_escalation=EscalationType.UNLESS_ORDER,
        )],
        scenarios=[ProceduralScenario(
            id="scenario-c1-settlement", case_id="c1", title="Settlement becomes likely",
            trigger="If you make a settlement offer", outcome="Likely", confidence=Confidence.MEDIUM,
        )],
        judicial=JudicialAssessment(
            case_id="c1",
            stage=LitigationStage.PRE_ACTION,
            status=JudicialStatus.NON_COMPLIANT,
            expectations=[JudicialExpectation(
                id="expectation-c1-pre_action", case_id="c1", stage=LitigationStage.PRE_ACTION,
                category=JudicialCategory.PRE_ACTION, expectation="Pre-action protocol letter sent",
                status=ExpectationStatus.NOT_MET,
            )],
        ),
    )

    annotated = attach_meta(analysis, make_ctx())

    assert annotated.leverage_points[0].meta is not None
    assert annotated.scenarios[0].meta.best_stage_to_use == "Pre-trial review / Settlement window"
    expectation = annotated.judicial.expectations[0]
    assert expectation.meta.why_recommended.endswith("addressing it will strengthen the case.")
    assert analysis.leverage_points[0].meta is None
    assert analysis.judicial.expectations[0].meta is None
