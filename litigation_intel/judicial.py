"""
Judicial Expectation Map
========================

What a judge typically expects to see at each stage, and whether the case
file shows it:

| Stage                 | Expectations                                         |
|-----------------------|------------------------------------------------------|
| intake / pre_action   | client instructions, chronology, pre-action letter*  |
| post_issue/disclosure | disclosure list, compliance with directions          |
| hearing               | medical evidence (PI/CN), CPR 35 experts, trial bundle|
| any (housing)         | Awaab's Law understood                               |

(* pre_action only.) When the case material carries no stage it is inferred
from the hearing date, the issue date and the correspondence.

Overall status: COMPLIANT when everything is met, PARTIAL when nothing is
outright unmet, NON_COMPLIANT otherwise.
"""

import logging
from typing import List

from .context import DetectorContext, insight_id
from .compliance import MEDICAL_RECORD_KEYWORDS
from .leverage import DISCLOSURE_DOCUMENT_KEYWORDS, PRE_ACTION_TEMPLATES
from .schemas import (
    ExpectationStandard,
    ExpectationStatus,
    JudicialAssessment,
    JudicialCategory,
    JudicialExpectation,
    JudicialStatus,
    LitigationStage,
)

logger = logging.getLogger(__name__)

INSTRUCTION_KEYWORDS = ["instruction", "instructions", "client authority"]
EXPERT_KEYWORDS = ["expert"]
BUNDLE_KEYWORDS = ["bundle", "trial"]
AWAAB_KEYWORDS = ["awaab", "under-5", "under 5", "child", "children"]
HEARING_STAGE_DAYS = 28


def infer_stage(ctx: DetectorContext) -> LitigationStage:
    """Stage from the material, else from hearing date / issue date / correspondence"""
    if ctx.material.stage is not None:
        return ctx.material.stage
    remaining = ctx.days_until_hearing
    if remaining is not None and 0 <= remaining <= HEARING_STAGE_DAYS:
        return LitigationStage.HEARING
    if ctx.is_post_issue:
        if ctx.has_document(DISCLOSURE_DOCUMENT_KEYWORDS):
            return LitigationStage.DISCLOSURE
        return LitigationStage.POST_ISSUE
    if ctx.material.letters or ctx.material.timeline:
        return LitigationStage.PRE_ACTION
    return LitigationStage.INTAKE


def overall_status(expectations: List[JudicialExpectation]) -> JudicialStatus:
    if any(e.status == ExpectationStatus.NOT_MET for e in expectations):
        return JudicialStatus.NON_COMPLIANT
    if any(e.status == ExpectationStatus.PARTIAL for e in expectations):
        return JudicialStatus.PARTIAL
    return JudicialStatus.COMPLIANT


class JudicialExpectationMapper:

    def assess(self, ctx: DetectorContext) -> JudicialAssessment:
        stage = infer_stage(ctx)
        expectations: List[JudicialExpectation] = []

        def expect(category, expectation, met, description, warning, standard=ExpectationStandard.REQUIRED,
                   unmet=ExpectationStatus.NOT_MET, rule=None, evidence=None):
            status = ExpectationStatus.MET if met else unmet
            expectations.append(JudicialExpectation(
                id=insight_id("expectation", ctx.case_id, category.value),
                case_id=ctx.case_id,
                stage=stage,
                category=category,
                expectation=expectation,
                standard=standard,
                status=status,
                description=description,
                warning=None if met else warning,
                rule=rule,
                evidence=evidence or [],
            ))

        if stage in (LitigationStage.INTAKE, LitigationStage.PRE_ACTION):
            expect(
                JudicialCategory.INSTRUCTIONS,
                "Clear client instructions documented",
                ctx.has_document(INSTRUCTION_KEYWORDS),
                "Judges expect client instructions to be documented from the outset.",
                "Missing client instructions may raise compliance concerns.",
            )
            expect(
                JudicialCategory.CHRONOLOGY,
                "Structured chronology available",
                bool(ctx.material.chronology) or ctx.has_document(["chronology"]),
                "Judges expect a clear, structured chronology of the case.",
                "No clear chronology: judges expect a structured timeline.",
                standard=ExpectationStandard.EXPECTED,
                unmet=ExpectationStatus.PARTIAL,
            )
            if stage == LitigationStage.PRE_ACTION:
                expect(
                    JudicialCategory.PRE_ACTION,
                    "Pre-action protocol letter sent",
                    ctx.has_letter(PRE_ACTION_TEMPLATES),
                    "Judges expect pre-action protocol compliance before proceedings are issued.",
                    "Missing pre-action letter: may result in costs sanctions.",
                    rule="Pre-Action Protocol",
                )

        if stage in (LitigationStage.POST_ISSUE, LitigationStage.DISCLOSURE):
            expect(
                JudicialCategory.DISCLOSURE,
                "Disclosure list provided",
                ctx.has_document(DISCLOSURE_DOCUMENT_KEYWORDS),
                "Judges expect proper disclosure under CPR 31.10.",
                "Missing disclosure: required under CPR 31.10 and may result in sanctions.",
                rule="CPR 31.10",
            )
            overdue = ctx.overdue_deadlines()
            expect(
                JudicialCategory.DIRECTIONS,
                "Compliance with court directions",
                not overdue,
                "Judges expect strict compliance with directions and deadlines.",
                f"{len(overdue)} deadline(s) overdue: non-compliance with directions risks sanctions.",
                rule="CPR 3.9",
                evidence=[f"Overdue: {d.title}" for d in overdue],
            )

        if stage == LitigationStage.HEARING:
            if ctx.is_injury_claim:
                expect(
                    JudicialCategory.MEDICAL,
                    "Medical evidence available",
                    ctx.has_document(MEDICAL_RECORD_KEYWORDS + ["medical"]),
                    "Judges expect medical evidence on causation and quantum in injury claims.",
                    "Missing medical evidence: essential for personal injury and clinical negligence claims.",
                )
            expect(
                JudicialCategory.EXPERT,
                "Expert reports comply with CPR 35",
                ctx.has_document(EXPERT_KEYWORDS),
                "Judges expect expert reports to comply with CPR 35 (the expert's duty to the court).",
                "No expert reports: may be required depending on case complexity.",
                unmet=ExpectationStatus.PARTIAL,
                rule="CPR 35",
            )
            expect(
                JudicialCategory.TRIAL_BUNDLE,
                "Trial bundle prepared",
                ctx.has_document(BUNDLE_KEYWORDS),
                "Judges expect a properly prepared trial bundle before the hearing.",
                "Missing trial bundle: required before the hearing and may result in an adjournment.",
                rule="PD 39A",
            )

        if ctx.is_housing:
            expect(
                JudicialCategory.AWAAB,
                "Awaab's Law compliance understood (if applicable)",
                bool(ctx.timeline_matching(AWAAB_KEYWORDS)),
                "Judges expect an understanding of Awaab's Law duties for social landlords.",
                "No Awaab's Law triggers recorded: confirm whether the duty applies.",
                standard=ExpectationStandard.EXPECTED,
                unmet=ExpectationStatus.PARTIAL,
            )

        status = overall_status(expectations)
        logger.info(f"Judicial: stage={stage.value} status={status.value} ({len(expectations)} expectations) for case {ctx.case_id}")
        return JudicialAssessment(case_id=ctx.case_id, stage=stage, expectations=expectations, status=status)


def map_judicial_expectations(ctx: DetectorContext) -> JudicialAssessment:
    """Convenience wrapper"""
    return JudicialExpectationMapper().assess(ctx)
