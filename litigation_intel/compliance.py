"""
Procedural Compliance Checker
=============================

Deterministic rule checks, each mapped to one suggested application:

| Rule                          | Condition                                      | Severity / application                |
|-------------------------------|------------------------------------------------|---------------------------------------|
| CPR 31.10                     | post-issue, no disclosure docs, > 28 days      | high / further info; > 56 critical / unless order |
| CPR 16.4                      | post-issue, no particulars / statement of case | high / further info                   |
| Pre-Action Protocol           | no protocol letter, > 30 days since first event| high / direction                      |
| Pre-Action Protocol (Housing) | tenancy agreement missing                      | high / further info                   |
| Pre-Action Protocol (PI/CN)   | medical or expert evidence missing, by role    | critical or high / further info       |
| Pre-Action Protocol           | > 5 timeline events, no chronology             | medium / further info                 |
| Pre-Action Protocol (Housing) | hazard language, no hazard assessment          | high / further info                   |
"""

import logging
from typing import List, Optional

from .context import DetectorContext, insight_id, mentions
from .leverage import DISCLOSURE_DOCUMENT_KEYWORDS, PRE_ACTION_TEMPLATES
from .schemas import ApplicationType, ComplianceIssue, MissingEvidenceItem, Severity

logger = logging.getLogger(__name__)

PARTICULARS_KEYWORDS = ["particulars", "particulars of claim", "statement of case"]
MEDICAL_RECORD_KEYWORDS = [
    "medical records", "hospital records", "gp records", "clinical notes", "a&e", "radiology", "treatment records",
]
CHRONOLOGY_KEYWORDS = ["chronology"]
HAZARD_KEYWORDS = ["hazard", "hazards", "hhsrs", "mold", "mould", "damp"]
HAZARD_ASSESSMENT_KEYWORDS = ["hazard assessment", "hhsrs", "environmental health", "eho"]
CHRONOLOGY_EVENT_THRESHOLD = 5


def _first_missing(ctx: DetectorContext, fragments: List[str]) -> Optional[MissingEvidenceItem]:
    """First critical missing item whose label contains any fragment"""
    for item in ctx.critical_missing:
        label = item.label.lower()
        if any(f in label for f in fragments):
            return item
    return None


class ProceduralComplianceChecker:
    """Fixed-threshold compliance rules"""

    def check(self, ctx: DetectorContext) -> List[ComplianceIssue]:
        issues: List[ComplianceIssue] = []
        checks = [
            self._check_disclosure,
            self._check_particulars,
            self._check_pre_action,
            self._check_tenancy,
            self._check_medical_evidence,
            self._check_chronology,
            self._check_hazard_assessment,
        ]
        for check in checks:
            issue = check(ctx)
            if issue:
                issues.append(issue)

        logger.info(f"Compliance: {len(issues)} issues for case {ctx.case_id}")
        return issues

    # -------------------------------------------------------------------------

    def _check_disclosure(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        issue = ctx.issue_event
        if issue is None or ctx.has_document(DISCLOSURE_DOCUMENT_KEYWORDS):
            return None
        days = ctx.days_since(issue.date)
        if days <= ctx.settings.disclosure_due_days:
            return None

        critical = days > ctx.settings.disclosure_critical_days
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "late_disclosure"),
            case_id=ctx.case_id,
            rule="CPR 31.10",
            breach=f"Late or missing disclosure list: post-issue for {days} days",
            severity=Severity.CRITICAL if critical else Severity.HIGH,
            evidence=[f"Issue date: {issue.date.date().isoformat()}", f"Days since issue: {days}"],
            suggested_application=ApplicationType.UNLESS_ORDER if critical else ApplicationType.FURTHER_INFORMATION,
            application_text=(
                "Apply for an unless order to compel disclosure on pain of strike-out."
                if critical else
                "Request the disclosure list required under CPR 31.10."
            ),
        )

    def _check_particulars(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        if not ctx.is_post_issue or ctx.has_document(PARTICULARS_KEYWORDS):
            return None
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "missing_particulars"),
            case_id=ctx.case_id,
            rule="CPR 16.4",
            breach="Missing or incomplete particulars of claim",
            severity=Severity.HIGH,
            evidence=["No particulars of claim found in documents"],
            suggested_application=ApplicationType.FURTHER_INFORMATION,
            application_text="Request further information; particulars must be clear and complete.",
        )

    def _check_pre_action(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        first = ctx.first_event
        if first is None or ctx.has_letter(PRE_ACTION_TEMPLATES):
            return None
        days = ctx.days_since(first.date)
        if days <= ctx.settings.pre_action_grace_days:
            return None
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "missing_pre_action"),
            case_id=ctx.case_id,
            rule="Pre-Action Protocol",
            breach="Missing letter before action",
            severity=Severity.HIGH,
            evidence=[f"First complaint: {first.date.date().isoformat()}", f"Days since complaint: {days}"],
            suggested_application=ApplicationType.DIRECTION,
            application_text="Send the pre-action protocol letter before issuing proceedings.",
        )

    def _check_tenancy(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        if not ctx.is_housing:
            return None
        missing = next((m for m in ctx.missing_evidence if "tenancy" in m.label.lower()), None)
        if missing is None:
            return None
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "missing_tenancy"),
            case_id=ctx.case_id,
            rule="Pre-Action Protocol (Housing)",
            breach="Missing tenancy agreement",
            severity=Severity.HIGH,
            evidence=[missing.reason],
            suggested_application=ApplicationType.FURTHER_INFORMATION,
            application_text="Obtain the tenancy agreement; it establishes the landlord's repairing obligations.",
        )

    def _check_medical_evidence(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        if not ctx.is_injury_claim:
            return None

        has_records = ctx.has_document(MEDICAL_RECORD_KEYWORDS)
        rule = "Pre-Action Protocol (PI/Clinical Neg)"

        if ctx.is_claimant:
            if has_records:
                missing_expert = _first_missing(ctx, ["expert", "breach", "causation"])
                if missing_expert is None:
                    return None
                return ComplianceIssue(
                    id=insight_id("cpr", ctx.case_id, "missing_expert"),
                    case_id=ctx.case_id,
                    rule=rule,
                    breach="Expert evidence not yet uploaded: required to finalise breach/causation opinion",
                    severity=Severity.CRITICAL,
                    evidence=[missing_expert.reason],
                    suggested_application=ApplicationType.FURTHER_INFORMATION,
                    application_text="Obtain expert evidence on breach and causation.",
                )
            missing_medical = _first_missing(ctx, ["medical", "gp", "hospital"])
            if missing_medical is None:
                return None
            return ComplianceIssue(
                id=insight_id("cpr", ctx.case_id, "missing_medical"),
                case_id=ctx.case_id,
                rule=rule,
                breach="Expert evidence required: medical records and expert opinion needed to formalise breach and causation",
                severity=Severity.HIGH,
                evidence=[missing_medical.reason],
                suggested_application=ApplicationType.FURTHER_INFORMATION,
                application_text="Obtain the medical records, then expert evidence confirming breach and causation.",
            )

        missing_medical = _first_missing(ctx, ["medical", "gp", "hospital"])
        if missing_medical is None:
            return None
        merits = ctx.merits
        strong = bool(
            merits
            and merits.guideline_breaches.detected
            and merits.expert_confirmation.detected
            and merits.serious_harm.detected
        )
        softened = strong or has_records
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "missing_medical"),
            case_id=ctx.case_id,
            rule=rule,
            breach=(
                "Expert evidence not yet uploaded: underlying medical records support the claim"
                if softened else
                "Missing medical evidence: required for causation"
            ),
            severity=Severity.HIGH if softened else Severity.CRITICAL,
            evidence=[missing_medical.reason],
            suggested_application=ApplicationType.FURTHER_INFORMATION,
            application_text=(
                "Request the expert evidence relied on for breach and causation."
                if softened else
                "Request the medical records; they are essential to causation and quantum."
            ),
        )

    def _check_chronology(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        events = len(ctx.material.timeline)
        has_chronology = bool(ctx.material.chronology) or ctx.has_document(CHRONOLOGY_KEYWORDS)
        if has_chronology or events <= CHRONOLOGY_EVENT_THRESHOLD:
            return None
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "missing_chronology"),
            case_id=ctx.case_id,
            rule="Pre-Action Protocol",
            breach="No chronological clarity",
            severity=Severity.MEDIUM,
            evidence=[f"{events} timeline events but no clear chronology"],
            suggested_application=ApplicationType.FURTHER_INFORMATION,
            application_text="Prepare or request a chronological summary of events.",
        )

    def _check_hazard_assessment(self, ctx: DetectorContext) -> Optional[ComplianceIssue]:
        if not ctx.is_housing or ctx.has_document(HAZARD_ASSESSMENT_KEYWORDS):
            return None
        if not any(mentions(e.description, HAZARD_KEYWORDS) for e in ctx.material.timeline):
            return None
        return ComplianceIssue(
            id=insight_id("cpr", ctx.case_id, "missing_hazard_assessment"),
            case_id=ctx.case_id,
            rule="Pre-Action Protocol (Housing)",
            breach="Missing hazard assessment",
            severity=Severity.HIGH,
            evidence=["Hazards mentioned in timeline but no assessment document"],
            suggested_application=ApplicationType.FURTHER_INFORMATION,
            application_text="Request a hazard assessment to establish HHSRS Category 1 hazards.",
        )


def check_compliance(ctx: DetectorContext) -> List[ComplianceIssue]:
    """Convenience wrapper"""
    return ProceduralComplianceChecker().check(ctx)
