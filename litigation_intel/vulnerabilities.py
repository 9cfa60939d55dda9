"""
Opponent Vulnerability Aggregator
=================================

Merges leverage points, compliance issues and weak spots into a single
vulnerability list on a smaller taxonomy, with an estimated cost to the
opponent if challenged. Adds two document-driven checks:

- EXPERT_NON_COMPLIANCE: more than one expert report on file (CPR 35 review)
- DEFECTIVE_NOTICE: housing notice documents alongside tenant complaints

Empty upstream lists are valid input and simply contribute nothing.
"""

import logging
from typing import List, Optional, Sequence

from .context import DetectorContext, insight_id, mentions
from .schemas import (
    ApplicationType,
    ComplianceIssue,
    InsightKind,
    LeveragePoint,
    LeverageType,
    OpponentVulnerability,
    Severity,
    VulnerabilityType,
    WeakSpot,
    WeakSpotType,
)

logger = logging.getLogger(__name__)

EXPERT_DOCUMENT_KEYWORDS = ["expert", "report", "medical", "surveyor", "engineer"]
NOTICE_KEYWORDS = ["notice", "section 21", "section 8", "eviction"]
COMPLAINT_KEYWORDS = ["complaint", "complaints", "complained", "report", "reported"]

# leverage type -> (vulnerability type, cost to opponent)
LEVERAGE_MAP = {
    LeverageType.LATE_RESPONSE: (VulnerabilityType.LATE_RESPONSE, "Potential costs order"),
    LeverageType.MISSING_PRE_ACTION: (
        VulnerabilityType.MISSING_PRE_ACTION,
        "Potential costs sanctions if proceedings issued prematurely",
    ),
    LeverageType.MISSING_EVIDENCE: (VulnerabilityType.MISSING_PARTICULARS, "Potential disclosure order and costs"),
    LeverageType.DISCLOSURE_FAILURE: (
        VulnerabilityType.INCOMPLETE_DISCLOSURE,
        "Potential unless order, strike-out risk and costs",
    ),
    LeverageType.AWAABS_LAW_BREACH: (
        VulnerabilityType.MISSING_RECORDS,
        "Statutory breach: potential injunction, damages and costs",
    ),
}

WEAK_SPOT_MAP = {
    WeakSpotType.MISSING_RECORDS: (VulnerabilityType.MISSING_RECORDS, "Potential disclosure order and costs"),
    WeakSpotType.NO_RESPONSE: (VulnerabilityType.LATE_RESPONSE, "Potential costs order"),
}


class OpponentVulnerabilityAggregator:
    """Normalises detector output onto the vulnerability taxonomy"""

    def aggregate(
        self,
        ctx: DetectorContext,
        leverage_points: Sequence[LeveragePoint] = (),
        compliance_issues: Sequence[ComplianceIssue] = (),
        weak_spots: Sequence[WeakSpot] = (),
    ) -> List[OpponentVulnerability]:
        vulnerabilities: List[OpponentVulnerability] = []

        for point in leverage_points:
            vuln = self._from_leverage(ctx, point)
            if vuln:
                vulnerabilities.append(vuln)

        for issue in compliance_issues:
            vuln = self._from_compliance(ctx, issue)
            if vuln:
                vulnerabilities.append(vuln)

        for spot in weak_spots:
            vuln = self._from_weak_spot(ctx, spot)
            if vuln:
                vulnerabilities.append(vuln)

        for check in (self._detect_expert_non_compliance, self._detect_defective_notice):
            vuln = check(ctx)
            if vuln:
                vulnerabilities.append(vuln)

        logger.info(f"Vulnerabilities: {len(vulnerabilities)} for case {ctx.case_id}")
        return vulnerabilities

    # -------------------------------------------------------------------------

    def _from_leverage(self, ctx: DetectorContext, point: LeveragePoint) -> Optional[OpponentVulnerability]:
        mapped = LEVERAGE_MAP.get(point.type)
        if mapped is None:
            return None
        vuln_type, cost = mapped
        if point.type == LeverageType.LATE_RESPONSE and point.severity == Severity.CRITICAL:
            cost = "Potential costs order and/or strike-out risk"
        return OpponentVulnerability(
            id=f"vuln-{point.id}",
            case_id=ctx.case_id,
            type=vuln_type,
            description=point.description,
            severity=point.severity,
            source=InsightKind.LEVERAGE,
            evidence=list(point.evidence),
            leverage=point.leverage,
            recommended_action=point.escalation_text,
            cost_to_opponent=cost,
        )

    def _from_compliance(self, ctx: DetectorContext, issue: ComplianceIssue) -> Optional[OpponentVulnerability]:
        breach = issue.breach.lower()
        if "disclosure" in breach:
            vuln_type = VulnerabilityType.INCOMPLETE_DISCLOSURE
            leverage = f"The court is likely to order compliance under {issue.rule}."
            cost = (
                "Potential strike-out and costs"
                if issue.suggested_application == ApplicationType.UNLESS_ORDER else
                "Potential costs order"
            )
        elif "particulars" in breach:
            vuln_type = VulnerabilityType.MISSING_PARTICULARS
            leverage = f"The court is likely to order further information under {issue.rule}."
            cost = "Potential costs order"
        elif "pre-action" in breach or "letter before action" in breach:
            vuln_type = VulnerabilityType.MISSING_PRE_ACTION
            leverage = "Non-compliance with the pre-action protocol attracts costs sanctions."
            cost = "Potential costs sanctions"
        else:
            return None

        return OpponentVulnerability(
            id=f"vuln-{issue.id}",
            case_id=ctx.case_id,
            type=vuln_type,
            description=issue.breach,
            severity=issue.severity,
            source=InsightKind.COMPLIANCE,
            evidence=list(issue.evidence),
            leverage=leverage,
            recommended_action=issue.application_text,
            cost_to_opponent=cost,
        )

    def _from_weak_spot(self, ctx: DetectorContext, spot: WeakSpot) -> Optional[OpponentVulnerability]:
        mapped = WEAK_SPOT_MAP.get(spot.type)
        if mapped is None:
            return None
        vuln_type, cost = mapped
        return OpponentVulnerability(
            id=f"vuln-{spot.id}",
            case_id=ctx.case_id,
            type=vuln_type,
            description=spot.description,
            severity=spot.severity,
            source=InsightKind.WEAK_SPOT,
            evidence=list(spot.evidence),
            leverage=spot.impact,
            recommended_action=spot.suggested_action,
            cost_to_opponent=cost,
        )

    def _detect_expert_non_compliance(self, ctx: DetectorContext) -> Optional[OpponentVulnerability]:
        reports = ctx.documents_matching(EXPERT_DOCUMENT_KEYWORDS)
        if len(reports) <= 1:
            return None
        return OpponentVulnerability(
            id=insight_id("vuln", ctx.case_id, "expert_non_compliance"),
            case_id=ctx.case_id,
            type=VulnerabilityType.EXPERT_NON_COMPLIANCE,
            description="Multiple expert reports detected: check for CPR 35 compliance",
            severity=Severity.MEDIUM,
            source=InsightKind.VULNERABILITY,
            evidence=[f"{len(reports)} expert reports found", "Check CPR 35.10 compliance (expert's duty to the court)"],
            leverage="Reports that do not follow CPR 35 may be challenged or excluded.",
            recommended_action="Review the expert reports for proper declarations and the expert's duty to the court.",
            cost_to_opponent="Potential exclusion of expert evidence and costs",
        )

    def _detect_defective_notice(self, ctx: DetectorContext) -> Optional[OpponentVulnerability]:
        if not ctx.is_housing:
            return None
        notices = ctx.documents_matching(NOTICE_KEYWORDS)
        if not notices or not any(mentions(e.description, COMPLAINT_KEYWORDS) for e in ctx.material.timeline):
            return None
        return OpponentVulnerability(
            id=insight_id("vuln", ctx.case_id, "defective_notice"),
            case_id=ctx.case_id,
            type=VulnerabilityType.DEFECTIVE_NOTICE,
            description="Notice served: check for defects in timing, content and service",
            severity=Severity.MEDIUM,
            source=InsightKind.VULNERABILITY,
            evidence=[f"{len(notices)} notice(s) found", "Check proper service and content compliance"],
            leverage="A defective notice may be invalid, which undermines the opponent's position.",
            recommended_action="Review the notice for timing, content and service defects.",
            cost_to_opponent="Potential invalidation of notice and costs",
        )


def aggregate_vulnerabilities(
    ctx: DetectorContext,
    leverage_points: Sequence[LeveragePoint] = (),
    compliance_issues: Sequence[ComplianceIssue] = (),
    weak_spots: Sequence[WeakSpot] = (),
) -> List[OpponentVulnerability]:
    """Convenience wrapper"""
    return OpponentVulnerabilityAggregator().aggregate(ctx, leverage_points, compliance_issues, weak_spots)
