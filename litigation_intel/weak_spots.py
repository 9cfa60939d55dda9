"""
Opponent Weak-Spot Detector
===========================

Weak spot types:
1. CONTRADICTION - high/medium confidence contradictions from the bundle
   (max 5); high -> critical, medium -> high
2. MISSING_EVIDENCE - critical checklist gaps (max 3), high
3. TIMELINE_GAP - largest gap between consecutive events > 90 days
   (high when > 180)
4. WRONG_DATE - housing: repair/completion dated before the report
5. MISSING_RECORDS - housing: complaints but no repair log/record/history
6. NO_RESPONSE - housing: 3+ tenant reports with no response in the timeline

For claimants, gaps and contradictions that only concern client-care
paperwork are downgraded to medium, the same rule the leverage detector uses.
"""

import logging
from typing import List, Optional, Tuple

from .context import DetectorContext, insight_id, mentions
from .missing_evidence import is_administrative
from .schemas import Confidence, MissingEvidenceItem, Severity, WeakSpot, WeakSpotType

logger = logging.getLogger(__name__)

MAX_CONTRADICTIONS = 5
MAX_MISSING = 3

REPORT_KEYWORDS = ["report", "reported", "reports", "complaint", "complained", "complaints"]
REPAIR_KEYWORDS = ["repair", "repaired", "repairs", "fixed", "completed"]
RESPONSE_KEYWORDS = ["response", "responded", "acknowledgment", "acknowledgement", "acknowledged"]
REPAIR_RECORD_QUALIFIERS = ["log", "record", "records", "history"]


class OpponentWeakSpotDetector:
    """Weak-spot detector over contradictions, checklist gaps and the timeline"""

    def detect(self, ctx: DetectorContext) -> List[WeakSpot]:
        spots: List[WeakSpot] = []
        spots.extend(self._detect_contradictions(ctx))
        spots.extend(self._detect_missing_evidence(ctx))

        gap = self._detect_timeline_gap(ctx)
        if gap:
            spots.append(gap)

        if ctx.is_housing:
            spots.extend(self._detect_wrong_dates(ctx))
            for check in (self._detect_missing_records, self._detect_no_response):
                spot = check(ctx)
                if spot:
                    spots.append(spot)

        logger.info(f"Weak spots: {len(spots)} for case {ctx.case_id}")
        return spots

    # -------------------------------------------------------------------------

    def _detect_contradictions(self, ctx: DetectorContext) -> List[WeakSpot]:
        if not ctx.material.bundle_id:
            return []
        usable = [c for c in ctx.contradictions if c.confidence in (Confidence.HIGH, Confidence.MEDIUM)]

        spots = []
        for i, contradiction in enumerate(usable[:MAX_CONTRADICTIONS]):
            severity = Severity.CRITICAL if contradiction.confidence == Confidence.HIGH else Severity.HIGH
            if ctx.is_claimant and is_administrative(contradiction.description):
                severity = Severity.MEDIUM
            spots.append(WeakSpot(
                id=insight_id("weakspot", ctx.case_id, "contradiction", contradiction.id or str(i)),
                case_id=ctx.case_id,
                type=WeakSpotType.CONTRADICTION,
                severity=severity,
                description=f"Contradictory statements detected: {contradiction.description}",
                evidence=[contradiction.description, f"Confidence: {contradiction.confidence.value}"],
                impact=(
                    "Highlighting this contradiction weakens the opponent's account and can be used "
                    "in cross-examination or to challenge credibility."
                ),
                suggested_action="Prepare cross-examination questions or put the contradiction in your response.",
            ))
        return spots

    def _detect_missing_evidence(self, ctx: DetectorContext) -> List[WeakSpot]:
        spots = []
        for item in ctx.critical_missing[:MAX_MISSING]:
            impact, action, basis = self._missing_evidence_analysis(item)
            severity = Severity.HIGH
            if ctx.is_claimant and item.administrative:
                severity = Severity.MEDIUM
            spots.append(WeakSpot(
                id=insight_id("weakspot", ctx.case_id, "missing_evidence", item.requirement_id),
                case_id=ctx.case_id,
                type=WeakSpotType.MISSING_EVIDENCE,
                severity=severity,
                description=f"Critical evidence missing: {item.label}",
                evidence=[item.reason, f"Category: {item.category.value}", f"Legal basis: {basis}"],
                impact=impact,
                suggested_action=action,
                legal_basis=basis,
            ))
        return spots

    @staticmethod
    def _missing_evidence_analysis(item: MissingEvidenceItem) -> Tuple[str, str, str]:
        """(impact, tactical advice, legal basis)"""
        label = item.label.lower()
        if any(k in label for k in ("medical", "gp", "hospital")):
            return (
                "Medical records establish causation and quantum; without them the extent of injury "
                "and the causal link cannot be proved.",
                "Request disclosure under CPR 31.10 within 14 days, then apply under CPR 31.12.",
                "CPR 31.10, CPR 31.12, burden of proof on causation",
            )
        if "accident" in label or "circumstances" in label:
            return (
                "Without the accident circumstances, how the accident occurred and who was at fault cannot be proved.",
                "Request disclosure under CPR 31.10; if refused apply for specific disclosure under CPR 31.12.",
                "CPR 31.10, CPR 31.12, burden of proof on liability",
            )
        if "expert" in label or "report" in label:
            return (
                "Expert evidence is needed for breach, causation and quantum; without it those issues cannot be proved.",
                "Request the expert reports under CPR 35.10 and seek directions under CPR 35.8 if needed.",
                "CPR 35.10, CPR 35.8",
            )
        return (
            f"Without {item.label} key elements of the case cannot be established.",
            "Request disclosure under CPR 31.10; if not provided apply for specific disclosure under CPR 31.12.",
            "CPR 31.10, CPR 31.12",
        )

    def _detect_timeline_gap(self, ctx: DetectorContext) -> Optional[WeakSpot]:
        events = ctx.material.timeline
        if len(events) <= 2:
            return None

        largest = None
        for previous, current in zip(events, events[1:]):
            days = (current.date - previous.date).days
            if days > ctx.settings.timeline_gap_days and (largest is None or days > largest[2]):
                largest = (previous, current, days)
        if largest is None:
            return None

        previous, current, days = largest
        return WeakSpot(
            id=insight_id("weakspot", ctx.case_id, "timeline_gap"),
            case_id=ctx.case_id,
            type=WeakSpotType.TIMELINE_GAP,
            severity=Severity.HIGH if days > ctx.settings.timeline_gap_high_days else Severity.MEDIUM,
            description=f"Significant timeline gap detected: {days} days between events",
            evidence=[
                f"From: {previous.date.date().isoformat()} ({previous.description})",
                f"To: {current.date.date().isoformat()} ({current.description})",
                f"Gap: {days} days",
            ],
            impact="Large gaps suggest missing documentation and justify a request for information about the period.",
            suggested_action="Request clarification of events during this period.",
        )

    def _detect_wrong_dates(self, ctx: DetectorContext) -> List[WeakSpot]:
        reports = ctx.timeline_matching(REPORT_KEYWORDS)
        repairs = ctx.timeline_matching(REPAIR_KEYWORDS)

        spots = []
        for report in reports:
            for repair in repairs:
                if repair is report or repair.date >= report.date:
                    continue
                report_day = report.date.date().isoformat()
                repair_day = repair.date.date().isoformat()
                spots.append(WeakSpot(
                    id=insight_id("weakspot", ctx.case_id, "wrong_date", report_day),
                    case_id=ctx.case_id,
                    type=WeakSpotType.WRONG_DATE,
                    severity=Severity.HIGH,
                    description=f"Date inconsistency: repair completed ({repair_day}) before defect reported ({report_day})",
                    evidence=[f"Report date: {report_day}", f"Repair date: {repair_day}"],
                    impact="The opponent's timeline becomes untenable; use it to challenge their records or credibility.",
                    suggested_action="Challenge the date inconsistency; it points to incorrect records.",
                ))
                break
        return spots

    def _detect_missing_records(self, ctx: DetectorContext) -> Optional[WeakSpot]:
        has_repair_records = any(
            mentions(d.name, ["repair", "repairs"]) and mentions(d.name, REPAIR_RECORD_QUALIFIERS)
            for d in ctx.material.documents
        )
        if has_repair_records or not ctx.timeline_matching(REPORT_KEYWORDS):
            return None

        return WeakSpot(
            id=insight_id("weakspot", ctx.case_id, "missing_records"),
            case_id=ctx.case_id,
            type=WeakSpotType.MISSING_RECORDS,
            severity=Severity.MEDIUM,
            description="No repair logs or records provided despite complaints being made",
            evidence=["Complaints detected in timeline", "No repair logs found in documents"],
            impact="Missing repair records suggest the landlord cannot document its response.",
            suggested_action="Request repair logs and records; they should exist if repairs were attempted.",
        )

    def _detect_no_response(self, ctx: DetectorContext) -> Optional[WeakSpot]:
        tenant_reports = [e for e in ctx.timeline_matching(REPORT_KEYWORDS) if mentions(e.description, ["tenant"])]
        if len(tenant_reports) <= 2 or ctx.timeline_matching(RESPONSE_KEYWORDS):
            return None

        return WeakSpot(
            id=insight_id("weakspot", ctx.case_id, "no_response"),
            case_id=ctx.case_id,
            type=WeakSpotType.NO_RESPONSE,
            severity=Severity.HIGH,
            description=f"Multiple tenant reports ({len(tenant_reports)}) but no responses detected",
            evidence=[f"{len(tenant_reports)} tenant reports found", "No responses detected in timeline"],
            impact="Repeated unanswered reports show a failure to engage with the disrepair.",
            suggested_action="Highlight the lack of response to repeated reports.",
        )


def detect_weak_spots(ctx: DetectorContext) -> List[WeakSpot]:
    """Convenience wrapper"""
    return OpponentWeakSpotDetector().detect(ctx)
