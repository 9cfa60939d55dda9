"""
Procedural Leverage Detector
============================

Leverage point types:
1. Substantive (claimant clinical negligence only, listed first):
   GUIDELINE_BREACH / EXPERT_CONFIRMATION (critical),
   DELAY_CAUSATION / SERIOUS_HARM (high)
2. LATE_RESPONSE - opponent silent > 21 days (high), > 42 days (critical)
3. MISSING_PRE_ACTION - housing, no protocol letter > 30 days after first event
4. AWAABS_LAW_BREACH - claimant housing, social landlord missed an Awaab's Law
   deadline (critical when the hazard is an emergency, otherwise high)
5. MISSING_EVIDENCE - first substantive critical checklist gap (high);
   for claimants, client-care gaps become a separate ADMINISTRATIVE_GAP (medium)
6. MISSING_DEADLINE - most overdue deadline, critical when > 14 days overdue
7. DISCLOSURE_FAILURE - post-issue > 28 days with no disclosure documents

Criminal cases get CrimPR/CPIA framing instead of CPR sanctions.
"""

import logging
from typing import List, Optional, Tuple

from .context import DetectorContext, insight_id
from .schemas import (
    AwaabBreachState,
    EscalationType,
    LeverageType,
    LeveragePoint,
    MissingEvidenceItem,
    Severity,
)

logger = logging.getLogger(__name__)

PRE_ACTION_TEMPLATES = ["pre_action", "protocol"]
DISCLOSURE_DOCUMENT_KEYWORDS = ["disclosure", "list of documents", "inspection", "cpd"]

SUBSTANTIVE_TEXT = {
    LeverageType.GUIDELINE_BREACH: (
        Severity.CRITICAL,
        "Guideline breach(es) detected: strong liability foundation",
        "Lead the Letter of Claim and negotiations with the guideline breaches; they establish breach of duty and support causation.",
        "Non-compliance with established clinical guidelines is difficult to defend and puts the opponent under pressure to admit breach.",
    ),
    LeverageType.EXPERT_CONFIRMATION: (
        Severity.CRITICAL,
        "Expert evidence confirms breach and/or causation: strong evidential position",
        "Request an admission of liability on the strength of the expert evidence. If none is received, proceed with the expert evidence as the backbone of the case.",
        "The opponent must either admit liability or find contrary expert evidence, which is costly and slow.",
    ),
    LeverageType.DELAY_CAUSATION: (
        Severity.HIGH,
        "Delay in diagnosis/treatment linked to avoidable harm: causation strengthened",
        "Show that earlier diagnosis or treatment would have avoided the harm and request an admission of causation.",
        "Delay-caused injury gives a clear causal link between breach and harm; the opponent must justify the delay.",
    ),
    LeverageType.SERIOUS_HARM: (
        Severity.HIGH,
        "Serious harm indicators present: quantum escalators",
        "Set out the severity of harm in the Schedule of Loss and in negotiations.",
        "Serious harm (ICU, sepsis, surgery) raises quantum exposure and creates urgency for the opponent.",
    ),
}


class ProceduralLeverageDetector:
    """Role-aware procedural leverage detector"""

    def detect(self, ctx: DetectorContext) -> List[LeveragePoint]:
        points: List[LeveragePoint] = []

        if ctx.is_claimant_clin_neg:
            points.extend(self._detect_substantive(ctx))

        for check in (
            self._detect_late_response,
            self._detect_missing_pre_action,
            self._detect_awaabs_law_breach,
        ):
            point = check(ctx)
            if point:
                points.append(point)

        points.extend(self._detect_missing_evidence(ctx))

        for check in (
            self._detect_missed_deadline,
            self._detect_disclosure_failure,
        ):
            point = check(ctx)
            if point:
                points.append(point)

        critical = sum(1 for p in points if p.severity == Severity.CRITICAL)
        logger.info(f"Leverage: {len(points)} points ({critical} critical) for case {ctx.case_id}")
        return points

    # -------------------------------------------------------------------------

    def _detect_substantive(self, ctx: DetectorContext) -> List[LeveragePoint]:
        merits = ctx.merits
        if merits is None:
            return []

        signals = [
            (LeverageType.GUIDELINE_BREACH, merits.guideline_breaches),
            (LeverageType.EXPERT_CONFIRMATION, merits.expert_confirmation),
            (LeverageType.DELAY_CAUSATION, merits.delay_causation),
            (LeverageType.SERIOUS_HARM, merits.serious_harm),
        ]
        points = []
        for leverage_type, signal in signals:
            if not signal.detected:
                continue
            severity, description, escalation, leverage = SUBSTANTIVE_TEXT[leverage_type]
            points.append(LeveragePoint(
                id=insight_id("leverage", ctx.case_id, leverage_type.value),
                case_id=ctx.case_id,
                type=leverage_type,
                severity=severity,
                description=description,
                evidence=list(signal.details),
                suggested_escalation=EscalationType.CLARIFICATION,
                escalation_text=escalation,
                leverage=leverage,
            ))
        return points

    def _detect_late_response(self, ctx: DetectorContext) -> Optional[LeveragePoint]:
        silence = ctx.silence_days
        if silence <= ctx.settings.silence_escalation_days:
            return None

        critical = silence > ctx.settings.silence_critical_days
        last_letter = ctx.opponent.last_letter_sent_at
        evidence = [
            f"Last letter sent: {last_letter.date().isoformat() if last_letter else 'Unknown'}",
            f"Days since last contact: {silence}",
        ]

        if ctx.is_criminal:
            escalation_text = (
                "Raise at the next hearing and seek directions on service dates and the disclosure timetable. "
                "Record all late service."
            )
            leverage = (
                "Persistent silence or late service can be raised for directions; "
                "where prejudice is shown the prosecution's position is weakened."
            )
            rule = None
        elif critical:
            escalation_text = "Apply for an unless order to compel a response on pain of strike-out."
            leverage = "If you challenge this delay the court is likely to order compliance or impose sanctions."
            rule = "CPR 3.4(2)(c)"
        else:
            escalation_text = "Request clarification or further information to put them on the clock."
            leverage = "If you challenge this delay the court is likely to order compliance or impose sanctions."
            rule = "CPR 3.4(2)(c)"

        return LeveragePoint(
            id=insight_id("leverage", ctx.case_id, "late_response"),
            case_id=ctx.case_id,
            type=LeverageType.LATE_RESPONSE,
            severity=Severity.CRITICAL if critical else Severity.HIGH,
            description=f"Opponent has not responded for {silence} days",
            evidence=evidence,
            suggested_escalation=EscalationType.UNLESS_ORDER if critical else EscalationType.CLARIFICATION,
            escalation_text=escalation_text,
            cpr_rule=rule,
            leverage=leverage,
        )

    def _detect_missing_pre_action(self, ctx: DetectorContext) -> Optional[LeveragePoint]:
        if not ctx.is_housing or ctx.has_letter(PRE_ACTION_TEMPLATES):
            return None
        first = ctx.first_event
        if first is None:
            return None
        days = ctx.days_since(first.date)
        if days <= ctx.settings.pre_action_grace_days:
            return None

        return LeveragePoint(
            id=insight_id("leverage", ctx.case_id, "missing_pre_action"),
            case_id=ctx.case_id,
            type=LeverageType.MISSING_PRE_ACTION,
            severity=Severity.HIGH,
            description=(
                f"No pre-action protocol letter detected despite case being active for over "
                f"{ctx.settings.pre_action_grace_days} days"
            ),
            evidence=[
                f"First complaint: {first.date.date().isoformat()}",
                f"Days since complaint: {days}",
            ],
            suggested_escalation=EscalationType.CLARIFICATION,
            escalation_text="Send the pre-action protocol letter; it is required before issuing proceedings.",
            leverage="Missing pre-action steps delay proceedings and risk costs sanctions if proceedings are issued prematurely.",
        )

    def _detect_awaabs_law_breach(self, ctx: DetectorContext) -> Optional[LeveragePoint]:
        awaab = ctx.awaab
        if awaab is None or not awaab.breached or not ctx.is_claimant:
            return None

        investigation = f"investigation deadline exceeded ({ctx.settings.awaab_investigation_days} days from first report)"
        work_start = f"work start deadline exceeded ({ctx.settings.awaab_work_start_days} days from investigation)"
        missed = {
            AwaabBreachState.INVESTIGATION: investigation,
            AwaabBreachState.WORK_START: work_start,
            AwaabBreachState.BOTH: f"{investigation} and {work_start}",
        }[awaab.breach_state]

        evidence = [awaab.countdown_status]
        if awaab.first_report_date:
            evidence.append(f"First report: {awaab.first_report_date.date().isoformat()}")
        evidence.extend(awaab.triggers)

        return LeveragePoint(
            id=insight_id("leverage", ctx.case_id, LeverageType.AWAABS_LAW_BREACH.value),
            case_id=ctx.case_id,
            type=LeverageType.AWAABS_LAW_BREACH,
            severity=Severity.CRITICAL if awaab.emergency else Severity.HIGH,
            description=f"Awaab's Law breach: {missed}",
            evidence=evidence,
            suggested_escalation=EscalationType.CLARIFICATION,
            escalation_text=awaab.recommended_move,
            leverage=(
                "A social landlord's breach of the Awaab's Law deadlines is a statutory failure that cannot be "
                "explained away; it strengthens quantum and supports urgent injunctive relief."
            ),
        )

    def _detect_missing_evidence(self, ctx: DetectorContext) -> List[LeveragePoint]:
        critical = ctx.critical_missing
        if not critical:
            return []

        if ctx.is_claimant:
            substantive = [m for m in critical if not m.administrative]
            administrative = [m for m in critical if m.administrative]
        else:
            substantive, administrative = critical, []

        points = []
        if substantive:
            first = substantive[0]
            leverage, steps, basis = self._missing_evidence_tactics(ctx, first)
            points.append(LeveragePoint(
                id=insight_id("leverage", ctx.case_id, "missing_evidence"),
                case_id=ctx.case_id,
                type=LeverageType.MISSING_EVIDENCE,
                severity=Severity.HIGH,
                description=f"Critical evidence missing: {first.label}",
                evidence=[first.reason, f"Priority: {first.priority.value}", f"Legal basis: {basis}"],
                suggested_escalation=EscalationType.FURTHER_INFORMATION,
                escalation_text=steps,
                leverage=leverage,
            ))

        if administrative:
            first = administrative[0]
            points.append(LeveragePoint(
                id=insight_id("leverage", ctx.case_id, "administrative_gap"),
                case_id=ctx.case_id,
                type=LeverageType.ADMINISTRATIVE_GAP,
                severity=Severity.MEDIUM,
                description=f"Administrative documentation gap: {first.label}",
                evidence=[first.reason, "Priority: administrative (not substantive leverage)"],
                suggested_escalation=EscalationType.CLARIFICATION,
                escalation_text=(
                    "Obtain the missing client-care documentation. This is procedural compliance only "
                    "and does not affect substantive case strength."
                ),
                leverage="Client ID, retainer and CFA gaps are housekeeping and are not settlement leverage.",
            ))
        return points

    @staticmethod
    def _missing_evidence_tactics(ctx: DetectorContext, item: MissingEvidenceItem) -> Tuple[str, str, str]:
        """(leverage, tactical steps, legal basis) for the first missing item"""
        label = item.label.lower()

        if ctx.is_criminal:
            basis = "CPIA / PACE / CrimPR case management"
            if any(k in label for k in ("disclosure", "mg6", "unused")):
                return (
                    "Without disclosure schedules and unused material the defence cannot assess the evidence; "
                    "press for disclosure and case management directions.",
                    "Step 1: Ask the disclosure officer for MG6A/MG6C and confirmation of the unused material review. "
                    "Step 2: Ask for a disclosure timetable. Step 3: Raise at the next hearing if still outstanding.",
                    basis,
                )
            if any(k in label for k in ("custody", "pace", "interview")):
                return (
                    "PACE gaps can affect admissibility; without custody and interview material the prosecution "
                    "may struggle to rely on disputed admissions.",
                    "Step 1: Request the custody record and interview recording. Step 2: Require written confirmation "
                    "of what exists. Step 3: Raise admissibility at the hearing.",
                    basis,
                )
            return (
                f"Without {item.label} the defence cannot test the prosecution case; treat it as a records gap.",
                "Step 1: Request the item with a deadline. Step 2: Ask for confirmation if it does not exist. "
                "Step 3: Raise at the hearing for directions.",
                basis,
            )

        if "medical" in label:
            return (
                "Medical evidence is fundamental to causation and quantum; without it the causal link, "
                "the extent of injury and future losses cannot be proved.",
                "Step 1: Request medical records under CPR 31.10 within 14 days. Step 2: Apply for an order under "
                "CPR 31.12 with costs. Step 3: Seek an unless order if still not provided.",
                "CPR 31.10 / 31.12",
            )
        if "accident" in label or "circumstances" in label:
            return (
                "The accident circumstances are essential to liability; without them fault cannot be established.",
                "Step 1: Request disclosure under CPR 31.10 within 14 days. Step 2: Apply for specific disclosure "
                "under CPR 31.12. Step 3: Highlight the gap in correspondence.",
                "CPR 31.10 / 31.12",
            )
        return (
            f"Without {item.label} key elements of the case cannot be established; an order compelling "
            f"disclosure is available if it is withheld.",
            "Step 1: Request disclosure under CPR 31.10 within 14 days. Step 2: Apply for specific disclosure "
            "under CPR 31.12 with costs. Step 3: Consider an unless order.",
            "Evidence gathering",
        )

    def _detect_missed_deadline(self, ctx: DetectorContext) -> Optional[LeveragePoint]:
        overdue = ctx.overdue_deadlines()
        if not overdue:
            return None

        most_overdue = min(overdue, key=lambda d: d.due_date)
        days = ctx.days_since(most_overdue.due_date)
        critical = days > ctx.settings.overdue_deadline_critical_days

        if ctx.is_criminal:
            escalation_text = "Raise at the next hearing and seek directions to regularise the timetable."
            leverage = "Missed case management deadlines give leverage where they cause prejudice; document late service."
            rule = None
        else:
            escalation_text = (
                "Apply for an unless order to compel compliance on pain of strike-out."
                if critical else
                "Request clarification of the deadline status to put them on the clock."
            )
            leverage = "If you challenge this missed deadline the court is likely to order compliance or impose sanctions."
            rule = "CPR 3.4(2)(c)"

        return LeveragePoint(
            id=insight_id("leverage", ctx.case_id, "missing_deadline", most_overdue.id),
            case_id=ctx.case_id,
            type=LeverageType.MISSING_DEADLINE,
            severity=Severity.CRITICAL if critical else Severity.HIGH,
            description=f"Deadline missed: {most_overdue.title} ({days} days overdue)",
            evidence=[
                f"Deadline: {most_overdue.title}",
                f"Due date: {most_overdue.due_date.date().isoformat()}",
                f"Days overdue: {days}",
            ],
            suggested_escalation=EscalationType.UNLESS_ORDER if critical else EscalationType.CLARIFICATION,
            escalation_text=escalation_text,
            cpr_rule=rule,
            leverage=leverage,
        )

    def _detect_disclosure_failure(self, ctx: DetectorContext) -> Optional[LeveragePoint]:
        issue = ctx.issue_event
        if issue is None or ctx.has_document(DISCLOSURE_DOCUMENT_KEYWORDS):
            return None
        days = ctx.days_since(issue.date)
        if days <= ctx.settings.disclosure_due_days:
            return None

        return LeveragePoint(
            id=insight_id("leverage", ctx.case_id, "disclosure_failure"),
            case_id=ctx.case_id,
            type=LeverageType.DISCLOSURE_FAILURE,
            severity=Severity.HIGH,
            description=(
                f"No disclosure list detected despite case being post-issue for over "
                f"{ctx.settings.disclosure_due_days} days"
            ),
            evidence=[f"Issue date: {issue.date.date().isoformat()}", f"Days since issue: {days}"],
            suggested_escalation=EscalationType.FURTHER_INFORMATION,
            escalation_text="Request the disclosure list required under CPR 31.10.",
            cpr_rule="CPR 31.10",
            leverage="If disclosure is not given you can apply for an order compelling it, with costs.",
        )


def detect_leverage_points(ctx: DetectorContext) -> List[LeveragePoint]:
    """Convenience wrapper"""
    return ProceduralLeverageDetector().detect(ctx)
