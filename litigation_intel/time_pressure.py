"""
Time-Pressure Analyzer
======================

Finds windows where elapsed delay, an approaching hearing or an upcoming
deadline gives tactical leverage:

1. OPPONENT_DELAY - silence > 14 days; 21-28 days is the ideal window to
   threaten an application; > 28 days critical
2. DISCLOSURE_OVERDUE - post-issue between 28 and 56 days, no disclosure
3. HEARING_PREPARATION - hearing within 21 days, no bundle/trial entry
   (critical within 7)
4. HEARING_SILENCE - hearing within 14 days while the opponent is silent
5. DEADLINE_APPROACHING - open deadlines due within 7 days (critical within 3)
6. AWAABS_LAW_DEADLINE - social landlord deadline breached (critical) or due
   within 7 days (high)
7. SETTLEMENT_WINDOW - silence > 21 days and hearing within 28 days
"""

import logging
from typing import List, Optional

from .context import DetectorContext, insight_id
from .leverage import DISCLOSURE_DOCUMENT_KEYWORDS
from .schemas import DeadlineStatus, Severity, TimePressureIssue, TimePressurePoint

logger = logging.getLogger(__name__)

BUNDLE_KEYWORDS = ["bundle", "trial"]
HEARING_SILENCE_DAYS = 14
SETTLEMENT_HEARING_DAYS = 28


class TimePressureAnalyzer:
    """Elapsed/remaining-day windows worth acting on"""

    def analyze(self, ctx: DetectorContext) -> List[TimePressurePoint]:
        points: List[TimePressurePoint] = []

        for check in (
            self._check_opponent_delay,
            self._check_disclosure_overdue,
            self._check_hearing_preparation,
            self._check_hearing_silence,
        ):
            point = check(ctx)
            if point:
                points.append(point)

        points.extend(self._check_deadlines(ctx))

        awaab = self._check_awaabs_law(ctx)
        if awaab:
            points.append(awaab)

        settlement = self._check_settlement_window(ctx)
        if settlement:
            points.append(settlement)

        logger.info(f"Time pressure: {len(points)} points for case {ctx.case_id}")
        return points

    # -------------------------------------------------------------------------

    def _hearing_within(self, ctx: DetectorContext, days: int) -> Optional[int]:
        """Days until the next hearing if it falls inside (0, days]"""
        remaining = ctx.days_until_hearing
        if remaining is not None and 0 < remaining <= days:
            return remaining
        return None

    def _check_opponent_delay(self, ctx: DetectorContext) -> Optional[TimePressurePoint]:
        silence = ctx.silence_days
        s = ctx.settings
        if silence <= s.silence_notice_days:
            return None

        ideal = s.silence_escalation_days <= silence <= s.silence_costs_days
        if ideal:
            timing = "Now is the ideal moment to threaten an application: the delay is significant but not yet extreme."
        elif silence > s.silence_costs_days:
            timing = "Apply now: the delay is extreme and clearly unreasonable."
        else:
            timing = "Monitor closely: approaching the ideal window for an application."

        escalate = silence > s.silence_escalation_days
        return TimePressurePoint(
            id=insight_id("pressure", ctx.case_id, "opponent_delay"),
            case_id=ctx.case_id,
            issue=TimePressureIssue.OPPONENT_DELAY,
            description=f"Opponent breach: {silence} days without response",
            severity=Severity.CRITICAL if silence > s.silence_costs_days else Severity.HIGH,
            days=silence,
            ideal_window=ideal,
            timing=timing,
            action="Apply for an unless order or costs order" if escalate else "Send a formal chaser warning of an application",
            leverage=(
                "The delay is now significant enough to justify an application."
                if ideal else
                "The longer the opponent delays, the stronger an enforcement or costs application becomes."
            ),
            risk_to_opponent=(
                "Strike-out, an unless order and significant costs"
                if escalate else
                "A costs order and procedural sanctions"
            ),
        )

    def _check_disclosure_overdue(self, ctx: DetectorContext) -> Optional[TimePressurePoint]:
        issue = ctx.issue_event
        if issue is None or ctx.has_document(DISCLOSURE_DOCUMENT_KEYWORDS):
            return None
        days = ctx.days_since(issue.date)
        if not ctx.settings.disclosure_due_days < days < ctx.settings.disclosure_critical_days:
            return None

        return TimePressurePoint(
            id=insight_id("pressure", ctx.case_id, "disclosure_overdue"),
            case_id=ctx.case_id,
            issue=TimePressureIssue.DISCLOSURE_OVERDUE,
            description="Missing disclosure list: it should have been provided by now",
            severity=Severity.HIGH,
            days=days,
            timing="Enough time has passed since issue to show delay; request disclosure now.",
            action="Request the disclosure list required under CPR 31.10",
            leverage="The court expects prompt disclosure; continued delay risks a disclosure order and adjournment costs.",
            risk_to_opponent="A disclosure order, costs and a possible adjournment if a hearing is approaching",
        )

    def _check_hearing_preparation(self, ctx: DetectorContext) -> Optional[TimePressurePoint]:
        remaining = self._hearing_within(ctx, ctx.settings.hearing_preparation_days)
        if remaining is None or ctx.timeline_matching(BUNDLE_KEYWORDS):
            return None

        return TimePressurePoint(
            id=insight_id("pressure", ctx.case_id, "hearing_preparation"),
            case_id=ctx.case_id,
            issue=TimePressureIssue.HEARING_PREPARATION,
            description=f"Hearing in {remaining} days: trial bundle not prepared",
            severity=Severity.CRITICAL if remaining <= ctx.settings.hearing_urgent_days else Severity.HIGH,
            days=remaining,
            timing="Check the opponent's readiness now; an unprepared opponent gives you leverage.",
            action="Check the opponent's bundle status and agree the bundle index",
            leverage="A missing bundle suggests the opponent may not be ready, which supports settlement or an adjournment on terms.",
            risk_to_opponent="Adjournment costs and possible strike-out if not ready",
            deadline=ctx.material.next_hearing_date,
        )

    def _check_hearing_silence(self, ctx: DetectorContext) -> Optional[TimePressurePoint]:
        remaining = self._hearing_within(ctx, HEARING_SILENCE_DAYS)
        silence = ctx.silence_days
        if remaining is None or silence <= ctx.settings.silence_notice_days:
            return None

        return TimePressurePoint(
            id=insight_id("pressure", ctx.case_id, "hearing_silence"),
            case_id=ctx.case_id,
            issue=TimePressureIssue.HEARING_SILENCE,
            description=f"Hearing in {remaining} days: opponent has been silent for {silence} days",
            severity=Severity.CRITICAL,
            days=remaining,
            timing="The hearing is close enough that the delay now matters to the court.",
            action="Apply for costs or set out the delays in pre-hearing correspondence",
            leverage="Delay close to a hearing puts significant pressure on the opponent.",
            risk_to_opponent="A significant costs order and adverse findings at the hearing",
            deadline=ctx.material.next_hearing_date,
        )

    def _check_deadlines(self, ctx: DetectorContext) -> List[TimePressurePoint]:
        s = ctx.settings
        points = []
        for deadline in ctx.material.deadlines:
            if deadline.status == DeadlineStatus.COMPLETED:
                continue
            remaining = ctx.days_until(deadline.due_date)
            if not 0 < remaining <= s.deadline_warning_days:
                continue
            points.append(TimePressurePoint(
                id=insight_id("pressure", ctx.case_id, "deadline", deadline.id),
                case_id=ctx.case_id,
                issue=TimePressureIssue.DEADLINE_APPROACHING,
                description=f"Deadline approaching: {deadline.title} ({remaining} days)",
                severity=Severity.CRITICAL if remaining <= s.deadline_urgent_days else Severity.HIGH,
                days=remaining,
                timing="Monitor closely; a missed deadline opens a sanctions application.",
                action="Prepare an application for sanctions in case the deadline is missed",
                leverage="The deadline puts time pressure on the opponent.",
                risk_to_opponent="Procedural sanctions and costs if the deadline is missed",
                deadline=deadline.due_date,
            ))
        return points

    def _check_awaabs_law(self, ctx: DetectorContext) -> Optional[TimePressurePoint]:
        awaab = ctx.awaab
        if awaab is None or not awaab.applies:
            return None

        if awaab.breached:
            deadline = awaab.investigation_deadline if awaab.investigation_breached else awaab.work_start_deadline
            if deadline is None:
                return None
            days = ctx.days_since(deadline)
            severity = Severity.CRITICAL
            description = f"Awaab's Law deadline breached: {awaab.countdown_status}"
            timing = "The statutory deadline has passed; put the breach to the landlord now."
        else:
            pending = [
                (awaab.investigation_deadline, awaab.investigation_date, "investigation"),
                (awaab.work_start_deadline, awaab.work_start_date, "work start"),
            ]
            upcoming = [
                (due, label) for due, done, label in pending
                if due is not None and done is None
                and 0 <= ctx.days_until(due) <= ctx.settings.awaab_warning_days
            ]
            if not upcoming:
                return None
            deadline, label = upcoming[0]
            days = ctx.days_until(deadline)
            severity = Severity.HIGH
            description = f"Awaab's Law {label} deadline in {days} days"
            timing = "Diarise the deadline and be ready to cite the breach as soon as it passes."

        if ctx.is_claimant:
            action = awaab.recommended_move
            risk = "Injunction, aggravated damages and costs for a statutory breach"
        else:
            action = "Arrange the investigation and works and record the dates; the deadlines are statutory"
            risk = "Exposure of the client landlord to an injunction and damages"

        return TimePressurePoint(
            id=insight_id("pressure", ctx.case_id, TimePressureIssue.AWAABS_LAW_DEADLINE.value),
            case_id=ctx.case_id,
            issue=TimePressureIssue.AWAABS_LAW_DEADLINE,
            description=description,
            severity=severity,
            days=days,
            timing=timing,
            action=action,
            leverage="Awaab's Law deadlines are fixed by statute and cannot be extended by the landlord.",
            risk_to_opponent=risk,
            deadline=deadline,
        )

    def _check_settlement_window(self, ctx: DetectorContext) -> Optional[TimePressurePoint]:
        if ctx.silence_days <= ctx.settings.silence_escalation_days:
            return None
        remaining = self._hearing_within(ctx, SETTLEMENT_HEARING_DAYS)
        if remaining is None:
            return None

        return TimePressurePoint(
            id=insight_id("pressure", ctx.case_id, "settlement_window"),
            case_id=ctx.case_id,
            issue=TimePressureIssue.SETTLEMENT_WINDOW,
            description="Settlement pressure window: opponent delays and an approaching hearing",
            severity=Severity.MEDIUM,
            days=remaining,
            timing="The opponent is under time pressure; explore settlement now.",
            action="Open settlement discussions",
            leverage="Delay combined with an approaching hearing encourages the opponent to settle.",
            risk_to_opponent="Adverse costs and adverse findings if the case proceeds to hearing",
            deadline=ctx.material.next_hearing_date,
        )


def analyze_time_pressure(ctx: DetectorContext) -> List[TimePressurePoint]:
    """Convenience wrapper"""
    return TimePressureAnalyzer().analyze(ctx)
