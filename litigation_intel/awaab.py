"""
Awaab's Law Detector - social landlord hazard deadlines
=======================================================

Applies to housing disrepair cases against a social landlord where a
qualifying hazard (mould, damp, excess cold, water ingress) is recorded.
Text searched: document names and types, structured extraction, timeline
descriptions.

| Date                  | Source                                            |
|-----------------------|---------------------------------------------------|
| first report          | earliest complaint/report event or document       |
| investigation         | earliest investigation/inspection/survey event    |
| work start            | earliest work start/contractor event              |

Deadlines: investigation 14 days after the first report, work start 7 days
after the investigation. A deadline is breached when it has passed with no
event, or when the event came after it.

Emergency: a Category 1 hazard, or health effects alongside damp or mould.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from .context import DetectorContext, mentions
from .rules import AwaabRules, RuleTable, get_rule_table
from .schemas import AwaabBreachState, AwaabsLawAssessment

logger = logging.getLogger(__name__)


def _earliest(dates: List[datetime]) -> Optional[datetime]:
    return min(dates) if dates else None


class AwaabsLawDetector:
    """Awaab's Law applicability, deadlines and breach state"""

    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules: AwaabRules = (rules or get_rule_table()).awaab

    def detect(self, ctx: DetectorContext) -> AwaabsLawAssessment:
        if not ctx.is_housing:
            return AwaabsLawAssessment(countdown_status="Not applicable - not a housing disrepair case")

        text = self._case_text(ctx)
        if not mentions(text, self.rules.social_landlord):
            return AwaabsLawAssessment(countdown_status="Not applicable - private landlord")

        triggers = [label for label, terms in self.rules.hazards.items() if mentions(text, terms)]
        if not triggers:
            return AwaabsLawAssessment(countdown_status="Not applicable - no qualifying hazards detected")

        health = mentions(text, self.rules.health)
        if mentions(text, self.rules.complaint):
            triggers.append("Complaint made")
        if mentions(text, self.rules.inspection):
            triggers.append("Inspection mentioned")
        if health:
            triggers.append("Health impact indicators")

        emergency = mentions(text, self.rules.emergency) or (
            health and mentions(text, self.rules.health_aggravated)
        )

        first_report = self._first_report_date(ctx)
        investigation = _earliest([e.date for e in ctx.timeline_matching(self.rules.investigation_events)])
        work_start = _earliest([e.date for e in ctx.timeline_matching(self.rules.work_start_events)])

        settings = ctx.settings
        investigation_deadline = (
            first_report + timedelta(days=settings.awaab_investigation_days) if first_report else None
        )
        work_start_deadline = (
            investigation + timedelta(days=settings.awaab_work_start_days) if investigation else None
        )

        investigation_breached = self._breached(ctx, investigation_deadline, investigation)
        work_start_breached = self._breached(ctx, work_start_deadline, work_start)

        if investigation_breached and work_start_breached:
            state = AwaabBreachState.BOTH
        elif investigation_breached:
            state = AwaabBreachState.INVESTIGATION
        elif work_start_breached:
            state = AwaabBreachState.WORK_START
        else:
            state = AwaabBreachState.NONE

        assessment = AwaabsLawAssessment(
            applies=True,
            triggers=triggers,
            first_report_date=first_report,
            investigation_date=investigation,
            work_start_date=work_start,
            investigation_deadline=investigation_deadline,
            work_start_deadline=work_start_deadline,
            investigation_breached=investigation_breached,
            work_start_breached=work_start_breached,
            days_until_investigation_deadline=(
                ctx.days_until(investigation_deadline) if investigation_deadline else None
            ),
            days_until_work_start_deadline=(
                ctx.days_until(work_start_deadline) if work_start_deadline else None
            ),
            emergency=emergency,
            breach_state=state,
        )
        assessment.countdown_status = self._countdown(ctx, assessment)
        assessment.recommended_move = self._recommended_move(assessment)

        logger.info(
            f"Awaab's Law applies to {ctx.case_id}: state={state.value}, "
            f"emergency={emergency}, {assessment.countdown_status}"
        )
        return assessment

    @staticmethod
    def _case_text(ctx: DetectorContext) -> str:
        parts = []
        for doc in ctx.material.documents:
            parts.append(f"{doc.name} {doc.type or ''}")
            if doc.extracted is not None:
                parts.append(json.dumps(doc.extracted.model_dump(mode="json"), ensure_ascii=False))
        parts.extend(e.description for e in ctx.material.timeline)
        return "\n".join(parts).lower()

    def _first_report_date(self, ctx: DetectorContext) -> Optional[datetime]:
        dates = [e.date for e in ctx.timeline_matching(self.rules.complaint)]
        dates += [
            d.created_at for d in ctx.material.documents
            if mentions(d.name, self.rules.complaint)
        ]
        return _earliest(dates)

    @staticmethod
    def _breached(ctx: DetectorContext, deadline: Optional[datetime], happened: Optional[datetime]) -> bool:
        if deadline is None:
            return False
        if happened is None:
            return ctx.now > deadline
        return happened > deadline

    @staticmethod
    def _countdown(ctx: DetectorContext, a: AwaabsLawAssessment) -> str:
        if a.investigation_breached:
            if a.investigation_date is None:
                return f"Investigation deadline breached: {ctx.days_since(a.investigation_deadline)} days overdue"
            late = (a.investigation_date - a.investigation_deadline).days
            return f"Investigation carried out {late} days after the deadline"
        if a.investigation_date is None and a.days_until_investigation_deadline is not None:
            return f"{a.days_until_investigation_deadline} days until investigation deadline"
        if a.work_start_breached:
            if a.work_start_date is None:
                return f"Work start deadline breached: {ctx.days_since(a.work_start_deadline)} days overdue"
            late = (a.work_start_date - a.work_start_deadline).days
            return f"Works started {late} days after the deadline"
        if a.work_start_date is None and a.days_until_work_start_deadline is not None:
            return f"{a.days_until_work_start_deadline} days until work start deadline"
        return "Awaab's Law applies - monitoring deadlines"

    @staticmethod
    def _recommended_move(a: AwaabsLawAssessment) -> str:
        if a.investigation_breached:
            if a.emergency:
                return "Urgent letter before action citing the Awaab's Law breach; consider an injunction application"
            return "Letter before action citing the Awaab's Law breach, with settlement pressure"
        if (
            a.investigation_date is None
            and a.days_until_investigation_deadline is not None
            and a.days_until_investigation_deadline <= 3
        ):
            return "Prepare a letter before action: the investigation deadline is close. If it is missed, cite Awaab's Law at once."
        if a.work_start_breached:
            return "Letter before action citing the continuing Awaab's Law breach (work start deadline)"
        return "Monitor the Awaab's Law deadlines; escalate to a letter before action or injunction if one is missed."


def detect_awaabs_law(ctx: DetectorContext) -> AwaabsLawAssessment:
    """Convenience function to assess Awaab's Law for a case"""
    return AwaabsLawDetector().detect(ctx)
