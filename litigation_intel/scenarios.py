"""
Procedural Scenario Outliner
============================

"If you do X, the case moves like this" outlines for the main procedural
moves. These map procedure, they do not predict outcomes.
"""

import logging
from typing import List

from .context import DetectorContext, insight_id
from .schemas import Confidence, ProceduralScenario

logger = logging.getLogger(__name__)

SETTLEMENT_HEARING_DAYS = 28


class ScenarioOutliner:

    def outline(self, ctx: DetectorContext) -> List[ProceduralScenario]:
        s = ctx.settings
        silence = ctx.silence_days
        scenarios: List[ProceduralScenario] = []

        def add(key: str, **fields) -> None:
            scenarios.append(ProceduralScenario(
                id=insight_id("scenario", ctx.case_id, key),
                case_id=ctx.case_id,
                **fields,
            ))

        if ctx.is_post_issue:
            add(
                "disclosure",
                title="Challenge disclosure",
                trigger="If you challenge disclosure or request the disclosure list",
                outcome="The court is likely to order disclosure within 14-28 days; failure opens an unless order or costs.",
                timeframe="Application 1-2 weeks, order 2-4 weeks, compliance 2-4 weeks (5-10 weeks in total)",
                risks=["Opponent may comply at the last minute", "Application costs"],
                benefits=["Obtains essential evidence", "Creates pressure", "May lead to a costs order"],
                next_steps=["Draft the request letter", "Prepare the disclosure application", "Apply for costs if delayed"],
                confidence=Confidence.HIGH,
            )

        if silence > s.silence_escalation_days:
            add(
                "direction",
                title="Apply for a direction",
                trigger="If you apply for a direction or unless order",
                outcome="Given the delay the court is likely to grant a direction or unless order; non-compliance risks strike-out.",
                timeframe="Application 1-2 weeks, order 2-4 weeks, compliance 14-28 days (5-8 weeks in total)",
                risks=["Opponent may comply at the last minute", "Application costs"],
                benefits=["Maximum pressure", "Likely costs order", "Stronger negotiating position"],
                next_steps=["Prepare the application", "Draft the unless order", "Diary the compliance deadline"],
                confidence=Confidence.HIGH,
            )

        if silence > s.silence_costs_days:
            add(
                "non_compliance",
                title="Opponent fails to comply",
                trigger="If the opponent fails to comply with an order or deadline",
                outcome="The court is likely to strike out or make a significant costs order; the opponent's position is badly weakened.",
                timeframe="Strike-out application 1-2 weeks, order 2-4 weeks (3-6 weeks in total)",
                risks=["May delay resolution", "Requires a further application"],
                benefits=["Maximum leverage", "Likely costs", "May prompt settlement"],
                next_steps=["Document the non-compliance", "Apply for strike-out or costs", "Consider settlement discussions"],
                confidence=Confidence.HIGH,
            )

        remaining = ctx.days_until_hearing
        if silence > s.silence_escalation_days and remaining is not None and 0 < remaining <= SETTLEMENT_HEARING_DAYS:
            add(
                "settlement",
                title="Settlement becomes likely",
                trigger="If you make a settlement offer or Part 36 offer now",
                outcome="With delays and a hearing in view the opponent is likely to consider settlement.",
                timeframe="Response 14-21 days, negotiation 2-4 weeks (4-6 weeks in total)",
                risks=["May require compromise", "Opponent may reject"],
                benefits=["Faster resolution", "Lower costs", "Certainty of outcome"],
                next_steps=["Prepare the offer", "Engage in negotiations", "Record every offer"],
                confidence=Confidence.MEDIUM,
            )

        if silence > s.silence_costs_days:
            add(
                "risk_reduction",
                title="Press the delay",
                trigger="If you press the opponent on delay and non-compliance",
                outcome="Further delay becomes less likely, the opponent's credibility suffers and costs arguments strengthen.",
                timeframe="Application 1-2 weeks, order 2-4 weeks, compliance 2-4 weeks (5-10 weeks in total)",
                risks=["Application costs", "Opponent may resist"],
                benefits=["Reduces the risk of further delay", "Stronger position on costs and settlement"],
                next_steps=["Document the delays", "Apply for directions or costs", "Monitor compliance"],
                confidence=Confidence.MEDIUM,
            )

        logger.info(f"Scenarios: {len(scenarios)} for case {ctx.case_id}")
        return scenarios


def outline_scenarios(ctx: DetectorContext) -> List[ProceduralScenario]:
    """Convenience wrapper"""
    return ScenarioOutliner().outline(ctx)
