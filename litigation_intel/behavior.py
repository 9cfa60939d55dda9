"""
Opponent Behavior Predictor
===========================

Procedural "if you do X, expect Y" predictions built from the opponent's
historical average response time (default 21 days when unknown).
Confidence is high only when a historical average exists.
"""

import logging
from typing import List

from .context import DetectorContext, insight_id
from .schemas import BehaviorPattern, BehaviorPrediction, Confidence

logger = logging.getLogger(__name__)

DISCLOSURE_LETTER_TEMPLATES = ["disclosure", "request"]
FURTHER_INFO_TEMPLATES = ["further", "information"]
EXPERT_DOCUMENT_KEYWORDS = ["expert", "report"]
CONTRADICTION_KEYWORDS = ["contradict", "contradicts", "contradicted", "contradiction", "inconsistent", "inconsistency"]


class BehaviorPredictor:
    """Response-pattern predictions per action we might take"""

    def predict(self, ctx: DetectorContext) -> List[BehaviorPrediction]:
        s = ctx.settings
        known_average = ctx.average_response_days
        average = round(known_average) if known_average is not None else s.default_response_days
        history_confidence = Confidence.HIGH if known_average is not None else Confidence.MEDIUM
        silence = ctx.silence_days

        predictions: List[BehaviorPrediction] = []

        def add(pattern: BehaviorPattern, **fields) -> None:
            predictions.append(BehaviorPrediction(
                id=insight_id("prediction", ctx.case_id, pattern.value),
                case_id=ctx.case_id,
                pattern=pattern,
                **fields,
            ))

        if ctx.is_post_issue and not ctx.has_letter(DISCLOSURE_LETTER_TEMPLATES):
            add(
                BehaviorPattern.DISCLOSURE_REQUEST,
                action="Request disclosure of key documents",
                expected_response=f"Opponent likely to take {average}-{average + 7} days based on past response times",
                expected_response_days=average + 7,
                confidence=history_confidence,
                opportunity="Delay beyond a reasonable period supports a costs order.",
                timing=f"Apply within 7 days of their delay ({average + 7} days after the request)",
                leverage="If documents are not provided by the deadline, an unless order or strike-out can be sought.",
                rationale="Proceedings are issued and no disclosure request is on file.",
            )

        if silence > s.silence_notice_days and not ctx.has_letter(FURTHER_INFO_TEMPLATES):
            add(
                BehaviorPattern.FURTHER_INFORMATION,
                action="Request further information on key points",
                expected_response=f"Opponent likely to take {average}-{average + 14} days or give an incomplete answer",
                expected_response_days=average + 14,
                confidence=history_confidence,
                opportunity="A late or incomplete answer supports a costs order.",
                timing=f"Apply within 14 days of their delay ({average + 14} days after the request)",
                leverage="A failure to answer fully supports an unless order.",
                rationale=f"Opponent silent for {silence} days with no further-information request on file.",
            )

        if silence > s.silence_escalation_days:
            add(
                BehaviorPattern.SETTLEMENT_APPROACH,
                action="Make a settlement offer",
                expected_response="Opponent likely to take 14-28 days to respond, or not respond at all",
                expected_response_days=28,
                confidence=Confidence.MEDIUM,
                opportunity="Continued delay strengthens your position and supports costs arguments.",
                timing="Make the offer now, while the opponent is already delayed",
                leverage="A rejected or ignored offer supports costs arguments at the hearing.",
                rationale=f"Opponent silent for {silence} days.",
            )

        if known_average is not None and ctx.has_document(EXPERT_DOCUMENT_KEYWORDS):
            add(
                BehaviorPattern.EXPERT_CHALLENGE,
                action="Challenge the expert report or request clarification",
                expected_response=f"Opponent likely to take {average}-{average + 14} days or respond defensively",
                expected_response_days=average + 14,
                confidence=Confidence.MEDIUM,
                opportunity="A defensive or late answer weakens their expert evidence.",
                timing="Challenge before the hearing; apply for costs within 7 days of any delay",
                leverage="An inadequate answer supports exclusion of the expert evidence or costs.",
                rationale="Expert evidence is on file and the opponent's response history is known.",
            )

        if ctx.timeline_matching(CONTRADICTION_KEYWORDS):
            add(
                BehaviorPattern.CONTRADICTION_PUT,
                action="Raise the contradiction or inconsistency in the opponent's case",
                expected_response="Opponent likely to take 14-21 days or give a defensive explanation",
                expected_response_days=21,
                confidence=Confidence.HIGH,
                opportunity="An unexplained contradiction makes their position untenable.",
                timing="Raise it now, before the hearing",
                leverage="A poor explanation undermines their credibility.",
                rationale="The timeline records a contradiction or inconsistency.",
            )

        if silence > s.silence_costs_days:
            add(
                BehaviorPattern.COSTS_APPLICATION,
                action="Apply for a costs order for the opponent's delay",
                expected_response="Opponent likely to resist, but the court is likely to grant costs given the delay",
                confidence=Confidence.HIGH,
                opportunity="A costs order puts significant pressure on the opponent.",
                timing="Apply now, while the delay is fresh",
                leverage="A costs order weakens their position and encourages settlement.",
                rationale=f"Opponent silent for {silence} days.",
            )

        if silence > s.silence_critical_days:
            add(
                BehaviorPattern.UNLESS_ORDER,
                action="Apply for an unless order for extreme delay",
                expected_response="Opponent likely to comply quickly to avoid strike-out",
                confidence=Confidence.HIGH,
                opportunity="The court is likely to grant an unless order given the extreme delay.",
                timing="Apply now, while the delay is clearly unreasonable",
                leverage="Non-compliance with an unless order opens strike-out.",
                rationale=f"Opponent silent for {silence} days.",
            )

        logger.info(f"Behavior: {len(predictions)} predictions for case {ctx.case_id}")
        return predictions


def predict_behavior(ctx: DetectorContext) -> List[BehaviorPrediction]:
    """Convenience wrapper"""
    return BehaviorPredictor().predict(ctx)
