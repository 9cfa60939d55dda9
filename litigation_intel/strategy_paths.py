"""
Strategy Path Generator
=======================

Role-aware litigation routes.

Claimant clinical negligence (ordered around the substantive merits):
- CN_ADMISSION: press for an early liability admission
- CN_PROTOCOL: pre-action protocol pressure through the Letter of Claim
- CN_JUDGMENT: litigate to a liability judgment
- CN_SETTLEMENT: breach evidence as settlement leverage

Everything else:
- A: procedural attack (late response, incomplete disclosure, missing pre-action)
- B: housing hazard / Awaab's Law leverage
- C: contradiction and expert cross-examination
- D: settlement pressure (high/critical time pressure with a hearing listed)

Two or more routes add E, a hybrid of them. No qualifying route gives exactly
one DEFAULT standard pathway: the result is never empty.
"""

import logging
from typing import List, Sequence

from .context import DetectorContext, insight_id, mentions
from .schemas import (
    Confidence,
    OpponentVulnerability,
    RouteId,
    Severity,
    StrategyPath,
    TimePressurePoint,
    VulnerabilityType,
    WeakSpot,
    WeakSpotType,
)

logger = logging.getLogger(__name__)

PROCEDURAL_VULNERABILITIES = {
    VulnerabilityType.LATE_RESPONSE,
    VulnerabilityType.INCOMPLETE_DISCLOSURE,
    VulnerabilityType.MISSING_PRE_ACTION,
}
HAZARD_KEYWORDS = ["hazard", "hazards", "mold", "mould", "damp"]


class StrategyPathGenerator:
    """Builds ranked StrategyPath records from upstream detector output"""

    def generate(
        self,
        ctx: DetectorContext,
        vulnerabilities: Sequence[OpponentVulnerability] = (),
        weak_spots: Sequence[WeakSpot] = (),
        time_pressure: Sequence[TimePressurePoint] = (),
    ) -> List[StrategyPath]:
        if ctx.is_claimant_clin_neg:
            paths = self._clinical_negligence_routes(ctx)
        else:
            paths = self._procedural_routes(ctx, vulnerabilities, weak_spots, time_pressure)

        if len(paths) >= 2:
            paths.append(self._hybrid(ctx, paths))
        if not paths:
            paths.append(self._default(ctx))

        logger.info(f"Strategy: {len(paths)} routes for case {ctx.case_id} ({', '.join(p.route.value for p in paths)})")
        return paths

    def _path(self, ctx: DetectorContext, route: RouteId, **fields) -> StrategyPath:
        return StrategyPath(
            id=insight_id("strategy", ctx.case_id, route.value),
            case_id=ctx.case_id,
            route=route,
            **fields,
        )

    # =========================================================================
    # Claimant clinical negligence
    # =========================================================================

    def _clinical_negligence_routes(self, ctx: DetectorContext) -> List[StrategyPath]:
        merits = ctx.merits
        if merits is None:
            return []

        breach = merits.guideline_breaches.detected
        expert = merits.expert_confirmation.detected
        delay = merits.delay_causation.detected
        harm = merits.serious_harm.detected
        paths = []

        if breach or expert:
            paths.append(self._path(
                ctx, RouteId.CN_ADMISSION,
                title="Liability admission pressure",
                approach=(
                    "Put the breach and expert findings to the defendant and invite an early admission "
                    "of liability, narrowing the case to quantum."
                ),
                steps=[
                    "Set out the guideline breaches and expert conclusions in correspondence",
                    "Invite an admission of breach and causation within a fixed period",
                    "Record any refusal for costs purposes",
                ],
                pros=["Narrows the issues early", "Shortens the route to quantum", "Low cost"],
                cons=["Defendant may refuse pending its own expert evidence"],
                timeframe="1-3 months",
                estimated_cost="Low (correspondence)",
                success_probability=Confidence.HIGH if expert else Confidence.MEDIUM,
                audience="Claimant cases with documented breach or supportive expert evidence",
            ))

        if not ctx.is_post_issue:
            paths.append(self._path(
                ctx, RouteId.CN_PROTOCOL,
                title="Pre-action protocol pressure",
                approach=(
                    "Serve a detailed Letter of Claim under the Pre-Action Protocol for the Resolution of "
                    "Clinical Disputes and hold the defendant to the four-month response period."
                ),
                steps=[
                    "Serve the Letter of Claim with the chronology and breach analysis",
                    "Diary the Letter of Response deadline",
                    "Prepare to issue if the response is late or inadequate",
                ],
                pros=["Uses the protocol timetable", "Builds a costs record", "Frames the issues on your terms"],
                cons=["Protocol periods are long", "Limitation must be watched"],
                timeframe="4-6 months",
                estimated_cost="Medium",
                success_probability=Confidence.HIGH if (breach and (expert or delay)) else Confidence.MEDIUM,
                audience="Claimant clinical negligence cases at the pre-action stage",
            ))

        if expert and (breach or delay):
            paths.append(self._path(
                ctx, RouteId.CN_JUDGMENT,
                title="Litigate to liability judgment",
                approach=(
                    "Issue and seek a split trial on liability, relying on the expert evidence on breach "
                    "and causation as the backbone of the case."
                ),
                steps=[
                    "Issue proceedings and serve Particulars of Claim",
                    "Seek directions for a split trial on liability",
                    "Exchange expert evidence and prepare the joint statement agenda",
                ],
                pros=["Expert evidence supports both breach and causation", "Judgment fixes liability"],
                cons=["Cost and time of trial preparation", "Litigation risk at trial"],
                timeframe="9-18 months",
                estimated_cost="High (issue, experts, trial)",
                success_probability=Confidence.MEDIUM,
                audience="Claimant cases with expert support on breach and causation",
            ))

        if harm or ctx.merits_total >= ctx.settings.merits_override_threshold:
            paths.append(self._path(
                ctx, RouteId.CN_SETTLEMENT,
                title="Settlement leverage through breach evidence",
                approach=(
                    "Use the breach evidence and the severity of harm to open quantum negotiations "
                    "backed by a well-pitched claimant settlement offer."
                ),
                steps=[
                    "Prepare an early Schedule of Loss",
                    "Make a claimant settlement offer supported by the breach evidence",
                    "Propose a round-table meeting",
                ],
                pros=["Serious harm raises the defendant's exposure", "Faster resolution"],
                cons=["Quantum evidence may be incomplete", "May not achieve full value"],
                timeframe="2-6 months",
                estimated_cost="Low-Medium",
                success_probability=Confidence.MEDIUM,
                audience="Claimant cases with serious harm or strong overall merits",
            ))

        return paths

    # =========================================================================
    # Procedural routes
    # =========================================================================

    def _procedural_routes(
        self,
        ctx: DetectorContext,
        vulnerabilities: Sequence[OpponentVulnerability],
        weak_spots: Sequence[WeakSpot],
        time_pressure: Sequence[TimePressurePoint],
    ) -> List[StrategyPath]:
        paths = []

        if any(v.type in PROCEDURAL_VULNERABILITIES for v in vulnerabilities):
            paths.append(self._path(
                ctx, RouteId.A,
                title="Route A: Procedural attack via opponent delays and non-compliance",
                approach=(
                    "Focus on the opponent's procedural failures (delay, missing disclosure, "
                    "non-compliance) and seek costs or compliance orders."
                ),
                steps=[
                    "Document every delay and failure to comply",
                    "Apply for an unless order or costs order",
                    "Use the failures to build leverage",
                    "Seek strike-out if an order is not complied with",
                ],
                pros=[
                    "Strong procedural position",
                    "Clear evidence of opponent failures",
                    "Court likely to grant applications given delays",
                ],
                cons=["May delay resolution", "Court application costs", "Opponent may comply at the last minute"],
                timeframe="2-4 months",
                estimated_cost="Medium (court application fees)",
                success_probability=Confidence.HIGH,
                audience="Cases with clear opponent delay and non-compliance",
            ))

        if ctx.is_housing:
            awaab = any(
                v.type == VulnerabilityType.MISSING_RECORDS or "awaab" in v.description.lower()
                for v in vulnerabilities
            )
            hazards = bool(ctx.timeline_matching(HAZARD_KEYWORDS))
            breach = ctx.awaab is not None and ctx.awaab.breached
            if awaab or hazards or breach:
                steps = [
                    "Establish the breach (social landlord, vulnerable occupants, Category 1 hazards)",
                    "Put the safety urgency to the landlord",
                    "Use the breach to support liability and quantum",
                ]
                if breach:
                    steps.insert(0, f"{ctx.awaab.countdown_status}: {ctx.awaab.recommended_move}")
                paths.append(self._path(
                    ctx, RouteId.B,
                    title="Route B: Leverage Awaab's Law hazard breach",
                    approach="Use Awaab's Law compliance failures and Category 1 hazards to create urgency.",
                    steps=steps,
                    pros=["Statutory standard", "Safety urgency creates leverage", "Clear compliance failures"],
                    cons=["Applies to social landlords only", "Needs Category 1 hazards", "May need expert evidence"],
                    timeframe="3-6 months",
                    estimated_cost="Medium-High (expert reports)",
                    success_probability=Confidence.HIGH,
                    audience="Housing cases with social landlords and Category 1 hazards",
                ))

        expert_spots = any(
            w.type == WeakSpotType.POOR_EXPERT or mentions(w.description, ["expert"]) for w in weak_spots
        )
        contradictions = any(w.type == WeakSpotType.CONTRADICTION for w in weak_spots)
        if expert_spots or contradictions:
            paths.append(self._path(
                ctx, RouteId.C,
                title="Route C: Push expert contradiction for cross-examination",
                approach="Use contradictions and expert weaknesses to challenge the opponent's evidence and credibility.",
                steps=[
                    "Identify the contradictions and expert weaknesses",
                    "Request clarification or further information",
                    "Prepare cross-examination questions",
                ],
                pros=["Weakens the opponent's evidence", "Challenges credibility", "May lead to settlement"],
                cons=["Needs careful preparation", "May need expert evidence", "Depends on the contradictions"],
                timeframe="4-6 months",
                estimated_cost="Medium-High (expert evidence, hearing)",
                success_probability=Confidence.MEDIUM,
                audience="Cases with clear contradictions or expert weaknesses",
            ))

        pressured = any(t.severity in (Severity.CRITICAL, Severity.HIGH) for t in time_pressure)
        if pressured and ctx.material.next_hearing_date is not None:
            paths.append(self._path(
                ctx, RouteId.D,
                title="Route D: Settlement pressure: opponent delay strengthens leverage",
                approach="Use the opponent's delay and the approaching hearing to negotiate favourable terms.",
                steps=[
                    "Document the opponent's delays",
                    "Make a Part 36 offer or settlement proposal",
                    "Negotiate from strength as the hearing approaches",
                ],
                pros=["Faster resolution", "Lower costs", "Opponent under time pressure"],
                cons=["May require compromise", "Depends on the opponent's willingness"],
                timeframe="1-2 months",
                estimated_cost="Low (negotiation only)",
                success_probability=Confidence.MEDIUM,
                audience="Cases with significant opponent delay and a hearing listed",
            ))

        return paths

    # =========================================================================
    # Hybrid / default
    # =========================================================================

    def _hybrid(self, ctx: DetectorContext, paths: List[StrategyPath]) -> StrategyPath:
        combined = [p.title for p in paths]
        return self._path(
            ctx, RouteId.E,
            title="Route E: Hybrid approach combining the routes above",
            approach="Run the routes in parallel so every leverage point is used at once: " + "; ".join(combined),
            steps=[f"Pursue: {title}" for title in combined] + ["Keep settlement discussions open throughout"],
            pros=["Maximum leverage", "Multiple pressure points", "Flexible"],
            cons=["More complex", "Higher costs", "Needs careful coordination"],
            timeframe="3-6 months",
            estimated_cost="Medium-High (multiple applications)",
            success_probability=Confidence.HIGH,
            audience="Complex cases with several leverage points",
        )

    def _default(self, ctx: DetectorContext) -> StrategyPath:
        return self._path(
            ctx, RouteId.DEFAULT,
            title="Standard litigation pathway",
            approach="Follow the standard process: gather evidence, comply with the protocols, prepare for hearing.",
            steps=[
                "Complete the pre-action protocol",
                "Gather the evidence",
                "Issue proceedings if necessary",
                "Prepare for the hearing",
            ],
            pros=["Lower risk", "Predictable timeline"],
            cons=["May be slower", "Less leverage"],
            timeframe="6-12 months",
            estimated_cost="Medium",
            success_probability=Confidence.MEDIUM,
            audience="Cases without clear leverage points",
        )


def generate_strategy_paths(
    ctx: DetectorContext,
    vulnerabilities: Sequence[OpponentVulnerability] = (),
    weak_spots: Sequence[WeakSpot] = (),
    time_pressure: Sequence[TimePressurePoint] = (),
) -> List[StrategyPath]:
    """Convenience wrapper"""
    return StrategyPathGenerator().generate(ctx, vulnerabilities, weak_spots, time_pressure)
