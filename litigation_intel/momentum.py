"""
Case Momentum Aggregator
========================

Signed, capped contributions summed into a score in [-100, 100]:

| Factor                      | Claimant                      | Other / defendant        |
|-----------------------------|-------------------------------|--------------------------|
| Substantive merits (CN)     | + each sub-score              | -                        |
| Opponent silence > 14 days  | + min(days / 4, 10)           | + min(days / 2, 20)      |
| Opponent responsive         | -2                            | -5                       |
| Contradictions              | + min(n * 5, 25)              | + min(n * 5, 25)         |
| Procedural leverage         | + min(crit*5 + other*2, 15)   | + min(crit*10 + other*5, 30) |
| Missing critical evidence   | - min(subst*10, 30), - min(admin*2, 5) | - min(n*10, 30) |
| New documents (30 days)     | + min(n * 2, 15)              | + min(n * 2, 15)         |
| Housing hazards             | +15                           | +15                      |
| Awaab's Law breach          | +10, +20 if emergency         | -10, -20 if emergency    |
| Overdue deadlines           | - min(n * 5, 20)              | - min(n * 5, 20)         |

Banding: >= 30 strong, >= 10 strong, <= -30 weak, <= -10 weak, else balanced.

Claimant clinical negligence with merits >= 50 and no substantive negative
factor is always STRONG; the score is lifted to the strong band so state and
score never disagree. Administrative and purely procedural negatives
(client-care paperwork, overdue deadlines, a responsive opponent) never
suppress substantive strength.
"""

import logging
from typing import List, Optional, Sequence

from .context import DetectorContext
from .schemas import (
    SUBSTANTIVE_LEVERAGE_TYPES,
    CaseMomentum,
    Confidence,
    LeveragePoint,
    LeverageType,
    MomentumShift,
    MomentumState,
    Severity,
    ShiftPolarity,
    WeakSpot,
    WeakSpotType,
)

logger = logging.getLogger(__name__)

STRONG_THRESHOLD = 30
FAVOURABLE_THRESHOLD = 10
WEAK_THRESHOLD = -30
UNFAVOURABLE_THRESHOLD = -10
SCORE_LIMIT = 100

HOUSING_HAZARD_KEYWORDS = ["hazard", "hazards", "category 1", "awaab"]
TOP_FACTORS = 3


def clamp_score(score: float) -> float:
    return max(-SCORE_LIMIT, min(SCORE_LIMIT, score))


def band(score: float, shift_count: int) -> tuple:
    """(state, confidence) for a clamped score"""
    if score >= STRONG_THRESHOLD:
        return MomentumState.STRONG, Confidence.HIGH if shift_count >= 3 else Confidence.MEDIUM
    if score >= FAVOURABLE_THRESHOLD:
        return MomentumState.STRONG, Confidence.MEDIUM
    if score <= WEAK_THRESHOLD:
        return MomentumState.WEAK, Confidence.HIGH if shift_count >= 3 else Confidence.MEDIUM
    if score <= UNFAVOURABLE_THRESHOLD:
        return MomentumState.WEAK, Confidence.MEDIUM
    return MomentumState.BALANCED, Confidence.MEDIUM if shift_count >= 2 else Confidence.LOW


class MomentumAggregator:
    """Join point over merits, opponent activity and detector output"""

    def calculate(
        self,
        ctx: DetectorContext,
        leverage_points: Sequence[LeveragePoint] = (),
        weak_spots: Sequence[WeakSpot] = (),
    ) -> CaseMomentum:
        shifts: List[MomentumShift] = []
        shifts.extend(self._merits_shifts(ctx))

        for shift in (
            self._silence_shift(ctx),
            self._contradiction_shift(weak_spots),
            self._leverage_shift(ctx, leverage_points),
        ):
            if shift:
                shifts.append(shift)

        shifts.extend(self._missing_evidence_shifts(ctx))

        for shift in (
            self._recent_documents_shift(ctx),
            self._hazard_shift(ctx),
            self._awaab_shift(ctx),
            self._overdue_deadlines_shift(ctx),
        ):
            if shift:
                shifts.append(shift)

        score = round(clamp_score(sum(s.weight for s in shifts)), 1)
        state, confidence = band(score, len(shifts))
        overridden = self._merits_override(ctx, shifts)
        if overridden:
            score = max(score, float(FAVOURABLE_THRESHOLD))
            state, confidence = band(score, len(shifts))
            substantive = [s for s in shifts if s.factor in MERITS_FACTORS]
            confidence = Confidence.HIGH if len(substantive) >= 2 else Confidence.MEDIUM

        momentum = CaseMomentum(
            case_id=ctx.case_id,
            state=state,
            score=score,
            shifts=shifts,
            explanation=self._explain(state, shifts, overridden),
            confidence=confidence,
            role=ctx.role,
            role_assumed=ctx.role_assumed,
        )
        logger.info(
            f"Momentum: {state.value} ({momentum.score}) from {len(shifts)} shifts for case {ctx.case_id}"
            + (" [merits override]" if overridden else "")
        )
        return momentum

    # =========================================================================
    # Shifts
    # =========================================================================

    def _merits_shifts(self, ctx: DetectorContext) -> List[MomentumShift]:
        if not ctx.is_claimant_clin_neg or ctx.merits is None:
            return []
        merits = ctx.merits
        descriptions = {
            "guideline_breaches": f"{merits.guideline_breaches.count} guideline breach(es) detected: strong liability position",
            "delay_causation": f"{merits.delay_causation.count} delay indicator(s) linked to avoidable harm: causation strengthened",
            "expert_confirmation": "Expert evidence confirms breach and/or causation: strong evidential position",
            "serious_harm": f"Serious harm detected ({', '.join(merits.serious_harm.details)}): quantum escalators present",
            "psychological_injury": "Psychological injury identified: additional head of loss",
        }
        shifts = []
        named = [
            ("guideline_breaches", merits.guideline_breaches),
            ("delay_causation", merits.delay_causation),
            ("expert_confirmation", merits.expert_confirmation),
            ("serious_harm", merits.serious_harm),
            ("psychological_injury", merits.psychological_injury),
        ]
        for name, signal in named:
            if not signal.detected:
                continue
            shifts.append(MomentumShift(
                factor=MERITS_FACTORS_BY_SIGNAL[name],
                polarity=ShiftPolarity.POSITIVE,
                description=descriptions[name],
                weight=float(signal.score),
            ))
        return shifts

    def _silence_shift(self, ctx: DetectorContext) -> Optional[MomentumShift]:
        silence = ctx.silence_days
        if silence > ctx.settings.silence_notice_days:
            weight = min(silence / 4, 10) if ctx.is_claimant else min(silence / 2, 20)
            return MomentumShift(
                factor="Opponent delays",
                polarity=ShiftPolarity.POSITIVE,
                description=f"Opponent has not responded for {silence} days: creates procedural leverage",
                weight=round(weight, 1),
            )
        if silence == 0 and ctx.average_response_days:
            return MomentumShift(
                factor="Opponent responsiveness",
                polarity=ShiftPolarity.NEGATIVE,
                description="Opponent is responding promptly: less procedural leverage",
                weight=-2.0 if ctx.is_claimant else -5.0,
                administrative=True,
            )
        return None

    def _contradiction_shift(self, weak_spots: Sequence[WeakSpot]) -> Optional[MomentumShift]:
        count = sum(1 for w in weak_spots if w.type == WeakSpotType.CONTRADICTION)
        if not count:
            return None
        return MomentumShift(
            factor="Contradictions found",
            polarity=ShiftPolarity.POSITIVE,
            description=f"{count} contradiction(s) detected: weakens the opponent's case",
            weight=float(min(count * 5, 25)),
        )

    def _leverage_shift(self, ctx: DetectorContext, leverage_points: Sequence[LeveragePoint]) -> Optional[MomentumShift]:
        procedural = [
            p for p in leverage_points
            if p.type not in SUBSTANTIVE_LEVERAGE_TYPES and p.type != LeverageType.ADMINISTRATIVE_GAP
        ]
        if not procedural:
            return None
        critical = sum(1 for p in procedural if p.severity == Severity.CRITICAL)
        other = len(procedural) - critical
        if ctx.is_claimant:
            weight = min(critical * 5 + other * 2, 15)
        else:
            weight = min(critical * 10 + other * 5, 30)
        return MomentumShift(
            factor="Procedural leverage",
            polarity=ShiftPolarity.POSITIVE,
            description=f"{len(procedural)} procedural leverage point(s): the opponent has made procedural mistakes",
            weight=float(weight),
        )

    def _missing_evidence_shifts(self, ctx: DetectorContext) -> List[MomentumShift]:
        critical = ctx.critical_missing
        if not critical:
            return []

        if not ctx.is_claimant:
            return [MomentumShift(
                factor="Missing evidence",
                polarity=ShiftPolarity.NEGATIVE,
                description=f"{len(critical)} critical evidence item(s) missing",
                weight=-float(min(len(critical) * 10, 30)),
            )]

        substantive = [m for m in critical if not m.administrative]
        administrative = [m for m in critical if m.administrative]
        shifts = []
        if substantive:
            shifts.append(MomentumShift(
                factor="Missing evidence",
                polarity=ShiftPolarity.NEGATIVE,
                description=f"{len(substantive)} critical evidence item(s) missing: substantive gaps weaken the case",
                weight=-float(min(len(substantive) * 10, 30)),
            ))
        if administrative:
            shifts.append(MomentumShift(
                factor="Administrative gaps",
                polarity=ShiftPolarity.NEGATIVE,
                description=(
                    f"{len(administrative)} client-care item(s) outstanding "
                    f"({', '.join(m.label for m in administrative)}): housekeeping only"
                ),
                weight=-float(min(len(administrative) * 2, 5)),
                administrative=True,
            ))
        return shifts

    def _recent_documents_shift(self, ctx: DetectorContext) -> Optional[MomentumShift]:
        window = ctx.settings.recent_document_days
        recent = [d for d in ctx.material.documents if 0 <= ctx.days_since(d.created_at) <= window]
        if not recent:
            return None
        return MomentumShift(
            factor="New evidence",
            polarity=ShiftPolarity.POSITIVE,
            description=f"{len(recent)} new document(s) added in the last {window} days",
            weight=float(min(len(recent) * 2, 15)),
        )

    def _hazard_shift(self, ctx: DetectorContext) -> Optional[MomentumShift]:
        if not ctx.is_housing or not ctx.timeline_matching(HOUSING_HAZARD_KEYWORDS):
            return None
        return MomentumShift(
            factor="Hazard findings",
            polarity=ShiftPolarity.POSITIVE,
            description="Category 1 hazards or Awaab's Law triggers detected: strong statutory position",
            weight=15.0,
        )

    def _awaab_shift(self, ctx: DetectorContext) -> Optional[MomentumShift]:
        awaab = ctx.awaab
        if awaab is None or not awaab.breached:
            return None
        weight = 20.0 if awaab.emergency else 10.0
        if ctx.is_claimant:
            return MomentumShift(
                factor="Awaab's Law breach",
                polarity=ShiftPolarity.POSITIVE,
                description=f"Landlord missed a statutory Awaab's Law deadline ({awaab.countdown_status})",
                weight=weight,
            )
        return MomentumShift(
            factor="Awaab's Law breach",
            polarity=ShiftPolarity.NEGATIVE,
            description=f"Client landlord missed a statutory Awaab's Law deadline ({awaab.countdown_status})",
            weight=-weight,
        )

    def _overdue_deadlines_shift(self, ctx: DetectorContext) -> Optional[MomentumShift]:
        overdue = ctx.overdue_deadlines()
        if not overdue:
            return None
        return MomentumShift(
            factor="Overdue deadlines",
            polarity=ShiftPolarity.NEGATIVE,
            description=f"{len(overdue)} deadline(s) overdue: procedural risk",
            weight=-float(min(len(overdue) * 5, 20)),
            administrative=True,
        )

    # =========================================================================
    # Verdict
    # =========================================================================

    def _merits_override(self, ctx: DetectorContext, shifts: List[MomentumShift]) -> bool:
        if not ctx.is_claimant_clin_neg:
            return False
        if ctx.merits_total < ctx.settings.merits_override_threshold:
            return False
        return not any(s.polarity == ShiftPolarity.NEGATIVE and not s.administrative for s in shifts)

    def _explain(self, state: MomentumState, shifts: List[MomentumShift], overridden: bool) -> str:
        if not shifts:
            return "Case momentum is balanced: no significant factors detected yet."

        top = sorted(shifts, key=lambda s: abs(s.weight), reverse=True)[:TOP_FACTORS]
        top_names = ", ".join(s.factor for s in top)
        positives = ", ".join(s.factor for s in shifts if s.polarity == ShiftPolarity.POSITIVE)
        negatives = ", ".join(s.factor for s in shifts if s.polarity == ShiftPolarity.NEGATIVE)

        if overridden:
            merits = ", ".join(s.factor for s in shifts if s.factor in MERITS_FACTORS)
            return (
                f"High-merit liability case with strong substantive foundations ({merits}). "
                "Suitable for early admission pressure or a liability trial if resisted. "
                "Administrative and procedural gaps do not affect the substantive strength of the case."
            )
        if state == MomentumState.STRONG:
            return f"Case momentum is in your favour. Key factors: {top_names}."
        if state == MomentumState.WEAK:
            text = f"Case momentum is against you. Key factors: {top_names}."
            if positives:
                text += f" Strengths remain: {positives}."
            return text + " Focus on closing evidence gaps and procedural compliance."
        text = "Case momentum is balanced."
        if positives:
            text += f" Strengths: {positives}."
        if negatives:
            text += f" Concerns: {negatives}."
        return text


MERITS_FACTORS_BY_SIGNAL = {
    "guideline_breaches": "Guideline breaches",
    "delay_causation": "Delay-caused injury",
    "expert_confirmation": "Expert confirmation of avoidability",
    "serious_harm": "Serious harm indicators",
    "psychological_injury": "Psychological injury",
}
MERITS_FACTORS = set(MERITS_FACTORS_BY_SIGNAL.values())


def calculate_momentum(
    ctx: DetectorContext,
    leverage_points: Sequence[LeveragePoint] = (),
    weak_spots: Sequence[WeakSpot] = (),
) -> CaseMomentum:
    """Convenience wrapper"""
    return MomentumAggregator().calculate(ctx, leverage_points, weak_spots)
