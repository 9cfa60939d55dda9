"""
Strategic Intelligence Engine - the full pipeline for one case
==============================================================

Pipeline:
1. Collaborator reads in parallel (opponent snapshot, contradictions,
   evidence checklist), each behind its own failure boundary
2. Role classification, substantive merits (claimant clinical negligence),
   practice-area viability, Awaab's Law position (housing)
3. Detectors: leverage, weak spots, compliance, time pressure, behaviour
4. Join points: vulnerabilities, strategy paths, scenarios, judicial map
5. Momentum
6. Meta on every insight, then claimant language sanitisation

A failed collaborator read degrades that signal and adds a warning to the
result; it never aborts the analysis. The one error that does propagate is
RuleTableError, a broken rule-table configuration.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from .awaab import detect_awaabs_law
from .behavior import predict_behavior
from .collaborators import Collaborators
from .compliance import check_compliance
from .config import Settings, get_settings
from .context import DetectorContext
from .dedup import dedupe, dedupe_checklist, dedupe_contradictions, dedupe_missing_evidence
from .errors import RuleTableError
from .judicial import map_judicial_expectations
from .leverage import detect_leverage_points
from .merits import SubstantiveMerits, score_substantive_merits
from .meta import attach_meta
from .missing_evidence import find_missing_evidence
from .momentum import calculate_momentum
from .role_detection import RoleDetectionResult, classify_case_role
from .sanitize import sanitize_for_role
from .scenarios import outline_scenarios
from .schemas import (
    AnalysisSnapshot,
    CaseMaterial,
    CaseMomentum,
    CaseRole,
    Confidence,
    Contradiction,
    EvidenceRequirement,
    KeyIssue,
    MomentumState,
    OpponentActivity,
    PracticeArea,
    SnapshotMissingEvidence,
    StrategicAnalysis,
)
from .strategy_paths import generate_strategy_paths
from .time_pressure import analyze_time_pressure
from .viability import assess_practice_area_viability
from .vulnerabilities import aggregate_vulnerabilities
from .weak_spots import detect_weak_spots

logger = logging.getLogger(__name__)


class StrategicIntelligenceEngine:
    """Runs every detector over one case and assembles a StrategicAnalysis"""

    def __init__(self, collaborators: Optional[Collaborators] = None, settings: Optional[Settings] = None):
        self.collaborators = collaborators or Collaborators.defaults()
        self.settings = settings or get_settings()

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    async def analyze(self, material: CaseMaterial, now: Optional[datetime] = None) -> StrategicAnalysis:
        now = now or datetime.now(timezone.utc)
        warnings: List[str] = []

        opponent, contradictions, checklist = await asyncio.gather(
            self._fetch_opponent(material, now, warnings),
            self._fetch_contradictions(material, warnings),
            self._fetch_checklist(material, warnings),
        )

        role = classify_case_role(material, settings=self.settings)
        if role.failed:
            warnings.append(f"Role detection failed, claimant assumed: {role.error}")

        merits = self._score_merits(material, role)
        if merits is not None and merits.error:
            warnings.append(f"Merits scoring failed, zero scores used: {merits.error}")

        missing = dedupe_missing_evidence(find_missing_evidence(
            material.case_id, material.practice_area, material.documents, checklist
        ))
        ctx = DetectorContext.create(
            material,
            role=role,
            now=now,
            settings=self.settings,
            merits=merits,
            opponent=opponent,
            contradictions=contradictions,
            missing_evidence=missing,
        )
        return self._run_pipeline(ctx, warnings)

    async def analyze_by_id(self, case_id: str, now: Optional[datetime] = None) -> StrategicAnalysis:
        """Load case material from the case store, then analyse it"""
        store = self.collaborators.case_store
        if store is None:
            return degraded_analysis(case_id, "No case store configured", now, self.settings)
        try:
            material = await store.load_case(case_id)
        except Exception as e:
            logger.warning(f"Case {case_id} could not be loaded, returning degraded analysis: {e}")
            return degraded_analysis(case_id, f"Case material could not be loaded: {e}", now, self.settings)
        return await self.analyze(material, now=now)

    # -------------------------------------------------------------------------
    # Collaborator reads (fail soft)
    # -------------------------------------------------------------------------

    async def _fetch_opponent(self, material: CaseMaterial, now: datetime, warnings: List[str]) -> OpponentActivity:
        source = self.collaborators.opponent_activity
        if source is None:
            return OpponentActivity()
        try:
            return await source.snapshot(material, now)
        except Exception as e:
            logger.warning(f"Opponent activity unavailable for case {material.case_id}: {e}")
            warnings.append(f"Opponent activity unavailable: {e}")
            return OpponentActivity()

    async def _fetch_contradictions(self, material: CaseMaterial, warnings: List[str]) -> List[Contradiction]:
        finder = self.collaborators.contradictions
        if finder is None or not material.bundle_id:
            return []
        try:
            return dedupe_contradictions(await finder.find(material.bundle_id))
        except Exception as e:
            logger.warning(f"Contradiction search failed for bundle {material.bundle_id}: {e}")
            warnings.append(f"Contradiction search unavailable: {e}")
            return []

    async def _fetch_checklist(self, material: CaseMaterial, warnings: List[str]) -> Optional[List[EvidenceRequirement]]:
        provider = self.collaborators.checklist
        if provider is None:
            return None
        try:
            return dedupe_checklist(await provider.checklist(material.practice_area))
        except RuleTableError:
            raise
        except Exception as e:
            logger.warning(f"Evidence checklist unavailable for case {material.case_id}: {e}")
            warnings.append(f"Evidence checklist unavailable, default pack used: {e}")
            return None

    def _score_merits(self, material: CaseMaterial, role: RoleDetectionResult) -> Optional[SubstantiveMerits]:
        if role.role != CaseRole.CLAIMANT or material.practice_area != PracticeArea.CLINICAL_NEGLIGENCE:
            return None
        return score_substantive_merits(material)

    # -------------------------------------------------------------------------
    # Detectors
    # -------------------------------------------------------------------------

    def _stage(self, name: str, fn: Callable[[], Any], default: Any, ctx: DetectorContext, warnings: List[str]) -> Any:
        """Run one detector stage; a failure yields the default and a warning"""
        try:
            return fn()
        except RuleTableError:
            raise
        except Exception as e:
            logger.warning(f"{name} failed for case {ctx.case_id}: {e}")
            warnings.append(f"{name} unavailable: {e}")
            return default

    def _run_pipeline(self, ctx: DetectorContext, warnings: List[str]) -> StrategicAnalysis:
        def stage(name, fn):
            return self._stage(name, fn, [], ctx, warnings)

        viability = self._stage(
            "Practice-area viability",
            lambda: assess_practice_area_viability(ctx.material, settings=ctx.settings),
            None,
            ctx,
            warnings,
        )
        if viability is not None and not viability.viable and viability.suggested_practice_area is not None:
            warnings.append(
                f"Material does not match {ctx.practice_area.value}: "
                f"it reads as {viability.suggested_practice_area.value}"
            )
        ctx.awaab = self._stage("Awaab's Law check", lambda: detect_awaabs_law(ctx), None, ctx, warnings)

        leverage = stage("Leverage detection", lambda: detect_leverage_points(ctx))
        weak_spots = stage("Weak spot detection", lambda: detect_weak_spots(ctx))
        compliance = stage("Compliance check", lambda: check_compliance(ctx))
        time_pressure = stage("Time pressure analysis", lambda: analyze_time_pressure(ctx))
        behavior = stage("Behaviour prediction", lambda: predict_behavior(ctx))

        vulnerabilities = stage(
            "Vulnerability aggregation",
            lambda: aggregate_vulnerabilities(ctx, leverage, compliance, weak_spots),
        )
        strategy = stage(
            "Strategy generation",
            lambda: generate_strategy_paths(ctx, vulnerabilities, weak_spots, time_pressure),
        )
        scenarios = stage("Scenario outline", lambda: outline_scenarios(ctx))
        judicial = self._stage("Judicial expectations", lambda: map_judicial_expectations(ctx), None, ctx, warnings)
        momentum = self._stage(
            "Momentum",
            lambda: calculate_momentum(ctx, leverage, weak_spots),
            default_momentum(ctx.case_id, ctx.role, ctx.role_assumed, "Momentum could not be calculated"),
            ctx,
            warnings,
        )

        analysis = StrategicAnalysis(
            case_id=ctx.case_id,
            practice_area=ctx.practice_area,
            role=ctx.role,
            role_assumed=ctx.role_assumed,
            generated_at=ctx.now,
            momentum=momentum,
            leverage_points=leverage,
            weak_spots=weak_spots,
            compliance_issues=compliance,
            time_pressure=time_pressure,
            behavior_predictions=behavior,
            vulnerabilities=vulnerabilities,
            strategy_paths=strategy,
            scenarios=scenarios,
            judicial=judicial,
            missing_evidence=ctx.missing_evidence,
            merits_total=ctx.merits_total,
            viability=viability,
            awaabs_law=ctx.awaab,
            warnings=warnings,
        )
        analysis = attach_meta(analysis, ctx)
        analysis = sanitize_for_role(analysis, ctx.role)

        logger.info(
            f"Analysis for case {ctx.case_id}: role={ctx.role.value} momentum={momentum.state.value} "
            f"({len(leverage)} leverage, {len(weak_spots)} weak spots, {len(strategy)} routes, "
            f"{len(warnings)} warnings)"
        )
        return analysis


# =============================================================================
# Degraded results
# =============================================================================

def default_momentum(case_id: str, role: CaseRole, role_assumed: bool, reason: str) -> CaseMomentum:
    return CaseMomentum(
        case_id=case_id,
        state=MomentumState.BALANCED,
        score=0,
        shifts=[],
        explanation=f"Momentum is BALANCED: {reason}.",
        confidence=Confidence.LOW,
        role=role,
        role_assumed=role_assumed,
    )


def degraded_analysis(
    case_id: str,
    reason: str,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> StrategicAnalysis:
    """
    Analysis for a case whose material could not be read.

    Balanced low-confidence momentum and the standard pathway only, with the
    reason recorded as a warning.
    """
    material = CaseMaterial(case_id=case_id, practice_area=PracticeArea.OTHER_LITIGATION)
    ctx = DetectorContext.create(
        material,
        role=RoleDetectionResult.assumed_claimant(error=reason),
        now=now,
        settings=settings,
        missing_evidence=[],
    )
    analysis = StrategicAnalysis(
        case_id=case_id,
        practice_area=material.practice_area,
        role=ctx.role,
        role_assumed=True,
        generated_at=ctx.now,
        momentum=default_momentum(case_id, ctx.role, True, reason),
        strategy_paths=generate_strategy_paths(ctx),
        warnings=[reason],
    )
    return attach_meta(analysis, ctx)


# =============================================================================
# Snapshots
# =============================================================================

def build_snapshot(
    analysis: StrategicAnalysis,
    risk_rating: Optional[str] = None,
    summary: Optional[str] = None,
    timeline: Optional[List[Any]] = None,
) -> AnalysisSnapshot:
    """Reduce an analysis to the snapshot used for change tracking"""
    issues = [
        KeyIssue(type=p.type.value, label=p.description, severity=p.severity.value)
        for p in analysis.leverage_points
    ]
    issues.extend(
        KeyIssue(type=s.type.value, label=s.description, severity=s.severity.value)
        for s in analysis.weak_spots
    )
    issues.extend(
        KeyIssue(type="compliance", label=c.breach, severity=c.severity.value, notes=c.rule)
        for c in analysis.compliance_issues
    )
    missing = [
        SnapshotMissingEvidence(area=m.category.value, label=m.label, priority=m.priority.value, notes=m.reason or None)
        for m in analysis.missing_evidence
    ]
    return AnalysisSnapshot(
        risk_rating=risk_rating or analysis.momentum.state.value.upper(),
        summary=summary or analysis.momentum.explanation,
        key_issues=dedupe(issues, key=lambda i: f"{i.type}:{i.label}"),
        timeline=list(timeline or []),
        missing_evidence=dedupe(missing, key=lambda m: f"{m.area}:{m.label}"),
    )


# =============================================================================
# Convenience wrappers
# =============================================================================

async def analyze_case(
    material: CaseMaterial,
    collaborators: Optional[Collaborators] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> StrategicAnalysis:
    """Analyse one case"""
    return await StrategicIntelligenceEngine(collaborators, settings).analyze(material, now=now)


async def analyze_case_by_id(
    case_id: str,
    collaborators: Collaborators,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> StrategicAnalysis:
    """Load a case from collaborators.case_store and analyse it"""
    return await StrategicIntelligenceEngine(collaborators, settings).analyze_by_id(case_id, now=now)
