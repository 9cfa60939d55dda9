"""
Pydantic Schemas for the Litigation Intelligence Engine
=======================================================

Closed enumerations and validated models for everything that crosses the
engine boundary:

- Inputs: case material produced upstream (documents, timeline, letters,
  deadlines), the opponent-activity snapshot, contradiction records and
  evidence checklist requirements.
- Outputs: typed insight records (leverage points, weak spots, compliance
  issues, time-pressure points, behaviour predictions, vulnerabilities,
  strategy paths, scenarios, judicial expectations), the momentum verdict,
  and analysis snapshots/deltas.

Loosely-typed upstream extraction payloads are validated here once, so the
detectors can read plain attributes instead of re-guarding every access.
"""

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, field_validator


# =============================================================================
# Datetime normalisation
# =============================================================================

def _coerce_date(value: Any) -> Any:
    """Plain dates become midnight datetimes"""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, BeforeValidator(_coerce_date), AfterValidator(_as_utc)]


def ensure_utc(value: datetime) -> datetime:
    """Normalise a caller-supplied 'now' the same way model fields are"""
    return _as_utc(_coerce_date(value))


# =============================================================================
# ENUMS - Case classification
# =============================================================================

class PracticeArea(str, Enum):
    """Practice areas the engine knows rule packs for"""
    CRIMINAL = "criminal"
    CLINICAL_NEGLIGENCE = "clinical_negligence"
    HOUSING_DISREPAIR = "housing_disrepair"
    PERSONAL_INJURY = "personal_injury"
    FAMILY = "family"
    OTHER_LITIGATION = "other_litigation"


class CaseRole(str, Enum):
    """Which side of the litigation our client is on"""
    CLAIMANT = "claimant"
    DEFENDANT = "defendant"


class Severity(str, Enum):
    """
    Severity / priority levels (1-4 scale).

    - CRITICAL (4): Act now, the point decides the case or a deadline
    - HIGH (3): Significant, should be actioned this cycle
    - MEDIUM (2): Worth raising, not urgent
    - LOW (1): Housekeeping
    """
    CRITICAL = "critical"  # Level 4
    HIGH = "high"          # Level 3
    MEDIUM = "medium"      # Level 2
    LOW = "low"            # Level 1


SEVERITY_ORDER: List[Severity] = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


class Confidence(str, Enum):
    """Confidence / probability band"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EvidenceCategory(str, Enum):
    """Evidence checklist categories, in display order"""
    LIABILITY = "liability"
    CAUSATION = "causation"
    QUANTUM = "quantum"
    PROCEDURE = "procedure"
    HOUSING = "housing"


EVIDENCE_CATEGORY_ORDER: List[EvidenceCategory] = list(EvidenceCategory)


class LitigationStage(str, Enum):
    """Procedural stage used by the judicial expectation map"""
    INTAKE = "intake"
    PRE_ACTION = "pre_action"
    POST_ISSUE = "post_issue"
    DISCLOSURE = "disclosure"
    HEARING = "hearing"


class DeadlineStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


# =============================================================================
# ENUMS - Insight taxonomies
# =============================================================================

class LeverageType(str, Enum):
    """
    Procedural leverage point types.

    Procedural:
    - LATE_RESPONSE: Opponent silent beyond the response window
    - MISSING_PRE_ACTION: No pre-action protocol letter on file
    - MISSING_EVIDENCE: Critical checklist evidence absent
    - ADMINISTRATIVE_GAP: Client-care paperwork absent (claimant housekeeping)
    - MISSING_DEADLINE: A court/procedural deadline has passed
    - DISCLOSURE_FAILURE: No disclosure 28+ days after issue
    - AWAABS_LAW_BREACH: Social landlord missed an Awaab's Law deadline (housing)

    Substantive (claimant clinical negligence):
    - GUIDELINE_BREACH, EXPERT_CONFIRMATION, DELAY_CAUSATION, SERIOUS_HARM
    """
    LATE_RESPONSE = "late_response"
    MISSING_PRE_ACTION = "missing_pre_action"
    MISSING_EVIDENCE = "missing_evidence"
    ADMINISTRATIVE_GAP = "administrative_gap"
    MISSING_DEADLINE = "missing_deadline"
    DISCLOSURE_FAILURE = "disclosure_failure"
    AWAABS_LAW_BREACH = "awaabs_law_breach"
    GUIDELINE_BREACH = "guideline_breach"
    EXPERT_CONFIRMATION = "expert_confirmation"
    DELAY_CAUSATION = "delay_causation"
    SERIOUS_HARM = "serious_harm"


SUBSTANTIVE_LEVERAGE_TYPES = {
    LeverageType.GUIDELINE_BREACH,
    LeverageType.EXPERT_CONFIRMATION,
    LeverageType.DELAY_CAUSATION,
    LeverageType.SERIOUS_HARM,
}


class EscalationType(str, Enum):
    """Suggested escalation for a leverage point"""
    UNLESS_ORDER = "unless_order"
    STRIKE_OUT = "strike_out"
    FURTHER_INFORMATION = "further_information"
    CLARIFICATION = "clarification"


class WeakSpotType(str, Enum):
    """Opponent weak-spot types"""
    CONTRADICTION = "contradiction"
    MISSING_EVIDENCE = "missing_evidence"
    TIMELINE_GAP = "timeline_gap"
    WRONG_DATE = "wrong_date"
    MISSING_RECORDS = "missing_records"
    NO_RESPONSE = "no_response"
    POOR_EXPERT = "poor_expert"


class ApplicationType(str, Enum):
    """Court application suggested by a compliance breach"""
    UNLESS_ORDER = "unless_order"
    STRIKE_OUT = "strike_out"
    FURTHER_INFORMATION = "further_information"
    COSTS_ORDER = "costs_order"
    DIRECTION = "direction"


class VulnerabilityType(str, Enum):
    """Normalised opponent vulnerability taxonomy"""
    INCOMPLETE_DISCLOSURE = "incomplete_disclosure"
    DEFECTIVE_NOTICE = "defective_notice"
    MISSING_RECORDS = "missing_records"
    EXPERT_NON_COMPLIANCE = "expert_non_compliance"
    LATE_RESPONSE = "late_response"
    MISSING_PARTICULARS = "missing_particulars"
    INCORRECT_SERVICE = "incorrect_service"
    MISSING_PRE_ACTION = "missing_pre_action"


class RouteId(str, Enum):
    """
    Strategy route identifiers.

    - A-D: procedural / housing / contradiction / settlement-pressure routes
    - E: hybrid of two or more generated routes
    - DEFAULT: standard litigation pathway when nothing qualifies
    - CN_*: claimant clinical negligence routes built around the merits
    """
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    DEFAULT = "default"
    CN_ADMISSION = "cn_admission"
    CN_PROTOCOL = "cn_protocol"
    CN_JUDGMENT = "cn_judgment"
    CN_SETTLEMENT = "cn_settlement"


class TimePressureIssue(str, Enum):
    OPPONENT_DELAY = "opponent_delay"
    DISCLOSURE_OVERDUE = "disclosure_overdue"
    HEARING_PREPARATION = "hearing_preparation"
    HEARING_SILENCE = "hearing_silence"
    DEADLINE_APPROACHING = "deadline_approaching"
    SETTLEMENT_WINDOW = "settlement_window"
    AWAABS_LAW_DEADLINE = "awaabs_law_deadline"


class AwaabBreachState(str, Enum):
    """Which Awaab's Law deadlines a social landlord has missed"""
    NONE = "none"
    INVESTIGATION = "investigation"
    WORK_START = "work_start"
    BOTH = "both"


class BehaviorPattern(str, Enum):
    """Action we might take, for which a response pattern is predicted"""
    DISCLOSURE_REQUEST = "disclosure_request"
    FURTHER_INFORMATION = "further_information"
    SETTLEMENT_APPROACH = "settlement_approach"
    EXPERT_CHALLENGE = "expert_challenge"
    CONTRADICTION_PUT = "contradiction_put"
    COSTS_APPLICATION = "costs_application"
    UNLESS_ORDER = "unless_order"


class JudicialCategory(str, Enum):
    INSTRUCTIONS = "instructions"
    CHRONOLOGY = "chronology"
    PRE_ACTION = "pre_action"
    DISCLOSURE = "disclosure"
    DIRECTIONS = "directions"
    MEDICAL = "medical"
    EXPERT = "expert"
    TRIAL_BUNDLE = "trial_bundle"
    AWAAB = "awaab"


class ExpectationStandard(str, Enum):
    REQUIRED = "required"
    EXPECTED = "expected"
    RECOMMENDED = "recommended"


class ExpectationStatus(str, Enum):
    MET = "met"
    PARTIAL = "partial"
    NOT_MET = "not_met"


class JudicialStatus(str, Enum):
    """Overall stage compliance"""
    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"


class MomentumState(str, Enum):
    """Directional verdict (single canonical naming)"""
    STRONG = "strong"
    BALANCED = "balanced"
    WEAK = "weak"


class ShiftPolarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class InsightKind(str, Enum):
    """Insight families, used to dispatch meta generation"""
    LEVERAGE = "leverage"
    WEAK_SPOT = "weak_spot"
    COMPLIANCE = "compliance"
    TIME_PRESSURE = "time_pressure"
    BEHAVIOR = "behavior"
    VULNERABILITY = "vulnerability"
    STRATEGY = "strategy"
    SCENARIO = "scenario"
    JUDICIAL = "judicial"


# =============================================================================
# Practice area normalisation
# =============================================================================

def normalize_practice_area(value: Any) -> PracticeArea:
    """
    Map a loose practice-area label onto PracticeArea.

    Accepts enum members, canonical values and common variants
    ("Clin Neg", "PI", "RTA", "disrepair", "divorce").
    Unrecognised labels map to OTHER_LITIGATION.
    """
    if isinstance(value, PracticeArea):
        return value
    lower = re.sub(r"[^a-z_]", "_", str(value or "").lower())
    for area in PracticeArea:
        if lower == area.value:
            return area
    tokens = set(t for t in lower.split("_") if t)

    if "crim" in lower or "pace" in tokens:
        return PracticeArea.CRIMINAL
    if "housing" in lower or "disrepair" in lower:
        return PracticeArea.HOUSING_DISREPAIR
    if "clin" in lower or "medical" in lower or "negligence" in lower:
        return PracticeArea.CLINICAL_NEGLIGENCE
    if tokens & {"pi", "rta"} or "personal" in lower or "injury" in lower or "accident" in lower:
        return PracticeArea.PERSONAL_INJURY
    if "family" in lower or "child" in lower or "divorce" in lower or "matrimonial" in lower:
        return PracticeArea.FAMILY
    return PracticeArea.OTHER_LITIGATION


# =============================================================================
# INPUT MODELS - Case material
# =============================================================================

class ExtractedFacts(BaseModel):
    """Structured extraction produced upstream for a single document"""
    summary: Optional[str] = Field(None, description="Document summary")
    key_issues: List[str] = Field(default_factory=list, description="Key issues identified")
    timeline: List[Any] = Field(default_factory=list, description="Timeline entries (strings or objects)")
    expert_findings: List[str] = Field(default_factory=list, description="Expert opinions/findings")
    parties: Dict[str, Any] = Field(default_factory=dict, description="Named parties by role")

    class Config:
        extra = "allow"

    @field_validator("key_issues", "expert_findings", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("timeline", mode="before")
    @classmethod
    def _listify_timeline(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return [value]
        return value


class Document(BaseModel):
    """A case document (immutable once created)"""
    id: str = Field(..., description="Document ID")
    name: str = Field(..., description="Display name")
    created_at: UtcDatetime = Field(..., description="Creation timestamp")
    type: Optional[str] = Field(None, description="Document type label")
    text: Optional[str] = Field(None, description="Raw extracted text")
    extracted: Optional[ExtractedFacts] = Field(None, description="Structured extraction")

    class Config:
        frozen = True


class TimelineEvent(BaseModel):
    date: UtcDatetime = Field(..., description="Event date")
    description: str = Field(..., description="Free-text description")

    class Config:
        frozen = True


class Letter(BaseModel):
    id: str
    created_at: UtcDatetime
    template_id: Optional[str] = Field(None, description="Template identifier, e.g. 'pre_action_protocol'")

    class Config:
        frozen = True


class Deadline(BaseModel):
    id: str
    title: str
    due_date: UtcDatetime
    status: DeadlineStatus = DeadlineStatus.OPEN

    class Config:
        frozen = True

    def is_overdue(self, now: datetime) -> bool:
        return self.due_date < now and self.status != DeadlineStatus.COMPLETED


class CaseMaterial(BaseModel):
    """Immutable snapshot of everything the engine reads for one case"""
    case_id: str = Field(..., description="Case identifier")
    practice_area: PracticeArea = Field(..., description="Practice area (aliases accepted)")
    role: Optional[CaseRole] = Field(None, description="Known role; inferred when absent")
    documents: List[Document] = Field(default_factory=list)
    timeline: List[TimelineEvent] = Field(default_factory=list, description="Ordered by date")
    letters: List[Letter] = Field(default_factory=list)
    deadlines: List[Deadline] = Field(default_factory=list)
    bundle_id: Optional[str] = Field(None, description="Document bundle for contradiction search")
    next_hearing_date: Optional[UtcDatetime] = None
    stage: Optional[LitigationStage] = None
    chronology: List[str] = Field(default_factory=list, description="Case-level chronology/key-issue rows")
    bundle_summaries: List[str] = Field(default_factory=list)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "case_id": "case-001",
                "practice_area": "clinical_negligence",
                "documents": [
                    {"id": "d1", "name": "Expert Report - Breach", "created_at": "2024-03-01T00:00:00Z"}
                ],
                "timeline": [{"date": "2024-01-10", "description": "Letter of claim sent"}],
            }
        }

    @field_validator("practice_area", mode="before")
    @classmethod
    def _normalize_area(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("practice_area is required")
        return normalize_practice_area(value)

    @field_validator("timeline")
    @classmethod
    def _sort_timeline(cls, value: List[TimelineEvent]) -> List[TimelineEvent]:
        return sorted(value, key=lambda e: e.date)


class OpponentActivity(BaseModel):
    """Opponent-activity snapshot (external collaborator output)"""
    silence_days: int = Field(0, ge=0, description="Days since last opposing contact")
    last_letter_sent_at: Optional[UtcDatetime] = None
    last_chase_sent_at: Optional[UtcDatetime] = None
    last_opponent_reply_at: Optional[UtcDatetime] = None
    average_response_days: Optional[float] = Field(None, ge=0, description="Historical average response time")


class Contradiction(BaseModel):
    """Contradiction record from the contradiction finder"""
    id: Optional[str] = None
    description: str
    confidence: Confidence = Confidence.MEDIUM


class EvidenceRequirement(BaseModel):
    """Evidence checklist entry"""
    id: str
    label: str
    category: EvidenceCategory
    description: str = ""
    priority: Severity
    detect_patterns: List[str] = Field(default_factory=list)


# =============================================================================
# OUTPUT MODELS - Insights
# =============================================================================

class AlternativeBranch(BaseModel):
    label: str
    description: str
    unlocked_by: List[str] = Field(default_factory=list, description="Evidence or events that would open this branch")


class StrategicInsightMeta(BaseModel):
    """Explanatory metadata attached to each insight"""
    why_recommended: str
    triggered_by: List[str] = Field(default_factory=list)
    alternatives: List[AlternativeBranch] = Field(default_factory=list)
    risk_if_ignored: str
    best_stage_to_use: str
    how_this_helps_you_win: str


class MissingEvidenceItem(BaseModel):
    id: str
    case_id: str
    requirement_id: str
    label: str
    category: EvidenceCategory
    reason: str = ""
    priority: Severity
    status: str = "missing"
    suggested_action: str = ""
    administrative: bool = Field(False, description="Client-care paperwork rather than case evidence")


class LeveragePoint(BaseModel):
    id: str
    case_id: str
    type: LeverageType
    description: str
    severity: Severity
    evidence: List[str] = Field(default_factory=list)
    leverage: str = Field("", description="How to use it")
    suggested_escalation: EscalationType
    escalation_text: str = ""
    cpr_rule: Optional[str] = None
    meta: Optional[StrategicInsightMeta] = None


class WeakSpot(BaseModel):
    id: str
    case_id: str
    type: WeakSpotType
    description: str
    severity: Severity
    evidence: List[str] = Field(default_factory=list)
    impact: str = ""
    suggested_action: str = ""
    legal_basis: Optional[str] = None
    meta: Optional[StrategicInsightMeta] = None


class ComplianceIssue(BaseModel):
    id: str
    case_id: str
    rule: str = Field(..., description="Procedural rule reference, e.g. 'CPR 31.10'")
    breach: str
    severity: Severity
    evidence: List[str] = Field(default_factory=list)
    suggested_application: ApplicationType
    application_text: str = ""
    meta: Optional[StrategicInsightMeta] = None


class TimePressurePoint(BaseModel):
    id: str
    case_id: str
    issue: TimePressureIssue
    description: str
    severity: Severity
    days: Optional[int] = Field(None, description="Elapsed or remaining days driving the pressure")
    ideal_window: bool = Field(False, description="Silence within the best escalation band")
    timing: str = ""
    action: str = ""
    leverage: str = ""
    risk_to_opponent: str = ""
    deadline: Optional[UtcDatetime] = None
    meta: Optional[StrategicInsightMeta] = None


class BehaviorPrediction(BaseModel):
    id: str
    case_id: str
    pattern: BehaviorPattern
    action: str = Field(..., description="If you take this action")
    expected_response: str = Field(..., description="Expect this response pattern")
    expected_response_days: Optional[int] = None
    confidence: Confidence
    opportunity: str = ""
    timing: str = ""
    leverage: str = ""
    rationale: str = ""
    meta: Optional[StrategicInsightMeta] = None


class OpponentVulnerability(BaseModel):
    id: str
    case_id: str
    type: VulnerabilityType
    description: str
    severity: Severity
    source: InsightKind
    evidence: List[str] = Field(default_factory=list)
    leverage: str = ""
    recommended_action: str = ""
    cost_to_opponent: str = Field("", description="Estimated consequence for the opponent if challenged")
    meta: Optional[StrategicInsightMeta] = None


class StrategyPath(BaseModel):
    id: str
    case_id: str
    route: RouteId
    title: str
    approach: str
    steps: List[str] = Field(default_factory=list)
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    timeframe: str
    estimated_cost: str
    success_probability: Confidence
    audience: str = ""
    meta: Optional[StrategicInsightMeta] = None


class ProceduralScenario(BaseModel):
    id: str
    case_id: str
    title: str
    trigger: str = Field(..., description="If ...")
    outcome: str = Field(..., description="... then")
    timeframe: str = ""
    risks: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)
    confidence: Confidence
    meta: Optional[StrategicInsightMeta] = None


class JudicialExpectation(BaseModel):
    id: str
    case_id: str
    stage: LitigationStage
    category: JudicialCategory
    expectation: str
    standard: ExpectationStandard = ExpectationStandard.REQUIRED
    status: ExpectationStatus
    description: str = ""
    warning: Optional[str] = Field(None, description="Set when the expectation is not fully met")
    rule: Optional[str] = None
    evidence: List[str] = Field(default_factory=list)
    meta: Optional[StrategicInsightMeta] = None


class JudicialAssessment(BaseModel):
    case_id: str
    stage: LitigationStage
    expectations: List[JudicialExpectation] = Field(default_factory=list)
    status: JudicialStatus


class MomentumShift(BaseModel):
    factor: str
    polarity: ShiftPolarity
    description: str
    weight: float
    administrative: bool = False


class CaseMomentum(BaseModel):
    case_id: str
    state: MomentumState
    score: float = Field(..., ge=-100, le=100)
    shifts: List[MomentumShift] = Field(default_factory=list)
    explanation: str
    confidence: Confidence
    role: CaseRole
    role_assumed: bool = False


class PracticeAreaViability(BaseModel):
    """How well the case material fits the selected practice area"""
    practice_area: PracticeArea
    viable: bool = True
    score: float = Field(0.0, ge=0.0, le=1.0)
    signals_found: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)
    suggested_practice_area: Optional[PracticeArea] = None


class AwaabsLawAssessment(BaseModel):
    """
    Awaab's Law position for a social housing hazard.

    The landlord must investigate within 14 days of the first report and
    start works within 7 days of the investigation.
    """
    applies: bool = False
    triggers: List[str] = Field(default_factory=list)
    first_report_date: Optional[UtcDatetime] = None
    investigation_date: Optional[UtcDatetime] = None
    work_start_date: Optional[UtcDatetime] = None
    investigation_deadline: Optional[UtcDatetime] = None
    work_start_deadline: Optional[UtcDatetime] = None
    investigation_breached: bool = False
    work_start_breached: bool = False
    days_until_investigation_deadline: Optional[int] = None
    days_until_work_start_deadline: Optional[int] = None
    emergency: bool = False
    breach_state: AwaabBreachState = AwaabBreachState.NONE
    countdown_status: str = ""
    recommended_move: str = ""

    @property
    def breached(self) -> bool:
        return self.breach_state != AwaabBreachState.NONE


class StrategicAnalysis(BaseModel):
    """Full engine output for one invocation"""
    case_id: str
    practice_area: PracticeArea
    role: CaseRole
    role_assumed: bool = False
    generated_at: UtcDatetime
    momentum: CaseMomentum
    leverage_points: List[LeveragePoint] = Field(default_factory=list)
    weak_spots: List[WeakSpot] = Field(default_factory=list)
    compliance_issues: List[ComplianceIssue] = Field(default_factory=list)
    time_pressure: List[TimePressurePoint] = Field(default_factory=list)
    behavior_predictions: List[BehaviorPrediction] = Field(default_factory=list)
    vulnerabilities: List[OpponentVulnerability] = Field(default_factory=list)
    strategy_paths: List[StrategyPath] = Field(default_factory=list)
    scenarios: List[ProceduralScenario] = Field(default_factory=list)
    judicial: Optional[JudicialAssessment] = None
    missing_evidence: List[MissingEvidenceItem] = Field(default_factory=list)
    merits_total: float = 0.0
    viability: Optional[PracticeAreaViability] = None
    awaabs_law: Optional[AwaabsLawAssessment] = None
    warnings: List[str] = Field(default_factory=list, description="Degraded signals for this run")


# =============================================================================
# Snapshot / Delta
# =============================================================================

class KeyIssue(BaseModel):
    type: Optional[str] = None
    label: str
    severity: Optional[str] = None
    notes: Optional[str] = None


class SnapshotMissingEvidence(BaseModel):
    area: Optional[str] = None
    label: str
    priority: Optional[str] = None
    notes: Optional[str] = None


class AnalysisSnapshot(BaseModel):
    """A case's analysis at a point in time"""
    risk_rating: Optional[str] = None
    summary: Optional[str] = None
    key_issues: List[KeyIssue] = Field(default_factory=list)
    timeline: List[Any] = Field(default_factory=list)
    missing_evidence: List[SnapshotMissingEvidence] = Field(default_factory=list)

    @field_validator("key_issues", "missing_evidence", "timeline", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class MomentumChange(BaseModel):
    previous: Optional[str] = None
    current: Optional[str] = None


class DeltaItem(BaseModel):
    type: str
    label: str
    severity: Optional[str] = None


class AnalysisDelta(BaseModel):
    momentum_changed: Optional[MomentumChange] = None
    new_issues: List[DeltaItem] = Field(default_factory=list)
    resolved_issues: List[DeltaItem] = Field(default_factory=list)
    new_missing_evidence: List[DeltaItem] = Field(default_factory=list)
    resolved_missing_evidence: List[DeltaItem] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
