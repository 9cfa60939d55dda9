"""
Detector Context - the single input object shared by all detectors
==================================================================

Carries the case material plus everything already resolved for this run
(role, merits, opponent snapshot, contradictions, missing evidence, the
Awaab's Law position, clock and settings), and the small text/date helpers
the detectors share.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from dataclasses import dataclass, field

from .config import Settings, get_settings
from .merits import SubstantiveMerits
from .missing_evidence import find_missing_evidence
from .role_detection import RoleDetectionResult
from .rules import term_in
from .schemas import (
    AwaabsLawAssessment,
    CaseMaterial,
    CaseRole,
    Contradiction,
    Document,
    EvidenceRequirement,
    MissingEvidenceItem,
    OpponentActivity,
    PracticeArea,
    Severity,
    TimelineEvent,
    ensure_utc,
)

logger = logging.getLogger(__name__)

# Timeline phrases that mark proceedings as issued
ISSUE_KEYWORDS = ["issued", "proceedings", "claim form issued"]


def insight_id(prefix: str, case_id: str, *parts: str) -> str:
    """Deterministic insight id, e.g. leverage-case1-late_response"""
    suffix = "-".join(p.lower().replace(" ", "_") for p in parts if p)
    return f"{prefix}-{case_id}-{suffix}" if suffix else f"{prefix}-{case_id}"


def mentions(text: str, keywords: Sequence[str]) -> bool:
    """True if any keyword occurs in text (word start, inflections allowed, case-insensitive)"""
    lower = text.lower()
    return any(term_in(lower, k) for k in keywords)


@dataclass
class DetectorContext:
    """Role- and practice-area-parameterised input for every detector"""
    material: CaseMaterial
    role: CaseRole = CaseRole.CLAIMANT
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    settings: Settings = field(default_factory=get_settings)
    role_assumed: bool = False
    merits: Optional[SubstantiveMerits] = None
    opponent: OpponentActivity = field(default_factory=OpponentActivity)
    contradictions: List[Contradiction] = field(default_factory=list)
    missing_evidence: List[MissingEvidenceItem] = field(default_factory=list)
    awaab: Optional[AwaabsLawAssessment] = None

    def __post_init__(self):
        self.now = ensure_utc(self.now)

    @classmethod
    def create(
        cls,
        material: CaseMaterial,
        role: Optional[RoleDetectionResult] = None,
        now: Optional[datetime] = None,
        settings: Optional[Settings] = None,
        merits: Optional[SubstantiveMerits] = None,
        opponent: Optional[OpponentActivity] = None,
        contradictions: Optional[List[Contradiction]] = None,
        missing_evidence: Optional[List[MissingEvidenceItem]] = None,
        checklist: Optional[List[EvidenceRequirement]] = None,
        awaab: Optional[AwaabsLawAssessment] = None,
    ) -> "DetectorContext":
        """Build a context, computing missing evidence from the checklist if not given"""
        if role is None:
            role = RoleDetectionResult(role=material.role or CaseRole.CLAIMANT, assumed=material.role is None)
        if missing_evidence is None:
            missing_evidence = find_missing_evidence(
                material.case_id, material.practice_area, material.documents, checklist
            )
        return cls(
            material=material,
            role=role.role,
            role_assumed=role.assumed,
            now=now or datetime.now(timezone.utc),
            settings=settings or get_settings(),
            merits=merits,
            opponent=opponent or OpponentActivity(),
            contradictions=list(contradictions or []),
            missing_evidence=missing_evidence,
            awaab=awaab,
        )

    # -------------------------------------------------------------------------
    # Case shape
    # -------------------------------------------------------------------------

    @property
    def case_id(self) -> str:
        return self.material.case_id

    @property
    def practice_area(self) -> PracticeArea:
        return self.material.practice_area

    @property
    def is_claimant(self) -> bool:
        return self.role == CaseRole.CLAIMANT

    @property
    def is_housing(self) -> bool:
        return self.practice_area == PracticeArea.HOUSING_DISREPAIR

    @property
    def is_criminal(self) -> bool:
        return self.practice_area == PracticeArea.CRIMINAL

    @property
    def is_injury_claim(self) -> bool:
        return self.practice_area in (PracticeArea.PERSONAL_INJURY, PracticeArea.CLINICAL_NEGLIGENCE)

    @property
    def is_claimant_clin_neg(self) -> bool:
        return self.is_claimant and self.practice_area == PracticeArea.CLINICAL_NEGLIGENCE

    @property
    def merits_total(self) -> float:
        return self.merits.total_score if self.merits else 0.0

    # -------------------------------------------------------------------------
    # Opponent
    # -------------------------------------------------------------------------

    @property
    def silence_days(self) -> int:
        return self.opponent.silence_days

    @property
    def average_response_days(self) -> Optional[float]:
        return self.opponent.average_response_days

    # -------------------------------------------------------------------------
    # Dates
    # -------------------------------------------------------------------------

    def days_since(self, moment: datetime) -> int:
        return (self.now - moment).days

    def days_until(self, moment: datetime) -> int:
        return (moment - self.now).days

    @property
    def first_event(self) -> Optional[TimelineEvent]:
        return self.material.timeline[0] if self.material.timeline else None

    @property
    def days_until_hearing(self) -> Optional[int]:
        if self.material.next_hearing_date is None:
            return None
        return self.days_until(self.material.next_hearing_date)

    # -------------------------------------------------------------------------
    # Documents / timeline / letters
    # -------------------------------------------------------------------------

    def documents_matching(self, keywords: Sequence[str]) -> List[Document]:
        """Documents whose name or type mentions any keyword"""
        return [
            d for d in self.material.documents
            if mentions(f"{d.name} {d.type or ''}", keywords)
        ]

    def has_document(self, keywords: Sequence[str]) -> bool:
        return bool(self.documents_matching(keywords))

    def timeline_matching(self, keywords: Sequence[str]) -> List[TimelineEvent]:
        return [e for e in self.material.timeline if mentions(e.description, keywords)]

    def has_letter(self, template_fragments: Sequence[str]) -> bool:
        """True if a letter's template id contains any fragment"""
        for letter in self.material.letters:
            template = (letter.template_id or "").lower()
            if any(f in template for f in template_fragments):
                return True
        return False

    @property
    def issue_event(self) -> Optional[TimelineEvent]:
        """First timeline event indicating proceedings were issued"""
        matches = self.timeline_matching(ISSUE_KEYWORDS)
        return matches[0] if matches else None

    @property
    def is_post_issue(self) -> bool:
        return self.issue_event is not None

    # -------------------------------------------------------------------------
    # Missing evidence
    # -------------------------------------------------------------------------

    @property
    def critical_missing(self) -> List[MissingEvidenceItem]:
        return [m for m in self.missing_evidence if m.priority == Severity.CRITICAL]

    @property
    def substantive_missing(self) -> List[MissingEvidenceItem]:
        return [m for m in self.missing_evidence if not m.administrative]

    @property
    def administrative_missing(self) -> List[MissingEvidenceItem]:
        return [m for m in self.missing_evidence if m.administrative]

    def overdue_deadlines(self):
        return [d for d in self.material.deadlines if d.is_overdue(self.now)]
