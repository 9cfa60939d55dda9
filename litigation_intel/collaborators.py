"""
External collaborators consumed by the engine
=============================================

Protocols (async, read-only):
- CaseDataStore: case material by id
- OpponentActivitySource: opponent silence / response statistics
- ContradictionFinder: contradiction records for a document bundle
- EvidenceChecklistProvider: evidence requirements for a practice area

Default implementations:
- InMemoryCaseStore, StaticContradictionFinder: dict-backed
- InferredOpponentActivity: derives the snapshot from letters and documents
- YamlChecklistProvider: evidence packs from the rule table
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, runtime_checkable
from dataclasses import dataclass

from .errors import CollaboratorError
from .rules import RuleTable, get_rule_table, term_in
from .schemas import (
    CaseMaterial,
    Contradiction,
    EvidenceRequirement,
    OpponentActivity,
    PracticeArea,
    ensure_utc,
    normalize_practice_area,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Protocols
# =============================================================================

@runtime_checkable
class CaseDataStore(Protocol):
    async def load_case(self, case_id: str) -> CaseMaterial:
        ...


@runtime_checkable
class OpponentActivitySource(Protocol):
    async def snapshot(self, material: CaseMaterial, now: datetime) -> OpponentActivity:
        ...


@runtime_checkable
class ContradictionFinder(Protocol):
    async def find(self, bundle_id: str) -> List[Contradiction]:
        ...


@runtime_checkable
class EvidenceChecklistProvider(Protocol):
    async def checklist(self, practice_area: PracticeArea) -> List[EvidenceRequirement]:
        ...


# =============================================================================
# Default implementations
# =============================================================================

class InMemoryCaseStore:
    """Case material held in a dict"""

    def __init__(self, cases: Optional[Dict[str, CaseMaterial]] = None):
        self._cases: Dict[str, CaseMaterial] = dict(cases or {})

    def add(self, material: CaseMaterial) -> None:
        self._cases[material.case_id] = material

    async def load_case(self, case_id: str) -> CaseMaterial:
        try:
            return self._cases[case_id]
        except KeyError:
            raise CollaboratorError(f"Case not found: {case_id}")


class StaticContradictionFinder:
    """Contradictions held in a dict keyed by bundle id"""

    def __init__(self, by_bundle: Optional[Dict[str, List[Contradiction]]] = None):
        self._by_bundle = dict(by_bundle or {})

    async def find(self, bundle_id: str) -> List[Contradiction]:
        return list(self._by_bundle.get(bundle_id, []))


class YamlChecklistProvider:
    """Evidence packs from the rule table (base pack + area pack)"""

    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules = rules or get_rule_table()

    async def checklist(self, practice_area) -> List[EvidenceRequirement]:
        return self.rules.checklist(normalize_practice_area(practice_area))


class InferredOpponentActivity:
    """
    Opponent activity inferred from our correspondence and received documents.

    - Opponent replies: documents whose name contains a reply keyword
    - Chasers: letters whose template id contains a chaser keyword
    - Silence: days since our last letter when no reply has come in since;
      zero when the latest reply postdates it
    - Average response: mean days from each letter to the next reply
    """

    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules = rules or get_rule_table()

    async def snapshot(self, material: CaseMaterial, now: Optional[datetime] = None) -> OpponentActivity:
        return self.infer(material, now)

    def infer(self, material: CaseMaterial, now: Optional[datetime] = None) -> OpponentActivity:
        now = ensure_utc(now or datetime.now(timezone.utc))

        replies = sorted(
            (d.created_at for d in material.documents
             if any(term_in(d.name.lower(), k) for k in self.rules.reply_keywords)),
        )
        letters = sorted(l.created_at for l in material.letters)
        chasers = sorted(
            l.created_at for l in material.letters
            if any(k in (l.template_id or "").lower() for k in self.rules.chaser_keywords)
        )

        last_letter = letters[-1] if letters else None
        last_reply = replies[-1] if replies else None

        silence = 0
        if last_letter is not None and (last_reply is None or last_reply < last_letter):
            silence = max(0, (now - last_letter).days)

        gaps = []
        for sent in letters:
            following = [r for r in replies if r >= sent]
            if following:
                gaps.append((following[0] - sent).days)
        average = round(sum(gaps) / len(gaps), 1) if gaps else None

        logger.debug(
            f"Opponent activity for {material.case_id}: silence={silence}d, "
            f"replies={len(replies)}, letters={len(letters)}, avg={average}"
        )
        return OpponentActivity(
            silence_days=silence,
            last_letter_sent_at=last_letter,
            last_chase_sent_at=chasers[-1] if chasers else None,
            last_opponent_reply_at=last_reply,
            average_response_days=average,
        )


@dataclass
class Collaborators:
    """Bundle of collaborators handed to the engine"""
    opponent_activity: Optional[OpponentActivitySource] = None
    contradictions: Optional[ContradictionFinder] = None
    checklist: Optional[EvidenceChecklistProvider] = None
    case_store: Optional[CaseDataStore] = None

    @classmethod
    def defaults(cls) -> "Collaborators":
        return cls(
            opponent_activity=InferredOpponentActivity(),
            checklist=YamlChecklistProvider(),
        )
