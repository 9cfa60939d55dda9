"""
Case Role Classifier - claimant vs defendant posture
====================================================

Scoring:
- Each claimant / defendant lexicon term present in document names, raw text
  or timeline descriptions adds its weight (1) once.
- Each document's structured extraction is scored against the weighted
  extracted-fact groups (claimant party terms 2, damages 1, breach assertions
  1 unless denial/dispute language is present).

The role is DEFENDANT only when the defendant score beats the claimant score
by more than the configured margin (2). Everything else resolves to CLAIMANT.

Failures never propagate: the result records assumed=True and the error, so
callers can tell an assumed claimant from a classified one.
"""

import json
import logging
from typing import List, Optional
from dataclasses import dataclass, field

from .config import Settings, get_settings
from .errors import RuleTableError
from .rules import RuleTable, get_rule_table
from .schemas import CaseMaterial, CaseRole

logger = logging.getLogger(__name__)


@dataclass
class RoleDetectionResult:
    """Role classification with the evidence behind it"""
    role: CaseRole
    claimant_score: float = 0.0
    defendant_score: float = 0.0
    assumed: bool = False
    error: Optional[str] = None
    claimant_hits: List[str] = field(default_factory=list)
    defendant_hits: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def assumed_claimant(cls, error: Optional[str] = None) -> "RoleDetectionResult":
        return cls(role=CaseRole.CLAIMANT, assumed=True, error=error)


class CaseRoleClassifier:
    """Lexicon-driven role classifier"""

    def __init__(self, rules: Optional[RuleTable] = None, settings: Optional[Settings] = None):
        self.rules = rules or get_rule_table()
        self.settings = settings or get_settings()

    def classify(self, material: CaseMaterial) -> RoleDetectionResult:
        """Classify from case material (an explicit role on the material wins)"""
        if material.role is not None:
            return RoleDetectionResult(role=material.role)

        plain_text = self._plain_text(material)
        claimant_hits = [t.pattern for t in self.rules.role_claimant.hits(plain_text)]
        defendant_hits = [t.pattern for t in self.rules.role_defendant.hits(plain_text)]
        claimant_score = sum(
            t.weight for t in self.rules.role_claimant.terms if t.pattern in claimant_hits
        )
        defendant_score = sum(
            t.weight for t in self.rules.role_defendant.terms if t.pattern in defendant_hits
        )

        for doc in material.documents:
            if doc.extracted is None:
                continue
            extracted_text = json.dumps(doc.extracted.model_dump(mode="json"), ensure_ascii=False).lower()
            for group in self.rules.role_extracted:
                if not group.hits(extracted_text) or group.blocked(extracted_text):
                    continue
                claimant_score += group.weight
                claimant_hits.append(f"{doc.name}: {group.name}")

        return self.decide(claimant_score, defendant_score, claimant_hits, defendant_hits)

    def decide(
        self,
        claimant_score: float,
        defendant_score: float,
        claimant_hits: Optional[List[str]] = None,
        defendant_hits: Optional[List[str]] = None,
    ) -> RoleDetectionResult:
        """Apply the claimant-default margin rule to a pair of scores"""
        if defendant_score > claimant_score + self.settings.role_margin:
            role = CaseRole.DEFENDANT
        else:
            role = CaseRole.CLAIMANT

        logger.info(
            f"Role: {role.value} (claimant={claimant_score}, defendant={defendant_score}, "
            f"margin={self.settings.role_margin})"
        )
        return RoleDetectionResult(
            role=role,
            claimant_score=claimant_score,
            defendant_score=defendant_score,
            claimant_hits=claimant_hits or [],
            defendant_hits=defendant_hits or [],
        )

    @staticmethod
    def _plain_text(material: CaseMaterial) -> str:
        parts = [d.name for d in material.documents]
        parts.extend(d.text for d in material.documents if d.text)
        parts.extend(e.description for e in material.timeline)
        return "\n".join(parts).lower()


def classify_case_role(material: CaseMaterial, settings: Optional[Settings] = None) -> RoleDetectionResult:
    """Classify, failing soft to an assumed claimant"""
    try:
        return CaseRoleClassifier(settings=settings).classify(material)
    except RuleTableError:
        raise
    except Exception as e:
        logger.warning(f"Role detection failed for case {material.case_id}, assuming claimant: {e}")
        return RoleDetectionResult.assumed_claimant(error=str(e))


async def detect_case_role(store, case_id: str, settings: Optional[Settings] = None) -> RoleDetectionResult:
    """
    Load case material from a CaseDataStore and classify it.

    A failed read yields an assumed-claimant result rather than an exception.
    """
    try:
        material = await store.load_case(case_id)
    except Exception as e:
        logger.warning(f"Role detection could not load case {case_id}, assuming claimant: {e}")
        return RoleDetectionResult.assumed_claimant(error=str(e))
    return classify_case_role(material, settings=settings)
