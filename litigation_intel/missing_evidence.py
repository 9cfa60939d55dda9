"""
Missing Evidence - checklist presence check shared by the detectors
===================================================================

Matches each evidence requirement's detection patterns against document
names, types and structured extraction. Raw document text is not searched,
so a letter that merely mentions a record does not count as that record.
Requirements with no matching document become MissingEvidenceItems, sorted
by priority (critical > high > medium > low) and then category (liability,
causation, quantum, procedure, housing). The sort is stable.
"""

import json
import logging
from typing import List, Iterable, Optional

from .rules import term_in, get_rule_table
from .schemas import (
    Document,
    EvidenceCategory,
    EvidenceRequirement,
    MissingEvidenceItem,
    PracticeArea,
    SEVERITY_ORDER,
    EVIDENCE_CATEGORY_ORDER,
    normalize_practice_area,
)

logger = logging.getLogger(__name__)

__all__ = [
    "find_missing_evidence",
    "is_administrative",
    "normalize_practice_area",
    "sort_missing_evidence",
]


SUGGESTED_ACTIONS = {
    EvidenceCategory.LIABILITY: "Request {label} from client or opponent",
    EvidenceCategory.CAUSATION: "Obtain {label} to establish causation link",
    EvidenceCategory.QUANTUM: "Gather {label} to support quantum claim",
}


def is_administrative(label: str, admin_labels: Optional[Iterable[str]] = None) -> bool:
    """
    True for client-care paperwork (client ID, retainer, CFA, funding).

    These gaps are procedural housekeeping, not weaknesses in the case.
    """
    if admin_labels is None:
        admin_labels = get_rule_table().administrative_labels
    lower = label.lower()
    return any(term_in(lower, a) for a in admin_labels)


def _document_text(doc: Document) -> str:
    parts = [doc.name, doc.type or ""]
    if doc.extracted is not None:
        parts.append(json.dumps(doc.extracted.model_dump(mode="json"), ensure_ascii=False))
    return " ".join(parts).lower()


def _requirement_met(requirement: EvidenceRequirement, haystacks: List[str]) -> bool:
    for text in haystacks:
        for pattern in requirement.detect_patterns:
            if term_in(text, pattern):
                return True
    return False


def _suggested_action(requirement: EvidenceRequirement) -> str:
    template = SUGGESTED_ACTIONS.get(requirement.category, "Obtain {label}")
    return template.format(label=requirement.label.lower())


def sort_missing_evidence(items: List[MissingEvidenceItem]) -> List[MissingEvidenceItem]:
    """Priority first, then category order; ties keep input order"""
    return sorted(
        items,
        key=lambda m: (SEVERITY_ORDER.index(m.priority), EVIDENCE_CATEGORY_ORDER.index(m.category)),
    )


def find_missing_evidence(
    case_id: str,
    practice_area,
    documents: List[Document],
    checklist: Optional[List[EvidenceRequirement]] = None,
) -> List[MissingEvidenceItem]:
    """
    Find checklist requirements with no supporting document.

    Args:
        case_id: Case identifier
        practice_area: PracticeArea or a loose label ("clin neg", "PI")
        documents: Case documents
        checklist: Requirements to check (default: rule-table pack for the area)

    Returns:
        Sorted list of missing items
    """
    area: PracticeArea = normalize_practice_area(practice_area)
    table = get_rule_table()
    if checklist is None:
        checklist = table.checklist(area)

    haystacks = [_document_text(d) for d in documents]
    missing = []
    for req in checklist:
        if _requirement_met(req, haystacks):
            continue
        missing.append(MissingEvidenceItem(
            id=f"missing-{case_id}-{req.id}",
            case_id=case_id,
            requirement_id=req.id,
            label=req.label,
            category=req.category,
            reason=req.description,
            priority=req.priority,
            suggested_action=_suggested_action(req),
            administrative=is_administrative(req.label, table.administrative_labels),
        ))

    logger.debug(f"Missing evidence for {case_id} ({area.value}): {len(missing)}/{len(checklist)} requirements unmet")
    return sort_missing_evidence(missing)
