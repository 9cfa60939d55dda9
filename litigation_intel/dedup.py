"""
Deduplication Utils
===================

Remove duplicate insights, missing-evidence rows, checklist items and
contradictions before they reach the caller.

Keys are normalised (trimmed, lowercased, whitespace collapsed) and the first
occurrence wins, so dedupe(dedupe(x)) == dedupe(x) and first-seen order is kept.
"""

import logging
import re
from difflib import SequenceMatcher
from typing import Callable, Hashable, Iterable, List, Optional, TypeVar

from .schemas import Contradiction, EvidenceRequirement, MissingEvidenceItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")


def normalize_key(value: object) -> str:
    """Trim, lowercase and collapse internal whitespace"""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value).strip().lower())


def dedupe(items: Iterable[T], key: Optional[Callable[[T], Hashable]] = None) -> List[T]:
    """
    Keep the first item for each key.

    String keys are normalised; other hashable keys are compared as-is.
    Without a key function the item itself is the key.
    """
    seen = set()
    result: List[T] = []
    for item in items:
        k = key(item) if key else item
        if isinstance(k, str):
            k = normalize_key(k)
        if k in seen:
            continue
        seen.add(k)
        result.append(item)
    return result


def dedupe_strings(values: Iterable[str]) -> List[str]:
    return dedupe(values)


def dedupe_missing_evidence(items: Iterable[MissingEvidenceItem]) -> List[MissingEvidenceItem]:
    """One row per evidence label"""
    return dedupe(items, key=lambda m: m.label)


def dedupe_checklist(items: Iterable[EvidenceRequirement]) -> List[EvidenceRequirement]:
    """One checklist requirement per name"""
    return dedupe(items, key=lambda r: r.label)


def calculate_similarity(text1: str, text2: str) -> float:
    """
    Calculate similarity between two texts (0-1)
    """
    if not text1 or not text2:
        return 0.0

    text1 = normalize_key(text1)
    text2 = normalize_key(text2)

    if text1 == text2:
        return 1.0

    return SequenceMatcher(None, text1, text2).ratio()


def dedupe_contradictions(
    contradictions: Iterable[Contradiction],
    similarity_threshold: float = 0.80
) -> List[Contradiction]:
    """
    Remove duplicate/similar contradictions
    """
    unique: List[Contradiction] = []
    removed = 0

    for contr in contradictions:
        if any(calculate_similarity(contr.description, existing.description) >= similarity_threshold
               for existing in unique):
            removed += 1
            continue
        unique.append(contr)

    if removed:
        logger.info(f"Dedup contradictions: {len(unique)} unique (removed {removed})")
    return unique
