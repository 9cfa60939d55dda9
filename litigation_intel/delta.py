"""
Analysis Delta - "what changed" between two snapshots
=====================================================

Compares a previous and a current AnalysisSnapshot:
- risk rating (momentum) change
- key issues, keyed by type + label
- missing evidence, keyed by area + label

Each non-empty difference adds one human-readable note. No previous snapshot
means this is the first analysis and only that note is returned.
"""

import logging
from typing import Dict, List, Optional

from .dedup import normalize_key
from .schemas import AnalysisDelta, AnalysisSnapshot, DeltaItem, MomentumChange

logger = logging.getLogger(__name__)

FIRST_ANALYSIS_NOTE = "This is the first full analysis for this case."

MOMENTUM_LABELS = {
    "WEAK": "WEAK",
    "BALANCED": "BALANCED",
    "STRONG_PENDING": "STRONG (Expert Pending)",
    "STRONG": "STRONG",
}


def format_momentum_label(rating: Optional[str]) -> str:
    if not rating:
        return "UNKNOWN"
    return MOMENTUM_LABELS.get(rating.upper(), rating)


def _issue_map(snapshot: AnalysisSnapshot) -> Dict[str, DeltaItem]:
    items: Dict[str, DeltaItem] = {}
    for issue in snapshot.key_issues:
        kind = issue.type or "unknown"
        key = f"{normalize_key(kind)}:{normalize_key(issue.label)}"
        items.setdefault(key, DeltaItem(type=kind, label=issue.label, severity=issue.severity))
    return items


def _missing_map(snapshot: AnalysisSnapshot) -> Dict[str, DeltaItem]:
    items: Dict[str, DeltaItem] = {}
    for row in snapshot.missing_evidence:
        area = row.area or "other"
        key = f"{normalize_key(area)}:{normalize_key(row.label)}"
        items.setdefault(key, DeltaItem(type=area, label=row.label, severity=row.priority))
    return items


def _added(before: Dict[str, DeltaItem], after: Dict[str, DeltaItem]) -> List[DeltaItem]:
    return [item for key, item in after.items() if key not in before]


def _labels(items: List[DeltaItem]) -> str:
    return "; ".join(i.label for i in items)


def compute_analysis_delta(
    previous: Optional[AnalysisSnapshot],
    current: AnalysisSnapshot,
) -> AnalysisDelta:
    """
    Diff two snapshots of the same case.

    Args:
        previous: Earlier snapshot, or None for the first analysis
        current: Snapshot just produced

    Returns:
        AnalysisDelta with added/removed items and one note per change
    """
    delta = AnalysisDelta()

    if previous is None:
        delta.notes.append(FIRST_ANALYSIS_NOTE)
        return delta

    before_rating = previous.risk_rating or None
    after_rating = current.risk_rating or None
    if normalize_key(before_rating) != normalize_key(after_rating):
        delta.momentum_changed = MomentumChange(previous=before_rating, current=after_rating)
        delta.notes.append(
            f"Momentum changed from {format_momentum_label(before_rating)} to {format_momentum_label(after_rating)}"
        )

    before_issues, after_issues = _issue_map(previous), _issue_map(current)
    delta.new_issues = _added(before_issues, after_issues)
    delta.resolved_issues = _added(after_issues, before_issues)
    if delta.new_issues:
        delta.notes.append(f"New issues identified: {_labels(delta.new_issues)}")
    if delta.resolved_issues:
        delta.notes.append(f"Issues resolved: {_labels(delta.resolved_issues)}")

    before_missing, after_missing = _missing_map(previous), _missing_map(current)
    delta.new_missing_evidence = _added(before_missing, after_missing)
    delta.resolved_missing_evidence = _added(after_missing, before_missing)
    if delta.new_missing_evidence:
        delta.notes.append(f"New missing evidence identified: {_labels(delta.new_missing_evidence)}")
    if delta.resolved_missing_evidence:
        delta.notes.append(f"Missing evidence resolved: {_labels(delta.resolved_missing_evidence)}")

    logger.debug(f"Delta: {len(delta.notes)} change notes")
    return delta
