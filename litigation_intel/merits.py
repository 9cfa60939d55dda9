"""
Substantive Merits Scorer - clinical negligence case strength
=============================================================

Five independent sub-scores:
1. GUIDELINE_BREACHES - guideline keywords, or breach language near a
   guideline/protocol/standard/policy mention (scored once)
2. DELAY_CAUSATION - delay phrases with causation/harm language nearby
3. EXPERT_CONFIRMATION - expert references with confirming language nearby;
   a bare "avoidable" scores lower when no expert confirmation exists
4. SERIOUS_HARM - fixed point table, overlapping terms corrected
5. PSYCHOLOGICAL_INJURY - flat score if any psychiatric/psychological term

Text is assembled in priority order: raw extracted text, structured fields
(summary, key issues, timeline, expert findings), case chronology and bundle
summaries, then document names and timeline descriptions.

The total is the plain sum (not clamped); it only feeds threshold checks.
"""

import logging
from typing import List, Optional
from dataclasses import dataclass, field

from .errors import RuleTableError
from .rules import RuleTable, get_rule_table
from .schemas import CaseMaterial, Document

logger = logging.getLogger(__name__)

MAX_DETAILS = 5
MAX_HARM_DETAILS = 10


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class MeritSignal:
    """One merits sub-score"""
    detected: bool = False
    score: float = 0.0
    details: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.details)


@dataclass
class SubstantiveMerits:
    """Merits result"""
    guideline_breaches: MeritSignal = field(default_factory=MeritSignal)
    delay_causation: MeritSignal = field(default_factory=MeritSignal)
    expert_confirmation: MeritSignal = field(default_factory=MeritSignal)
    serious_harm: MeritSignal = field(default_factory=MeritSignal)
    psychological_injury: MeritSignal = field(default_factory=MeritSignal)
    error: Optional[str] = None

    @property
    def total_score(self) -> float:
        return (
            self.guideline_breaches.score
            + self.delay_causation.score
            + self.expert_confirmation.score
            + self.serious_harm.score
            + self.psychological_injury.score
        )

    @property
    def signals(self) -> List[MeritSignal]:
        return [
            self.guideline_breaches,
            self.delay_causation,
            self.expert_confirmation,
            self.serious_harm,
            self.psychological_injury,
        ]


def _flatten(value) -> List[str]:
    """Strings from nested lists/dicts (timeline entries may be objects)"""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        out = []
        for v in value.values():
            out.extend(_flatten(v))
        return out
    if isinstance(value, (list, tuple)):
        out = []
        for v in value:
            out.extend(_flatten(v))
        return out
    return [str(value)]


def _structured_text(doc: Document) -> List[str]:
    facts = doc.extracted
    if facts is None:
        return []
    parts = _flatten(facts.summary) + _flatten(facts.key_issues)
    parts += _flatten(facts.timeline) + _flatten(facts.expert_findings)
    parts += _flatten(facts.model_extra or {})
    return parts


def assemble_case_text(material: CaseMaterial) -> str:
    """Concatenated lowercase text in priority order"""
    parts: List[str] = []
    parts.extend(d.text for d in material.documents if d.text)
    for doc in material.documents:
        parts.extend(_structured_text(doc))
    parts.extend(material.chronology)
    parts.extend(material.bundle_summaries)
    parts.extend(d.name for d in material.documents)
    parts.extend(e.description for e in material.timeline)
    return "\n".join(p for p in parts if p).lower()


# =============================================================================
# Scorer
# =============================================================================

class SubstantiveMeritsScorer:
    """Keyword/context merits scorer driven by the rule table"""

    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules = rules or get_rule_table()

    def score(self, material: CaseMaterial) -> SubstantiveMerits:
        return self.score_text(assemble_case_text(material))

    def score_text(self, text: str) -> SubstantiveMerits:
        text = text.lower()
        result = SubstantiveMerits(
            guideline_breaches=self._score_guidelines(text),
            delay_causation=self._score_delay(text),
            expert_confirmation=self._score_expert(text),
            serious_harm=self._score_harm(text),
            psychological_injury=self._score_psychological(text),
        )
        logger.debug(
            f"Merits: guideline={result.guideline_breaches.score} delay={result.delay_causation.score} "
            f"expert={result.expert_confirmation.score} harm={result.serious_harm.score} "
            f"psych={result.psychological_injury.score} total={result.total_score}"
        )
        return result

    def _score_guidelines(self, text: str) -> MeritSignal:
        keywords = self.rules.merits_lexicon("guideline")
        indicators = self.rules.merits_lexicon("breach_indicators")

        details = [t.pattern for t in keywords.hits(text)]
        score = 0.0
        for term in indicators.terms:
            position = term.find(text)
            if position is None:
                continue
            if term.confirming_term(text, position):
                score += term.weight
                details.append(f"Breach indicated: {term.pattern}")
                break  # once per case

        if details and score == 0:
            score = keywords.weight
        return MeritSignal(detected=bool(details) or score > 0, score=score, details=details[:MAX_DETAILS])

    def _score_delay(self, text: str) -> MeritSignal:
        lexicon = self.rules.merits_lexicon("delay")
        details = []
        score = 0.0
        for term in lexicon.terms:
            position = term.find(text)
            if position is None:
                continue
            details.append(term.pattern)
            if term.confirming_term(text, position):
                score += term.weight
        details = list(dict.fromkeys(details))
        return MeritSignal(detected=bool(details), score=score, details=details[:MAX_DETAILS])

    def _score_expert(self, text: str) -> MeritSignal:
        lexicon = self.rules.merits_lexicon("expert")
        details = []
        score = 0.0
        for term in lexicon.terms:
            position = term.find(text)
            if position is None:
                continue
            confirming = term.confirming_term(text, position)
            if confirming:
                score += term.weight
                details.append(f"{term.pattern}: {confirming}")

        if score == 0:
            bare = self.rules.merits_lexicon("bare_avoidable")
            hits = bare.hits(text)
            if hits:
                score = bare.weight
                details.append(f"{hits[0].pattern} (no expert context)")
        return MeritSignal(detected=score > 0, score=score, details=details[:MAX_DETAILS])

    def _score_harm(self, text: str) -> MeritSignal:
        lexicon = self.rules.merits_lexicon("harm")
        hits = lexicon.hits(text)
        indicators = list(dict.fromkeys(t.pattern for t in hits))
        score = sum(t.weight for t in hits)

        for overlap in self.rules.harm_overlaps:
            if all(term in indicators for term in overlap.terms):
                score += overlap.correction
        score = max(0.0, score)
        return MeritSignal(detected=bool(indicators), score=score, details=indicators[:MAX_HARM_DETAILS])

    def _score_psychological(self, text: str) -> MeritSignal:
        lexicon = self.rules.merits_lexicon("psychological")
        hits = lexicon.hits(text)
        if not hits:
            return MeritSignal()
        return MeritSignal(detected=True, score=lexicon.weight, details=[hits[0].pattern])


# =============================================================================
# Singleton
# =============================================================================

_scorer: Optional[SubstantiveMeritsScorer] = None


def get_merits_scorer() -> SubstantiveMeritsScorer:
    """Get singleton merits scorer"""
    global _scorer
    table = get_rule_table()
    if _scorer is None or _scorer.rules is not table:
        _scorer = SubstantiveMeritsScorer(table)
    return _scorer


def score_substantive_merits(material: CaseMaterial) -> SubstantiveMerits:
    """
    Score merits, failing soft to zero scores.

    A failure is logged and recorded on the result's error field.
    """
    try:
        return get_merits_scorer().score(material)
    except RuleTableError:
        raise
    except Exception as e:
        logger.warning(f"Merits scoring failed for case {material.case_id}, using zero scores: {e}")
        return SubstantiveMerits(error=str(e))
