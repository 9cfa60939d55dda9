"""
Rule Tables - data-driven lexicons for role, merits and evidence checks
=======================================================================

Loads rules.yaml (or LITIGATION_RULES_PATH) once and validates it into typed
tables:

- Lexicon: named group of RuleTerms (pattern -> weight -> required context)
- Harm overlap corrections (e.g. "sepsis" + "septic" counted once)
- Evidence checklist packs per practice area, with a shared base pack
- Administrative labels and opponent reply/chaser keywords
- Practice-area viability signals and Awaab's Law term lists

Terms match case-insensitively from a word start and may carry a plain
inflection (s, es, d, ed, ing, ly), so "expert report" fires on "expert
reports" while "icu" does not fire inside "particulars" and "id" does not
fire inside "evidence".
"""

import re
import yaml
import logging
from functools import lru_cache
from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from .config import get_settings
from .errors import RuleTableError
from .schemas import EvidenceRequirement, PracticeArea

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "rules.yaml"
DEFAULT_WINDOW = (100, 200)
INFLECTIONS = r"(?:s|es|d|ed|ing|ly)?"


@lru_cache(maxsize=2048)
def compile_term(pattern: str) -> "re.Pattern[str]":
    """Case-insensitive matcher for a lexicon term, allowing a trailing inflection"""
    return re.compile(
        r"(?<![a-z0-9])" + re.escape(pattern.strip().lower()) + INFLECTIONS + r"(?![a-z0-9])"
    )


def term_in(text: str, pattern: str) -> bool:
    """True if pattern occurs in (lowercased) text"""
    return compile_term(pattern).search(text) is not None


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class RuleTerm:
    """Single lexicon entry"""
    pattern: str
    weight: float = 1.0
    context: Tuple[str, ...] = ()
    window_before: int = DEFAULT_WINDOW[0]
    window_after: int = DEFAULT_WINDOW[1]

    def find(self, text: str) -> Optional[int]:
        """Offset of the first match in text, or None"""
        match = compile_term(self.pattern).search(text)
        return match.start() if match else None

    def confirming_term(self, text: str, position: int) -> Optional[str]:
        """
        Context term found within the window around position.

        Terms without a context requirement are confirmed by themselves.
        """
        if not self.context:
            return self.pattern
        start = max(0, position - self.window_before)
        end = min(len(text), position + self.window_after)
        window = text[start:end]
        for term in self.context:
            if term_in(window, term):
                return term
        return None


@dataclass(frozen=True)
class Lexicon:
    """Named group of rule terms"""
    name: str
    terms: Tuple[RuleTerm, ...]
    weight: float = 1.0
    unless: Tuple[str, ...] = ()

    @property
    def patterns(self) -> List[str]:
        return [t.pattern for t in self.terms]

    def hits(self, text: str) -> List[RuleTerm]:
        """Terms present in text (each counted once)"""
        return [t for t in self.terms if t.find(text) is not None]

    def blocked(self, text: str) -> bool:
        """True if a negating term is present"""
        return any(term_in(text, t) for t in self.unless)


@dataclass(frozen=True)
class OverlapCorrection:
    terms: Tuple[str, ...]
    correction: float


@dataclass(frozen=True)
class ViabilityRule:
    """Signals expected in material for one practice area"""
    practice_area: PracticeArea
    min_signals: int
    signals: Tuple[str, ...]

    def hits(self, text: str) -> List[str]:
        return [s for s in self.signals if term_in(text, s)]


@dataclass(frozen=True)
class AwaabRules:
    """Term lists for Awaab's Law applicability and deadline events"""
    social_landlord: Tuple[str, ...] = ()
    hazards: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    complaint: Tuple[str, ...] = ()
    inspection: Tuple[str, ...] = ()
    health: Tuple[str, ...] = ()
    emergency: Tuple[str, ...] = ()
    health_aggravated: Tuple[str, ...] = ()
    investigation_events: Tuple[str, ...] = ()
    work_start_events: Tuple[str, ...] = ()


@dataclass
class RuleTable:
    """Validated rule tables"""
    version: int
    role_claimant: Lexicon
    role_defendant: Lexicon
    role_extracted: List[Lexicon]
    merits: Dict[str, Lexicon]
    harm_overlaps: List[OverlapCorrection]
    administrative_labels: List[str]
    reply_keywords: List[str]
    chaser_keywords: List[str]
    evidence_packs: Dict[str, List[EvidenceRequirement]] = field(default_factory=dict)
    viability: Dict[PracticeArea, ViabilityRule] = field(default_factory=dict)
    awaab: AwaabRules = field(default_factory=AwaabRules)
    source: Optional[Path] = None

    def checklist(self, practice_area: PracticeArea) -> List[EvidenceRequirement]:
        """Base pack followed by the practice-area pack"""
        base = self.evidence_packs.get("base", [])
        area = self.evidence_packs.get(practice_area.value, [])
        return list(base) + list(area)

    def merits_lexicon(self, name: str) -> Lexicon:
        try:
            return self.merits[name]
        except KeyError:
            raise RuleTableError(f"Merits lexicon '{name}' missing from rule table {self.source}")


# =============================================================================
# Parsing
# =============================================================================

def _parse_term(entry: Any, defaults: Dict[str, Any], where: str) -> RuleTerm:
    if isinstance(entry, str):
        entry = {"pattern": entry}
    if not isinstance(entry, dict) or not entry.get("pattern"):
        raise RuleTableError(f"{where}: term must be a string or a mapping with 'pattern' (got {entry!r})")

    window = entry.get("window", defaults.get("window", DEFAULT_WINDOW))
    try:
        before, after = int(window[0]), int(window[1])
    except (TypeError, ValueError, IndexError):
        raise RuleTableError(f"{where}: window must be [before, after] (got {window!r})")

    return RuleTerm(
        pattern=str(entry["pattern"]).lower(),
        weight=float(entry.get("weight", defaults.get("weight", 1))),
        context=tuple(str(c).lower() for c in entry.get("context", defaults.get("context", ()))),
        window_before=before,
        window_after=after,
    )


def _parse_lexicon(name: str, section: Any) -> Lexicon:
    if not isinstance(section, dict) or not isinstance(section.get("terms"), list):
        raise RuleTableError(f"Lexicon '{name}' must be a mapping with a 'terms' list")

    defaults = {k: section[k] for k in ("weight", "context", "window") if k in section}
    terms = tuple(_parse_term(t, defaults, f"lexicon '{name}'") for t in section["terms"])
    return Lexicon(
        name=name,
        terms=terms,
        weight=float(section.get("weight", 1)),
        unless=tuple(str(u).lower() for u in section.get("unless", ())),
    )


def _parse_evidence_packs(raw: Any) -> Dict[str, List[EvidenceRequirement]]:
    if not isinstance(raw, dict):
        raise RuleTableError("evidence_packs must be a mapping of practice area -> requirements")

    known = {"base"} | {a.value for a in PracticeArea}
    packs = {}
    for area, items in raw.items():
        if area not in known:
            logger.warning(f"Ignoring evidence pack for unknown practice area '{area}'")
            continue
        try:
            packs[area] = [EvidenceRequirement(**item) for item in (items or [])]
        except (TypeError, ValidationError) as e:
            raise RuleTableError(f"Invalid evidence requirement in pack '{area}': {e}")
    return packs


def _terms(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise RuleTableError(f"{where} must be a list of terms (got {value!r})")
    return tuple(str(t).lower() for t in value)


def _parse_viability(raw: Any) -> Dict[PracticeArea, ViabilityRule]:
    if not isinstance(raw, dict):
        raise RuleTableError("viability must be a mapping of practice area -> {min_signals, signals}")

    rules = {}
    for area, section in raw.items():
        try:
            practice_area = PracticeArea(area)
        except ValueError:
            logger.warning(f"Ignoring viability rule for unknown practice area '{area}'")
            continue
        if not isinstance(section, dict):
            raise RuleTableError(f"viability.{area} must be a mapping")
        try:
            min_signals = int(section.get("min_signals", 1))
        except (TypeError, ValueError):
            raise RuleTableError(f"viability.{area}.min_signals must be an integer")
        rules[practice_area] = ViabilityRule(
            practice_area=practice_area,
            min_signals=min_signals,
            signals=_terms(section.get("signals"), f"viability.{area}.signals"),
        )
    return rules


def _parse_awaab(raw: Any) -> AwaabRules:
    if not isinstance(raw, dict):
        raise RuleTableError("awaab must be a mapping of term lists")

    hazards = raw.get("hazards") or {}
    if not isinstance(hazards, dict):
        raise RuleTableError("awaab.hazards must be a mapping of label -> terms")

    lists = {
        name: _terms(raw.get(name), f"awaab.{name}")
        for name in ("social_landlord", "complaint", "inspection", "health", "emergency",
                     "health_aggravated", "investigation_events", "work_start_events")
    }
    return AwaabRules(
        hazards={str(label): _terms(terms, f"awaab.hazards.{label}") for label, terms in hazards.items()},
        **lists,
    )


def parse_rule_table(data: Any, source: Optional[Path] = None) -> RuleTable:
    """Validate a loaded YAML document into a RuleTable"""
    if not isinstance(data, dict):
        raise RuleTableError(f"Rule table {source} is empty or not a mapping")

    role = data.get("role") or {}
    merits = data.get("merits") or {}
    if "claimant" not in role or "defendant" not in role:
        raise RuleTableError("Rule table needs role.claimant and role.defendant lexicons")

    extracted = []
    for i, group in enumerate(role.get("extracted") or []):
        extracted.append(_parse_lexicon(group.get("name", f"extracted_{i}"), group))

    merits_lexicons = {}
    overlaps = []
    for name, section in merits.items():
        merits_lexicons[name] = _parse_lexicon(name, section)
        for overlap in section.get("overlaps", []) or []:
            overlaps.append(OverlapCorrection(
                terms=tuple(str(t).lower() for t in overlap.get("terms", [])),
                correction=float(overlap.get("correction", 0)),
            ))

    opponent = data.get("opponent") or {}
    return RuleTable(
        version=int(data.get("version", 1)),
        role_claimant=_parse_lexicon("claimant", role["claimant"]),
        role_defendant=_parse_lexicon("defendant", role["defendant"]),
        role_extracted=extracted,
        merits=merits_lexicons,
        harm_overlaps=overlaps,
        administrative_labels=[str(l).lower() for l in data.get("administrative_labels", [])],
        reply_keywords=[str(k).lower() for k in opponent.get("reply_keywords", [])],
        chaser_keywords=[str(k).lower() for k in opponent.get("chaser_keywords", [])],
        evidence_packs=_parse_evidence_packs(data.get("evidence_packs") or {}),
        viability=_parse_viability(data.get("viability") or {}),
        awaab=_parse_awaab(data.get("awaab") or {}),
        source=source,
    )


# =============================================================================
# Loader
# =============================================================================

class RuleTableLoader:
    """Load and cache the rule table"""

    _table: Optional[RuleTable] = None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> RuleTable:
        """Load rule table, with caching (an explicit path bypasses the cache)"""
        if path is None and cls._table is not None:
            return cls._table

        configured = get_settings().rules_path
        target = Path(path or configured or DEFAULT_RULES_PATH)
        if not target.exists():
            raise RuleTableError(f"Rule table not found: {target}")

        try:
            with open(target, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleTableError(f"Rule table {target} is not valid YAML: {e}")

        table = parse_rule_table(data, source=target)
        logger.info(
            f"Loaded rule table v{table.version} from {target} "
            f"({len(table.merits)} merits lexicons, {len(table.evidence_packs)} evidence packs)"
        )
        if path is None:
            cls._table = table
        return table

    @classmethod
    def reset(cls) -> None:
        cls._table = None


def get_rule_table() -> RuleTable:
    """Get the cached rule table"""
    return RuleTableLoader.load()
