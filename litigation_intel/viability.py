"""
Practice-Area Viability - does the material match the selected area?
====================================================================

Each practice area has a signal list and a minimum signal count in the rule
table (viability). The case text is searched for the selected area's signals:

| Result                    | Rule                                          |
|---------------------------|-----------------------------------------------|
| viable                    | hits >= min_signals                           |
| score                     | min(1, hits / max(min_signals, 1))            |
| suggested_practice_area   | not viable, another area with >= 3 hits (the  |
|                           | one with most hits, rule-table order on ties) |

An area with no rule is treated as viable with score 0.5.
"""

import logging
from typing import List, Optional, Tuple

from .config import Settings, get_settings
from .merits import assemble_case_text
from .rules import RuleTable, get_rule_table
from .schemas import CaseMaterial, PracticeArea, PracticeAreaViability

logger = logging.getLogger(__name__)

MISSING_SIGNALS_SHOWN = 5


def _label(area: PracticeArea) -> str:
    return area.value.replace("_", " ")


class PracticeAreaViabilityAssessor:
    """Signal-count check of case material against its practice area"""

    def __init__(self, rules: Optional[RuleTable] = None, settings: Optional[Settings] = None):
        self.rules = rules or get_rule_table()
        self.settings = settings or get_settings()

    def assess(self, material: CaseMaterial) -> PracticeAreaViability:
        return self.assess_text(assemble_case_text(material), material.practice_area)

    def assess_text(self, text: str, practice_area: PracticeArea) -> PracticeAreaViability:
        text = (text or "").lower()
        rule = self.rules.viability.get(practice_area)
        if rule is None:
            return PracticeAreaViability(
                practice_area=practice_area,
                viable=True,
                score=0.5,
                reasons=[f"No viability rules for practice area '{practice_area.value}'"],
            )

        found = rule.hits(text)
        viable = len(found) >= rule.min_signals
        score = min(1.0, len(found) / max(rule.min_signals, 1))

        reasons: List[str] = []
        suggested = None
        if not viable:
            reasons.append(
                f"Found {len(found)} signal(s) for {_label(practice_area)} "
                f"(minimum required: {rule.min_signals})"
            )
            missing = [s for s in rule.signals if s not in found][:MISSING_SIGNALS_SHOWN]
            if missing:
                reasons.append(f"Missing indicators: {', '.join(missing)}")

            alternative = self._strongest_alternative(text, practice_area)
            if alternative is not None:
                suggested, hits = alternative
                reasons.append(
                    f"Strong signals detected for alternative practice area: "
                    f"{_label(suggested)} ({hits} indicators)"
                )
            logger.info(
                f"Material does not fit {practice_area.value} "
                f"({len(found)}/{rule.min_signals} signals, suggested={suggested.value if suggested else None})"
            )

        return PracticeAreaViability(
            practice_area=practice_area,
            viable=viable,
            score=round(score, 2),
            signals_found=found,
            reasons=reasons,
            suggested_practice_area=suggested,
        )

    def _strongest_alternative(self, text: str, selected: PracticeArea) -> Optional[Tuple[PracticeArea, int]]:
        best = None
        for area, rule in self.rules.viability.items():
            if area == selected:
                continue
            hits = len(rule.hits(text))
            if hits < self.settings.viability_alternative_min_hits:
                continue
            if best is None or hits > best[1]:
                best = (area, hits)
        return best


def assess_practice_area_viability(
    material: CaseMaterial,
    settings: Optional[Settings] = None,
) -> PracticeAreaViability:
    """Convenience function to assess practice-area viability"""
    return PracticeAreaViabilityAssessor(settings=settings).assess(material)
