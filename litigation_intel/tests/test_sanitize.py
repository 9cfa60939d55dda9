"""
Tests for Role Language Sanitizer

Tests:
- sanitize_text rewrites defendant-only phrasing
- sanitize_for_role walks nested trees and models
- Non-claimant roles are untouched
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.sanitize import (
    DEFENDANT_ONLY_PHRASES,
    sanitize_for_role,
    sanitize_text,
)
from litigation_intel.schemas import (
    CaseRole,
    Confidence,
    RouteId,
    Severity,
    StrategyPath,
)


class TestSanitizeText:
    """Tests for sanitize_text"""

    @pytest.mark.parametrize("text,expected", [
        ("Make a Part 36 offer now", "Make a settlement offer now"),
        ("We will strike out your defence", "We will seek liability admission"),
        ("We will strike-out your defence", "We will seek liability admission"),
        ("They can't prove liability.", "liability is well-founded."),
        ("they cannot prove liability", "liability is well-founded"),
        ("Resist summary judgment/strike out your defence", "pursue directions and disclosure"),
        ("Justify a low Part 36 offer", "use as settlement leverage"),
        ("Challenge liability at trial", "litigate to liability judgment"),
    ])
    def test_replacements(self, text, expected):
        """Each rule produces claimant wording"""
        assert sanitize_text(text) == expected

    def test_neutral_text_unchanged(self):
        """Text without defendant phrasing is returned as-is"""
        text = "Request the disclosure list required under CPR 31.10."
        assert sanitize_text(text) == text

    @pytest.mark.parametrize("text", [
        "Make a Part 36 offer and strike out your defence",
        "They can't prove liability, so challenge liability at trial",
        "Justify a low Part 36 offer to resist summary judgment",
    ])
    def test_idempotent(self, text):
        """A second pass changes nothing"""
        once = sanitize_text(text)
        assert sanitize_text(once) == once


class TestSanitizeForRole:
    """Tests for sanitize_for_role"""

    def path(self):
        return StrategyPath(
            id="strategy-c1-d",
            case_id="c1",
            route=RouteId.D,
            title="Route D",
            approach="Make a Part 36 offer; they can't prove liability",
            steps=["Make a Part 36 offer or settlement proposal"],
            timeframe="1-2 months",
            estimated_cost="Low",
            success_probability=Confidence.MEDIUM,
        )

    def test_non_claimant_returns_same_object(self):
        """Defendants keep their tactical wording"""
        tree = {"text": "Make a Part 36 offer"}
        assert sanitize_for_role(tree, CaseRole.DEFENDANT) is tree

    def test_nested_containers(self):
        """Dicts, lists and tuples are walked; enums and numbers kept"""
        tree = {
            "a": ["Part 36 offer", ("strike out your defence",)],
            "b": Severity.HIGH,
            "c": 5,
        }
        assert sanitize_for_role(tree, CaseRole.CLAIMANT) == {
            "a": ["settlement offer", ("seek liability admission",)],
            "b": Severity.HIGH,
            "c": 5,
        }

    def test_pydantic_model(self):
        """Models are copied with every string field rewritten"""
        original = self.path()
        clean = sanitize_for_role(original, CaseRole.CLAIMANT)
        assert clean.steps == ["Make a settlement offer or settlement proposal"]
        assert clean.approach == "Make a settlement offer; liability is well-founded"
        assert clean.route == RouteId.D
        assert original.steps == ["Make a Part 36 offer or settlement proposal"]

    def test_no_defendant_phrases_survive(self):
        """Serialised claimant output carries none of the defendant-only phrases"""
        dumped = sanitize_for_role({"paths": [self.path()]}, CaseRole.CLAIMANT)["paths"][0].model_dump_json().lower()
        for phrase in DEFENDANT_ONLY_PHRASES:
            assert phrase not in dumped

