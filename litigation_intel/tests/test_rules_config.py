"""
Tests for Rule Tables and Settings
==================================

Tests:
1. Bundled rule table loads and validates (including viability and Awaab's Law tables)
2. Word-boundary term matching
3. Broken rule tables raise RuleTableError
4. Settings defaults, env overrides and threshold validation
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.config import Settings
from litigation_intel.errors import RuleTableError
from litigation_intel.rules import RuleTableLoader, get_rule_table, parse_rule_table, term_in
from litigation_intel.schemas import PracticeArea


# =============================================================================
# Rule table
# =============================================================================

class TestRuleTable:
    """Bundled rules.yaml"""

    def test_loads_bundled_table(self):
        table = get_rule_table()
        assert table.version == 1
        assert table.role_claimant.terms
        assert table.role_defendant.terms
        assert {"guideline", "delay", "expert", "harm", "psychological"} <= set(table.merits)

    def test_every_practice_area_has_a_pack(self):
        table = get_rule_table()
        for area in PracticeArea:
            assert area.value in table.evidence_packs

    def test_checklist_starts_with_base_pack(self):
        checklist = get_rule_table().checklist(PracticeArea.HOUSING_DISREPAIR)
        labels = [r.label for r in checklist]
        assert labels[0] == "Client Identification"
        assert "Tenancy Agreement / AST" in labels

    def test_harm_overlap_loaded(self):
        overlaps = get_rule_table().harm_overlaps
        assert any(set(o.terms) == {"sepsis", "septic"} and o.correction == -10 for o in overlaps)

    def test_viability_rules_loaded(self):
        viability = get_rule_table().viability
        assert set(viability) == set(PracticeArea)
        assert viability[PracticeArea.OTHER_LITIGATION].min_signals == 1
        assert "tenancy agreement" in viability[PracticeArea.HOUSING_DISREPAIR].signals

    def test_awaab_rules_loaded(self):
        awaab = get_rule_table().awaab
        assert "housing association" in awaab.social_landlord
        assert list(awaab.hazards)[0] == "Mould detected"
        assert "contractor" in awaab.work_start_events

    def test_table_is_cached(self):
        assert get_rule_table() is get_rule_table()


class TestTermMatching:
    """Word-start matching with plain inflections"""

    def test_matches_whole_term(self):
        assert term_in("admitted to icu on day two", "icu")

    def test_no_match_inside_word(self):
        assert not term_in("particulars of claim", "icu")
        assert not term_in("evidence bundle", "id")

    def test_multi_word_term(self):
        assert term_in("the nice guideline was ignored", "nice guideline")

    def test_plural_and_inflected_forms(self):
        assert term_in("the expert reports were served", "expert report")
        assert term_in("patient developed infections", "infection")
        assert term_in("tenant reported damp", "report")
        assert term_in("acted negligently", "negligent")

    def test_other_word_forms_do_not_match(self):
        assert not term_in("the trust's negligence", "negligent")
        assert not term_in("identity documents", "id")


class TestBrokenTables:
    """Configuration errors propagate as RuleTableError"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleTableError):
            RuleTableLoader.load(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("role: [unclosed", encoding="utf-8")
        with pytest.raises(RuleTableError):
            RuleTableLoader.load(path)

    def test_missing_role_lexicons(self):
        with pytest.raises(RuleTableError):
            parse_rule_table({"version": 1, "merits": {}})

    def test_invalid_term(self):
        data = {"role": {"claimant": {"terms": [{"weight": 1}]}, "defendant": {"terms": ["deny"]}}}
        with pytest.raises(RuleTableError):
            parse_rule_table(data)

    def test_invalid_requirement(self):
        data = {
            "role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}},
            "evidence_packs": {"base": [{"id": "x", "label": "X", "category": "nowhere", "priority": "high"}]},
        }
        with pytest.raises(RuleTableError):
            parse_rule_table(data)

    def test_unknown_pack_ignored(self):
        data = {
            "role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}},
            "evidence_packs": {"maritime": []},
        }
        table = parse_rule_table(data)
        assert "maritime" not in table.evidence_packs

    def test_missing_merits_lexicon(self):
        data = {"role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}}}
        table = parse_rule_table(data)
        with pytest.raises(RuleTableError):
            table.merits_lexicon("guideline")

    def test_invalid_viability_min_signals(self):
        data = {
            "role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}},
            "viability": {"family": {"min_signals": "several", "signals": ["cafcass"]}},
        }
        with pytest.raises(RuleTableError):
            parse_rule_table(data)

    def test_unknown_viability_area_ignored(self):
        data = {
            "role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}},
            "viability": {"maritime": {"min_signals": 2, "signals": ["vessel"]}},
        }
        assert parse_rule_table(data).viability == {}

    def test_awaab_hazards_must_be_mapping(self):
        data = {
            "role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}},
            "awaab": {"hazards": ["mould"]},
        }
        with pytest.raises(RuleTableError):
            parse_rule_table(data)

    def test_optional_sections_default_empty(self):
        table = parse_rule_table({"role": {"claimant": {"terms": ["claim"]}, "defendant": {"terms": ["deny"]}}})
        assert table.viability == {}
        assert table.awaab.social_landlord == ()

    def test_explicit_path_does_not_replace_cache(self, tmp_path):
        cached = get_rule_table()
        path = tmp_path / "rules.yaml"
        path.write_text(
            "version: 2\nrole:\n  claimant: {terms: [claim]}\n  defendant: {terms: [deny]}\n",
            encoding="utf-8",
        )
        custom = RuleTableLoader.load(path)
        assert custom.version == 2
        assert get_rule_table() is cached


# =============================================================================
# Settings
# =============================================================================

class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.role_margin == 2
        assert settings.silence_escalation_days == 21
        assert settings.silence_critical_days == 42
        assert settings.merits_override_threshold == 50

    def test_defaults_are_consistent(self):
        assert Settings().validate_thresholds() == []

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LITIGATION_ROLE_MARGIN", "5")
        assert Settings().role_margin == 5

    def test_inconsistent_silence_thresholds(self):
        warnings = Settings(silence_notice_days=30).validate_thresholds()
        assert len(warnings) == 1
        assert "Silence thresholds" in warnings[0]

    def test_inconsistent_disclosure_thresholds(self):
        warnings = Settings(disclosure_critical_days=10).validate_thresholds()
        assert any("DISCLOSURE" in w for w in warnings)

    def test_awaab_deadlines_must_be_positive(self):
        warnings = Settings(awaab_work_start_days=0).validate_thresholds()
        assert warnings == ["Awaab's Law deadlines must be positive day counts"]
