"""
Tests for Case Role Classification
==================================

Tests:
1. Claimant-default margin rule
2. Lexicon scoring over names, text and extractions
3. Soft failure to an assumed claimant
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel import role_detection
from litigation_intel.collaborators import InMemoryCaseStore
from litigation_intel.config import Settings
from litigation_intel.role_detection import (
    CaseRoleClassifier,
    RoleDetectionResult,
    classify_case_role,
    detect_case_role,
)
from litigation_intel.schemas import CaseMaterial, CaseRole


CREATED = datetime(2025, 1, 10, tzinfo=timezone.utc)


@pytest.fixture
def classifier():
    return CaseRoleClassifier(settings=Settings())


def material_with(name, text=None, role=None, extracted=None):
    return CaseMaterial(
        case_id="c1",
        practice_area="clinical_negligence",
        role=role,
        documents=[{"id": "d1", "name": name, "created_at": CREATED, "text": text, "extracted": extracted}],
    )


class TestMarginRule:
    """Defendant only when it leads by more than the margin"""

    def test_clear_defendant_lead(self, classifier):
        assert classifier.decide(0, 3).role == CaseRole.DEFENDANT

    def test_narrow_defendant_lead_stays_claimant(self, classifier):
        assert classifier.decide(2, 3).role == CaseRole.CLAIMANT

    def test_lead_equal_to_margin_stays_claimant(self, classifier):
        assert classifier.decide(0, 2).role == CaseRole.CLAIMANT

    def test_no_signal_is_claimant(self, classifier):
        result = classifier.decide(0, 0)
        assert result.role == CaseRole.CLAIMANT
        assert not result.assumed

    def test_custom_margin(self):
        classifier = CaseRoleClassifier(settings=Settings(role_margin=0))
        assert classifier.decide(2, 3).role == CaseRole.DEFENDANT


class TestClassification:
    """Lexicon scoring"""

    def test_defence_documents(self, classifier):
        material = material_with(
            "Defence and Counterclaim",
            "We deny the allegations. Causation disputed. Not admitted. This claim is an abuse of process.",
        )
        result = classifier.classify(material)
        assert result.role == CaseRole.DEFENDANT
        assert result.defendant_score > result.claimant_score + 2
        assert "we deny" in result.defendant_hits

    def test_claimant_documents(self, classifier):
        material = material_with(
            "Particulars of Claim",
            "The claimant suffered an injury caused by negligent treatment and claims damages.",
        )
        result = classifier.classify(material)
        assert result.role == CaseRole.CLAIMANT
        assert result.claimant_score > 0

    def test_inflected_wording_scores_for_claimant(self, classifier):
        material = material_with(
            "Claim bundle",
            "The expert reports establish negligence and the claimants claimed compensation.",
        )
        result = classifier.classify(material)
        assert "negligence" in result.claimant_hits
        assert "compensation" in result.claimant_hits
        assert result.role == CaseRole.CLAIMANT

    def test_extracted_party_terms_score_for_claimant(self, classifier):
        material = material_with("Scan 0041.pdf", extracted={"parties": {"claimant": "Ms A"}, "summary": "loss of earnings"})
        result = classifier.classify(material)
        assert result.claimant_score >= 3

    def test_denial_blocks_breach_assertion(self, classifier):
        material = material_with("Scan 0042.pdf", extracted={"summary": "Breach is denied; the trust denies negligence"})
        result = classifier.classify(material)
        assert not any("breach_assertion" in h for h in result.claimant_hits)

    def test_explicit_role_wins(self, classifier):
        material = material_with("Particulars of Claim", role=CaseRole.DEFENDANT)
        assert classifier.classify(material).role == CaseRole.DEFENDANT


class TestSoftFailure:
    """Failures never propagate"""

    def test_classifier_error_assumes_claimant(self, monkeypatch):
        def boom(self, material):
            raise ValueError("lexicon exploded")

        monkeypatch.setattr(role_detection.CaseRoleClassifier, "classify", boom)
        result = classify_case_role(material_with("Letter"))
        assert result.role == CaseRole.CLAIMANT
        assert result.assumed
        assert result.failed
        assert "lexicon exploded" in result.error

    def test_assumed_claimant_factory(self):
        result = RoleDetectionResult.assumed_claimant("no data")
        assert result.assumed and result.failed and result.role == CaseRole.CLAIMANT

    @pytest.mark.asyncio
    async def test_unreadable_case_assumes_claimant(self):
        result = await detect_case_role(InMemoryCaseStore(), "missing-case")
        assert result.role == CaseRole.CLAIMANT
        assert result.assumed
        assert "Case not found" in result.error

    @pytest.mark.asyncio
    async def test_reads_from_store(self):
        material = material_with("Defence", "We deny liability. Not admitted. Causation disputed. Not liable.")
        result = await detect_case_role(InMemoryCaseStore({"c1": material}), "c1")
        assert result.role == CaseRole.DEFENDANT
        assert not result.assumed
