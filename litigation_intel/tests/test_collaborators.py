"""
Tests for Default Collaborators
===============================

Tests:
1. Opponent activity inferred from letters and received documents
2. In-memory store and static contradiction finder
3. YAML checklist provider
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.collaborators import (
    CaseDataStore,
    Collaborators,
    ContradictionFinder,
    EvidenceChecklistProvider,
    InferredOpponentActivity,
    InMemoryCaseStore,
    StaticContradictionFinder,
    YamlChecklistProvider,
)
from litigation_intel.errors import CollaboratorError
from litigation_intel.schemas import CaseMaterial, Contradiction


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def material(letters=(), documents=()):
    return CaseMaterial(
        case_id="c1",
        practice_area="housing_disrepair",
        letters=list(letters),
        documents=list(documents),
    )


class TestInferredOpponentActivity:

    def test_silence_since_last_letter(self):
        activity = InferredOpponentActivity().infer(
            material(letters=[{"id": "l1", "created_at": days_ago(30), "template_id": "letter_of_claim"}]),
            NOW,
        )
        assert activity.silence_days == 30
        assert activity.last_letter_sent_at == days_ago(30)
        assert activity.average_response_days is None

    def test_reply_resets_silence(self):
        activity = InferredOpponentActivity().infer(
            material(
                letters=[{"id": "l1", "created_at": days_ago(30), "template_id": "letter_of_claim"}],
                documents=[{"id": "d1", "name": "Landlord response to letter of claim", "created_at": days_ago(10)}],
            ),
            NOW,
        )
        assert activity.silence_days == 0
        assert activity.last_opponent_reply_at == days_ago(10)
        assert activity.average_response_days == 20

    def test_chasers_tracked(self):
        activity = InferredOpponentActivity().infer(
            material(letters=[
                {"id": "l1", "created_at": days_ago(40), "template_id": "letter_of_claim"},
                {"id": "l2", "created_at": days_ago(20), "template_id": "chaser_1"},
            ]),
            NOW,
        )
        assert activity.last_chase_sent_at == days_ago(20)
        assert activity.silence_days == 20

    def test_no_letters_no_silence(self):
        assert InferredOpponentActivity().infer(material(), NOW).silence_days == 0

    @pytest.mark.asyncio
    async def test_async_snapshot(self):
        source = InferredOpponentActivity()
        activity = await source.snapshot(
            material(letters=[{"id": "l1", "created_at": days_ago(5)}]), NOW
        )
        assert activity.silence_days == 5


class TestStores:

    @pytest.mark.asyncio
    async def test_in_memory_store(self):
        case = material()
        store = InMemoryCaseStore()
        store.add(case)
        assert await store.load_case("c1") is case

    @pytest.mark.asyncio
    async def test_missing_case_raises(self):
        with pytest.raises(CollaboratorError):
            await InMemoryCaseStore().load_case("nope")

    @pytest.mark.asyncio
    async def test_static_contradictions(self):
        finder = StaticContradictionFinder({"b1": [Contradiction(description="Dates differ")]})
        assert len(await finder.find("b1")) == 1
        assert await finder.find("b2") == []

    def test_protocols(self):
        assert isinstance(InMemoryCaseStore(), CaseDataStore)
        assert isinstance(StaticContradictionFinder(), ContradictionFinder)
        assert isinstance(YamlChecklistProvider(), EvidenceChecklistProvider)


class TestChecklistProvider:

    @pytest.mark.asyncio
    async def test_loose_area(self):
        labels = [r.label for r in await YamlChecklistProvider().checklist("disrepair")]
        assert "Tenancy Agreement / AST" in labels

    def test_defaults(self):
        collaborators = Collaborators.defaults()
        assert collaborators.opponent_activity is not None
        assert collaborators.checklist is not None
        assert collaborators.contradictions is None
        assert collaborators.case_store is None
