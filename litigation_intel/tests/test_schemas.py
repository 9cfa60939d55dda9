"""
Tests for Case Material Schemas
===============================

Tests:
1. Practice-area aliases
2. Timeline ordering and UTC normalisation
3. Snapshot tolerance of missing lists
"""

import pytest
from datetime import date, datetime, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pydantic import ValidationError

from litigation_intel.schemas import (
    AnalysisSnapshot,
    CaseMaterial,
    Deadline,
    DeadlineStatus,
    PracticeArea,
    ensure_utc,
    normalize_practice_area,
)


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


class TestPracticeArea:
    """Loose practice-area labels"""

    @pytest.mark.parametrize("label,expected", [
        ("clinical_negligence", PracticeArea.CLINICAL_NEGLIGENCE),
        ("Clin Neg", PracticeArea.CLINICAL_NEGLIGENCE),
        ("PI", PracticeArea.PERSONAL_INJURY),
        ("RTA claim", PracticeArea.PERSONAL_INJURY),
        ("Housing Disrepair", PracticeArea.HOUSING_DISREPAIR),
        ("disrepair", PracticeArea.HOUSING_DISREPAIR),
        ("Criminal", PracticeArea.CRIMINAL),
        ("Divorce", PracticeArea.FAMILY),
        ("commercial contract", PracticeArea.OTHER_LITIGATION),
        (None, PracticeArea.OTHER_LITIGATION),
    ])
    def test_aliases(self, label, expected):
        assert normalize_practice_area(label) == expected

    def test_material_normalises_alias(self):
        material = CaseMaterial(case_id="c1", practice_area="Clin Neg")
        assert material.practice_area == PracticeArea.CLINICAL_NEGLIGENCE

    def test_material_requires_practice_area(self):
        with pytest.raises(ValidationError):
            CaseMaterial(case_id="c1", practice_area=None)


class TestDates:
    """Timeline ordering and timezone handling"""

    def test_timeline_sorted_by_date(self):
        material = CaseMaterial(
            case_id="c1",
            practice_area="housing_disrepair",
            timeline=[
                {"date": "2025-03-01", "description": "second"},
                {"date": "2025-01-01", "description": "first"},
            ],
        )
        assert [e.description for e in material.timeline] == ["first", "second"]

    def test_plain_dates_become_utc_datetimes(self):
        material = CaseMaterial(
            case_id="c1",
            practice_area="other_litigation",
            timeline=[{"date": date(2025, 1, 1), "description": "event"}],
        )
        assert material.timeline[0].date == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_ensure_utc_on_naive(self):
        assert ensure_utc(datetime(2025, 1, 1)).tzinfo == timezone.utc

    def test_deadline_overdue(self):
        due = Deadline(id="d1", title="Serve defence", due_date=datetime(2025, 5, 1, tzinfo=timezone.utc))
        done = due.model_copy(update={"status": DeadlineStatus.COMPLETED})
        assert due.is_overdue(NOW)
        assert not done.is_overdue(NOW)


class TestSnapshot:

    def test_none_lists_become_empty(self):
        snapshot = AnalysisSnapshot(risk_rating="WEAK", key_issues=None, missing_evidence=None, timeline=None)
        assert snapshot.key_issues == []
        assert snapshot.missing_evidence == []
        assert snapshot.timeline == []
