"""
Tests for Opponent Behaviour Predictions
========================================
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from litigation_intel.behavior import predict_behavior
from litigation_intel.context import DetectorContext
from litigation_intel.schemas import BehaviorPattern, CaseMaterial, Confidence, OpponentActivity


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def days_ago(n):
    return NOW - timedelta(days=n)


def make_ctx(silence=0, average=None, **material_fields):
    material = CaseMaterial(case_id="c1", practice_area="other_litigation", **material_fields)
    opponent = OpponentActivity(silence_days=silence, average_response_days=average)
    return DetectorContext.create(material, now=NOW, opponent=opponent, missing_evidence=[])


def by_pattern(predictions):
    return {p.pattern: p for p in predictions}


ISSUED = [{"date": days_ago(10), "description": "Claim issued"}]


def test_disclosure_request_with_default_average():
    prediction = by_pattern(predict_behavior(make_ctx(timeline=ISSUED)))[BehaviorPattern.DISCLOSURE_REQUEST]
    assert prediction.expected_response_days == 28
    assert prediction.confidence == Confidence.MEDIUM


def test_known_average_raises_confidence():
    prediction = by_pattern(predict_behavior(make_ctx(average=10, timeline=ISSUED)))[
        BehaviorPattern.DISCLOSURE_REQUEST
    ]
    assert prediction.expected_response_days == 17
    assert prediction.confidence == Confidence.HIGH
    assert "10-17 days" in prediction.expected_response


def test_extreme_silence_patterns():
    patterns = [p.pattern for p in predict_behavior(make_ctx(45))]
    assert patterns == [
        BehaviorPattern.FURTHER_INFORMATION,
        BehaviorPattern.SETTLEMENT_APPROACH,
        BehaviorPattern.COSTS_APPLICATION,
        BehaviorPattern.UNLESS_ORDER,
    ]


def test_further_information_letter_on_file():
    ctx = make_ctx(20, letters=[{"id": "l1", "created_at": days_ago(25), "template_id": "further_information"}])
    assert BehaviorPattern.FURTHER_INFORMATION not in by_pattern(predict_behavior(ctx))


def test_expert_challenge_needs_history():
    documents = [{"id": "d1", "name": "Expert Report - Engineering", "created_at": days_ago(30)}]
    assert BehaviorPattern.EXPERT_CHALLENGE not in by_pattern(predict_behavior(make_ctx(documents=documents)))
    predictions = by_pattern(predict_behavior(make_ctx(average=14, documents=documents)))
    assert predictions[BehaviorPattern.EXPERT_CHALLENGE].expected_response_days == 28


def test_contradiction_in_timeline():
    ctx = make_ctx(timeline=[{"date": days_ago(5), "description": "Witness account contradicts the site log"}])
    prediction = by_pattern(predict_behavior(ctx))[BehaviorPattern.CONTRADICTION_PUT]
    assert prediction.confidence == Confidence.HIGH


def test_quiet_case_has_no_predictions():
    assert predict_behavior(make_ctx()) == []
