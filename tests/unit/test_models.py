# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the models module.
"""

import pytest
from aithentic_common.models import (
    BatchItemOutcome,
    BatchItemStatus,
    GradingRequest,
    GradingResult,
)


@pytest.mark.unit
class TestGradingRequest:
    def test_to_payload(self):
        request = GradingRequest(document_text="essay", document_id="7", analytics_batch_id=3)
        assert request.to_payload() == {
            "assignmentText": "essay",
            "assignmentId": "7",
            "analyticsId": 3,
        }
        assert request.to_payload("grade this")["prompt"] == "grade this"

    def test_rejects_non_numeric_id(self):
        with pytest.raises(ValueError):
            GradingRequest(document_text="essay", document_id="abc", analytics_batch_id=1)


@pytest.mark.unit
class TestGradingResult:
    def test_round_trip(self, grading_result):
        result = GradingResult.from_dict(grading_result)
        assert result.grade_received == 85
        assert result.ai_generated_analytics.is_ai_used is True
        assert result.to_dict() == grading_result

    def test_empty_data(self):
        with pytest.raises(ValueError):
            GradingResult.from_dict({})


@pytest.mark.unit
class TestBatchItemOutcome:
    def test_to_dict(self):
        assert BatchItemOutcome.success("7").to_dict() == {
            "assignmentId": "7",
            "status": "SUCCESS",
        }
        failed = BatchItemOutcome.failed("8", "Missing required field: remarks")
        assert failed.status == BatchItemStatus.FAILED
        assert failed.to_dict()["error"] == "Missing required field: remarks"
