# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for analytics summaries.
"""

from unittest.mock import MagicMock

import pytest
from aithentic_common.analytics import (
    AnalyticsService,
    generate_analytics_summary,
    generate_home_data_summary,
)
from aithentic_common.dynamodb.service import GradingResultStore


def _result(assignment_id, grade, ai, plagiarism):
    return {
        "analyticsId": 2,
        "assignmentId": assignment_id,
        "gradeReceived": grade,
        "aiGeneratedAnalytics": {"percentageOfAIUsed": ai},
        "plagarismAnalytics": {"plagarisedPercentage": plagiarism},
    }


@pytest.mark.unit
class TestGenerateAnalyticsSummary:
    """Tests for the batch summary arithmetic."""

    def test_summary(self):
        results = [
            _result(1, 90, 0, 0),
            _result(2, 60, 80, 60),
            _result(3, 75, 10, 20),
        ]

        summary = generate_analytics_summary(results, 2, timestamp="2024-01-01T00:00:00")

        assert summary["submissionCount"] == 3
        assert summary["gradeDistribution"] == {
            "topGrade": 90,
            "bottomGrade": 60,
            "averageGrade": 75.0,
        }
        # 90 / 3 submissions, two of which used AI
        assert summary["aiGeneratedAnalytics"] == {
            "averagePercentageOfAIUsed": 30.0,
            "countOfAssignmentsUsedAI": 2,
            "countOfAssignmentsUsedAIOver70": 1,
        }
        # 80 / 2 plagiarised submissions
        assert summary["plagarismAnalytics"] == {
            "noOfPlagarisedAssignments": 2,
            "averagePercentageOfPlagarism": 40.0,
        }
        assert summary["listOfAIGeneratedAssignementsAbove70"] == [
            {"assignmentId": 2, "aiPercentage": 80, "grade": 60}
        ]
        assert summary["listOfPlagarisedAssignmentsAbove50"] == [
            {"assignmentId": 2, "plagiarismPercentage": 60, "grade": 60}
        ]

    def test_empty_batch(self):
        summary = generate_analytics_summary([], 1, timestamp="t")

        assert summary["submissionCount"] == 0
        assert summary["gradeDistribution"]["averageGrade"] == 0
        assert summary["aiGeneratedAnalytics"]["averagePercentageOfAIUsed"] == 0

    def test_averages_rounded_to_two_places(self):
        results = [_result(1, 70, 0, 0), _result(2, 70, 0, 0), _result(3, 71, 0, 0)]
        summary = generate_analytics_summary(results, 1, timestamp="t")
        assert summary["gradeDistribution"]["averageGrade"] == 70.33

    def test_averages_round_half_up(self):
        # 70.125 is exact in binary, so only the rounding rule decides
        results = [_result(1, 70, 0, 0), _result(2, 70.25, 0, 0)]
        summary = generate_analytics_summary(results, 1, timestamp="t")
        assert summary["gradeDistribution"]["averageGrade"] == 70.13


@pytest.mark.unit
class TestGenerateHomeDataSummary:
    """Tests for the home data roll-up."""

    def test_home_data(self):
        first = generate_analytics_summary(
            [_result(1, 90, 80, 60), _result(2, 50, 0, 0)], 1, timestamp="t"
        )
        second = generate_analytics_summary([_result(3, 40, 0, 0)], 2, timestamp="t")

        home = generate_home_data_summary([first, second], timestamp="t")

        assert home["id"] == 1
        assert home["isAssignmentToBeAnalyzed"] is False
        assert home["totalNoAssignments"] == 2
        assert home["averageSubmissionCount"] == 1.5
        assert home["gradeDistribution"] == {
            "topGrade": 90,
            "bottomGrade": 40,
            "averageGrade": 55.0,
        }
        assert home["plagarismAnalytics"]["noOfPlagarisedAssignments"] == 1
        assert len(home["listOfAIGeneratedAssignementsAbove70"]) == 1

    def test_no_summaries(self):
        home = generate_home_data_summary([], timestamp="t")
        assert home["analyzedAssignments"] == 0
        assert home["gradeDistribution"]["topGrade"] == 0


@pytest.mark.unit
class TestAnalyticsService:
    def test_summarize_batch_uploads(self):
        store = MagicMock(spec=GradingResultStore)
        store.list_results_for_batch.return_value = [_result(1, 80, 0, 0)]

        summary = AnalyticsService(store).summarize_batch(2)

        store.list_results_for_batch.assert_called_once_with(2)
        store.save_summary.assert_called_once_with(summary)
        assert summary["analyticsId"] == 2

    def test_update_home_data_without_upload(self):
        store = MagicMock(spec=GradingResultStore)
        store.list_summaries.return_value = []

        AnalyticsService(store).update_home_data(upload=False)

        store.save_home_data.assert_not_called()
