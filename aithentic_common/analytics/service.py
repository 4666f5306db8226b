# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Analytics summaries over stored grading results.

A batch summary aggregates every result of one analyticsId. The home data
summary rolls up every batch summary into the single record shown on the
dashboard landing page.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from aithentic_common.dynamodb.service import GradingResultStore

logger = logging.getLogger(__name__)

AI_USAGE_THRESHOLD = 70
PLAGIARISM_THRESHOLD = 50
HOME_DATA_ID = 1


def _round2(value: float) -> float:
    # Halves round up, not to even
    return math.floor(value * 100 + 0.5) / 100


def _number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_analytics_summary(
    results: List[Dict[str, Any]], analytics_id: int, timestamp: Optional[str] = None
) -> Dict[str, Any]:
    """
    Summarize the grading results of one batch.

    Args:
        results: Decoded grading results, already filtered to the batch
        analytics_id: The batch's analyticsId
        timestamp: Override for the summary timestamp

    Returns:
        The summary dictionary
    """
    submission_count = 0
    total_grade = 0
    top_grade = None
    bottom_grade = None
    total_ai = 0
    count_ai_used = 0
    count_ai_over_70 = 0
    total_plagiarism = 0
    count_plagiarised = 0
    ai_above_70 = []
    plagiarism_above_50 = []

    for item in results:
        submission_count += 1

        grade = _number(item.get("gradeReceived"))
        total_grade += grade
        top_grade = grade if top_grade is None else max(top_grade, grade)
        bottom_grade = grade if bottom_grade is None else min(bottom_grade, grade)

        ai_percentage = _number((item.get("aiGeneratedAnalytics") or {}).get("percentageOfAIUsed"))
        total_ai += ai_percentage
        if ai_percentage > 0:
            count_ai_used += 1
        if ai_percentage > AI_USAGE_THRESHOLD:
            count_ai_over_70 += 1
            ai_above_70.append(
                {
                    "assignmentId": item.get("assignmentId"),
                    "aiPercentage": ai_percentage,
                    "grade": grade,
                }
            )

        plagiarism = _number(
            (item.get("plagarismAnalytics") or {}).get("plagarisedPercentage")
        )
        total_plagiarism += plagiarism
        if plagiarism > 0:
            count_plagiarised += 1
        if plagiarism > PLAGIARISM_THRESHOLD:
            plagiarism_above_50.append(
                {
                    "assignmentId": item.get("assignmentId"),
                    "plagiarismPercentage": plagiarism,
                    "grade": grade,
                }
            )

    # AI average is over all submissions, plagiarism average over plagiarised ones
    return {
        "analyticsId": analytics_id,
        "timestamp": timestamp or _now(),
        "submissionCount": submission_count,
        "gradeDistribution": {
            "topGrade": top_grade if top_grade is not None else 0,
            "bottomGrade": bottom_grade if bottom_grade is not None else 0,
            "averageGrade": _round2(total_grade / submission_count) if submission_count else 0,
        },
        "aiGeneratedAnalytics": {
            "averagePercentageOfAIUsed": _round2(total_ai / submission_count)
            if count_ai_used
            else 0,
            "countOfAssignmentsUsedAI": count_ai_used,
            "countOfAssignmentsUsedAIOver70": count_ai_over_70,
        },
        "plagarismAnalytics": {
            "noOfPlagarisedAssignments": count_plagiarised,
            "averagePercentageOfPlagarism": _round2(total_plagiarism / count_plagiarised)
            if count_plagiarised
            else 0,
        },
        "listOfAIGeneratedAssignementsAbove70": ai_above_70,
        "listOfPlagarisedAssignmentsAbove50": plagiarism_above_50,
    }


def generate_home_data_summary(
    summaries: List[Dict[str, Any]], timestamp: Optional[str] = None
) -> Dict[str, Any]:
    """
    Roll up every batch summary into the home data record (id 1).
    """
    analyzed = len(summaries)
    total_submissions = 0
    total_top = 0
    total_bottom = 0
    total_average = 0
    total_ai = 0
    total_ai_used = 0
    total_ai_over_70 = 0
    total_plagiarised = 0
    total_plagiarism = 0
    ai_above_70: List[Any] = []
    plagiarism_above_50: List[Any] = []
    top_grades = []
    bottom_grades = []

    for summary in summaries:
        total_submissions += _number(summary.get("submissionCount"))

        grades = summary.get("gradeDistribution") or {}
        total_top += _number(grades.get("topGrade"))
        total_bottom += _number(grades.get("bottomGrade"))
        total_average += _number(grades.get("averageGrade"))
        top_grades.append(_number(grades.get("topGrade")))
        bottom_grades.append(_number(grades.get("bottomGrade")))

        ai = summary.get("aiGeneratedAnalytics") or {}
        total_ai += _number(ai.get("averagePercentageOfAIUsed"))
        total_ai_used += _number(ai.get("countOfAssignmentsUsedAI"))
        total_ai_over_70 += _number(ai.get("countOfAssignmentsUsedAIOver70"))

        plagiarism = summary.get("plagarismAnalytics") or {}
        total_plagiarised += _number(plagiarism.get("noOfPlagarisedAssignments"))
        total_plagiarism += _number(plagiarism.get("averagePercentageOfPlagarism"))

        ai_above_70.extend(summary.get("listOfAIGeneratedAssignementsAbove70") or [])
        plagiarism_above_50.extend(summary.get("listOfPlagarisedAssignmentsAbove50") or [])

    return {
        "id": HOME_DATA_ID,
        # Every stored summary is an analyzed batch, nothing is pending
        "isAssignmentToBeAnalyzed": False,
        "totalNoAssignments": analyzed,
        "analyzedAssignments": analyzed,
        "averageSubmissionCount": _round2(total_submissions / analyzed) if analyzed else 0,
        "gradeDistribution": {
            "topGrade": max(top_grades) if total_top > 0 else 0,
            "bottomGrade": min(bottom_grades) if total_bottom > 0 else 0,
            "averageGrade": _round2(total_average / analyzed) if analyzed else 0,
        },
        "aiGeneratedAnalytics": {
            "averagePercentageOfAIUsed": _round2(total_ai / analyzed) if analyzed else 0,
            "countOfAssignmentsUsedAI": total_ai_used,
            "countOfAssignmentsUsedAIOver70": total_ai_over_70,
        },
        "plagarismAnalytics": {
            "noOfPlagarisedAssignments": total_plagiarised,
            "averagePercentageOfPlagarism": _round2(total_plagiarism / analyzed)
            if total_plagiarised > 0
            else 0,
        },
        "listOfAIGeneratedAssignementsAbove70": ai_above_70,
        "listOfPlagarisedAssignmentsAbove50": plagiarism_above_50,
        "timestamp": timestamp or _now(),
    }


class AnalyticsService:
    """Build and upload batch and home data summaries."""

    def __init__(self, store: GradingResultStore):
        self.store = store

    def latest_analytics_id(self) -> Optional[int]:
        return self.store.max_analytics_id()

    def summarize_batch(self, analytics_id: int, upload: bool = True) -> Dict[str, Any]:
        """
        Summarize one batch and, optionally, upload the summary.

        Raises:
            PersistenceError: If the scan or the upload fails
        """
        results = self.store.list_results_for_batch(analytics_id)
        logger.info(f"Generating analytics summary for analyticsId {analytics_id} "
                    f"over {len(results)} results")
        summary = generate_analytics_summary(results, analytics_id)
        logger.debug(f"Generated Analytics Summary: {summary}")
        if upload:
            self.store.save_summary(summary)
        return summary

    def update_home_data(self, upload: bool = True) -> Dict[str, Any]:
        """
        Recompute the home data record from every stored batch summary.

        Raises:
            PersistenceError: If the scan or the upload fails
        """
        summaries = self.store.list_summaries()
        home_data = generate_home_data_summary(summaries)
        logger.debug(f"Generated Home Data Summary: {home_data}")
        if upload:
            self.store.save_home_data(home_data)
        return home_data
