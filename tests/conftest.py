# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Pytest configuration file for the Aithentic package tests.
"""

import os

import pytest

# Keep boto3 from resolving real credentials or regions during unit tests
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")


@pytest.fixture
def grading_result():
    """A decoded grading result as returned by the endpoint."""
    return {
        "analyticsId": 3,
        "assignmentId": 7,
        "gradeReceived": 85,
        "aiGeneratedAnalytics": {
            "isAIUsed": True,
            "percentageOfAIUsed": 20,
            "highlightedAreaOfAIUse": ["introduction"],
        },
        "plagarismAnalytics": {
            "isPlagarised": False,
            "plagarisedPercentage": 0,
            "plagarisedFrom": [],
        },
        "gradeReasoning": "Clear structure and accurate analysis.",
        "remarks": "Expand the conclusion.",
    }
