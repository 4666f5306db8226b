# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""Batch and home data analytics summaries."""

from aithentic_common.analytics.service import (
    AnalyticsService,
    generate_analytics_summary,
    generate_home_data_summary,
)

__all__ = [
    "AnalyticsService",
    "generate_analytics_summary",
    "generate_home_data_summary",
]
