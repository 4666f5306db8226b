# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
DynamoDB integration module for the grading pipeline.

Provides the typed-attribute codec, a thin client wrapper, and the result
store used to persist grading results and analytics summaries.
"""

from aithentic_common.dynamodb.client import DynamoDBClient, DynamoDBError
from aithentic_common.dynamodb.codec import decode, decode_item, encode, encode_item
from aithentic_common.dynamodb.service import GradingResultStore

__all__ = [
    "DynamoDBClient",
    "DynamoDBError",
    "GradingResultStore",
    "decode",
    "decode_item",
    "encode",
    "encode_item",
]
