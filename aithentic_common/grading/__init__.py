# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""Grading endpoint invocation, result validation and batch orchestration."""

from aithentic_common.grading.invoker import (
    EndpointInvoker,
    HttpTransport,
    RetryPolicy,
    SageMakerTransport,
    TransportError,
    TransportResponse,
    TransportTimeout,
    create_transport,
)
from aithentic_common.grading.service import (
    GradingBatchService,
    LocalTextDocument,
    build_batch_response,
    discover_documents,
    resolve_analytics_batch_id,
)
from aithentic_common.grading.validator import ResultValidator, validate

__all__ = [
    "EndpointInvoker",
    "GradingBatchService",
    "HttpTransport",
    "LocalTextDocument",
    "ResultValidator",
    "RetryPolicy",
    "SageMakerTransport",
    "TransportError",
    "TransportResponse",
    "TransportTimeout",
    "build_batch_response",
    "create_transport",
    "discover_documents",
    "resolve_analytics_batch_id",
    "validate",
]
