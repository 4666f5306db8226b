# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Exception types raised across the grading pipeline.

Errors raised while processing a single assignment are caught by the batch
orchestrator and recorded as a FAILED outcome; errors raised by a whole stage
(listing the bucket, scanning a table) propagate to the caller.
"""

from typing import Optional


class AithenticError(Exception):
    """Base class for all pipeline errors"""


class LoadError(AithenticError):
    """An assignment text file could not be read or its id is not numeric"""


class InvocationError(AithenticError):
    """
    The grading endpoint could not be invoked successfully.

    Raised after the retry budget is exhausted, or immediately for a
    non-retryable transport or parse failure.
    """

    def __init__(
        self,
        message: str,
        attempts: int = 1,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause
        self.status_code = status_code


class UnrecognizedResponseFormat(AithenticError):
    """The endpoint response matches neither the canonical nor the legacy shape"""

    SNIPPET_LENGTH = 200

    def __init__(self, message: str, raw_body: str = ""):
        self.snippet = (raw_body or "")[: self.SNIPPET_LENGTH]
        super().__init__(f"{message}: {self.snippet!r}" if self.snippet else message)


class MissingFieldError(AithenticError):
    """A grading result lacks one of the required top-level fields"""

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}")
        self.field_name = field_name


class PersistenceError(AithenticError):
    """A write to the result store failed"""


class FetchError(AithenticError):
    """Assignments could not be listed or downloaded from S3"""


class ConversionError(AithenticError):
    """A PDF could not be converted to text"""


class TerminationError(AithenticError):
    """The compute instance could not be described or terminated"""
