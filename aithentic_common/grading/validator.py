# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Required-field check for grading results before persistence.
"""

import logging
from typing import Any, Dict, Sequence

from aithentic_common.exceptions import MissingFieldError
from aithentic_common.models import REQUIRED_RESULT_FIELDS

logger = logging.getLogger(__name__)

PRESENCE = "presence"
TRUTHY = "truthy"


def _is_present(value: Any) -> bool:
    # 0 and False are legitimate values (a zero grade, no AI use)
    if value is None:
        return False
    if isinstance(value, (str, dict, list, tuple)) and len(value) == 0:
        return False
    return True


class ResultValidator:
    """
    Fail-fast check that every required field of a result is set.

    Modes:
        presence: a field is missing when absent, None, or an empty
            string/map/list. A gradeReceived of 0 is accepted.
        truthy: a field is missing when falsy, so a gradeReceived of 0 is
            rejected. Kept for compatibility with results produced by the
            earlier scripts.
    """

    def __init__(
        self,
        mode: str = PRESENCE,
        required_fields: Sequence[str] = REQUIRED_RESULT_FIELDS,
    ):
        if mode not in (PRESENCE, TRUTHY):
            raise ValueError(f"Invalid validation mode '{mode}', expected '{PRESENCE}' or '{TRUTHY}'")
        self.mode = mode
        self.required_fields = tuple(required_fields)

    def validate(self, result: Dict[str, Any]) -> bool:
        """
        Check the result, reporting only the first missing field.

        Raises:
            MissingFieldError: For the first required field that is missing
        """
        result = result or {}
        for field_name in self.required_fields:
            value = result.get(field_name)
            ok = bool(value) if self.mode == TRUTHY else _is_present(value)
            if not ok:
                logger.warning(f"Grading result failed validation: missing {field_name}")
                raise MissingFieldError(field_name)
        return True


def validate(result: Dict[str, Any], mode: str = PRESENCE) -> bool:
    """Validate a result with a default ResultValidator"""
    return ResultValidator(mode=mode).validate(result)
