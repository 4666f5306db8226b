# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Conversion between DynamoDB typed-attribute values and plain Python values.

Unlike boto3's TypeSerializer/TypeDeserializer this codec is lenient in both
directions: decoding leaves unrecognized values untouched, encoding falls back
to a string attribute, and numbers decode to int/float instead of Decimal.
Model output is written as-is, so neither direction may raise.
"""

import logging
import math
from decimal import Decimal
from typing import Any, Dict

logger = logging.getLogger(__name__)

TYPE_KEYS = ("S", "N", "BOOL", "M", "L")


def _parse_number(value: Any) -> Any:
    """Parse an N attribute string into int when integral, float otherwise."""
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        logger.warning(f"Could not parse numeric attribute {value!r}, keeping raw value")
        return value
    if math.isfinite(number) and number.is_integer() and "e" not in text.lower():
        return int(number)
    return number


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_typed_value(value: Any) -> bool:
    """True when value is a single-discriminator wrapper such as {"S": "x"}."""
    return isinstance(value, dict) and len(value) == 1 and next(iter(value)) in TYPE_KEYS


def decode(value: Any) -> Any:
    """
    Convert a typed-attribute value into a plain value.

    A typed wrapper ({"S": ..}, {"N": ..}, {"BOOL": ..}, {"M": ..}, {"L": ..})
    is unwrapped recursively. Any other mapping is treated as an attribute map
    and decoded per key. Anything else is returned unchanged.
    """
    if is_typed_value(value):
        type_key, inner = next(iter(value.items()))
        if type_key == "S":
            return inner
        if type_key == "N":
            return _parse_number(inner)
        if type_key == "BOOL":
            return inner
        if type_key == "M":
            return decode_item(inner) if isinstance(inner, dict) else inner
        if type_key == "L":
            return [decode(v) for v in inner] if isinstance(inner, list) else inner
    if isinstance(value, dict):
        return decode_item(value)
    return value


def decode_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Decode a whole attribute map (a DynamoDB item)."""
    if item is None:
        return None
    return {key: decode(val) for key, val in item.items()}


def encode(value: Any) -> Dict[str, Any]:
    """
    Wrap a plain value with its typed-attribute discriminator.

    Values of an unrecognized kind (None included) are coerced to a string
    attribute.
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return {"BOOL": value}
    if isinstance(value, str):
        return {"S": value}
    if isinstance(value, (int, float, Decimal)):
        return {"N": _format_number(value)}
    if isinstance(value, (list, tuple)):
        return {"L": [encode(v) for v in value]}
    if isinstance(value, dict):
        return {"M": encode_item(value)}
    return {"S": str(value)}


def encode_item(data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Encode a plain dictionary into a DynamoDB attribute map."""
    if data is None:
        return None
    return {str(key): encode(val) for key, val in data.items()}
