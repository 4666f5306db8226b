# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import json
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Common backoff constants
MAX_ATTEMPTS = 3
BASE_BACKOFF = 1  # seconds


def calculate_backoff(attempt: int, base_backoff: float = BASE_BACKOFF) -> float:
    """
    Calculate linear backoff for a retry attempt

    Args:
        attempt: The attempt that just failed (1-based)
        base_backoff: Delay unit in seconds

    Returns:
        Backoff time in seconds (attempt x base_backoff)
    """
    return max(attempt, 0) * base_backoff


def parse_document_id(name: str) -> Optional[str]:
    """
    Derive an assignment id from a file name.

    The id is the file name without its extension and must parse as a
    base-10 integer, otherwise None is returned.

    >>> parse_document_id("42.txt")
    '42'
    >>> parse_document_id("notes.txt") is None
    True
    """
    stem = name.rsplit("/", 1)[-1]
    if "." in stem:
        stem = stem.rsplit(".", 1)[0]
    stem = stem.strip()
    if not stem:
        return None
    try:
        int(stem, 10)
    except ValueError:
        return None
    return stem


def str_to_bool(value, default: bool = False) -> bool:
    """Interpret common truthy strings ("true", "1", "yes") from env vars"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "y", "on")


def extract_json_from_text(text: str) -> str:
    """
    Extract a JSON string from model output text.

    Handles JSON wrapped in ```json code blocks, in bare ``` code blocks, and
    raw JSON objects embedded in surrounding prose (outermost braces).
    Literal newlines inside the JSON are normalized away as a last resort.

    Args:
        text: The text response from the model

    Returns:
        Extracted JSON string, or original text if no JSON found
    """
    if not text:
        logger.warning("Empty text provided to extract_json_from_text")
        return text

    # Strategy 1: code block, with or without a json tag
    fence = "```json" if "```json" in text else ("```" if "```" in text else None)
    if fence:
        start_idx = text.find(fence) + len(fence)
        end_idx = text.find("```", start_idx)
        if end_idx > start_idx:
            json_str = text[start_idx:end_idx].strip()
            try:
                json.loads(json_str)
                return json_str
            except json.JSONDecodeError:
                logger.debug(
                    "Found code block but content is not valid JSON, trying other strategies"
                )

    # Strategy 2: text that already parses
    stripped = text.strip()
    try:
        json.loads(stripped)
        return stripped
    except json.JSONDecodeError:
        pass

    # Strategy 3: outermost braces, then whitespace normalization
    if "{" in text and "}" in text:
        start_idx = text.find("{")
        end_idx = text.rfind("}")
        if end_idx > start_idx:
            json_str = text[start_idx : end_idx + 1]
            try:
                json.loads(json_str)
                return json_str
            except json.JSONDecodeError:
                pass

            normalized_json = re.sub(r"\s+", " ", json_str)
            try:
                json.loads(normalized_json)
                return normalized_json
            except json.JSONDecodeError:
                logger.debug("All normalization attempts failed")

    logger.warning("Could not extract valid JSON, returning original text")
    return text
