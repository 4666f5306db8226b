# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the utils module.
"""

import json

import pytest
from aithentic_common.utils import (
    calculate_backoff,
    extract_json_from_text,
    parse_document_id,
    str_to_bool,
)


@pytest.mark.unit
class TestParseDocumentId:
    """Tests for the parse_document_id function."""

    def test_numeric_names(self):
        assert parse_document_id("7.txt") == "7"
        assert parse_document_id("converted/0042.txt") == "0042"

    def test_non_numeric_names(self):
        assert parse_document_id("abc.txt") is None
        assert parse_document_id("7a.txt") is None
        assert parse_document_id(".txt") is None


@pytest.mark.unit
class TestBackoffAndFlags:
    def test_linear_backoff(self):
        assert calculate_backoff(1, 1) == 1
        assert calculate_backoff(2, 1) == 2
        assert calculate_backoff(3, 0.5) == 1.5

    def test_str_to_bool(self):
        assert str_to_bool("true") is True
        assert str_to_bool("YES") is True
        assert str_to_bool("0") is False
        assert str_to_bool(None, default=True) is True


@pytest.mark.unit
class TestExtractJsonFromText:
    """Tests for the extract_json_from_text function."""

    def test_extract_json_code_block(self):
        text = 'Result:\n```json\n{"analyticsId": {"N": "1"}}\n```\n'
        assert json.loads(extract_json_from_text(text)) == {"analyticsId": {"N": "1"}}

    def test_extract_json_embedded_in_prose(self):
        text = 'The grade is {"gradeReceived": {"N": "80"}} as shown.'
        assert extract_json_from_text(text) == '{"gradeReceived": {"N": "80"}}'

    def test_extract_json_no_json(self):
        assert extract_json_from_text("No JSON here") == "No JSON here"
