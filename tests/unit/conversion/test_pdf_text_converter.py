# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for PDF to text conversion.
"""

import json
import subprocess
from unittest.mock import patch

import pytest
from aithentic_common.conversion import SUMMARY_FILENAME, PdfTextConverter, text_file_name
from aithentic_common.models import FetchedDocument


def _fake_pdftotext(args, **kwargs):
    _, pdf_path, txt_path = args
    if pdf_path.endswith("broken.pdf"):
        raise subprocess.CalledProcessError(1, args, stderr=b"Syntax Error")
    with open(txt_path, "w", encoding="utf-8") as f:
        f.write("converted text")
    return subprocess.CompletedProcess(args, 0)


@pytest.mark.unit
class TestPdfTextConverter:
    """Tests for PdfTextConverter."""

    def test_text_file_name(self):
        assert text_file_name("12.pdf") == "12.txt"
        assert text_file_name("13.PDF") == "13.txt"

    @patch("aithentic_common.conversion.subprocess.run", side_effect=_fake_pdftotext)
    def test_convert_all_continues_past_failures(self, mock_run, tmp_path):
        converter = PdfTextConverter(tmp_path / "converted")
        documents = [
            FetchedDocument("1.pdf", str(tmp_path / "1.pdf"), "assignments/1.pdf"),
            FetchedDocument("broken.pdf", str(tmp_path / "broken.pdf"), "assignments/broken.pdf"),
        ]

        summary = converter.convert_all(documents)

        assert summary.total_files == 2
        assert summary.successful_conversions == 1
        assert summary.files[0].text_file == "1.txt"
        assert summary.files[0].character_count == len("converted text")

        notice = (tmp_path / "converted" / "broken.txt").read_text(encoding="utf-8")
        assert notice.startswith("Conversion failed for broken.pdf")

        written = json.loads((tmp_path / "converted" / SUMMARY_FILENAME).read_text(encoding="utf-8"))
        assert written["successfulConversions"] == 1
        assert written["files"][0]["originalFile"] == "1.pdf"

    @patch("aithentic_common.conversion.shutil.which", return_value=None)
    def test_is_available(self, mock_which, tmp_path):
        assert PdfTextConverter(tmp_path).is_available() is False
