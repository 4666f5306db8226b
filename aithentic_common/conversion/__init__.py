# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
PDF to text conversion using the poppler `pdftotext` command.
"""

import json
import logging
import re
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Union

from aithentic_common.exceptions import ConversionError
from aithentic_common.models import ConversionSummary, ConvertedDocument, FetchedDocument

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "_conversion_summary.json"
DEFAULT_COMMAND = "pdftotext"


def text_file_name(pdf_file_name: str) -> str:
    return re.sub(r"\.pdf$", ".txt", pdf_file_name, flags=re.IGNORECASE)


class PdfTextConverter:
    """Convert downloaded PDFs into one text file each."""

    def __init__(
        self,
        converted_dir: Union[str, Path] = "./converted",
        command: str = DEFAULT_COMMAND,
        timeout: int = 120,
    ):
        self.converted_dir = Path(converted_dir)
        self.command = command
        self.timeout = timeout

    def is_available(self) -> bool:
        available = shutil.which(self.command) is not None
        if not available:
            logger.warning(
                f"{self.command} not found. Install with: sudo apt-get install poppler-utils "
                "(Ubuntu/Debian) or brew install poppler (macOS)"
            )
        return available

    def convert(self, document: FetchedDocument) -> ConvertedDocument:
        """
        Convert a single PDF.

        Raises:
            ConversionError: If the command fails or produces no readable output
        """
        txt_name = text_file_name(document.file_name)
        txt_path = self.converted_dir / txt_name
        logger.info(f"Converting: {document.file_name}...")
        try:
            subprocess.run(
                [self.command, document.local_path, str(txt_path)],
                check=True,
                capture_output=True,
                timeout=self.timeout,
            )
            content = txt_path.read_text(encoding="utf-8", errors="replace")
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise ConversionError(
                f"{self.command} exited with status {e.returncode}: {stderr}"
            ) from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ConversionError(str(e)) from e

        logger.info(f"Converted: {document.file_name} -> {txt_name} ({len(content)} chars)")
        return ConvertedDocument(
            original_file=document.file_name,
            text_file=txt_name,
            text_path=str(txt_path),
            character_count=len(content),
        )

    def _write_failure_notice(self, document: FetchedDocument, error: Exception) -> None:
        txt_path = self.converted_dir / text_file_name(document.file_name)
        notice = f"Conversion failed for {document.file_name}\nError: {error}\n"
        try:
            txt_path.write_text(notice, encoding="utf-8")
            logger.info(f"Wrote failure notice to {txt_path.name}")
        except OSError as e:
            logger.error(f"Failed to write failure notice file: {e}")

    def convert_all(self, documents: Iterable[FetchedDocument]) -> ConversionSummary:
        """
        Convert every document, continuing past individual failures.

        A failed conversion leaves a short failure notice in place of the
        text file. A summary is written to _conversion_summary.json.
        """
        documents = list(documents)
        self.converted_dir.mkdir(parents=True, exist_ok=True)

        converted: List[ConvertedDocument] = []
        for document in documents:
            try:
                converted.append(self.convert(document))
            except ConversionError as e:
                logger.error(f"Error converting {document.file_name}: {e}")
                self._write_failure_notice(document, e)

        logger.info(f"Conversion complete: {len(converted)}/{len(documents)} files processed")
        summary = ConversionSummary(
            timestamp=datetime.now(timezone.utc).isoformat(),
            total_files=len(documents),
            successful_conversions=len(converted),
            files=converted,
        )
        (self.converted_dir / SUMMARY_FILENAME).write_text(
            json.dumps(summary.to_dict(), indent=2), encoding="utf-8"
        )
        return summary
