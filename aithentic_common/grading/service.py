# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Batch grading of converted assignment text files.

For every assignment the service loads the text, sends it to the grading
endpoint, validates the decoded result and writes it to the result store.
A failing assignment is recorded in the batch report and never stops the
batch.
"""

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from aithentic_common.dynamodb.codec import encode_item
from aithentic_common.dynamodb.service import GradingResultStore
from aithentic_common.exceptions import LoadError
from aithentic_common.grading.invoker import EndpointInvoker
from aithentic_common.grading.validator import ResultValidator
from aithentic_common.models import BatchItemOutcome, BatchItemStatus, GradingRequest
from aithentic_common.sanitizer import sanitize
from aithentic_common.utils import parse_document_id

logger = logging.getLogger(__name__)

# analyticsId used for the first batch when no results exist yet
DEFAULT_ANALYTICS_ID_SEED = 1


class LocalTextDocument:
    """An assignment text file produced by the PDF conversion step."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.name = self.path.name

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"LocalTextDocument({str(self.path)!r})"


def discover_documents(directory: Union[str, Path]) -> List[LocalTextDocument]:
    """
    List the .txt files of the converted directory, sorted by name.

    Raises:
        LoadError: If the directory cannot be listed
    """
    directory = Path(directory)
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        raise LoadError(f"Failed to list converted directory {directory}: {e}") from e
    return [LocalTextDocument(directory / name) for name in names if name.endswith(".txt")]


def resolve_analytics_batch_id(
    store: GradingResultStore, seed: int = DEFAULT_ANALYTICS_ID_SEED
) -> int:
    """
    Pick the analyticsId for a new batch: highest stored id + 1, or seed.
    """
    max_id = store.max_analytics_id()
    if max_id is None:
        logger.info(f"No existing analyticsId found, starting at {seed}")
        return seed
    logger.info(f"Highest analyticsId found: {max_id}")
    return max_id + 1


def build_batch_response(
    outcomes: List[BatchItemOutcome], documents_found: Optional[int] = None
) -> Dict[str, Any]:
    """Handler-style report: 400 when nothing was found, 200 with outcomes otherwise."""
    if documents_found == 0:
        return {
            "statusCode": 400,
            "body": json.dumps({"message": "No converted files found."}),
        }
    return {
        "statusCode": 200,
        "body": json.dumps([o.to_dict() for o in outcomes], indent=2),
    }


class GradingBatchService:
    """Drive invoke, validate and persist for each assignment of a batch."""

    def __init__(
        self,
        invoker: EndpointInvoker,
        store: GradingResultStore,
        validator: Optional[ResultValidator] = None,
        sanitize_text: bool = True,
        wrap_text: bool = True,
        max_workers: int = 1,
    ):
        """
        Initialize the batch service.

        Args:
            invoker: Grading endpoint invoker
            store: Result store used to persist each result
            validator: Result validator, None skips validation
            sanitize_text: Clean the text to a single line before sending
            wrap_text: Surround the text with start/end markers
            max_workers: Assignments processed concurrently (1 = sequential)
        """
        self.invoker = invoker
        self.store = store
        self.validator = validator
        self.sanitize_text = sanitize_text
        self.wrap_text = wrap_text
        self.max_workers = max(1, max_workers)

    def run_batch(self, documents: Iterable, analytics_batch_id: int) -> List[BatchItemOutcome]:
        """
        Grade every document and collect one outcome per attempted document.

        Documents whose name does not yield a numeric id are skipped and do
        not appear in the report.

        Args:
            documents: Objects with a name attribute and a read_text() method
            analytics_batch_id: analyticsId sent with every request

        Returns:
            Outcomes in document order
        """
        documents = list(documents)
        logger.info(f"Starting batch assignment analysis of {len(documents)} files")

        if self.max_workers == 1:
            outcomes = [self._process_document(d, analytics_batch_id) for d in documents]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(
                    executor.map(
                        lambda d: self._process_document(d, analytics_batch_id), documents
                    )
                )

        report = [o for o in outcomes if o is not None]
        failed = sum(1 for o in report if o.status == BatchItemStatus.FAILED)
        logger.info(
            f"Batch processing complete: {len(report) - failed} succeeded, {failed} failed"
        )
        return report

    def run_directory(
        self, converted_dir: Union[str, Path], analytics_batch_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Grade all text files of a directory and return the batch response.

        Raises:
            LoadError: If the directory cannot be listed
            PersistenceError: If the next analyticsId cannot be resolved
        """
        documents = discover_documents(converted_dir)
        if not documents:
            logger.warning(f"No converted files found in {converted_dir}")
            return build_batch_response([], documents_found=0)

        if analytics_batch_id is None:
            analytics_batch_id = resolve_analytics_batch_id(self.store)

        outcomes = self.run_batch(documents, analytics_batch_id)
        response = build_batch_response(outcomes, documents_found=len(documents))
        response["analyticsId"] = analytics_batch_id
        return response

    def _prepare_text(self, text: str) -> str:
        if not self.sanitize_text:
            return text
        return sanitize(text, single_line=True, wrap=self.wrap_text)

    def _load_text(self, document) -> str:
        try:
            text = document.read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Failed to read file {document.name}: {e}") from e
        logger.info(f"Loaded: {document.name}")
        return text

    def _process_document(self, document, analytics_batch_id: int) -> Optional[BatchItemOutcome]:
        document_id = parse_document_id(document.name)
        if document_id is None:
            logger.info(f"Skipping {document.name}: assignment id is not numeric")
            return None

        logger.info(f"--- Processing {document.name} ---")
        try:
            text = self._load_text(document)
            request = GradingRequest(
                document_text=self._prepare_text(text),
                document_id=document_id,
                analytics_batch_id=analytics_batch_id,
            )
            result = self.invoker.invoke(request)
            if self.validator is not None:
                self.validator.validate(result)
        except Exception as e:
            logger.error(f"Error processing {document.name}: {e}")
            return BatchItemOutcome.failed(document_id, str(e))

        try:
            self.store.save_result(encode_item(result))
        except Exception as e:
            logger.error(f"DynamoDB save failed for {document_id}: {e}")
            return BatchItemOutcome.failed(document_id, str(e))

        return BatchItemOutcome.success(document_id)
