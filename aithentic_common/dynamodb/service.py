# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Result store for grading results and analytics summaries.
"""

import logging
from typing import Any, Dict, List, Optional

from aithentic_common.dynamodb.client import DynamoDBClient, DynamoDBError
from aithentic_common.dynamodb.codec import decode_item, encode_item
from aithentic_common.exceptions import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_TABLE = "assignment_analysis_data"
DEFAULT_SUMMARY_TABLE = "analysis_data"
DEFAULT_HOME_DATA_TABLE = "home_data"


class GradingResultStore:
    """
    Reads and writes grading results and summaries in DynamoDB.

    Writes accept either a typed-attribute item or a plain dictionary, which
    is encoded first. Reads always return decoded plain dictionaries.
    """

    def __init__(
        self,
        dynamodb_client: Optional[DynamoDBClient] = None,
        results_table: str = DEFAULT_RESULTS_TABLE,
        summary_table: str = DEFAULT_SUMMARY_TABLE,
        home_data_table: str = DEFAULT_HOME_DATA_TABLE,
    ):
        self.client = dynamodb_client or DynamoDBClient()
        self.results_table = results_table
        self.summary_table = summary_table
        self.home_data_table = home_data_table

    def _put(self, table_name: str, item: Dict[str, Any], encoded: bool) -> None:
        wire_item = item if encoded else encode_item(item)
        try:
            self.client.put_item(table_name, wire_item)
        except DynamoDBError as e:
            raise PersistenceError(f"Failed to write item to {table_name}: {e}") from e

    def _scan(self, table_name: str) -> List[Dict[str, Any]]:
        try:
            items = self.client.scan_all(table_name)
        except DynamoDBError as e:
            raise PersistenceError(f"Failed to scan {table_name}: {e}") from e
        return [decode_item(item) for item in items]

    def save_result(self, item: Dict[str, Any], encoded: bool = True) -> None:
        """
        Save one grading result.

        Args:
            item: The result item
            encoded: Whether item is already in typed-attribute form

        Raises:
            PersistenceError: If the write fails
        """
        self._put(self.results_table, item, encoded)
        assignment_id = item.get("assignmentId")
        if encoded and isinstance(assignment_id, dict):
            assignment_id = assignment_id.get("N", assignment_id)
        logger.info(f"Saved to DynamoDB: assignmentId {assignment_id}")

    def list_results(self) -> List[Dict[str, Any]]:
        """Full-table scan of grading results, decoded."""
        return self._scan(self.results_table)

    def list_results_for_batch(self, analytics_id: int) -> List[Dict[str, Any]]:
        return [r for r in self.list_results() if r.get("analyticsId") == analytics_id]

    def max_analytics_id(self) -> Optional[int]:
        """
        Highest numeric analyticsId among stored results.

        Returns:
            The maximum id, or None when the table has no numeric ids
        """
        max_id = None
        for result in self.list_results():
            value = result.get("analyticsId")
            if isinstance(value, bool):
                continue
            try:
                numeric = int(value)
            except (TypeError, ValueError):
                continue
            if max_id is None or numeric > max_id:
                max_id = numeric
        return max_id

    def save_summary(self, summary: Dict[str, Any]) -> None:
        """Upsert an analytics summary keyed by analyticsId."""
        self._put(self.summary_table, summary, encoded=False)
        logger.info(
            f"Analytics summary uploaded successfully with ID: {summary.get('analyticsId')}"
        )

    def list_summaries(self) -> List[Dict[str, Any]]:
        return self._scan(self.summary_table)

    def save_home_data(self, home_data: Dict[str, Any]) -> None:
        """Upsert the home data roll-up (always id 1)."""
        self._put(self.home_data_table, home_data, encoded=False)
        logger.info(f"Home data summary uploaded/updated successfully with ID: {home_data.get('id')}")
