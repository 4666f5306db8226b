# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Thin DynamoDB client wrapper used by the result store.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class DynamoDBError(Exception):
    """Custom exception for DynamoDB errors"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class DynamoDBClient:
    """
    Low-level client for put and scan operations on typed-attribute items.

    Items are passed in the DynamoDB wire format ({"name": {"S": "..."}}),
    see aithentic_common.dynamodb.codec for the conversion helpers.
    """

    def __init__(self, region: Optional[str] = None, client=None):
        """
        Initialize the DynamoDB client.

        Args:
            region: AWS region. Falls back to AWS_REGION, then us-east-1.
            client: Optional pre-built boto3 DynamoDB client (used by tests).
        """
        self.region = region or os.environ.get("AWS_REGION", "us-east-1")
        self._client = client

    @property
    def client(self):
        """Lazy-loaded boto3 DynamoDB client."""
        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.region)
        return self._client

    def put_item(self, table_name: str, item: Dict[str, Any]) -> None:
        """
        Upsert a single item by primary key.

        Raises:
            DynamoDBError: If the write fails
        """
        try:
            self.client.put_item(TableName=table_name, Item=item)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            message = e.response.get("Error", {}).get("Message", str(e))
            logger.error(f"DynamoDB put_item on {table_name} failed: {error_code} - {message}")
            raise DynamoDBError(f"{error_code}: {message}", error_code) from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB put_item on {table_name} failed: {e}")
            raise DynamoDBError(str(e)) from e

    def scan_all(self, table_name: str) -> List[Dict[str, Any]]:
        """
        Read every item of a table, following LastEvaluatedKey pagination.

        Raises:
            DynamoDBError: If the scan fails
        """
        items: List[Dict[str, Any]] = []
        scan_kwargs: Dict[str, Any] = {"TableName": table_name}
        try:
            while True:
                response = self.client.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            message = e.response.get("Error", {}).get("Message", str(e))
            logger.error(f"DynamoDB scan on {table_name} failed: {error_code} - {message}")
            raise DynamoDBError(f"{error_code}: {message}", error_code) from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB scan on {table_name} failed: {e}")
            raise DynamoDBError(str(e)) from e

        logger.debug(f"Scanned {len(items)} items from {table_name}")
        return items
