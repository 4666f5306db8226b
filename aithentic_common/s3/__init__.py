# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Fetching assignment PDFs from S3.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aithentic_common.exceptions import FetchError
from aithentic_common.models import FetchedDocument

logger = logging.getLogger(__name__)


def _status_code(error: ClientError) -> Optional[int]:
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


class AssignmentFetcher:
    """
    Download every PDF under a bucket prefix to a local directory.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "assignments/",
        local_dir: str = "./assignments",
        region: Optional[str] = None,
        s3_client=None,
    ):
        if not bucket:
            raise ValueError("S3 bucket name not provided. Set S3_BUCKET or ASSIGNMENTS_BUCKET.")
        self.bucket = bucket
        self.prefix = prefix or ""
        self.local_dir = Path(local_dir)
        self.region = region or os.environ.get("AWS_REGION", "us-east-1")
        self._client = s3_client

    @property
    def client(self):
        """Lazy-loaded S3 client."""
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def verify_bucket_access(self) -> None:
        """
        Check that the bucket is reachable with the current credentials.

        A 301 means the bucket lives in another region; the region is looked
        up with GetBucketLocation and the client is rebuilt for it.

        Raises:
            FetchError: If the bucket cannot be accessed
        """
        logger.info(f"Using S3 bucket: {self.bucket} (region: {self.region})")
        try:
            self.client.head_bucket(Bucket=self.bucket)
            logger.info("S3 bucket access verified")
            return
        except ClientError as e:
            status = _status_code(e)
            if status == 403:
                logger.error(
                    f"Access denied when accessing bucket {self.bucket} (HTTP 403). "
                    "Check the instance role policies and the bucket policy."
                )
                raise FetchError(f"Access denied to bucket {self.bucket}") from e
            if status != 301:
                raise FetchError(f"Cannot access bucket {self.bucket}: {e}") from e
            logger.warning(
                f"Received HTTP 301 for bucket {self.bucket}, the bucket is in a different region"
            )
        except BotoCoreError as e:
            raise FetchError(f"Cannot access bucket {self.bucket}: {e}") from e

        detected = self.detect_bucket_region()
        if detected == self.region:
            raise FetchError(f"Bucket {self.bucket} redirected but reports region {detected}")
        logger.info(f"Reconfiguring client for region {detected} and retrying...")
        self.region = detected
        self._client = boto3.client("s3", region_name=detected)
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"Cannot access bucket {self.bucket} in {detected}: {e}") from e
        logger.info("S3 bucket access verified with detected region")

    def detect_bucket_region(self) -> str:
        try:
            response = self.client.get_bucket_location(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"Could not detect region of bucket {self.bucket}: {e}") from e
        # LocationConstraint is empty for us-east-1
        region = response.get("LocationConstraint") or "us-east-1"
        logger.info(f"Detected bucket region: {region}")
        return region

    def _list_objects(self, prefix: str) -> List[Dict[str, Any]]:
        paginator = self.client.get_paginator("list_objects_v2")
        kwargs = {"Bucket": self.bucket}
        if prefix:
            kwargs["Prefix"] = prefix
        objects: List[Dict[str, Any]] = []
        for page in paginator.paginate(**kwargs):
            objects.extend(page.get("Contents", []))
        return objects

    def list_pdf_keys(self) -> List[str]:
        """
        List the PDF keys under the prefix.

        When the prefix holds no objects at all the whole bucket is listed
        instead, for buckets that keep assignments at the root.

        Raises:
            FetchError: If listing fails
        """
        try:
            objects = self._list_objects(self.prefix)
            if not objects and self.prefix:
                logger.warning(
                    f"No files found under prefix {self.prefix!r}, listing entire bucket instead"
                )
                objects = self._list_objects("")
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"Error listing assignments in {self.bucket}: {e}") from e

        keys = [
            obj["Key"]
            for obj in objects
            if obj["Key"].lower().endswith(".pdf") and obj["Key"] != self.prefix
        ]
        logger.info(f"Found {len(keys)} PDF files in S3")

        if objects and not keys:
            sample = ", ".join(f"{o['Key']} ({o.get('Size', 0)} bytes)" for o in objects[:10])
            logger.warning(f"Objects were found but none are PDFs. First keys: {sample}")
        return keys

    def download(self, key: str) -> FetchedDocument:
        file_name = os.path.basename(key)
        local_path = self.local_dir / file_name
        logger.info(f"Downloading: {file_name}...")
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            local_path.write_bytes(response["Body"].read())
        except (ClientError, BotoCoreError, OSError) as e:
            raise FetchError(f"Error downloading s3://{self.bucket}/{key}: {e}") from e
        return FetchedDocument(file_name=file_name, local_path=str(local_path), s3_key=key)

    def download_all(self) -> List[FetchedDocument]:
        """
        Download every PDF under the prefix.

        Returns:
            The downloaded documents, in listing order
        """
        self.local_dir.mkdir(parents=True, exist_ok=True)
        return [self.download(key) for key in self.list_pdf_keys()]
