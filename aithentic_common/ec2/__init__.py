# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Self-termination of the EC2 instance running the pipeline.
"""

import logging
import os
from typing import Optional

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from aithentic_common.exceptions import TerminationError
from aithentic_common.models import TerminationResult

logger = logging.getLogger(__name__)

METADATA_URL = "http://169.254.169.254/latest"
TOKEN_TTL_SECONDS = "21600"
FINAL_STATES = ("terminated", "terminating")


def get_instance_id_from_metadata(
    session: Optional[requests.Session] = None, timeout: float = 2
) -> Optional[str]:
    """
    Read the instance id from the instance metadata service (IMDSv2).

    Returns:
        The instance id, or None when the metadata service is unreachable
    """
    session = session or requests.Session()
    try:
        token_response = session.put(
            f"{METADATA_URL}/api/token",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": TOKEN_TTL_SECONDS},
            timeout=timeout,
        )
        token_response.raise_for_status()
        response = session.get(
            f"{METADATA_URL}/meta-data/instance-id",
            headers={"X-aws-ec2-metadata-token": token_response.text},
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Could not read instance id from metadata service: {e}")
        return None

    instance_id = response.text.strip()
    logger.info(f"Instance ID is: {instance_id}")
    return instance_id or None


class InstanceTerminator:
    """Terminate the current (or a given) EC2 instance."""

    def __init__(
        self,
        instance_id: Optional[str] = None,
        region: Optional[str] = None,
        ec2_client=None,
        metadata_session: Optional[requests.Session] = None,
    ):
        self.instance_id = instance_id or os.environ.get("INSTANCE_ID")
        self.region = region or os.environ.get("AWS_REGION", "us-east-1")
        self._client = ec2_client
        self.metadata_session = metadata_session

    @property
    def client(self):
        """Lazy-loaded EC2 client."""
        if self._client is None:
            self._client = boto3.client("ec2", region_name=self.region)
        return self._client

    def resolve_instance_id(self) -> Optional[str]:
        if not self.instance_id:
            self.instance_id = get_instance_id_from_metadata(self.metadata_session)
        return self.instance_id

    def terminate(self) -> TerminationResult:
        """
        Terminate the instance unless it is already terminated/terminating.

        Returns:
            TerminationResult; terminated is False when the instance id cannot
            be determined or the instance does not exist

        Raises:
            TerminationError: If describe or terminate fails
        """
        instance_id = self.resolve_instance_id()
        if not instance_id:
            logger.warning(
                "Cannot determine EC2 instance ID. Skipping termination. "
                "Set INSTANCE_ID to terminate a specific instance."
            )
            return TerminationResult(instance_id=None, terminated=False)

        logger.info(f"Verifying status of instance {instance_id}")
        try:
            described = self.client.describe_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise TerminationError(f"Error describing EC2 instance {instance_id}: {e}") from e

        reservations = described.get("Reservations") or []
        instances = reservations[0].get("Instances", []) if reservations else []
        if not instances:
            logger.error(f"Instance {instance_id} not found")
            return TerminationResult(instance_id=instance_id, terminated=False)

        current_state = instances[0]["State"]["Name"]
        logger.info(f"Current instance state: {current_state}")
        if current_state in FINAL_STATES:
            logger.info("Instance is already terminated or terminating")
            return TerminationResult(
                instance_id=instance_id,
                terminated=True,
                previous_state=current_state,
                current_state=current_state,
            )

        logger.info(f"Sending termination command to {instance_id}...")
        try:
            response = self.client.terminate_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise TerminationError(f"Error terminating EC2 instance {instance_id}: {e}") from e

        change = response["TerminatingInstances"][0]
        result = TerminationResult(
            instance_id=change["InstanceId"],
            terminated=True,
            previous_state=change["PreviousState"]["Name"],
            current_state=change["CurrentState"]["Name"],
        )
        logger.info(
            f"Termination initiated for {result.instance_id}: "
            f"{result.previous_state} -> {result.current_state}"
        )
        return result
