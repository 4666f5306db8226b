# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Grading endpoint invocation with retry and response-format reconciliation.

The invoker is transport-agnostic: a SageMaker runtime endpoint and a plain
HTTPS endpoint are both supported through small transport classes that
report the HTTP status and body of each call. The invoker owns the retry
policy, so SDK-level retries are disabled in the transports.
"""

import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import boto3
import requests
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from aithentic_common import utils
from aithentic_common.dynamodb.codec import decode_item
from aithentic_common.exceptions import InvocationError, UnrecognizedResponseFormat
from aithentic_common.grading.prompt import SYSTEM_PROMPT
from aithentic_common.models import GradingRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60
RETRYABLE_STATUS_CODES = (502,)


class TransportTimeout(Exception):
    """The call did not complete within the configured timeout"""


class TransportError(Exception):
    """The call failed before an HTTP status was received"""


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class RetryPolicy:
    """
    Linear backoff retry policy.

    Attempt n (1-based) that fails with a retryable status or a timeout is
    followed by a sleep of n * base_delay seconds, up to max_attempts calls.
    """

    max_attempts: int = utils.MAX_ATTEMPTS
    base_delay: float = utils.BASE_BACKOFF
    retry_on_status: Tuple[int, ...] = RETRYABLE_STATUS_CODES
    retry_on_timeout: bool = True

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def single_attempt(cls) -> "RetryPolicy":
        return cls(max_attempts=1)

    def delay_for(self, attempt: int) -> float:
        return utils.calculate_backoff(attempt, self.base_delay)


class SageMakerTransport:
    """Invoke a SageMaker real-time endpoint."""

    def __init__(
        self,
        endpoint_name: str,
        region: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client=None,
    ):
        if not endpoint_name:
            raise ValueError("No SageMaker endpoint name specified in configuration or environment")
        self.endpoint_name = endpoint_name
        self.region = region or os.environ.get("AWS_REGION", "us-east-1")
        self.timeout = timeout
        self._client = client

    @property
    def client(self):
        """Lazy-loaded SageMaker runtime client."""
        if self._client is None:
            self._client = boto3.client(
                "sagemaker-runtime",
                region_name=self.region,
                config=Config(
                    read_timeout=self.timeout,
                    connect_timeout=min(self.timeout, 10),
                    retries={"max_attempts": 0},
                ),
            )
        return self._client

    def send(self, payload: Dict[str, Any]) -> TransportResponse:
        try:
            response = self.client.invoke_endpoint(
                EndpointName=self.endpoint_name,
                Body=json.dumps(payload),
                ContentType="application/json",
                Accept="application/json",
            )
            # The body is streamed, so reading it can time out as well
            body = response["Body"].read().decode("utf-8")
        except (ReadTimeoutError, ConnectTimeoutError) as e:
            raise TransportTimeout(str(e)) from e
        except ClientError as e:
            return self._error_response(e)
        except BotoCoreError as e:
            raise TransportError(str(e)) from e
        except UnicodeDecodeError as e:
            raise TransportError(f"Response body is not valid UTF-8: {e}") from e

        status = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 200)
        return TransportResponse(status_code=status, body=body)

    def _error_response(self, error: ClientError) -> TransportResponse:
        """
        Map a ClientError to the status code of the failure.

        A ModelError carries the inference container's own status code
        (e.g. 502 when the container crashed) in OriginalStatusCode.
        """
        response = error.response
        error_info = response.get("Error", {})
        status = response.get("OriginalStatusCode") or error_info.get("OriginalStatusCode")
        if status is None:
            status = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 500)
        message = response.get("OriginalMessage") or error_info.get("Message", str(error))

        logger.error(
            f"SageMaker invocation error: {error_info.get('Code')} (HTTP {status}) - {message}"
        )
        log_stream = response.get("LogStreamArn")
        if log_stream:
            logger.error(f"CloudWatch Logs: {log_stream}")
        return TransportResponse(status_code=int(status), body=str(message))


class HttpTransport:
    """POST the payload to an HTTPS grading endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        if not url:
            raise ValueError("No grading endpoint URL specified in configuration or environment")
        self.url = url
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", "Accept": "application/json"}
        self.headers.update(headers or {})
        self.session = session or requests.Session()

    def send(self, payload: Dict[str, Any]) -> TransportResponse:
        try:
            response = self.session.post(
                self.url, json=payload, headers=self.headers, timeout=self.timeout
            )
        except requests.Timeout as e:
            raise TransportTimeout(str(e)) from e
        except requests.RequestException as e:
            raise TransportError(str(e)) from e
        return TransportResponse(status_code=response.status_code, body=response.text)


class EndpointInvoker:
    """
    Send grading requests and return the decoded grading result.

    Two response shapes are recognized:

    * canonical: a typed-attribute map with a top-level analyticsId
    * legacy: [{"generated_text": "<canonical map as a JSON string>"}]
    """

    def __init__(
        self,
        transport,
        retry_policy: Optional[RetryPolicy] = None,
        accept_legacy_format: bool = True,
        system_prompt: Optional[str] = SYSTEM_PROMPT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the invoker.

        Args:
            transport: Object with a send(payload) -> TransportResponse method
            retry_policy: Retry settings, defaults to 3 attempts with 1s/2s backoff
            accept_legacy_format: Whether the legacy generated_text shape is accepted
            system_prompt: Grading instructions added to the payload, None to omit
            sleep: Sleep function used between attempts
        """
        self.transport = transport
        self.retry_policy = retry_policy or RetryPolicy()
        self.accept_legacy_format = accept_legacy_format
        self.system_prompt = system_prompt
        self._sleep = sleep

    def invoke(self, request: GradingRequest) -> Dict[str, Any]:
        """
        Grade one assignment.

        Returns:
            The decoded grading result

        Raises:
            InvocationError: Retries exhausted, non-retryable status, transport
                failure or malformed JSON
            UnrecognizedResponseFormat: Response matches no known shape
        """
        payload = request.to_payload(self.system_prompt)
        max_attempts = self.retry_policy.max_attempts
        last_error: Optional[Exception] = None
        last_status: Optional[int] = None

        logger.info(
            f"Invoking grading endpoint for assignmentId: {request.document_id} "
            f"with analyticsId: {request.analytics_batch_id}"
        )
        logger.debug(
            f"Assignment text length: {len(request.document_text)} characters, "
            f"payload size: {len(json.dumps(payload))} bytes"
        )

        for attempt in range(1, max_attempts + 1):
            try:
                response = self.transport.send(payload)
            except TransportTimeout as e:
                if not self.retry_policy.retry_on_timeout:
                    raise InvocationError(
                        f"Grading endpoint timed out: {e}", attempts=attempt, cause=e
                    ) from e
                last_error, last_status = e, None
                logger.warning(f"Grading endpoint timed out (attempt {attempt}/{max_attempts})")
            except TransportError as e:
                raise InvocationError(
                    f"Grading endpoint call failed: {e}", attempts=attempt, cause=e
                ) from e
            else:
                if response.ok:
                    if attempt > 1:
                        logger.info(f"Grading endpoint succeeded after {attempt} attempts")
                    return self.parse_response(response.body, attempt)

                last_error = RuntimeError(
                    f"HTTP {response.status_code}: {response.body[:200]}"
                )
                last_status = response.status_code
                if response.status_code not in self.retry_policy.retry_on_status:
                    raise InvocationError(
                        f"Grading endpoint returned non-retryable status {response.status_code}",
                        attempts=attempt,
                        cause=last_error,
                        status_code=response.status_code,
                    )
                logger.warning(
                    f"Grading endpoint returned HTTP {response.status_code} "
                    f"(attempt {attempt}/{max_attempts})"
                )

            if attempt < max_attempts:
                delay = self.retry_policy.delay_for(attempt)
                logger.warning(f"Retrying in {delay:.2f}s...")
                self._sleep(delay)

        logger.error(f"Max attempts ({max_attempts}) exceeded. Last error: {last_error}")
        raise InvocationError(
            f"Grading endpoint failed after {max_attempts} attempts: {last_error}",
            attempts=max_attempts,
            cause=last_error,
            status_code=last_status,
        )

    def parse_response(self, body: str, attempt: int = 1) -> Dict[str, Any]:
        """
        Parse a successful response body into a decoded grading result.

        Raises:
            InvocationError: Body is not valid JSON
            UnrecognizedResponseFormat: Body matches no known shape
        """
        logger.debug(f"Raw grading response: {body[:1000]}")
        try:
            parsed = json.loads(body)
        except (TypeError, json.JSONDecodeError) as e:
            raise InvocationError(
                f"Grading endpoint returned malformed JSON: {e}", attempts=attempt, cause=e
            ) from e

        if self._is_canonical(parsed):
            return decode_item(parsed)

        if self.accept_legacy_format and self._is_legacy(parsed):
            generated_text = parsed[0]["generated_text"]
            try:
                inner = json.loads(utils.extract_json_from_text(generated_text))
            except json.JSONDecodeError:
                raise UnrecognizedResponseFormat(
                    "Legacy response generated_text is not valid JSON", body
                )
            if self._is_canonical(inner):
                return decode_item(inner)
            raise UnrecognizedResponseFormat(
                "Legacy response does not contain a grading result", body
            )

        raise UnrecognizedResponseFormat("Unrecognized grading response format", body)

    @staticmethod
    def _is_canonical(parsed: Any) -> bool:
        return isinstance(parsed, dict) and "analyticsId" in parsed

    @staticmethod
    def _is_legacy(parsed: Any) -> bool:
        return (
            isinstance(parsed, list)
            and len(parsed) > 0
            and isinstance(parsed[0], dict)
            and isinstance(parsed[0].get("generated_text"), str)
        )


def create_transport(
    transport: str,
    endpoint_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    region: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
):
    """
    Build a transport by name.

    Args:
        transport: 'sagemaker' or 'http'
    """
    name = (transport or "sagemaker").lower()
    if name == "sagemaker":
        return SageMakerTransport(endpoint_name, region=region, timeout=timeout)
    if name == "http":
        return HttpTransport(endpoint_url, timeout=timeout)
    raise ValueError(f"Unknown grading transport '{transport}', expected 'sagemaker' or 'http'")
