# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the pipeline service that sequences the stages.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from aithentic_cli.service.pipeline_service import PipelineService
from aithentic_common.config import PipelineConfig
from aithentic_common.dynamodb.service import GradingResultStore
from aithentic_common.exceptions import ConversionError, TerminationError
from aithentic_common.grading.invoker import HttpTransport
from aithentic_common.grading.validator import TRUTHY


@pytest.fixture
def store():
    return MagicMock(spec=GradingResultStore)


def _stub_stages(service, status_code=200):
    service.fetch_and_convert = MagicMock()
    service.grade = MagicMock(
        return_value={"statusCode": status_code, "body": json.dumps({"message": "No converted files found."}), "analyticsId": 5}
    )
    service.summarize = MagicMock(return_value={"analyticsId": 5})
    service.update_home_data = MagicMock()
    service.terminate = MagicMock()


@pytest.mark.unit
class TestPipelineService:
    """Tests for PipelineService."""

    def test_run_all_stages_without_termination(self, store):
        service = PipelineService(PipelineConfig(), store=store)
        _stub_stages(service)

        service.run()

        service.fetch_and_convert.assert_called_once()
        service.summarize.assert_called_once_with(5)
        service.update_home_data.assert_called_once()
        service.terminate.assert_not_called()

    def test_run_terminates_when_enabled(self, store):
        service = PipelineService(PipelineConfig(auto_terminate=True), store=store)
        _stub_stages(service)

        service.run()

        service.terminate.assert_called_once()

    def test_failed_termination_does_not_fail_run(self, store):
        service = PipelineService(PipelineConfig(auto_terminate=True), store=store)
        _stub_stages(service)
        service.terminate.side_effect = TerminationError("UnauthorizedOperation")

        result = service.run()

        service.terminate.assert_called_once()
        assert result["summary"] == {"analyticsId": 5}

    def test_failed_grading_stops_pipeline(self, store):
        service = PipelineService(PipelineConfig(auto_terminate=True), store=store)
        _stub_stages(service, status_code=400)

        with pytest.raises(RuntimeError, match="No converted files found."):
            service.run()

        service.summarize.assert_not_called()
        service.terminate.assert_not_called()

    def test_build_batch_service_from_config(self, store):
        config = PipelineConfig(
            transport="http",
            endpoint_url="https://grader.example.com/grade",
            max_attempts=5,
            validation_mode=TRUTHY,
            max_workers=3,
            include_prompt=False,
        )
        service = PipelineService(config, store=store)

        batch_service = service.build_batch_service()

        assert isinstance(batch_service.invoker.transport, HttpTransport)
        assert batch_service.invoker.retry_policy.max_attempts == 5
        assert batch_service.invoker.system_prompt is None
        assert batch_service.validator.mode == TRUTHY
        assert batch_service.max_workers == 3
        assert batch_service.store is store

    def test_validation_can_be_disabled(self, store):
        config = PipelineConfig(transport="http", endpoint_url="https://x", validate_results=False)

        assert PipelineService(config, store=store).build_batch_service().validator is None

    def test_summarize_uses_latest_batch(self, store):
        store.max_analytics_id.return_value = 8
        store.list_results_for_batch.return_value = []

        summary = PipelineService(PipelineConfig(), store=store).summarize()

        assert summary["analyticsId"] == 8
        store.save_summary.assert_called_once()

    def test_summarize_without_results(self, store):
        store.max_analytics_id.return_value = None

        with pytest.raises(ValueError):
            PipelineService(PipelineConfig(), store=store).summarize()

    @patch("aithentic_cli.service.pipeline_service.InstanceTerminator")
    def test_terminate_uses_configured_instance(self, mock_terminator, store):
        service = PipelineService(PipelineConfig(instance_id="i-9", region="eu-west-1"), store=store)

        service.terminate()

        mock_terminator.assert_called_once_with(instance_id="i-9", region="eu-west-1")
        mock_terminator.return_value.terminate.assert_called_once()

    def test_fetch_and_convert(self, store):
        fetcher = MagicMock()
        fetcher.download_all.return_value = ["doc"]
        converter = MagicMock()
        converter.is_available.return_value = True

        PipelineService(PipelineConfig(), store=store).fetch_and_convert(fetcher, converter)

        fetcher.verify_bucket_access.assert_called_once()
        converter.convert_all.assert_called_once_with(["doc"])

    def test_fetch_and_convert_requires_pdftotext(self, store):
        fetcher = MagicMock()
        converter = MagicMock(command="pdftotext")
        converter.is_available.return_value = False

        with pytest.raises(ConversionError):
            PipelineService(PipelineConfig(), store=store).fetch_and_convert(fetcher, converter)

        fetcher.download_all.assert_not_called()
