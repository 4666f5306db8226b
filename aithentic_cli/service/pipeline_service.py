import json
from typing import Any, Dict, Optional

from aithentic_common.analytics import AnalyticsService
from aithentic_common.config import PipelineConfig
from aithentic_common.conversion import PdfTextConverter
from aithentic_common.dynamodb import DynamoDBClient, GradingResultStore
from aithentic_common.ec2 import InstanceTerminator
from aithentic_common.exceptions import ConversionError, TerminationError
from aithentic_common.grading import (
    EndpointInvoker,
    GradingBatchService,
    ResultValidator,
    RetryPolicy,
    create_transport,
)
from aithentic_common.grading.prompt import SYSTEM_PROMPT
from aithentic_common.models import ConversionSummary, TerminationResult
from aithentic_common.s3 import AssignmentFetcher
from loguru import logger


class PipelineService():
    """
    Builds the pipeline components from a PipelineConfig and runs the stages
    in order: fetch + convert, grade, analytics, home data, terminate.
    """

    def __init__(self, config: PipelineConfig, store: Optional[GradingResultStore] = None):
        self.config = config
        self._store = store
        logger.debug(f"config: {json.dumps(config.to_dict(), default=str)}")

    @property
    def store(self) -> GradingResultStore:
        if self._store is None:
            self._store = GradingResultStore(
                DynamoDBClient(region=self.config.region),
                results_table=self.config.results_table,
                summary_table=self.config.summary_table,
                home_data_table=self.config.home_data_table,
            )
        return self._store

    def build_invoker(self) -> EndpointInvoker:
        transport = create_transport(
            self.config.transport,
            endpoint_name=self.config.sagemaker_endpoint_name,
            endpoint_url=self.config.endpoint_url,
            region=self.config.region,
            timeout=self.config.timeout_seconds,
        )
        return EndpointInvoker(
            transport,
            retry_policy=RetryPolicy(
                max_attempts=self.config.max_attempts,
                base_delay=self.config.backoff_seconds,
            ),
            accept_legacy_format=self.config.accept_legacy_format,
            system_prompt=SYSTEM_PROMPT if self.config.include_prompt else None,
        )

    def build_batch_service(self, invoker: Optional[EndpointInvoker] = None) -> GradingBatchService:
        validator = (
            ResultValidator(mode=self.config.validation_mode)
            if self.config.validate_results
            else None
        )
        return GradingBatchService(
            invoker or self.build_invoker(),
            self.store,
            validator=validator,
            sanitize_text=self.config.sanitize_text,
            max_workers=self.config.max_workers,
        )

    def fetch_and_convert(self, fetcher: Optional[AssignmentFetcher] = None,
                          converter: Optional[PdfTextConverter] = None) -> ConversionSummary:
        logger.info("=== Fetching assignments from S3 ===")
        fetcher = fetcher or AssignmentFetcher(
            bucket=self.config.bucket_name,
            prefix=self.config.assignments_prefix,
            local_dir=self.config.local_assignments_dir,
            region=self.config.region,
        )
        converter = converter or PdfTextConverter(self.config.local_converted_dir)

        if not converter.is_available():
            raise ConversionError(f"{converter.command} is not installed")
        fetcher.verify_bucket_access()
        documents = fetcher.download_all()
        logger.info(f"Found {len(documents)} PDF files to process")

        logger.info("=== Converting PDFs to text ===")
        return converter.convert_all(documents)

    def grade(self, analytics_id: Optional[int] = None,
              batch_service: Optional[GradingBatchService] = None) -> Dict[str, Any]:
        logger.info("=== Grading converted assignments ===")
        batch_service = batch_service or self.build_batch_service()
        response = batch_service.run_directory(self.config.local_converted_dir, analytics_id)
        logger.info(f"Grading finished with status {response['statusCode']}")
        return response

    def summarize(self, analytics_id: Optional[int] = None) -> Dict[str, Any]:
        analytics = AnalyticsService(self.store)
        if analytics_id is None:
            analytics_id = analytics.latest_analytics_id()
        if analytics_id is None:
            raise ValueError("No grading results found, cannot summarize analytics")
        logger.info(f"=== Summarizing analytics batch {analytics_id} ===")
        return analytics.summarize_batch(analytics_id)

    def update_home_data(self) -> Dict[str, Any]:
        logger.info("=== Updating home data ===")
        return AnalyticsService(self.store).update_home_data()

    def terminate(self, terminator: Optional[InstanceTerminator] = None) -> TerminationResult:
        logger.info("=== Terminating EC2 instance ===")
        terminator = terminator or InstanceTerminator(
            instance_id=self.config.instance_id, region=self.config.region
        )
        return terminator.terminate()

    def run(self, terminate: Optional[bool] = None) -> Dict[str, Any]:
        """
        Run every stage in order. A stage failure propagates and stops the
        remaining stages. Termination only runs when enabled, and a failed
        termination is logged without failing the run.
        """
        self.fetch_and_convert()
        response = self.grade()
        if response["statusCode"] != 200:
            raise RuntimeError(json.loads(response["body"]).get("message", "Grading failed"))

        summary = self.summarize(response.get("analyticsId"))
        self.update_home_data()

        should_terminate = self.config.auto_terminate if terminate is None else terminate
        if should_terminate:
            logger.info("EC2 auto-termination is enabled")
            try:
                self.terminate()
            except TerminationError as e:
                # A failed termination after the last stage does not fail the run
                logger.warning(f"Self-termination failed: {e}")
        else:
            logger.info("EC2 auto-termination is disabled; to terminate manually run "
                        "`aws ec2 terminate-instances --instance-ids <instance-id>`")
        return {"grading": response, "summary": summary}
