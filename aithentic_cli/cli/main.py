import logging
import os
import sys
from typing import Optional

import typer
from aithentic_cli.service.pipeline_service import PipelineService
from aithentic_common.config import get_config
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

app = typer.Typer()


def _service(config_path: Optional[str]) -> PipelineService:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return PipelineService(get_config(config_path))


ConfigOption = typer.Option(None, "--config", help="Path to a YAML configuration file")


@app.callback()
def callback():
    """
    Aithentic assignment grading pipeline
    """


@app.command()
def fetch(config: Optional[str] = ConfigOption):
    """
    Download assignment PDFs from S3 and convert them to text
    """
    try:
        summary = _service(config).fetch_and_convert()
        typer.echo(f"Converted {summary.successful_conversions}/{summary.total_files} files")
    except Exception as e:
        logger.exception(f"Error fetching assignments: {str(e)}")
        typer.echo(f"Fetch failed: {str(e)}", err=True)
        sys.exit(1)


@app.command()
def grade(
    config: Optional[str] = ConfigOption,
    analytics_id: Optional[int] = typer.Option(None, "--analytics-id", help="analyticsId for this batch (default: highest stored id + 1)"),
):
    """
    Grade every converted assignment and store the results
    """
    try:
        response = _service(config).grade(analytics_id)
        typer.echo(response["body"])
        if response["statusCode"] != 200:
            sys.exit(1)
    except Exception as e:
        logger.exception(f"Error grading assignments: {str(e)}")
        typer.echo(f"Grading failed: {str(e)}", err=True)
        sys.exit(1)


@app.command()
def analytics(
    config: Optional[str] = ConfigOption,
    analytics_id: Optional[int] = typer.Option(None, "--analytics-id", help="Batch to summarize (default: latest)"),
):
    """
    Summarize one grading batch into the analytics table
    """
    try:
        summary = _service(config).summarize(analytics_id)
        typer.echo(f"Analytics summary uploaded for analyticsId {summary['analyticsId']}")
    except Exception as e:
        logger.exception(f"Error generating analytics summary: {str(e)}")
        typer.echo(f"Analytics failed: {str(e)}", err=True)
        sys.exit(1)


@app.command()
def home_data(config: Optional[str] = ConfigOption):
    """
    Recompute the home data record from all analytics summaries
    """
    try:
        _service(config).update_home_data()
        typer.echo("Home data updated")
    except Exception as e:
        logger.exception(f"Error updating home data: {str(e)}")
        typer.echo(f"Home data update failed: {str(e)}", err=True)
        sys.exit(1)


@app.command()
def terminate(config: Optional[str] = ConfigOption):
    """
    Terminate the EC2 instance running the pipeline
    """
    try:
        result = _service(config).terminate()
        typer.echo(f"Instance {result.instance_id}: terminated={result.terminated}")
    except Exception as e:
        logger.exception(f"Error terminating instance: {str(e)}")
        typer.echo(f"Termination failed: {str(e)}", err=True)
        sys.exit(1)


@app.command()
def run(
    config: Optional[str] = ConfigOption,
    terminate_on_complete: Optional[bool] = typer.Option(None, "--terminate/--no-terminate", help="Override TERMINATE_ON_COMPLETE"),
):
    """
    Run every stage in order, stopping at the first failed stage
    """
    try:
        _service(config).run(terminate=terminate_on_complete)
        typer.echo("Pipeline completed successfully!")
    except Exception as e:
        logger.exception(f"Pipeline stage failed: {str(e)}")
        typer.echo(f"Pipeline failed: {str(e)}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    app()
