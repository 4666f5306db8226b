# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Pipeline configuration.

Values are resolved in three layers, later layers winning: built-in
defaults, an optional YAML file, and environment variables.
"""

import logging
import os
from copy import deepcopy
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from aithentic_common.utils import str_to_bool

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    region: str = "us-east-1"

    # S3 fetch and conversion
    bucket_name: Optional[str] = None
    assignments_prefix: str = "assignments/"
    local_assignments_dir: str = "./assignments"
    local_converted_dir: str = "./converted"

    # Result store
    results_table: str = "assignment_analysis_data"
    summary_table: str = "analysis_data"
    home_data_table: str = "home_data"

    # Grading endpoint
    transport: str = "sagemaker"
    sagemaker_endpoint_name: Optional[str] = "aithentic-kmeans-endpoint"
    endpoint_url: Optional[str] = None
    timeout_seconds: float = 60
    max_attempts: int = 3
    backoff_seconds: float = 1
    accept_legacy_format: bool = True
    include_prompt: bool = True

    # Batch
    validate_results: bool = True
    validation_mode: str = "presence"
    sanitize_text: bool = True
    max_workers: int = 1

    # Self-termination
    auto_terminate: bool = False
    instance_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Environment variable -> (field, converter)
ENV_VARS = {
    # Later entries win, so AWS_REGION takes precedence over AWS_DEFAULT_REGION
    "AWS_DEFAULT_REGION": ("region", str),
    "AWS_REGION": ("region", str),
    "ASSIGNMENTS_BUCKET": ("bucket_name", str),
    "S3_BUCKET": ("bucket_name", str),
    "ASSIGNMENTS_PREFIX": ("assignments_prefix", str),
    "LOCAL_ASSIGNMENTS_DIR": ("local_assignments_dir", str),
    "LOCAL_CONVERTED_DIR": ("local_converted_dir", str),
    "RESULTS_TABLE": ("results_table", str),
    "SUMMARY_TABLE": ("summary_table", str),
    "HOME_DATA_TABLE": ("home_data_table", str),
    "GRADING_TRANSPORT": ("transport", str),
    "SAGEMAKER_ENDPOINT_NAME": ("sagemaker_endpoint_name", str),
    "GRADING_ENDPOINT_URL": ("endpoint_url", str),
    "GRADING_TIMEOUT_SECONDS": ("timeout_seconds", float),
    "GRADING_MAX_ATTEMPTS": ("max_attempts", int),
    "GRADING_BACKOFF_SECONDS": ("backoff_seconds", float),
    "ACCEPT_LEGACY_FORMAT": ("accept_legacy_format", str_to_bool),
    "VALIDATE_RESULTS": ("validate_results", str_to_bool),
    "VALIDATION_MODE": ("validation_mode", str),
    "SANITIZE_TEXT": ("sanitize_text", str_to_bool),
    "MAX_WORKERS": ("max_workers", int),
    "TERMINATE_ON_COMPLETE": ("auto_terminate", str_to_bool),
    "INSTANCE_ID": ("instance_id", str),
}


def deep_merge(default: Dict[str, Any], custom: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two dictionaries, with custom values taking precedence

    Args:
        default: The default configuration dictionary
        custom: The custom configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = deepcopy(default)

    for key, value in custom.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration values from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is invalid YAML
        ValueError: If the top level is not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return data


def _from_environment(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_name, (field_name, convert) in ENV_VARS.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            values[field_name] = convert(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value {raw!r} for {env_name}")
    return values


def get_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PipelineConfig:
    """
    Resolve the pipeline configuration.

    Args:
        config_path: Optional YAML file overriding the defaults
        environ: Environment mapping, defaults to os.environ

    Returns:
        The merged PipelineConfig
    """
    environ = os.environ if environ is None else environ
    merged = PipelineConfig().to_dict()

    if config_path:
        file_values = load_yaml_config(config_path)
        known = {f.name for f in fields(PipelineConfig)}
        unknown = set(file_values) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
        merged = deep_merge(merged, {k: v for k, v in file_values.items() if k in known})

    merged = deep_merge(merged, _from_environment(environ))
    logger.debug(f"Resolved configuration: {merged}")
    return PipelineConfig(**merged)
