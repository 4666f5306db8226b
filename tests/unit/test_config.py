# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for pipeline configuration loading.
"""

import pytest
from aithentic_common.config import PipelineConfig, deep_merge, get_config


@pytest.mark.unit
class TestGetConfig:
    """Tests for get_config."""

    def test_defaults(self):
        config = get_config(environ={})
        assert config == PipelineConfig()
        assert config.max_attempts == 3
        assert config.validation_mode == "presence"
        assert config.auto_terminate is False

    def test_yaml_then_environment(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "bucket_name: from-file\nmax_attempts: 5\nunknown_key: 1\n", encoding="utf-8"
        )

        config = get_config(
            config_file,
            environ={"S3_BUCKET": "from-env", "TERMINATE_ON_COMPLETE": "true"},
        )

        assert config.bucket_name == "from-env"
        assert config.max_attempts == 5
        assert config.auto_terminate is True

    def test_aws_region_wins(self):
        config = get_config(
            environ={"AWS_DEFAULT_REGION": "eu-west-1", "AWS_REGION": "ap-south-1"}
        )
        assert config.region == "ap-south-1"

    def test_invalid_number_ignored(self):
        config = get_config(environ={"GRADING_MAX_ATTEMPTS": "many"})
        assert config.max_attempts == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_config(tmp_path / "missing.yaml", environ={})


@pytest.mark.unit
def test_deep_merge():
    merged = deep_merge({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 4}})
    assert merged == {"a": {"b": 1, "c": 4}, "d": 3}


@pytest.mark.unit
def test_only_known_settings_are_accepted(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("converted_prefix: converted/\n", encoding="utf-8")

    config = get_config(config_file, environ={"CONVERTED_PREFIX": "elsewhere/"})

    assert config == PipelineConfig()
    assert not hasattr(config, "converted_prefix")
