# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

# Use true lazy loading for all submodules
__version__ = "0.1.0"

# Cache for lazy-loaded submodules
_submodules = {}

_SUBMODULES = [
    "analytics",
    "config",
    "conversion",
    "dynamodb",
    "ec2",
    "exceptions",
    "grading",
    "models",
    "s3",
    "sanitizer",
    "utils",
]


def __getattr__(name):
    """Lazy load submodules only when accessed"""
    if name in _SUBMODULES:
        if name not in _submodules:
            _submodules[name] = __import__(f"aithentic_common.{name}", fromlist=[name])
        return _submodules[name]

    # Handle specific imports from models
    if name in ["GradingRequest", "GradingResult", "BatchItemOutcome", "BatchItemStatus"]:
        if "models" not in _submodules:
            _submodules["models"] = __import__("aithentic_common.models", fromlist=["models"])
        return getattr(_submodules["models"], name)

    if name == "get_config":
        if "config" not in _submodules:
            _submodules["config"] = __import__("aithentic_common.config", fromlist=["config"])
        return _submodules["config"].get_config

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


# Define what should be available when using "from aithentic_common import *"
__all__ = _SUBMODULES + [
    "get_config",
    "GradingRequest",
    "GradingResult",
    "BatchItemOutcome",
    "BatchItemStatus",
]
