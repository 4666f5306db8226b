#!/usr/bin/env python

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from setuptools import find_packages, setup

# Core dependencies required for all installations
install_requires = [
    "boto3==1.38.36",  # S3, DynamoDB, SageMaker runtime and EC2
    "requests==2.32.4",  # HTTP grading transport and instance metadata
    "PyYAML==6.0.2",  # YAML configuration files
    # Command line interface
    "typer>=0.15.0",
    "loguru>=0.7.0",
    "python-dotenv>=1.1.0,<2.0.0",
]

# Optional dependencies by component
extras_require = {
    # Testing dependencies
    "test": [
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "pytest-xdist>=3.3.1",  # For parallel test execution
    ],
}

setup(
    name="aithentic",
    version="0.1.0",
    packages=find_packages(
        exclude=[
            "tests",
            "tests.*",
            "build",
            "build.*",
        ]
    ),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "aithentic=aithentic_cli.cli.main:app",
        ],
    },
)
