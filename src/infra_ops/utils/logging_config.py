"""Logging configuration using AWS Lambda Powertools."""

import sys

from aws_lambda_powertools import Logger

from ..models.config import LOG_LEVEL

# Structured JSON logs on stderr; stdout carries only command output (--json report)
logger = Logger(
    service="infra-ops",
    level=LOG_LEVEL,
    stream=sys.stderr,
)


def get_logger():
    """Get the configured logger instance."""
    return logger
