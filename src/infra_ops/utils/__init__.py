"""Shared helpers: logging, external commands, polling, AWS tags."""

from .logging_config import get_logger
from .aws_helpers import convert_tags_to_dict, extract_cluster_name, error_code
from .commands import CommandError, run_command
from .polling import wait_until

__all__ = [
    "get_logger",
    "convert_tags_to_dict",
    "extract_cluster_name",
    "error_code",
    "CommandError",
    "run_command",
    "wait_until",
]
