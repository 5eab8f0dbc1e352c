"""Fluent Bit log shipping deployment."""

from .deploy import (
    LoggingDeployError,
    deploy_fluent_bit,
    deployment_summary,
    render_values,
)

__all__ = [
    "LoggingDeployError",
    "deploy_fluent_bit",
    "deployment_summary",
    "render_values",
]
