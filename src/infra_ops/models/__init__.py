"""Runtime configuration and step records."""

from .config import ConfigError, LoggingDeployConfig, TeardownConfig
from .step_result import StepResult, TeardownReport

__all__ = [
    "ConfigError",
    "LoggingDeployConfig",
    "TeardownConfig",
    "StepResult",
    "TeardownReport",
]
