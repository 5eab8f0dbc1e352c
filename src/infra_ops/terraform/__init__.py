"""Terraform invocation for environment teardown."""

from .destroy import (
    REMEDIATION_HINTS,
    TerraformDestroyError,
    TerraformError,
    check_environment_dir,
    terraform_destroy,
)

__all__ = [
    "REMEDIATION_HINTS",
    "TerraformDestroyError",
    "TerraformError",
    "check_environment_dir",
    "terraform_destroy",
]
