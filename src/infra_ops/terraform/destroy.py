"""Terraform destroy for one environment root module."""

from __future__ import annotations
from pathlib import Path

from ..models.config import TERRAFORM_BIN
from ..utils import CommandError, get_logger, run_command

logger = get_logger()

TFVARS_FILE = "terraform.tfvars"

REMEDIATION_HINTS = [
    "Wait 5 minutes and retry: terraform destroy",
    "Check AWS Console for remaining Load Balancers",
    "Manually delete any k8s-* Load Balancers and retry",
]


class TerraformError(RuntimeError):
    """The environment cannot be handed to Terraform."""


class TerraformDestroyError(TerraformError):
    """terraform destroy exited non-zero."""

    def __init__(self, environment_dir: Path, returncode: int | None):
        self.environment_dir = environment_dir
        self.returncode = returncode
        # Set by destroy_environment to the TeardownReport of the cleanup that preceded it
        self.report = None
        super().__init__(
            f"terraform destroy failed in {environment_dir} (exit status {returncode})"
        )


def check_environment_dir(environment_dir: Path) -> Path:
    """
    Make sure the environment root module exists and carries its tfvars.

    Raises:
        TerraformError: directory or terraform.tfvars missing
    """
    if not environment_dir.is_dir():
        raise TerraformError(f"Environment directory not found: {environment_dir}")
    if not (environment_dir / TFVARS_FILE).is_file():
        raise TerraformError(f"{TFVARS_FILE} not found in {environment_dir}")
    return environment_dir


def terraform_destroy(environment_dir: Path, dry_run: bool = False) -> None:
    """
    Run `terraform destroy -auto-approve` in the environment directory.

    Output is streamed to the operator. In dry-run mode a destroy plan is
    shown instead.

    Raises:
        TerraformDestroyError: terraform exited non-zero or could not start
    """
    check_environment_dir(environment_dir)

    if dry_run:
        args = [TERRAFORM_BIN, "plan", "-destroy", "-input=false"]
        logger.info(f"[DRY-RUN] Would run terraform destroy in {environment_dir}")
    else:
        args = [TERRAFORM_BIN, "destroy", "-auto-approve", "-input=false"]
        logger.info(f"Running terraform destroy in {environment_dir}")

    try:
        run_command(args, cwd=environment_dir, capture=False)
    except CommandError as e:
        logger.error(
            "Terraform destroy failed",
            extra={"environment_dir": str(environment_dir), "error": str(e)},
        )
        raise TerraformDestroyError(environment_dir, e.returncode) from e

    logger.info(f"Terraform {'plan' if dry_run else 'destroy'} completed in {environment_dir}")
